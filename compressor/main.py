#!/usr/bin/env python3
"""Compressor anatomy — render a WAV file through the compressor.

Usage:
    python -m compressor.main input.wav output.wav --threshold -20 --ratio 4
"""

import sys

from compressor.audio.render import main

if __name__ == "__main__":
    sys.exit(main())
