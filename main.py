#!/usr/bin/env python3
"""Launch the offline compressor renderer from the project root.

Usage:
    uv run python main.py input.wav output.wav --threshold -20 --ratio 4
    uv run python main.py input.wav output.wav --preset compressor/presets/bus_glue.json
"""

import sys

if __name__ == "__main__":
    from compressor.audio.render import main
    sys.exit(main())
