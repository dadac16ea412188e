"""Post-render pipeline shared by every processing path.

safety_check rejects diverged output; normalize_peak pulls a rendered
buffer back under full scale after a path that adds gain.
"""

import logging

import numpy as np

log = logging.getLogger(__name__)


def safety_check(buffer):
    """Reject non-finite or exploded output.

    Returns (ok, error_message).
    """
    output = buffer.data
    if not np.all(np.isfinite(output)):
        return False, "ERROR: output diverged (non-finite values)"
    peak = np.max(np.abs(output)) if output.size else 0.0
    if peak > 1e6:
        return False, f"ERROR: output exploded (peak={peak:.0e})"
    return True, ""


def peak(buffer):
    """Largest absolute sample across all channels (0 for an empty buffer)."""
    if buffer.data.size == 0:
        return 0.0
    return float(np.max(np.abs(buffer.data)))


def normalize_peak(buffer):
    """Scale a buffer in place so its peak is at most 1.0.

    Buffers already within full scale are left alone, so a second call
    is a no-op.
    """
    max_peak = peak(buffer)
    if max_peak > 1.0:
        # Divide rather than multiply by 1/peak: the loudest sample lands on exactly 1.0
        buffer.data /= max_peak
        log.info("normalized peak %.3f -> 1.0 (%.1f dB)", max_peak, -20.0 * np.log10(max_peak))
