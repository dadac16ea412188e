"""Static compression curve — threshold, knee, ratio. Built from scratch.

All levels are in dBFS. The curve returns the amount of gain reduction
(a positive number of dB) to apply at a given detector level:

    level <= knee_start:            0
    knee_start < level < knee_end:  (1 - 1/ratio) * x^2 / (2 * knee_range)
    level >= knee_end:              (level - threshold) * (1 - 1/ratio)

where x = level - knee_start. The quadratic knee meets the straight line
at knee_end with the same slope, and leaves 0 dB with zero slope.
"""

import numpy as np
from numba import njit

DB_FLOOR = -100.0  # level reported for silence instead of -inf


@njit(cache=True)
def amp_to_db(amp):
    """Linear amplitude to dBFS, floored at DB_FLOOR for silence."""
    if amp > 0.0:
        return 20.0 * np.log10(amp)
    return DB_FLOOR


@njit(cache=True)
def db_to_amp(db):
    return 10.0 ** (db / 20.0)


@njit(cache=True)
def gain_reduction_db(level_db, threshold, knee, ratio):
    """Gain reduction in dB (>= 0) for a detector level in dB."""
    if ratio <= 1.0:
        return 0.0
    knee_start = threshold - knee / 2.0
    knee_end = threshold + knee / 2.0
    if level_db <= knee_start:
        return 0.0
    slope = 1.0 - 1.0 / ratio
    if level_db >= knee_end:
        return (level_db - threshold) * slope
    # Only reachable with knee > 0, so knee_range is never zero here
    knee_range = knee_end - knee_start
    x = level_db - knee_start
    return slope * x * x / (2.0 * knee_range)


def gain_curve(levels_db, threshold, knee, ratio):
    """Evaluate the curve over an array of levels (for transfer plots)."""
    levels_db = np.asarray(levels_db, dtype=np.float64)
    out = np.zeros(levels_db.shape)
    flat_in = levels_db.ravel()
    flat_out = out.ravel()
    for i in range(len(flat_in)):
        flat_out[i] = gain_reduction_db(flat_in[i], threshold, knee, ratio)
    return out


def knee_bounds(threshold, knee):
    """(knee_start, knee_end) in dB."""
    return threshold - knee / 2.0, threshold + knee / 2.0


def curve_zone(level_db, threshold, knee):
    """Which part of the curve a level falls in: "below", "knee" or "above"."""
    knee_start, knee_end = knee_bounds(threshold, knee)
    if level_db <= knee_start:
        return "below"
    if level_db >= knee_end:
        return "above"
    return "knee"
