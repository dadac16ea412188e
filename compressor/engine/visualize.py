"""Per-pixel series for drawing the compressor's behaviour.

NOTE: this is an educational model, not what the audible path computes.
The envelope is a peak follower stepped once per pixel column (one
smoothing step per segment peak), and the gain-reduction trace runs its
own smoother with attack/release scaled down 1000x so it reacts
visibly faster than the envelope. Expect the drawn curves to look like
what is heard without matching compress() sample for sample.
"""

import logging

import numpy as np
from numba import njit

from primitives.envelope import MIN_TIME, follow_segment_peaks, segment_peaks, time_coeff
from primitives.gain_curve import amp_to_db, gain_reduction_db
from shared.audio import is_empty

log = logging.getLogger(__name__)

GR_TIME_SCALE = 0.001  # gain-reduction smoother runs 1000x faster


def calculate_envelope(data, sr, attack, release, output_length):
    """Input level envelope, one value per column, clamped to [0, 1]."""
    if output_length <= 0:
        return np.zeros(0)
    peaks = segment_peaks(np.asarray(data, dtype=np.float64), output_length)
    return follow_segment_peaks(peaks, time_coeff(attack, sr), time_coeff(release, sr))


@njit(cache=True)
def _smooth_gain_reduction(envelope, output_length, threshold, knee, ratio,
                           attack_coeff, release_coeff):
    n = len(envelope)
    out = np.zeros(output_length)
    step = (n + output_length - 1) // output_length
    if step == 0:
        step = 1
    gr_smoothed = 0.0
    for i in range(output_length):
        env_value = envelope[min(i * step, n - 1)]
        gr = gain_reduction_db(amp_to_db(env_value), threshold, knee, ratio)
        if gr > gr_smoothed:
            gr_smoothed = gr + (gr_smoothed - gr) * attack_coeff
        else:
            gr_smoothed = gr + (gr_smoothed - gr) * release_coeff
        out[i] = gr_smoothed
    return out


def calculate_gain_reduction(envelope, sr, threshold, knee, ratio,
                             attack, release, output_length):
    """Smoothed gain reduction in dB (>= 0) for each envelope column."""
    if output_length <= 0:
        return np.zeros(0)
    envelope = np.asarray(envelope, dtype=np.float64)
    if ratio <= 1 or len(envelope) == 0:
        return np.zeros(output_length)
    # 1e-5 s floor applies before the 1000x scaling
    gr_attack = max(attack, MIN_TIME) * GR_TIME_SCALE
    gr_release = max(release, MIN_TIME) * GR_TIME_SCALE
    attack_coeff = np.exp(-1.0 / (sr * gr_attack))
    release_coeff = np.exp(-1.0 / (sr * gr_release))
    return _smooth_gain_reduction(envelope, output_length, float(threshold),
                                  float(knee), float(ratio),
                                  attack_coeff, release_coeff)


def sample_visualization(buffer, params, output_length):
    """Envelope and gain-reduction series for a canvas output_length wide.

    Only channel 0 is analysed. Returns (envelope, gain_reduction); both
    are empty when there is nothing to draw.
    """
    if output_length <= 0 or is_empty(buffer):
        log.debug("sample_visualization: nothing to draw")
        return np.zeros(0), np.zeros(0)
    sr = buffer.sample_rate
    envelope = calculate_envelope(buffer.channel(0), sr,
                                  params["attack"], params["release"], output_length)
    gain_reduction = calculate_gain_reduction(envelope, sr,
                                              params["threshold"], params["knee"],
                                              params["ratio"], params["attack"],
                                              params["release"], output_length)
    return envelope, gain_reduction


def waveform_columns(data, width):
    """Min/max sample per pixel column for drawing the waveform trace.

    Columns past the end of the data read as silence.
    """
    data = np.asarray(data, dtype=np.float64)
    n = len(data)
    if width <= 0 or n == 0:
        return np.zeros(0), np.zeros(0)
    step = -(-n // width)
    padded = np.full(step * width, np.nan)
    padded[:n] = data
    cols = padded.reshape(width, step)
    # fmin/fmax skip the NaN padding; all-padding columns stay NaN -> 0
    lo = np.nan_to_num(np.fmin.reduce(cols, axis=1))
    hi = np.nan_to_num(np.fmax.reduce(cols, axis=1))
    return lo, hi
