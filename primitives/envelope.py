"""Envelope followers — peak detectors with separate attack and release.

Two flavours:

    sample-accurate:  one update per sample, s' = x + (s - x) * coeff
    segment-peak:     one update per downsampled segment, the input being
                      the peak |x| of that segment, s' = s + (x - s) * (1 - coeff)

coeff = exp(-1 / (sr * t)) puts the response ~63% of the way to a step
after t seconds (sample-accurate mode).
"""

import math

import numpy as np
from numba import njit

MIN_TIME = 1e-5  # seconds; attack/release of 0 are floored to this


def time_coeff(seconds, sr):
    """One-pole coefficient for a time constant in seconds."""
    t = max(float(seconds), MIN_TIME)
    return math.exp(-1.0 / (sr * t))


class EnvelopeFollower:
    """Sample-accurate peak envelope follower.

    Rises toward louder input with the attack coefficient, falls toward
    quieter input with the release coefficient. State starts at 0.
    """

    def __init__(self, attack: float = 0.003, release: float = 0.01, sr: int = 44100):
        self.attack_coeff = time_coeff(attack, sr)
        self.release_coeff = time_coeff(release, sr)
        self.env = 0.0

    def process(self, x: float) -> float:
        x = abs(x)
        coeff = self.attack_coeff if x > self.env else self.release_coeff
        self.env = x + (self.env - x) * coeff
        return self.env

    def reset(self):
        self.env = 0.0


@njit(cache=True)
def follow_envelope(x_abs, attack_coeff, release_coeff):
    """Run the sample-accurate follower over a whole channel of |x|."""
    n = len(x_abs)
    out = np.zeros(n)
    env = 0.0
    for i in range(n):
        x = x_abs[i]
        if x > env:
            env = x + (env - x) * attack_coeff
        else:
            env = x + (env - x) * release_coeff
        out[i] = env
    return out


@njit(cache=True)
def segment_peaks(data, output_length):
    """Peak |x| of each of output_length contiguous segments.

    Segment length is ceil(len(data) / output_length); segments that start
    past the end of the data report 0.
    """
    n = len(data)
    peaks = np.zeros(max(output_length, 0))
    if output_length <= 0 or n == 0:
        return peaks
    step = (n + output_length - 1) // output_length
    for i in range(output_length):
        start = i * step
        end = min(start + step, n)
        peak = 0.0
        for j in range(start, end):
            a = abs(data[j])
            if a > peak:
                peak = a
        peaks[i] = peak
    return peaks


@njit(cache=True)
def follow_segment_peaks(peaks, attack_coeff, release_coeff):
    """One smoothing step per segment peak, clamped to 1.0."""
    n = len(peaks)
    out = np.zeros(n)
    env = 0.0
    for i in range(n):
        peak = peaks[i]
        if peak > env:
            env += (peak - env) * (1.0 - attack_coeff)
        else:
            env += (peak - env) * (1.0 - release_coeff)
        out[i] = min(env, 1.0)
    return out
