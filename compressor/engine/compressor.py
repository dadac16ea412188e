"""Sample-accurate feed-forward compressor — the audible path.

Signal flow (per channel, per sample):
    |x| -> Envelope follower -> dB -> Gain curve -> 10^(-GR/20) -> x * gain

Each channel runs its own detector starting from silence. There is no
makeup gain, so output peaks never exceed input peaks.
"""

import logging
import time

import numpy as np
from numba import njit

from primitives.envelope import follow_envelope, time_coeff
from primitives.gain_curve import amp_to_db, gain_reduction_db
from shared.audio import AudioBuffer, is_empty

log = logging.getLogger(__name__)


@njit(cache=True)
def _compress_channel(x, attack_coeff, release_coeff, threshold, knee, ratio):
    env = follow_envelope(np.abs(x), attack_coeff, release_coeff)
    n = len(x)
    out = np.zeros(n)
    for i in range(n):
        gr = gain_reduction_db(amp_to_db(env[i]), threshold, knee, ratio)
        out[i] = x[i] * 10.0 ** (-gr / 20.0)
    return out


def compress(buffer: AudioBuffer, params: dict) -> AudioBuffer:
    """Compress every channel of a buffer. The input is left untouched.

    Args:
        buffer: source audio. None or an empty buffer is a no-op.
        params: params dict (see engine/params.py)

    Returns:
        new AudioBuffer with the same channels, length and sample rate,
        or None when there was no input.
    """
    if buffer is None:
        log.debug("compress: no buffer loaded")
        return None
    if is_empty(buffer):
        log.debug("compress: empty buffer")
        return buffer.empty_like()

    t0 = time.perf_counter()
    sr = buffer.sample_rate
    threshold = float(params["threshold"])
    knee = float(params["knee"])
    ratio = float(params["ratio"])
    attack_coeff = time_coeff(params["attack"], sr)
    release_coeff = time_coeff(params["release"], sr)

    out = buffer.empty_like()
    for ch in range(buffer.n_channels):
        out.data[ch] = _compress_channel(buffer.data[ch], attack_coeff, release_coeff,
                                         threshold, knee, ratio)

    elapsed = time.perf_counter() - t0
    rtf = buffer.duration / elapsed if elapsed > 0 else float('inf')
    log.info("compress %.1fs audio in %.3fs (%d ch, %.0fx RT)",
             buffer.duration, elapsed, buffer.n_channels, rtf)
    return out


def render_compressor(input_audio: np.ndarray, params: dict, sr: int) -> np.ndarray:
    """ndarray entry point: mono (samples,) or (samples, channels) in,
    same shape out."""
    result = compress(AudioBuffer.from_array(input_audio, sr), params)
    return result.to_array()
