"""Test the sample-accurate compressor — generates WAV files.

Run: uv run python tests/test_compressor.py

Key test: 1 kHz sine at 0 dBFS through -20 dB / 4:1 comes out around
-15 dBFS once the detector has settled.
"""

import numpy as np
from scipy.io import wavfile
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from compressor.engine.compressor import compress, render_compressor
from compressor.engine.params import default_params
from primitives.envelope import follow_envelope, time_coeff
from primitives.gain_curve import amp_to_db, gain_reduction_db
from shared.audio import SR, AudioBuffer, make_sine

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                          "audio", "test_signals")


def save_wav(filename, audio, sr=SR):
    os.makedirs(OUTPUT_DIR, exist_ok=True)
    path = os.path.join(OUTPUT_DIR, filename)
    wavfile.write(path, sr, (np.clip(audio, -1.0, 1.0) * 32767).astype(np.int16))
    print(f"  Saved {path} ({len(audio)/sr:.2f}s)")


def make_params(**overrides):
    params = default_params()
    params.update(overrides)
    return params


def make_drum_loop(seconds=2.0, seed=3):
    """Decaying noise hits every 250ms over a quiet pad — lots of transients."""
    rng = np.random.default_rng(seed)
    n = int(SR * seconds)
    t = np.arange(n) / SR
    audio = 0.05 * np.sin(2 * np.pi * 110.0 * t)
    hit_len = int(SR * 0.08)
    hit = rng.standard_normal(hit_len) * np.exp(-np.linspace(0, 8, hit_len))
    for offset in range(0, n - hit_len, int(SR * 0.25)):
        audio[offset:offset + hit_len] += 0.8 * hit
    return audio


# ---------------------------------------------------------------------------
# Test 1: ratio 1:1 is an exact pass-through
# ---------------------------------------------------------------------------
def test_identity():
    print("Test 1: ratio=1 leaves audio untouched")
    audio = make_drum_loop()
    buf = AudioBuffer(np.stack([audio, -0.5 * audio]), SR)
    for threshold, knee in [(0.0, 0.0), (-60.0, 0.0), (-30.0, 20.0)]:
        out = compress(buf, make_params(threshold=threshold, knee=knee, ratio=1.0))
        assert np.array_equal(out.data, buf.data)


# ---------------------------------------------------------------------------
# Test 2: never louder than the input, shape preserved, input untouched
# ---------------------------------------------------------------------------
def test_bounded_and_pure():
    print("Test 2: bounded output, same shape, pure")
    audio = make_drum_loop()
    buf = AudioBuffer(np.stack([audio, np.roll(audio, 1000)]), 48000)
    before = buf.data.copy()
    for ratio in [1.0, 2.0, 4.0, 20.0]:
        params = make_params(threshold=-24.0, knee=6.0, ratio=ratio,
                             attack=0.0, release=0.0)
        out = compress(buf, params)
        assert out is not buf
        assert out.data.shape == buf.data.shape
        assert out.sample_rate == buf.sample_rate
        assert np.all(np.abs(out.data) <= np.abs(buf.data) + 1e-15)
        assert np.all(np.isfinite(out.data))
    assert np.array_equal(buf.data, before)


# ---------------------------------------------------------------------------
# Test 3: 1 kHz sine scenario
# ---------------------------------------------------------------------------
def test_sine_scenario():
    print("Test 3: 1 kHz sine, -20 dB, 4:1")
    buf = make_sine(1000.0, seconds=1.0, amp=1.0, sr=SR)
    params = make_params(threshold=-20.0, knee=0.0, ratio=4.0, attack=0.003, release=0.01)
    out = compress(buf, params)
    x = buf.channel(0)
    y = out.channel(0)

    # Every sample follows gain = 10^(-GR(env)/20) with the follower's envelope
    env = follow_envelope(np.abs(x), time_coeff(0.003, SR), time_coeff(0.01, SR))
    gr = np.array([gain_reduction_db(amp_to_db(e), -20.0, 0.0, 4.0) for e in env])
    assert np.allclose(y, x * 10.0 ** (-gr / 20.0))

    # Settled: output peak well under the input, near -20 + 20/4 = -15 dBFS
    settled = y[SR // 2:]
    out_peak_db = 20.0 * np.log10(np.max(np.abs(settled)))
    assert -16.0 < out_peak_db < -11.5

    # Where the envelope is over threshold, reduction is 3/4 of the excess
    env_db = np.array([amp_to_db(e) for e in env[SR // 2:]])
    over = env_db > -20.0
    assert np.allclose(gr[SR // 2:][over], (env_db[over] + 20.0) * 0.75)


def test_sine_slow_release():
    print("Test 4: slow release holds the envelope near the peak")
    buf = make_sine(1000.0, seconds=1.0, amp=1.0, sr=SR)
    out = compress(buf, make_params(threshold=-20.0, ratio=4.0, attack=0.003, release=1.0))
    settled = out.channel(0)[SR // 2:]
    reduction_db = -20.0 * np.log10(np.max(np.abs(settled)))
    assert abs(reduction_db / 20.0 - 0.75) < 0.03


# ---------------------------------------------------------------------------
# Test 5: channels are detected independently
# ---------------------------------------------------------------------------
def test_channels_independent():
    print("Test 5: per-channel detection")
    loud = make_sine(440.0, seconds=0.5, amp=1.0).channel(0)
    quiet = make_sine(440.0, seconds=0.5, amp=0.01).channel(0)
    params = make_params(threshold=-20.0, ratio=8.0)
    out = compress(AudioBuffer(np.stack([loud, quiet]), SR), params)
    # Quiet channel is far below threshold: untouched
    assert np.array_equal(out.channel(1), quiet)
    # Loud channel is reduced once its detector has caught up
    assert np.max(np.abs(out.channel(0)[SR // 10:])) < 0.5
    # Same result as compressing each channel on its own
    alone = compress(AudioBuffer(loud, SR), params)
    assert np.array_equal(alone.channel(0), out.channel(0))


# ---------------------------------------------------------------------------
# Test 6: empty and missing input, ndarray entry point
# ---------------------------------------------------------------------------
def test_empty_and_array_entry():
    print("Test 6: no-op inputs and render_compressor")
    assert compress(None, default_params()) is None
    empty = compress(AudioBuffer(np.zeros((2, 0)), SR), default_params())
    assert empty.length == 0 and empty.n_channels == 2

    stereo = np.column_stack([make_drum_loop(1.0), make_drum_loop(1.0, seed=4)])
    params = make_params(threshold=-18.0, knee=4.0, ratio=3.0)
    out = render_compressor(stereo, params, SR)
    assert out.shape == stereo.shape
    mono = render_compressor(stereo[:, 0], params, SR)
    assert mono.shape == (stereo.shape[0],)
    assert np.allclose(mono, out[:, 0])


# ---------------------------------------------------------------------------
# Listening test: drum loop at increasing ratios
# ---------------------------------------------------------------------------
def test_listen_ratios():
    print("Listening: drum loop through -24 dB at 1:1, 4:1, 20:1")
    audio = make_drum_loop()
    for ratio in [1.0, 4.0, 20.0]:
        params = make_params(threshold=-24.0, knee=6.0, ratio=ratio, attack=0.005, release=0.1)
        out = render_compressor(audio, params, SR)
        save_wav(f"20_compressor_ratio_{ratio:g}.wav", out)


if __name__ == "__main__":
    print(f"Sample rate: {SR} Hz")
    print(f"Output dir: {OUTPUT_DIR}\n")
    test_identity()
    test_bounded_and_pure()
    test_sine_scenario()
    test_sine_slow_release()
    test_channels_independent()
    test_empty_and_array_entry()
    test_listen_ratios()
    print("\nDone! Compare 20_compressor_ratio_* — hits should flatten as the ratio rises.")
