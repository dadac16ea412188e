"""Shared audio buffer and WAV I/O.

AudioBuffer is the unit every processing call takes and returns:
channel-major float64 samples plus the sample rate. load_wav / save_wav
convert to and from 16/32-bit or float WAV files.
"""

from dataclasses import dataclass
from math import gcd

import numpy as np
from scipy.io import wavfile

SR = 44100


@dataclass(eq=False)
class AudioBuffer:
    """Multi-channel audio, data shaped (channels, length)."""

    data: np.ndarray
    sample_rate: int = SR

    def __post_init__(self):
        data = np.asarray(self.data, dtype=np.float64)
        if data.ndim == 1:
            data = data[np.newaxis, :]
        if data.ndim != 2:
            raise ValueError(f"audio must be 1-D or 2-D, got {data.ndim}-D")
        if self.sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {self.sample_rate}")
        self.data = data
        self.sample_rate = int(self.sample_rate)

    @property
    def n_channels(self) -> int:
        return self.data.shape[0]

    @property
    def length(self) -> int:
        return self.data.shape[1]

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate

    def channel(self, ch: int) -> np.ndarray:
        return self.data[ch]

    def copy(self) -> "AudioBuffer":
        return AudioBuffer(self.data.copy(), self.sample_rate)

    def empty_like(self) -> "AudioBuffer":
        """Zeroed buffer of the same shape and sample rate."""
        return AudioBuffer(np.zeros_like(self.data), self.sample_rate)

    @classmethod
    def from_array(cls, audio, sr=SR) -> "AudioBuffer":
        """From the (samples,) / (samples, channels) layout used by WAV files."""
        audio = np.asarray(audio, dtype=np.float64)
        if audio.ndim == 2:
            audio = audio.T
        return cls(audio, sr)

    def to_array(self) -> np.ndarray:
        """Back to (samples,) for mono or (samples, channels)."""
        if self.n_channels == 1:
            return self.data[0].copy()
        return self.data.T.copy()


def is_empty(buffer) -> bool:
    """True for a missing buffer or one without samples."""
    return buffer is None or buffer.length == 0 or buffer.n_channels == 0


def load_wav(path, sr=None):
    """Load a WAV file into an AudioBuffer.

    Integer formats are scaled to [-1, 1). With sr given, the audio is
    resampled to that rate; otherwise the file's own rate is kept.
    """
    file_sr, data = wavfile.read(path)
    if data.dtype == np.int16:
        audio = data.astype(np.float64) / 32768.0
    elif data.dtype == np.int32:
        audio = data.astype(np.float64) / 2147483648.0
    elif data.dtype == np.uint8:
        audio = (data.astype(np.float64) - 128.0) / 128.0
    else:
        audio = data.astype(np.float64)
    if sr is not None and file_sr != sr:
        from scipy.signal import resample_poly
        g = gcd(sr, file_sr)
        audio = resample_poly(audio, sr // g, file_sr // g, axis=0)
        file_sr = sr
    return AudioBuffer.from_array(audio, file_sr)


def save_wav(path, buffer):
    """Save an AudioBuffer as 16-bit WAV, clipped to [-1, 1].

    No loudness normalization: level changes made by the compressor are
    kept in the file.
    """
    out = (np.clip(buffer.to_array(), -1.0, 1.0) * 32767).astype(np.int16)
    wavfile.write(path, buffer.sample_rate, out)


def make_sine(freq=1000.0, seconds=1.0, amp=1.0, sr=SR, channels=1):
    """Sine test tone, same signal on every channel."""
    t = np.arange(int(sr * seconds)) / sr
    tone = amp * np.sin(2 * np.pi * freq * t)
    return AudioBuffer(np.tile(tone, (channels, 1)), sr)
