"""Frequency analysis for the visualizer tap.

Mirrors what a host analysis node does: keep the last FFT_SIZE mono samples,
apply a Blackman window, take the magnitude spectrum, smooth it over time and
map decibels onto 0-255 bytes.
"""

from __future__ import annotations

import numpy as np

FFT_SIZE = 512
SMOOTHING = 0.8
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0


class SpectrumAnalyser:
    def __init__(
        self,
        fft_size: int = FFT_SIZE,
        smoothing: float = SMOOTHING,
        min_db: float = MIN_DECIBELS,
        max_db: float = MAX_DECIBELS,
    ):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError("fft_size must be a power of two >= 32")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError("smoothing must be in [0, 1)")
        if min_db >= max_db:
            raise ValueError("min_db must be below max_db")

        self.fft_size = fft_size
        self.smoothing = smoothing
        self.min_db = min_db
        self.max_db = max_db

        self._window = np.blackman(fft_size).astype(np.float32)
        self._ring = np.zeros(fft_size, dtype=np.float32)
        self._smoothed = np.zeros(self.frequency_bin_count, dtype=np.float64)

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def reset(self) -> None:
        self._ring[:] = 0.0
        self._smoothed[:] = 0.0

    def push(self, samples: np.ndarray) -> None:
        """Append mono samples in [-1.0, 1.0]; only the newest fft_size are kept."""
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        n = len(samples)
        if n == 0:
            return
        if n >= self.fft_size:
            self._ring[:] = samples[-self.fft_size:]
        else:
            self._ring = np.roll(self._ring, -n)
            self._ring[-n:] = samples

    def byte_frequency_data(self) -> np.ndarray:
        spectrum = np.fft.rfft(self._ring * self._window)[: self.frequency_bin_count]
        magnitude = np.abs(spectrum) / self.fft_size

        self._smoothed = self.smoothing * self._smoothed + (1.0 - self.smoothing) * magnitude

        with np.errstate(divide="ignore"):
            db = 20.0 * np.log10(self._smoothed)

        scale = 255.0 / (self.max_db - self.min_db)
        scaled = np.floor((db - self.min_db) * scale)
        return np.clip(np.nan_to_num(scaled, neginf=0.0), 0, 255).astype(np.uint8)


def pcm_to_mono(raw: bytes, sample_format: str, channels: int) -> np.ndarray:
    """
    Decode interleaved PCM into mono float32 in [-1.0, 1.0].
    `sample_format` is one of "uint8", "int16", "int32", "float".
    """
    itemsize = {"uint8": 1, "int16": 2, "int32": 4, "float": 4}.get(sample_format)
    if itemsize is None:
        raise ValueError(f"Unsupported sample format: {sample_format}")
    raw = raw[: len(raw) - len(raw) % itemsize]

    if sample_format == "uint8":
        samples = (np.frombuffer(raw, dtype=np.uint8).astype(np.float32) - 128.0) / 128.0
    elif sample_format == "int16":
        samples = np.frombuffer(raw, dtype=np.int16).astype(np.float32) / 32768.0
    elif sample_format == "int32":
        samples = np.frombuffer(raw, dtype=np.int32).astype(np.float32) / 2147483648.0
    else:
        samples = np.frombuffer(raw, dtype=np.float32)

    channels = max(1, int(channels))
    if channels > 1:
        usable = len(samples) - len(samples) % channels
        samples = samples[:usable].reshape(-1, channels).mean(axis=1)
    return samples.astype(np.float32, copy=False)
