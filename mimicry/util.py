"""Tempo and timing helpers."""

import struct


def _as_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def samples_per_subdivision(beats_per_minute: float, sample_rate: float, beat_divider: float) -> int:
    """Return the whole number of samples in one note value at the given tempo.

    ``beat_divider`` is the fraction of a beat (for example ``1/8``); the result
    is truncated toward zero.
    """
    if beats_per_minute <= 0:
        raise ValueError(f"tempo must be positive, got {beats_per_minute}")
    if sample_rate < 0:
        raise ValueError(f"sample rate must not be negative, got {sample_rate}")
    if beat_divider < 0:
        raise ValueError(f"beat divider must not be negative, got {beat_divider}")
    beats_per_second = beats_per_minute / 60.0
    samples_per_beat = sample_rate / beats_per_second
    return int(samples_per_beat * _as_float32(beat_divider))