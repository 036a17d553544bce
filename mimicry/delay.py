"""Delay lines: a circular buffer read by several heads, and a single fractional delay."""

import math

import numpy as np


class MultiHeadDelayLine:
    """A circular buffer read by several heads, each with its own delay and gain.

    A head whose delay is set again to the same length glides its read position
    towards the target over half a second instead of jumping.
    """

    def __init__(self, num_heads: int):
        if num_heads < 0:
            raise ValueError(f"number of heads must not be negative, got {num_heads}")
        self._data: list[float] = []
        self._write_head = 0
        self._gains = [0.0] * num_heads
        self._target_read_heads = [0] * num_heads
        self._smoothed_read_heads = [0.0] * num_heads
        self._delta_smooth_reads = [1.0] * num_heads
        self._current_delays = [0] * num_heads
        self._remaining_steps = [0] * num_heads
        self._initial_delays_set = [False] * num_heads

    @property
    def size(self) -> int:
        """Number of samples the buffer holds."""
        return len(self._data)

    def _check_head(self, head: int) -> None:
        if not 0 <= head < len(self._gains):
            raise IndexError(f"head {head} out of range for {len(self._gains)} heads")

    def _require_storage(self) -> int:
        if not self._data:
            raise RuntimeError("delay line has no storage; resize it first")
        return len(self._data)

    def resize(self, size: int) -> None:
        """Set the buffer length, keeping existing samples and padding with silence."""
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        if size < len(self._data):
            del self._data[size:]
        else:
            self._data.extend([0.0] * (size - len(self._data)))
        self._write_head = self._write_head % size if size else 0

    def next_delayed_sample(self, head: int) -> float:
        """Advance ``head`` by one sample and return what it reads, scaled by its gain."""
        self._check_head(head)
        size = self._require_storage()
        gain = self._gains[head]
        if self._current_delays[head] == 0:
            return self._data[(self._write_head - 1) % size] * gain

        smoothed = (self._smoothed_read_heads[head] + self._delta_smooth_reads[head]) % size
        self._target_read_heads[head] = (self._target_read_heads[head] + 1) % size

        if self._delta_smooth_reads[head] != 1.0:
            self._remaining_steps[head] -= 1
            if self._remaining_steps[head] <= 1:
                self._delta_smooth_reads[head] = 1.0
                smoothed = float(self._target_read_heads[head])

        self._smoothed_read_heads[head] = smoothed
        return self._data[int(smoothed) % size] * gain

    def push_sample(self, sample: float) -> None:
        """Write one sample at the write head and advance it."""
        size = self._require_storage()
        self._data[self._write_head] = sample
        self._write_head = (self._write_head + 1) % size

    def set_delay_samples(self, head: int, num_samples: int, sample_rate: float) -> None:
        """Set the delay of ``head`` in samples."""
        self._check_head(head)
        if num_samples < 0:
            raise ValueError(f"delay must not be negative, got {num_samples}")
        unchanged = self._current_delays[head] == num_samples
        self._current_delays[head] = num_samples
        self._set_target_delay(head, num_samples)

        if self._initial_delays_set[head] and unchanged:
            size = self._require_storage()
            steps = int(float(np.float32(sample_rate)) * 0.5)
            target = self._target_read_heads[head]
            if steps == 0:
                self._delta_smooth_reads[head] = 1.0
                self._smoothed_read_heads[head] = float(target)
            else:
                self._remaining_steps[head] = steps
                projected = float((steps + target) % size)
                self._delta_smooth_reads[head] = (projected - self._smoothed_read_heads[head]) / steps
        self._initial_delays_set[head] = True

    def _set_target_delay(self, head: int, num_samples: int) -> None:
        size = len(self._data)
        self._target_read_heads[head] = (self._write_head - num_samples) % size if size else 0

    def clear(self) -> None:
        """Silence the whole buffer."""
        self._data[:] = [0.0] * len(self._data)

    def num_heads(self) -> int:
        """Return the number of read heads."""
        return len(self._target_read_heads)

    def set_gain(self, head: int, gain: float) -> None:
        """Set the output gain of ``head``."""
        self._check_head(head)
        self._gains[head] = gain


class DelayLine:
    """A mono delay line with linear interpolation between samples."""

    def __init__(self, maximum_delay: int = 0):
        self._buffer = np.zeros(4, dtype=np.float32)
        self._write_pos = 0
        self._read_pos = 0
        self._delay = 0.0
        self._delay_int = 0
        self._delay_frac = 0.0
        self.set_maximum_delay(maximum_delay)

    @property
    def maximum_delay(self) -> int:
        """Longest delay the line can hold, in samples."""
        return len(self._buffer) - 2

    @property
    def delay(self) -> float:
        """Current delay in samples."""
        return self._delay

    def set_maximum_delay(self, samples: int) -> None:
        """Reallocate the buffer for delays of up to ``samples``; this also resets the line."""
        if samples < 0:
            raise ValueError(f"maximum delay must not be negative, got {samples}")
        self._buffer = np.zeros(max(4, int(samples) + 2), dtype=np.float32)
        self.reset()

    def set_delay(self, delay: float) -> None:
        """Set the delay in samples, limited to the range [0, maximum_delay]."""
        self._delay = min(max(float(delay), 0.0), float(self.maximum_delay))
        self._delay_int = math.floor(self._delay)
        self._delay_frac = self._delay - self._delay_int

    def push_sample(self, sample: float) -> None:
        """Write one sample into the line."""
        total = len(self._buffer)
        self._buffer[self._write_pos] = sample
        self._write_pos = (self._write_pos + total - 1) % total

    def pop_sample(self) -> float:
        """Read the sample at the current delay and advance the read position."""
        total = len(self._buffer)
        first_index = self._read_pos + self._delay_int
        second_index = first_index + 1
        if second_index >= total:
            first_index %= total
            second_index %= total
        first = float(self._buffer[first_index])
        second = float(self._buffer[second_index])
        self._read_pos = (self._read_pos + total - 1) % total
        return float(np.float32(first + self._delay_frac * (second - first)))

    def reset(self) -> None:
        """Silence the line and rewind its read and write positions."""
        self._buffer[:] = 0.0
        self._write_pos = 0
        self._read_pos = 0