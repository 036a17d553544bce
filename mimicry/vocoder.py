"""A bank of phase-vocoder pitch shifters sharing one analysis stage."""

import math
from dataclasses import dataclass, field

import numpy as np

from mimicry.phase import (
    ANALYSIS_HOP_SIZE,
    ANALYSIS_OVERLAP_FACTOR,
    FFT_SIZE,
    phase_correct,
    phase_correct_reference,
)

MAX_FACTOR = 2.0

_FLOAT32_EPSILON = float(np.finfo(np.float32).eps)
_FLOAT32_TINY = float(np.finfo(np.float32).tiny)


def _hann_window(size: int) -> np.ndarray:
    n = np.arange(size)
    window = 0.5 - 0.5 * np.cos(2.0 * np.pi * n / (size - 1))
    window *= size / window.sum()
    return window.astype(np.float32)


def _zeros(size: int, dtype=np.float32) -> np.ndarray:
    return np.zeros(size, dtype=dtype)


@dataclass
class OutputSection:
    """State of one pitch shifter: its ratio, phase memory and output ring."""

    factor: float = 1.0
    synthesis_hop_size: int = ANALYSIS_HOP_SIZE
    freq_fft_data: np.ndarray = field(default_factory=lambda: _zeros(FFT_SIZE, np.complex64))
    old_input_phases: np.ndarray = field(default_factory=lambda: _zeros(FFT_SIZE))
    old_output_phases: np.ndarray = field(default_factory=lambda: _zeros(FFT_SIZE))
    output_data: np.ndarray = field(default_factory=lambda: _zeros(4 * FFT_SIZE * int(MAX_FACTOR)))
    output_index: float = 0.0
    last_left_index: int = 0


class MultiPhaseVocoder:
    """Feeds one input stream to several independent pitch shifters."""

    def __init__(self, num_vocoders: int, exact_phase: bool = False):
        self.sections = [OutputSection() for _ in range(num_vocoders)]
        self._correct = phase_correct_reference if exact_phase else phase_correct
        self._window = _hann_window(FFT_SIZE)
        self._omegas = (2.0 * np.pi * np.arange(FFT_SIZE) / FFT_SIZE).astype(np.float32)
        self._fifo = _zeros(FFT_SIZE)
        self._fifo_index = 0
        self._fifos_written = 0
        self._fifo_read = 0
        self.output_ready = False

    def _section(self, index: int) -> OutputSection:
        if not 0 <= index < len(self.sections):
            raise IndexError(f"vocoder index {index} out of range for {len(self.sections)} vocoders")
        return self.sections[index]

    def push_sample(self, sample: float) -> None:
        """Add one input sample; every hop this analyses a frame and writes each shifter's output."""
        self._fifo[self._fifo_index] = sample
        self._fifo_index = (self._fifo_index + 1) % FFT_SIZE
        self._fifos_written += 1
        if self._fifos_written != FFT_SIZE:
            return
        self._fifos_written -= ANALYSIS_HOP_SIZE

        frame = np.roll(self._fifo, -self._fifo_read) * self._window
        spectrum = np.fft.fft(frame.astype(np.complex64)).astype(np.complex64)
        hop_positions = np.arange(ANALYSIS_HOP_SIZE)
        frame_positions = np.arange(FFT_SIZE)

        for section in self.sections:
            section.freq_fft_data[:] = spectrum
            self._correct(section, self._omegas)

            length = len(section.output_data)
            start = math.floor(section.output_index)
            if not math.isclose(section.factor, 1.0, rel_tol=_FLOAT32_EPSILON, abs_tol=_FLOAT32_TINY):
                shifted = np.fft.ifft(section.freq_fft_data).real.astype(np.float32)
                shifted *= self._window
                targets = (start + frame_positions) % length
                section.output_data[targets] += shifted / np.float32(ANALYSIS_OVERLAP_FACTOR)
            else:
                targets = (start + hop_positions) % length
                sources = (self._fifo_read + hop_positions) % FFT_SIZE
                section.output_data[targets] = self._fifo[sources]

        self.output_ready = True
        self._fifo_read = (self._fifo_read + ANALYSIS_HOP_SIZE) % FFT_SIZE

    def next_sample(self, index: int) -> float:
        """Read the next output sample of shifter ``index``, linearly interpolated."""
        section = self._section(index)
        output = section.output_data
        length = len(output)

        left = math.floor(section.output_index)
        first = float(output[left])
        frac = section.output_index - left
        section.output_index += section.factor
        while int(section.output_index) >= length:
            section.output_index -= length
        second = float(output[(left + 1) % length])

        clear = section.last_left_index
        if clear <= left:
            output[clear:left] = 0.0
        else:
            output[clear:] = 0.0
            output[:left] = 0.0
        section.last_left_index = left

        return float(np.float32(first + frac * (second - first)))

    def set_pitch_shift_semitones(self, index: int, semitones: float) -> None:
        """Set the pitch ratio of shifter ``index`` from a number of semitones."""
        section = self._section(index)
        section.factor = float(np.float32(2.0 ** (semitones / 12.0)))
        section.synthesis_hop_size = int(np.float32(section.factor) * np.float32(ANALYSIS_HOP_SIZE))

    def delay(self) -> int:
        """Return the analysis hop size, in samples."""
        return ANALYSIS_HOP_SIZE