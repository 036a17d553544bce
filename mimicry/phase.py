"""Phase propagation for the phase vocoder.

The correction functions operate on any object exposing ``freq_fft_data``
(complex64 array), ``old_input_phases`` and ``old_output_phases`` (float32
arrays of the same length) and ``synthesis_hop_size`` (int). They update those
attributes in place.
"""

import numpy as np

FFT_ORDER = 11
FFT_SIZE = 1 << FFT_ORDER
ANALYSIS_OVERLAP_FACTOR = 8
ANALYSIS_HOP_SIZE = FFT_SIZE // ANALYSIS_OVERLAP_FACTOR

TAU = np.float32(2.0 * np.pi)
_PI = np.float32(np.pi)
_ONE_OVER_TAU = np.float32(1.0) / TAU


def _result(x: np.ndarray):
    return x[()] if x.ndim == 0 else x


def _round_half_away(x: np.ndarray) -> np.ndarray:
    return np.copysign(np.floor(np.abs(x) + np.float32(0.5)), x)


def normalize_angle(x):
    """Wrap angles into the range [-pi, pi]."""
    x = np.asarray(x, dtype=np.float32)
    x = x - np.rint(x * _ONE_OVER_TAU) * TAU
    x = np.where(x > _PI, x - TAU, x)
    x = np.where(x < -_PI, x + TAU, x)
    return _result(x.astype(np.float32))


def cos_approx(x):
    """Taylor approximation of cosine up to the tenth power."""
    x = np.asarray(x, dtype=np.float32)
    x2 = x * x
    x4 = x2 * x2
    x6 = x4 * x2
    x8 = x6 * x2
    x10 = x8 * x2
    result = np.float32(1.0) - x2 / np.float32(2.0)
    result = result + x4 / np.float32(24.0)
    result = result - x6 / np.float32(720.0)
    result = result + x8 / np.float32(40320.0)
    result = result - x10 / np.float32(3628800.0)
    return _result(result.astype(np.float32))


def sin_approx(x):
    """Taylor approximation of sine up to the eleventh power."""
    x = np.asarray(x, dtype=np.float32)
    x2 = x * x
    x3 = x2 * x
    x5 = x3 * x2
    x7 = x5 * x2
    x9 = x7 * x2
    x11 = x9 * x2
    result = x - x3 / np.float32(6.0)
    result = result + x5 / np.float32(120.0)
    result = result - x7 / np.float32(5040.0)
    result = result + x9 / np.float32(362880.0)
    result = result - x11 / np.float32(39916800.0)
    return _result(result.astype(np.float32))


def _propagate(section, omegas, rounding) -> tuple[np.ndarray, np.ndarray]:
    omegas = np.asarray(omegas, dtype=np.float32)
    hop = np.float32(ANALYSIS_HOP_SIZE)
    input_phase = np.angle(section.freq_fft_data).astype(np.float32)

    delta = input_phase - section.old_input_phases - hop * omegas
    delta = delta - TAU * rounding(delta / TAU)
    section.old_input_phases[:] = input_phase

    instantaneous = omegas + delta / hop
    output_phase = section.old_output_phases + np.float32(section.synthesis_hop_size) * instantaneous
    output_phase = output_phase - TAU * rounding(output_phase / TAU)
    section.old_output_phases[:] = output_phase

    return input_phase, output_phase.astype(np.float32)


def phase_correct(section, omegas) -> None:
    """Rotate each bin to its propagated output phase using the polynomial sine and cosine."""
    data = section.freq_fft_data
    real = data.real.astype(np.float32)
    imag = data.imag.astype(np.float32)
    input_phase, output_phase = _propagate(section, omegas, np.rint)

    diff = output_phase - input_phase
    cos_diff = np.asarray(cos_approx(diff), dtype=np.float32)
    sin_diff = np.asarray(sin_approx(diff), dtype=np.float32)
    rotated_real = real * cos_diff - imag * sin_diff
    rotated_imag = real * sin_diff + imag * cos_diff
    section.freq_fft_data[:] = (rotated_real + 1j * rotated_imag).astype(np.complex64)


def phase_correct_reference(section, omegas) -> None:
    """Rotate each bin to its propagated output phase using exact trigonometry."""
    input_phase, output_phase = _propagate(section, omegas, _round_half_away)
    rotation = np.exp(1j * (output_phase - input_phase).astype(np.float64)).astype(np.complex64)
    section.freq_fft_data[:] = (section.freq_fft_data * rotation).astype(np.complex64)