"""Fast Fourier transforms, power spectra and window functions for audio analysis."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Sequence

RECTANGULAR = 0
BARTLETT = 1
HAMMING = 2
HANNING = 3

_WINDOW_NAMES = ("Rectangular", "Bartlett", "Hamming", "Hanning")


def is_power_of_two(x: int) -> bool:
    """Return True when ``x`` is a power of two of at least 2."""
    return x >= 2 and x & (x - 1) == 0


def number_of_bits_needed(power_of_two: int) -> int:
    """Return the number of bits needed to index ``power_of_two`` samples."""
    if power_of_two < 2:
        raise ValueError(f"FFT called with size {power_of_two}")
    return (power_of_two & -power_of_two).bit_length() - 1


def reverse_bits(index: int, num_bits: int) -> int:
    """Reverse the lowest ``num_bits`` bits of ``index``."""
    rev = 0
    for _ in range(num_bits):
        rev = (rev << 1) | (index & 1)
        index >>= 1
    return rev


@lru_cache(maxsize=None)
def _bit_reversal_table(num_bits: int) -> tuple[int, ...]:
    return tuple(reverse_bits(i, num_bits) for i in range(1 << num_bits))


def fft(
    real_in: Sequence[float],
    imag_in: Optional[Sequence[float]] = None,
    inverse: bool = False,
) -> tuple[list[float], list[float]]:
    """Complex FFT of ``real_in`` + i*``imag_in``; returns (real, imag) lists.

    The inverse transform is normalised by the number of samples.
    """
    n = len(real_in)
    if not is_power_of_two(n):
        raise ValueError(f"{n} is not a power of two")
    if imag_in is not None and len(imag_in) != n:
        raise ValueError("real and imaginary inputs differ in length")

    table = _bit_reversal_table(number_of_bits_needed(n))
    real = [0.0] * n
    imag = [0.0] * n
    for i, j in enumerate(table):
        real[j] = float(real_in[i])
        imag[j] = 0.0 if imag_in is None else float(imag_in[i])

    angle_numerator = -2.0 * math.pi if inverse else 2.0 * math.pi

    block_end = 1
    block_size = 2
    while block_size <= n:
        delta = angle_numerator / block_size
        sm2 = math.sin(-2 * delta)
        sm1 = math.sin(-delta)
        cm2 = math.cos(-2 * delta)
        cm1 = math.cos(-delta)
        w = 2 * cm1
        for start in range(0, n, block_size):
            ar2, ar1 = cm2, cm1
            ai2, ai1 = sm2, sm1
            for j in range(start, start + block_end):
                ar0 = w * ar1 - ar2
                ar2, ar1 = ar1, ar0
                ai0 = w * ai1 - ai2
                ai2, ai1 = ai1, ai0

                k = j + block_end
                tr = ar0 * real[k] - ai0 * imag[k]
                ti = ar0 * imag[k] + ai0 * real[k]
                real[k] = real[j] - tr
                imag[k] = imag[j] - ti
                real[j] += tr
                imag[j] += ti
        block_end = block_size
        block_size <<= 1

    if inverse:
        real = [r / n for r in real]
        imag = [i / n for i in imag]
    return real, imag


def real_fft(real_in: Sequence[float]) -> tuple[list[float], list[float]]:
    """FFT of real samples, computed through a half-size complex transform.

    Returns ``len(real_in) // 2`` coefficients; element 0 packs the DC term
    with the Nyquist term as in the classic packed real-FFT layout.
    """
    samples = [float(s) for s in real_in]
    half = len(samples) // 2
    real, imag = fft(samples[0 : 2 * half : 2], samples[1 : 2 * half : 2])

    theta = math.pi / half
    wtemp = math.sin(0.5 * theta)
    wpr = -2.0 * wtemp * wtemp
    wpi = math.sin(theta)
    wr = 1.0 + wpr
    wi = wpi

    for i in range(1, half // 2):
        i3 = half - i
        h1r = 0.5 * (real[i] + real[i3])
        h1i = 0.5 * (imag[i] - imag[i3])
        h2r = 0.5 * (imag[i] + imag[i3])
        h2i = -0.5 * (real[i] - real[i3])

        real[i] = h1r + wr * h2r - wi * h2i
        imag[i] = h1i + wr * h2i + wi * h2r
        real[i3] = h1r - wr * h2r + wi * h2i
        imag[i3] = -h1i + wr * h2i + wi * h2r

        wr, wi = wr * wpr - wi * wpi + wr, wi * wpr + wr * wpi + wi

    first = real[0]
    real[0] = first + imag[0]
    imag[0] = first - imag[0]
    return real, imag


def power_spectrum(samples: Sequence[float]) -> list[float]:
    """Squared magnitudes of the real FFT of ``samples``, phase discarded."""
    real, imag = real_fft(samples)
    return [r * r + i * i for r, i in zip(real, imag)]


def num_window_funcs() -> int:
    """Number of available window functions."""
    return len(_WINDOW_NAMES)


def window_func_name(which: int) -> str:
    """Name of a window function; unknown numbers name the rectangular one."""
    if 0 <= which < len(_WINDOW_NAMES):
        return _WINDOW_NAMES[which]
    return _WINDOW_NAMES[RECTANGULAR]


def apply_window(which: int, samples: Sequence[float]) -> list[float]:
    """Return ``samples`` multiplied by the chosen window function."""
    out = [float(s) for s in samples]
    n = len(out)
    if which == BARTLETT:
        h = n // 2
        for i in range(h):
            out[i] *= i / h
            out[i + h] *= 1.0 - i / h
    elif which == HAMMING:
        out = [s * (0.54 - 0.46 * math.cos(2 * math.pi * i / (n - 1))) for i, s in enumerate(out)]
    elif which == HANNING:
        out = [s * (0.50 - 0.50 * math.cos(2 * math.pi * i / (n - 1))) for i, s in enumerate(out)]
    return out


@dataclass
class Spectrum:
    """Per-bin magnitude, phase and power of one analysed window."""

    magnitude: list[float] = field(default_factory=list)
    phase: list[float] = field(default_factory=list)
    power: list[float] = field(default_factory=list)
    avg_power: float = 0.0


class SpectrumAnalyzer:
    """Hanning-windowed spectrum analysis and resynthesis."""

    window = HANNING

    def power_spectrum(
        self,
        data: Sequence[float],
        start: int = 0,
        half: Optional[int] = None,
        window_size: Optional[int] = None,
    ) -> Spectrum:
        """Analyse ``window_size`` samples of ``data`` from ``start`` onwards."""
        if window_size is None:
            window_size = len(data) - start
        if half is None:
            half = window_size // 2
        window = list(data[start : start + window_size])
        if start < 0 or len(window) != window_size:
            raise ValueError("window extends beyond the data")
        if not 1 <= half <= window_size // 2:
            raise ValueError(f"half must be between 1 and {window_size // 2}")

        real, imag = real_fft(apply_window(self.window, window))
        power = [r * r + i * i for r, i in zip(real[:half], imag[:half])]
        return Spectrum(
            magnitude=[2.0 * math.sqrt(p) for p in power],
            phase=[math.atan2(i, r) for r, i in zip(real[:half], imag[:half])],
            power=power,
            avg_power=sum(power) / half,
        )

    def inverse_power_spectrum(
        self,
        final_out: Sequence[float],
        start: int,
        half: int,
        window_size: int,
        magnitude: Sequence[float],
        phase: Sequence[float],
    ) -> list[float]:
        """Resynthesise a window and return ``final_out`` with it overlap-added at ``start``."""
        if not 0 <= half <= window_size:
            raise ValueError("half must lie within the window")
        if len(magnitude) < half or len(phase) < half:
            raise ValueError("magnitude and phase need at least 'half' values")
        if start < 0 or start + window_size > len(final_out):
            raise ValueError("window extends beyond the output")

        in_real = [m * math.cos(p) for m, p in zip(magnitude[:half], phase[:half])]
        in_imag = [m * math.sin(p) for m, p in zip(magnitude[:half], phase[:half])]
        padding = [0.0] * (window_size - half)
        out_real, _ = fft(in_real + padding, in_imag + padding, inverse=True)

        result = [float(v) for v in final_out]
        for offset, value in enumerate(apply_window(self.window, out_real)):
            result[start + offset] += value
        return result