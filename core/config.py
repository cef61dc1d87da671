"""
Configuration dataclasses for the audio analysis front-end.

These immutable config objects decouple analyser parameters from the
SpectralAnalyzer constructor, making it easy to define standard capture
setups and reuse them across sessions.
"""

from dataclasses import dataclass

# FFT sizes accepted by typical capture backends (powers of two, 32–32768).
VALID_FFT_SIZES: frozenset[int] = frozenset(2**n for n in range(5, 16))


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    Configuration for real-time spectral analysis.

    Immutable configuration object shared by the analyser and the capture
    collaborator. The capture side uses fft_size, smoothing and the decibel
    window to fill its byte arrays; the analyser uses sample_rate and
    bin_count to interpret them.

    Attributes:
        fft_size: FFT window length. Each frame carries fft_size // 2 bins.
            Defaults to 2048.
        sample_rate: Sample rate of the captured signal in Hz.
            Defaults to 44100.
        smoothing_time_constant: Averaging constant applied by the capture
            side between frames, 0.0 (none) to just below 1.0. Defaults to 0.8.
        min_decibels: Magnitude mapped to byte value 0. Defaults to -90.
        max_decibels: Magnitude mapped to byte value 255. Defaults to -10.

    Example:
        >>> config = AnalyzerConfig(fft_size=1024, sample_rate=48000)
        >>> config.bin_count
        512
    """

    fft_size: int = 2048
    sample_rate: int = 44100
    smoothing_time_constant: float = 0.8
    min_decibels: float = -90.0
    max_decibels: float = -10.0

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.fft_size not in VALID_FFT_SIZES:
            raise ValueError(
                f"fft_size must be a power of two in [32, 32768], got {self.fft_size}"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if not 0.0 <= self.smoothing_time_constant < 1.0:
            raise ValueError(
                "smoothing_time_constant must be in [0.0, 1.0), "
                f"got {self.smoothing_time_constant}"
            )
        if self.min_decibels >= self.max_decibels:
            raise ValueError(
                f"min_decibels ({self.min_decibels}) must be less than "
                f"max_decibels ({self.max_decibels})"
            )

    @property
    def bin_count(self) -> int:
        """Number of frequency bins (and time-domain samples) per frame."""
        return self.fft_size // 2

    @property
    def nyquist(self) -> float:
        """Highest representable frequency in Hz."""
        return self.sample_rate / 2.0


# Pre-defined configurations for common use cases

DEFAULT_ANALYZER_CONFIG = AnalyzerConfig()
"""Default configuration: 2048-point FFT at 44.1 kHz, smoothing 0.8."""

HIGH_RES_CONFIG = AnalyzerConfig(fft_size=8192)
"""Finer frequency resolution for pitch estimation at the cost of latency."""

LOW_LATENCY_CONFIG = AnalyzerConfig(fft_size=512, smoothing_time_constant=0.5)
"""Short window and light smoothing for snappier beat response."""
