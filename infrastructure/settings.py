"""Runtime settings loaded from the environment (and an optional .env file).

Environment variables:
    COMPOSER_SAMPLE_RATE          Capture sample rate in Hz (default 44100)
    COMPOSER_FFT_SIZE             FFT window length (default 2048)
    COMPOSER_GENERATION_TIMEOUT   Seconds to wait for a composition; empty
                                  or 0 = wait indefinitely (default empty)
    COMPOSER_LOG_LEVEL            Root log level name (default INFO)
    COMPOSER_METRICS_ENABLED      "0"/"false" disables Prometheus recording

Usage::

    from infrastructure.settings import load_settings

    settings = load_settings()
    analyzer = SpectralAnalyzer(settings.analyzer)
    engine = CompositionEngine(timeout=settings.generation_timeout)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from core.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from infrastructure import metrics

logger = logging.getLogger(__name__)

_FALSEY: frozenset[str] = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class Settings:
    """Process-level configuration for a composer session."""

    analyzer: AnalyzerConfig = field(default_factory=lambda: DEFAULT_ANALYZER_CONFIG)
    generation_timeout: float | None = None
    log_level: str = "INFO"
    metrics_enabled: bool = True


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_timeout(name: str) -> float | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    return value if value > 0 else None


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build Settings from the environment.

    Args:
        dotenv: If True, load the nearest .env file found from the current
            working directory upward. Existing environment variables
            always win over .env values.

    Returns:
        Frozen Settings.

    Raises:
        ValueError: If a variable is present but malformed, or the
            resulting AnalyzerConfig is invalid.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    analyzer = AnalyzerConfig(
        fft_size=_env_int("COMPOSER_FFT_SIZE", DEFAULT_ANALYZER_CONFIG.fft_size),
        sample_rate=_env_int("COMPOSER_SAMPLE_RATE", DEFAULT_ANALYZER_CONFIG.sample_rate),
    )
    log_level = os.environ.get("COMPOSER_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    metrics_enabled = (
        os.environ.get("COMPOSER_METRICS_ENABLED", "1").strip().lower() not in _FALSEY
    )

    return Settings(
        analyzer=analyzer,
        generation_timeout=_env_timeout("COMPOSER_GENERATION_TIMEOUT"),
        log_level=log_level,
        metrics_enabled=metrics_enabled,
    )


def configure(settings: Settings) -> None:
    """Apply process-wide side effects of a Settings object.

    Sets the root log level (via logging.basicConfig when no handler is
    installed yet) and toggles metrics recording.
    """
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        logger.warning("Unknown log level %r, falling back to INFO", settings.log_level)
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    metrics.set_enabled(settings.metrics_enabled)
