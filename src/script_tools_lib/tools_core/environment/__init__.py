"""Runtime detection for tool scripts."""

from .prober import EnvironmentProber, DEFAULT_CANDIDATES

__all__ = ["EnvironmentProber", "DEFAULT_CANDIDATES"]
