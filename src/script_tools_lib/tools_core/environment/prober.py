"""Detect which script runtimes are available on the host."""

import asyncio
from typing import Dict, Iterable, Mapping, Optional, Sequence

from ..models import EnvironmentCheck
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_CANDIDATES: Dict[str, Sequence[str]] = {
    "python": ("python", "python3"),
    "bash": ("bash",),
}

_RUNTIME_LABELS = {"python": "Python", "bash": "Bash"}


class EnvironmentProber:
    """
    Probes and caches runtime availability per script kind.

    Each known kind has an ordered list of candidate commands; the first one
    answering ``<command> --version`` with exit code 0 becomes the resolved
    executor. Results are cached until ``force_reprobe`` is called. Unknown
    kinds are reported as unsupported and never cached.
    """

    def __init__(self, candidates: Optional[Mapping[str, Sequence[str]]] = None, probe_timeout: float = 10.0):
        """Initialize the prober.

        Args:
            candidates: Candidate commands per script kind, tried in order.
            probe_timeout: Seconds to wait for a single ``--version`` call.
        """
        self.candidates: Dict[str, Sequence[str]] = dict(candidates or DEFAULT_CANDIDATES)
        self.probe_timeout = probe_timeout
        self._cache: Dict[str, EnvironmentCheck] = {}
        self._lock = asyncio.Lock()

    @property
    def builtin_kinds(self) -> Sequence[str]:
        return tuple(self.candidates)

    async def probe(self, kind: str) -> EnvironmentCheck:
        """Return the environment check for ``kind``, probing it on a cache miss.

        Args:
            kind: The script kind to check.

        Returns:
            The cached or freshly computed environment check.
        """
        cached = self._cache.get(kind)
        if cached is not None:
            return cached

        commands = self.candidates.get(kind)
        if not commands:
            return EnvironmentCheck(script_kind=kind, valid=False, error=f"Unsupported script type: {kind}")

        result: Optional[EnvironmentCheck] = None
        for command in commands:
            if await self._command_available(command):
                result = EnvironmentCheck(script_kind=kind, valid=True, executor=command)
                break
            logger.debug("Runtime candidate '%s' for '%s' is not available.", command, kind)

        if result is None:
            label = _RUNTIME_LABELS.get(kind, kind.capitalize())
            result = EnvironmentCheck(
                script_kind=kind,
                valid=False,
                error=f"{label} is not installed or not available in PATH.",
            )

        self._cache[kind] = result
        return result

    async def probe_all(self) -> Dict[str, EnvironmentCheck]:
        """Probe every built-in script kind.

        Returns:
            A copy of the environment check cache.
        """
        for kind in self.builtin_kinds:
            await self.probe(kind)
        return self.status()

    async def force_reprobe(self, kinds: Iterable[str] = ()) -> Dict[str, EnvironmentCheck]:
        """Clear the cache and probe the given kinds plus the built-in ones.

        Args:
            kinds: Script kinds referenced by the loaded tools.

        Returns:
            The environment check for every probed kind, unsupported ones included.
        """
        async with self._lock:
            self._cache.clear()
            wanted = list(dict.fromkeys([*kinds, *self.builtin_kinds]))
            return {kind: await self.probe(kind) for kind in wanted}

    def status(self) -> Dict[str, EnvironmentCheck]:
        """Return a copy of the cached environment checks."""
        return dict(self._cache)

    async def _command_available(self, command: str) -> bool:
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                "--version",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            return False

        try:
            await asyncio.wait_for(process.wait(), timeout=self.probe_timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning("Probing '%s' timed out after %s seconds.", command, self.probe_timeout)
            return False

        return process.returncode == 0
