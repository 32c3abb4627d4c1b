import sys
from unittest.mock import AsyncMock, patch

import pytest

from script_tools_lib.tools_core.environment import EnvironmentProber


@pytest.mark.asyncio
async def test_probe_resolves_first_available_candidate() -> None:
    prober = EnvironmentProber(candidates={"python": ("definitely-not-a-python-xyz", sys.executable)})

    check = await prober.probe("python")

    assert check.valid
    assert check.executor == sys.executable
    assert check.error is None


@pytest.mark.asyncio
async def test_probe_reports_missing_runtime() -> None:
    prober = EnvironmentProber(candidates={"python": ("definitely-not-a-python-xyz",)})

    check = await prober.probe("python")

    assert not check.valid
    assert check.error == "Python is not installed or not available in PATH."


@pytest.mark.asyncio
async def test_unsupported_kind_is_reported_and_not_cached() -> None:
    prober = EnvironmentProber()

    check = await prober.probe("ruby")

    assert not check.valid
    assert check.error == "Unsupported script type: ruby"
    assert "ruby" not in prober.status()


@pytest.mark.asyncio
async def test_results_are_cached_until_forced() -> None:
    prober = EnvironmentProber(candidates={"bash": ("bash",)})

    with patch.object(prober, "_command_available", new=AsyncMock(return_value=True)) as available:
        await prober.probe("bash")
        await prober.probe("bash")
        assert available.await_count == 1

        await prober.force_reprobe()
        assert available.await_count == 2


@pytest.mark.asyncio
async def test_force_reprobe_includes_referenced_kinds(prober: EnvironmentProber) -> None:
    checks = await prober.force_reprobe(["python", "ruby"])

    assert set(checks) == {"python", "ruby", "bash"}
    assert checks["python"].valid
    assert not checks["ruby"].valid
    assert set(prober.status()) == {"python", "bash"}


@pytest.mark.asyncio
async def test_probe_all_covers_builtin_kinds(prober: EnvironmentProber) -> None:
    checks = await prober.probe_all()

    assert set(checks) == {"python", "bash"}
    assert all(check.valid for check in checks.values())
