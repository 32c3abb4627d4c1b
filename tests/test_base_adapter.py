import logging
from pathlib import Path
from typing import Any, Dict, Sequence

import pytest

from script_tools_lib.tools_core import BaseToolsAdapter, SourceMode
from script_tools_lib.tools_core.environment import EnvironmentProber
from script_tools_lib.tools_core.exceptions import ConfigurationError, ToolFetchError, ToolLoadError
from script_tools_lib.tools_core.models import ToolCallRequest


class StaticFetcher:
    def __init__(self, records: Any) -> None:
        self.records = records
        self.bulk_calls = 0

    async def fetch_all(self) -> Any:
        self.bulk_calls += 1
        if isinstance(self.records, Exception):
            raise self.records
        return self.records

    async def fetch_by_names(self, selectors: Sequence[Dict[str, str]]) -> Any:
        return {"tools": []}


def test_requires_a_locator() -> None:
    with pytest.raises(ConfigurationError):
        BaseToolsAdapter()


def test_api_key_selects_remote_mode() -> None:
    adapter = BaseToolsAdapter("apik_secret", fetcher=StaticFetcher([]))

    assert adapter.mode is SourceMode.REMOTE_API


@pytest.mark.asyncio
async def test_initialize_loads_tools_and_probes_environment(
    tools_folder: Path, prober: EnvironmentProber, caplog: pytest.LogCaptureFixture
) -> None:
    adapter = BaseToolsAdapter(str(tools_folder), prober=prober)

    with caplog.at_level(logging.INFO, logger="script_tools_lib"):
        await adapter.initialize()

    status = adapter.get_environment_status()
    assert adapter.initialized
    assert status["python"].valid and status["bash"].valid
    assert "Environment Status" in caplog.text
    assert set(await adapter.get_tools_by_names()) == {"echo", "payload", "py_args", "fail"}


@pytest.mark.asyncio
async def test_initialize_is_idempotent() -> None:
    fetcher = StaticFetcher([{"name": "remote", "script": "echo hi"}])
    adapter = BaseToolsAdapter("apik_secret", fetcher=fetcher, skip_environment_check=True)

    await adapter.initialize()
    await adapter.initialize()

    assert fetcher.bulk_calls == 1
    assert adapter.get_environment_status() == {}


@pytest.mark.asyncio
async def test_initialize_failure_is_logged_and_raised(caplog: pytest.LogCaptureFixture) -> None:
    adapter = BaseToolsAdapter("apik_secret", fetcher=StaticFetcher(ToolFetchError("status 500")))

    with pytest.raises(ToolLoadError):
        await adapter.initialize()

    assert "Failed to initialize tools: status 500" in caplog.text
    assert not adapter.initialized


@pytest.mark.asyncio
async def test_context_manager_initializes(tools_folder: Path, prober: EnvironmentProber) -> None:
    async with BaseToolsAdapter(folder_path=str(tools_folder), prober=prober) as adapter:
        assert adapter.initialized


@pytest.mark.asyncio
async def test_environment_variables_reach_scripts(tools_folder: Path, prober: EnvironmentProber) -> None:
    adapter = BaseToolsAdapter(str(tools_folder), prober=prober)
    adapter.set_environment_variables({"A": "1"})
    adapter.add_environment_variable("B", 2)

    handle = await adapter.create_tool_handler(["payload"])
    result = await handle(ToolCallRequest(name="payload", arguments={}))

    assert '"openv": {"A": "1", "B": 2}' in (result.output or "")


@pytest.mark.asyncio
async def test_call_status_and_refresh_threshold(tools_folder: Path, prober: EnvironmentProber) -> None:
    adapter = BaseToolsAdapter(str(tools_folder), prober=prober, auto_refresh_count=3)
    await adapter.initialize()
    execute = adapter.create_tool_executor(adapter.registry.tools["echo"])

    await execute({})
    status = adapter.get_tool_call_status()
    assert (status.call_count, status.auto_refresh_count, status.next_refresh_in) == (1, 3, 2)

    adapter.set_auto_refresh_count(0)
    assert adapter.get_tool_call_status().next_refresh_in == -1

    with pytest.raises(ConfigurationError):
        adapter.set_auto_refresh_count(-1)


@pytest.mark.asyncio
async def test_recheck_environment_covers_tool_kinds(tools_folder: Path, prober: EnvironmentProber) -> None:
    adapter = BaseToolsAdapter(str(tools_folder), prober=prober, skip_environment_check=True)
    await adapter.initialize()

    cached = await adapter.recheck_environment(force_refresh=False)
    forced = await adapter.recheck_environment()

    assert set(cached) == set(forced) == {"bash", "python"}
    assert (await adapter.check_environment("ruby")).error == "Unsupported script type: ruby"
    assert set(await adapter.check_all_environments()) == {"bash", "python"}


def test_set_verbose_propagates(tools_folder: Path) -> None:
    adapter = BaseToolsAdapter(str(tools_folder))

    adapter.set_verbose(True)

    assert adapter.registry.verbose and adapter.executor.verbose and adapter.invoker.verbose
    assert adapter.config.verbose
