from typing import Any, Dict, List, Sequence

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as RegistryServer

from script_tools_lib.tools_core.exceptions import ToolFetchError
from script_tools_lib.tools_core.registry import HttpCatalogFetcher, RemoteApiSource, ToolRegistry

BULK_RECORDS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "Weather",
        "description": "Current weather",
        "input_schema": {"type": "object", "properties": {"city": {"type": "string"}}},
        "script": "echo sunny",
        "script_type": "bash",
        "version_name": "1.0.0",
    },
    {
        "id": "2",
        "name": "calc",
        "description": "Calculator",
        "input_schema": {},
        "script": "print(1)",
        "script_type": "python",
        "version_name": "2.1.0",
    },
]


class FakeFetcher:
    def __init__(self) -> None:
        self.fail_bulk = False
        self.fail_selected = False
        self.requested: List[Sequence[Dict[str, str]]] = []

    async def fetch_all(self) -> Any:
        if self.fail_bulk:
            raise ToolFetchError("API request failed with status 500")
        return BULK_RECORDS

    async def fetch_by_names(self, selectors: Sequence[Dict[str, str]]) -> Any:
        self.requested.append(selectors)
        if self.fail_selected:
            raise ToolFetchError("API request failed with status 503")
        return {
            "tools": [
                {
                    "id": "1",
                    "name": "Weather",
                    "version": {
                        "description": "Older weather",
                        "input_schema": {"type": "object"},
                        "script": "echo cloudy",
                        "script_type": "bash",
                        "version_name": "0.9.0",
                    },
                }
            ]
        }


@pytest.mark.asyncio
async def test_bulk_load_keys_by_lower_case_name() -> None:
    tools = await RemoteApiSource(FakeFetcher()).load_all()

    assert set(tools) == {"weather", "calc"}
    assert tools["weather"].script == "echo sunny"
    assert tools["weather"].script_path is None
    assert tools["calc"].script_kind == "python"


@pytest.mark.asyncio
async def test_selective_load_reads_nested_version() -> None:
    fetcher = FakeFetcher()
    registry = ToolRegistry(RemoteApiSource(fetcher))
    await registry.initialize()

    tools = await registry.get_by_names([{"name": "Weather", "version": "0.9.0"}])

    assert fetcher.requested == [[{"name": "Weather", "version": "0.9.0"}]]
    assert tools["weather"].version_name == "0.9.0"
    assert tools["weather"].script == "echo cloudy"


@pytest.mark.asyncio
async def test_selective_failure_falls_back_to_cache() -> None:
    fetcher = FakeFetcher()
    registry = ToolRegistry(RemoteApiSource(fetcher))
    await registry.initialize()
    fetcher.fail_selected = True

    tools = await registry.get_by_names(["weather", "unknown"])

    assert list(tools) == ["weather"]
    assert tools["weather"].version_name == "1.0.0"


@pytest.mark.asyncio
async def test_bulk_failure_propagates() -> None:
    fetcher = FakeFetcher()
    fetcher.fail_bulk = True
    registry = ToolRegistry(RemoteApiSource(fetcher))

    with pytest.raises(ToolFetchError):
        await registry.initialize()


@pytest.mark.asyncio
async def test_malformed_bulk_body_raises() -> None:
    fetcher = FakeFetcher()

    async def not_a_list() -> Any:
        return {"unexpected": True}

    fetcher.fetch_all = not_a_list  # type: ignore[method-assign]

    with pytest.raises(ToolFetchError, match="Invalid response format"):
        await RemoteApiSource(fetcher).load_all()


def _registry_app(expected_key: str) -> web.Application:
    async def get_tools(request: web.Request) -> web.Response:
        if request.headers.get("x-api-key") != expected_key:
            return web.json_response({"error": "unauthorized"}, status=401)
        return web.json_response({"data": BULK_RECORDS})

    async def get_individual_tools(request: web.Request) -> web.Response:
        body = await request.json()
        names = [item["name"] for item in body["tools"]]
        return web.json_response(
            {
                "tools": [
                    {"id": "x", "name": name, "version": {"description": "d", "script": "echo", "version_name": "1"}}
                    for name in names
                ]
            }
        )

    app = web.Application()
    app.router.add_get("/api/get-tools", get_tools)
    app.router.add_post("/api/get-individual-tools", get_individual_tools)
    return app


@pytest.mark.asyncio
async def test_http_fetcher_sends_api_key() -> None:
    async with RegistryServer(_registry_app("apik_good")) as server:
        fetcher = HttpCatalogFetcher(str(server.make_url("/")), "apik_good")

        records = await fetcher.fetch_all()
        body = await fetcher.fetch_by_names([{"name": "Weather"}])

    assert [r["name"] for r in records] == ["Weather", "calc"]
    assert body["tools"][0]["name"] == "Weather"


@pytest.mark.asyncio
async def test_http_fetcher_reports_status_errors() -> None:
    async with RegistryServer(_registry_app("apik_good")) as server:
        fetcher = HttpCatalogFetcher(str(server.make_url("/")), "apik_bad")

        with pytest.raises(ToolFetchError, match="status 401"):
            await fetcher.fetch_all()


@pytest.mark.asyncio
async def test_http_fetcher_wraps_connection_errors() -> None:
    fetcher = HttpCatalogFetcher("http://127.0.0.1:9", "apik_x", timeout=2.0)

    with pytest.raises(ToolFetchError):
        await fetcher.fetch_all()
