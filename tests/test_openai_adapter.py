import json
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from script_tools_lib import OpenAIAdapter, OpenAIChatbotOptions
from script_tools_lib.tools_core.environment import EnvironmentProber


def _completion(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None) -> ChatCompletion:
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4o",
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "tool_calls" if tool_calls else "stop",
                    "message": {"role": "assistant", "content": content, "tool_calls": tool_calls},
                }
            ],
        }
    )


def _tool_call(call_id: str, name: str, arguments: str = "{}") -> Dict[str, Any]:
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


@pytest.fixture
def adapter(tools_folder: Path, prober: EnvironmentProber) -> OpenAIAdapter:
    return OpenAIAdapter(folder_path=str(tools_folder), prober=prober, auto_refresh_count=0)


@pytest.fixture
def mock_openai_client() -> Any:
    client = MagicMock(spec=AsyncOpenAI)
    client.chat = MagicMock()
    client.chat.completions = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_get_openai_tools_format(adapter: OpenAIAdapter) -> None:
    tools = await adapter.get_openai_tools(["echo"])

    assert tools == [
        {
            "type": "function",
            "function": {
                "name": "Echo",
                "description": "Say hi",
                "parameters": {"type": "object", "properties": {}},
            },
        }
    ]


@pytest.mark.asyncio
async def test_tool_handler_accepts_dict_and_sdk_objects(adapter: OpenAIAdapter) -> None:
    handle = await adapter.create_openai_tool_handler()
    sdk_call = _completion(tool_calls=[_tool_call("call_2", "payload", '{"city": "Oslo"}')]).choices[0].message.tool_calls[0]

    from_dict = await handle(_tool_call("call_1", "echo"))
    from_sdk = await handle(sdk_call)

    assert from_dict.output == "hi"
    assert json.loads(from_sdk.output or "") == {"city": "Oslo", "openv": {}}


@pytest.mark.asyncio
async def test_tool_handler_reports_unknown_tool(adapter: OpenAIAdapter) -> None:
    handle = await adapter.create_openai_tool_handler(["echo"])

    result = await handle(_tool_call("call_1", "payload"))

    assert result.error == "Tool payload not found in available tools"


@pytest.mark.asyncio
async def test_chatbot_runs_the_echo_scenario(adapter: OpenAIAdapter, mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.side_effect = [
        _completion(tool_calls=[_tool_call("call_1", "Echo")]),
        _completion(content="The tool said hi."),
    ]
    chatbot = await adapter.create_openai_chatbot(
        mock_openai_client, {"system": "Be brief.", "temperature": 0.2, "seed": 7}, ["echo"]
    )

    result = await chatbot.invoke("Say hi")

    assert result.text == "The tool said hi."
    history = result.messages
    assert [m["role"] for m in history] == ["user", "assistant", "tool", "assistant"]
    assert history[1]["tool_calls"][0]["id"] == "call_1"
    assert history[2] == {
        "role": "tool",
        "tool_call_id": "call_1",
        "name": "Echo",
        "content": json.dumps({"output": "hi"}),
    }

    first_call = mock_openai_client.chat.completions.create.call_args_list[0].kwargs
    assert first_call["model"] == "gpt-4o"
    assert first_call["temperature"] == 0.2
    assert first_call["seed"] == 7
    assert "system" not in first_call
    assert first_call["messages"][0] == {"role": "system", "content": "Be brief."}
    assert first_call["tools"][0]["function"]["name"] == "Echo"

    second_call = mock_openai_client.chat.completions.create.call_args_list[1].kwargs
    assert second_call["messages"][0]["role"] == "system"
    assert len(second_call["messages"]) == 4


@pytest.mark.asyncio
async def test_chatbot_without_tools_omits_tools_argument(tmp_path: Path, prober: EnvironmentProber, mock_openai_client: Any) -> None:
    (tmp_path / "tools.json").write_text("[]", encoding="utf-8")
    adapter = OpenAIAdapter(str(tmp_path), prober=prober)
    mock_openai_client.chat.completions.create.return_value = _completion(content="Hello")

    chatbot = await adapter.create_openai_chatbot(mock_openai_client, OpenAIChatbotOptions(model="gpt-4o-mini"))
    result = await chatbot.invoke("Hi")

    kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert result.text == "Hello"
    assert kwargs["model"] == "gpt-4o-mini"
    assert "tools" not in kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "Hi"}]


@pytest.mark.asyncio
async def test_chatbot_reports_api_errors(adapter: OpenAIAdapter, mock_openai_client: Any) -> None:
    mock_openai_client.chat.completions.create.side_effect = RuntimeError("network down")
    chatbot = await adapter.create_openai_chatbot(mock_openai_client)

    result = await chatbot.invoke("Hi")

    assert result.text == "Error in OpenAI API: network down"
    assert result.messages[-1] == {"role": "assistant", "content": "Error in OpenAI API: network down"}


def test_chatbot_options_defaults() -> None:
    options = OpenAIChatbotOptions.model_validate({"user": "abc"})

    assert options.model == "gpt-4o"
    assert options.request_options() == {"model": "gpt-4o", "user": "abc"}
