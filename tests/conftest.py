import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

from script_tools_lib.tools_core.environment import EnvironmentProber
from script_tools_lib.tools_core.models import Tool

ECHO_SCRIPT = 'cat > /dev/null\necho "hi"\n'
PAYLOAD_SCRIPT = "cat\n"
FAIL_SCRIPT = 'cat > /dev/null\necho "partial"\necho "boom" >&2\nexit 3\n'
PY_ARGS_SCRIPT = "import json, sys\nargs = json.loads(sys.argv[1])\nprint(json.dumps(args))\n"


def _version(description: str, script_type: str, properties: Dict[str, Any] | None = None) -> Dict[str, Any]:
    return {
        "description": description,
        "input_schema": {"type": "object", "properties": properties or {}},
        "script_type": script_type,
    }


def write_tools_folder(folder: Path) -> Path:
    """Create a tools folder with a manifest and the scripts it references."""
    manifest: List[Dict[str, Any]] = [
        {
            "id": "t-echo",
            "name": "Echo",
            "production_version_name": "v1",
            "versions": {
                "v1": _version("Say hi", "bash"),
                "v2": _version("Say hi, louder", "bash"),
            },
        },
        {
            "id": "t-payload",
            "name": "payload",
            "production_version_name": "v1",
            "versions": {"v1": _version("Print stdin", "bash", {"city": {"type": "string"}})},
        },
        {
            "id": "t-args",
            "name": "py_args",
            "production_version_name": "v1",
            "versions": {"v1": _version("Print argv", "python", {"name": {"type": "string"}})},
        },
        {
            "id": "t-fail",
            "name": "fail",
            "production_version_name": "v1",
            "versions": {"v1": _version("Always fails", "bash")},
        },
        {
            "id": "t-broken",
            "name": "broken",
            "production_version_name": "v1",
            "versions": ["not", "a", "dict"],
        },
        {
            "id": "t-missing",
            "name": "missing_script",
            "production_version_name": "v1",
            "versions": {"v1": _version("No script file", "bash")},
        },
    ]
    folder.mkdir(parents=True, exist_ok=True)
    (folder / "tools.json").write_text(json.dumps(manifest), encoding="utf-8")
    (folder / "Echo-v1.sh").write_text(ECHO_SCRIPT, encoding="utf-8")
    (folder / "Echo-v2.sh").write_text('cat > /dev/null\necho "HI"\n', encoding="utf-8")
    (folder / "payload-v1.sh").write_text(PAYLOAD_SCRIPT, encoding="utf-8")
    (folder / "py_args-v1.py").write_text(PY_ARGS_SCRIPT, encoding="utf-8")
    (folder / "fail-v1.sh").write_text(FAIL_SCRIPT, encoding="utf-8")
    return folder


@pytest.fixture
def tools_folder(tmp_path: Path) -> Path:
    return write_tools_folder(tmp_path / "tools")


@pytest.fixture
def prober() -> EnvironmentProber:
    # The current interpreter stands in for python so tests do not depend on PATH.
    return EnvironmentProber(candidates={"python": (sys.executable,), "bash": ("bash",)})


@pytest.fixture
def inline_bash_tool() -> Tool:
    return Tool(name="inline", description="Inline bash", script="read line\necho \"got $line\"", script_type="bash")


@pytest.fixture
def inline_python_tool() -> Tool:
    return Tool(name="inline_py", description="Inline python", script=PY_ARGS_SCRIPT, script_type="python")
