import stat
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from image_publisher.config import ENV_VARS  # noqa: E402

STUB_TOOL = """#!/bin/sh
step="$1"
{
    pwd -P
    for arg in "$@"; do
        printf '%s\\n' "$arg"
    done
} > "$STUB_LOG_DIR/$step.args"
echo "stub $step output"
case "$step" in
    build) exit "${STUB_BUILD_EXIT:-0}" ;;
    push) exit "${STUB_PUSH_EXIT:-0}" ;;
esac
exit 0
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "stub_tool: runs a shell stub in place of the container build tool")


@pytest.fixture(autouse=True)
def clean_publisher_env(monkeypatch):
    """Keep the caller's environment out of configuration resolution."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("IMAGE_PUBLISHER_LOG_LEVEL", raising=False)
    monkeypatch.delenv("IMAGE_PUBLISHER_JSON_LOGS", raising=False)


class StubTool:
    """Executable stand-in for docker that records each invocation."""

    def __init__(self, root: Path) -> None:
        self.path = root / "bin" / "fake-docker"
        self.log_dir = root / "calls"
        self.path.parent.mkdir(parents=True)
        self.log_dir.mkdir()
        self.path.write_text(STUB_TOOL, encoding="utf-8")
        self.path.chmod(self.path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    def ran(self, step: str) -> bool:
        return (self.log_dir / f"{step}.args").exists()

    def cwd(self, step: str) -> str:
        return self._lines(step)[0]

    def argv(self, step: str) -> list[str]:
        return self._lines(step)[1:]

    def _lines(self, step: str) -> list[str]:
        return (self.log_dir / f"{step}.args").read_text(encoding="utf-8").splitlines()


@pytest.fixture
def stub_tool(tmp_path, monkeypatch):
    tool = StubTool(tmp_path / "stub")
    monkeypatch.setenv("STUB_LOG_DIR", str(tool.log_dir))
    return tool
