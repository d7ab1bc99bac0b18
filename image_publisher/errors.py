"""Exception hierarchy raised by the image publisher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class PublisherError(RuntimeError):
    message: str
    code: str = "publisher_error"
    metadata: Dict[str, Any] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.metadata is None:
            self.metadata = {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "metadata": self.metadata}


@dataclass
class ConfigurationError(PublisherError):
    code: str = "configuration_error"


@dataclass
class ExternalToolFailure(PublisherError):
    """A build or push invocation exited non-zero (or could not be spawned)."""

    code: str = "external_tool_failure"
    step: str = ""
    command: List[str] = field(default_factory=list)
    returncode: int = 1

    def __post_init__(self) -> None:
        super().__post_init__()
        self.metadata.setdefault("step", self.step)
        self.metadata.setdefault("command", list(self.command))
        self.metadata.setdefault("returncode", self.returncode)


__all__ = ["ConfigurationError", "ExternalToolFailure", "PublisherError"]
