"""Configuration model and loaders for the image publisher."""

from __future__ import annotations

import json
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, MutableMapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .errors import ConfigurationError

PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]

ENV_VARS: Dict[str, str] = {
    "IMAGE_URL": "image_url",
    "IMAGE_PUBLISHER_CONTEXT": "context",
    "IMAGE_PUBLISHER_TOOL": "tool",
    "IMAGE_PUBLISHER_DOCKERFILE": "dockerfile",
    "IMAGE_PUBLISHER_REGISTRY_NAME": "registry_name",
}

STRING_MAPPINGS = ("build_args", "labels")


class PublishConfig(BaseModel):
    """Resolved settings for a single build-and-push run."""

    image_url: str
    context: Path = PROJECT_ROOT
    tool: str = "docker"
    dockerfile: Optional[Path] = None
    build_args: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, str] = Field(default_factory=dict)
    registry_name: str = "Artifact Registry"

    @field_validator("image_url")
    @classmethod
    def _require_image_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("image_url must be a non-empty image reference")
        return value

    @field_validator("tool")
    @classmethod
    def _require_tool(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("tool must name a container build executable")
        return value

    @field_validator("build_args", "labels", mode="before")
    @classmethod
    def _stringify_values(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {str(key): str(item) for key, item in value.items()}
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "PublishConfig":
        self.context = self.context.expanduser().resolve()
        if not self.context.is_dir():
            raise ValueError(f"build context {self.context} is not a directory")
        if self.dockerfile is not None and not self.dockerfile.is_absolute():
            self.dockerfile = self.context / self.dockerfile
        return self


def _merge_dict(base: MutableMapping[str, Any], updates: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            base[key] = _merge_dict(deepcopy(base[key]), value)
        else:
            base[key] = deepcopy(value)
    return base


def _parse_override(override: str) -> Dict[str, Any]:
    if "=" not in override:
        raise ValueError(f"Override '{override}' must be in key=value format")
    key, raw_value = override.split("=", 1)
    nested_keys = key.split(".")
    value: Any = raw_value
    # Mapping entries and string fields keep the literal text; JSON only supplies
    # structured values (objects, lists, null).
    if not (nested_keys[0] in STRING_MAPPINGS and len(nested_keys) > 1):
        try:
            decoded = json.loads(raw_value)
        except json.JSONDecodeError:
            decoded = raw_value
        if decoded is None or isinstance(decoded, (dict, list)):
            value = decoded
    current: Dict[str, Any] = {}
    cursor = current
    for nested_key in nested_keys[:-1]:
        cursor[nested_key] = {}
        cursor = cursor[nested_key]
    cursor[nested_keys[-1]] = value
    return current


def _from_environment(environ: Mapping[str, str]) -> Dict[str, Any]:
    return {field: environ[name] for name, field in ENV_VARS.items() if name in environ}


def load_config(
    path: str | Path | None = None,
    overrides: Optional[Iterable[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PublishConfig:
    """Resolve a ``PublishConfig`` from a YAML file, the environment and overrides.

    Later sources win: file values are replaced by environment variables, which
    are replaced by ``key=value`` overrides.
    """

    payload: MutableMapping[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            try:
                payload = deepcopy(yaml.safe_load(handle) or {})
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Config file {path} is not valid YAML: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

    payload = _merge_dict(payload, _from_environment(os.environ if environ is None else environ))

    if overrides:
        for override in overrides:
            payload = _merge_dict(payload, _parse_override(override))

    try:
        return PublishConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid publisher configuration: {exc}",
            metadata={"fields": [".".join(str(part) for part in error["loc"]) for error in exc.errors()]},
        ) from exc


__all__ = ["ENV_VARS", "PROJECT_ROOT", "PublishConfig", "load_config"]
