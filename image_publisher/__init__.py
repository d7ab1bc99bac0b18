"""Build a container image from the repository root and publish it to a registry."""

from __future__ import annotations

from .config import PROJECT_ROOT, PublishConfig, load_config
from .errors import ConfigurationError, ExternalToolFailure, PublisherError
from .publisher import build_image, publish, push_image

__all__ = [
    "ConfigurationError",
    "ExternalToolFailure",
    "PROJECT_ROOT",
    "PublishConfig",
    "PublisherError",
    "build_image",
    "load_config",
    "publish",
    "push_image",
]
