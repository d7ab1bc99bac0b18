"""Build a container image from the repository root and push it to its registry."""

from __future__ import annotations

import subprocess
from typing import Callable, List

from .config import PublishConfig
from .errors import ExternalToolFailure
from .logging import get_logger

LOGGER = get_logger(__name__)

# Exit status a POSIX shell reports for a command it cannot find or execute.
TOOL_NOT_RUNNABLE = 127


def _echo(message: str) -> None:
    print(message, flush=True)


def build_command(config: PublishConfig) -> List[str]:
    """Return the argv used to build ``config.image_url`` from the build context."""

    cmd = [config.tool, "build", "--tag", config.image_url]
    if config.dockerfile is not None:
        cmd.extend(["-f", str(config.dockerfile)])
    for key, value in config.build_args.items():
        cmd.extend(["--build-arg", f"{key}={value}"])
    for key, value in config.labels.items():
        cmd.extend(["--label", f"{key}={value}"])
    cmd.append(str(config.context))
    return cmd


def push_command(config: PublishConfig) -> List[str]:
    return [config.tool, "push", config.image_url]


def _run_step(step: str, cmd: List[str], config: PublishConfig) -> None:
    context = {"extra_context": {"step": step, "tool": config.tool}}
    LOGGER.debug("Running %s step: %s (cwd=%s)", step, " ".join(cmd), config.context, extra=context)
    try:
        subprocess.run(cmd, cwd=config.context, check=True)
    except subprocess.CalledProcessError as exc:
        LOGGER.info("%s step failed with exit status %s", step, exc.returncode, extra=context)
        raise ExternalToolFailure(
            f"'{config.tool} {step}' exited with status {exc.returncode}",
            step=step,
            command=cmd,
            returncode=exc.returncode,
        ) from exc
    except OSError as exc:
        LOGGER.info("%s step could not start %s: %s", step, config.tool, exc, extra=context)
        raise ExternalToolFailure(
            f"Could not run '{config.tool}' in {config.context}: {exc}",
            step=step,
            command=cmd,
            returncode=TOOL_NOT_RUNNABLE,
        ) from exc


def build_image(config: PublishConfig) -> str:
    """Build the image and tag it with ``config.image_url``.

    Returns:
        The image reference that was built.

    Raises:
        ExternalToolFailure: the build tool exited non-zero or could not be started.
    """

    _run_step("build", build_command(config), config)
    return config.image_url


def push_image(config: PublishConfig) -> None:
    """Push ``config.image_url`` to its registry."""

    _run_step("push", push_command(config), config)


def publish(config: PublishConfig, echo: Callable[[str], None] = _echo) -> str:
    """Build then push ``config.image_url``, writing progress lines through ``echo``.

    The first failing step raises ``ExternalToolFailure``; nothing after it runs
    and no confirmation line is written.
    """

    echo(f"Building and pushing Docker image: {config.image_url}")

    echo("Building image...")
    image_ref = build_image(config)

    echo(f"Pushing image to {config.registry_name}...")
    push_image(config)

    echo(f"Docker image successfully pushed: {image_ref}")
    return image_ref


__all__ = ["TOOL_NOT_RUNNABLE", "build_command", "build_image", "publish", "push_command", "push_image"]
