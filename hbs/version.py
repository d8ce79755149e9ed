from __future__ import annotations

from importlib import metadata


def tool_version() -> str:
    """Installed distribution version; imports nothing else from the package."""
    try:
        return metadata.version("hbs-engine")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["tool_version"]
