"""Scene building, frame lifecycle and editing-engine bridge runtime."""

from importlib.metadata import PackageNotFoundError, version as _dist_version


def version() -> str:
    """Return the installed distribution version."""
    try:
        return _dist_version("scenekit")
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["version"]
