from __future__ import annotations

from importlib import metadata

DISTRIBUTION = "template-pages"

# Версия для запуска из исходников без установки (python -m tpages.cli)
UNINSTALLED_VERSION = "0.0.0+source"


def tool_version() -> str:
    """Версия установленного дистрибутива template-pages для `tpages --version`."""
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return UNINSTALLED_VERSION


__all__ = ["tool_version", "DISTRIBUTION"]
