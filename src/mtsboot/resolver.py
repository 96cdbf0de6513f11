"""
Search paths for resources and plugins. Constructed explicitly and passed around, there is
no process wide instance
"""

import logging
from pathlib import Path

from mtsboot.low.errors import PluginLoadError
from mtsboot.plugin.native import library_suffix

logger = logging.getLogger(__name__)

PLUGIN_DIR = "plugins"


class FileResolver:
    def __init__(self, paths: list[str | Path] | None = None) -> None:
        self.paths: list[Path] = []
        for path in paths or [Path.cwd()]:
            self.add_path(path)

    def add_path(self, path: str | Path) -> None:
        path = Path(path).expanduser()
        if path not in self.paths:
            self.paths.append(path)

    def add_paths(self, paths: str) -> None:
        """Adds `;`-separated paths, in the given order"""
        for path in paths.split(";"):
            if path:
                self.add_path(path)

    def resolve(self, name: str | Path) -> Path:
        """First existing match across search paths, or the name unchanged if there is none"""
        candidate = Path(name)
        if candidate.is_absolute():
            return candidate
        for path in self.paths:
            if (path / candidate).exists():
                return path / candidate
        return candidate

    def plugin_path(self, name: str) -> Path:
        direct = Path(name).expanduser()
        if direct.suffix == library_suffix and direct.is_file():
            return direct
        for relative in (Path(PLUGIN_DIR) / f"{name}{library_suffix}", Path(f"{name}{library_suffix}")):
            resolved = self.resolve(relative)
            if resolved.is_file():
                logger.debug(f"resolved plugin {name} to {resolved}")
                return resolved
        raise PluginLoadError(name, f"plugin not found on search paths {[str(p) for p in self.paths]}")
