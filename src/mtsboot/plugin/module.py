"""
The plugin handle -- owns exactly one load of the native library, from the successful
resolution of both entry points until `close`
"""

import logging
from pathlib import Path
from typing import Any, Callable

from typing_extensions import Self

from mtsboot.low.errors import InstantiationError, MtsbootError, PluginLoadError
from mtsboot.low.func import Either
from mtsboot.plugin.native import CtypesLibrary, NativeLibrary

logger = logging.getLogger(__name__)

DESCRIPTION_SYMBOL = "GetDescription"
FACTORY_SYMBOL = "CreateInstance"

LibraryFactory = Callable[[], NativeLibrary]


class PluginHandle:
    def __init__(self, path: str | Path, library_factory: LibraryFactory = CtypesLibrary) -> None:
        self.path = str(path)
        self.library: NativeLibrary | None = None
        library = library_factory()
        library.load(self.path)
        try:
            self._get_description = library.resolve_symbol(DESCRIPTION_SYMBOL)
            self._create_instance = library.resolve_symbol(FACTORY_SYMBOL)
        except BaseException:
            try:
                library.unload()
            except Exception as e:
                # the resolution failure is what the caller needs to see
                logger.warning(f"gotten {repr(e)} when unloading {self.path}")
            raise
        # NOTE only now the handle owns the library -- any earlier exit has unloaded it above
        self.library = library
        logger.debug(f"plugin {self.path} ready")

    @property
    def loaded(self) -> bool:
        return self.library is not None

    def _require_loaded(self) -> None:
        if self.library is None:
            raise PluginLoadError(self.path, "plugin has already been unloaded")

    def describe(self) -> str:
        self._require_loaded()
        description = self._get_description()
        if isinstance(description, bytes):
            return description.decode("utf-8", errors="replace")
        return "" if description is None else str(description)

    def instantiate(self, context: Any) -> Any:
        self._require_loaded()
        try:
            instance = self._create_instance(context)
        except MtsbootError:
            raise
        except Exception as e:
            raise InstantiationError(self.path, repr(e)) from e
        if instance is None:
            raise InstantiationError(self.path, "the plugin rejected the execution context")
        return instance

    def close(self) -> None:
        # NOTE may be invoked from `__del__` of a partially constructed instance
        library = getattr(self, "library", None)
        if library is None:
            return
        self.library = None
        library.unload()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            logger.exception(f"failed to unload {getattr(self, 'path', '?')}")

    def __repr__(self) -> str:
        return f"PluginHandle({self.path}, loaded={self.loaded})"


def load(path: str | Path, library_factory: LibraryFactory = CtypesLibrary) -> PluginHandle:
    return PluginHandle(path, library_factory)


def try_load(path: str | Path, library_factory: LibraryFactory = CtypesLibrary) -> Either[PluginHandle, PluginLoadError]:
    try:
        return Either.ok(load(path, library_factory))
    except PluginLoadError as e:
        return Either.error(e)
