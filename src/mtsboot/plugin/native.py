"""
Platform specific dynamic library machinery, behind the `NativeLibrary` capability
"""

import ctypes
import logging
import os
import sys
from typing import Any, Callable, Protocol, runtime_checkable

import _ctypes

from mtsboot.low.errors import PluginLoadError, SymbolResolutionError

logger = logging.getLogger(__name__)

if sys.platform == "win32":
    library_suffix = ".dll"
elif sys.platform == "darwin":
    library_suffix = ".dylib"
else:
    library_suffix = ".so"


@runtime_checkable
class NativeLibrary(Protocol):
    def load(self, path: str) -> None:
        raise NotImplementedError

    def resolve_symbol(self, name: str) -> Callable[..., Any]:
        raise NotImplementedError

    def unload(self) -> None:
        raise NotImplementedError


# signatures of the entry points, keyed by symbol name
entry_point_types: dict[str, tuple[Any, list[Any]]] = {
    "GetDescription": (ctypes.c_char_p, []),
    "CreateInstance": (ctypes.c_void_p, [ctypes.py_object]),
}


class CtypesLibrary:
    """NativeLibrary via ctypes. Unlike plain `ctypes.CDLL`, the library is really unloaded on `unload`"""

    def __init__(self) -> None:
        self.path: str | None = None
        self.library: ctypes.CDLL | None = None

    def load(self, path: str) -> None:
        if self.library is not None:
            raise ValueError(f"already holding {self.path}, refusing to load {path}")
        mode = getattr(os, "RTLD_LAZY", 0) | getattr(os, "RTLD_LOCAL", 0)
        try:
            self.library = ctypes.CDLL(path, mode=mode)
        except OSError as e:
            raise PluginLoadError(path, e) from e
        self.path = path
        logger.debug(f"loaded {path}")

    def resolve_symbol(self, name: str) -> Callable[..., Any]:
        if self.library is None:
            raise ValueError(f"no library loaded, cannot resolve {name}")
        try:
            func = getattr(self.library, name)
        except AttributeError as e:
            raise SymbolResolutionError(str(self.path), name, e) from e
        if name in entry_point_types:
            func.restype, func.argtypes = entry_point_types[name]
        return func

    def unload(self) -> None:
        if self.library is None:
            return
        handle = self.library._handle
        self.library = None
        if sys.platform == "win32":
            _ctypes.FreeLibrary(handle)  # type: ignore[attr-defined]
        else:
            _ctypes.dlclose(handle)  # type: ignore[attr-defined]
        logger.debug(f"unloaded {self.path}")
