"""
Error taxonomy of the bootstrap. Every error knows its `kind`, so that callers receiving
an error value (see `low.func.Either`) can branch on it without an isinstance chain
"""

from enum import Enum, auto
from typing import Any


class ErrorKind(int, Enum):
    plugin_load = auto()
    symbol_resolution = auto()
    instantiation = auto()
    host_spec = auto()
    connection = auto()
    bootstrap = auto()


class MtsbootError(Exception):
    kind: ErrorKind


class PluginLoadError(MtsbootError):
    """The plugin library is missing or cannot be loaded"""

    kind = ErrorKind.plugin_load

    def __init__(self, path: str, cause: Any) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f'Error while loading plugin "{path}": {cause}')


class SymbolResolutionError(PluginLoadError):
    """The library loaded, but does not export one of the required entry points"""

    kind = ErrorKind.symbol_resolution

    def __init__(self, path: str, symbol: str, cause: Any) -> None:
        self.symbol = symbol
        super().__init__(path, cause)
        # NOTE overriding the message set by PluginLoadError
        self.args = (f'Could not resolve symbol "{symbol}" in "{path}": {cause}',)


class InstantiationError(MtsbootError):
    kind = ErrorKind.instantiation

    def __init__(self, path: str, cause: Any) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f'Plugin "{path}" failed to create an instance: {cause}')


class HostSpecError(MtsbootError):
    kind = ErrorKind.host_spec

    def __init__(self, entry: str, reason: str) -> None:
        self.entry = entry
        self.reason = reason
        super().__init__(f"Invalid host specification '{entry}': {reason}")


class ConnectionError(MtsbootError):
    """Transport could not be established. Tunnel failures carry a remediation hint"""

    kind = ErrorKind.connection

    def __init__(self, spec: Any, cause: Any, hint: str | None = None) -> None:
        self.spec = spec
        self.cause = cause
        self.hint = hint
        descriptor = getattr(spec, "descriptor", repr(spec))
        message = f"Could not connect to '{descriptor}': {cause}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)


# NOTE the alias is what the rest of the package imports, to keep the builtin unshadowed there
TransportConnectionError = ConnectionError


class BootstrapError(MtsbootError):
    """Wraps whichever error aborted the pool assembly"""

    kind = ErrorKind.bootstrap

    def __init__(self, cause: MtsbootError | Exception) -> None:
        self.cause = cause
        super().__init__(f"Bootstrap failed: {cause}")

    @property
    def cause_kind(self) -> ErrorKind | None:
        return getattr(self.cause, "kind", None)
