"""
Core data structures -- host descriptors, workers and the stream contract
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PORT = 7554
DEFAULT_REMOTE_PATH = "~/mitsuba"

LOCAL_PREFIX = "wrk"
REMOTE_PREFIX = "net"


# Host descriptors
class DirectHost(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["direct"] = "direct"
    host: str = Field(min_length=1, description="host name or address of a listening server")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)

    @property
    def descriptor(self) -> str:
        return f"{self.host}:{self.port}"


class TunnelHost(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["tunnel"] = "tunnel"
    user: str = Field(min_length=1)
    host: str = Field(min_length=1)
    remote_path: str = Field(
        DEFAULT_REMOTE_PATH,
        description="directory on the remote host where the framework is checked out",
    )

    @property
    def descriptor(self) -> str:
        return f"{self.user}@{self.host}:{self.remote_path}"


HostSpec = DirectHost | TunnelHost


# Transport
@runtime_checkable
class Stream(Protocol):
    """Bidirectional byte stream to a remote worker. The protocol spoken over it is not our concern"""

    @property
    def closed(self) -> bool:
        raise NotImplementedError

    def write(self, data: bytes) -> None:
        raise NotImplementedError

    def read(self, size: int) -> bytes:
        """Reads exactly `size` bytes, raises EOFError if the peer goes away before that"""
        raise NotImplementedError

    def flush(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


# Workers
class WorkerState(int, Enum):
    created = auto()
    connected = auto()
    registered = auto()
    active = auto()
    disconnected = auto()


@dataclass(frozen=True)
class LocalWorker:
    name: str


@dataclass(frozen=True)
class RemoteWorker:
    name: str
    spec: HostSpec
    stream: Stream = field(compare=False, repr=False)


# NOTE closed set -- no third kind of worker is expected, dispatch with assert_never
Worker = LocalWorker | RemoteWorker


def local_name(idx: int) -> str:
    return f"{LOCAL_PREFIX}{idx}"


def remote_name(idx: int) -> str:
    return f"{REMOTE_PREFIX}{idx}"
