"""
Stream implementations -- a raw socket, and a spawned process whose stdin/stdout act as the
two directions of the stream (used for remote shell tunnels)
"""

import logging
import socket
import subprocess
from typing import BinaryIO, cast

from typing_extensions import Self

logger = logging.getLogger(__name__)

# how long a freshly spawned process must survive before we consider it started
default_startup_grace_sec = 0.5
# how long we wait for a process to exit on close before we kill it
default_shutdown_grace_sec = 3.0


class _StreamBase:
    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        raise NotImplementedError


class SocketStream(_StreamBase):
    def __init__(self, host: str, port: int, timeout_sec: float | None = None) -> None:
        self.host = host
        self.port = port
        self.socket = socket.create_connection((host, port), timeout=timeout_sec)
        self._closed = False
        logger.debug(f"connected socket stream to {host}:{port}")

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        self.socket.sendall(data)

    def read(self, size: int) -> bytes:
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self.socket.recv(remaining)
            if not chunk:
                raise EOFError(f"{self.host}:{self.port} closed after {size - remaining} of {size} bytes")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            # peer already gone
            pass
        self.socket.close()

    def __repr__(self) -> str:
        return f"SocketStream({self.host}:{self.port})"


class ShellStream(_StreamBase):
    """Wraps the standard input & output of a spawned process"""

    def __init__(
        self,
        argv: list[str],
        startup_grace_sec: float = default_startup_grace_sec,
        shutdown_grace_sec: float = default_shutdown_grace_sec,
    ) -> None:
        self.argv = argv
        self.shutdown_grace_sec = shutdown_grace_sec
        self._closed = False
        self.process = subprocess.Popen(argv, stdin=subprocess.PIPE, stdout=subprocess.PIPE)
        logger.debug(f"spawned process {self.process.pid} for {argv[0]}")
        try:
            returncode = self.process.wait(timeout=startup_grace_sec)
        except subprocess.TimeoutExpired:
            pass
        else:
            self.close()
            raise OSError(f"process {argv[0]} exited prematurely with {returncode}")
        self.stdin = cast(BinaryIO, self.process.stdin)
        self.stdout = cast(BinaryIO, self.process.stdout)

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        self.stdin.write(data)

    def read(self, size: int) -> bytes:
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self.stdout.read(remaining)
            if not chunk:
                raise EOFError(f"process {self.process.pid} closed after {size - remaining} of {size} bytes")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def flush(self) -> None:
        self.stdin.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for pipe in (self.process.stdin, self.process.stdout):
            if pipe is not None:
                try:
                    pipe.close()
                except OSError as e:
                    logger.warning(f"gotten {repr(e)} when closing pipe of {self.process.pid}")
        if self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=self.shutdown_grace_sec)
            except subprocess.TimeoutExpired:
                logger.warning(f"process {self.process.pid} did not terminate in time, killing")
                self.process.kill()
                self.process.wait()

    def __repr__(self) -> str:
        return f"ShellStream({self.argv[0]}, pid={self.process.pid})"
