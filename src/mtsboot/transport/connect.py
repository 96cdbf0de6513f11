"""
Turns a HostSpec into a connected Stream. Direct hosts are plain tcp connections to an already
running server; tunnel hosts spawn a remote shell client which starts the server on the far end
in the stdio mode, so that the client's stdin/stdout become the stream
"""

import logging
import sys
from typing import Callable

from mtsboot.low.core import DirectHost, HostSpec, Stream, TunnelHost
from mtsboot.low.errors import TransportConnectionError
from mtsboot.low.func import Either, assert_never
from mtsboot.transport.stream import ShellStream, SocketStream, default_startup_grace_sec

logger = logging.getLogger(__name__)

# NOTE the connector seam of the pool -- anything mapping a HostSpec to a Stream, or raising
Connector = Callable[[HostSpec], Stream]

if sys.platform == "win32":
    default_shell_client = "plink.exe"
    tunnel_hint = (
        "Please ensure that passwordless authentication using plink.exe and pageant.exe is"
        " enabled (see the documentation for more information)"
    )
else:
    default_shell_client = "ssh"
    tunnel_hint = (
        "Please ensure that passwordless authentication is enabled"
        " (e.g. using ssh-agent - see the documentation for more information)"
    )


def remote_command(user: str, host: str, remote_path: str) -> str:
    """The command the remote shell executes: enter the checkout, source its environment
    and start the server listening on stdio"""
    # NOTE user and host are not part of the command itself, they are the address of the shell
    return f"bash -c 'cd {remote_path}; . setpath.sh; mtssrv -ls'"


def shell_argv(spec: TunnelHost, client: str = default_shell_client) -> list[str]:
    command = remote_command(spec.user, spec.host, spec.remote_path)
    if client.endswith("plink.exe") or client == "plink":
        return [client, "-batch", "-l", spec.user, spec.host, command]
    # NOTE `--` keeps a host starting with a dash from being read as an option
    return [client, "-l", spec.user, "--", spec.host, command]


def connect(
    spec: HostSpec,
    shell_client: str = default_shell_client,
    timeout_sec: float | None = None,
    startup_grace_sec: float = default_startup_grace_sec,
) -> Stream:
    if isinstance(spec, DirectHost):
        try:
            return SocketStream(spec.host, spec.port, timeout_sec=timeout_sec)
        # NOTE unresolvable names surface as UnicodeError, a ValueError
        except (OSError, ValueError) as e:
            raise TransportConnectionError(spec, repr(e)) from e
    elif isinstance(spec, TunnelHost):
        argv = shell_argv(spec, shell_client)
        logger.debug(f"spawning {argv} for {spec.descriptor}")
        try:
            return ShellStream(argv, startup_grace_sec=startup_grace_sec)
        # NOTE Popen raises ValueError on arguments it cannot pass on, eg embedded null bytes
        except (OSError, ValueError) as e:
            logger.warning(tunnel_hint)
            raise TransportConnectionError(spec, repr(e), hint=tunnel_hint) from e
    else:
        assert_never(spec)


def try_connect(spec: HostSpec, **kwargs) -> Either[Stream, TransportConnectionError]:
    try:
        return Either.ok(connect(spec, **kwargs))
    except TransportConnectionError as e:
        return Either.error(e)
