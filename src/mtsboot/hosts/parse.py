"""
Turns a `;`-separated host list into a sequence of HostSpec. Parsing is fail-fast: a single
malformed entry invalidates the whole list, no partial list is ever returned
"""

import logging
import re
from pathlib import Path

from mtsboot.low.core import DEFAULT_REMOTE_PATH, DirectHost, HostSpec, TunnelHost
from mtsboot.low.errors import HostSpecError
from mtsboot.low.func import Either

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = ";"
_port_re = re.compile(r"[0-9]+")


def tokenize(s: str, delimiters: str) -> list[str]:
    """Splits on any of the delimiter characters, empty tokens are dropped"""
    return [t for t in re.split(f"[{re.escape(delimiters)}]", s) if t]


def _parse_port(entry: str, raw: str) -> int:
    if not _port_re.fullmatch(raw):
        raise HostSpecError(entry, f"port '{raw}' is not a number")
    port = int(raw)
    if not 1 <= port <= 65535:
        raise HostSpecError(entry, f"port {port} out of range")
    return port


def _check_host(entry: str, host: str) -> None:
    # a leading dash would reach the shell client as an option
    if host.startswith("-"):
        raise HostSpecError(entry, f"host '{host}' starts with a dash")


def parse_entry(entry: str) -> HostSpec:
    if "@" in entry:
        tokens = tokenize(entry, "@:")
        if len(tokens) in (2, 3):
            _check_host(entry, tokens[1])
        if len(tokens) == 2:
            return TunnelHost(user=tokens[0], host=tokens[1], remote_path=DEFAULT_REMOTE_PATH)
        elif len(tokens) == 3:
            return TunnelHost(user=tokens[0], host=tokens[1], remote_path=tokens[2])
        else:
            raise HostSpecError(entry, f"expected user@host[:path], gotten {len(tokens)} tokens")
    else:
        tokens = tokenize(entry, ":")
        if tokens:
            _check_host(entry, tokens[0])
        if len(tokens) == 1:
            return DirectHost(host=tokens[0])
        elif len(tokens) == 2:
            return DirectHost(host=tokens[0], port=_parse_port(entry, tokens[1]))
        else:
            raise HostSpecError(entry, f"expected host[:port], gotten {len(tokens)} tokens")


def parse(raw_list: str) -> list[HostSpec]:
    specs: list[HostSpec] = []
    for segment in raw_list.split(ENTRY_SEPARATOR):
        segment = segment.strip()
        if not segment:
            continue
        specs.append(parse_entry(segment))
    logger.debug(f"parsed {len(specs)} host specs from {raw_list!r}")
    return specs


def try_parse(raw_list: str) -> Either[list[HostSpec], HostSpecError]:
    try:
        return Either.ok(parse(raw_list))
    except HostSpecError as e:
        return Either.error(e)


def read_host_file(path: str | Path) -> str:
    """Reads a host file -- one entry per line, entries starting with `#` are skipped -- into
    a `;`-separated host list"""
    try:
        content = Path(path).read_text()
    except OSError as e:
        raise HostSpecError(str(path), f"could not open host file: {e}")
    hosts: list[str] = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        # NOTE several entries on one line are permitted, a `#` starts a trailing comment
        hosts.extend(line.split("#", 1)[0].split())
    return ENTRY_SEPARATOR.join(hosts)


def join_host_lists(*parts: str) -> str:
    return ENTRY_SEPARATOR.join(part for part in parts if part)
