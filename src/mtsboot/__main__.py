"""
Command line entrypoint

Example:
```
python -m mtsboot <utility> [arguments] -p 0 -c "host1;user@host2:~/checkout" -s hosts.txt -v
```

 -p count    number of local workers (default: detected processor count)
 -c hosts    `;`-separated host list, `host[:port]` or `user@host[:path]`. May be repeated
 -s file     additional hosts, one per line, lines starting with `#` ignored
 -n name     node name, used for the log file name (default: host name)
 -a paths    `;`-separated resource search paths
 -q          no log output to stdout
 -v          debug log output
"""

import logging
import sys

import fire
from pydantic import ValidationError

from mtsboot.config import Options
from mtsboot.launcher import configure_logging, run
from mtsboot.low.errors import MtsbootError

logger = logging.getLogger("mtsboot.main")


def main(
    utility: str | None = None,
    *arguments: str,
    processors: int | None = None,
    connect: str | list[str] | None = None,
    server_file: str | None = None,
    node_name: str | None = None,
    add_paths: str | list[str] | None = None,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Bootstraps the worker pool and runs the given utility plugin on it"""
    overrides = {
        k: v
        for k, v in {"processors": processors, "node_name": node_name}.items()
        if v is not None
    }
    try:
        options = Options(
            utility=utility,
            arguments=[str(a) for a in arguments],
            connect=connect,
            server_file=server_file,
            add_paths=add_paths,
            quiet=quiet,
            verbose=verbose,
            **overrides,
        )
    except ValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(options)
    try:
        result = run(options)
    except MtsbootError as e:
        logger.critical(f"Caught a critical exception: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Caught a critical exception of unexpected type: {repr(e)}")
        sys.exit(1)

    if result.plugin is None:
        print("A utility name must be supplied!", file=sys.stderr)
        result.close()
        sys.exit(1)
    logger.debug(f"utility {utility} instantiated as {result.instance!r}, shutting down")
    result.close()


# flags which may be repeated, their values are concatenated with `;`
repeatable_flags = {"-c": "--connect", "--connect": "--connect", "-a": "--add_paths", "--add_paths": "--add_paths"}


def gather_repeated(argv: list[str]) -> list[str]:
    """Folds every occurrence of a repeatable flag into a single one -- fire itself keeps only the
    last occurrence"""
    rest: list[str] = []
    gathered: dict[str, list[str]] = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            rest.extend(argv[i:])
            break
        flag, eq, value = arg.partition("=")
        if flag in repeatable_flags:
            if not eq:
                if i + 1 >= len(argv):
                    raise ValueError(f"flag {flag} requires a value")
                value = argv[i + 1]
                i += 1
            gathered.setdefault(repeatable_flags[flag], []).append(value)
        else:
            rest.append(arg)
        i += 1
    folded = [f"{flag}={';'.join(values)}" for flag, values in gathered.items()]
    if "--" in rest:
        split = rest.index("--")
        return rest[:split] + folded + rest[split:]
    return rest + folded


def cli(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    try:
        command = gather_repeated(argv)
    except ValueError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        sys.exit(1)
    fire.Fire(main, command=command)


if __name__ == "__main__":
    cli()
