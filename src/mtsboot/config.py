"""
Configuration of a run -- the command line options, their translation into the bootstrap
config, and the logging setup
"""

import os
import socket

from pydantic import BaseModel, Field, field_validator

from mtsboot.hosts.parse import join_host_lists, parse, read_host_file
from mtsboot.pool.bootstrap import BootstrapConfig


def default_processors() -> int:
    return os.cpu_count() or 1


class Options(BaseModel):
    utility: str | None = Field(None, description="name of the utility plugin to run")
    arguments: list[str] = Field(default_factory=list, description="passed through to the utility")
    processors: int = Field(default_factory=default_processors, ge=0, description="number of local workers")
    connect: list[str] = Field(default_factory=list, description="`;`-separated host lists, concatenated")
    server_file: str | None = Field(None, description="file with additional hosts, one per line")
    node_name: str = Field(default_factory=socket.gethostname, description="used for naming the log file")
    add_paths: list[str] = Field(default_factory=list, description="`;`-separated resource search paths")
    quiet: bool = False
    verbose: bool = False

    @field_validator("connect", "add_paths", mode="before")
    @classmethod
    def _listify(cls, v):
        # NOTE single flag occurrences come as a plain value, repeated ones as a list or tuple
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return [str(e) for e in v]
        return [str(v)]

    def host_list(self) -> str:
        parts = list(self.connect)
        if self.server_file is not None:
            parts.append(read_host_file(self.server_file))
        return join_host_lists(*parts)

    def bootstrap_config(self) -> BootstrapConfig:
        return BootstrapConfig(local_count=self.processors, hosts=parse(self.host_list()))


def log_file_name(node_name: str) -> str:
    return f"mtsboot.{node_name}.log"


def logging_config(node_name: str, quiet: bool = False, verbose: bool = False, log_dir: str = ".") -> dict:
    level = "DEBUG" if verbose else "INFO"
    handlers = {
        "file": {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": os.path.join(log_dir, log_file_name(node_name)),
            "level": level,
        },
    }
    if not quiet:
        handlers["stdout"] = {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
            "level": level,
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-5s %(process)d %(name)s: %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "mtsboot": {"level": level, "handlers": list(handlers.keys()), "propagate": False},
        },
    }
