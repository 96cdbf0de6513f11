"""
Drives a whole run: hosts parsing, pool bootstrap, scheduler start and the utility plugin
instantiation. Any failure releases what has been acquired so far and propagates -- the
scheduler is never started with a partial pool, and the plugin never sees a failed pool
"""

import logging
import logging.config
from dataclasses import dataclass
from typing import Any

from mtsboot.config import Options, logging_config
from mtsboot.low.errors import BootstrapError, HostSpecError
from mtsboot.plugin.module import LibraryFactory, PluginHandle, load
from mtsboot.plugin.native import CtypesLibrary
from mtsboot.pool.bootstrap import PoolHandle, bootstrap
from mtsboot.resolver import FileResolver
from mtsboot.scheduler.registry import Scheduler
from mtsboot.transport.connect import Connector, connect
from mtsboot.version import __version__

logger = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    """What a utility plugin receives on instantiation"""

    scheduler: Scheduler
    resolver: FileResolver
    pool: PoolHandle
    arguments: list[str]


@dataclass
class LaunchResult:
    context: ExecutionContext
    plugin: PluginHandle | None
    instance: Any

    def close(self) -> None:
        self.context.scheduler.stop()
        if self.plugin is not None:
            self.plugin.close()


def configure_logging(options: Options) -> None:
    logging.config.dictConfig(logging_config(options.node_name, options.quiet, options.verbose))


def run(
    options: Options,
    connector: Connector = connect,
    library_factory: LibraryFactory = CtypesLibrary,
    scheduler: Scheduler | None = None,
) -> LaunchResult:
    logger.info(f"mtsboot version {__version__}")
    resolver = FileResolver()
    for paths in options.add_paths:
        resolver.add_paths(paths)

    try:
        config = options.bootstrap_config()
    except HostSpecError as e:
        raise BootstrapError(e) from e

    scheduler = scheduler if scheduler is not None else Scheduler()
    pool = bootstrap(config, scheduler, connector)
    pool.start()
    context = ExecutionContext(scheduler=scheduler, resolver=resolver, pool=pool, arguments=options.arguments)

    if options.utility is None:
        logger.warning("no utility name given, only the worker pool has been started")
        return LaunchResult(context=context, plugin=None, instance=None)

    plugin: PluginHandle | None = None
    try:
        plugin = load(resolver.plugin_path(options.utility), library_factory)
        logger.info(f"loaded utility {options.utility}: {plugin.describe()}")
        instance = plugin.instantiate(context)
    except Exception:
        if plugin is not None:
            plugin.close()
        scheduler.stop()
        raise
    return LaunchResult(context=context, plugin=plugin, instance=instance)
