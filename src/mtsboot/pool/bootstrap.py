import logging

from pydantic import BaseModel, Field

from mtsboot.low.core import HostSpec, LocalWorker, RemoteWorker, Worker, WorkerState, local_name, remote_name
from mtsboot.low.errors import BootstrapError
from mtsboot.low.func import Either, assert_never
from mtsboot.scheduler.registry import SchedulerLike
from mtsboot.transport.connect import Connector, connect

logger = logging.getLogger(__name__)


class BootstrapConfig(BaseModel):
    local_count: int = Field(ge=0, description="number of local workers, 0 for a scheduling-only node")
    hosts: list[HostSpec] = Field(default_factory=list, description="remote hosts, in worker naming order")


def _release(worker: Worker) -> None:
    if isinstance(worker, RemoteWorker):
        try:
            worker.stream.close()
        except Exception as e:
            logger.warning(f"gotten {repr(e)} when closing stream of {worker.name}")
    elif isinstance(worker, LocalWorker):
        pass
    else:
        assert_never(worker)


class PoolHandle:
    """A fully registered, not yet started pool"""

    def __init__(self, scheduler: SchedulerLike, workers: list[Worker], history: dict[str, list[WorkerState]] | None = None) -> None:
        self.scheduler = scheduler
        self.workers = workers
        # lifecycle transitions each worker went through, in order
        self.history: dict[str, list[WorkerState]] = history if history is not None else {w.name: [] for w in workers}
        self.started = False

    @property
    def names(self) -> list[str]:
        return [worker.name for worker in self.workers]

    def start(self) -> None:
        self.scheduler.start()
        self.started = True
        for states in self.history.values():
            states.append(WorkerState.active)

    def close(self) -> None:
        """Unregisters and releases workers of a pool which has not been started. Once
        started, the workers are owned by the scheduler"""
        if self.started:
            return
        _rollback(self.scheduler, self.workers)
        for worker in self.workers:
            self.history.setdefault(worker.name, []).append(WorkerState.disconnected)
        self.workers = []


def _rollback(scheduler: SchedulerLike, registered: list[Worker]) -> None:
    for worker in reversed(registered):
        try:
            scheduler.unregister_worker(worker.name)
        except Exception as e:
            logger.warning(f"gotten {repr(e)} when unregistering {worker.name}")
        _release(worker)


def bootstrap(config: BootstrapConfig, scheduler: SchedulerLike, connector: Connector = connect) -> PoolHandle:
    registered: list[Worker] = []
    history: dict[str, list[WorkerState]] = {}
    try:
        for i in range(config.local_count):
            local = LocalWorker(local_name(i))
            history[local.name] = [WorkerState.created]
            scheduler.register_worker(local)
            history[local.name].append(WorkerState.registered)
            registered.append(local)
        logger.debug(f"registered {config.local_count} local workers")

        for i, spec in enumerate(config.hosts):
            name = remote_name(i)
            history[name] = [WorkerState.created]
            logger.info(f"connecting to {spec.descriptor}")
            stream = connector(spec)
            history[name].append(WorkerState.connected)
            remote = RemoteWorker(name, spec, stream)
            try:
                scheduler.register_worker(remote)
            except BaseException:
                _release(remote)
                raise
            history[name].append(WorkerState.registered)
            registered.append(remote)
            logger.debug(f"registered {remote.name} for {spec.descriptor}")
    except Exception as e:
        logger.error(f"bootstrap aborted, releasing {len(registered)} workers: {e}")
        _rollback(scheduler, registered)
        raise BootstrapError(e) from e
    except BaseException:
        _rollback(scheduler, registered)
        raise

    return PoolHandle(scheduler, registered, history)


def try_bootstrap(config: BootstrapConfig, scheduler: SchedulerLike, connector: Connector = connect) -> Either[PoolHandle, BootstrapError]:
    try:
        return Either.ok(bootstrap(config, scheduler, connector))
    except BootstrapError as e:
        return Either.error(e)
