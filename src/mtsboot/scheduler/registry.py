import logging
from typing import Protocol, runtime_checkable

from mtsboot.low.core import LocalWorker, RemoteWorker, Worker, WorkerState
from mtsboot.low.func import assert_never

logger = logging.getLogger(__name__)


@runtime_checkable
class SchedulerLike(Protocol):
    """The subset of the scheduler the bootstrap relies on"""

    def register_worker(self, worker: Worker) -> None:
        raise NotImplementedError

    def unregister_worker(self, name: str) -> Worker:
        raise NotImplementedError

    def start(self) -> None:
        raise NotImplementedError


class Scheduler:
    def __init__(self) -> None:
        # NOTE dicts keep insertion order, which is the registration order
        self._workers: dict[str, Worker] = {}
        self._states: dict[str, WorkerState] = {}
        self.running = False

    @property
    def workers(self) -> list[str]:
        return list(self._workers.keys())

    def get(self, name: str) -> Worker:
        return self._workers[name]

    def state_of(self, name: str) -> WorkerState:
        return self._states[name]

    def register_worker(self, worker: Worker) -> None:
        if self.running:
            raise ValueError(f"cannot register {worker.name}, scheduler already running")
        if worker.name in self._workers:
            raise ValueError(f"double registration of {worker.name}")
        self._workers[worker.name] = worker
        self._states[worker.name] = WorkerState.registered
        logger.debug(f"registered worker {worker.name}")

    def unregister_worker(self, name: str) -> Worker:
        if name not in self._workers:
            raise KeyError(f"worker {name} not registered")
        self._states.pop(name)
        return self._workers.pop(name)

    def start(self) -> None:
        if self.running:
            raise ValueError("scheduler already running")
        self.running = True
        for name in self._workers:
            self._states[name] = WorkerState.active
        logger.info(f"scheduler started with {len(self._workers)} workers")

    def stop(self) -> None:
        for name, worker in self._workers.items():
            if isinstance(worker, RemoteWorker):
                try:
                    worker.stream.close()
                except Exception as e:
                    logger.warning(f"gotten {repr(e)} when closing stream of {name}")
            elif isinstance(worker, LocalWorker):
                pass
            else:
                assert_never(worker)
            self._states[name] = WorkerState.disconnected
        self.running = False
        logger.debug("scheduler stopped")
