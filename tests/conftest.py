import pytest

from mtsboot.scheduler.registry import Scheduler


@pytest.fixture(scope="function")
def scheduler():
    return Scheduler()


@pytest.fixture(scope="function")
def journal():
    return []
