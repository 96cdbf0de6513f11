"""
Tests the whole run, with fake transports and a fake native library
"""

import pytest

from fakes import FakeConnector, library_factory

from mtsboot.config import Options
from mtsboot.launcher import ExecutionContext, run
from mtsboot.low.errors import BootstrapError, ErrorKind, InstantiationError, PluginLoadError
from mtsboot.plugin.module import DESCRIPTION_SYMBOL, FACTORY_SYMBOL
from mtsboot.plugin.native import library_suffix
from mtsboot.scheduler.registry import Scheduler


@pytest.fixture
def plugin_dir(tmp_path):
    (tmp_path / "plugins").mkdir()
    (tmp_path / "plugins" / f"gaussian{library_suffix}").write_bytes(b"")
    return tmp_path


def make_symbols(contexts: list, accept: bool = True):
    def create(context):
        contexts.append(context)
        return 42 if accept else None

    return {DESCRIPTION_SYMBOL: lambda: b"Gaussian blur", FACTORY_SYMBOL: create}


def test_run(plugin_dir, journal):
    contexts: list = []
    connector = FakeConnector()
    options = Options(utility="gaussian", arguments=["-x"], processors=2, connect="render1;alice@render2", add_paths=[str(plugin_dir)])
    result = run(options, connector, library_factory(journal, make_symbols(contexts)))

    scheduler = result.context.scheduler
    assert scheduler.running
    assert scheduler.workers == ["wrk0", "wrk1", "net0", "net1"]
    assert result.instance == 42
    assert contexts == [result.context]
    assert isinstance(result.context, ExecutionContext)
    assert result.context.arguments == ["-x"]
    assert journal[0] == ("load", str(plugin_dir / "plugins" / f"gaussian{library_suffix}"))

    result.close()
    assert not result.plugin.loaded
    assert all(stream.closed for stream in connector.streams)


def test_host_failure_stops_before_plugin(plugin_dir, journal):
    scheduler = Scheduler()
    options = Options(utility="gaussian", processors=1, connect="render1;render2", add_paths=[str(plugin_dir)])
    with pytest.raises(BootstrapError) as e:
        run(options, FakeConnector(failing={"render2"}), library_factory(journal, make_symbols([])), scheduler)
    assert e.value.cause_kind == ErrorKind.connection
    assert not scheduler.running
    assert scheduler.workers == []
    assert journal == []


def test_malformed_hosts(journal):
    with pytest.raises(BootstrapError) as e:
        run(Options(processors=1, connect="render1:nope"), FakeConnector(), library_factory(journal, {}))
    assert e.value.cause_kind == ErrorKind.host_spec


def test_missing_plugin(tmp_path, journal):
    scheduler = Scheduler()
    options = Options(utility="unknown", processors=1, add_paths=[str(tmp_path)])
    with pytest.raises(PluginLoadError):
        run(options, FakeConnector(), library_factory(journal, {}), scheduler)
    assert not scheduler.running


def test_rejected_context_releases_everything(plugin_dir, journal):
    connector = FakeConnector()
    options = Options(utility="gaussian", processors=0, connect="render1", add_paths=[str(plugin_dir)])
    with pytest.raises(InstantiationError):
        run(options, connector, library_factory(journal, make_symbols([], accept=False)))
    assert journal[-1][0] == "unload"
    assert connector.streams[0].closed


def test_no_utility(journal):
    result = run(Options(processors=1), FakeConnector(), library_factory(journal, {}))
    assert result.plugin is None
    assert result.context.scheduler.workers == ["wrk0"]
