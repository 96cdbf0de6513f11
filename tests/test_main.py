"""
Tests the command line entrypoint, with logging configuration and the run itself patched out
"""

import pytest

import mtsboot.__main__ as entry
from mtsboot.low.errors import BootstrapError, HostSpecError


@pytest.fixture
def captured(monkeypatch):
    calls = []
    monkeypatch.setattr(entry, "configure_logging", lambda options: calls.append(("logging", options)))
    return calls


class _Result:
    def __init__(self, plugin):
        self.plugin = plugin
        self.instance = None
        self.closed = False

    def close(self):
        self.closed = True


def test_options_passed_through(monkeypatch, captured):
    results = []

    def fake_run(options):
        captured.append(("run", options))
        results.append(_Result(plugin=object()))
        return results[-1]

    monkeypatch.setattr(entry, "run", fake_run)
    entry.main("gaussian", "a", "b", processors=0, connect=["render1", "render2"], node_name="n1", quiet=True)

    (_, options), (_, same) = captured
    assert options is same
    assert options.utility == "gaussian"
    assert options.arguments == ["a", "b"]
    assert options.processors == 0
    assert options.connect == ["render1", "render2"]
    assert options.node_name == "n1"
    assert options.quiet
    assert results[0].closed


def test_fatal_error_exit_code(monkeypatch, captured):
    def failing_run(options):
        raise BootstrapError(HostSpecError("x:y", "port 'y' is not a number"))

    monkeypatch.setattr(entry, "run", failing_run)
    with pytest.raises(SystemExit) as e:
        entry.main("gaussian", processors=1)
    assert e.value.code == 1


def test_missing_utility(monkeypatch, captured):
    result = _Result(plugin=None)
    monkeypatch.setattr(entry, "run", lambda options: result)
    with pytest.raises(SystemExit) as e:
        entry.main(processors=1)
    assert e.value.code == 1
    assert result.closed


def test_invalid_processors(captured):
    with pytest.raises(SystemExit) as e:
        entry.main("gaussian", processors=-3)
    assert e.value.code == 1
    assert captured == []


def test_repeated_flags_are_gathered():
    assert entry.gather_repeated(["gaussian", "-c", "render1", "--connect=render2;render3", "-p", "0", "-c", "alice@render4"]) == [
        "gaussian",
        "-p",
        "0",
        "--connect=render1;render2;render3;alice@render4",
    ]
    assert entry.gather_repeated(["gaussian", "-a", "/a", "-a", "/b"]) == ["gaussian", "--add_paths=/a;/b"]
    assert entry.gather_repeated(["gaussian", "-c", "render1", "--", "--help"]) == ["gaussian", "--connect=render1", "--", "--help"]
    with pytest.raises(ValueError):
        entry.gather_repeated(["gaussian", "-c"])


def test_cli_repeated_connect(monkeypatch, captured):
    def fake_run(options):
        captured.append(("run", options))
        return _Result(plugin=object())

    monkeypatch.setattr(entry, "run", fake_run)
    entry.cli(["gaussian", "-c", "render1", "-c", "render2:7000;alice@render3", "-p", "0"])

    (_, options) = captured[-1]
    assert options.utility == "gaussian"
    assert options.processors == 0
    assert options.host_list() == "render1;render2:7000;alice@render3"
    assert [spec.host for spec in options.bootstrap_config().hosts] == ["render1", "render2", "render3"]
