"""
Tests the plugin handle lifecycle with a fake native library
"""

import pytest

from fakes import FakeLibrary, library_factory

from mtsboot.low.errors import ErrorKind, InstantiationError, PluginLoadError, SymbolResolutionError
from mtsboot.plugin.module import DESCRIPTION_SYMBOL, FACTORY_SYMBOL, load, try_load

path = "/plugins/gaussian.so"


def symbols(create=lambda ctx: 0xBEEF):
    return {
        DESCRIPTION_SYMBOL: lambda: b"Gaussian blur utility",
        FACTORY_SYMBOL: create,
    }


def test_load_describe_instantiate(journal):
    seen = []

    def create(ctx):
        seen.append(ctx)
        return 0xBEEF

    plugin = load(path, library_factory(journal, symbols(create)))
    assert plugin.loaded
    assert plugin.describe() == "Gaussian blur utility"
    assert plugin.describe() == "Gaussian blur utility"
    context = object()
    assert plugin.instantiate(context) == 0xBEEF
    assert seen == [context]
    assert journal == [("load", path), ("resolve", DESCRIPTION_SYMBOL), ("resolve", FACTORY_SYMBOL)]

    plugin.close()
    plugin.close()
    assert not plugin.loaded
    assert journal.count(("unload", path)) == 1
    with pytest.raises(PluginLoadError):
        plugin.describe()


def test_context_manager(journal):
    with load(path, library_factory(journal, symbols())) as plugin:
        assert plugin.loaded
    assert journal[-1] == ("unload", path)


@pytest.mark.parametrize("missing", [DESCRIPTION_SYMBOL, FACTORY_SYMBOL])
def test_missing_symbol_unloads(journal, missing):
    available = symbols()
    available.pop(missing)
    with pytest.raises(SymbolResolutionError) as e:
        load(path, library_factory(journal, available))
    assert e.value.symbol == missing
    assert e.value.path == path
    assert e.value.kind == ErrorKind.symbol_resolution
    assert journal[0] == ("load", path)
    assert journal[-1] == ("unload", path)
    assert journal.count(("unload", path)) == 1

    # nothing lingers, the same path loads fine afterwards
    journal.clear()
    with load(path, library_factory(journal, symbols())) as plugin:
        assert plugin.describe() == "Gaussian blur utility"


def test_unloadable(journal):
    result = try_load(path, library_factory(journal, symbols(), loadable=False))
    assert not result.is_ok()
    assert result.e.kind == ErrorKind.plugin_load
    assert journal == []


def test_instantiation_rejected(journal):
    with load(path, library_factory(journal, symbols(create=lambda ctx: None))) as plugin:
        with pytest.raises(InstantiationError):
            plugin.instantiate(object())

    def explode(ctx):
        raise RuntimeError("bad context")

    with load(path, library_factory(journal, symbols(create=explode))) as plugin:
        with pytest.raises(InstantiationError) as e:
            plugin.instantiate(object())
    assert "bad context" in str(e.value)


def test_failing_unload_keeps_resolution_error(journal):
    class BrokenUnload(FakeLibrary):
        def unload(self):
            super().unload()
            raise OSError("dlclose failed")

    available = symbols()
    available.pop(FACTORY_SYMBOL)
    with pytest.raises(SymbolResolutionError) as e:
        load(path, lambda: BrokenUnload(journal, available))
    assert e.value.symbol == FACTORY_SYMBOL
    assert journal[-1] == ("unload", path)
