import logging

import pytest
import rpprop as rpp

from rpprop import FlashPrimitive
from rpprop.engine import native

from utilities import get_available_backends

# Define list of calculation backends
BACKENDS = get_available_backends()


@pytest.fixture
def warn_on(monkeypatch):
    """
    Make one NaN-guarded engine output leave a warning in the engine buffer.

    Returns a setter taking the name of the AbstractState method that warns.
    """
    buffer = []
    source = {"name": None}
    get_or_nan = native._get_or_nan

    def pop_warning():
        if buffer:
            return -1, buffer.pop()
        return 0, ""

    def warning_get_or_nan(function):
        if getattr(function, "__name__", "") == source["name"]:
            buffer.append(f"{source['name']} is extrapolated")
        return get_or_nan(function)

    monkeypatch.setattr(native, "_pop_warning", pop_warning)
    monkeypatch.setattr(native, "_get_or_nan", warning_get_or_nan)

    def set_source(name):
        source["name"] = name

    return set_source


def make_engine(backend, name="R134A"):
    engine = rpp.NativeEngine(backend)
    engine.configure((name,), (1.0,))
    return engine


def engine_warnings(caplog):
    return [r.getMessage() for r in caplog.records if "engine warning" in r.getMessage()]


@pytest.mark.parametrize("backend", BACKENDS)
def test_static_info_reports_its_own_warnings(backend, warn_on, caplog):
    engine = make_engine(backend)
    warn_on("acentric_factor")
    with caplog.at_level(logging.WARNING, logger="rpprop"):
        engine.static_info(0)
        engine.critical_point()
    assert engine_warnings(caplog) == [
        "info: engine warning -1: acentric_factor is extrapolated"
    ]


@pytest.mark.parametrize("backend", BACKENDS)
def test_flash_reports_its_own_warnings(backend, warn_on, caplog):
    engine = make_engine(backend)
    warn_on("speed_sound")
    with caplog.at_level(logging.WARNING, logger="rpprop"):
        engine.flash_by_pair(FlashPrimitive.TP, 300.0, 100.0)
        engine.properties_by_state(300.0, 0.05)
        engine.critical_point()
    assert engine_warnings(caplog) == [
        "TP: engine warning -1: speed_sound is extrapolated",
        "properties: engine warning -1: speed_sound is extrapolated",
    ]


@pytest.mark.parametrize("backend", BACKENDS)
def test_warning_buffer_is_empty_after_each_call(backend):
    engine = make_engine(backend)
    engine.static_info(0)
    assert native._pop_warning() == (0, "")
    engine.flash_by_pair(FlashPrimitive.TP, 300.0, 100.0)
    assert native._pop_warning() == (0, "")


@pytest.mark.parametrize("backend", BACKENDS)
def test_unconfigured_engine_raises(backend):
    engine = rpp.NativeEngine(backend)
    with pytest.raises(rpp.EngineError) as excinfo:
        engine.flash_by_pair(FlashPrimitive.TP, 300.0, 100.0)
    assert excinfo.value.routine == "TP"
