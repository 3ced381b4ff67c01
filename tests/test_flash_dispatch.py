import pytest
import numpy as np
import rpprop as rpp

from rpprop import FlashPrimitive, PhaseCurve
from rpprop.flash import (
    compute_state,
    extract_output,
    flash_by_quality,
    get_property,
    resolve_pair,
    select_curve,
    FlashRequest,
)

from utilities import FakeEngine

D_L = FakeEngine.D_LIQUID
D_V = FakeEngine.D_VAPOR


# ------------------------------------------------------------------------------------ #
# Pair resolution
# ------------------------------------------------------------------------------------ #

@pytest.mark.parametrize("primitive", list(FlashPrimitive), ids=lambda p: p.name)
def test_resolve_pair_is_commutative(primitive):
    k1, k2 = (k.value for k in primitive.arguments)
    forward = resolve_pair(k1, 0.25, k2, 0.75)
    backward = resolve_pair(k2, 0.75, k1, 0.25)
    assert forward == backward == FlashRequest(primitive, 0.25, 0.75)


@pytest.mark.parametrize(
    "args, expected",
    [
        (("rho", 12.0, "t", 300.0), FlashRequest(FlashPrimitive.TD, 300.0, 12.0)),
        (("h", 25000.0, "P", 500.0), FlashRequest(FlashPrimitive.PH, 500.0, 25000.0)),
        (("S", 120.0, "h", 25000.0), FlashRequest(FlashPrimitive.HS, 25000.0, 120.0)),
        (("q", 0.3, "T", 280.0), FlashRequest(FlashPrimitive.TQ, 280.0, 0.3)),
    ],
)
def test_resolve_pair_orders_arguments(args, expected):
    assert resolve_pair(*args) == expected


@pytest.mark.parametrize(
    "key1, key2",
    [("T", "T"), ("E", "S"), ("D", "Q"), ("H", "Q"), ("X", "T"), ("Cp", "P")],
)
def test_unsupported_pair(key1, key2):
    with pytest.raises(rpp.UnsupportedPairError) as excinfo:
        resolve_pair(key1, 1.0, key2, 2.0)
    message = str(excinfo.value)
    assert f"({key1}, {key2})" in message
    for pair in ["(T,P)", "(T,D)", "(T,H)", "(T,S)", "(T,Q)", "(P,D)",
                 "(P,H)", "(P,S)", "(P,Q)", "(D,H)", "(D,S)", "(H,S)"]:
        assert pair in message


@pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf, "300", None, True])
def test_non_finite_values_rejected(bad):
    with pytest.raises(rpp.InvalidInputError) as excinfo:
        resolve_pair("P", 100.0, "T", bad)
    assert "T" in str(excinfo.value)


def test_numpy_scalars_accepted():
    request = resolve_pair("T", np.float32(300.0), "P", np.int64(100))
    assert request == FlashRequest(FlashPrimitive.TP, 300.0, 100.0)


# ------------------------------------------------------------------------------------ #
# State computation
# ------------------------------------------------------------------------------------ #

def test_direct_primitives_call_engine_once():
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("P", 500.0, "H", 25000.0))
    assert engine.calls == [("flash_by_pair", FlashPrimitive.PH, 500.0, 25000.0)]
    assert state.temperature == 500.0


def test_swapped_inputs_give_identical_engine_calls():
    engine_1, engine_2 = FakeEngine(), FakeEngine()
    s1 = compute_state(engine_1, resolve_pair("T", 300.0, "D", 12.0))
    s2 = compute_state(engine_2, resolve_pair("D", 12.0, "T", 300.0))
    assert engine_1.calls == engine_2.calls
    assert s1.to_dict() == s2.to_dict()


@pytest.mark.parametrize(
    "quality, curve",
    [(0.0, PhaseCurve.BUBBLE), (0.49, PhaseCurve.BUBBLE), (0.5, PhaseCurve.DEW),
     (1.0, PhaseCurve.DEW), (100.0, PhaseCurve.DEW), (-1.0, PhaseCurve.BUBBLE)],
)
def test_curve_selection(quality, curve):
    assert select_curve(quality) is curve
    engine = FakeEngine()
    flash_by_quality(engine, FlashRequest(FlashPrimitive.TQ, 280.0, quality))
    assert engine.calls[0] == ("saturation_by_temperature", 280.0, curve)


def test_saturated_liquid_state():
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("T", 280.0, "Q", 0.0))
    assert engine.calls_named("properties_by_state") == [("properties_by_state", 280.0, D_L)]
    assert state.quality == 0.0
    assert state.density == D_L
    assert state.temperature == 280.0
    # Saturation pressure replaces the pressure of the equation of state
    assert state.pressure == FakeEngine.P_BUBBLE


@pytest.mark.parametrize("quality", [1.0, 100.0])
def test_saturated_vapor_state(quality):
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("T", 280.0, "Q", quality))
    assert engine.calls_named("properties_by_state") == [("properties_by_state", 280.0, D_V)]
    assert state.quality == 1.0
    assert state.density == D_V
    assert state.pressure == FakeEngine.P_DEW


def test_negative_quality_gives_saturated_liquid():
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("T", 280.0, "Q", -0.5))
    assert state.quality == 0.0
    assert state.density == D_L


@pytest.mark.parametrize("quality", [0.2, 0.5, 0.8])
def test_two_phase_interpolation(quality):
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("T", 280.0, "Q", quality))
    liquid = engine.properties_by_state(280.0, D_L)
    vapor = engine.properties_by_state(280.0, D_V)

    assert state.quality == quality
    assert state.temperature == 280.0
    expected_p = FakeEngine.P_DEW if quality >= 0.5 else FakeEngine.P_BUBBLE
    assert state.pressure == expected_p
    assert state.density == pytest.approx(1.0 / ((1.0 - quality) / D_L + quality / D_V))
    for name in [
        "enthalpy",
        "entropy",
        "isochoric_heat_capacity",
        "isobaric_heat_capacity",
        "speed_of_sound",
        "internal_energy",
    ]:
        expected = (1.0 - quality) * liquid[name] + quality * vapor[name]
        assert state[name] == pytest.approx(expected)
    assert liquid.enthalpy < state.enthalpy < vapor.enthalpy


def test_pressure_quality_uses_saturation_temperature():
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("Q", 0.7, "P", 950.0))
    assert engine.calls[0] == ("saturation_by_pressure", 950.0, PhaseCurve.DEW)
    assert state.temperature == FakeEngine.T_DEW
    assert state.pressure == 950.0


# ------------------------------------------------------------------------------------ #
# Output extraction
# ------------------------------------------------------------------------------------ #

def test_extract_thermodynamic_output():
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("T", 280.0, "Q", 0.0))
    assert extract_output(engine, state, "D") == D_L
    assert extract_output(engine, state, "rho") == D_L
    assert extract_output(engine, state, "Q") == 0.0
    assert extract_output(engine, state, "cp") == state.isobaric_heat_capacity
    assert engine.calls_named("transport_by_state") == []


def test_extract_transport_output():
    engine = FakeEngine()
    state = compute_state(engine, resolve_pair("T", 280.0, "Q", 1.0))
    assert extract_output(engine, state, "ETA") == pytest.approx(2.0 * D_V)
    assert extract_output(engine, state, "lambda") == pytest.approx(0.01 * D_V)
    assert engine.calls_named("transport_by_state") == [
        ("transport_by_state", 280.0, D_V),
        ("transport_by_state", 280.0, D_V),
    ]


def test_unknown_output_rejected_before_engine_call():
    engine = FakeEngine()
    with pytest.raises(rpp.UnknownPropertyError) as excinfo:
        get_property(engine, "ZZ", "T", 300.0, "P", 100.0)
    assert "T P D H S Q Cv Cp W E ETA TCX" in str(excinfo.value)
    assert engine.calls == []


def test_unsupported_pair_rejected_before_engine_call():
    engine = FakeEngine()
    with pytest.raises(rpp.InvalidInputError):
        get_property(engine, "P", "T", 300.0, "T", 310.0)
    assert engine.calls == []


def test_get_property_pipeline():
    engine = FakeEngine()
    assert get_property(engine, "H", "P", 500.0, "T", 300.0) == 800.0
    assert engine.calls == [("flash_by_pair", FlashPrimitive.TP, 300.0, 500.0)]
