import pytest
import numpy as np
import rpprop as rpp

from rpprop import PropertyKey


@pytest.mark.parametrize(
    "text, expected",
    [
        ("T", PropertyKey.T),
        ("p", PropertyKey.P),
        ("d", PropertyKey.D),
        ("Rho", PropertyKey.D),
        ("u", PropertyKey.E),
        ("E", PropertyKey.E),
        ("cv", PropertyKey.CV),
        ("Cp", PropertyKey.CP),
        ("a", PropertyKey.W),
        ("V", PropertyKey.ETA),
        ("vis", PropertyKey.ETA),
        ("eta", PropertyKey.ETA),
        ("L", PropertyKey.TCX),
        ("lambda", PropertyKey.TCX),
        (" q ", PropertyKey.Q),
        (PropertyKey.H, PropertyKey.H),
    ],
)
def test_property_key_parse(text, expected):
    assert PropertyKey.parse(text) is expected


@pytest.mark.parametrize("text", ["X", "", "Z", 3.0, None])
def test_property_key_parse_unknown(text):
    with pytest.raises(rpp.UnknownPropertyError):
        PropertyKey.parse(text)


def test_supported_keys_text():
    assert rpp.SUPPORTED_KEYS_TEXT == "T P D H S Q Cv Cp W E ETA TCX"


@pytest.mark.parametrize(
    "curve, expected",
    [
        ("bubble", rpp.PhaseCurve.BUBBLE),
        (" DEW ", rpp.PhaseCurve.DEW),
        (rpp.PhaseCurve.DEW, rpp.PhaseCurve.DEW),
    ],
)
def test_phase_curve_parse(curve, expected):
    assert rpp.PhaseCurve.parse(curve) is expected


@pytest.mark.parametrize("curve", ["liquid", "", None, 1])
def test_phase_curve_parse_invalid(curve):
    with pytest.raises(rpp.InvalidInputError):
        rpp.PhaseCurve.parse(curve)


def test_unknown_property_error_is_value_error():
    assert issubclass(rpp.UnknownPropertyError, rpp.InvalidInputError)
    assert issubclass(rpp.InvalidInputError, ValueError)
    assert issubclass(rpp.LockUnusableError, RuntimeError)


def test_flash_primitive_arguments():
    assert rpp.FlashPrimitive.TP.arguments == (PropertyKey.T, PropertyKey.P)
    assert rpp.FlashPrimitive.HS.arguments == (PropertyKey.H, PropertyKey.S)
    quality_primitives = {p for p in rpp.FlashPrimitive if p.uses_quality}
    assert quality_primitives == {rpp.FlashPrimitive.TQ, rpp.FlashPrimitive.PQ}
    assert len(rpp.FlashPrimitive) == 12


def test_state_alias_access():
    state = rpp.ThermoState(
        temperature=300.0,
        pressure=100.0,
        density=0.04,
        enthalpy=25000.0,
        isobaric_heat_capacity=85.0,
        quality=-1.0,
    )
    assert state["T"] == 300.0
    assert state["temperature"] == 300.0
    assert state["P"] == state.p == 100.0
    assert state["rho"] == state.D == 0.04
    assert state.cp == state["Cp"] == 85.0
    assert state.Q == -1.0
    assert np.isnan(state["W"])
    with pytest.raises(KeyError):
        state["viscosity"]
    with pytest.raises(AttributeError):
        state.viscosity


def test_state_is_immutable():
    state = rpp.ThermoState(temperature=300.0)
    with pytest.raises(AttributeError):
        state.temperature = 310.0
    new = state.replace(temperature=310.0)
    assert new.temperature == 310.0
    assert state.temperature == 300.0


def test_state_to_dict():
    state = rpp.TransportState(viscosity=12.0, conductivity=0.014)
    assert state.to_dict() == {"viscosity": 12.0, "conductivity": 0.014}
    with_aliases = state.to_dict(include_aliases=True)
    assert with_aliases["ETA"] == 12.0
    assert with_aliases["TCX"] == 0.014
    assert list(state.keys()) == ["viscosity", "conductivity"]
    assert dict(state.items())["conductivity"] == 0.014


def test_saturation_state_metadata():
    sat = rpp.SaturationState(
        phase_curve=rpp.PhaseCurve.DEW,
        temperature=293.15,
        pressure=880.0,
        density_liquid=13.0,
        density_vapor=0.45,
    )
    assert sat["phase_curve"] is rpp.PhaseCurve.DEW
    assert sat["rho_l"] == 13.0
    assert sat.Dv == 0.45
    # Metadata is not part of the numeric record
    assert "phase_curve" not in sat.to_dict()
    assert "phase_curve=dew" in repr(sat)


def test_fluid_info_aliases():
    info = rpp.FluidInfo(molar_mass=102.032, critical_temperature=374.21, gas_constant=8.314)
    assert info["M"] == 102.032
    assert info.Tc == 374.21
    assert info.R == 8.314
    assert np.isnan(info.dipole_moment)
