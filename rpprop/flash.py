"""
Flash dispatch and two-phase quality interpolation.

A flash takes an unordered pair of property constraints, for example
``("H", 250.0)`` and ``("P", 1000.0)``, and computes the full equilibrium
state. The pair is resolved to one of the supported primitives and the values
are put in the argument order of that primitive, so that swapping the two
constraints produces exactly the same engine call.

The quality primitives (``TQ``, ``PQ``) are synthesized from saturation data:

1. The saturation curve is selected from the requested quality: the dew
   curve if ``Q >= 0.5`` and the bubble curve otherwise. For zeotropic
   mixtures the two curves differ (temperature glide).
2. For ``Q <= 0`` and ``Q >= 1`` the saturated liquid and vapor states are
   evaluated at the saturation densities.
3. In between, the enthalpy, entropy, internal energy, heat capacities and
   speed of sound are interpolated linearly in ``Q`` and the density is
   interpolated harmonically (linearly in specific volume):

   .. math::

       \\rho = \\left( \\frac{1 - Q}{\\rho_l} + \\frac{Q}{\\rho_v} \\right)^{-1}

Everything in this module works in the native basis.
"""

import logging
from dataclasses import dataclass

from .errors import UnknownPropertyError, UnsupportedPairError
from .helpers_props import (
    STATE_FIELDS,
    SUPPORTED_KEYS_TEXT,
    TRANSPORT_FIELDS,
    FlashPrimitive,
    PhaseCurve,
    PropertyKey,
    ThermoState,
)
from .utils import validate_finite

logger = logging.getLogger(__name__)

# Quality at or above which the dew curve is used
DEW_CURVE_THRESHOLD = 0.5

# Unordered pair of keys -> primitive
PAIR_TABLE = {frozenset(primitive.arguments): primitive for primitive in FlashPrimitive}

SUPPORTED_PAIRS_TEXT = " ".join(
    f"({k1.value},{k2.value})" for k1, k2 in (p.arguments for p in FlashPrimitive)
)


@dataclass(frozen=True)
class FlashRequest:
    """A flash primitive with its two arguments in calling order."""

    primitive: FlashPrimitive
    value_1: float
    value_2: float


# ------------------------------------------------------------------------------------ #
# Pair resolution
# ------------------------------------------------------------------------------------ #

def _parse_input_key(key):
    try:
        return PropertyKey.parse(key)
    except UnknownPropertyError:
        return None


def resolve_pair(key_1, value_1, key_2, value_2):
    """
    Resolve an unordered pair of input constraints into a flash request.

    Parameters
    ----------
    key_1, key_2 : str or PropertyKey
        Input property keys, case-insensitive.
    value_1, value_2 : float
        Values in the native basis.

    Returns
    -------
    FlashRequest
        The primitive and the values in its argument order.

    Raises
    ------
    InvalidInputError
        If a value is not finite.
    UnsupportedPairError
        If the keys do not form a supported pair.
    """
    value_1 = validate_finite(str(getattr(key_1, "value", key_1)), value_1)
    value_2 = validate_finite(str(getattr(key_2, "value", key_2)), value_2)

    parsed_1 = _parse_input_key(key_1)
    parsed_2 = _parse_input_key(key_2)
    primitive = None
    if parsed_1 is not None and parsed_2 is not None and parsed_1 != parsed_2:
        primitive = PAIR_TABLE.get(frozenset((parsed_1, parsed_2)))
    if primitive is None:
        name_1 = getattr(key_1, "value", key_1)
        name_2 = getattr(key_2, "value", key_2)
        raise UnsupportedPairError(
            f"Unsupported input pair ({name_1}, {name_2}). Supported: {SUPPORTED_PAIRS_TEXT}"
        )

    if primitive.arguments[0] == parsed_1:
        request = FlashRequest(primitive, value_1, value_2)
    else:
        request = FlashRequest(primitive, value_2, value_1)
    logger.debug("Resolved (%s, %s) to %s", parsed_1.value, parsed_2.value, primitive.name)
    return request


def parse_output_key(output):
    """
    Parse an output property key.

    Raises
    ------
    UnknownPropertyError
        If ``output`` is not one of the supported output keys.
    """
    try:
        return PropertyKey.parse(output)
    except UnknownPropertyError:
        raise UnknownPropertyError(
            f"Unknown output property '{output}'. Supported: {SUPPORTED_KEYS_TEXT}"
        ) from None


# ------------------------------------------------------------------------------------ #
# State computation
# ------------------------------------------------------------------------------------ #

def select_curve(quality):
    """Saturation curve used to synthesize a state of vapor quality ``quality``."""
    return PhaseCurve.DEW if quality >= DEW_CURVE_THRESHOLD else PhaseCurve.BUBBLE


def interpolate_quality(engine, temperature, pressure, density_liquid, density_vapor, quality):
    """
    Synthesize a state of vapor quality ``quality`` from saturation data.

    ``temperature`` and ``pressure`` are always the saturation values: the
    equation of state evaluated at the phase densities may return a
    slightly different pressure for mixtures, which is discarded.
    """
    if quality <= 0.0:
        state = engine.properties_by_state(temperature, density_liquid)
        return state.replace(quality=0.0, pressure=pressure)

    if quality >= 1.0:
        state = engine.properties_by_state(temperature, density_vapor)
        return state.replace(quality=1.0, pressure=pressure)

    liquid = engine.properties_by_state(temperature, density_liquid)
    vapor = engine.properties_by_state(temperature, density_vapor)

    def lerp(a, b):
        return a * (1.0 - quality) + b * quality

    return ThermoState(
        temperature=temperature,
        pressure=pressure,
        density=1.0 / ((1.0 - quality) / density_liquid + quality / density_vapor),
        enthalpy=lerp(liquid.enthalpy, vapor.enthalpy),
        entropy=lerp(liquid.entropy, vapor.entropy),
        isochoric_heat_capacity=lerp(liquid.isochoric_heat_capacity, vapor.isochoric_heat_capacity),
        isobaric_heat_capacity=lerp(liquid.isobaric_heat_capacity, vapor.isobaric_heat_capacity),
        speed_of_sound=lerp(liquid.speed_of_sound, vapor.speed_of_sound),
        quality=quality,
        internal_energy=lerp(liquid.internal_energy, vapor.internal_energy),
    )


def flash_by_quality(engine, request):
    """Compute a ``TQ`` or ``PQ`` request from saturation data."""
    quality = request.value_2
    curve = select_curve(quality)
    if request.primitive is FlashPrimitive.TQ:
        sat = engine.saturation_by_temperature(request.value_1, curve)
        temperature, pressure = request.value_1, sat.pressure
    else:
        sat = engine.saturation_by_pressure(request.value_1, curve)
        temperature, pressure = sat.temperature, request.value_1
    return interpolate_quality(
        engine, temperature, pressure, sat.density_liquid, sat.density_vapor, quality
    )


def compute_state(engine, request):
    """Run a resolved flash request against ``engine``."""
    if request.primitive.uses_quality:
        return flash_by_quality(engine, request)
    return engine.flash_by_pair(request.primitive, request.value_1, request.value_2)


def extract_output(engine, state, output):
    """
    Read one property from a computed state.

    Viscosity and thermal conductivity are not part of the thermodynamic
    state and are obtained from the transport primitive at the state's
    temperature and density.
    """
    key = parse_output_key(output)
    if key in TRANSPORT_FIELDS:
        transport = engine.transport_by_state(state.temperature, state.density)
        return getattr(transport, TRANSPORT_FIELDS[key])
    return getattr(state, STATE_FIELDS[key])


def get_property(engine, output, key_1, value_1, key_2, value_2):
    """Compute a single property from two constraints, all in the native basis."""
    output = parse_output_key(output)
    request = resolve_pair(key_1, value_1, key_2, value_2)
    state = compute_state(engine, request)
    return extract_output(engine, state, output)
