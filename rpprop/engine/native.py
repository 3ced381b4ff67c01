"""
Adapter around the equation-of-state engine.

The engine is CoolProp's low-level ``AbstractState`` interface, either with
CoolProp's own Helmholtz models (``HEOS``) or with NIST REFPROP
(``REFPROP``). Like REFPROP itself, the adapter holds one active fluid
configuration at a time and is not reentrant: every call must be made while
holding the session lock (see :mod:`rpprop.engine.session`).

All inputs and outputs use the native basis (K, kPa, mol/L, J/mol,
J/(mol·K), m/s, µPa·s, W/(m·K), g/mol, debye). CoolProp works in SI molar
units internally, the conversion happens at this boundary only.
"""

import logging
import threading

import numpy as np
import CoolProp.CoolProp as CP

from .. import config
from ..errors import EngineError, FluidNotFoundError, InvalidInputError, check_status
from ..helpers_props import (
    CriticalState,
    FluidInfo,
    FlashPrimitive,
    PhaseCurve,
    SaturationState,
    ThermoState,
    TransportState,
)

logger = logging.getLogger(__name__)

# Conversion factors between CoolProp SI units and the native basis
KPA = 1e3  # Pa per kPa
MOL_PER_L = 1e3  # mol/m3 per mol/L
MICRO_PA_S = 1e-6  # Pa·s per µPa·s
G_PER_MOL = 1e-3  # kg/mol per g/mol
DEBYE = 3.33564e-30  # C·m per debye

# Normal boiling point reference pressure (Pa)
P_ATM = 101325.0


# ------------------------------------------------------------------------------------ #
# Input pair mappings
# ------------------------------------------------------------------------------------ #

# Primitive -> (CoolProp input pair, function mapping native args to CoolProp args)
PRIMITIVE_INPUTS = {
    FlashPrimitive.TP: (CP.PT_INPUTS, lambda T, p: (p * KPA, T)),
    FlashPrimitive.TD: (CP.DmolarT_INPUTS, lambda T, d: (d * MOL_PER_L, T)),
    FlashPrimitive.TH: (CP.HmolarT_INPUTS, lambda T, h: (h, T)),
    FlashPrimitive.TS: (CP.SmolarT_INPUTS, lambda T, s: (s, T)),
    FlashPrimitive.PD: (CP.DmolarP_INPUTS, lambda p, d: (d * MOL_PER_L, p * KPA)),
    FlashPrimitive.PH: (CP.HmolarP_INPUTS, lambda p, h: (h, p * KPA)),
    FlashPrimitive.PS: (CP.PSmolar_INPUTS, lambda p, s: (p * KPA, s)),
    FlashPrimitive.DH: (CP.DmolarHmolar_INPUTS, lambda d, h: (d * MOL_PER_L, h)),
    FlashPrimitive.DS: (CP.DmolarSmolar_INPUTS, lambda d, s: (d * MOL_PER_L, s)),
    FlashPrimitive.HS: (CP.HmolarSmolar_INPUTS, lambda h, s: (h, s)),
}

# Quality used to reach each side of the two-phase dome
CURVE_QUALITY = {
    PhaseCurve.BUBBLE: 0.0,
    PhaseCurve.DEW: 1.0,
}


# Define NaN fallbacks for outputs that are undefined in some regions
def _get_or_nan(function):
    try:
        return function()
    except ValueError:
        return np.nan


def _pop_warning():
    """Return the status of the last engine call from CoolProp's warning buffer."""
    warning = CP.get_global_param_string("warnstring")
    if warning:
        return -1, warning
    return 0, ""


def _flush_warnings(routine):
    """Report a warning left in CoolProp's buffer by calls made outside :func:`_call`."""
    check_status(*_pop_warning(), routine)


def _call(routine, function, *args):
    """
    Evaluate an engine call and interpret its status.

    Engine exceptions become status code 1 and raise :class:`EngineError`.
    A pending engine warning becomes status code -1 and is logged.
    """
    try:
        result = function(*args)
    except (ValueError, RuntimeError) as exc:
        raise EngineError(1, str(exc), routine) from exc
    code, message = _pop_warning()
    check_status(code, message, routine)
    return result


def read_state(AS, routine, quality=None):
    """Read a ThermoState in native units from an updated AbstractState."""
    state = ThermoState(
        temperature=AS.T(),
        pressure=AS.p() / KPA,
        density=AS.rhomolar() / MOL_PER_L,
        enthalpy=AS.hmolar(),
        entropy=AS.smolar(),
        isochoric_heat_capacity=_get_or_nan(AS.cvmolar),
        isobaric_heat_capacity=_get_or_nan(AS.cpmolar),
        speed_of_sound=_get_or_nan(AS.speed_sound),
        quality=_get_or_nan(AS.Q) if quality is None else quality,
        internal_energy=AS.umolar(),
    )
    _flush_warnings(routine)
    return state


# ------------------------------------------------------------------------------------ #
# Engine adapter
# ------------------------------------------------------------------------------------ #

class NativeEngine:
    """
    Stateful wrapper around one CoolProp ``AbstractState``.

    Parameters
    ----------
    backend : str, optional
        ``"HEOS"`` or ``"REFPROP"``. Defaults to the ``RPPROP_BACKEND``
        environment variable, or ``"HEOS"`` when it is not set.
    """

    def __init__(self, backend=None):
        self.backend = config.get_backend(backend)
        if self.backend == "REFPROP":
            path = config.find_refprop_path()
            CP.set_config_string(CP.ALTERNATIVE_REFPROP_PATH, path)
            logger.debug("REFPROP path set to %s", path)
        self._state = None
        self._components = ()
        self._composition = ()

    def __repr__(self):
        return f"NativeEngine(backend={self.backend!r}, components={self._components!r})"

    @property
    def components(self):
        return self._components

    # --- Configuration
    def has_fluid(self, name):
        """Return True if the engine knows a pure component called ``name``."""
        try:
            CP.AbstractState(self.backend, name)
        except (ValueError, RuntimeError):
            return False
        finally:
            _flush_warnings("has_fluid")
        return True

    def configure(self, components, composition):
        """
        Make ``components`` with mole fractions ``composition`` the active configuration.

        Raises
        ------
        FluidNotFoundError
            If one of the components is unknown to the engine.
        EngineError
            If the engine rejects the configuration otherwise (missing
            interaction parameters, invalid composition, ...).
        """
        components = tuple(components)
        composition = tuple(float(z) for z in composition)
        logger.debug("Configuring %s engine for %s", self.backend, components)

        # The previous configuration is unusable from here on
        self._state = None
        self._components = ()
        self._composition = ()

        try:
            AS = CP.AbstractState(self.backend, "&".join(components))
        except (ValueError, RuntimeError) as exc:
            for name in components:
                if not self.has_fluid(name):
                    raise FluidNotFoundError(
                        f"Fluid '{name}' not found in the {self.backend} library"
                    ) from exc
            raise EngineError(1, str(exc), "configure") from exc

        _flush_warnings("configure")
        if len(components) > 1:
            _call("configure", AS.set_mole_fractions, list(composition))

        self._state = AS
        self._components = components
        self._composition = composition

    def predefined_mixture(self, name):
        """
        Expand a predefined mixture (``R407C``, ``R410A.mix``, ...).

        Returns
        -------
        tuple or None
            ``(components, mole_fractions)`` or None if ``name`` is not a
            predefined mixture. Names are compared case-insensitively.
        """
        available = CP.get_global_param_string("predefined_mixtures").split(",")
        lookup = {mix.strip().upper(): mix.strip() for mix in available if mix.strip()}
        key = name.strip().upper()
        mix = lookup.get(key) or lookup.get(key + ".MIX")
        if mix is None:
            return None

        AS = _call("predefined_mixture", CP.AbstractState, self.backend, mix)
        components = tuple(AS.fluid_names())
        fractions = tuple(float(z) for z in AS.get_mole_fractions())
        logger.debug("Predefined mixture %s expanded to %s", mix, components)
        return components, fractions

    def _active(self, routine):
        if self._state is None:
            raise EngineError(1, "no fluid configuration is active", routine)
        return self._state

    # --- Flash calculations
    def flash_by_pair(self, primitive, value_1, value_2):
        """
        Equilibrium flash from two independent properties.

        Parameters
        ----------
        primitive : FlashPrimitive
            Any primitive except the quality ones (``TQ``, ``PQ``), which are
            synthesized from saturation data by the dispatcher.
        value_1, value_2 : float
            Values in the argument order of the primitive and native units.
        """
        primitive = FlashPrimitive(primitive)
        if primitive not in PRIMITIVE_INPUTS:
            raise InvalidInputError(f"No direct engine flash for {primitive.name}")
        AS = self._active(primitive.name)
        input_pair, to_engine = PRIMITIVE_INPUTS[primitive]
        _call(primitive.name, AS.update, input_pair, *to_engine(value_1, value_2))
        return read_state(AS, primitive.name)

    def _saturation(self, routine, input_pair, args, curve):
        AS = self._active(routine)
        _call(routine, AS.update, input_pair, *args)
        return SaturationState(
            phase_curve=curve,
            temperature=AS.T(),
            pressure=AS.p() / KPA,
            density_liquid=_call(routine, AS.saturated_liquid_keyed_output, CP.iDmolar) / MOL_PER_L,
            density_vapor=_call(routine, AS.saturated_vapor_keyed_output, CP.iDmolar) / MOL_PER_L,
        )

    def saturation_by_temperature(self, temperature, curve=PhaseCurve.BUBBLE):
        """Saturation pressure and phase densities at ``temperature`` on ``curve``."""
        curve = PhaseCurve.parse(curve)
        q = CURVE_QUALITY[curve]
        return self._saturation("saturation_t", CP.QT_INPUTS, (q, temperature), curve)

    def saturation_by_pressure(self, pressure, curve=PhaseCurve.BUBBLE):
        """Saturation temperature and phase densities at ``pressure`` on ``curve``."""
        curve = PhaseCurve.parse(curve)
        q = CURVE_QUALITY[curve]
        return self._saturation("saturation_p", CP.PQ_INPUTS, (pressure * KPA, q), curve)

    def _update_single_phase(self, routine, temperature, density):
        # Imposing the phase skips the phase-equilibrium check, so the equation
        # of state is evaluated at (T, rho) even inside the two-phase dome
        AS = self._active(routine)
        AS.specify_phase(CP.iphase_gas)
        try:
            _call(routine, AS.update, CP.DmolarT_INPUTS, density * MOL_PER_L, temperature)
        finally:
            AS.unspecify_phase()
        return AS

    def properties_by_state(self, temperature, density):
        """
        Evaluate the equation of state at an imposed temperature and density.

        The quality is not defined by this evaluation and is reported as NaN.
        """
        AS = self._update_single_phase("properties", temperature, density)
        return read_state(AS, "properties", quality=np.nan)

    def transport_by_state(self, temperature, density):
        """Viscosity and thermal conductivity at an imposed temperature and density."""
        AS = self._update_single_phase("transport", temperature, density)
        return TransportState(
            viscosity=_call("transport", AS.viscosity) / MICRO_PA_S,
            conductivity=_call("transport", AS.conductivity),
        )

    # --- Fluid constants
    def critical_point(self):
        """Critical point of the active configuration."""
        AS = self._active("critical_point")
        return CriticalState(
            temperature=_call("critical_point", AS.T_critical),
            pressure=_call("critical_point", AS.p_critical) / KPA,
            density=_call("critical_point", AS.rhomolar_critical) / MOL_PER_L,
        )

    def static_info(self, component_index=0):
        """
        Constants of one component of the active configuration.

        Values the fluid model does not define (dipole moment, normal boiling
        point below the triple point, ...) are reported as NaN.
        """
        if not 0 <= component_index < len(self._components):
            raise InvalidInputError(
                f"Component index {component_index} out of range for {len(self._components)} component(s)"
            )
        name = self._components[component_index]
        AS = _call("info", CP.AbstractState, self.backend, name)

        T_triple = _get_or_nan(AS.Ttriple)
        T_crit = _call("info", AS.T_critical)
        p_crit = _call("info", AS.p_critical) / KPA
        rho_crit = _call("info", AS.rhomolar_critical) / MOL_PER_L
        R = _call("info", AS.gas_constant)

        try:
            AS.update(CP.PQ_INPUTS, P_ATM, 0.0)
            T_nbp = AS.T()
        except ValueError:
            T_nbp = np.nan
        if T_nbp < T_triple:
            T_nbp = np.nan

        try:
            dipole = AS.keyed_output(CP.get_parameter_index("dipole_moment")) / DEBYE
        except ValueError:
            dipole = np.nan

        info = FluidInfo(
            molar_mass=_call("info", AS.molar_mass) / G_PER_MOL,
            triple_point_temperature=T_triple,
            normal_boiling_point=T_nbp,
            critical_temperature=T_crit,
            critical_pressure=p_crit,
            critical_density=rho_crit,
            critical_compressibility=p_crit / (rho_crit * R * T_crit),
            acentric_factor=_get_or_nan(AS.acentric_factor),
            dipole_moment=dipole,
            gas_constant=R,
        )
        _flush_warnings("info")
        return info


_ENGINE = None
_ENGINE_LOCK = threading.Lock()


def get_engine():
    """Return the process-wide engine, creating it on first use."""
    global _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is None:
            _ENGINE = NativeEngine()
        return _ENGINE
