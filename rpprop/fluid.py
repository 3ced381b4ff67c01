"""
User-facing fluid object.

Example
-------
>>> import rpprop
>>> r134a = rpprop.Fluid("R134A", rpprop.UnitSystem.engineering())
>>> r134a.get("P", "T", 0.0, "Q", 0.0)       # saturation pressure at 0 °C, bar
>>> r134a.props_tp(25.0, 1.0).density        # kg/m³
>>> r407c = rpprop.Fluid.with_units("R407C", rpprop.UnitSystem.engineering())
>>> r407c.saturation_t(20.0, rpprop.PhaseCurve.DEW).pressure
"""

import logging

from .engine import FluidConfiguration, get_engine, get_session
from .errors import InvalidInputError
from .flash import (
    FlashRequest,
    compute_state,
    extract_output,
    parse_output_key,
    resolve_pair,
)
from .helpers_props import FlashPrimitive, PhaseCurve
from .units import Converter, QuantityClass, UnitSystem
from .utils import validate_finite

logger = logging.getLogger(__name__)


class Fluid:
    """
    Pure fluid or mixture bound to a unit system.

    Every calculation converts the inputs to the native basis, runs inside
    the engine session (reconfiguring the engine only if another fluid was
    used in between) and converts the outputs back to the unit system of
    the fluid.

    Parameters
    ----------
    name : str
        Pure fluid (``"R134A"``, ``"CO2"``, ...) or predefined mixture
        (``"R407C"``, ``"R410A.mix"``, ...). Names are case-insensitive.
    units : UnitSystem, optional
        Unit system of all inputs and outputs. Defaults to the native basis.
    engine : NativeEngine, optional
        Engine to drive. Defaults to the process-wide engine.
    session : SessionManager, optional
        Session guarding ``engine``. Defaults to the process-wide session.
    """

    def __init__(self, name, units=None, engine=None, session=None):
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError(f"Fluid name must be a non-empty string, got {name!r}")
        name = name.strip()
        if "&" in name:
            raise InvalidInputError(
                f"'{name}' looks like a custom mixture. Use Fluid.mixture with "
                "(name, mole_fraction) pairs instead"
            )
        engine = get_engine() if engine is None else engine
        session = get_session() if session is None else session

        expanded = session.exclusive(lambda: engine.predefined_mixture(name))
        if expanded is None:
            components, composition = (name,), (1.0,)
        else:
            components, composition = expanded
        self._setup(name, components, composition, units, engine, session)

    @classmethod
    def with_units(cls, name, units, engine=None, session=None):
        return cls(name, units, engine=engine, session=session)

    @classmethod
    def mixture(cls, components, engine=None, session=None):
        """
        Custom mixture from ``(name, mole_fraction)`` pairs, in native units.

        >>> Fluid.mixture([("R32", 0.5), ("R125", 0.5)])
        """
        return cls.mixture_with_units(components, None, engine=engine, session=session)

    @classmethod
    def mixture_with_units(cls, components, units, engine=None, session=None):
        components = list(components)
        try:
            names = [str(name).strip() for name, _ in components]
            fractions = [fraction for _, fraction in components]
        except (TypeError, ValueError):
            raise InvalidInputError(
                "Mixture components must be given as (name, mole_fraction) pairs"
            ) from None
        self = cls.__new__(cls)
        self._setup(
            "&".join(names),
            names,
            fractions,
            units,
            get_engine() if engine is None else engine,
            get_session() if session is None else session,
        )
        return self

    def _setup(self, name, components, composition, units, engine, session):
        units = UnitSystem.refprop() if units is None else units
        if not isinstance(units, UnitSystem):
            raise InvalidInputError(f"Expected a UnitSystem, got {units!r}")

        self._name = name
        self._engine = engine
        self._session = session
        self._config = FluidConfiguration(components, composition)

        infos = self._run(
            lambda: [self._engine.static_info(i) for i in range(len(self._config))]
        )
        molar_mass = sum(z * info.molar_mass for z, info in zip(self._config.composition, infos))
        self._converter = Converter(units, molar_mass)
        logger.debug("Created %r", self)

    def __repr__(self):
        return (
            f"Fluid(name={self._name!r}, components={self._config.components!r}, "
            f"molar_mass={self._converter.molar_mass:.4f})"
        )

    # --- Descriptive properties
    @property
    def name(self):
        return self._name

    @property
    def components(self):
        return self._config.components

    @property
    def composition(self):
        return self._config.composition

    @property
    def configuration(self):
        return self._config

    @property
    def is_mixture(self):
        return self._config.is_mixture

    @property
    def molar_mass(self):
        """Mixture-averaged molar mass (g/mol)."""
        return self._converter.molar_mass

    @property
    def units(self):
        return self._converter.units

    @property
    def converter(self):
        return self._converter

    # --- Session helpers
    def _configure(self):
        self._engine.configure(self._config.components, self._config.composition)

    def _run(self, body_fn):
        return self._session.with_configuration(self._config.id, self._configure, body_fn)

    def _to_native(self, quantity_class, name, value):
        return self._converter.to_native(quantity_class, validate_finite(name, value))

    def _native_request(self, request):
        key_1, key_2 = request.primitive.arguments
        return FlashRequest(
            request.primitive,
            self._converter.input_to_native(key_1, request.value_1),
            self._converter.input_to_native(key_2, request.value_2),
        )

    # ------------------------------------------------------------------------------------ #
    # Property calculations
    # ------------------------------------------------------------------------------------ #

    def get(self, output, key1, value1, key2, value2):
        """
        Compute a single property from two input constraints.

        Parameters
        ----------
        output : str
            Output key: ``T P D H S Q Cv Cp W E ETA TCX`` (case-insensitive,
            synonyms such as ``RHO`` or ``VIS`` are accepted).
        key1, key2 : str
            Input keys forming one of the supported pairs, in any order.
        value1, value2 : float
            Input values in the unit system of the fluid. Quality is a mole
            fraction of vapor: values at or below 0 give the saturated liquid
            and values at or above 1 give the saturated vapor.

        Returns
        -------
        float
            The requested property in the unit system of the fluid.
        """
        output = parse_output_key(output)
        request = self._native_request(resolve_pair(key1, value1, key2, value2))
        raw = self._run(
            lambda: extract_output(self._engine, compute_state(self._engine, request), output)
        )
        return self._converter.output_from_native(output, raw)

    def get_state(self, key1, value1, key2, value2):
        """Compute the full thermodynamic state from two input constraints."""
        request = self._native_request(resolve_pair(key1, value1, key2, value2))
        state = self._run(lambda: compute_state(self._engine, request))
        return self._converter.state_from_native(state)

    def _flash(self, primitive, value_1, value_2):
        key_1, key_2 = (key.value for key in primitive.arguments)
        request = self._native_request(
            FlashRequest(primitive, validate_finite(key_1, value_1), validate_finite(key_2, value_2))
        )
        state = self._run(lambda: compute_state(self._engine, request))
        return self._converter.state_from_native(state)

    # --- Named flashes
    def props_tp(self, t, p):
        """Temperature-pressure flash."""
        return self._flash(FlashPrimitive.TP, t, p)

    def props_td(self, t, d):
        """Temperature-density flash."""
        return self._flash(FlashPrimitive.TD, t, d)

    def props_th(self, t, h):
        """Temperature-enthalpy flash."""
        return self._flash(FlashPrimitive.TH, t, h)

    def props_ts(self, t, s):
        """Temperature-entropy flash."""
        return self._flash(FlashPrimitive.TS, t, s)

    def props_tq(self, t, q):
        """Temperature-quality flash, synthesized from saturation data."""
        return self._flash(FlashPrimitive.TQ, t, q)

    def props_pd(self, p, d):
        """Pressure-density flash."""
        return self._flash(FlashPrimitive.PD, p, d)

    def props_ph(self, p, h):
        """Pressure-enthalpy flash."""
        return self._flash(FlashPrimitive.PH, p, h)

    def props_ps(self, p, s):
        """Pressure-entropy flash."""
        return self._flash(FlashPrimitive.PS, p, s)

    def props_pq(self, p, q):
        """Pressure-quality flash, synthesized from saturation data."""
        return self._flash(FlashPrimitive.PQ, p, q)

    def props_dh(self, d, h):
        """Density-enthalpy flash."""
        return self._flash(FlashPrimitive.DH, d, h)

    def props_ds(self, d, s):
        """Density-entropy flash."""
        return self._flash(FlashPrimitive.DS, d, s)

    def props_hs(self, h, s):
        """Enthalpy-entropy flash."""
        return self._flash(FlashPrimitive.HS, h, s)

    # --- Saturation
    def saturation_t(self, t, phase_curve=PhaseCurve.BUBBLE):
        """
        Saturation state at temperature ``t``.

        For mixtures the bubble and dew curves differ: ``phase_curve`` selects
        the curve, the bubble curve by default.
        """
        curve = PhaseCurve.parse(phase_curve)
        t_native = self._to_native(QuantityClass.TEMPERATURE, "T", t)
        sat = self._run(lambda: self._engine.saturation_by_temperature(t_native, curve))
        return self._converter.saturation_from_native(sat)

    def saturation_p(self, p, phase_curve=PhaseCurve.BUBBLE):
        """Saturation state at pressure ``p`` on the bubble (default) or dew curve."""
        curve = PhaseCurve.parse(phase_curve)
        p_native = self._to_native(QuantityClass.PRESSURE, "P", p)
        sat = self._run(lambda: self._engine.saturation_by_pressure(p_native, curve))
        return self._converter.saturation_from_native(sat)

    # --- Transport
    def transport(self, t, d):
        """Viscosity and thermal conductivity at temperature ``t`` and density ``d``."""
        t_native = self._to_native(QuantityClass.TEMPERATURE, "T", t)
        d_native = self._to_native(QuantityClass.DENSITY, "D", d)
        transport = self._run(lambda: self._engine.transport_by_state(t_native, d_native))
        return self._converter.transport_from_native(transport)

    # --- Fluid constants
    def critical_point(self):
        """Critical temperature, pressure and density."""
        crit = self._run(self._engine.critical_point)
        return self._converter.critical_from_native(crit)

    def info(self, component=0):
        """
        Constants of one component, always in the native basis
        (g/mol, K, kPa, mol/L, debye, J/(mol·K)).
        """
        if isinstance(component, bool) or not isinstance(component, int):
            raise InvalidInputError(f"Component index must be an integer, got {component!r}")
        if not 0 <= component < len(self._config):
            raise InvalidInputError(
                f"Component index {component} out of range for {len(self._config)} component(s)"
            )
        return self._run(lambda: self._engine.static_info(component))
