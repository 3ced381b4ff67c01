"""
Unit systems and conversion to and from the engine's native basis.

The engine always computes in the native basis:

.. list-table:: Native units
    :widths: 40 30
    :header-rows: 1

    * - Quantity
      - Unit
    * - Temperature
      - K
    * - Pressure
      - kPa
    * - Density
      - mol/L
    * - Energy, enthalpy, internal energy
      - J/mol
    * - Entropy, heat capacities
      - J/(mol·K)
    * - Viscosity
      - µPa·s
    * - Thermal conductivity
      - W/(m·K)

A :class:`UnitSystem` chooses one unit per quantity class. Combined with the
molar mass of the fluid (g/mol, mixture-averaged for mixtures) it becomes a
:class:`Converter`, which is what the :class:`~rpprop.fluid.Fluid` facade uses
to translate inputs and outputs.
"""

import enum
from dataclasses import dataclass, replace

from .errors import InvalidInputError
from .helpers_props import PropertyKey


class QuantityClass(enum.Enum):
    TEMPERATURE = "temperature"
    PRESSURE = "pressure"
    DENSITY = "density"
    ENERGY = "energy"
    ENTROPY = "entropy"
    VISCOSITY = "viscosity"
    CONDUCTIVITY = "conductivity"


# ------------------------------------------------------------------------------------ #
# Unit enumerations (the value is the printable label)
# ------------------------------------------------------------------------------------ #

class TemperatureUnit(enum.Enum):
    KELVIN = "K"
    CELSIUS = "°C"
    FAHRENHEIT = "°F"


class PressureUnit(enum.Enum):
    KPA = "kPa"
    BAR = "bar"
    MPA = "MPa"
    PA = "Pa"
    ATM = "atm"
    PSI = "psi"


class DensityUnit(enum.Enum):
    MOL_PER_L = "mol/L"
    KG_PER_M3 = "kg/m³"


class EnergyUnit(enum.Enum):
    J_PER_MOL = "J/mol"
    KJ_PER_KG = "kJ/kg"
    J_PER_KG = "J/kg"


class EntropyUnit(enum.Enum):
    J_PER_MOL_K = "J/(mol·K)"
    KJ_PER_KG_K = "kJ/(kg·K)"
    J_PER_KG_K = "J/(kg·K)"


class ViscosityUnit(enum.Enum):
    MICRO_PA_S = "µPa·s"
    MILLI_PA_S = "mPa·s"
    PA_S = "Pa·s"


class ConductivityUnit(enum.Enum):
    W_PER_M_K = "W/(m·K)"
    MILLI_W_PER_M_K = "mW/(m·K)"


# ------------------------------------------------------------------------------------ #
# Conversion tables
# ------------------------------------------------------------------------------------ #

# Each entry maps a unit to a pair of callables (to_native, from_native).
# The callables take (value, molar_mass) with the molar mass in g/mol.
_ZERO_CELSIUS = 273.15
_ATM_KPA = 101.325
_PSI_KPA = 6.894757

_CONVERSIONS = {
    # --- temperature (native: K)
    TemperatureUnit.KELVIN: (
        lambda v, M: v,
        lambda v, M: v,
    ),
    TemperatureUnit.CELSIUS: (
        lambda v, M: v + _ZERO_CELSIUS,
        lambda v, M: v - _ZERO_CELSIUS,
    ),
    TemperatureUnit.FAHRENHEIT: (
        lambda v, M: (v - 32.0) * 5.0 / 9.0 + _ZERO_CELSIUS,
        lambda v, M: (v - _ZERO_CELSIUS) * 9.0 / 5.0 + 32.0,
    ),
    # --- pressure (native: kPa)
    PressureUnit.KPA: (lambda v, M: v, lambda v, M: v),
    PressureUnit.BAR: (lambda v, M: v * 100.0, lambda v, M: v / 100.0),
    PressureUnit.MPA: (lambda v, M: v * 1000.0, lambda v, M: v / 1000.0),
    PressureUnit.PA: (lambda v, M: v / 1000.0, lambda v, M: v * 1000.0),
    PressureUnit.ATM: (lambda v, M: v * _ATM_KPA, lambda v, M: v / _ATM_KPA),
    PressureUnit.PSI: (lambda v, M: v * _PSI_KPA, lambda v, M: v / _PSI_KPA),
    # --- density (native: mol/L); kg/m³ = g/L
    DensityUnit.MOL_PER_L: (lambda v, M: v, lambda v, M: v),
    DensityUnit.KG_PER_M3: (lambda v, M: v / M, lambda v, M: v * M),
    # --- energy (native: J/mol); kJ/kg = J/g
    EnergyUnit.J_PER_MOL: (lambda v, M: v, lambda v, M: v),
    EnergyUnit.KJ_PER_KG: (lambda v, M: v * M, lambda v, M: v / M),
    EnergyUnit.J_PER_KG: (lambda v, M: v * M / 1000.0, lambda v, M: v * 1000.0 / M),
    # --- entropy and heat capacity (native: J/(mol·K))
    EntropyUnit.J_PER_MOL_K: (lambda v, M: v, lambda v, M: v),
    EntropyUnit.KJ_PER_KG_K: (lambda v, M: v * M, lambda v, M: v / M),
    EntropyUnit.J_PER_KG_K: (lambda v, M: v * M / 1000.0, lambda v, M: v * 1000.0 / M),
    # --- viscosity (native: µPa·s)
    ViscosityUnit.MICRO_PA_S: (lambda v, M: v, lambda v, M: v),
    ViscosityUnit.MILLI_PA_S: (lambda v, M: v * 1e3, lambda v, M: v / 1e3),
    ViscosityUnit.PA_S: (lambda v, M: v * 1e6, lambda v, M: v / 1e6),
    # --- thermal conductivity (native: W/(m·K))
    ConductivityUnit.W_PER_M_K: (lambda v, M: v, lambda v, M: v),
    ConductivityUnit.MILLI_W_PER_M_K: (lambda v, M: v / 1e3, lambda v, M: v * 1e3),
}

# Property keys (case-insensitive) mapped to the quantity class used to convert them
KEY_QUANTITY_CLASS = {
    "T": QuantityClass.TEMPERATURE,
    "P": QuantityClass.PRESSURE,
    "D": QuantityClass.DENSITY,
    "RHO": QuantityClass.DENSITY,
    "H": QuantityClass.ENERGY,
    "E": QuantityClass.ENERGY,
    "U": QuantityClass.ENERGY,
    "S": QuantityClass.ENTROPY,
    "CV": QuantityClass.ENTROPY,
    "CP": QuantityClass.ENTROPY,
    "ETA": QuantityClass.VISCOSITY,
    "V": QuantityClass.VISCOSITY,
    "VIS": QuantityClass.VISCOSITY,
    "TCX": QuantityClass.CONDUCTIVITY,
    "L": QuantityClass.CONDUCTIVITY,
    "LAMBDA": QuantityClass.CONDUCTIVITY,
}


def _quantity_class(key):
    if isinstance(key, PropertyKey):
        key = key.value
    return KEY_QUANTITY_CLASS.get(str(key).strip().upper())


# ------------------------------------------------------------------------------------ #
# Unit system
# ------------------------------------------------------------------------------------ #

@dataclass(frozen=True)
class UnitSystem:
    """
    One chosen unit per quantity class.

    Create one from a preset (:meth:`refprop`, :meth:`engineering`,
    :meth:`si`) and customise individual classes with the ``with_*`` builder
    methods, which return a new object:

    >>> units = UnitSystem.refprop().with_temperature(TemperatureUnit.CELSIUS)
    """

    temperature: TemperatureUnit = TemperatureUnit.KELVIN
    pressure: PressureUnit = PressureUnit.KPA
    density: DensityUnit = DensityUnit.MOL_PER_L
    energy: EnergyUnit = EnergyUnit.J_PER_MOL
    entropy: EntropyUnit = EntropyUnit.J_PER_MOL_K
    viscosity: ViscosityUnit = ViscosityUnit.MICRO_PA_S
    conductivity: ConductivityUnit = ConductivityUnit.W_PER_M_K

    # --- presets
    @classmethod
    def refprop(cls):
        """Native basis: K, kPa, mol/L, J/mol, J/(mol·K), µPa·s, W/(m·K)."""
        return cls()

    @classmethod
    def engineering(cls):
        """Engineering basis: °C, bar, kg/m³, kJ/kg, kJ/(kg·K)."""
        return cls(
            temperature=TemperatureUnit.CELSIUS,
            pressure=PressureUnit.BAR,
            density=DensityUnit.KG_PER_M3,
            energy=EnergyUnit.KJ_PER_KG,
            entropy=EntropyUnit.KJ_PER_KG_K,
            viscosity=ViscosityUnit.MICRO_PA_S,
            conductivity=ConductivityUnit.W_PER_M_K,
        )

    @classmethod
    def si(cls):
        """Strict SI basis: K, Pa, kg/m³, J/kg, J/(kg·K), Pa·s."""
        return cls(
            temperature=TemperatureUnit.KELVIN,
            pressure=PressureUnit.PA,
            density=DensityUnit.KG_PER_M3,
            energy=EnergyUnit.J_PER_KG,
            entropy=EntropyUnit.J_PER_KG_K,
            viscosity=ViscosityUnit.PA_S,
            conductivity=ConductivityUnit.W_PER_M_K,
        )

    # --- builder
    def with_temperature(self, unit: TemperatureUnit):
        return replace(self, temperature=TemperatureUnit(unit))

    def with_pressure(self, unit: PressureUnit):
        return replace(self, pressure=PressureUnit(unit))

    def with_density(self, unit: DensityUnit):
        return replace(self, density=DensityUnit(unit))

    def with_energy(self, unit: EnergyUnit):
        return replace(self, energy=EnergyUnit(unit))

    def with_entropy(self, unit: EntropyUnit):
        return replace(self, entropy=EntropyUnit(unit))

    def with_viscosity(self, unit: ViscosityUnit):
        return replace(self, viscosity=ViscosityUnit(unit))

    def with_conductivity(self, unit: ConductivityUnit):
        return replace(self, conductivity=ConductivityUnit(unit))

    def unit_of(self, quantity_class: QuantityClass):
        """Return the unit chosen for ``quantity_class``."""
        return getattr(self, QuantityClass(quantity_class).value)

    @property
    def is_native(self) -> bool:
        return self == UnitSystem.refprop()


# ------------------------------------------------------------------------------------ #
# Converter
# ------------------------------------------------------------------------------------ #

class Converter:
    """
    Convert values between a :class:`UnitSystem` and the native basis.

    Parameters
    ----------
    units : UnitSystem
        Unit system of the caller.
    molar_mass : float
        Molar mass in g/mol, mixture-averaged for mixtures. Only used by the
        mass-based units, but it must be strictly positive.
    """

    def __init__(self, units: UnitSystem, molar_mass: float):
        if not molar_mass > 0.0:
            raise InvalidInputError(
                f"The molar mass must be strictly positive, got {molar_mass}"
            )
        self.units = units
        self.molar_mass = float(molar_mass)

    @classmethod
    def identity(cls):
        """Converter that leaves every value untouched (native units, molar mass of 1)."""
        return cls(UnitSystem.refprop(), 1.0)

    def __repr__(self) -> str:
        return f"Converter(units={self.units!r}, molar_mass={self.molar_mass})"

    # --- quantity-class conversions
    def to_native(self, quantity_class: QuantityClass, value: float) -> float:
        """Convert ``value`` from caller units to native units."""
        unit = self.units.unit_of(quantity_class)
        return _CONVERSIONS[unit][0](value, self.molar_mass)

    def from_native(self, quantity_class: QuantityClass, value: float) -> float:
        """Convert ``value`` from native units to caller units."""
        unit = self.units.unit_of(quantity_class)
        return _CONVERSIONS[unit][1](value, self.molar_mass)

    # --- keyed conversions
    def input_to_native(self, key, value: float) -> float:
        """
        Convert a caller value identified by its property key to native units.

        ``key`` is a :class:`PropertyKey` or a case-insensitive string. Keys
        without a quantity class (``Q``, ``W``, ...) are returned unchanged.
        """
        quantity_class = _quantity_class(key)
        if quantity_class is None:
            return value
        return self.to_native(quantity_class, value)

    def output_from_native(self, key, value: float) -> float:
        """Convert a native value identified by its property key to caller units."""
        quantity_class = _quantity_class(key)
        if quantity_class is None:
            return value
        return self.from_native(quantity_class, value)

    # --- record conversions
    def state_from_native(self, state):
        """Return a copy of a ThermoState with every field in caller units."""
        Q = QuantityClass
        return state.replace(
            temperature=self.from_native(Q.TEMPERATURE, state.temperature),
            pressure=self.from_native(Q.PRESSURE, state.pressure),
            density=self.from_native(Q.DENSITY, state.density),
            enthalpy=self.from_native(Q.ENERGY, state.enthalpy),
            entropy=self.from_native(Q.ENTROPY, state.entropy),
            isochoric_heat_capacity=self.from_native(Q.ENTROPY, state.isochoric_heat_capacity),
            isobaric_heat_capacity=self.from_native(Q.ENTROPY, state.isobaric_heat_capacity),
            internal_energy=self.from_native(Q.ENERGY, state.internal_energy),
        )

    def saturation_from_native(self, state):
        Q = QuantityClass
        return state.replace(
            temperature=self.from_native(Q.TEMPERATURE, state.temperature),
            pressure=self.from_native(Q.PRESSURE, state.pressure),
            density_liquid=self.from_native(Q.DENSITY, state.density_liquid),
            density_vapor=self.from_native(Q.DENSITY, state.density_vapor),
        )

    def transport_from_native(self, state):
        Q = QuantityClass
        return state.replace(
            viscosity=self.from_native(Q.VISCOSITY, state.viscosity),
            conductivity=self.from_native(Q.CONDUCTIVITY, state.conductivity),
        )

    def critical_from_native(self, state):
        Q = QuantityClass
        return state.replace(
            temperature=self.from_native(Q.TEMPERATURE, state.temperature),
            pressure=self.from_native(Q.PRESSURE, state.pressure),
            density=self.from_native(Q.DENSITY, state.density),
        )
