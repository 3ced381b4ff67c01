import enum
import dataclasses

import numpy as np
import equinox as eqx

from .errors import InvalidInputError, UnknownPropertyError


# -------------------------------------------------------------------- #
# Property keys accepted by the flash dispatcher
# -------------------------------------------------------------------- #

class PropertyKey(enum.Enum):
    T = "T"
    P = "P"
    D = "D"
    H = "H"
    S = "S"
    Q = "Q"
    CV = "CV"
    CP = "CP"
    W = "W"
    E = "E"
    ETA = "ETA"
    TCX = "TCX"

    @classmethod
    def parse(cls, text):
        """
        Parse a property key, case-insensitively.

        Synonyms are folded onto their canonical key: ``RHO`` -> ``D``,
        ``U`` -> ``E``, ``A`` -> ``W``, ``V``/``VIS`` -> ``ETA`` and
        ``L``/``LAMBDA`` -> ``TCX``.

        Raises
        ------
        UnknownPropertyError
            If ``text`` is not a known key or synonym.
        """
        if isinstance(text, cls):
            return text
        if not isinstance(text, str):
            raise UnknownPropertyError(f"Property key must be a string, got {text!r}")
        upper = text.strip().upper()
        upper = KEY_SYNONYMS.get(upper, upper)
        try:
            return cls(upper)
        except ValueError:
            raise UnknownPropertyError(
                f"Unknown property key '{text}'. Supported: {SUPPORTED_KEYS_TEXT}"
            ) from None

    @property
    def label(self):
        return KEY_LABELS.get(self, self.value)


KEY_SYNONYMS = {
    "RHO": "D",
    "U": "E",
    "A": "W",
    "V": "ETA",
    "VIS": "ETA",
    "L": "TCX",
    "LAMBDA": "TCX",
}

KEY_LABELS = {
    PropertyKey.CV: "Cv",
    PropertyKey.CP: "Cp",
}

SUPPORTED_KEYS_TEXT = " ".join(KEY_LABELS.get(k, k.value) for k in PropertyKey)

# Keys that are read from the thermodynamic state and the field that holds them
STATE_FIELDS = {
    PropertyKey.T: "temperature",
    PropertyKey.P: "pressure",
    PropertyKey.D: "density",
    PropertyKey.H: "enthalpy",
    PropertyKey.S: "entropy",
    PropertyKey.Q: "quality",
    PropertyKey.E: "internal_energy",
    PropertyKey.CV: "isochoric_heat_capacity",
    PropertyKey.CP: "isobaric_heat_capacity",
    PropertyKey.W: "speed_of_sound",
}

# Keys that need a call to the transport primitive
TRANSPORT_FIELDS = {
    PropertyKey.ETA: "viscosity",
    PropertyKey.TCX: "conductivity",
}


class FlashPrimitive(enum.Enum):
    """Flash routines, named after their arguments in calling order."""

    TP = (PropertyKey.T, PropertyKey.P)
    TD = (PropertyKey.T, PropertyKey.D)
    TH = (PropertyKey.T, PropertyKey.H)
    TS = (PropertyKey.T, PropertyKey.S)
    TQ = (PropertyKey.T, PropertyKey.Q)
    PD = (PropertyKey.P, PropertyKey.D)
    PH = (PropertyKey.P, PropertyKey.H)
    PS = (PropertyKey.P, PropertyKey.S)
    PQ = (PropertyKey.P, PropertyKey.Q)
    DH = (PropertyKey.D, PropertyKey.H)
    DS = (PropertyKey.D, PropertyKey.S)
    HS = (PropertyKey.H, PropertyKey.S)

    @property
    def arguments(self):
        return self.value

    @property
    def uses_quality(self):
        return PropertyKey.Q in self.value


class PhaseCurve(enum.Enum):
    """Side of the two-phase dome on which saturation values are taken."""

    BUBBLE = "bubble"
    DEW = "dew"

    @classmethod
    def parse(cls, curve):
        """
        Parse a phase curve given as a member or its name, case-insensitively.

        Raises
        ------
        InvalidInputError
            If ``curve`` is neither ``"bubble"`` nor ``"dew"``.
        """
        if isinstance(curve, cls):
            return curve
        try:
            return cls(curve.strip().lower())
        except (AttributeError, ValueError):
            raise InvalidInputError(
                f"Unknown phase curve {curve!r}. Options: bubble, dew"
            ) from None


# -------------------------------------------------------------------- #
# Define aliases for canonical property names
# -------------------------------------------------------------------- #

PROPERTY_ALIASES = {
    # --- thermodynamic state
    "temperature": ["T"],
    "pressure": ["P", "p"],
    "density": ["D", "d", "rho"],
    "enthalpy": ["H", "h"],
    "entropy": ["S", "s"],
    "internal_energy": ["E", "e", "U", "u"],
    "isochoric_heat_capacity": ["CV", "Cv", "cv"],
    "isobaric_heat_capacity": ["CP", "Cp", "cp"],
    "speed_of_sound": ["W", "w", "a", "speed_sound"],
    "quality": ["Q", "q", "vapor_quality"],
    # --- saturation
    "density_liquid": ["Dl", "rho_l", "rhol"],
    "density_vapor": ["Dv", "rho_v", "rhov"],
    # --- transport
    "viscosity": ["ETA", "eta", "mu"],
    "conductivity": ["TCX", "tcx", "k", "lambda"],
    # --- fluid constants
    "molar_mass": ["M", "wmm"],
    "triple_point_temperature": ["Ttrp", "T_triple"],
    "normal_boiling_point": ["Tnbp", "T_nbp"],
    "critical_temperature": ["Tc", "T_critical"],
    "critical_pressure": ["Pc", "p_critical"],
    "critical_density": ["Dc", "rho_critical"],
    "critical_compressibility": ["Zc"],
    "acentric_factor": ["omega", "acf"],
    "dipole_moment": ["dip", "dipole"],
    "gas_constant": ["R", "Rgas"],
}


# flat lookup alias -> canonical
ALIAS_TO_CANONICAL = {}
for canonical, aliases in PROPERTY_ALIASES.items():
    for alias in aliases:
        if alias in ALIAS_TO_CANONICAL:
            raise ValueError(f"Alias {alias} defined for multiple properties")
        ALIAS_TO_CANONICAL[alias] = canonical
    # also allow canonical name itself
    ALIAS_TO_CANONICAL[canonical] = canonical

PROPERTIES_CANONICAL = PROPERTY_ALIASES.keys()


# -------------------------------------------------------------------- #
# Define equinox Modules to represent property records
# -------------------------------------------------------------------- #

class BaseState(eqx.Module):
    """
    Base class for the immutable property records.

    - metadata fields are configurable via _meta_fields
    - alias lookup uses the global ALIAS_TO_CANONICAL table
    """

    # --- configuration hooks (static so they don't become pytree leaves)
    _meta_fields: tuple = eqx.field(static=True, default=("_meta_fields",))

    # --- Access helpers
    def __getitem__(self, key: str):
        """Allow dictionary-style access via canonical or alias name"""
        # Metadata keys: passthrough
        if key in self._meta_fields:
            return getattr(self, key)

        # Canonical / alias keys
        if key in ALIAS_TO_CANONICAL and ALIAS_TO_CANONICAL[key] in self._fields():
            return getattr(self, ALIAS_TO_CANONICAL[key])

        raise KeyError(f"Unknown property alias: {key}")

    def __getattr__(self, key: str):
        """Allow attribute-style access via alias names"""
        if key in ALIAS_TO_CANONICAL and ALIAS_TO_CANONICAL[key] != key:
            return getattr(self, ALIAS_TO_CANONICAL[key])
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{key}'")

    def __repr__(self) -> str:
        """Readable string representation"""
        lines = []
        for name, val in self.__dict__.items():
            if val is None or name == "_meta_fields":
                continue
            if isinstance(val, enum.Enum):
                val = val.value
            lines.append(f"  {name}={val}")
        return f"{type(self).__name__}(\n" + ",\n".join(lines) + "\n)"

    @classmethod
    def _fields(cls):
        return tuple(f.name for f in dataclasses.fields(cls))

    def to_dict(self, include_aliases: bool = False):
        """Return dict of numeric properties, with optional aliases."""

        skip = set(self._meta_fields)
        out = {}

        for k, v in self.__dict__.items():
            if v is None or k in skip:
                continue
            out[k] = float(np.asarray(v))

        # alias expansion
        if include_aliases:
            for canonical, aliases in PROPERTY_ALIASES.items():
                if canonical in out:
                    for alias in aliases:
                        if alias not in out:
                            out[alias] = out[canonical]

        return out

    def keys(self):
        """Dict-style iteration"""
        return self.to_dict().keys()

    def values(self):
        """Dict-style iteration"""
        return self.to_dict().values()

    def items(self):
        """Dict-style iteration"""
        return self.to_dict().items()

    def replace(self, **changes):
        """Return a copy of the record with some fields replaced."""
        return dataclasses.replace(self, **changes)


class ThermoState(BaseState):
    """
    Thermodynamic state.

    Any field can be NaN when the engine cannot define it, for example the
    heat capacities or the speed of sound of a state inside the two-phase
    dome, or the quality of a supercritical state.
    """

    temperature: float = np.nan
    pressure: float = np.nan
    density: float = np.nan
    enthalpy: float = np.nan
    entropy: float = np.nan
    isochoric_heat_capacity: float = np.nan
    isobaric_heat_capacity: float = np.nan
    speed_of_sound: float = np.nan
    quality: float = np.nan
    internal_energy: float = np.nan


class SaturationState(BaseState):
    """Saturation boundary values taken on the bubble or dew curve."""

    _meta_fields: tuple = eqx.field(static=True, default=("phase_curve", "_meta_fields"))
    phase_curve: PhaseCurve = eqx.field(static=True, default=PhaseCurve.BUBBLE)

    temperature: float = np.nan
    pressure: float = np.nan
    density_liquid: float = np.nan
    density_vapor: float = np.nan


class TransportState(BaseState):
    viscosity: float = np.nan
    conductivity: float = np.nan


class CriticalState(BaseState):
    temperature: float = np.nan
    pressure: float = np.nan
    density: float = np.nan


class FluidInfo(BaseState):
    """
    Constants of a single component, always in the native basis.

    ``normal_boiling_point`` and ``dipole_moment`` are NaN when the fluid
    model does not define them.
    """

    molar_mass: float = np.nan
    triple_point_temperature: float = np.nan
    normal_boiling_point: float = np.nan
    critical_temperature: float = np.nan
    critical_pressure: float = np.nan
    critical_density: float = np.nan
    critical_compressibility: float = np.nan
    acentric_factor: float = np.nan
    dipole_moment: float = np.nan
    gas_constant: float = np.nan
