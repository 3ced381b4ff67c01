import itertools
import threading

from ..errors import InvalidInputError
from ..utils import validate_finite

# Maximum number of components the engine accepts in one configuration
NC_MAX = 20

# Process-wide id source. Id 0 is reserved for "no configuration".
_ID_COUNTER = itertools.count(1)
_ID_LOCK = threading.Lock()


def next_configuration_id():
    with _ID_LOCK:
        return next(_ID_COUNTER)


class FluidConfiguration:
    """
    Logical fluid configuration: ordered components and their mole fractions.

    Instances are immutable and carry an opaque id that is unique within the
    process. Two configurations built from the same components still get
    different ids, so the session reconfigures the engine when switching
    between them.

    Parameters
    ----------
    components : sequence of str
        Component identifiers understood by the engine, 1 to ``NC_MAX``.
    composition : sequence of float
        Mole fractions, one per component. They are forwarded to the engine
        as given.
    """

    __slots__ = ("_components", "_composition", "_id")

    def __init__(self, components, composition):
        components = tuple(str(c).strip() for c in components)
        composition = tuple(composition)

        if not components:
            raise InvalidInputError("A fluid configuration needs at least one component")
        if len(components) > NC_MAX:
            raise InvalidInputError(
                f"Too many components: {len(components)} (maximum {NC_MAX})"
            )
        if any(not c for c in components):
            raise InvalidInputError("Component identifiers must not be empty")
        if len(composition) != len(components):
            raise InvalidInputError(
                f"Got {len(composition)} mole fractions for {len(components)} components"
            )
        composition = tuple(
            validate_finite(f"Mole fraction of {c}", z) for c, z in zip(components, composition)
        )

        object.__setattr__(self, "_components", components)
        object.__setattr__(self, "_composition", composition)
        object.__setattr__(self, "_id", next_configuration_id())

    @classmethod
    def pure(cls, name):
        return cls((name,), (1.0,))

    def __setattr__(self, key, value):
        raise AttributeError(f"'{type(self).__name__}' object is immutable")

    @property
    def id(self):
        return self._id

    @property
    def components(self):
        return self._components

    @property
    def composition(self):
        return self._composition

    @property
    def is_mixture(self):
        return len(self._components) > 1

    def __len__(self):
        return len(self._components)

    def __repr__(self):
        parts = ", ".join(f"{c}={z:g}" for c, z in zip(self._components, self._composition))
        return f"FluidConfiguration(id={self._id}, {parts})"
