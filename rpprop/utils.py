import math
import numbers
import numpy as np

from .errors import InvalidInputError


def is_numeric(value):
    """
    Check if a value is a real scalar number, including NumPy scalar types.

    Booleans and complex numbers are excluded since none of the property
    inputs can take them.

    Parameters
    ----------
    value : any type
        The value to be checked.

    Returns
    -------
    bool
        True if the value is a real scalar number, otherwise False.
    """
    # Exclude Python bool
    if isinstance(value, (bool, np.bool_)):
        return False

    # Python numbers (int, float)
    if isinstance(value, numbers.Real):
        return True

    # NumPy scalar types
    if isinstance(value, np.generic):
        return np.issubdtype(type(value), np.number) and not np.issubdtype(
            type(value), np.complexfloating
        )

    return False


def validate_finite(name, value):
    """
    Return ``value`` as a float if it is a finite real number.

    Parameters
    ----------
    name : str
        Name of the argument, used in the error message.
    value : float
        Value to be checked.

    Raises
    ------
    InvalidInputError
        If the value is not a real number, or is NaN or infinite.
    """
    if not is_numeric(value):
        raise InvalidInputError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value}")
    return value


