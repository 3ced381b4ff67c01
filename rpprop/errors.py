import logging

logger = logging.getLogger(__name__)


class PropertyError(Exception):
    """Base class for every error raised by rpprop."""


# ------------------------------------------------------------------------------------ #
# Resource discovery
# ------------------------------------------------------------------------------------ #

class ResourceNotFoundError(PropertyError):
    """The engine library or a fluid definition could not be located."""


class LibraryNotFoundError(ResourceNotFoundError):
    pass


class FluidNotFoundError(ResourceNotFoundError):
    pass


# ------------------------------------------------------------------------------------ #
# Caller mistakes (raised before the engine is touched)
# ------------------------------------------------------------------------------------ #

class InvalidInputError(PropertyError, ValueError):
    """Non-finite number, bad composition, unknown backend, ..."""


class UnsupportedPairError(InvalidInputError):
    pass


class UnknownPropertyError(InvalidInputError):
    pass


# ------------------------------------------------------------------------------------ #
# Engine and session failures
# ------------------------------------------------------------------------------------ #

class EngineError(PropertyError):
    """Hard failure reported by the equation-of-state engine (positive status code)."""

    def __init__(self, code, message, routine=None):
        self.code = code
        self.message = message
        self.routine = routine
        prefix = f"{routine}: " if routine else ""
        super().__init__(f"{prefix}engine error {code}: {message}")


class LockUnusableError(PropertyError, RuntimeError):
    """The global engine lock was poisoned by an abnormal exit of a previous holder."""


def check_status(code, message, routine=None):
    """
    Interpret a signed engine status code.

    Parameters
    ----------
    code : int
        Status reported by the engine. Positive values are hard failures,
        negative values are advisory warnings and zero means success.
    message : str
        Message reported together with the code.
    routine : str, optional
        Name of the engine primitive, used to prefix messages.

    Raises
    ------
    EngineError
        If ``code`` is positive.
    """
    if code > 0:
        raise EngineError(code, message, routine)
    if code < 0:
        prefix = f"{routine}: " if routine else ""
        logger.warning("%sengine warning %d: %s", prefix, code, message)
