"""
Serialized access to the single, non-reentrant engine.

The engine holds one active fluid configuration. Many logical
configurations (one per :class:`~rpprop.fluid.Fluid`) are multiplexed onto it
by the :class:`SessionManager`: before running a calculation the session
compares the id of the caller's configuration with the id currently loaded
and reconfigures the engine only when they differ.
"""

import logging
import threading
from contextlib import contextmanager

from ..errors import LockUnusableError, PropertyError

logger = logging.getLogger(__name__)

# Id meaning "no configuration loaded"
NO_CONFIGURATION = 0


class SessionManager:
    """
    Process-wide lock plus the id of the active engine configuration.

    If a calculation ends with an exception that is not one of the package's
    own errors (an unexpected error, ``KeyboardInterrupt``, ``SystemExit``,
    ...), the engine is left in an unknown state: the session is poisoned and
    every later call fails with :class:`LockUnusableError` until
    :meth:`reset` is called.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active_id = NO_CONFIGURATION
        self._poisoned = False

    def __repr__(self):
        return f"SessionManager(active_id={self._active_id}, poisoned={self._poisoned})"

    @property
    def active_id(self):
        return self._active_id

    @property
    def poisoned(self):
        return self._poisoned

    @contextmanager
    def _critical_section(self):
        with self._lock:
            if self._poisoned:
                raise LockUnusableError(
                    "The engine session is unusable after an abnormal exit of a previous "
                    "calculation. Call reset() to use it again."
                )
            try:
                yield
            except PropertyError:
                raise
            except BaseException as exc:
                self._poisoned = True
                self._active_id = NO_CONFIGURATION
                logger.error("Engine session poisoned by %s: %s", type(exc).__name__, exc)
                raise

    def with_configuration(self, config_id, configure_fn, body_fn):
        """
        Run ``body_fn`` with the engine configured for ``config_id``.

        Parameters
        ----------
        config_id : int
            Id of the caller's fluid configuration (strictly positive).
        configure_fn : callable
            Loads the caller's configuration into the engine. Only called when
            ``config_id`` is not the active configuration.
        body_fn : callable
            The calculation. Its return value is returned.

        Raises
        ------
        LockUnusableError
            If the session was poisoned by an earlier call.
        """
        with self._critical_section():
            if self._active_id != config_id:
                logger.debug(
                    "Reconfiguring engine: configuration %d -> %d", self._active_id, config_id
                )
                # A failed configure leaves the engine without a known configuration
                self._active_id = NO_CONFIGURATION
                configure_fn()
                self._active_id = config_id
            else:
                logger.debug("Engine already configured for configuration %d", config_id)
            return body_fn()

    def exclusive(self, body_fn):
        """Run ``body_fn`` under the lock without touching the active configuration."""
        with self._critical_section():
            return body_fn()

    def reset(self):
        """Clear the poisoned flag and forget the active configuration."""
        with self._lock:
            if self._poisoned:
                logger.debug("Resetting poisoned engine session")
            self._poisoned = False
            self._active_id = NO_CONFIGURATION


_SESSION = SessionManager()


def get_session():
    """Return the session guarding the process-wide engine."""
    return _SESSION
