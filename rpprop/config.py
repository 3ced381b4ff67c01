"""
Environment configuration.

The following variables are read, optionally from a ``.env`` file found from
the current working directory upwards:

``RPPROP_BACKEND``
    Engine backend, ``HEOS`` (default, CoolProp's own Helmholtz models) or
    ``REFPROP`` (NIST REFPROP driven through CoolProp).
``REFPROP_PATH``
    Installation directory of REFPROP. Only needed by the ``REFPROP`` backend
    when REFPROP is not installed in one of the usual locations.
"""

import os
import sys
import logging

from dotenv import load_dotenv, find_dotenv

from .errors import InvalidInputError, LibraryNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = "HEOS"
SUPPORTED_BACKENDS = ("HEOS", "REFPROP")

BACKEND_ENV_VAR = "RPPROP_BACKEND"
REFPROP_PATH_ENV_VAR = "REFPROP_PATH"

_ENVIRONMENT_LOADED = False


def load_environment(force=False):
    """
    Load the ``.env`` file once per process.

    Variables already present in the environment are never overridden.

    Parameters
    ----------
    force : bool, optional
        Search and load the ``.env`` file again even if it was already loaded.

    Returns
    -------
    str
        Path of the loaded file, or an empty string when none was found.
    """
    global _ENVIRONMENT_LOADED
    if _ENVIRONMENT_LOADED and not force:
        return ""

    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)
        logger.debug("Loaded environment from %s", path)
    _ENVIRONMENT_LOADED = True
    return path


def get_backend(backend=None):
    """
    Return the upper-cased engine backend name.

    ``backend`` takes precedence over the ``RPPROP_BACKEND`` variable, which
    takes precedence over ``HEOS``.

    Raises
    ------
    InvalidInputError
        If the backend is not one of the supported backends.
    """
    if backend is None:
        load_environment()
        backend = os.environ.get(BACKEND_ENV_VAR) or DEFAULT_BACKEND
    name = str(backend).strip().upper()
    if name not in SUPPORTED_BACKENDS:
        raise InvalidInputError(
            f"Unsupported backend '{backend}'. Options: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return name


def candidate_refprop_paths(platform=None):
    """Return the installation directories searched on ``platform`` (default: this one)."""
    platform = sys.platform if platform is None else platform
    if platform.startswith("win"):
        return [
            r"C:\Program Files (x86)\REFPROP",
            r"C:\Program Files\REFPROP",
        ]
    if platform == "darwin":
        return [
            "/Applications/REFPROP",
            "/opt/refprop",
        ]
    return [
        "/opt/refprop",
        "/usr/local/lib/refprop",
    ]


def find_refprop_path():
    """
    Locate the REFPROP installation directory.

    ``REFPROP_PATH`` is used when it points to an existing directory, followed
    by the usual installation directories of the current platform.

    Raises
    ------
    LibraryNotFoundError
        If no candidate exists. The message lists every location tried.
    """
    load_environment()
    tried = []

    env_path = os.environ.get(REFPROP_PATH_ENV_VAR)
    if env_path:
        tried.append(env_path)
        if os.path.isdir(env_path):
            return env_path

    for candidate in candidate_refprop_paths():
        tried.append(candidate)
        if os.path.isdir(candidate):
            return candidate

    raise LibraryNotFoundError(
        "REFPROP installation not found. Set REFPROP_PATH or install it in one of: "
        + ", ".join(tried)
    )
