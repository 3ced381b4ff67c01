import logging

from .errors import *
from .helpers_props import *
from .units import *

# Import subpackages
from . import config
from . import engine
from . import flash

# Import API classes
from .engine import FluidConfiguration, NativeEngine, SessionManager, get_engine, get_session
from .flash import FlashRequest, get_property, resolve_pair
from .fluid import Fluid

logging.getLogger(__name__).addHandler(logging.NullHandler())


# Package info
__version__ = "0.1.0"
PACKAGE_NAME = "rpprop"
BREAKLINE = 80 * "-"
