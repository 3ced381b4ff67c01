from .fluid_config import FluidConfiguration, NC_MAX
from .native import NativeEngine, get_engine
from .session import SessionManager, get_session
