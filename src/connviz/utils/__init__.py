from .matrices import *  # noqa: F401,F403
from .graph import *  # noqa: F401,F403
from .clustering import *  # noqa: F401,F403
