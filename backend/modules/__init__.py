"""Feature modules registered by the composition root.

Each module bundles an API router with the tables it owns and the names of
the modules whose providers it consumes. Modules are siblings: none of them
is started before another.
"""

from .log_module import LOG_MODULE
from .user_module import USER_MODULE

DEFAULT_MODULES = (USER_MODULE, LOG_MODULE)

__all__ = [
    "DEFAULT_MODULES",
    "LOG_MODULE",
    "USER_MODULE",
]
