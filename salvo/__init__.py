__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'salvo'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .arguments import *
from .builtins import *
from .cli import *
from .commands import *
from .context import *
from .decorators import *
from .execution import *
from .faults import *
from .installer import *
from .plugins import *
from .resolution import *
from .tokens import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the built-in plugins
__all__ += builtins.__all__  # type: ignore[attr-defined]
# Load the exposed API of the cli pipeline
# (the cli() function shadows its module here)
__all__ += __import__("sys").modules[__name__ + ".cli"].__all__
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command context
__all__ += context.__all__  # type: ignore[attr-defined]
# Load the exposed API of the decorator chains
__all__ += decorators.__all__  # type: ignore[attr-defined]
# Load the exposed API of the execution orchestrator
__all__ += execution.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the plugin installer
__all__ += installer.__all__  # type: ignore[attr-defined]
# Load the exposed API of the plugins
__all__ += plugins.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command-tree resolution
__all__ += resolution.__all__  # type: ignore[attr-defined]
# Load the exposed API of the tokenizer
__all__ += tokens.__all__  # type: ignore[attr-defined]
