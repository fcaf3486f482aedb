__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'herald'
__author__ = 'herald contributors'
__license__ = 'MIT'
__version__ = "0.1.0"

from .arguments import *
from .commands import *
from .components import *
from .configuration import *
from .context import *
from .faults import *
from .missing import *
from .modules import *
from .parsing import *
from .preconditions import *
from .readers import *
from .results import *
from .services import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(0, 1, 0, "final", 0, "")

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
# Load the exposed API of the dispatcher
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the component model
__all__ += components.__all__  # type: ignore[attr-defined]
__all__ += configuration.__all__  # type: ignore[attr-defined]
__all__ += context.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
__all__ += missing.__all__  # type: ignore[attr-defined]
__all__ += modules.__all__  # type: ignore[attr-defined]
__all__ += parsing.__all__  # type: ignore[attr-defined]
__all__ += preconditions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the readers
__all__ += readers.__all__  # type: ignore[attr-defined]
__all__ += results.__all__  # type: ignore[attr-defined]
__all__ += services.__all__  # type: ignore[attr-defined]
