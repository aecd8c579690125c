from .config.settings import get_config
from .utils.logging import Logger, get_logger
from .utils.terminal import supports_utf8
from .utils.version import get_pyproject_version

__license__ = "MIT"
__version__ = get_pyproject_version()


if supports_utf8():
    ENTRACKER_HEADER = f"""
╔═══════════════════════════════════════════════════════════════════════════════╗
║                              E N T R A C K E R                                ║
╠═══════════════════════════════════════════════════════════════════════════════╣
║                                                                               ║
║  Version: {__version__:<68}║
║  License: {__license__:<68}║
║  Tracks series, movies, anime and anime movies in a Google spreadsheet        ║
║                                                                               ║
╚═══════════════════════════════════════════════════════════════════════════════╝
    """.strip()
else:
    ENTRACKER_HEADER = f"""
+-------------------------------------------------------------------------------+
|                              E N T R A C K E R                                |
+-------------------------------------------------------------------------------+
|                                                                               |
|  Version: {__version__:<68}|
|  License: {__license__:<68}|
|  Tracks series, movies, anime and anime movies in a Google spreadsheet        |
|                                                                               |
+-------------------------------------------------------------------------------+
    """.strip()

config = get_config()

log: Logger = get_logger()
