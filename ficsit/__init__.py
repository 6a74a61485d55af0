# Ficsit Package
# Locates Satisfactory installations and manages the Satisfactory Mod Loader (SML) in them.

__version__ = "0.1.0"

from .errors import FicsitError, NotFoundError, SetupError, DownloadError, DownloadNotFoundError
