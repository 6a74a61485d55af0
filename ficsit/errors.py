"""Error types raised by install discovery and SML management."""


class FicsitError(Exception):
    """Base class for all errors raised by this package."""


class NotFoundError(FicsitError):
    """A requested component version does not exist, locally or remotely."""

    def __init__(self, message: str, component: str, version: str):
        super().__init__(message)
        self.component = component
        self.version = version


class SetupError(FicsitError):
    """A precondition for a safe mutation is violated.

    The message is meant to be shown to the user as-is, so it should say
    what to do (e.g. close Steam and retry).
    """


class DownloadError(FicsitError):
    """A download failed after all retries."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{message} ({url})")
        self.url = url


class DownloadNotFoundError(DownloadError):
    """The server reported that the requested file does not exist."""
