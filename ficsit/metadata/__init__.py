"""Release metadata sources."""

from .ficsit_app import FicsitAppClient, SMLVersionInfo

__all__ = ['FicsitAppClient', 'SMLVersionInfo']
