"""Business logic services for Ficsit."""

from .sml_service import SMLService
from .steam_setup import SteamLaunchOptionsPatcher
from .factory import create_sml_service

__all__ = ['SMLService', 'SteamLaunchOptionsPatcher', 'create_sml_service']
