# Stores package
from .base import CandidateInstall, InstallFinder, InstallFindResult
from .epic import EpicFinder
from .filesystem import FilesystemFinder
from .manager import InstallDiscovery, default_finders
from .steam import SteamFinder, SteamFlatpakFinder

__all__ = [
    'CandidateInstall',
    'InstallFinder',
    'InstallFindResult',
    'InstallDiscovery',
    'default_finders',
    'SteamFinder',
    'SteamFlatpakFinder',
    'EpicFinder',
    'FilesystemFinder',
]
