"""
Builds the SML stack (downloader, metadata client, cache, installer) from
user settings.
"""

import logging
from typing import Optional

from .sml_service import SMLService
from ..cache.sml_cache import SMLCache
from ..metadata.ficsit_app import FicsitAppClient
from ..utils.download import Downloader
from ..utils.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def create_downloader(settings: Settings) -> Downloader:
    return Downloader(max_attempts=settings.download_retries, timeout=settings.download_timeout)


def create_metadata_client(settings: Settings) -> FicsitAppClient:
    return FicsitAppClient(api_url=settings.ficsit_api_url)


def create_sml_cache(settings: Settings) -> SMLCache:
    return SMLCache(
        create_metadata_client(settings),
        create_downloader(settings),
        cache_dir=settings.sml_cache_dir,
    )


def create_sml_service(settings: Optional[Settings] = None) -> SMLService:
    """Create an SMLService configured from settings.json (or the given settings).

    Call ``await service.sml_cache.close()`` when done to release the HTTP
    sessions.
    """
    settings = settings or load_settings()
    logger.debug(f"[SML] Using SML cache {settings.sml_cache_dir} and API {settings.ficsit_api_url}")
    return SMLService(create_sml_cache(settings))
