"""ficsit.app GraphQL API adapter for SML release metadata.

Queries the public ficsit.app API for the list of SML releases.
Reference: https://api.ficsit.app/v2/query (GraphQL)
"""
import asyncio
import logging
import ssl
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

import aiohttp
import certifi

from ..utils.semver import coerce_version, version_key
from ..utils.settings import FICSIT_API_URL

logger = logging.getLogger(__name__)

SML_VERSIONS_PAGE_SIZE = 100

SML_VERSIONS_QUERY = """
query GetSMLVersions($limit: Int!, $offset: Int!) {
  getSMLVersions(filter: {limit: $limit, offset: $offset}) {
    count
    sml_versions {
      id
      version
      satisfactory_version
      changelog
      date
      link
    }
  }
}
"""


@dataclass
class SMLVersionInfo:
    """One SML release as listed by ficsit.app"""
    version: str
    link: str
    satisfactory_version: int = 0  # Minimum game changelist supported
    date: Optional[str] = None
    changelog: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'SMLVersionInfo':
        return cls(
            version=data.get('version', ''),
            link=data.get('link') or '',
            satisfactory_version=int(data.get('satisfactory_version') or 0),
            date=data.get('date'),
            changelog=data.get('changelog') or '',
        )


class FicsitAppClient:
    """Adapter for the ficsit.app GraphQL API."""

    def __init__(self, api_url: str = FICSIT_API_URL, timeout: float = 30.0):
        self.api_url = api_url
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None
        self._sml_versions: Optional[List[SMLVersionInfo]] = None
        self._sml_versions_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context, limit_per_host=5)
            self.session = aiohttp.ClientSession(connector=connector)
        return self.session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def _query(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Run a GraphQL query and return its data section.

        Raises:
            aiohttp.ClientError: On transport errors or non-200 answers
            ValueError: If the API reports GraphQL errors
        """
        session = await self._get_session()
        async with session.post(
            self.api_url,
            json={'query': query, 'variables': variables},
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as resp:
            resp.raise_for_status()
            payload = await resp.json()

        if payload.get('errors'):
            raise ValueError(f"ficsit.app query failed: {payload['errors']}")
        return payload.get('data') or {}

    async def get_sml_versions(self, refresh: bool = False) -> List[SMLVersionInfo]:
        """
        Get all SML releases, newest first.

        The list is fetched once per client and reused afterwards.

        Args:
            refresh: Fetch again even if a list is already cached

        Returns:
            List of SMLVersionInfo
        """
        async with self._sml_versions_lock:
            if self._sml_versions is not None and not refresh:
                return self._sml_versions

            versions: List[SMLVersionInfo] = []
            offset = 0
            while True:
                data = await self._query(
                    SML_VERSIONS_QUERY,
                    {'limit': SML_VERSIONS_PAGE_SIZE, 'offset': offset},
                )
                page = (data.get('getSMLVersions') or {}).get('sml_versions') or []
                versions.extend(SMLVersionInfo.from_api(item) for item in page)
                if len(page) < SML_VERSIONS_PAGE_SIZE:
                    break
                offset += SML_VERSIONS_PAGE_SIZE

            versions.sort(key=lambda v: version_key(v.version), reverse=True)
            logger.debug(f"[FicsitApp] Fetched {len(versions)} SML versions")
            self._sml_versions = versions
            return versions

    async def lookup_release_info(self, version: str) -> Optional[SMLVersionInfo]:
        """
        Find the release of a specific SML version.

        Args:
            version: SML version (coerced before comparison)

        Returns:
            SMLVersionInfo with a download link, or None if no such release
        """
        wanted = coerce_version(version)
        if not wanted:
            return None

        for info in await self.get_sml_versions():
            if coerce_version(info.version) == wanted and info.link:
                return info

        logger.debug(f"[FicsitApp] No SML release matches {version}")
        return None

    async def get_latest_sml_version(self) -> Optional[SMLVersionInfo]:
        """Get the newest SML release, or None if the API lists none."""
        versions = await self.get_sml_versions()
        return versions[0] if versions else None
