#!/usr/bin/env python3
"""
npm Registry Client
===================

Searches the public npm registry and enriches each hit with registry
metadata, weekly download counts and GitHub stars. Enrichment requests
fan out concurrently; each branch that fails just leaves its field empty.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import aiohttp

from nodemate.exceptions import SearchError
from nodemate.utils.retry import retry_on_transient_errors

logger = logging.getLogger(__name__)

REGISTRY_URL = "https://registry.npmjs.org"
SEARCH_URL = "https://registry.npmjs.org/-/v1/search"
DOWNLOADS_URL = "https://api.npmjs.org/downloads/point/last-week"
GITHUB_API_URL = "https://api.github.com/repos"

SEARCH_WEIGHTS = {"quality": 0.65, "popularity": 0.98, "maintenance": 0.5}

# transport failures, timeouts and undecodable bodies (JSONDecodeError is a ValueError)
FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)

_GITHUB_REPO = re.compile(r"github\.com[/:]([^/]+)/([^/#?]+)")


@dataclass
class PackageInfo:
    name: str
    version: str
    description: str = "No description available"
    weekly_downloads: int = 0
    github_stars: Optional[int] = None
    last_publish: Optional[str] = None
    maintainers: List[str] = field(default_factory=list)
    license: str = "Unknown"
    has_types: bool = False
    homepage: Optional[str] = None
    repository: Optional[str] = None


@dataclass
class SearchResult:
    packages: List[PackageInfo]
    query: str
    total: int


def _package_path(name: str) -> str:
    # scoped names keep their "@" but encode the slash
    return quote(name, safe="@")


class NpmService:
    def __init__(
        self,
        registry_timeout: float = 10.0,
        probe_timeout: float = 5.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.registry_timeout = registry_timeout
        self.probe_timeout = probe_timeout
        self._session = session

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": "nodemate-cli", "Accept": "application/json"}
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @retry_on_transient_errors(max_attempts=3)
    async def _get_json(
        self, url: str, timeout: float, params: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        GET ``url`` and decode JSON. Returns None for 4xx answers; 5xx
        answers raise so the retry decorator gets another go.
        """
        session = await self._get_session()
        async with session.get(
            url, params=params, timeout=aiohttp.ClientTimeout(total=timeout)
        ) as response:
            if 400 <= response.status < 500:
                logger.debug("GET %s -> %s", url, response.status)
                return None
            response.raise_for_status()
            data = await response.json()
        if not isinstance(data, dict):
            logger.debug("GET %s -> unexpected %s body", url, type(data).__name__)
            return None
        return data

    # --- Search ---

    async def search_packages(self, query: str, limit: int = 10) -> SearchResult:
        """
        Raises:
            SearchError: The search endpoint itself could not be queried.
        """
        params = {"text": query, "size": limit, **SEARCH_WEIGHTS}
        try:
            data = await self._get_json(SEARCH_URL, self.registry_timeout, params=params)
        except FETCH_ERRORS as e:
            raise SearchError(
                f"NPM search failed: {e or e.__class__.__name__}",
                query=query,
                original_error=e,
            ) from e
        if data is None:
            raise SearchError(f"NPM search failed for '{query}'", query=query)

        names = [
            obj["package"]["name"]
            for obj in data.get("objects") or []
            if isinstance(obj, dict) and (obj.get("package") or {}).get("name")
        ]
        infos = await asyncio.gather(
            *(self.get_package_info(name) for name in names), return_exceptions=True
        )

        packages = []
        for name, info in zip(names, infos):
            if isinstance(info, Exception):
                logger.warning("Dropping %s from results: %r", name, info)
            elif isinstance(info, BaseException):
                raise info
            elif info is not None:
                packages.append(info)

        return SearchResult(
            packages=packages,
            query=query,
            total=int(data.get("total") or 0),
        )

    # --- Package details ---

    async def get_package_info(self, package_name: str) -> Optional[PackageInfo]:
        """Registry metadata plus download and star counts; None on failure."""
        registry_data, downloads = await asyncio.gather(
            self._get_registry_document(package_name),
            self.get_download_stats(package_name),
        )
        if not registry_data:
            return None

        try:
            latest = registry_data["dist-tags"]["latest"]
            version_data = registry_data["versions"][latest]
        except (KeyError, TypeError):
            logger.warning("Malformed registry document for %s", package_name)
            return None

        repository = registry_data.get("repository")
        repository_url = repository.get("url") if isinstance(repository, dict) else repository

        return PackageInfo(
            name=package_name,
            version=latest,
            description=version_data.get("description") or "No description available",
            weekly_downloads=downloads,
            github_stars=await self.get_github_stars(repository_url),
            last_publish=(registry_data.get("time") or {}).get(latest),
            maintainers=[
                m.get("name", "") for m in registry_data.get("maintainers") or []
                if isinstance(m, dict)
            ],
            license=self._license_name(version_data.get("license")),
            has_types=bool(version_data.get("types") or version_data.get("typings")),
            homepage=registry_data.get("homepage"),
            repository=repository_url,
        )

    @staticmethod
    def _license_name(value: Any) -> str:
        if isinstance(value, dict):
            return value.get("type") or "Unknown"
        return value or "Unknown"

    async def _get_registry_document(self, package_name: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._get_json(
                f"{REGISTRY_URL}/{_package_path(package_name)}", self.registry_timeout
            )
        except FETCH_ERRORS as e:
            logger.warning("Failed to get package info for %s: %s", package_name, e)
            return None

    async def get_download_stats(self, package_name: str) -> int:
        try:
            data = await self._get_json(
                f"{DOWNLOADS_URL}/{_package_path(package_name)}", self.probe_timeout
            )
        except FETCH_ERRORS as e:
            logger.debug("Download stats unavailable for %s: %s", package_name, e)
            return 0
        return int((data or {}).get("downloads") or 0)

    async def get_github_stars(self, repository_url: Optional[str]) -> Optional[int]:
        if not repository_url:
            return None
        match = _GITHUB_REPO.search(repository_url)
        if not match:
            return None

        owner, repo = match.group(1), re.sub(r"\.git$", "", match.group(2))
        try:
            data = await self._get_json(
                f"{GITHUB_API_URL}/{owner}/{repo}", self.probe_timeout
            )
        except FETCH_ERRORS as e:
            logger.debug("GitHub lookup failed for %s/%s: %s", owner, repo, e)
            return None
        if data is None:
            return None
        return int(data.get("stargazers_count") or 0)

    async def get_package_versions(self, package_name: str) -> List[str]:
        """All published versions, newest first."""
        data = await self._get_registry_document(package_name)
        if not data or not isinstance(data.get("versions"), dict):
            raise SearchError(
                f"Failed to get versions for {package_name}", query=package_name
            )
        return list(reversed(list(data["versions"])))

    async def check_package_exists(self, package_name: str) -> bool:
        return await self._get_registry_document(package_name) is not None

    async def _get_version_document(
        self, package_name: str, version: Optional[str] = None
    ) -> Dict[str, Any]:
        url = f"{REGISTRY_URL}/{_package_path(package_name)}/{version or 'latest'}"
        try:
            return await self._get_json(url, self.registry_timeout) or {}
        except FETCH_ERRORS as e:
            logger.debug("Version lookup failed for %s: %s", package_name, e)
            return {}

    async def get_latest_version(self, package_name: str) -> Optional[str]:
        return (await self._get_version_document(package_name)).get("version")

    async def get_dependencies(
        self, package_name: str, version: Optional[str] = None
    ) -> Dict[str, str]:
        document = await self._get_version_document(package_name, version)
        return dict(document.get("dependencies") or {})

    async def get_peer_dependencies(
        self, package_name: str, version: Optional[str] = None
    ) -> Dict[str, str]:
        document = await self._get_version_document(package_name, version)
        return dict(document.get("peerDependencies") or {})
