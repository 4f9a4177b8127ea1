"""Upstream source-control host client (GitHub REST API)."""
import os
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from cdn_registry.domain.entities.app_config import AppConfig
from cdn_registry.infra.common.errors import UpstreamError
from cdn_registry.infra.common.logger import get_logger

logger = get_logger(__name__)

_RETRY_STATUSES = (500, 502, 503, 504)


def _get_cert_path() -> str | None:
    """
    Get path to custom certificate bundle if available.
    
    Returns:
        Path to certificate bundle or None if not found
    """
    cert_path_env = os.getenv("SSL_CERT_FILE")
    if cert_path_env and Path(cert_path_env).exists():
        return cert_path_env
    return None


def build_session(token: Optional[str], retries: int, verify_ssl: bool = True) -> requests.Session:
    """
    Build an HTTP session with auth headers and bounded GET retries.
    
    Args:
        token: Bearer credential (None for anonymous, rate limited access)
        retries: Retry budget for idempotent requests on 5xx/connection errors
        verify_ssl: Whether to verify SSL certificates
    """
    session = requests.Session()
    session.headers.update({
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": "cdn-registry-sync",
    })
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    
    retry = Retry(
        total=retries,
        backoff_factor=1,
        status_forcelist=_RETRY_STATUSES,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    
    if verify_ssl:
        cert_path = _get_cert_path()
        if cert_path:
            logger.info("Using custom certificate bundle: %s", cert_path)
            session.verify = cert_path
    else:
        import urllib3
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        session.verify = False
    return session


class GitHubClient:
    """Read-only client for releases, tags, commits and downloads."""
    
    def __init__(
        self,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        token: Optional[str] = None,
        timeout: float = 300,
        retries: int = 2,
        verify_ssl: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.timeout = timeout
        self.session = session or build_session(token, retries, verify_ssl)
    
    @classmethod
    def from_config(cls, app_config: AppConfig) -> "GitHubClient":
        return cls(
            api_url=app_config.api_url,
            raw_url=app_config.raw_url,
            token=app_config.github_token,
            timeout=app_config.http_timeout,
            retries=app_config.http_retries,
            verify_ssl=app_config.verify_ssl,
        )
    
    @property
    def host(self) -> str:
        return "github"
    
    def _get(self, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise UpstreamError(f"GET {url} failed: {e}") from e
        return response
    
    def _get_json(self, url: str, params: Optional[dict] = None, allow_missing: bool = False) -> Any:
        response = self._get(url, params=params)
        if allow_missing and response.status_code == 404:
            return None
        if not response.ok:
            raise UpstreamError(f"GET {url} returned HTTP {response.status_code}: {response.text[:200]}")
        return response.json()
    
    def _get_paginated(self, url: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        params: Optional[dict] = {"per_page": 100}
        next_url: Optional[str] = url
        while next_url:
            response = self._get(next_url, params=params)
            if not response.ok:
                raise UpstreamError(f"GET {next_url} returned HTTP {response.status_code}: {response.text[:200]}")
            page = response.json()
            if not isinstance(page, list):
                raise UpstreamError(f"GET {next_url}: expected a list")
            items.extend(page)
            next_url = response.links.get("next", {}).get("url")
            # the next link already carries the query string
            params = None
        return items
    
    def get_latest_release(self, repo: str) -> Optional[dict[str, Any]]:
        """Get the host-defined latest release, or None when the repo has none."""
        return self._get_json(f"{self.api_url}/repos/{repo}/releases/latest", allow_missing=True)
    
    def list_releases(self, repo: str) -> list[dict[str, Any]]:
        """List releases in host order (newest first)."""
        return self._get_paginated(f"{self.api_url}/repos/{repo}/releases")
    
    def list_tags(self, repo: str) -> list[dict[str, Any]]:
        """List tags (``name`` plus ``commit.sha``)."""
        return self._get_paginated(f"{self.api_url}/repos/{repo}/tags")
    
    def resolve_commit(self, repo: str, ref: str) -> str:
        """Resolve a branch, tag or sha to its current commit sha."""
        data = self._get_json(f"{self.api_url}/repos/{repo}/commits/{quote(ref, safe='')}", allow_missing=True)
        sha = (data or {}).get("sha")
        if not sha:
            raise UpstreamError(f"Ref {ref!r} does not resolve to a commit in {repo}")
        return sha
    
    def archive_url(self, repo: str, ref: str) -> str:
        """URL of the zip snapshot of a repository at a ref."""
        return f"{self.api_url}/repos/{repo}/zipball/{quote(ref, safe='')}"
    
    def raw_file_url(self, repo: str, sha: str, path: str) -> str:
        """URL of a file at an exact commit (never a moving ref)."""
        return f"{self.raw_url}/{repo}/{sha}/{quote(path.lstrip('/'))}"
    
    def download(self, url: str) -> bytes:
        """Download a release asset, archive or raw file."""
        logger.info("Downloading %s", url)
        response = self._get(url, headers={"Accept": "application/octet-stream"})
        if not response.ok:
            raise UpstreamError(f"Download {url} returned HTTP {response.status_code}")
        return response.content
