"""Reference sample corpora for the statistical fallback."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog

log = structlog.get_logger("repolang.samples")

LINGUIST_REPO = "github-linguist/linguist"
RAW_BASE_URL = "https://raw.githubusercontent.com"

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds


class SampleProvider(Protocol):
    """Source of one reference sample per language."""

    async def get_sample(self, language: str) -> str | None: ...


class InMemorySampleProvider:
    def __init__(self, samples: Mapping[str, str]) -> None:
        self._samples = dict(samples)

    async def get_sample(self, language: str) -> str | None:
        return self._samples.get(language)


class DirectorySampleProvider:
    """Reads ``<root>/<Language>/<first file, sorted>``, linguist's ``samples/`` layout."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root)

    async def get_sample(self, language: str) -> str | None:
        return await asyncio.to_thread(self._read, language)

    def _read(self, language: str) -> str | None:
        folder = self.root / language
        if not folder.is_dir():
            return None
        files = sorted(p for p in folder.iterdir() if p.is_file())
        if not files:
            return None
        return files[0].read_text(encoding="utf-8", errors="replace")


class GitHubSampleProvider:
    """Fetches samples from the upstream linguist repository.

    The repository tree is listed once per instance; each language's first
    sample blob is then downloaded from the raw content host and cached.
    """

    def __init__(
        self,
        ref: str | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        retry_base_delay: float = _RETRY_BASE_DELAY,
    ) -> None:
        self.ref = ref or os.environ.get("REPOLANG_LINGUIST_REF", "HEAD")
        self.retry_base_delay = retry_base_delay
        resolved_token = token or os.environ.get("GITHUB_TOKEN")
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if resolved_token:
            self._headers["Authorization"] = f"token {resolved_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=30.0, follow_redirects=True)
        self._tree: list[str] | None = None
        self._tree_lock = asyncio.Lock()
        self._cache: dict[str, str | None] = {}

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GitHubSampleProvider:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_sample(self, language: str) -> str | None:
        if language in self._cache:
            return self._cache[language]

        prefix = f"samples/{language}/"
        paths = [p for p in await self._sample_paths() if p.startswith(prefix)]
        if not paths:
            self._cache[language] = None
            return None

        url = f"{RAW_BASE_URL}/{LINGUIST_REPO}/{self.ref}/{quote(paths[0])}"
        resp = await self._request_with_retry(url)
        self._cache[language] = resp.text
        log.debug("samples.fetched", language=language, path=paths[0])
        return resp.text

    # ── internal ───────────────────────────────────────────────────────────

    async def _sample_paths(self) -> list[str]:
        async with self._tree_lock:
            if self._tree is None:
                url = f"https://api.github.com/repos/{LINGUIST_REPO}/git/trees/{self.ref}"
                resp = await self._request_with_retry(
                    url, params={"recursive": "1"}, headers=self._headers
                )
                data: dict[str, Any] = resp.json()
                self._tree = sorted(
                    item["path"]
                    for item in data.get("tree", [])
                    if item.get("type") == "blob" and item.get("path", "").startswith("samples/")
                )
                log.info("samples.tree_loaded", ref=self.ref, blobs=len(self._tree))
            return self._tree

    async def _request_with_retry(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET with exponential backoff on 5xx and timeout errors."""
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.get(url, params=params, headers=headers)
                if resp.status_code < 500:
                    resp.raise_for_status()
                    return resp
                log.warning(
                    "samples.server_error",
                    url=url,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = httpx.HTTPStatusError(
                    f"{resp.status_code}", request=resp.request, response=resp
                )
            except httpx.TimeoutException as exc:
                log.warning("samples.timeout", url=url, attempt=attempt + 1, max_retries=_MAX_RETRIES)
                last_exc = exc

            if attempt < _MAX_RETRIES - 1:
                await asyncio.sleep(self.retry_base_delay * (2**attempt))

        raise last_exc  # type: ignore[misc]
