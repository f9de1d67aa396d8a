"""GitHub REST API client for repository analysis.

Fetches the README, the recursive file tree (``main`` then ``master``), an
optional ``package.json`` manifest and a bounded batch of source files used
as extra context for the LLM.
"""

import asyncio
import base64
import binascii
import json
import logging
import re
from collections.abc import AsyncIterator
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict

from config import settings
from services.errors import RateLimited, RepoAnalyzerError, RepoNotFound, UpstreamError

logger = logging.getLogger(__name__)

README_MAX_CHARS = 10_000
TREE_BRANCHES = ("main", "master")
TREE_MAX_FILES = 500
MANIFEST_PATH = "package.json"

# Source context sent to the LLM
CONTEXT_MAX_FILES = 30
CONTEXT_BATCH_SIZE = 5
CONTEXT_FILE_MAX_CHARS = 5_000

PRIORITY_PATTERNS: list[re.Pattern] = [
    re.compile(r"(?:^|/)package\.json$"),
    re.compile(r"(?:^|/)tsconfig\.json$"),
    re.compile(r"(?:^|/)pyproject\.toml$"),
    re.compile(r"(?:^|/)requirements\.txt$"),
    re.compile(r"(?:^|/)next\.config\."),
    re.compile(r"(?:^|/)(?:src|app|lib|components)/.*\.(?:ts|tsx|js|jsx|py)$"),
]

RATE_LIMIT_MESSAGE = "GitHub API rate limit exceeded or repository is private"


class FileFetchResult(BaseModel):
    """Outcome of fetching one file: either content or the error that stopped it."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: str
    content: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content)


def _blob_paths(payload) -> list[str]:
    """Blob paths from a git trees payload; raises UpstreamError on an unexpected shape."""
    if not isinstance(payload, dict) or not isinstance(payload.get("tree", []), list):
        raise UpstreamError("GitHub returned an unexpected tree payload")
    files = []
    for item in payload.get("tree", []):
        if not isinstance(item, dict):
            raise UpstreamError("GitHub returned an unexpected tree entry")
        if item.get("type") == "blob" and isinstance(item.get("path"), str):
            files.append(item["path"])
    return files


def select_priority_files(files: list[str], limit: int = CONTEXT_MAX_FILES) -> list[str]:
    """Return the first ``limit`` paths matching any of PRIORITY_PATTERNS."""
    selected = [f for f in files if any(p.search(f) for p in PRIORITY_PATTERNS)]
    return selected[:limit]


def decode_content(payload: dict) -> str:
    """Decode a contents-API payload (base64 with embedded newlines)."""
    content = payload.get("content") or ""
    if payload.get("encoding", "base64") != "base64":
        return content
    try:
        raw = base64.b64decode("".join(content.split()))
    except (binascii.Error, ValueError) as e:
        raise UpstreamError(f"GitHub returned undecodable content: {e}") from e
    return raw.decode("utf-8", errors="replace")


class GitHubFetcher:
    """Async GitHub client. Use as ``async with GitHubFetcher() as fetcher``."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = settings.github_token if token is None else token
        self.base_url = base_url or settings.github_api_base
        self.timeout = timeout if timeout is not None else settings.github_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "repo-analyzer",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def __aenter__(self) -> "GitHubFetcher":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict | None = None) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("GitHubFetcher must be used as an async context manager")
        try:
            return await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"GitHub request failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code in (403, 429):
            raise RateLimited(RATE_LIMIT_MESSAGE)
        if not response.is_success:
            raise UpstreamError(f"GitHub API error: {response.status_code}")

    @staticmethod
    def _json(response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"GitHub returned invalid JSON: {e}") from e

    async def fetch_readme(self, owner: str, name: str) -> str:
        """README text truncated to README_MAX_CHARS; empty string when absent."""
        response = await self._get(f"/repos/{owner}/{name}/readme")
        if response.status_code == 404:
            logger.info("No README found for %s/%s", owner, name)
            return ""
        self._raise_for_status(response)

        payload = self._json(response)
        if not isinstance(payload, dict):
            return ""
        return decode_content(payload)[:README_MAX_CHARS]

    async def fetch_file_tree(self, owner: str, name: str) -> list[str]:
        """Blob paths of the repository, trying each of TREE_BRANCHES in order.

        A rate limit aborts immediately. Raises RepoNotFound when every branch
        404s, otherwise the last UpstreamError seen.
        """
        last_error: UpstreamError | None = None

        for branch in TREE_BRANCHES:
            try:
                response = await self._get(
                    f"/repos/{owner}/{name}/git/trees/{branch}",
                    params={"recursive": "1"},
                )
                if response.status_code == 404:
                    logger.debug("Branch %s not found for %s/%s", branch, owner, name)
                    continue
                self._raise_for_status(response)
                payload = self._json(response)
                files = _blob_paths(payload)
            except UpstreamError as e:
                logger.warning("Tree fetch failed for %s/%s@%s: %s", owner, name, branch, e)
                last_error = e
                continue

            if payload.get("truncated"):
                logger.warning("GitHub truncated the tree listing for %s/%s@%s", owner, name, branch)
            if len(files) > TREE_MAX_FILES:
                logger.info(
                    "Capping tree for %s/%s at %d of %d files",
                    owner, name, TREE_MAX_FILES, len(files),
                )
            return files[:TREE_MAX_FILES]

        if last_error is not None:
            raise last_error
        raise RepoNotFound("Repository not found or no accessible branches")

    async def fetch_file_content(self, owner: str, name: str, path: str) -> str:
        """Decoded content of one file; empty string for 404s and directories."""
        response = await self._get(f"/repos/{owner}/{name}/contents/{quote(path)}")
        if response.status_code == 404:
            return ""
        self._raise_for_status(response)

        payload = self._json(response)
        # Directories come back as a listing
        if not isinstance(payload, dict):
            return ""
        return decode_content(payload)

    async def fetch_manifest(
        self, owner: str, name: str, path: str = MANIFEST_PATH
    ) -> dict | None:
        """Best-effort parse of a JSON manifest. Never raises."""
        try:
            content = await self.fetch_file_content(owner, name, path)
        except RepoAnalyzerError as e:
            logger.info("Manifest %s unavailable for %s/%s: %s", path, owner, name, e)
            return None
        if not content:
            return None

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.info("Manifest %s for %s/%s is not valid JSON: %s", path, owner, name, e)
            return None
        return data if isinstance(data, dict) else None

    async def _fetch_context_file(self, owner: str, name: str, path: str) -> FileFetchResult:
        try:
            content = await self.fetch_file_content(owner, name, path)
        except RepoAnalyzerError as e:
            return FileFetchResult(path=path, error=e)
        return FileFetchResult(path=path, content=content[:CONTEXT_FILE_MAX_CHARS])

    async def iter_context_files(
        self, owner: str, name: str, paths: list[str]
    ) -> AsyncIterator[FileFetchResult]:
        """Fetch ``paths`` in batches of CONTEXT_BATCH_SIZE, yielding every outcome."""
        for start in range(0, len(paths), CONTEXT_BATCH_SIZE):
            batch = paths[start:start + CONTEXT_BATCH_SIZE]
            results = await asyncio.gather(
                *(self._fetch_context_file(owner, name, path) for path in batch)
            )
            for result in results:
                yield result

    async def fetch_prioritized_context(self, owner: str, name: str, files: list[str]) -> str:
        """Concatenated source context for the LLM.

        Files that fail or are empty are left out; a rate limit is re-raised
        because retrying with a token is the caller's fix.
        """
        paths = select_priority_files(files)
        sections: list[str] = []

        async for result in self.iter_context_files(owner, name, paths):
            if isinstance(result.error, RateLimited):
                raise result.error
            if not result.ok:
                logger.debug("Skipping context file %s: %s", result.path, result.error or "empty")
                continue
            sections.append(f"--- FILE: {result.path} ---\n{result.content}")

        logger.info(
            "Fetched %d/%d context files for %s/%s", len(sections), len(paths), owner, name
        )
        return "\n\n".join(sections)
