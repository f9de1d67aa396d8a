"""Shared dependencies for API routes."""

from collections.abc import AsyncIterator

from services.github_fetcher import GitHubFetcher


async def get_github_fetcher() -> AsyncIterator[GitHubFetcher]:
    """One GitHub HTTP client per request, closed when the response is sent."""
    async with GitHubFetcher() as fetcher:
        yield fetcher
