"""Tests for the repository analysis orchestrator."""

import asyncio

import pytest

from models.responses import AnalyzeRepoResponse
from services.errors import InvalidURL, RateLimited, RepoNotFound
from services.github_fetcher import GitHubFetcher
from services.repo_analyzer import analyze

URL = "https://github.com/octo/demo"


def _fetcher(fake):
    return GitHubFetcher(token="", transport=fake.transport())


def _mature_repo(fake):
    fake.readme = "r" * 6000
    files = [
        ".github/workflows/ci.yml",
        "LICENSE",
        "CONTRIBUTING.md",
        "package.json",
        "src/a.test.ts",
        "src/b.test.ts",
        "src/c.test.ts",
        "src/d.test.ts",
    ]
    files += [f"docs/page_{i}.md" for i in range(60 - len(files))]
    fake.trees["main"] = files
    fake.files["package.json"] = '{"name": "demo", "dependencies": {"express": "^4"}}'
    fake.files["src/a.test.ts"] = "test('a', () => {})"


@pytest.mark.asyncio
async def test_full_pipeline_degraded_without_llm(fake_github):
    _mature_repo(fake_github)
    async with _fetcher(fake_github) as fetcher:
        result = await analyze(URL + ".git/", fetcher)

    assert isinstance(result, AnalyzeRepoResponse)
    assert result.repo.owner == "octo"
    assert result.repo.name == "demo"
    assert result.scorecard.overall == 95
    assert result.scorecard.breakdown.engineering_maturity == 25
    assert result.degraded is True
    assert result.scorecard.ai_score is None
    assert len(result.technical_questions) == 3


@pytest.mark.asyncio
async def test_llm_never_overrides_deterministic_score(fake_github, fake_gemini):
    _mature_repo(fake_github)
    fake_gemini.reply_with(
        {
            "summary": ["Express API"],
            "technical_questions": ["a?", "b?", "c?", "d?"],
            "technical_notes": ["n"],
            "assessment": {"score": 12, "ai_probability_score": 88},
            "overall": 1,
        }
    )
    async with _fetcher(fake_github) as fetcher:
        result = await analyze(URL, fetcher)

    assert result.degraded is False
    assert result.scorecard.overall == 95
    assert result.scorecard.ai_score == 12
    assert result.scorecard.ai_probability == 88
    assert result.technical_questions == ["a?", "b?", "c?", "d?"]
    assert result.notes == ["n"]
    # manifest and prioritized context reach the prompt
    prompt = fake_gemini.calls[0]["prompt"]
    assert "express" in prompt
    assert "--- FILE: src/a.test.ts ---" in prompt


@pytest.mark.asyncio
async def test_invalid_url(fake_github):
    async with _fetcher(fake_github) as fetcher:
        with pytest.raises(InvalidURL):
            await analyze("https://example.com/x/y", fetcher)
    assert fake_github.requests == []


@pytest.mark.asyncio
async def test_missing_repo(fake_github):
    async with _fetcher(fake_github) as fetcher:
        with pytest.raises(RepoNotFound):
            await analyze(URL, fetcher)


@pytest.mark.asyncio
async def test_rate_limit_from_readme(fake_github):
    fake_github.readme = 403
    fake_github.trees["main"] = ["package.json"]
    async with _fetcher(fake_github) as fetcher:
        with pytest.raises(RateLimited):
            await analyze(URL, fetcher)


@pytest.mark.asyncio
async def test_rate_limit_from_context_batch(fake_github):
    fake_github.trees["main"] = ["package.json", "src/index.ts"]
    fake_github.files["src/index.ts"] = 403
    async with _fetcher(fake_github) as fetcher:
        with pytest.raises(RateLimited):
            await analyze(URL, fetcher)


@pytest.mark.asyncio
async def test_minimal_repo(fake_github):
    fake_github.trees["master"] = ["package.json"]
    async with _fetcher(fake_github) as fetcher:
        result = await analyze(URL, fetcher)
    assert result.scorecard.overall == 10
    assert result.scorecard.breakdown.structure == 10


class _StalledFetcher:
    """README and manifest calls hang until cancelled; the tree call fails."""

    def __init__(self):
        self.waiting = []
        self.cancelled = []

    async def _hang(self, label):
        self.waiting.append(label)
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled.append(label)
            raise

    async def fetch_readme(self, owner, name):
        await self._hang("readme")

    async def fetch_manifest(self, owner, name):
        await self._hang("manifest")

    async def fetch_file_tree(self, owner, name):
        while len(self.waiting) < 2:
            await asyncio.sleep(0)
        raise RepoNotFound("Repository not found or no accessible branches")


@pytest.mark.asyncio
async def test_failed_fetch_cancels_the_others():
    fetcher = _StalledFetcher()
    with pytest.raises(RepoNotFound):
        await asyncio.wait_for(analyze(URL, fetcher), timeout=5)
    assert sorted(fetcher.cancelled) == ["manifest", "readme"]
