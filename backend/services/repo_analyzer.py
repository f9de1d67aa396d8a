"""Orchestrator: repository analysis pipeline.

Pipeline:
1. Parse the GitHub URL into owner/name
2. Fetch README, file tree and package.json concurrently
3. Fetch prioritized source files (batched) as LLM context
4. Deterministic scorecard from README + file tree
5. Gemini qualitative analysis (optional, degrades to placeholders)
6. Combine into the API response

GitHub failures propagate as RepoAnalyzerError subclasses; LLM failures
never do.
"""

import asyncio
import logging

from models.responses import AnalyzeRepoResponse, RepoScorecard
from services import llm_analysis
from services.github_fetcher import GitHubFetcher
from services.scoring import calculate_score
from services.url_parser import parse_github_url

logger = logging.getLogger(__name__)


async def _gather_or_cancel(*coros):
    """Like asyncio.gather, but the first failure cancels the calls still running."""
    tasks = [asyncio.ensure_future(c) for c in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def analyze(repo_url: str, fetcher: GitHubFetcher) -> AnalyzeRepoResponse:
    """Run the full analysis for one repository URL."""
    # --- Stage 1: URL parsing ---
    repo = parse_github_url(repo_url)
    owner, name = repo.owner, repo.name
    logger.info("Analyzing repository %s", repo.full_name)

    # --- Stage 2: Metadata (independent calls) ---
    readme, files, manifest = await _gather_or_cancel(
        fetcher.fetch_readme(owner, name),
        fetcher.fetch_file_tree(owner, name),
        fetcher.fetch_manifest(owner, name),
    )

    # --- Stage 3: Source context for the LLM ---
    context = await fetcher.fetch_prioritized_context(owner, name, files)

    # --- Stage 4: Deterministic scorecard ---
    scorecard = calculate_score(readme, files)

    # --- Stage 5: LLM qualitative analysis ---
    analysis = await llm_analysis.analyze_repository(
        readme, files, repo, manifest=manifest, context=context
    )
    if analysis.degraded:
        logger.warning("Returning degraded analysis for %s", repo.full_name)

    # --- Stage 6: Response ---
    assessment = analysis.assessment
    return AnalyzeRepoResponse(
        repo=repo,
        summary=analysis.summary,
        technical_questions=analysis.technical_questions,
        scorecard=RepoScorecard(
            overall=scorecard.overall,
            breakdown=scorecard.breakdown,
            ai_score=assessment.score,
            ai_reasoning=assessment.reasoning,
            ai_probability=assessment.ai_probability_score,
            ai_forensics=assessment.ai_probability_reasoning,
        ),
        notes=analysis.technical_notes,
        degraded=analysis.degraded,
    )
