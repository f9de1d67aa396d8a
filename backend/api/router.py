import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_github_fetcher
from config import settings
from models.requests import AnalyzeRepoRequest, EvaluateAnswerRequest
from models.responses import AnalyzeRepoResponse, EvaluationResult
from services import answer_evaluator, gemini_client, repo_analyzer
from services.errors import RepoAnalyzerError
from services.github_fetcher import GitHubFetcher

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": gemini_client.is_configured(),
        "github_token_configured": bool(settings.github_token),
    }


@router.post("/api/v1/analyze-repo", response_model=AnalyzeRepoResponse)
@limiter.limit(settings.rate_limit)
async def analyze_repo(
    request: Request,
    body: AnalyzeRepoRequest,
    fetcher: GitHubFetcher = Depends(get_github_fetcher),
):
    try:
        return await repo_analyzer.analyze(body.repo_url, fetcher)
    except RepoAnalyzerError as e:
        if e.status_code >= 500:
            logger.error("Analysis of %s failed: %s", body.repo_url, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Unexpected error analyzing %s", body.repo_url)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/api/v1/evaluate-answer", response_model=EvaluationResult)
@limiter.limit(settings.rate_limit)
async def evaluate_answer(request: Request, body: EvaluateAnswerRequest):
    try:
        return await answer_evaluator.evaluate_answer(body.readme, body.question, body.answer)
    except Exception as e:
        logger.exception("Evaluation endpoint error")
        raise HTTPException(status_code=500, detail=f"Internal server error: {e}")
