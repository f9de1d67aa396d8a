"""LLM qualitative analysis of a repository.

The LLM only writes prose: summary, interview questions, notes and an
advisory assessment. The numeric scorecard always comes from
``services.scoring``. Any failure degrades to a fixed fallback object.
"""

import logging

from models.responses import AIAssessment, LLMAnalysis, RepoRef
from services import gemini_client, prompt_builder
from services.reply_normalizer import clamp_int, string_list, text

logger = logging.getLogger(__name__)

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_OUTPUT_TOKENS = 2048

SUMMARY_MAX = 5
QUESTIONS_MIN = 3
QUESTIONS_MAX = 6
NOTES_MAX = 4

DEFAULT_QUESTIONS = [
    "What is the primary purpose of this repository?",
    "What are the main dependencies and technologies?",
    "How is testing and CI/CD configured?",
]
FILLER_QUESTION = "Additional technical details needed"
FALLBACK_SUMMARY = "Analysis unavailable"
FALLBACK_NOTE = "No additional notes"


def fallback_analysis(repo: RepoRef, files: list[str], reason: str) -> LLMAnalysis:
    """Placeholder analysis returned when the LLM cannot be used."""
    if reason == gemini_client.NOT_CONFIGURED:
        summary = ["Repository analysis unavailable - Gemini API key not configured"]
        notes = ["LLM analysis unavailable"]
    else:
        summary = [
            f"Repository: {repo.full_name}",
            f"Files: {len(files)}",
            "Detailed analysis unavailable",
        ]
        notes = ["Automated analysis failed - using fallback"]

    return LLMAnalysis(
        summary=summary,
        technical_questions=list(DEFAULT_QUESTIONS),
        technical_notes=notes,
        assessment=AIAssessment(
            reasoning="AI assessment unavailable",
            ai_probability_reasoning="AI assessment unavailable",
        ),
        degraded=True,
    )


def normalize_assessment(raw) -> AIAssessment:
    if not isinstance(raw, dict):
        raw = {}
    return AIAssessment(
        score=clamp_int(raw.get("score"), 0, 100),
        reasoning=text(raw.get("reasoning")),
        ai_probability_score=clamp_int(raw.get("ai_probability_score"), 0, 100),
        ai_probability_reasoning=text(raw.get("ai_probability_reasoning")),
    )


def normalize_analysis(data: dict) -> LLMAnalysis:
    """Coerce a parsed LLM reply into the fixed LLMAnalysis shape."""
    summary = string_list(data.get("summary"), SUMMARY_MAX) or [FALLBACK_SUMMARY]

    questions = string_list(data.get("technical_questions"), QUESTIONS_MAX)
    if not questions:
        questions = list(DEFAULT_QUESTIONS)
    while len(questions) < QUESTIONS_MIN:
        questions.append(FILLER_QUESTION)

    raw_notes = data.get("technical_notes", data.get("notes"))
    notes = string_list(raw_notes, NOTES_MAX) or [FALLBACK_NOTE]

    return LLMAnalysis(
        summary=summary,
        technical_questions=questions,
        technical_notes=notes,
        assessment=normalize_assessment(data.get("assessment", data.get("scorecard"))),
    )


async def analyze_repository(
    readme: str,
    files: list[str],
    repo: RepoRef,
    manifest: dict | None = None,
    context: str = "",
) -> LLMAnalysis:
    """Ask Gemini for a qualitative analysis. Never raises for LLM failures."""
    if not gemini_client.is_configured():
        logger.warning("Gemini not configured, returning fallback analysis for %s", repo.full_name)
        return fallback_analysis(repo, files, gemini_client.NOT_CONFIGURED)

    prompt = prompt_builder.build_analysis_prompt(
        readme,
        files,
        repo.full_name,
        tech_stack=prompt_builder.describe_tech_stack(manifest),
        context=context,
    )
    reply = await gemini_client.generate_json(
        prompt,
        temperature=ANALYSIS_TEMPERATURE,
        max_output_tokens=ANALYSIS_MAX_OUTPUT_TOKENS,
    )

    if not reply.ok:
        logger.warning("LLM analysis failed for %s (%s), using fallback", repo.full_name, reply.error)
        return fallback_analysis(repo, files, reply.error or "unknown")

    return normalize_analysis(reply.data)
