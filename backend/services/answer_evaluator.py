"""Score a candidate's answer for genuine understanding of a project.

Every LLM failure (missing key, transport error, unparseable reply) produces
the same zero-score, low-confidence result flagged ``evaluation_failed``, so
callers can tell a failed evaluation from a poor answer without handling
exceptions.
"""

import logging

from models.responses import EvaluationBreakdown, EvaluationResult
from services import gemini_client, prompt_builder
from services.reply_normalizer import clamp_int, string_list

logger = logging.getLogger(__name__)

EVALUATION_TEMPERATURE = 0.1
EVALUATION_MAX_OUTPUT_TOKENS = 2000

SUB_SCORE_MAX = 25
CONFIDENCE_LEVELS = ("low", "medium", "high")
DEFAULT_CONFIDENCE = "medium"
FAILED_FLAG = "evaluation_failed"
FALLBACK_NOTE = "No evaluation notes provided"
NOTES_MAX = 10
FLAGS_MAX = 10


def fallback_evaluation(reason: str) -> EvaluationResult:
    if reason == gemini_client.NOT_CONFIGURED:
        note = "Evaluation unavailable - Gemini API key not configured"
    else:
        note = f"Evaluation system error: {reason}"
    return EvaluationResult(
        understanding_score=0,
        ai_generated_probability=0,
        breakdown=EvaluationBreakdown(),
        flags=[FAILED_FLAG],
        notes=[note],
        confidence_level="low",
    )


def _sub_score(raw: dict, key: str) -> int:
    return clamp_int(raw.get(key), 0, SUB_SCORE_MAX) or 0


def normalize_evaluation(data: dict) -> EvaluationResult:
    """Clamp and default a parsed evaluator reply into an EvaluationResult."""
    raw_breakdown = data.get("breakdown")
    if not isinstance(raw_breakdown, dict):
        raw_breakdown = {}

    breakdown = EvaluationBreakdown(
        consistency_with_readme=_sub_score(raw_breakdown, "consistency_with_readme"),
        specificity=_sub_score(raw_breakdown, "specificity"),
        depth_of_reasoning=_sub_score(raw_breakdown, "depth_of_reasoning"),
        honesty_and_limitations=_sub_score(raw_breakdown, "honesty_and_limitations"),
    )

    understanding = clamp_int(data.get("understanding_score"), 0, 100)
    if understanding is None:
        understanding = breakdown.total()

    confidence = data.get("confidence_level")
    if confidence not in CONFIDENCE_LEVELS:
        confidence = DEFAULT_CONFIDENCE

    return EvaluationResult(
        understanding_score=understanding,
        ai_generated_probability=clamp_int(data.get("ai_generated_probability"), 0, 100) or 0,
        breakdown=breakdown,
        flags=string_list(data.get("flags"), FLAGS_MAX),
        notes=string_list(data.get("notes"), NOTES_MAX) or [FALLBACK_NOTE],
        confidence_level=confidence,
    )


async def evaluate_answer(readme: str, question: str, answer: str) -> EvaluationResult:
    if not gemini_client.is_configured():
        logger.warning("Gemini not configured, answer evaluation skipped")
        return fallback_evaluation(gemini_client.NOT_CONFIGURED)

    prompt = prompt_builder.build_evaluation_prompt(readme, question, answer)
    reply = await gemini_client.generate_json(
        prompt,
        temperature=EVALUATION_TEMPERATURE,
        max_output_tokens=EVALUATION_MAX_OUTPUT_TOKENS,
    )

    if not reply.ok:
        logger.error("Answer evaluation failed: %s", reply.error)
        return fallback_evaluation(reply.error or "unknown")

    return normalize_evaluation(reply.data)
