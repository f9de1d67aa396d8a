"""Google Gemini API wrapper with error handling.

Replies are treated as untrusted text: ``generate_json`` never raises and
returns a ``JSONReply`` that carries either the parsed object or the reason
it could not be produced.
"""

import json
import logging
import re

from google import genai
from google.genai import types
from pydantic import BaseModel

from config import settings

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not_configured"

# Opening fence with an optional language tag; the reply may be a single line
_OPENING_FENCE_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CLOSING_FENCE_RE = re.compile(r"\s*```$")

_client: genai.Client | None = None


class JSONReply(BaseModel):
    data: dict | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None


def is_configured() -> bool:
    return bool(settings.gemini_api_key)


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - Gemini features disabled")
        return None
    if _client is None:
        _client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=settings.gemini_timeout_ms),
        )
    return _client


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (``` or ```json) if present."""
    text = text.strip()
    if text.startswith("```"):
        text = _OPENING_FENCE_RE.sub("", text, count=1)
        text = _CLOSING_FENCE_RE.sub("", text, count=1)
    return text.strip()


def parse_json_reply(text: str) -> JSONReply:
    """Parse a model reply into a JSON object, tolerating code fences."""
    cleaned = strip_code_fences(text)
    if not cleaned:
        return JSONReply(error="empty_reply")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return JSONReply(error=f"parse_error: {e}")
    if not isinstance(data, dict):
        return JSONReply(error=f"parse_error: expected a JSON object, got {type(data).__name__}")
    return JSONReply(data=data)


async def generate_json(
    prompt: str,
    temperature: float = 0.3,
    max_output_tokens: int = 2048,
) -> JSONReply:
    """Send a prompt to Gemini and parse the JSON response."""
    client = get_client()
    if client is None:
        return JSONReply(error=NOT_CONFIGURED)

    try:
        response = await client.aio.models.generate_content(
            model=settings.gemini_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_output_tokens,
                response_mime_type="application/json",
            ),
        )
    except Exception as e:
        logger.error("Gemini API error: %s", e)
        return JSONReply(error=f"upstream_error: {e}")

    reply = parse_json_reply(response.text or "")
    if not reply.ok:
        logger.error("Failed to parse Gemini response as JSON: %s", reply.error)
    return reply
