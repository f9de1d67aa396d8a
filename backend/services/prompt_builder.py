"""All prompt templates for Gemini API calls."""

PROMPT_MAX_FILES = 100
PROMPT_README_MAX_CHARS = 10_000
PROMPT_CONTEXT_MAX_CHARS = 60_000


def describe_tech_stack(manifest: dict | None) -> str:
    """One-line dependency summary from a package.json-style manifest."""
    if not manifest:
        return ""

    parts = []
    for key in ("dependencies", "devDependencies"):
        deps = manifest.get(key)
        if isinstance(deps, dict) and deps:
            parts.append(f"{key}: {', '.join(sorted(deps))}")
    name = manifest.get("name")
    if isinstance(name, str) and name:
        parts.insert(0, f"package: {name}")
    return "; ".join(parts)


def build_analysis_prompt(
    readme: str,
    files: list[str],
    repo_full_name: str,
    tech_stack: str = "",
    context: str = "",
) -> str:
    """Summary, interview questions, notes and an advisory quality assessment.

    The deterministic scorecard is computed separately and never asked for.
    """
    file_list = "\n".join(files[:PROMPT_MAX_FILES])

    stack_section = ""
    if tech_stack:
        stack_section = f"""
DECLARED DEPENDENCIES:
{tech_stack}
"""

    context_section = ""
    if context:
        context_section = f"""
SOURCE FILES (truncated):
---
{context[:PROMPT_CONTEXT_MAX_CHARS]}
---
"""

    return f"""You are a senior engineer reviewing a GitHub repository before a technical interview with its author.

REPOSITORY: {repo_full_name}

README (truncated to {PROMPT_README_MAX_CHARS:,} chars):
---
{readme[:PROMPT_README_MAX_CHARS] or "No README found"}
---

FILE TREE (first {PROMPT_MAX_FILES} files):
{file_list or "No files found"}
{stack_section}{context_section}
RULES:
- summary: 3-5 bullet points on the project's purpose, tech stack and key features
- technical_questions: 3-6 deep questions about architecture, design decisions or
  implementation details that only the author could answer well
- technical_notes: 2-4 factual observations (testing approach, documentation quality,
  project maturity), grounded in the files above
- assessment.score: your own 0-100 estimate of engineering quality; it is advisory and
  reported separately from the rule-based score
- assessment.ai_probability_score: 0-100 likelihood that the code was mostly AI generated,
  with the concrete signals you relied on in ai_probability_reasoning

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "summary": ["<bullet>", "..."],
  "technical_questions": ["<question>", "..."],
  "technical_notes": ["<note>", "..."],
  "assessment": {{
    "score": <integer 0-100>,
    "reasoning": "<1-2 sentences>",
    "ai_probability_score": <integer 0-100>,
    "ai_probability_reasoning": "<1-2 sentences>"
  }}
}}"""


def build_evaluation_prompt(readme: str, question: str, answer: str) -> str:
    """Score an answer for genuine understanding of the README'd project."""
    return f"""You are a skeptical technical interviewer.
Decide whether the candidate genuinely understands the project or is faking it,
for example by paraphrasing the README or pasting AI-generated text.

README:
---
{readme[:PROMPT_README_MAX_CHARS]}
---

QUESTION: {question}

CANDIDATE ANSWER:
---
{answer}
---

Score four dimensions, each an integer 0-25:
- consistency_with_readme: claims agree with the README and introduce nothing it contradicts
- specificity: concrete names, numbers and mechanisms rather than generic statements
- depth_of_reasoning: explains trade-offs and why, not only what
- honesty_and_limitations: acknowledges limits and unknowns instead of overclaiming

ENFORCEMENT RULES (apply them to yourself):
- If the answer introduces claims the README does not support, consistency_with_readme must be < 10.
- If the answer mostly paraphrases the README, specificity must be < 10.
- If no trade-off or alternative is discussed, depth_of_reasoning must be < 12.
- If the answer claims certainty about things it cannot know, honesty_and_limitations must be < 10.
- understanding_score is the sum of the four dimensions.
- ai_generated_probability is 0-100; signs include stock transitions ("In conclusion",
  "However"), uniform bullet lists, neutral filler and restating the question.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "understanding_score": <integer 0-100>,
  "ai_generated_probability": <integer 0-100>,
  "breakdown": {{
    "consistency_with_readme": <integer 0-25>,
    "specificity": <integer 0-25>,
    "depth_of_reasoning": <integer 0-25>,
    "honesty_and_limitations": <integer 0-25>
  }},
  "flags": ["<short snake_case issue>", "..."],
  "notes": ["<direct feedback>", "..."],
  "confidence_level": "low" | "medium" | "high"
}}"""
