from typing import Literal

from pydantic import BaseModel, ConfigDict


class RepoRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class ScoreBreakdown(BaseModel):
    documentation: int = 0  # 0-25
    structure: int = 0  # 0-25
    completeness: int = 0  # 0-20
    engineering_maturity: int = 0  # 0-30


class Scorecard(BaseModel):
    """Deterministic rule-based score. ``overall`` is the sum of the breakdown."""
    overall: int = 0
    breakdown: ScoreBreakdown = ScoreBreakdown()


class AIAssessment(BaseModel):
    """LLM-estimated quality and AI-authorship signals. Advisory only."""
    score: int | None = None  # 0-100
    reasoning: str = ""
    ai_probability_score: int | None = None  # 0-100
    ai_probability_reasoning: str = ""


class LLMAnalysis(BaseModel):
    summary: list[str] = []
    technical_questions: list[str] = []
    technical_notes: list[str] = []
    assessment: AIAssessment = AIAssessment()
    degraded: bool = False


class RepoScorecard(BaseModel):
    overall: int = 0
    breakdown: ScoreBreakdown = ScoreBreakdown()
    ai_score: int | None = None
    ai_reasoning: str = ""
    ai_probability: int | None = None
    ai_forensics: str = ""


class AnalyzeRepoResponse(BaseModel):
    repo: RepoRef
    summary: list[str] = []
    technical_questions: list[str] = []
    scorecard: RepoScorecard = RepoScorecard()
    notes: list[str] = []
    degraded: bool = False


class EvaluationBreakdown(BaseModel):
    consistency_with_readme: int = 0  # 0-25
    specificity: int = 0  # 0-25
    depth_of_reasoning: int = 0  # 0-25
    honesty_and_limitations: int = 0  # 0-25

    def total(self) -> int:
        return (
            self.consistency_with_readme
            + self.specificity
            + self.depth_of_reasoning
            + self.honesty_and_limitations
        )


class EvaluationResult(BaseModel):
    understanding_score: int = 0  # 0-100
    ai_generated_probability: int = 0  # 0-100
    breakdown: EvaluationBreakdown = EvaluationBreakdown()
    flags: list[str] = []
    notes: list[str] = []
    confidence_level: Literal["low", "medium", "high"] = "low"
