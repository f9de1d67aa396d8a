from pydantic import BaseModel, Field


class AnalyzeRepoRequest(BaseModel):
    repo_url: str = Field(..., min_length=1, max_length=500, description="Public GitHub repository URL")


class EvaluateAnswerRequest(BaseModel):
    readme: str = Field(..., min_length=1, description="README the question was generated from")
    question: str = Field(..., min_length=1, description="Technical question asked")
    answer: str = Field(..., min_length=1, description="Candidate answer to evaluate")
