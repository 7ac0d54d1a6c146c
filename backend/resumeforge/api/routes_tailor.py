"""Synchronous tailoring and keyword analysis endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from ..analyzer import compute_match_score, extract_keywords, flatten_resume_to_text
from ..backends import GeminiBackend
from ..orchestrator import TailoringOrchestrator
from ..schemas import (
    CamelModel,
    JobDescription,
    ResumeDocument,
    TailoringOptions,
    TailoringResult,
    create_tailoring_options,
)
from .deps import get_gemini, get_orchestrator

router = APIRouter(prefix="/tailor", tags=["tailor"])


class TailorRequest(CamelModel):
    original_resume: ResumeDocument
    job_description: JobDescription
    options: TailoringOptions = Field(default_factory=create_tailoring_options)


class KeywordRequest(CamelModel):
    text: str
    resume: Optional[ResumeDocument] = None


class KeywordOut(CamelModel):
    keywords: List[str]
    match_score: Optional[int] = None


class SuggestionRequest(CamelModel):
    section: str
    requirements: List[str] = Field(default_factory=list)


class SuggestionOut(CamelModel):
    suggestions: List[str]


@router.post("", response_model=TailoringResult)
async def tailor(body: TailorRequest, orchestrator: TailoringOrchestrator = Depends(get_orchestrator)):
    """Tailor in-request. Never fails: falls back to rule-based tailoring."""
    return await orchestrator.tailor(body.original_resume, body.job_description, body.options)


@router.post("/keywords", response_model=KeywordOut)
async def keywords(body: KeywordRequest):
    found = extract_keywords(body.text)
    score = None
    if body.resume is not None:
        score = compute_match_score(flatten_resume_to_text(body.resume), found)
    return KeywordOut(keywords=found, match_score=score)


@router.post("/suggestions", response_model=SuggestionOut)
async def section_suggestions(body: SuggestionRequest, gemini: GeminiBackend = Depends(get_gemini)):
    return SuggestionOut(suggestions=await gemini.generate_content_suggestions(body.section, body.requirements))


@router.post("/job-keywords", response_model=KeywordOut)
async def job_keywords(body: JobDescription, gemini: GeminiBackend = Depends(get_gemini)):
    """Model-extracted job keywords, or the local vocabulary match when the model is unavailable."""
    found = await gemini.extract_job_keywords(body)
    if not found:
        found = extract_keywords(" ".join([body.title, body.description, *(body.requirements or [])]))
    return KeywordOut(keywords=found)
