import math
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case attributes, camelCase on the wire; both accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----- Resume / job -----

class PersonalInfo(CamelModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: Optional[str] = None
    portfolio: Optional[str] = None


class ExperienceEntry(CamelModel):
    title: str = ""
    company: str = ""
    location: str = ""
    duration: str = ""
    achievements: List[str] = Field(default_factory=list)


class EducationEntry(CamelModel):
    degree: str = ""
    school: str = ""
    location: str = ""
    year: str = ""


class ResumeDocument(CamelModel):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: str = ""
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)  # order is display priority

    def is_tailorable(self) -> bool:
        return bool(self.personal_info.name.strip() and self.personal_info.email.strip())


class JobDescription(CamelModel):
    title: str = ""
    company: Optional[str] = None
    description: str = ""
    requirements: Optional[List[str]] = None

    def is_tailorable(self) -> bool:
        return bool(self.title.strip() and self.description.strip())


# ----- Tailoring -----

class TemplateName(str, Enum):
    MODERN = "modern"
    MINIMALIST = "minimalist"
    CREATIVE = "creative"


class TailoringOptions(CamelModel):
    template: TemplateName = TemplateName.MODERN
    focus_areas: List[str] = Field(default_factory=list)
    industry_keywords: List[str] = Field(default_factory=list)
    optimize_for_ats: bool = Field(True, alias="optimizeForATS")


def create_tailoring_options(
    template: str = "modern",
    focus_areas: Optional[List[str]] = None,
    industry_keywords: Optional[List[str]] = None,
    optimize_for_ats: bool = True,
) -> TailoringOptions:
    return TailoringOptions(
        template=TemplateName(template),
        focus_areas=list(focus_areas or []),
        industry_keywords=list(industry_keywords or []),
        optimize_for_ats=optimize_for_ats,
    )


def clamp_score(value) -> int:
    """Round a numeric score to the nearest integer within [0, 100]."""
    if isinstance(value, bool):
        raise ValueError("matchScore must be a number")
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip("%"))
        except ValueError:
            raise ValueError(f"matchScore is not numeric: {value!r}")
    if not isinstance(value, (int, float)):
        raise ValueError("matchScore must be a number")
    if not math.isfinite(value):
        raise ValueError("matchScore must be finite")
    return max(0, min(100, int(math.floor(value + 0.5))))


class TailoringResult(CamelModel):
    tailored_resume: ResumeDocument
    match_score: int
    suggestions: List[str] = Field(default_factory=list)
    keyword_matches: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)

    @field_validator("match_score", mode="before")
    @classmethod
    def _coerce_match_score(cls, v):
        return clamp_score(v)


# ----- Workflows -----

class WorkflowStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = {WorkflowStatus.COMPLETED, WorkflowStatus.FAILED}


class WorkflowRequest(CamelModel):
    original_resume: ResumeDocument
    job_description: JobDescription
    options: TailoringOptions = Field(default_factory=create_tailoring_options)
    user_id: Optional[str] = None


class WorkflowRecord(CamelModel):
    id: str
    status: WorkflowStatus = WorkflowStatus.PENDING
    progress: int = 0
    result: Optional[TailoringResult] = None
    error: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class WorkflowOut(WorkflowRecord):
    message: str = ""
    complete: bool = False


class WorkflowStats(CamelModel):
    total: int = 0
    pending: int = 0
    running: int = 0
    completed: int = 0
    failed: int = 0


def is_workflow_complete(status: str) -> bool:
    return status in (WorkflowStatus.COMPLETED.value, WorkflowStatus.FAILED.value)


def workflow_progress_message(progress: int) -> str:
    if progress < 20:
        return "Analyzing job requirements..."
    if progress < 40:
        return "Matching your experience..."
    if progress < 60:
        return "Optimizing keywords..."
    if progress < 80:
        return "Restructuring content..."
    if progress < 100:
        return "Final optimization..."
    return "Complete!"
