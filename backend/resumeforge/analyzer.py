"""
Keyword extraction and match scoring.

Heuristic only: keywords come from a fixed vocabulary (see vocabulary.py) and
matching is plain containment, never semantic similarity.
"""
import math
from typing import Iterable, List, Optional

from .schemas import JobDescription, ResumeDocument, TailoringOptions
from .vocabulary import CASE_SENSITIVE_TERMS, SKILL_TERMS_LOWER, VOCABULARY

MAX_KEYWORDS = 50


def _is_word_char(ch: str) -> bool:
    return bool(ch) and (ch.isalnum() or ch in "+#_")


def _find_term(haystack: str, needle: str) -> int:
    """Index of the first whole-word occurrence of needle (plural 's' allowed), else -1."""
    start = 0
    while True:
        idx = haystack.find(needle, start)
        if idx < 0:
            return -1
        end = idx + len(needle)
        before = haystack[idx - 1] if idx > 0 else ""
        after = haystack[end:end + 1]
        if after == "s" and needle[-1:].isalpha():
            after = haystack[end + 1:end + 2]
        if not _is_word_char(before) and not _is_word_char(after):
            return idx
        start = idx + 1


def extract_keywords(text: Optional[str], limit: int = MAX_KEYWORDS) -> List[str]:
    """Vocabulary terms found in text, canonical spelling, ordered by first occurrence."""
    if not text:
        return []
    lowered = text.lower()
    found = []
    for order, term in enumerate(VOCABULARY):
        if term in CASE_SENSITIVE_TERMS:
            pos = _find_term(text, term)
        else:
            pos = _find_term(lowered, term.lower())
        if pos >= 0:
            found.append((pos, order, term))
    found.sort()
    return [term for _, _, term in found[:limit]]


def is_skill_keyword(keyword: str) -> bool:
    return keyword.strip().lower() in SKILL_TERMS_LOWER


def job_text(job: JobDescription) -> str:
    # the title is handled separately by summary tailoring
    parts = [job.description or ""]
    parts.extend(job.requirements or [])
    return " ".join(p for p in parts if p)


def job_keywords(job: JobDescription, options: Optional[TailoringOptions] = None) -> List[str]:
    keywords = extract_keywords(job_text(job))
    if options is not None:
        seen = {k.lower() for k in keywords}
        for extra in options.industry_keywords:
            extra = extra.strip()
            if extra and extra.lower() not in seen:
                keywords.append(extra)
                seen.add(extra.lower())
    return keywords[:MAX_KEYWORDS]


def flatten_resume_to_text(resume: ResumeDocument) -> str:
    """Summary, skills, experience, education, in that order."""
    experience = " ".join(
        f"{exp.title} {exp.company} {' '.join(exp.achievements)}" for exp in resume.experience
    )
    education = " ".join(f"{edu.degree} {edu.school}" for edu in resume.education)
    return " ".join([resume.summary, " ".join(resume.skills), experience, education])


def find_keyword_matches(resume_text: str, keywords: Iterable[str]) -> List[str]:
    lowered = resume_text.lower()
    return [kw for kw in keywords if kw.lower() in lowered]


def compute_match_score(resume_text: str, keywords: Iterable[str]) -> int:
    keywords = list(keywords)
    if not keywords:
        return 0
    matched = len(find_keyword_matches(resume_text, keywords))
    return int(math.floor(matched * 100 / len(keywords) + 0.5))
