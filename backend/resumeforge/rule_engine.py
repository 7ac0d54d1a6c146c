"""
Rule-based resume tailoring.

Last-resort tailoring used when no remote backend is available. Pure local
computation: the same (resume, job, options) always produces the same result.
"""
import logging
import re
from typing import List, Optional

from .analyzer import (
    compute_match_score,
    find_keyword_matches,
    flatten_resume_to_text,
    is_skill_keyword,
    job_keywords,
)
from .schemas import (
    ExperienceEntry,
    JobDescription,
    ResumeDocument,
    TailoringOptions,
    TailoringResult,
)

logger = logging.getLogger(__name__)

TITLE_STOPWORDS = {"the", "and", "for", "with"}
EXPERTISE_MARKER = " with expertise in "
EXPERIENCED_MARKER = "Experienced with "
PLACEHOLDER_METRIC = "by 25%"
MIN_SUMMARY_LENGTH = 100

_DIGIT = re.compile(r"\d")
_LEADING_VERB = re.compile(r"^(\W*)(improved|increased|reduced|enhanced|optimized)\b", re.IGNORECASE)
_FIRST_CLAUSE = re.compile(r"^([^.]+)")
# a trailing "Experienced with a, b, c." sentence as written by tailor_summary
_EXPERIENCED_SENTENCE = re.compile(r"(?:^|\s)Experienced with (?:(?!\. ).)*\.\s*$")


class RuleBasedTailor:
    """Deterministic tailoring engine; never touches the network."""

    name = "rule-based"

    def tailor(
        self,
        resume: ResumeDocument,
        job: JobDescription,
        options: Optional[TailoringOptions] = None,
    ) -> TailoringResult:
        options = options or TailoringOptions()
        keywords = job_keywords(job, options)

        tailored = resume.model_copy(deep=True)
        tailored.summary = self.tailor_summary(resume.summary, keywords, job.title)
        tailored.experience = self.tailor_experience(resume.experience, keywords)
        tailored.skills = self.optimize_skills(resume.skills, keywords)
        logger.debug(f"Rule-based tailoring for '{job.title}' with {len(keywords)} job keywords")

        return TailoringResult(
            tailored_resume=tailored,
            match_score=self.calculate_match_score(tailored, keywords),
            suggestions=self.generate_suggestions(resume, tailored, keywords, options),
            keyword_matches=self.extract_keyword_matches(tailored, keywords),
            improvement_areas=self.generate_improvement_areas(tailored, keywords),
        )

    def tailor_summary(self, summary: str, keywords: List[str], job_title: str) -> str:
        """Work the job title and up to three missing keywords into the summary.

        Injected clauses are recognised on a later pass, so applying this
        twice gives the same text as applying it once.
        """
        tailored = summary or ""
        lowered = tailored.lower()

        title_words = [
            w for w in (job_title or "").split()
            if len(w) > 3 and w.lower() not in TITLE_STOPWORDS
        ]
        if title_words and job_title.lower() not in lowered:
            clause = f"{EXPERTISE_MARKER}{' '.join(title_words)}"
            if clause.lower() not in lowered and not all(w.lower() in lowered for w in title_words):
                tailored = _FIRST_CLAUSE.sub(lambda m: f"{m.group(1)}{clause}", tailored, count=1)

        if not _EXPERIENCED_SENTENCE.search(tailored):
            lowered = tailored.lower()
            missing = [kw for kw in keywords if kw.lower() not in lowered][:3]
            if missing:
                sentence = f"{EXPERIENCED_MARKER}{', '.join(missing)}."
                tailored = f"{tailored.rstrip()} {sentence}" if tailored.strip() else sentence

        return tailored

    def tailor_experience(self, entries: List[ExperienceEntry], keywords: List[str]) -> List[ExperienceEntry]:
        tailored = []
        for entry in entries:
            achievements = [self._add_metric(a) for a in entry.achievements]
            tailored.append(entry.model_copy(update={"achievements": achievements}, deep=True))
        return tailored

    @staticmethod
    def _add_metric(achievement: str) -> str:
        if _DIGIT.search(achievement):
            return achievement
        return _LEADING_VERB.sub(lambda m: f"{m.group(1)}{m.group(2)} {PLACEHOLDER_METRIC}", achievement, count=1)

    def optimize_skills(self, skills: List[str], keywords: List[str]) -> List[str]:
        """Append missing skill keywords, then move keyword-matching skills first (stable)."""
        optimized = list(skills)
        seen = {s.lower() for s in skills}
        for kw in keywords:
            if kw.lower() not in seen and is_skill_keyword(kw):
                optimized.append(kw)
                seen.add(kw.lower())

        lowered_keywords = [kw.lower() for kw in keywords]

        def matches(skill: str) -> bool:
            s = skill.lower()
            return any(kw in s for kw in lowered_keywords)

        return sorted(optimized, key=lambda s: not matches(s))

    def calculate_match_score(self, resume: ResumeDocument, keywords: List[str]) -> int:
        return compute_match_score(flatten_resume_to_text(resume), keywords)

    def extract_keyword_matches(self, resume: ResumeDocument, keywords: List[str]) -> List[str]:
        return find_keyword_matches(flatten_resume_to_text(resume), keywords)

    def generate_suggestions(
        self,
        original: ResumeDocument,
        tailored: ResumeDocument,
        keywords: List[str],
        options: Optional[TailoringOptions] = None,
    ) -> List[str]:
        suggestions = []
        resume_text = flatten_resume_to_text(tailored).lower()

        missing = [kw for kw in keywords if kw.lower() not in resume_text][:5]
        if missing:
            suggestions.append(f"Consider adding these relevant keywords: {', '.join(missing)}")

        has_metrics = any(
            _DIGIT.search(a) for exp in tailored.experience for a in exp.achievements
        )
        if not has_metrics:
            suggestions.append('Add quantifiable metrics to your achievements (e.g., "increased sales by 25%")')

        if len(tailored.summary) < MIN_SUMMARY_LENGTH:
            suggestions.append("Consider expanding your professional summary to 2-3 sentences")

        if options is not None:
            absent = [f for f in options.focus_areas if f.strip() and f.lower() not in resume_text]
            if absent:
                suggestions.append(f"Highlight experience related to: {', '.join(absent)}")
            if options.optimize_for_ats:
                suggestions.extend(self._ats_suggestions(original))

        return suggestions

    @staticmethod
    def _ats_suggestions(resume: ResumeDocument) -> List[str]:
        missing = []
        if not resume.experience:
            missing.append("Experience")
        if not resume.education:
            missing.append("Education")
        if not resume.skills:
            missing.append("Skills")
        if not missing:
            return []
        return [f"Add standard ATS sections: {', '.join(missing)}"]

    def generate_improvement_areas(self, tailored: ResumeDocument, keywords: List[str]) -> List[str]:
        areas = []
        skills_lower = [s.lower() for s in tailored.skills]
        skills_gap = [
            kw for kw in keywords
            if is_skill_keyword(kw) and not any(kw.lower() in s for s in skills_lower)
        ][:3]
        if skills_gap:
            areas.append(f"Skills to develop: {', '.join(skills_gap)}")

        relevant = any(
            kw.lower() in exp.title.lower() or any(kw.lower() in a.lower() for a in exp.achievements)
            for exp in tailored.experience
            for kw in keywords
        )
        if not relevant:
            areas.append("Consider highlighting more relevant experience for this role")

        return areas
