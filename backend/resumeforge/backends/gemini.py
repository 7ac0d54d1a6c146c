"""
Gemini backend: prompt-based resume tailoring through the generateContent API.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..errors import BackendErrorReason, ConfigurationError, SchemaError
from ..schemas import JobDescription, ResumeDocument, TailoringOptions, TailoringResult
from .base import TailoringBackend, first_json_object, response_json

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

RESULT_SCHEMA = """{
  "tailoredResume": {
    "personalInfo": {"name": "string", "email": "string", "phone": "string", "location": "string", "linkedin": "string", "portfolio": "string"},
    "summary": "string",
    "experience": [{"title": "string", "company": "string", "location": "string", "duration": "string", "achievements": ["string"]}],
    "education": [{"degree": "string", "school": "string", "location": "string", "year": "string"}],
    "skills": ["string"]
  },
  "matchScore": number,
  "suggestions": ["string"],
  "keywordMatches": ["string"],
  "improvementAreas": ["string"]
}"""


class GeminiBackend(TailoringBackend):
    """LLM backend. Needs GEMINI_API_KEY; without it every call reports missing-api-key."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "gemini-pro",
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _tailor(self, resume: ResumeDocument, job: JobDescription, options: TailoringOptions) -> TailoringResult:
        prompt = build_tailoring_prompt(resume, job, options)
        text = await self._generate(prompt, temperature=0.7, max_output_tokens=2048, top_k=40, top_p=0.95)

        parsed = first_json_object(text)
        if not parsed.get("tailoredResume") or parsed.get("matchScore") is None:
            raise SchemaError("response is missing tailoredResume or matchScore")
        return TailoringResult.model_validate(parsed)

    async def _generate(self, prompt: str, *, temperature: float, max_output_tokens: int, **extra: Any) -> str:
        if not self.api_key:
            raise ConfigurationError("Gemini API key not configured")

        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        }
        if "top_k" in extra:
            generation_config["topK"] = extra["top_k"]
        if "top_p" in extra:
            generation_config["topP"] = extra["top_p"]

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
            "safetySettings": SAFETY_SETTINGS,
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )
        data = response_json(response)

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            raise SchemaError("no candidates generated")
        text = candidates[0]["content"]["parts"][0].get("text")
        if not isinstance(text, str):
            raise SchemaError("candidate has no text part", reason=BackendErrorReason.MALFORMED_RESPONSE)
        return text

    async def generate_content_suggestions(self, section: str, requirements: List[str]) -> List[str]:
        """3-5 suggestions for aligning one resume section with job requirements; [] on failure."""
        prompt = f"""
Given this resume section: "{section}"
And these job requirements: {', '.join(requirements)}

Suggest 3-5 specific improvements to better align this section with the job requirements.
Provide actionable, specific suggestions that maintain truthfulness.

Respond with a JSON array of strings: ["suggestion1", "suggestion2", ...]
"""
        return await self._string_list(prompt, temperature=0.8, what="content suggestions")

    async def extract_job_keywords(self, job: JobDescription) -> List[str]:
        """Top 20 keywords for a job according to the model; [] on failure."""
        prompt = f"""
Extract the most important keywords and skills from this job description:

Title: {job.title}
Description: {job.description}
Requirements: {', '.join(job.requirements or []) or 'Not specified'}

Focus on:
- Technical skills and technologies
- Soft skills and competencies
- Industry-specific terms
- Qualifications and certifications
- Tools and platforms

Return a JSON array of the top 20 most relevant keywords: ["keyword1", "keyword2", ...]
"""
        keywords = await self._string_list(prompt, temperature=0.3, what="job keywords")
        return keywords[:20]

    async def _string_list(self, prompt: str, *, temperature: float, what: str) -> List[str]:
        if not self.api_key:
            return []
        try:
            text = await self._generate(prompt, temperature=temperature, max_output_tokens=512)
            start, end = text.find("["), text.rfind("]")
            if start < 0 or end < start:
                return []
            items = json.loads(text[start:end + 1])
            return [str(item) for item in items if isinstance(item, (str, int, float))]
        except Exception as e:
            logger.error(f"Gemini {what} failed: {e}")
            return []


def build_tailoring_prompt(resume: ResumeDocument, job: JobDescription, options: TailoringOptions) -> str:
    info = resume.personal_info
    experience = "\n".join(
        f"- {exp.title} at {exp.company} ({exp.duration})\n"
        f"  Location: {exp.location}\n"
        f"  Achievements:\n" + "\n".join(f"    * {a}" for a in exp.achievements)
        for exp in resume.experience
    )
    education = "\n".join(
        f"- {edu.degree} from {edu.school} ({edu.year})\n  Location: {edu.location}"
        for edu in resume.education
    )

    return f"""
You are an expert resume writer and career coach. Your task is to tailor a resume for a specific job application.

ORIGINAL RESUME:
Name: {info.name}
Email: {info.email}
Phone: {info.phone}
Location: {info.location}
LinkedIn: {info.linkedin or 'Not provided'}
Portfolio: {info.portfolio or 'Not provided'}

Summary: {resume.summary}

Experience:
{experience}

Education:
{education}

Skills: {', '.join(resume.skills)}

TARGET JOB:
Title: {job.title}
Company: {job.company or 'Not specified'}
Description: {job.description}
Requirements: {', '.join(job.requirements or []) or 'Not specified'}

TAILORING OPTIONS:
Template: {options.template.value}
Focus Areas: {', '.join(options.focus_areas)}
Industry Keywords: {', '.join(options.industry_keywords)}
Optimize for ATS: {str(options.optimize_for_ats).lower()}

INSTRUCTIONS:
1. Tailor the resume to match the job requirements while keeping all information truthful
2. Optimize the professional summary to highlight relevant experience for this specific role
3. Reorder and enhance experience bullet points to emphasize achievements relevant to the target job
4. Adjust skills section to prioritize skills mentioned in the job description
5. Use keywords from the job description naturally throughout the resume
6. Maintain the original structure but optimize content for maximum impact
7. Provide a match score (0-100) indicating how well the tailored resume matches the job
8. Suggest 3-5 specific improvements
9. List keyword matches found between the resume and job description

Please respond with a JSON object in the following format:
{RESULT_SCHEMA}

Ensure the response is valid JSON and all fields are properly filled.
"""
