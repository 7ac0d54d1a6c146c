import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure backend package is importable without an install
backend_root = Path(__file__).resolve().parents[1]
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

from resumeforge.schemas import JobDescription, ResumeDocument  # noqa: E402

RESUME_JSON = {
    "personalInfo": {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "location": "Austin, TX",
    },
    "summary": "Software engineer building web applications for fintech teams.",
    "experience": [
        {
            "title": "Software Engineer",
            "company": "Acme",
            "location": "Remote",
            "duration": "2020-2024",
            "achievements": [
                "Improved checkout reliability",
                "Built Python services on AWS handling 2M requests per day",
            ],
        }
    ],
    "education": [
        {"degree": "BSc Computer Science", "school": "UT Austin", "location": "Austin, TX", "year": "2019"}
    ],
    "skills": ["Python", "Excel", "Leadership"],
}

JOB_JSON = {
    "title": "Backend Developer",
    "company": "Globex",
    "description": (
        "We build Python microservices on AWS with Docker and Kubernetes. "
        "Strong communication skills required."
    ),
    "requirements": ["PostgreSQL", "CI/CD"],
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Avoid accidental usage of real backends and keep workflow pacing instant."""
    for name in ("GEMINI_API_KEY", "N8N_WEBHOOK_URL", "N8N_WEBHOOK_TOKEN", "WORKFLOW_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("WORKFLOW_STEP_DELAY_MIN", "0")
    monkeypatch.setenv("WORKFLOW_STEP_DELAY_MAX", "0")
    monkeypatch.setenv("CORS_ORIGINS", "*")


@pytest.fixture
def resume_json():
    return {**RESUME_JSON}


@pytest.fixture
def job_json():
    return {**JOB_JSON}


@pytest.fixture
def resume():
    return ResumeDocument.model_validate(RESUME_JSON)


@pytest.fixture
def job():
    return JobDescription.model_validate(JOB_JSON)


@pytest.fixture
def client():
    """TestClient over a freshly built app; the context runs the lifespan (workflow manager)."""
    from resumeforge.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
