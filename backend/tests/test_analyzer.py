from resumeforge.analyzer import (
    MAX_KEYWORDS,
    compute_match_score,
    extract_keywords,
    find_keyword_matches,
    flatten_resume_to_text,
    is_skill_keyword,
    job_keywords,
)
from resumeforge.schemas import JobDescription, TailoringOptions
from resumeforge.vocabulary import VOCABULARY


def test_extract_keywords_canonical_and_ordered():
    assert extract_keywords("Python, aws, DOCKER") == ["Python", "AWS", "Docker"]


def test_extract_keywords_deduplicates():
    assert extract_keywords("python PYTHON Python") == ["Python"]


def test_extract_keywords_respects_word_boundaries():
    assert extract_keywords("JavaScript everywhere") == ["JavaScript"]
    assert extract_keywords("PostgreSQL") == ["PostgreSQL"]


def test_extract_keywords_plural_forms():
    assert extract_keywords("REST APIs") == ["REST", "API"]


def test_dictionary_words_need_capitalisation():
    assert extract_keywords("ready to go live and rust away") == []
    assert extract_keywords("Go and Rust services") == ["Go", "Rust"]


def test_extract_keywords_empty_text():
    assert extract_keywords("") == []
    assert extract_keywords(None) == []


def test_extract_keywords_is_capped():
    assert len(extract_keywords(" ".join(VOCABULARY))) == MAX_KEYWORDS


def test_match_score_with_no_keywords_is_zero():
    assert compute_match_score("Python AWS Docker", []) == 0
    assert compute_match_score("", []) == 0


def test_match_score_rounds_to_nearest():
    assert compute_match_score("Python and Docker", ["Python", "AWS", "Docker"]) == 67
    keywords = ["alpha"] + [f"zz{i}" for i in range(7)]
    assert compute_match_score("alpha", keywords) == 13


def test_match_score_is_case_insensitive_substring():
    assert compute_match_score("worked with KUBERNETES clusters", ["kubernetes"]) == 100
    assert find_keyword_matches("python and aws", ["Python", "Docker", "AWS"]) == ["Python", "AWS"]


def test_flatten_resume_order(resume):
    text = flatten_resume_to_text(resume)
    assert text.index("fintech teams") < text.index("Excel") < text.index("Acme") < text.index("UT Austin")


def test_is_skill_keyword():
    assert is_skill_keyword("docker")
    assert is_skill_keyword("CI/CD")
    assert not is_skill_keyword("Leadership")


def test_job_keywords_from_description_and_requirements(job):
    assert job_keywords(job) == [
        "Python", "Microservices", "AWS", "Docker", "Kubernetes", "Communication", "PostgreSQL", "CI/CD",
    ]


def test_job_keywords_ignore_title_and_add_industry_keywords():
    job = JobDescription(title="Python Developer", description="", requirements=[])
    assert job_keywords(job) == []
    options = TailoringOptions(industry_keywords=["Fintech", "python"])
    assert job_keywords(job, options) == ["Fintech", "python"]
