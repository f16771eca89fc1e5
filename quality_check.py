"""Heuristic quality score for a generated résumé.

Pure functions. Four factors, each 0-1, are weighted into one score:
keyword alignment with the job description (30%), readability (25%),
structure (25%) and completeness for the chosen mode (20%).
"""

import logging
import re

from services.models import QualityCheckResult, QualityFactors, ResumeMode

logger = logging.getLogger(__name__)

WEIGHTS = {
    "keyword_alignment": 0.3,
    "readability": 0.25,
    "structure": 0.25,
    "completeness": 0.2,
}

COMMON_KEYWORDS = [
    "javascript", "python", "react", "node", "sql", "aws", "docker",
    "agile", "scrum", "management", "leadership", "analysis", "strategy",
    "communication", "collaboration", "problem-solving", "innovation",
]

MAX_KEYWORDS = 20

TARGET_WORDS = {
    ResumeMode.CONCISE: 200,
    ResumeMode.DETAILED: 400,
}
DEFAULT_TARGET_WORDS = 300

ESSENTIAL_SECTIONS = ("experience", "skills", "education")

RATIONALES = [
    (0.9, "Excellent resume with strong keyword alignment, clear structure, and optimal readability"),
    (0.8, "High-quality resume with good job alignment and professional formatting"),
    (0.7, "Solid resume that effectively communicates qualifications with room for minor improvements"),
    (0.6, "Good foundation but could benefit from better keyword optimization or structural improvements"),
    (0.5, "Adequate resume that may need enhanced job alignment and clearer formatting"),
]
LOW_RATIONALE = "Resume needs significant improvement in structure, content alignment, or completeness"

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_NON_WORD_RE = re.compile(r"[^\w]")
_HEADING_RE = re.compile(r"^(#|\*\*[A-Z])", re.MULTILINE)
_BULLET_RE = re.compile(r"^[ \t]*[-•*]", re.MULTILINE)
_EMAIL_RE = re.compile(r"\b[\w.-]+@[\w.-]+\.\w+\b")


def extract_keywords(text: str) -> list[str]:
    """Words longer than three letters plus any common skill terms, capped at 20.

    Repeats are kept, so a term that is both a word and a common keyword
    counts twice.
    """
    words = [_NON_WORD_RE.sub("", word) for word in text.split()]
    words = [word for word in words if len(word) > 3]
    words += [keyword for keyword in COMMON_KEYWORDS if keyword in text]
    return words[:MAX_KEYWORDS]


def _contains_word(text: str, word: str) -> bool:
    # Whole words only: "java" does not match "javascript".
    return re.search(rf"(?<!\w){re.escape(word)}(?!\w)", text) is not None


def keyword_alignment(resume: str, job_description: str) -> float:
    if not job_description:
        return 0.5

    keywords = extract_keywords(job_description.lower())
    content = resume.lower()
    matched = sum(1 for keyword in keywords if _contains_word(content, keyword))
    return min(matched / max(len(keywords), 1), 1.0)


def readability(content: str) -> float:
    """1.0 for 12-18 words per sentence, 0.3 below 8 or above 25, else 0.7."""
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if s.strip()]
    words = content.split()
    average = len(words) / max(len(sentences), 1)

    if 12 <= average <= 18:
        return 1.0
    if average < 8 or average > 25:
        return 0.3
    return 0.7


def structure(content: str) -> float:
    score = 0.0
    if _HEADING_RE.search(content):
        score += 0.3
    bullets = len(_BULLET_RE.findall(content))
    if bullets:
        score += 0.3
    if bullets >= 3:
        score += 0.2
    if _EMAIL_RE.search(content):
        score += 0.2
    return min(score, 1.0)


def completeness(content: str, mode: ResumeMode | str) -> float:
    """Half for length against the mode's target, half for essential sections."""
    target = TARGET_WORDS.get(ResumeMode(mode), DEFAULT_TARGET_WORDS)
    length_score = min(len(content.split()) / target, 1.0)

    lowered = content.lower()
    sections = sum(1 for section in ESSENTIAL_SECTIONS if section in lowered)
    return min(length_score * 0.5 + sections / len(ESSENTIAL_SECTIONS) * 0.5, 1.0)


def rationale_for(score: float) -> str:
    for threshold, rationale in RATIONALES:
        if score >= threshold:
            return rationale
    return LOW_RATIONALE


def perform_quality_check(
    resume: str,
    job_description: str,
    mode: ResumeMode | str = ResumeMode.DETAILED,
) -> QualityCheckResult:
    """Score a résumé against its job description.

    Args:
        resume: Generated résumé text.
        job_description: The job posting it was tailored to.
        mode: Résumé mode, which sets the target length.

    Returns:
        QualityCheckResult with the weighted score (0-1, two decimals),
        a rationale and the per-factor scores.
    """
    factors = QualityFactors(
        keyword_alignment=keyword_alignment(resume, job_description),
        readability=readability(resume),
        structure=structure(resume),
        completeness=completeness(resume, mode),
    )
    weighted = sum(getattr(factors, name) * weight for name, weight in WEIGHTS.items())
    score = round(weighted, 2)

    result = QualityCheckResult(score=score, rationale=rationale_for(score), factors=factors)
    logger.debug(
        "Quality %.0f%% (keywords %.0f%%, readability %.0f%%, structure %.0f%%, completeness %.0f%%)",
        score * 100,
        factors.keyword_alignment * 100,
        factors.readability * 100,
        factors.structure * 100,
        factors.completeness * 100,
    )
    return result
