"""Tests for the résumé quality heuristics."""

import pytest

from quality_check import (
    LOW_RATIONALE,
    WEIGHTS,
    completeness,
    extract_keywords,
    keyword_alignment,
    perform_quality_check,
    rationale_for,
    readability,
    structure,
)
from services.models import ResumeMode


class TestKeywordAlignment:

    def test_partial_word_does_not_match(self):
        # "Java" must not be found inside "JavaScript".
        assert keyword_alignment("Experienced with JavaScript frameworks", "Java") == 0

    def test_word_inside_phrase_matches(self):
        assert keyword_alignment("Skilled in React Native development", "React") == 1

    def test_phrase_not_satisfied_by_one_word(self):
        score = keyword_alignment("Experienced with React", "React Native")
        assert score == pytest.approx(2 / 3)

    def test_no_job_description(self):
        assert keyword_alignment("anything", "") == 0.5

    def test_extract_keywords_caps_and_adds_common_terms(self):
        keywords = extract_keywords("leadership " * 30)
        assert len(keywords) == 20

        assert extract_keywords("we use python, daily") == ["python", "daily", "python"]


class TestFactors:

    @pytest.mark.parametrize(
        "words, expected",
        [(3, 0.3), (10, 0.7), (15, 1.0), (30, 0.3)],
    )
    def test_readability(self, words, expected):
        assert readability(" ".join(["word"] * words) + ".") == expected

    def test_structure_full(self):
        content = "# Jane Doe\njane@example.com\n\n- one\n- two\n- three\n"
        assert structure(content) == pytest.approx(1.0)

    def test_structure_few_bullets(self):
        assert structure("**Summary**\n- one\n") == pytest.approx(0.6)

    def test_structure_plain(self):
        assert structure("just a paragraph") == 0

    def test_completeness_concise(self):
        content = "experience skills education " + "word " * 197
        assert completeness(content, ResumeMode.CONCISE) == pytest.approx(1.0)

    def test_completeness_detailed_needs_more_words(self):
        content = "experience skills education " + "word " * 197
        assert completeness(content, ResumeMode.DETAILED) == pytest.approx(0.75)

    def test_completeness_executive_uses_default_target(self):
        assert completeness("word " * 150, "executive") == pytest.approx(0.25)


class TestPerformQualityCheck:

    def test_weighted_score(self, sample_resume, sample_job_description):
        result = perform_quality_check(sample_resume, sample_job_description, ResumeMode.CONCISE)

        expected = sum(getattr(result.factors, name) * w for name, w in WEIGHTS.items())
        assert result.score == round(expected, 2)
        assert 0 <= result.score <= 1
        assert result.rationale == rationale_for(result.score)

    def test_empty_resume(self):
        result = perform_quality_check("", "Python engineer")
        assert result.score < 0.5
        assert result.rationale == LOW_RATIONALE

    @pytest.mark.parametrize(
        "score, prefix",
        [(0.95, "Excellent"), (0.8, "High-quality"), (0.72, "Solid"), (0.6, "Good"), (0.5, "Adequate")],
    )
    def test_rationale_thresholds(self, score, prefix):
        assert rationale_for(score).startswith(prefix)
