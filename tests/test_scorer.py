"""Tests for the fixed-weight match scorer."""

import pytest

from matching.scorer import ACCEPT_THRESHOLD, score_match, score_requirements, skill_present
from schemas import Decision, JobRequirements


class TestScoreMatch:
    """Known scenarios"""

    def test_partial_mandatory_rejects(self):
        result = score_match(["react", "node.js"], ["React", "TypeScript"], ["AWS"])
        assert result.score == 35.0
        assert result.decision == Decision.REJECT
        assert not result.has_all_mandatory
        assert result.mandatory_matched == ["React"]
        assert result.mandatory_missing == ["TypeScript"]
        assert result.preferred_matched == []

    def test_only_preferred_accepts(self):
        result = score_match(["docker", "git"], [], ["Docker"])
        assert result.score == 100.0
        assert result.decision == Decision.ACCEPT
        assert result.has_all_mandatory

    def test_no_requirements_accepts(self):
        result = score_match([], [], [])
        assert result.score == 100.0
        assert result.decision == Decision.ACCEPT

    def test_all_mandatory_no_preferred_accepts(self):
        result = score_match(["python", "django"], ["Python"], ["Kubernetes", "Rust"])
        assert result.score == 70.0
        assert result.decision == Decision.ACCEPT

    def test_rounding(self):
        result = score_match(["a1"], ["a1", "b2", "c3"], [])
        assert result.score == 53.33

    def test_substring_either_direction(self):
        assert skill_present("React", ["react native"])
        assert skill_present("PostgreSQL 14", ["postgresql"])
        assert not skill_present("Rust", ["python"])

    def test_duplicate_requirements_collapse(self):
        result = score_match(["python"], ["Python", "python", "PYTHON", "Go"], [])
        assert result.score == 65.0
        assert result.mandatory_missing == ["Go"]

    def test_score_requirements(self):
        req = JobRequirements(mandatory_skills=["python"], preferred_skills=["aws"])
        assert score_requirements(["python", "aws"], req).score == 100.0


class TestMalformedInput:
    """The scorer never raises on bad skill lists"""

    @pytest.mark.parametrize("bad", [None, "python", 42, {"python": 1}])
    def test_coerced_to_empty(self, bad):
        result = score_match(bad, bad, bad)
        assert result.score == 100.0

    def test_non_string_entries_ignored(self):
        result = score_match(["python", None, 3], ["Python", "", None], [" "])
        assert result.score == 100.0
        assert result.mandatory_matched == ["Python"]


class TestProperties:
    CANDIDATE = ["python", "docker", "aws", "sql"]
    MANDATORY = ["Python", "Docker", "AWS", "SQL", "Rust"]

    def test_monotonic_in_mandatory_matches(self):
        scores = [
            score_match(self.CANDIDATE[:n], self.MANDATORY, ["Go"]).score
            for n in range(len(self.CANDIDATE) + 1)
        ]
        assert scores == sorted(scores)
        assert scores[0] < scores[-1]

    @pytest.mark.parametrize("n", range(5))
    def test_bounds_and_accept_implies_threshold(self, n):
        result = score_match(self.CANDIDATE[:n], self.MANDATORY[:3], ["SQL", "Go"])
        assert 0 <= result.score <= 100
        if result.decision == Decision.ACCEPT:
            assert result.score >= ACCEPT_THRESHOLD
            assert result.has_all_mandatory
