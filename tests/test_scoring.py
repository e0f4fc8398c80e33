import pytest

from devduel.schemas import DIMENSION_KEYS, CompareResult, UserStats
from devduel.services.personas import VerdictThresholds
from devduel.services.scoring import (
    clamp_score, derive_verdict, extract_json, validate_analysis, validate_comparison,
    validate_dual_analysis, winner_matches_scores,
)


def _dims(score):
    return {key: {"score": score, "comment": key} for key in DIMENSION_KEYS}


def _comparison(**overrides):
    raw = {
        "winner": "user2",
        "winner_reason": "Better tests",
        "head_to_head": {"velocity": "user1", "quality": "user2", "impact": "user2"},
        "user1_stats": {"score": 62, "top_repo": "fast-api"},
        "user2_stats": {"score": 77, "top_repo": "solid-lib", "deep_scan_insight": "uses pytest"},
    }
    raw.update(overrides)
    return raw


def test_extract_json_from_fenced_block():
    raw = 'Here you go:\n```json\n{"winner": "tie"}\n```\nthanks'

    assert extract_json(raw) == {"winner": "tie"}


def test_extract_json_from_surrounding_text():
    assert extract_json('Result: {"a": {"b": 1}} done') == {"a": {"b": 1}}


@pytest.mark.parametrize("raw", ["", "   ", "no json here", "[1, 2]"])
def test_extract_json_rejects_non_objects(raw):
    with pytest.raises(ValueError):
        extract_json(raw)


@pytest.mark.parametrize("value, expected", [
    (7.4, 7), (7.5, 8), (-3, 0), (14, 10), ("9", 9), ("n/a", 0), (None, 0), (True, 0),
])
def test_clamp_score(value, expected):
    assert clamp_score(value, 0, 10) == expected


def test_derive_verdict_thresholds():
    assert derive_verdict(70) == "Strong Hire"
    assert derive_verdict(69) == "Interview"
    assert derive_verdict(45) == "Interview"
    assert derive_verdict(44) == "Pass"
    assert derive_verdict(60, VerdictThresholds(strong_hire=60, interview=30)) == "Strong Hire"


def test_missing_total_is_rebuilt_from_dimensions():
    result = validate_analysis({"summary": "ok", "dimensions": _dims(6)})

    assert result.total_score == 60
    assert result.verdict == "Interview"


def test_zero_total_is_rebuilt_from_dimensions():
    result = validate_analysis({"total_score": 0, "dimensions": _dims(8)})

    assert result.total_score == 80
    assert result.verdict == "Strong Hire"


def test_out_of_range_values_are_clamped():
    dims = _dims(5)
    dims["impact"]["score"] = 42
    result = validate_analysis({"total_score": 180, "dimensions": dims, "recruiter_verdict": "Pass"})

    assert result.total_score == 100
    assert result.dimensions["impact"].score == 10
    assert result.verdict == "Pass"


def test_legacy_score_field_is_accepted():
    assert validate_analysis({"score": 51, "dimensions": _dims(1)}).total_score == 51


def test_unknown_verdict_is_derived_and_feedback_defaults_to_empty():
    result = validate_analysis({"total_score": 30, "dimensions": _dims(3), "recruiter_verdict": "Maybe"})

    assert result.verdict == "Pass"
    assert result.actionable_feedback == []


def test_missing_dimensions_score_zero():
    result = validate_analysis({"total_score": 50, "dimensions": {"impact": {"score": 9}}})

    assert set(result.dimensions) == set(DIMENSION_KEYS)
    assert result.dimensions["documentation"].score == 0
    assert result.dimensions["impact"].score == 9


def test_feedback_is_capped():
    raw = {"total_score": 50, "dimensions": _dims(5), "actionable_feedback": [f"tip {i}" for i in range(9)]}

    assert len(validate_analysis(raw).actionable_feedback) == 5


def test_dual_analysis_requires_both_perspectives():
    with pytest.raises(ValueError):
        validate_dual_analysis({"recruiter": {"total_score": 50}})


def test_dual_analysis_validates_each_side():
    dual = validate_dual_analysis({
        "recruiter": {"total_score": 40, "dimensions": _dims(4)},
        "founder": {"total_score": 75, "dimensions": _dims(7)},
    })

    assert dual.recruiter.verdict == "Pass"
    assert dual.founder.verdict == "Strong Hire"
    assert dual.for_persona("founder") is dual.founder


def test_comparison_is_validated_and_scores_clamped():
    result = validate_comparison(_comparison(user1_stats={"score": 130, "top_repo": "x"}, winner=" USER2 "),
                                 "alice", "bob", "recruiter")

    assert result.winner == "user2"
    assert result.user1_stats.score == 100
    assert result.user2_stats.deep_scan_insight == "uses pytest"
    assert result.winner_username() == "bob"
    assert result.is_mock_data is False


def test_head_to_head_sides_are_normalized():
    result = validate_comparison(
        _comparison(head_to_head={"velocity": " USER1 ", "quality": "User2", "impact": "user2"}),
        "alice", "bob", "recruiter")

    assert result.head_to_head == {"velocity": "user1", "quality": "user2", "impact": "user2"}


@pytest.mark.parametrize("overrides", [
    {"winner": "alice"},
    {"winner": None},
    {"head_to_head": None},
    {"head_to_head": {"velocity": "user1", "quality": "user2"}},
    {"head_to_head": {"velocity": "user1", "quality": "tie", "impact": "user2"}},
    {"head_to_head": {"velocity": "banana", "quality": "user2", "impact": "user1"}},
    {"user1_stats": None},
])
def test_invalid_comparisons_are_rejected(overrides):
    with pytest.raises(ValueError):
        validate_comparison(_comparison(**overrides), "alice", "bob", "recruiter")


def test_winner_score_consistency():
    def result(winner, s1, s2):
        return CompareResult(winner=winner, winner_reason="", head_to_head={},
                             user1_stats=UserStats(s1), user2_stats=UserStats(s2),
                             user1_username="a", user2_username="b")

    assert winner_matches_scores(result("user1", 80, 60))
    assert not winner_matches_scores(result("user1", 60, 80))
    assert winner_matches_scores(result("tie", 10, 90))
