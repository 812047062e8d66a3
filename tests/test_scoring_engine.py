import pytest

from dealscout.schemas.scoring import Recommendation, ScoreStatus
from dealscout.services.scoring_engine import (
    normalize_attribute,
    matches_any,
    matched_attributes,
    recommend,
    round_half_up,
    score_attributes,
)


@pytest.fixture
def criteria(founder_criteria):
    return founder_criteria.model_dump()


def test_normalize_attribute():
    assert normalize_attribute("Serial Founder") == "serial_founder"
    assert normalize_attribute("YC\t \nAlumni") == "yc_alumni"
    assert normalize_attribute("prior_exit") == "prior_exit"


def test_matches_any_is_symmetric():
    assert matches_any("yc", ["yc_alumni"])
    assert matches_any("yc_alumni_w21", ["yc_alumni"])
    assert not matches_any("stanford_alumni", ["yc_alumni"])


def test_concrete_scenario_strong_pass(criteria):
    result = score_attributes(
        criteria, ["serial_founder", "prior_exit", "yc_alumni", "stanford_alumni"]
    )

    assert result.score == 100
    assert result.recommendation == Recommendation.STRONG_PASS
    assert result.matched == ["+serial_founder", "+prior_exit", "+yc_alumni"]
    assert result.status == ScoreStatus.OK


def test_red_flag_with_default_weight():
    result = score_attributes({"red_flags": ["no_experience"]}, ["no_experience"])

    assert result.score == 35
    assert result.recommendation == Recommendation.PASS
    assert result.matched == ["🚩no_experience"]


def test_empty_attributes_are_neutral(criteria):
    result = score_attributes(criteria, [])

    assert result.score == 50
    assert result.recommendation == Recommendation.BORDERLINE
    assert result.matched == []


def test_missing_persona_returns_sentinel():
    result = score_attributes(None, ["serial_founder"])

    assert result.score == 50
    assert result.recommendation == Recommendation.BORDERLINE
    assert result.matched == []
    assert result.status == ScoreStatus.NO_PERSONA


def test_learned_weight_overrides_base(criteria):
    base = score_attributes(criteria, ["yc_alumni"])
    learned = score_attributes(criteria, ["yc_alumni"], {"yc_alumni": -0.5})

    assert base.score == 66
    assert learned.score == 40
    assert learned.score < base.score


def test_learned_zero_is_used_as_zero(criteria):
    result = score_attributes(criteria, ["serial_founder"], {"serial_founder": 0.0})
    assert result.score == 50


def test_attribute_can_match_several_categories():
    criteria = {
        "positive_highlights": ["founder"],
        "negative_highlights": ["founder_only"],
        "red_flags": [],
    }
    result = score_attributes(criteria, ["founder"])

    # +0.5*20 then -0.3*20
    assert result.score == 54
    assert result.matched == ["+founder", "-founder"]


def test_matched_trace_follows_input_order(criteria):
    result = score_attributes(criteria, ["no_experience", "Career Gap", "prior_exit"])
    assert result.matched == ["🚩no_experience", "-career_gap", "+prior_exit"]


def test_non_string_attributes_are_skipped(criteria):
    result = score_attributes(criteria, [None, 42, "prior_exit", ""])
    assert result.matched == ["+prior_exit"]
    assert result.score == 67


def test_score_is_clamped():
    criteria = {"red_flags": ["bad"], "weights": {"bad": -1.0}}
    result = score_attributes(criteria, ["bad", "bad", "bad"])
    assert result.score == 0
    assert result.recommendation == Recommendation.PASS


def test_rounds_half_up():
    result = score_attributes(
        {"positive_highlights": ["niche"], "weights": {"niche": 0.025}}, ["niche"]
    )
    assert result.score == 51
    assert round_half_up(60.5) == 61
    assert round_half_up(60.49) == 60


@pytest.mark.parametrize("score,expected", [
    (100, Recommendation.STRONG_PASS),
    (80, Recommendation.STRONG_PASS),
    (79, Recommendation.SOFT_PASS),
    (60, Recommendation.SOFT_PASS),
    (59, Recommendation.BORDERLINE),
    (40, Recommendation.BORDERLINE),
    (39, Recommendation.PASS),
    (0, Recommendation.PASS),
])
def test_recommendation_thresholds(score, expected):
    assert recommend(score) == expected


def test_positive_match_never_lowers_score(criteria):
    attributes = ["career_gap"]
    before = score_attributes(criteria, attributes).score
    for extra in ["serial_founder", "prior_exit", "yc_alumni"]:
        attributes = attributes + [extra]
        after = score_attributes(criteria, attributes).score
        assert after >= before
        before = after


def test_score_always_in_bounds(criteria):
    for attributes in (
        ["no_experience"] * 10,
        ["serial_founder"] * 10,
        ["career_gap", "no_experience", "unknown"],
    ):
        result = score_attributes(criteria, attributes)
        assert 0 <= result.score <= 100


def test_matched_attributes_strips_markers():
    assert matched_attributes(["+founder", "-founder", "🚩no_experience", "+-odd"]) == [
        "founder", "no_experience", "-odd"
    ]
