"""
Scoring engine - rule-based candidate scoring against a persona.

Pure functions: callers pass the persona criteria and a learned-weight
snapshot, nothing here touches the database.
"""
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dealscout.config import settings
from dealscout.schemas.scoring import Recommendation, ScoreResult, ScoreStatus

_WHITESPACE = re.compile(r"\s+")

POSITIVE_MARK = "+"
NEGATIVE_MARK = "-"
RED_FLAG_MARK = "🚩"


def normalize_attribute(value: str) -> str:
    """Lower-case and collapse whitespace runs to underscores."""
    return _WHITESPACE.sub("_", value.lower())


def matches_any(attribute: str, entries: Iterable[str]) -> bool:
    """Substring match in either direction against any entry."""
    for entry in entries:
        entry = normalize_attribute(entry)
        if attribute in entry or entry in attribute:
            return True
    return False


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def recommend(score: int) -> Recommendation:
    """Map a 0-100 score onto a recommendation bucket."""
    if score >= settings.STRONG_PASS_THRESHOLD:
        return Recommendation.STRONG_PASS
    if score >= settings.SOFT_PASS_THRESHOLD:
        return Recommendation.SOFT_PASS
    if score >= settings.BORDERLINE_THRESHOLD:
        return Recommendation.BORDERLINE
    return Recommendation.PASS


def _weight_for(
    attribute: str,
    default: float,
    base_weights: Mapping[str, float],
    learned_weights: Mapping[str, float]
) -> float:
    # Learned beats base beats category default; a stored 0.0 still counts
    learned = learned_weights.get(attribute)
    if learned is not None:
        return learned
    base = base_weights.get(attribute)
    if base is not None:
        return base
    return default


def no_persona_result() -> ScoreResult:
    """Sentinel returned when there is no persona to score against."""
    neutral = round_half_up(settings.NEUTRAL_SCORE)
    return ScoreResult(
        score=neutral,
        recommendation=recommend(neutral),
        matched=[],
        status=ScoreStatus.NO_PERSONA,
    )


def score_attributes(
    criteria: Optional[Mapping[str, Any]],
    attributes: Iterable[Any],
    learned_weights: Optional[Mapping[str, float]] = None
) -> ScoreResult:
    """
    Score candidate attributes against persona criteria.

    Each attribute is checked independently against the positive, negative
    and red-flag lists, so one attribute can contribute more than once.
    Non-string and empty attributes are ignored.

    Args:
        criteria: Persona criteria dict (positive_highlights,
            negative_highlights, red_flags, weights). None means no persona.
        attributes: Candidate datapoints in input order.
        learned_weights: attribute -> learned weight snapshot.

    Returns:
        ScoreResult with the clamped score, recommendation and match trace.
    """
    if criteria is None:
        return no_persona_result()

    learned = learned_weights or {}
    base_weights: Dict[str, float] = criteria.get("weights") or {}
    positives = criteria.get("positive_highlights") or []
    negatives = criteria.get("negative_highlights") or []
    red_flags = criteria.get("red_flags") or []

    score = settings.NEUTRAL_SCORE
    matched: List[str] = []

    for raw in attributes:
        if not isinstance(raw, str) or not raw:
            continue
        attribute = normalize_attribute(raw)

        if matches_any(attribute, positives):
            weight = _weight_for(attribute, settings.DEFAULT_POSITIVE_WEIGHT, base_weights, learned)
            score += weight * settings.HIGHLIGHT_MULTIPLIER
            matched.append(f"{POSITIVE_MARK}{attribute}")

        if matches_any(attribute, negatives):
            weight = _weight_for(attribute, settings.DEFAULT_NEGATIVE_WEIGHT, base_weights, learned)
            score += weight * settings.HIGHLIGHT_MULTIPLIER
            matched.append(f"{NEGATIVE_MARK}{attribute}")

        if matches_any(attribute, red_flags):
            weight = _weight_for(attribute, settings.DEFAULT_RED_FLAG_WEIGHT, base_weights, learned)
            score += weight * settings.RED_FLAG_MULTIPLIER
            matched.append(f"{RED_FLAG_MARK}{attribute}")

    final = round_half_up(max(0.0, min(100.0, score)))
    return ScoreResult(
        score=final,
        recommendation=recommend(final),
        matched=matched,
        status=ScoreStatus.OK,
    )


def matched_attributes(matched: Iterable[str]) -> List[str]:
    """Strip the markers from a match trace, keeping first-seen order."""
    attributes = []
    for entry in matched:
        for mark in (RED_FLAG_MARK, POSITIVE_MARK, NEGATIVE_MARK):
            if entry.startswith(mark):
                entry = entry[len(mark):]
                break
        if entry not in attributes:
            attributes.append(entry)
    return attributes
