"""
Applying reported scores to a round schedule.
"""
import logging

from bracket.errors import InvalidScore, MatchAlreadyCompleted, MatchNotFound, OverrideNotConfirmed
from bracket.models import Schedule

logger = logging.getLogger(__name__)


def validate_score(score) -> int:
    """Return score if it is a non-negative int, otherwise raise InvalidScore."""
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScore(f"Score must be an integer, got {score!r}")
    if score < 0:
        raise InvalidScore(f"Score cannot be negative, got {score}")
    return score


def _find_match(schedule: Schedule, match_id):
    match = schedule.get_match(match_id)
    if match is None:
        raise MatchNotFound(match_id)
    return match


def apply_score(schedule: Schedule, match_id, score1, score2) -> Schedule:
    """
    Record the result of a scheduled match.

    Returns a new Schedule where the match is completed with the given scores
    and the team with the strictly higher score as winner (no winner on a
    tie). Every other match and the match order are unchanged; the input
    schedule is never modified.

    Raises MatchNotFound, InvalidScore or MatchAlreadyCompleted without
    producing a schedule.
    """
    match = _find_match(schedule, match_id)
    validate_score(score1)
    validate_score(score2)
    if match.is_completed:
        raise MatchAlreadyCompleted(match_id)

    updated = match.completed(score1, score2)
    logger.info(f"Match {match_id} in {schedule.id}: "
                f"{match.team1.name} {score1} - {score2} {match.team2.name}")
    return schedule.with_match(updated)


def override_score(schedule: Schedule, match_id, score1, score2, confirm=False) -> Schedule:
    """Replace the score of a match, completed or not. Requires confirm=True."""
    match = _find_match(schedule, match_id)
    validate_score(score1)
    validate_score(score2)
    if not confirm:
        raise OverrideNotConfirmed(
            f"Overriding the score of match {match_id} must be explicitly confirmed")

    if match.is_completed:
        logger.warning(f"Overriding result of match {match_id} in {schedule.id}: "
                       f"{match.team1_score} - {match.team2_score} replaced by {score1} - {score2}")
    return schedule.with_match(match.completed(score1, score2))
