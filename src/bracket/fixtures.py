"""
Round-robin fixture generation.
"""
import logging
import uuid
from itertools import combinations
from typing import Callable, List, Optional, Sequence

from bracket.errors import InsufficientParticipants
from bracket.models import APPROVED, Match, Schedule, Team, TeamRef, schedule_id

logger = logging.getLogger(__name__)


def _new_match_id() -> str:
    return uuid.uuid4().hex


def approved_teams(teams: Sequence[Team]) -> List[Team]:
    """Return the approved teams, keeping registration order."""
    return [team for team in teams if team.status == APPROVED]


def _team_ref(team) -> TeamRef:
    if isinstance(team, Team):
        return team.snapshot()
    if isinstance(team, TeamRef):
        return team
    return TeamRef(team['id'], team['team_name'])


def generate(tournament_id: str, round_number: int, teams: Sequence,
             id_factory: Optional[Callable[[], str]] = None) -> Schedule:
    """
    Build the round-robin schedule for one round.

    Every unordered pair of teams plays once. Pairs are emitted in roster
    order: team i meets every team j > i before team i+1 is considered, so
    the same roster always yields the same match order.

    teams may be Team objects or {'id', 'team_name'} mappings and must already
    be filtered to approved teams; status is not inspected here.

    Returns a new Schedule keyed '{tournament_id}_round_{round_number}'.
    Persisting it replaces any previous schedule for that round.
    """
    if isinstance(round_number, bool) or not isinstance(round_number, int) or round_number < 1:
        raise ValueError(f"Round number must be a positive integer, got {round_number!r}")

    refs = [_team_ref(team) for team in teams]
    seen = set()
    for ref in refs:
        if ref.id in seen:
            raise ValueError(f"Team {ref.id!r} appears more than once in the roster")
        seen.add(ref.id)
    if len(refs) < 2:
        raise InsufficientParticipants(
            f"At least two approved teams are required to generate fixtures ({len(refs)} given)")

    new_id = id_factory or _new_match_id
    matches = [Match(new_id(), team1, team2) for team1, team2 in combinations(refs, 2)]

    logger.info(f"Generated {len(matches)} matches for {tournament_id} round {round_number}")
    return Schedule(schedule_id(tournament_id, round_number), tournament_id, round_number, matches)
