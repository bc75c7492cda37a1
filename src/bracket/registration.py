"""
Tournament creation and team registration rules.
"""
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from bracket.errors import (DuplicateTeamName, InvalidRegistration, InvalidTournament,
                            RegistrationAlreadyDecided, RegistrationFull)
from bracket.models import APPROVED, CURRENCIES, DEFAULT_TEAM_LIMIT, PENDING, REJECTED, Team, Tournament


def _number(data: dict, field: str, default, cast):
    value = data.get(field, default)
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise InvalidTournament(f"{field} must be a number.")


def create_tournament(data: dict) -> Tournament:
    """Validate tournament fields and build a Tournament. Raises InvalidTournament."""
    name = (data.get('name') or '').strip()
    game = (data.get('game') or '').strip()
    if len(name) < 3:
        raise InvalidTournament('Tournament name must be at least 3 characters.')
    if len(game) < 2:
        raise InvalidTournament('Game name must be at least 2 characters.')

    entry_fee = _number(data, 'entry_fee', 0, float)
    if entry_fee < 0:
        raise InvalidTournament('Entry fee cannot be negative.')
    if entry_fee.is_integer():
        entry_fee = int(entry_fee)

    max_team_limit = _number(data, 'max_team_limit', DEFAULT_TEAM_LIMIT, int)
    if max_team_limit < 2:
        raise InvalidTournament('Team limit must be at least 2.')

    currency = data.get('currency', 'USD')
    if currency not in CURRENCIES:
        raise InvalidTournament(f"Currency must be one of {', '.join(CURRENCIES)}.")

    date = data.get('date')
    if date:
        try:
            datetime.fromisoformat(str(date))
        except ValueError:
            raise InvalidTournament('Date must be an ISO 8601 date or datetime.')
        date = str(date)

    return Tournament(
        id=data.get('id') or uuid.uuid4().hex,
        name=name,
        game=game,
        date=date,
        entry_fee=entry_fee,
        currency=currency,
        max_team_limit=max_team_limit,
        description=data.get('description') or None,
        qr_code_url=data.get('qr_code_url') or None,
        banner_url=data.get('banner_url') or None,
    )


def update_tournament(tournament: Tournament, data: dict, teams: Sequence[Team] = ()) -> Tournament:
    """
    Apply an edit to an existing tournament.

    Fields missing from data keep their current value and the id never
    changes. The result goes through the same checks as create_tournament,
    and the team limit cannot drop below the number of approved teams.
    """
    merged = tournament.to_dict()
    merged.update(data)
    merged['id'] = tournament.id
    updated = create_tournament(merged)

    approved = approved_count([t for t in teams if t.tournament_id == tournament.id])
    if updated.max_team_limit < approved:
        raise InvalidTournament(
            f'Team limit cannot be lower than the {approved} teams already approved.')
    return updated


def approved_count(teams: Sequence[Team]) -> int:
    return sum(1 for team in teams if team.status == APPROVED)


def _player_list(player_usernames, team_leader_id: str) -> List[str]:
    if player_usernames is None:
        return [team_leader_id]
    if not isinstance(player_usernames, list):
        raise InvalidRegistration('Player usernames must be a list.')
    players = []
    for username in player_usernames:
        if not isinstance(username, str) or not username.strip():
            raise InvalidRegistration('Player usernames must be non-empty strings.')
        players.append(username.strip())
    return players or [team_leader_id]


def register_team(tournament: Tournament, existing_teams: Sequence[Team], team_name: str,
                  team_leader_id: str, payment_proof_url: str,
                  player_usernames: Optional[List[str]] = None) -> Team:
    """
    Create a pending registration for a tournament.

    existing_teams are the teams already registered for the same tournament.
    The team name must be unique within the tournament and registration closes
    once max_team_limit teams have been approved.
    """
    team_name = (team_name or '').strip()
    if not team_name:
        raise InvalidRegistration('Team name is required.')
    if not team_leader_id:
        raise InvalidRegistration('Team leader is required.')
    if not payment_proof_url:
        raise InvalidRegistration('Payment proof is required.')
    players = _player_list(player_usernames, team_leader_id)

    same_tournament = [t for t in existing_teams if t.tournament_id == tournament.id]
    if any(t.team_name == team_name for t in same_tournament):
        raise DuplicateTeamName(
            'A team with this name has already registered for this tournament. '
            'Please choose a different name.')
    if approved_count(same_tournament) >= tournament.max_team_limit:
        raise RegistrationFull('This tournament has reached its maximum team limit.')

    return Team(
        id=uuid.uuid4().hex,
        team_name=team_name,
        tournament_id=tournament.id,
        status=PENDING,
        team_leader_id=team_leader_id,
        player_usernames=players,
        payment_proof_url=payment_proof_url,
        registered_at=datetime.now().isoformat(),
    )


def decide_registration(team: Team, status: str, reason: Optional[str] = None) -> Team:
    """Approve or reject a pending team. A team can only be decided once."""
    if status not in (APPROVED, REJECTED):
        raise InvalidRegistration(f"Status must be '{APPROVED}' or '{REJECTED}'.")
    if team.status != PENDING:
        raise RegistrationAlreadyDecided(f"Team {team.team_name} has already been {team.status}.")

    if status == REJECTED:
        reason = (reason or '').strip()
        if not reason:
            raise InvalidRegistration('A reason is required to reject a registration.')
        team.rejection_reason = reason
    team.status = status
    return team
