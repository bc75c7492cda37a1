"""
Domain models for tournaments, teams, matches and round schedules.
"""
from typing import Dict, List, Optional

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'
TEAM_STATUSES = (PENDING, APPROVED, REJECTED)

SCHEDULED = 'scheduled'
COMPLETED = 'completed'

CURRENCIES = ('USD', 'INR')
DEFAULT_TEAM_LIMIT = 16


def schedule_id(tournament_id: str, round_number: int) -> str:
    """Storage key of the schedule for one round of one tournament."""
    return f"{tournament_id}_round_{round_number}"


class Tournament:
    def __init__(self, id, name, game, date=None, entry_fee=0, currency='USD',
                 max_team_limit=DEFAULT_TEAM_LIMIT, description=None, qr_code_url=None, banner_url=None):
        self.id = id
        self.name = name
        self.game = game
        self.date = date
        self.entry_fee = entry_fee
        self.currency = currency
        self.max_team_limit = max_team_limit
        self.description = description
        self.qr_code_url = qr_code_url
        self.banner_url = banner_url

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'game': self.game,
            'date': self.date,
            'entry_fee': self.entry_fee,
            'currency': self.currency,
            'max_team_limit': self.max_team_limit,
            'description': self.description,
            'qr_code_url': self.qr_code_url,
            'banner_url': self.banner_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Tournament':
        return cls(
            id=data['id'],
            name=data['name'],
            game=data['game'],
            date=data.get('date'),
            entry_fee=data.get('entry_fee', 0),
            currency=data.get('currency', 'USD'),
            max_team_limit=data.get('max_team_limit', DEFAULT_TEAM_LIMIT),
            description=data.get('description'),
            qr_code_url=data.get('qr_code_url'),
            banner_url=data.get('banner_url'),
        )

    def __repr__(self):
        return f"Tournament(id={self.id}, name={self.name}, game={self.game})"


class Team:
    def __init__(self, id, team_name, tournament_id=None, status=PENDING, rejection_reason=None,
                 team_leader_id=None, player_usernames=None, payment_proof_url=None,
                 registered_at=None):
        self.id = id
        self.team_name = team_name
        self.tournament_id = tournament_id
        self.status = status
        self.rejection_reason = rejection_reason
        self.team_leader_id = team_leader_id
        self.player_usernames = player_usernames if player_usernames else []
        self.payment_proof_url = payment_proof_url
        self.registered_at = registered_at

    def snapshot(self) -> 'TeamRef':
        return TeamRef(self.id, self.team_name)

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'team_name': self.team_name,
            'tournament_id': self.tournament_id,
            'status': self.status,
            'team_leader_id': self.team_leader_id,
            'player_usernames': list(self.player_usernames),
            'payment_proof_url': self.payment_proof_url,
            'registered_at': self.registered_at,
        }
        if self.rejection_reason:
            data['rejection_reason'] = self.rejection_reason
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Team':
        return cls(
            id=data['id'],
            team_name=data['team_name'],
            tournament_id=data.get('tournament_id'),
            status=data.get('status', PENDING),
            rejection_reason=data.get('rejection_reason'),
            team_leader_id=data.get('team_leader_id'),
            player_usernames=data.get('player_usernames'),
            payment_proof_url=data.get('payment_proof_url'),
            registered_at=data.get('registered_at'),
        )

    def __repr__(self):
        return f"Team(id={self.id}, team_name={self.team_name}, status={self.status})"


class TeamRef:
    """Team id and display name as captured when the schedule was created."""

    def __init__(self, id, name):
        self.id = id
        self.name = name

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: dict) -> 'TeamRef':
        return cls(data['id'], data['name'])

    def __eq__(self, other):
        if not isinstance(other, TeamRef):
            return NotImplemented
        return self.id == other.id and self.name == other.name

    def __hash__(self):
        return hash((self.id, self.name))

    def __repr__(self):
        return f"TeamRef(id={self.id}, name={self.name})"


class Scheduled:
    """Outcome of a match that has not been played yet."""
    status = SCHEDULED

    def __eq__(self, other):
        return isinstance(other, Scheduled)

    def __hash__(self):
        return hash(SCHEDULED)

    def __repr__(self):
        return "Scheduled()"


class Completed:
    """Outcome of a played match. winner is None on a tie."""
    status = COMPLETED

    def __init__(self, team1_score: int, team2_score: int, winner: Optional[TeamRef] = None):
        self.team1_score = team1_score
        self.team2_score = team2_score
        self.winner = winner

    def __eq__(self, other):
        if not isinstance(other, Completed):
            return NotImplemented
        return (self.team1_score, self.team2_score, self.winner) == \
            (other.team1_score, other.team2_score, other.winner)

    def __hash__(self):
        return hash((self.team1_score, self.team2_score, self.winner))

    def __repr__(self):
        return f"Completed(team1_score={self.team1_score}, team2_score={self.team2_score}, winner={self.winner})"


SCHEDULED_OUTCOME = Scheduled()


class Match:
    def __init__(self, id, team1: TeamRef, team2: TeamRef, outcome=SCHEDULED_OUTCOME):
        self.id = id
        self.team1 = team1
        self.team2 = team2
        self.outcome = outcome

    @property
    def status(self) -> str:
        return self.outcome.status

    @property
    def is_completed(self) -> bool:
        return isinstance(self.outcome, Completed)

    @property
    def team1_score(self) -> Optional[int]:
        return self.outcome.team1_score if self.is_completed else None

    @property
    def team2_score(self) -> Optional[int]:
        return self.outcome.team2_score if self.is_completed else None

    @property
    def winner_id(self) -> Optional[str]:
        if self.is_completed and self.outcome.winner is not None:
            return self.outcome.winner.id
        return None

    def completed(self, team1_score: int, team2_score: int) -> 'Match':
        """Return a copy of this match completed with the given scores."""
        if team1_score > team2_score:
            winner = self.team1
        elif team2_score > team1_score:
            winner = self.team2
        else:
            winner = None
        return Match(self.id, self.team1, self.team2, Completed(team1_score, team2_score, winner))

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'team1': self.team1.to_dict(),
            'team2': self.team2.to_dict(),
            'status': self.status,
        }
        if self.is_completed:
            data['team1_score'] = self.team1_score
            data['team2_score'] = self.team2_score
            if self.winner_id is not None:
                data['winner_id'] = self.winner_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Match':
        match = cls(data['id'], TeamRef.from_dict(data['team1']), TeamRef.from_dict(data['team2']))
        status = data.get('status', SCHEDULED)
        if status == SCHEDULED:
            return match
        if status != COMPLETED:
            raise ValueError(f"Unknown match status: {status}")
        score1 = data.get('team1_score')
        score2 = data.get('team2_score')
        if not all(isinstance(s, int) and not isinstance(s, bool) for s in (score1, score2)):
            raise ValueError(f"Completed match {data['id']} is missing scores")
        return match.completed(score1, score2)

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return (self.id, self.team1, self.team2, self.outcome) == \
            (other.id, other.team1, other.team2, other.outcome)

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"Match(id={self.id}, team1={self.team1.name}, team2={self.team2.name}, status={self.status})"


class Schedule:
    """
    All matches of one round of one tournament.

    Matches are held in a dict keyed by match id with a separate list that
    keeps generation order, so replacing a match is a single keyed update.
    """

    def __init__(self, id, tournament_id, round, matches=None):
        self.id = id
        self.tournament_id = tournament_id
        self.round = round
        self._matches: Dict[str, Match] = {}
        self._order: List[str] = []
        for match in matches or []:
            if match.id in self._matches:
                raise ValueError(f"Duplicate match id {match.id} in schedule {id}")
            self._matches[match.id] = match
            self._order.append(match.id)

    @property
    def matches(self) -> List[Match]:
        return [self._matches[match_id] for match_id in self._order]

    def get_match(self, match_id) -> Optional[Match]:
        return self._matches.get(match_id)

    def __contains__(self, match_id):
        return match_id in self._matches

    def __len__(self):
        return len(self._order)

    def with_match(self, match: Match) -> 'Schedule':
        """Return a new schedule with match upserted by id, keeping order."""
        updated = Schedule(self.id, self.tournament_id, self.round)
        updated._matches = dict(self._matches)
        updated._order = list(self._order)
        if match.id not in updated._matches:
            updated._order.append(match.id)
        updated._matches[match.id] = match
        return updated

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'tournament_id': self.tournament_id,
            'round': self.round,
            'matches': [match.to_dict() for match in self.matches],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Schedule':
        return cls(
            id=data['id'],
            tournament_id=data['tournament_id'],
            round=data['round'],
            matches=[Match.from_dict(m) for m in data.get('matches') or []],
        )

    def __eq__(self, other):
        if not isinstance(other, Schedule):
            return NotImplemented
        return (self.id, self.tournament_id, self.round, self.matches) == \
            (other.id, other.tournament_id, other.round, other.matches)

    def __repr__(self):
        return f"Schedule(id={self.id}, round={self.round}, matches={len(self)})"
