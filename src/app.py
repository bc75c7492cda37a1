"""
Flask web API for Tournament Bracket.

Stores tournaments, team registrations and round fixtures as YAML documents
and exposes the fixture generator and score reconciler over JSON.
"""
import os
import hmac
from functools import wraps
from flask import Flask, request, jsonify
from bracket.errors import BracketError, DocumentNotFound, InvalidTournament
from bracket.fixtures import approved_teams, generate
from bracket.models import APPROVED, REJECTED, TEAM_STATUSES, Schedule, Team, Tournament, schedule_id
from bracket.registration import create_tournament, decide_registration, register_team, update_tournament
from bracket.results import apply_score, override_score
from bracket.standings import calculate_standings
from bracket.storage import DocumentStore

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
DATA_LOCK_TIMEOUT = float(os.environ.get('DATA_LOCK_TIMEOUT', '10'))

TOURNAMENTS = 'tournaments'
TEAMS = 'teams'
FIXTURES = 'fixtures'


def get_store() -> DocumentStore:
    return DocumentStore(DATA_DIR, lock_timeout=DATA_LOCK_TIMEOUT)


def admin_key_error():
    """Return an error response unless the request carries the ADMIN_API_KEY."""
    expected_key = os.environ.get('ADMIN_API_KEY')
    if not expected_key:
        return jsonify({'success': False, 'error': 'Server not configured for admin operations'}), 500

    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return jsonify({'success': False, 'error': 'Missing or invalid Authorization header'}), 401

    provided_key = auth_header[7:]  # Strip "Bearer "
    if not hmac.compare_digest(expected_key, provided_key):
        return jsonify({'success': False, 'error': 'Invalid API key'}), 401
    return None


def require_admin_key(f):
    """Require valid ADMIN_API_KEY in Authorization header."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        error = admin_key_error()
        if error is not None:
            return error
        return f(*args, **kwargs)
    return decorated_function


@app.errorhandler(BracketError)
def handle_bracket_error(e):
    return jsonify({'success': False, 'error': str(e)}), e.status_code


def load_tournament(store: DocumentStore, tournament_id: str) -> Tournament:
    data, _ = store.get(TOURNAMENTS, tournament_id)
    if data is None:
        raise DocumentNotFound(f"Tournament {tournament_id} not found")
    return Tournament.from_dict(data)


def load_teams(store: DocumentStore, tournament_id: str) -> list:
    """Load a tournament's teams in registration order."""
    teams = [Team.from_dict(d) for d in store.list(TEAMS) if d.get('tournament_id') == tournament_id]
    return sorted(teams, key=lambda t: (t.registered_at or '', t.id))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_round(value) -> int:
    """Round number from a URL path segment."""
    try:
        round_number = int(value)
    except (TypeError, ValueError):
        round_number = 0
    if round_number < 1:
        raise BracketError(f"Round must be a positive integer, got {value!r}")
    return round_number


def _round_from_body(value) -> int:
    """Round number from a JSON body. Floats, strings and booleans are rejected."""
    if not _is_int(value) or value < 1:
        raise BracketError(f"Round must be a positive integer, got {value!r}")
    return value


def _tournament_summary(tournament: Tournament, teams: list) -> dict:
    data = tournament.to_dict()
    approved = len(approved_teams(teams))
    data['approved_teams'] = approved
    data['registration_full'] = approved >= tournament.max_team_limit
    return data


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------

@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List all tournaments, soonest first."""
    store = get_store()
    tournaments = [Tournament.from_dict(d) for d in store.list(TOURNAMENTS)]
    tournaments.sort(key=lambda t: (t.date or '', t.name))
    return jsonify([_tournament_summary(t, load_teams(store, t.id)) for t in tournaments])


@app.route('/api/tournaments', methods=['POST'])
@require_admin_key
def api_create_tournament():
    """Create a new tournament."""
    data = request.get_json(silent=True) or {}
    tournament = create_tournament(data)
    store = get_store()
    store.put(TOURNAMENTS, tournament.id, tournament.to_dict(), expected_version=0)
    app.logger.info(f'Tournament "{tournament.name}" created ({tournament.id})')
    return jsonify({'success': True, 'tournament': tournament.to_dict()}), 201


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    store = get_store()
    tournament = load_tournament(store, tournament_id)
    return jsonify(_tournament_summary(tournament, load_teams(store, tournament_id)))


@app.route('/api/tournaments/<tournament_id>', methods=['PUT'])
@require_admin_key
def api_update_tournament(tournament_id):
    """Edit a tournament. Omitted fields keep their current value."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidTournament('Request body must be a JSON object.')
    store = get_store()
    with store.lock:
        load_tournament(store, tournament_id)
        teams = load_teams(store, tournament_id)
        new_data, _ = store.update(
            TOURNAMENTS, tournament_id,
            lambda d: update_tournament(Tournament.from_dict(d), data, teams).to_dict())
    app.logger.info(f'Tournament {tournament_id} updated')
    return jsonify({'success': True, 'tournament': new_data})


@app.route('/api/tournaments/<tournament_id>', methods=['DELETE'])
@require_admin_key
def api_delete_tournament(tournament_id):
    """Delete a tournament together with its registrations and fixtures."""
    store = get_store()
    with store.lock:
        load_tournament(store, tournament_id)
        for team in load_teams(store, tournament_id):
            store.delete(TEAMS, team.id)
        for fixture in store.list(FIXTURES):
            if fixture.get('tournament_id') == tournament_id:
                store.delete(FIXTURES, fixture['id'])
        store.delete(TOURNAMENTS, tournament_id)
    app.logger.info(f'Tournament {tournament_id} deleted')
    return jsonify({'success': True})


# ---------------------------------------------------------------------------
# Registrations
# ---------------------------------------------------------------------------

@app.route('/api/tournaments/<tournament_id>/teams', methods=['GET'])
def api_list_teams(tournament_id):
    """List registered teams, optionally filtered by ?status=."""
    status = request.args.get('status')
    if status and status not in TEAM_STATUSES:
        return jsonify({'success': False, 'error': f'Unknown status: {status}'}), 400
    store = get_store()
    load_tournament(store, tournament_id)
    teams = load_teams(store, tournament_id)
    if status:
        teams = [t for t in teams if t.status == status]
    return jsonify([t.to_dict() for t in teams])


@app.route('/api/tournaments/<tournament_id>/teams', methods=['POST'])
def api_register_team(tournament_id):
    """Submit a team registration. New teams wait for admin approval."""
    data = request.get_json(silent=True) or {}
    store = get_store()
    with store.lock:
        tournament = load_tournament(store, tournament_id)
        team = register_team(
            tournament,
            load_teams(store, tournament_id),
            team_name=data.get('team_name', ''),
            team_leader_id=data.get('team_leader_id', ''),
            payment_proof_url=data.get('payment_proof_url', ''),
            player_usernames=data.get('player_usernames'),
        )
        store.put(TEAMS, team.id, team.to_dict(), expected_version=0)
    app.logger.info(f'Team "{team.team_name}" registered for {tournament_id}')
    return jsonify({'success': True, 'message': 'Your team registration is pending approval.',
                    'team': team.to_dict()}), 201


@app.route('/api/teams', methods=['GET'])
def api_all_teams():
    """
    Registrations across all tournaments, oldest first.

    ?team_leader_id= lists one leader's own registrations. Without it the
    full list is the admin approval queue (use ?status=pending) and needs the
    admin key.
    """
    status = request.args.get('status')
    leader = request.args.get('team_leader_id')
    if status and status not in TEAM_STATUSES:
        return jsonify({'success': False, 'error': f'Unknown status: {status}'}), 400
    if not leader:
        error = admin_key_error()
        if error is not None:
            return error

    store = get_store()
    names = {d['id']: d.get('name') for d in store.list(TOURNAMENTS)}
    teams = [Team.from_dict(d) for d in store.list(TEAMS)]
    if status:
        teams = [t for t in teams if t.status == status]
    if leader:
        teams = [t for t in teams if t.team_leader_id == leader]
    teams.sort(key=lambda t: (t.registered_at or '', t.id))

    result = []
    for team in teams:
        entry = team.to_dict()
        entry['tournament_name'] = names.get(team.tournament_id)
        result.append(entry)
    return jsonify(result)


def _decide(team_id, status, reason=None):
    store = get_store()
    new_data, _ = store.update(
        TEAMS, team_id, lambda d: decide_registration(Team.from_dict(d), status, reason).to_dict())
    app.logger.info(f'Team {team_id} {status}')
    return jsonify({'success': True, 'team': new_data})


@app.route('/api/teams/<team_id>/approve', methods=['POST'])
@require_admin_key
def api_approve_team(team_id):
    return _decide(team_id, APPROVED)


@app.route('/api/teams/<team_id>/reject', methods=['POST'])
@require_admin_key
def api_reject_team(team_id):
    data = request.get_json(silent=True) or {}
    return _decide(team_id, REJECTED, data.get('reason'))


# ---------------------------------------------------------------------------
# Fixtures and results
# ---------------------------------------------------------------------------

@app.route('/api/tournaments/<tournament_id>/fixtures', methods=['POST'])
@require_admin_key
def api_generate_fixtures(tournament_id):
    """
    Generate the round-robin fixtures for a round from the approved teams.

    Regenerating a round that already has fixtures discards its results, so
    the request must carry "confirm": true in that case.
    """
    data = request.get_json(silent=True) or {}
    round_number = _round_from_body(data.get('round', 1))
    confirm = data.get('confirm') is True

    store = get_store()
    with store.lock:
        load_tournament(store, tournament_id)
        teams = approved_teams(load_teams(store, tournament_id))
        schedule = generate(tournament_id, round_number, teams)

        existing, version = store.get(FIXTURES, schedule.id)
        if existing is not None and not confirm:
            completed = sum(1 for m in existing.get('matches', []) if m.get('status') == 'completed')
            return jsonify({
                'success': False,
                'error': f'Fixtures for round {round_number} already exist. Regenerating discards '
                         f'all {len(existing.get("matches", []))} matches ({completed} completed). '
                         f'Send "confirm": true to replace them.',
            }), 409
        if existing is not None:
            app.logger.warning(f'Replacing fixtures {schedule.id} ({len(existing.get("matches", []))} matches)')
        new_version = store.put(FIXTURES, schedule.id, schedule.to_dict(), expected_version=version)

    app.logger.info(f'Fixtures generated for {tournament_id} round {round_number}: {len(schedule)} matches')
    return jsonify({'success': True, 'fixture': schedule.to_dict(), 'version': new_version}), 201


def _load_schedule(store, tournament_id, round_number):
    data, version = store.get(FIXTURES, schedule_id(tournament_id, round_number))
    if data is None:
        raise DocumentNotFound(f"Fixtures for round {round_number} have not been generated yet.")
    return Schedule.from_dict(data), version


@app.route('/api/tournaments/<tournament_id>/fixtures/<round_number>', methods=['GET'])
def api_get_fixtures(tournament_id, round_number):
    store = get_store()
    schedule, version = _load_schedule(store, tournament_id, _parse_round(round_number))
    return jsonify({'fixture': schedule.to_dict(), 'version': version})


@app.route('/api/tournaments/<tournament_id>/fixtures/<round_number>/standings', methods=['GET'])
def api_standings(tournament_id, round_number):
    store = get_store()
    schedule, _ = _load_schedule(store, tournament_id, _parse_round(round_number))
    return jsonify({'round': schedule.round, 'standings': calculate_standings(schedule)})


def _save_result(tournament_id, round_number, match_id, reconcile):
    """Apply reconcile to the stored schedule as a single locked rewrite."""
    data = request.get_json(silent=True) or {}
    score1 = data.get('team1_score')
    score2 = data.get('team2_score')
    expected_version = data.get('version')
    if expected_version is not None and not _is_int(expected_version):
        raise BracketError(f"Version must be an integer, got {expected_version!r}")

    def mutate(doc):
        schedule = Schedule.from_dict(doc)
        return reconcile(schedule, match_id, score1, score2, data).to_dict()

    store = get_store()
    sid = schedule_id(tournament_id, _parse_round(round_number))
    new_doc, version = store.update(FIXTURES, sid, mutate, expected_version=expected_version)
    match = next(m for m in new_doc['matches'] if m['id'] == match_id)
    return jsonify({'success': True, 'match': match, 'version': version})


@app.route('/api/tournaments/<tournament_id>/fixtures/<round_number>/matches/<match_id>/score',
           methods=['POST'])
@require_admin_key
def api_report_score(tournament_id, round_number, match_id):
    """Record the score of a scheduled match. Scores can only be reported once."""
    return _save_result(tournament_id, round_number, match_id,
                        lambda schedule, mid, s1, s2, data: apply_score(schedule, mid, s1, s2))


@app.route('/api/tournaments/<tournament_id>/fixtures/<round_number>/matches/<match_id>/override',
           methods=['POST'])
@require_admin_key
def api_override_score(tournament_id, round_number, match_id):
    """Correct the score of a match. Requires "confirm": true."""
    return _save_result(tournament_id, round_number, match_id,
                        lambda schedule, mid, s1, s2, data: override_score(
                            schedule, mid, s1, s2, confirm=data.get('confirm') is True))


if __name__ == '__main__':
    app.run(debug=True, port=5000)
