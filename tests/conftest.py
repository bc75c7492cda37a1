"""
Shared pytest fixtures for tournament bracket tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
from itertools import count

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.fixtures import generate
from bracket.models import APPROVED, PENDING, Team, Tournament
from bracket.storage import DocumentStore

ADMIN_KEY = 'test-admin-key'


def sequential_ids(prefix='m'):
    """Deterministic match id factory for tests."""
    counter = count(1)
    return lambda: f"{prefix}{next(counter)}"


@pytest.fixture
def sample_teams():
    """Three approved teams, in registration order."""
    return [
        Team(id="A", team_name="Alpha", tournament_id="t1", status=APPROVED),
        Team(id="B", team_name="Beta", tournament_id="t1", status=APPROVED),
        Team(id="C", team_name="Charlie", tournament_id="t1", status=APPROVED),
    ]


@pytest.fixture
def schedule(sample_teams):
    """Round 1 schedule for the sample teams with match ids m1, m2, m3."""
    return generate("t1", 1, sample_teams, id_factory=sequential_ids())


@pytest.fixture
def tournament():
    return Tournament(id="t1", name="Spring Cup", game="Valorant", date="2026-03-01T18:00",
                      entry_fee=10, currency="USD", max_team_limit=4)


@pytest.fixture
def pending_team():
    return Team(id="P", team_name="Pending Squad", tournament_id="t1", status=PENDING,
                team_leader_id="leader1", payment_proof_url="https://img.example/proof.png")


@pytest.fixture
def store(tmp_path):
    return DocumentStore(str(tmp_path / "data"), lock_timeout=5)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app at a temporary data directory and set the admin key."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setenv('ADMIN_API_KEY', ADMIN_KEY)
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def admin_headers():
    return {'Authorization': f'Bearer {ADMIN_KEY}'}
