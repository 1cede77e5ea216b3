"""
Shared pytest fixtures for tournament tracker tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src and tests directories to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from engine.models import Group, Team, Tournament
from tournament_factory import group_matches, make_tournament, roster

SAMPLE_SNAPSHOT = os.path.join(os.path.dirname(__file__), '..', 'data', 'tournament.yaml')


@pytest.fixture
def tournament():
    """Six groups of four and the full knockout bracket, nothing played."""
    return make_tournament()


@pytest.fixture
def single_group():
    """One four-team group (A1..A4) with its six matches unplayed."""
    codes = roster('A')
    return Tournament(
        teams=[Team(code) for code in codes],
        groups=[Group('A', teams=codes)],
        matches=group_matches('A', codes),
    )


@pytest.fixture
def sample_snapshot_path():
    return os.path.abspath(SAMPLE_SNAPSHOT)


@pytest.fixture
def snapshot_file(tmp_path, sample_snapshot_path):
    """A writable copy of the sample snapshot."""
    target = tmp_path / "tournament.yaml"
    with open(sample_snapshot_path, 'r', encoding='utf-8') as f:
        target.write_text(f.read(), encoding='utf-8')
    return str(target)


@pytest.fixture
def client():
    """Create a test client for the JSON API."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch, snapshot_file):
    """Point the app at a temporary data directory holding the sample snapshot."""
    import app as app_module
    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TOURNAMENT_FILE', snapshot_file)
    return tmp_path
