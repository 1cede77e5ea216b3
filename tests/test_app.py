"""
Tests for the Flask JSON API.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from database import load_tournament


def post_result(client, match_id, periods):
    return client.post(f'/api/results/{match_id}', json={'periods': periods})


class TestGroupsEndpoint:
    """Tests for GET /api/groups."""

    def test_tables(self, client, temp_data_dir):
        response = client.get('/api/groups')
        assert response.status_code == 200
        data = response.get_json()
        assert sorted(data['groups']) == ['A', 'B', 'C', 'D', 'E', 'F']
        group_a = data['groups']['A']
        assert group_a['complete'] is False
        assert group_a['table'][0]['team'] == 'FRA'
        assert group_a['table'][0]['points'] == 3
        assert len(data['third_placed']) == 6
        assert data['report']['errors'] == []

    def test_missing_snapshot(self, client, temp_data_dir, monkeypatch):
        import app as app_module
        monkeypatch.setattr(app_module, 'TOURNAMENT_FILE', str(temp_data_dir / 'missing.yaml'))
        response = client.get('/api/groups')
        assert response.status_code == 404
        assert 'error' in response.get_json()

    @pytest.mark.parametrize('text', ["teams: [\n", "teams:\n  - name: France\n", "- FRA\n"])
    def test_malformed_snapshot(self, client, temp_data_dir, snapshot_file, text):
        with open(snapshot_file, 'w', encoding='utf-8') as f:
            f.write(text)
        response = client.get('/api/groups')
        assert response.status_code == 500
        assert response.is_json
        assert snapshot_file in response.get_json()['error']


class TestMatchesEndpoint:
    """Tests for GET /api/matches."""

    def test_all_matches(self, client, temp_data_dir):
        data = client.get('/api/matches').get_json()
        assert len(data['matches']) == 51

    def test_filter_by_group(self, client, temp_data_dir):
        data = client.get('/api/matches?group=A').get_json()
        assert [m['id'] for m in data['matches']] == ['M01', 'M02', 'M13', 'M14', 'M25', 'M26']

    def test_filter_by_date(self, client, temp_data_dir):
        data = client.get('/api/matches?date=2016-06-10').get_json()
        assert [m['id'] for m in data['matches']] == ['M01', 'M02', 'M03', 'M04']

    def test_filter_by_played(self, client, temp_data_dir):
        data = client.get('/api/matches?played=true').get_json()
        assert len(data['matches']) == 12
        assert all(m['played'] for m in data['matches'])

    def test_filter_by_team(self, client, temp_data_dir):
        data = client.get('/api/matches?team=FRA').get_json()
        assert [m['id'] for m in data['matches']] == ['M01', 'M14', 'M25']

    def test_filter_by_category(self, client, temp_data_dir):
        data = client.get('/api/matches?category=KO:2').get_json()
        assert [m['id'] for m in data['matches']] == ['M49', 'M50']

    def test_invalid_filter(self, client, temp_data_dir):
        response = client.get('/api/matches?date=10-06-2016')
        assert response.status_code == 400

    def test_single_match(self, client, temp_data_dir):
        data = client.get('/api/matches/M01').get_json()
        assert data['teams'] == {'home': 'FRA', 'away': 'ROU'}
        assert data['score'] == [2, 1]
        assert data['winner'] == 'FRA'
        assert data['kickoff'] == '2016-06-10T15:00:00'

    def test_unresolved_knockout_match(self, client, temp_data_dir):
        data = client.get('/api/matches/M39').get_json()
        assert data['references'] == {'home': 'B:1', 'away': 'T:A/C/D'}
        assert data['teams'] == {'home': None, 'away': None}
        assert data['score'] is None

    def test_unknown_match(self, client, temp_data_dir):
        assert client.get('/api/matches/M99').status_code == 404


class TestResultsEndpoint:
    """Tests for POST /api/results/<match_id>."""

    def test_save_result(self, client, temp_data_dir, snapshot_file):
        response = post_result(client, 'M13', [[1, 1]])
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['match']['score'] == [1, 1]

        reloaded = load_tournament(snapshot_file)
        assert reloaded.matches['M13'].played

    def test_clear_result(self, client, temp_data_dir, snapshot_file):
        response = post_result(client, 'M01', [])
        assert response.status_code == 200
        assert not load_tournament(snapshot_file).matches['M01'].played

    def test_malformed_snapshot(self, client, temp_data_dir, snapshot_file):
        with open(snapshot_file, 'w', encoding='utf-8') as f:
            f.write("matches:\n  - category: G:A\n")
        response = post_result(client, 'M01', [[1, 0]])
        assert response.status_code == 500
        assert 'error' in response.get_json()

    def test_unknown_match(self, client, temp_data_dir):
        assert post_result(client, 'M99', [[1, 0]]).status_code == 404

    @pytest.mark.parametrize('periods', [[[1, -1]], [['a', 0]], 'x', [[1, 0, 0]]])
    def test_invalid_periods(self, client, temp_data_dir, snapshot_file, periods):
        assert post_result(client, 'M13', periods).status_code == 400
        assert not load_tournament(snapshot_file).matches['M13'].played

    def test_completed_group_fills_knockout_slots(self, client, temp_data_dir):
        post_result(client, 'M13', [[1, 1]])
        post_result(client, 'M14', [[2, 0]])
        post_result(client, 'M25', [[0, 0]])
        data = post_result(client, 'M26', [[0, 1]]).get_json()
        assert data['report']['errors'] == []

        groups = client.get('/api/groups').get_json()
        assert [line['team'] for line in groups['groups']['A']['table']] == ['FRA', 'SUI', 'ALB', 'ROU']
        assert groups['groups']['A']['complete'] is True

        assert client.get('/api/matches/M43').get_json()['teams']['home'] == 'FRA'
        assert client.get('/api/matches/M37').get_json()['teams']['home'] == 'SUI'


class TestRecomputeEndpoint:
    """Tests for POST /api/recompute."""

    def test_recompute(self, client, temp_data_dir):
        response = client.post('/api/recompute')
        assert response.status_code == 200
        data = response.get_json()
        assert data['report']['phases'] == ['assign_group_teams', 'build_tables', 'resolve_knockout']
        assert len(data['knockout']) == 15
