"""
Flask JSON API for Tournament Tracker.

Every request reads the snapshot from disk and recomputes tables and team
slots before answering, so the responses always reflect the recorded results.
"""
import os
import logging
from datetime import datetime
from filelock import FileLock
from flask import Flask, jsonify, request

from database import SnapshotError, load_tournament, save_tournament, set_result
from engine.classifier import criterion_from_query, select
from engine.errors import UnknownReferenceError
from engine.orchestrator import recompute
from engine.resolver import SIDES

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))
TOURNAMENT_FILE = os.path.join(DATA_DIR, 'tournament.yaml')


def _results_lock():
    """Lock serializing read-modify-write cycles on the snapshot."""
    return FileLock(os.path.join(os.path.dirname(TOURNAMENT_FILE), '.results.lock'), timeout=10)


def _load():
    tournament = load_tournament(TOURNAMENT_FILE)
    report = recompute(tournament)
    return tournament, report


def serialize_match(match):
    return {
        'id': match.id,
        'category': match.category,
        'venue': match.venue,
        'kickoff': match.kickoff.isoformat() if match.kickoff else None,
        'references': {SIDES[i]: ref for i, ref in enumerate(match.team_references)},
        'teams': {SIDES[i]: team for i, team in enumerate(match.teams)},
        'periods': [[p.home, p.away] for p in match.scoreboard.periods],
        'played': match.played,
        'score': ([match.scoreboard.final_score.home, match.scoreboard.final_score.away]
                  if match.played else None),
        'winner': match.winner(),
    }


def serialize_groups(tournament):
    groups = {}
    for group in tournament.groups.values():
        groups[group.id] = {
            'name': group.name,
            'complete': tournament.is_group_complete(group.id),
            'table': [line.to_dict() for line in group.table_lines],
        }
    return {
        'groups': groups,
        'third_placed': [line.to_dict() for line in tournament.third_placed.table_lines],
    }


@app.errorhandler(FileNotFoundError)
def handle_missing_snapshot(e):
    app.logger.error(f'Snapshot missing: {e}')
    return jsonify({'error': str(e)}), 404


@app.errorhandler(SnapshotError)
def handle_invalid_snapshot(e):
    app.logger.error(f'Snapshot invalid: {e}')
    return jsonify({'error': str(e)}), 500


@app.route('/api/groups')
def api_groups():
    """Ranked table of every group plus the third-place pool."""
    tournament, report = _load()
    data = serialize_groups(tournament)
    data['report'] = report.to_dict()
    return jsonify(data)


@app.route('/api/matches')
def api_matches():
    """All matches, optionally filtered by one criterion from the query string."""
    tournament, _ = _load()
    try:
        criterion = criterion_from_query(request.args, tournament.rules.group_category_prefix)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    matches = tournament.match_list()
    if criterion is not None:
        matches = select(matches, criterion)
    return jsonify({'matches': [serialize_match(m) for m in matches]})


@app.route('/api/matches/<match_id>')
def api_match(match_id):
    tournament, _ = _load()
    match = tournament.matches.get(match_id)
    if match is None:
        return jsonify({'error': f'Unknown match {match_id}'}), 404
    return jsonify(serialize_match(match))


@app.route('/api/results/<match_id>', methods=['POST'])
def api_save_result(match_id):
    """Record (or clear, with an empty list) the periods of a match."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Expected a JSON object with "periods"'}), 400
    periods = data.get('periods', [])

    with _results_lock():
        tournament = load_tournament(TOURNAMENT_FILE)
        try:
            match = set_result(tournament, match_id, periods)
        except UnknownReferenceError as e:
            return jsonify({'error': str(e)}), 404
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        report = recompute(tournament)
        save_tournament(tournament, TOURNAMENT_FILE)

    app.logger.info(f'Result saved for {match_id} at {datetime.now().isoformat(timespec="seconds")}: {periods}')
    return jsonify({
        'success': True,
        'match': serialize_match(match),
        'report': report.to_dict(),
    })


@app.route('/api/recompute', methods=['POST'])
def api_recompute():
    """Recompute everything and report resolution errors."""
    tournament, report = _load()
    return jsonify({
        'report': report.to_dict(),
        'knockout': [serialize_match(m) for m in tournament.knockout_matches()],
    })


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True)
