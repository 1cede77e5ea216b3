"""
Loading and saving the tournament snapshot (tournament.yaml).

Only source data is written: rules, venues, teams, groups and matches with
their references and recorded periods. Tables and resolved team slots are
derived and rebuilt by engine.orchestrator.recompute() after loading.
"""
import logging
import os
from datetime import datetime

import yaml
from filelock import FileLock

from engine.errors import UnknownReferenceError
from engine.models import Group, Match, Scoreboard, Team, Tournament, Venue
from engine.rules import Rules

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 10


class SnapshotError(ValueError):
    """The snapshot file cannot be parsed or describes an invalid tournament."""


def _lock_for(path):
    return FileLock(f"{path}.lock", timeout=LOCK_TIMEOUT)


def _parse_kickoff(value, match_id):
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Match {match_id}: invalid kickoff {value!r}") from None


def parse_periods(periods, match_id=None):
    """Validate a list of [home, away] goal pairs and return it as tuples."""
    label = f"Match {match_id}: " if match_id else ""
    if periods is None:
        return []
    if not isinstance(periods, list):
        raise ValueError(f"{label}periods must be a list of [home, away] pairs")
    parsed = []
    for period in periods:
        if not isinstance(period, (list, tuple)) or len(period) != 2:
            raise ValueError(f"{label}invalid period {period!r}")
        home, away = period
        if isinstance(home, bool) or isinstance(away, bool) \
                or not isinstance(home, int) or not isinstance(away, int):
            raise ValueError(f"{label}period scores must be integers: {period!r}")
        if home < 0 or away < 0:
            raise ValueError(f"{label}period scores cannot be negative: {period!r}")
        parsed.append((home, away))
    return parsed


def _entries(data, section, key):
    """Return the entries of a snapshot section, each a mapping holding ``key``."""
    entries = data.get(section) or []
    if not isinstance(entries, list):
        raise ValueError(f"Section '{section}' must be a list")
    for entry in entries:
        if not isinstance(entry, dict) or key not in entry:
            raise ValueError(f"Entry in '{section}' without {key}: {entry!r}")
    return entries


def tournament_from_dict(data):
    """Build a Tournament from the parsed YAML structure."""
    data = data if data is not None else {}
    if not isinstance(data, dict):
        raise ValueError("Tournament snapshot must be a mapping of sections")
    rules = data.get('rules')
    if rules is not None and not isinstance(rules, dict):
        raise ValueError("Section 'rules' must be a mapping")
    rules = Rules.from_dict(rules)

    venues = [Venue(str(v['id']), v.get('name', v['id']), v.get('city'))
              for v in _entries(data, 'venues', 'id')]
    teams = [Team(str(t['code']), t.get('name')) for t in _entries(data, 'teams', 'code')]

    groups = []
    for entry in _entries(data, 'groups', 'id'):
        codes = entry.get('teams') or []
        if not isinstance(codes, list):
            raise ValueError(f"Group {entry['id']}: teams must be a list")
        groups.append(Group(str(entry['id']), entry.get('name'), [str(code) for code in codes]))

    matches = []
    for entry in _entries(data, 'matches', 'id'):
        match_id = str(entry.get('id', ''))
        if not match_id or 'category' not in entry:
            raise ValueError(f"Match entry needs id and category: {entry!r}")
        references = entry.get('teams') or []
        if not isinstance(references, list) or len(references) != 2:
            raise ValueError(f"Match {match_id}: expected two team references")
        matches.append(Match(
            match_id,
            str(entry['category']),
            [str(r) for r in references],
            venue=entry.get('venue'),
            kickoff=_parse_kickoff(entry.get('kickoff'), match_id),
            periods=parse_periods(entry.get('periods'), match_id),
        ))

    return Tournament(venues, teams, groups, matches, rules)


def tournament_to_dict(tournament):
    """Inverse of tournament_from_dict(); derived state is left out."""
    return {
        'rules': tournament.rules.to_dict(),
        'venues': [{'id': v.id, 'name': v.name, 'city': v.city}
                   for v in tournament.venues.values()],
        'teams': [{'code': t.code, 'name': t.name} for t in tournament.teams.values()],
        'groups': [{'id': g.id, 'name': g.name, 'teams': list(g.teams)}
                   for g in tournament.groups.values()],
        'matches': [{
            'id': m.id,
            'category': m.category,
            'venue': m.venue,
            'kickoff': m.kickoff.isoformat() if m.kickoff else None,
            'teams': list(m.team_references),
            'periods': [[p.home, p.away] for p in m.scoreboard.periods],
        } for m in tournament.matches.values()],
    }


def load_tournament(path):
    """
    Load the snapshot file.

    Raises FileNotFoundError if it is missing and SnapshotError if it is not
    valid YAML or does not describe a valid tournament.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Tournament file not found: {path}")
    with _lock_for(path):
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise SnapshotError(f"{path}: invalid YAML: {e}") from e
    try:
        tournament = tournament_from_dict(data)
    except ValueError as e:
        raise SnapshotError(f"{path}: {e}") from e
    logger.info(f"Loaded {tournament!r} from {path}")
    return tournament


def save_tournament(tournament, path):
    """Write the snapshot file."""
    with _lock_for(path):
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(tournament_to_dict(tournament), f,
                           default_flow_style=None, sort_keys=False, allow_unicode=True)


def set_result(tournament, match_id, periods):
    """
    Replace the recorded periods of a match. An empty list clears the result.

    The caller is expected to run recompute() afterwards.
    """
    match = tournament.matches.get(match_id)
    if match is None:
        raise UnknownReferenceError(match_id, "no match with this ID")
    match.scoreboard = Scoreboard(parse_periods(periods, match_id))
    return match
