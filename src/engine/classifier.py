"""
Match selection by a single criterion.

A criterion is one of the small value classes below. Passing anything else
to select() is a programming error and raises TypeError.
"""
from dataclasses import dataclass
from datetime import date as Date
from typing import List, Optional


DEFAULT_GROUP_PREFIX = 'G:'


@dataclass(frozen=True)
class ByVenue:
    venue: str


@dataclass(frozen=True)
class ByTeam:
    team: str
    prefix: str = DEFAULT_GROUP_PREFIX


@dataclass(frozen=True)
class ByGroup:
    group_id: str
    prefix: str = DEFAULT_GROUP_PREFIX


@dataclass(frozen=True)
class ByDate:
    date: Date


@dataclass(frozen=True)
class ByCategory:
    text: str


@dataclass(frozen=True)
class ByPlayed:
    played: bool = True


def _involves_team(match, team: str, prefix: str = DEFAULT_GROUP_PREFIX) -> bool:
    if team in match.teams:
        return True
    # Group fixtures name their teams directly, assigned or not.
    return match.category.startswith(prefix) and team in match.team_references


def _matches(match, criterion) -> bool:
    if isinstance(criterion, ByVenue):
        return match.venue == criterion.venue
    if isinstance(criterion, ByTeam):
        return _involves_team(match, criterion.team, criterion.prefix)
    if isinstance(criterion, ByGroup):
        return match.category == criterion.prefix + criterion.group_id
    if isinstance(criterion, ByDate):
        return match.kickoff is not None and match.kickoff.date() == criterion.date
    if isinstance(criterion, ByCategory):
        return criterion.text in match.category
    if isinstance(criterion, ByPlayed):
        return match.played == criterion.played
    raise TypeError(f"Unsupported match criterion: {criterion!r}")


def select(matches, criterion) -> List:
    """Return the matches satisfying the criterion, in their original order."""
    return [match for match in matches if _matches(match, criterion)]


def criterion_from_query(args, prefix: str = DEFAULT_GROUP_PREFIX) -> Optional[object]:
    """
    Build a criterion from query-string style arguments.

    The first of venue, team, group, date, category, played that is present
    wins. Returns None when none is given.
    """
    if args.get('venue'):
        return ByVenue(args['venue'])
    if args.get('team'):
        return ByTeam(args['team'], prefix)
    if args.get('group'):
        return ByGroup(args['group'], prefix)
    if args.get('date'):
        try:
            return ByDate(Date.fromisoformat(args['date']))
        except ValueError:
            raise ValueError(f"Invalid date {args['date']!r}, expected YYYY-MM-DD") from None
    if args.get('category'):
        return ByCategory(args['category'])
    if args.get('played') is not None and args.get('played') != '':
        value = str(args['played']).lower()
        if value not in ('true', 'false', '1', '0', 'yes', 'no'):
            raise ValueError(f"Invalid played flag {args['played']!r}")
        return ByPlayed(value in ('true', '1', 'yes'))
    return None
