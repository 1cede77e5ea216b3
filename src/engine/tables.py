"""
Group tables: folding results into table lines and ranking them.

Ranking order, highest first:
1. points
2. goal difference
3. goals scored
4. a mini-table of the matches played between the teams still level after
   1-3 (points, goal difference, goals scored), only when they all belong
   to the same group and never in cross-group mode
5. group ID, then roster position
"""
from typing import Dict, Iterable, List, Optional, Tuple

from .classifier import ByGroup, select
from .errors import UnknownReferenceError
from .models import HOME, AWAY, TableLine
from .rules import Rules


def _fallback_key(line: TableLine) -> Tuple[str, int]:
    return (line.group_id or '', line.seed)


def _overall_key(line: TableLine) -> Tuple[int, int, int]:
    return (line.points, line.goal_difference, line.goals_for)


def _head_to_head_lines(tied: List[TableLine], matches: Iterable) -> Dict[str, TableLine]:
    """Table lines built only from the played meetings among the tied teams."""
    mini = {line.team: TableLine(line.team, line.group_id, line.seed,
                                 line.points_for_win, line.points_for_draw)
            for line in tied}
    for match in matches:
        if not match.played:
            continue
        home, away = match.team_references
        if home not in mini or away not in mini:
            continue
        final = match.scoreboard.final_score
        mini[home].add_result(final.home, final.away)
        mini[away].add_result(final.away, final.home)
    return mini


def _rank_tied(tied: List[TableLine], matches: List) -> List[TableLine]:
    mini = _head_to_head_lines(tied, matches)
    return sorted(tied, key=lambda line: (
        tuple(-value for value in _overall_key(mini[line.team])),
        _fallback_key(line),
    ))


def rank_lines(lines: List[TableLine], matches: Optional[Iterable] = None,
               cross_group: bool = False) -> List[TableLine]:
    """
    Return the lines sorted by rank, best first.

    The result is a total order that does not depend on the order of
    ``lines``: every comparison ends on the (group, seed) key. ``matches``
    supplies the direct meetings for the head-to-head step; it is ignored
    in cross-group mode. The input list is not modified.
    """
    played_matches = [] if cross_group or matches is None else [m for m in matches if m.played]
    ordered = sorted(lines, key=lambda line: (
        tuple(-value for value in _overall_key(line)),
        _fallback_key(line),
    ))

    ranked: List[TableLine] = []
    i = 0
    while i < len(ordered):
        tied = [ordered[i]]
        i += 1
        while i < len(ordered) and _overall_key(ordered[i]) == _overall_key(tied[0]):
            tied.append(ordered[i])
            i += 1
        same_group = len({line.group_id for line in tied}) == 1
        if len(tied) > 1 and same_group and not cross_group:
            ranked.extend(_rank_tied(tied, played_matches))
        else:
            ranked.extend(tied)
    return ranked


def build_table(group, matches: Iterable, rules: Optional[Rules] = None) -> List[TableLine]:
    """
    Build the ranked table of one group from scratch.

    Every played match of the group is folded into both teams' lines; the
    teams are taken from the match's fixed references.

    Raises UnknownReferenceError if a group match names a team outside the
    group's roster.
    """
    rules = rules if rules else Rules()
    lines: Dict[str, TableLine] = {}
    for seed, team in enumerate(group.teams):
        lines[team] = TableLine(team, group.id, seed,
                                rules.points_for_win, rules.points_for_draw)

    group_matches = select(matches, ByGroup(group.id, rules.group_category_prefix))
    for match in group_matches:
        for team in match.team_references:
            if team not in lines:
                raise UnknownReferenceError(
                    team, f"match {match.id} is not between teams of group {group.id}")
        if not match.played:
            continue
        final = match.scoreboard.final_score
        lines[match.team_references[HOME]].add_result(final.home, final.away)
        lines[match.team_references[AWAY]].add_result(final.away, final.home)

    return rank_lines(list(lines.values()), group_matches)
