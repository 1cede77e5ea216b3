"""
Resolution of symbolic team references into team codes.

Reference shapes:
- ``"M37"``: a bare match ID, the winner of that match
- ``"B:1"``: the team ranked 1st in group B, once group B is complete
- ``"T:A/C/D"``: the best third-placed team of groups A, C and D that is not
  already playing in the round of sixteen, once those groups are complete

A reference that cannot be decided yet resolves to None. A reference of any
other shape raises MalformedReferenceError; one naming a group, match or
position that does not exist raises UnknownReferenceError.
"""
import logging
from typing import Dict, List, NamedTuple, Optional

from .classifier import ByCategory, select
from .errors import MalformedReferenceError, ResolutionError, UnknownReferenceError
from .models import TableLine
from .tables import build_table, rank_lines
from .thirds import third_placed_lines

logger = logging.getLogger(__name__)

SIDES = ('home', 'away')


class SlotError(NamedTuple):
    match_id: str
    side: int
    reference: str
    error: ResolutionError

    def to_dict(self):
        return {
            'match': self.match_id,
            'side': SIDES[self.side],
            'reference': self.reference,
            'kind': type(self.error).__name__,
            'error': str(self.error),
        }


class ReferenceResolver:
    """
    Resolves references against a tournament snapshot.

    Without ``record_assignments`` the resolver only reads the snapshot: the
    team slots of knockout matches are taken as they currently are. With it,
    the resolver works through a pass of its own: knockout slots are read from
    ``assignments``, filled on demand by resolve_match(), so a winner reference
    pulls the referenced fixture through resolution first.

    Group tables are ranked from the current results the first time a
    reference needs them and kept for the life of the resolver, so a
    resolver never reads tables written by an earlier recompute.
    """

    def __init__(self, tournament, record_assignments: bool = False):
        self.tournament = tournament
        self.rules = tournament.rules
        self.record_assignments = record_assignments
        self.assignments: Dict[str, List[Optional[str]]] = {}
        self.errors: List[SlotError] = []
        self._in_progress = set()
        self._tables: Dict[str, List[TableLine]] = {}

    def resolve(self, reference: str, fixture=None) -> Optional[str]:
        """
        Return the team code a reference stands for, or None if it cannot be
        decided yet.

        ``fixture`` is the knockout match the reference belongs to, if any. A
        third-place reference of a fixture waits for the third-place slots of
        earlier round-of-sixteen fixtures drawing from the same groups.
        """
        if not isinstance(reference, str) or not reference:
            raise MalformedReferenceError(reference, "expected a non-empty string")
        if ':' not in reference:
            return self._resolve_winner(reference)

        parts = reference.split(':')
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise MalformedReferenceError(reference, "expected <group>:<position> or <third>:<groups>")
        group_id, target = parts
        if group_id == self.rules.third_place_group_id:
            return self._resolve_third(reference, target, fixture)
        return self._resolve_position(reference, group_id, target)

    def resolve_match(self, match) -> List[Optional[str]]:
        """Resolve both team slots of a knockout match into ``assignments``."""
        if match.id in self.assignments and match.id not in self._in_progress:
            return self.assignments[match.id]
        self._in_progress.add(match.id)
        slots = self.assignments[match.id] = [None, None]
        try:
            for side, reference in enumerate(match.team_references):
                try:
                    slots[side] = self.resolve(reference, fixture=match)
                except ResolutionError as e:
                    self.errors.append(SlotError(match.id, side, reference, e))
                    logger.warning(f"Match {match.id} ({SIDES[side]}): {e}")
                else:
                    if slots[side] is not None:
                        logger.debug(f"Match {match.id} ({SIDES[side]}): {reference} -> {slots[side]}")
        finally:
            self._in_progress.discard(match.id)
        return slots

    def _slots(self, match) -> List[Optional[str]]:
        if match.is_group_match(self.rules.group_category_prefix):
            return list(match.team_references)
        if not self.record_assignments:
            return match.teams
        if match.id in self._in_progress:
            raise UnknownReferenceError(match.id, "reference cycle between knockout matches")
        return self.resolve_match(match)

    def _resolve_winner(self, reference: str) -> Optional[str]:
        match = self.tournament.matches.get(reference)
        if match is None:
            raise UnknownReferenceError(reference, "no match with this ID")
        home, away = self._slots(match)
        if home is None or away is None or not match.played:
            return None
        final = match.scoreboard.final_score
        if final.home_win:
            return home
        if final.away_win:
            return away
        return None

    def _resolve_position(self, reference: str, group_id: str, target: str) -> Optional[str]:
        group = self.tournament.groups.get(group_id)
        if group is None:
            raise UnknownReferenceError(reference, f"no group {group_id!r}")
        if not target.isdigit() or int(target) < 1:
            raise MalformedReferenceError(reference, "position must be a positive integer")
        position = int(target)
        if position > len(group.teams):
            raise UnknownReferenceError(
                reference, f"group {group_id} has only {len(group.teams)} teams")
        table = self._table(group, reference)
        if not self.tournament.is_group_complete(group_id):
            return None
        return table[position - 1].team

    def _table(self, group, reference: str) -> List[TableLine]:
        if group.id not in self._tables:
            try:
                self._tables[group.id] = build_table(
                    group, self.tournament.match_list(), self.rules)
            except UnknownReferenceError as e:
                raise UnknownReferenceError(reference, f"group {group.id}: {e}") from e
        return self._tables[group.id]

    def _third_place_fixtures(self):
        return select(self.tournament.matches.values(),
                      ByCategory(self.rules.third_place_round_category))

    def _parse_third_groups(self, reference: str, target: str) -> List[str]:
        group_ids = target.split('/')
        if any(not g for g in group_ids) or len(set(group_ids)) != len(group_ids):
            raise MalformedReferenceError(reference, "expected distinct group IDs separated by '/'")
        return group_ids

    def _is_third_reference(self, reference) -> bool:
        return isinstance(reference, str) and reference.startswith(self.rules.third_place_group_id + ':')

    def _earlier_thirds_settled(self, fixture, group_ids: List[str]) -> bool:
        wanted = set(group_ids)
        for match in self._third_place_fixtures():
            if match.id == fixture.id:
                break
            for side, reference in enumerate(match.team_references):
                if not self._is_third_reference(reference):
                    continue
                other = set(reference.split(':', 1)[1].split('/'))
                if other & wanted and self._slots(match)[side] is None:
                    return False
        return True

    def _claimed_teams(self) -> set:
        claimed = set()
        for match in self._third_place_fixtures():
            if self.record_assignments:
                slots = self.assignments.get(match.id, [None, None])
            else:
                slots = match.teams
            claimed.update(team for team in slots if team is not None)
        return claimed

    def _resolve_third(self, reference: str, target: str, fixture) -> Optional[str]:
        group_ids = self._parse_third_groups(reference, target)
        groups = []
        for group_id in group_ids:
            group = self.tournament.groups.get(group_id)
            if group is None:
                raise UnknownReferenceError(reference, f"no group {group_id!r}")
            groups.append(group)

        tables = {g.id: self._table(g, reference) for g in groups}
        if not all(self.tournament.is_group_complete(g.id) for g in groups):
            return None
        if fixture is not None and not self._earlier_thirds_settled(fixture, group_ids):
            return None

        pool = third_placed_lines(groups, self.rules, tables)
        if len(pool) < len(groups):
            return None
        claimed = self._claimed_teams()
        for line in rank_lines(pool, cross_group=True):
            if line.team not in claimed:
                return line.team
        return None


def resolve_reference(tournament, reference: str) -> Optional[str]:
    """Resolve one reference against the current state of the tournament."""
    return ReferenceResolver(tournament).resolve(reference)


def resolve_knockout_matches(tournament):
    """
    Resolve the team slots of every knockout match from scratch.

    Returns ``(assignments, errors)``: ``{match_id: [home, away]}`` and the
    list of SlotError for references that failed. The tournament is not
    modified.
    """
    resolver = ReferenceResolver(tournament, record_assignments=True)
    for match in tournament.knockout_matches():
        resolver.resolve_match(match)
    return resolver.assignments, resolver.errors
