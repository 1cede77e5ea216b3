"""
Recomputation of derived tournament state.

recompute() is the only place where match team slots and group tables are
written. Its phases always run in dependency order:

1. group-stage assignment: group fixtures take their teams from their references
2. tables: every group table is rebuilt, then the third-place pool
3. knockout resolution: every knockout slot is resolved from scratch, against
   group rankings taken from the current results rather than the stored tables
"""
import logging
from typing import List

from .errors import ResolutionError, UnknownReferenceError
from .resolver import SIDES, SlotError, resolve_knockout_matches
from .tables import build_table
from .thirds import aggregate_thirds

logger = logging.getLogger(__name__)


class RecomputeReport:
    def __init__(self):
        self.phases: List[str] = []
        self.errors: List[SlotError] = []
        self.group_errors = {}  # group ID -> ResolutionError

    @property
    def ok(self):
        return not self.errors and not self.group_errors

    def to_dict(self):
        return {
            'phases': list(self.phases),
            'errors': [e.to_dict() for e in self.errors],
            'group_errors': {gid: str(e) for gid, e in self.group_errors.items()},
        }

    def __repr__(self):
        return f"RecomputeReport(phases={self.phases}, errors={len(self.errors)}, group_errors={len(self.group_errors)})"


def assign_group_match_teams(tournament, report: RecomputeReport) -> None:
    """Fill each group match's slots from its two team references."""
    prefix = tournament.rules.group_category_prefix
    for match in tournament.matches.values():
        if not match.is_group_match(prefix):
            continue
        for side, reference in enumerate(match.team_references):
            if reference in tournament.teams:
                match.teams[side] = reference
                continue
            match.teams[side] = None
            error = UnknownReferenceError(reference, "no team with this code")
            report.errors.append(SlotError(match.id, side, reference, error))
            logger.warning(f"Match {match.id} ({SIDES[side]}): {error}")


def build_group_tables(tournament, report: RecomputeReport) -> None:
    """Rebuild every group table, then the third-place pool."""
    matches = tournament.match_list()
    for group in tournament.groups.values():
        try:
            group.table_lines = build_table(group, matches, tournament.rules)
        except ResolutionError as e:
            group.table_lines = []
            report.group_errors[group.id] = e
            logger.warning(f"Group {group.id}: {e}")
    tournament.third_placed.table_lines = aggregate_thirds(
        tournament.groups.values(), tournament.rules)


def resolve_knockout_slots(tournament, report: RecomputeReport) -> None:
    """Resolve every knockout slot from scratch and write the result."""
    assignments, errors = resolve_knockout_matches(tournament)
    for match in tournament.knockout_matches():
        match.teams = list(assignments.get(match.id, [None, None]))
    report.errors.extend(errors)


def recompute(tournament, assign_group_teams: bool = True, build_tables: bool = True,
              resolve_knockout: bool = True) -> RecomputeReport:
    """
    Bring tables and team slots up to date with the recorded results.

    Each flag enables one phase. Running the same phases twice without a
    change in results leaves the tournament unchanged. Errors are collected
    in the returned report; one failing reference never stops the others.
    """
    report = RecomputeReport()
    if assign_group_teams:
        assign_group_match_teams(tournament, report)
        report.phases.append('assign_group_teams')
    if build_tables:
        build_group_tables(tournament, report)
        report.phases.append('build_tables')
    if resolve_knockout:
        resolve_knockout_slots(tournament, report)
        report.phases.append('resolve_knockout')
    if not report.ok:
        logger.info(f"Recompute finished with {len(report.errors) + len(report.group_errors)} error(s)")
    return report
