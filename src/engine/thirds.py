"""
Cross-group pool of third-placed teams.
"""
from typing import Dict, Iterable, List, Optional

from .models import TableLine
from .rules import Rules
from .tables import rank_lines


def third_placed_lines(groups: Iterable, rules: Optional[Rules] = None,
                       tables: Optional[Dict[str, List[TableLine]]] = None) -> List[TableLine]:
    """
    Copy the third-ranked line of every group that has one, in group order.

    ``tables`` maps group IDs to ranked lines; groups missing from it use
    their stored ``table_lines``.
    """
    rules = rules if rules else Rules()
    tables = tables if tables else {}
    index = rules.third_place_position - 1
    thirds = []
    for group in groups:
        lines = tables.get(group.id, group.table_lines)
        if len(lines) > index:
            thirds.append(lines[index].copy())
    return thirds


def aggregate_thirds(groups: Iterable, rules: Optional[Rules] = None) -> List[TableLine]:
    """Rank the third-placed teams of the given groups against each other."""
    return rank_lines(third_placed_lines(groups, rules), cross_group=True)
