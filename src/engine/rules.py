"""
Tournament conventions shared by the table builder and the reference resolver.
"""
from typing import Dict, Optional


def get_default_rules() -> Dict:
    """Return the default tournament rules."""
    return {
        'points_for_win': 3,
        'points_for_draw': 1,
        'third_place_group_id': 'T',
        'group_category_prefix': 'G:',
        'knockout_category_prefix': 'KO',
        'third_place_round_category': 'KO:8',
        'third_place_position': 3,
    }


class Rules:
    def __init__(self, **overrides):
        values = get_default_rules()
        unknown = set(overrides) - set(values)
        if unknown:
            raise ValueError(f"Unknown rule(s): {', '.join(sorted(unknown))}")
        values.update(overrides)
        self.points_for_win = int(values['points_for_win'])
        self.points_for_draw = int(values['points_for_draw'])
        self.third_place_group_id = str(values['third_place_group_id'])
        self.group_category_prefix = str(values['group_category_prefix'])
        self.knockout_category_prefix = str(values['knockout_category_prefix'])
        self.third_place_round_category = str(values['third_place_round_category'])
        self.third_place_position = int(values['third_place_position'])

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'Rules':
        """Build rules from a (possibly partial or empty) mapping, merging with defaults."""
        return cls(**(data or {}))

    def to_dict(self) -> Dict:
        return {key: getattr(self, key) for key in get_default_rules()}

    def __repr__(self):
        return f"Rules({self.to_dict()})"
