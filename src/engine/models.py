from .classifier import ByCategory, ByGroup, select
from .rules import Rules, get_default_rules

DEFAULT_GROUP_PREFIX = get_default_rules()['group_category_prefix']
HOME, AWAY = 0, 1


class Venue:
    def __init__(self, id, name, city=None):
        self.id = id
        self.name = name
        self.city = city

    def __repr__(self):
        return f"Venue(id={self.id}, name={self.name}, city={self.city})"


class Team:
    def __init__(self, code, name=None):
        self.code = code
        self.name = name if name else code

    def __eq__(self, other):
        return isinstance(other, Team) and self.code == other.code

    def __hash__(self):
        return hash(self.code)

    def __repr__(self):
        return f"Team(code={self.code}, name={self.name})"


class Score:
    """A pair of goal counts, home first."""

    def __init__(self, home=0, away=0):
        if home < 0 or away < 0:
            raise ValueError(f"Goal counts cannot be negative: {home}-{away}")
        self.home = home
        self.away = away

    @property
    def home_win(self):
        return self.home > self.away

    @property
    def away_win(self):
        return self.away > self.home

    @property
    def draw(self):
        return self.home == self.away

    def __add__(self, other):
        return Score(self.home + other.home, self.away + other.away)

    def __eq__(self, other):
        return isinstance(other, Score) and (self.home, self.away) == (other.home, other.away)

    def __repr__(self):
        return f"Score({self.home}-{self.away})"


class Scoreboard:
    """Per-period scores of a match (halves, extra time, penalties)."""

    def __init__(self, periods=None):
        self.periods = [p if isinstance(p, Score) else Score(*p) for p in (periods or [])]

    @property
    def played(self):
        return len(self.periods) > 0

    @property
    def final_score(self):
        total = Score()
        for period in self.periods:
            total = total + period
        return total

    def __repr__(self):
        return f"Scoreboard(periods={self.periods})"


class TableLine:
    """One team's group-stage record."""

    def __init__(self, team, group_id=None, seed=0, points_for_win=3, points_for_draw=1):
        self.team = team
        self.group_id = group_id
        self.seed = seed  # roster position, used as the last tie-break
        self.points_for_win = points_for_win
        self.points_for_draw = points_for_draw
        self.wins = 0
        self.draws = 0
        self.losses = 0
        self.goals_for = 0
        self.goals_against = 0

    @property
    def played(self):
        return self.wins + self.draws + self.losses

    @property
    def points(self):
        return self.wins * self.points_for_win + self.draws * self.points_for_draw

    @property
    def goal_difference(self):
        return self.goals_for - self.goals_against

    def add_result(self, scored, conceded):
        self.goals_for += scored
        self.goals_against += conceded
        if scored > conceded:
            self.wins += 1
        elif scored < conceded:
            self.losses += 1
        else:
            self.draws += 1

    def copy(self):
        line = TableLine(self.team, self.group_id, self.seed,
                         self.points_for_win, self.points_for_draw)
        line.wins = self.wins
        line.draws = self.draws
        line.losses = self.losses
        line.goals_for = self.goals_for
        line.goals_against = self.goals_against
        return line

    def to_dict(self):
        return {
            'team': self.team,
            'group': self.group_id,
            'played': self.played,
            'wins': self.wins,
            'draws': self.draws,
            'losses': self.losses,
            'goals_for': self.goals_for,
            'goals_against': self.goals_against,
            'goal_difference': self.goal_difference,
            'points': self.points,
        }

    def __repr__(self):
        return (f"TableLine(team={self.team}, group={self.group_id}, pts={self.points}, "
                f"gd={self.goal_difference}, gf={self.goals_for})")


class Group:
    def __init__(self, id, name=None, teams=None):
        self.id = id
        self.name = name if name else f"Group {id}"
        self.teams = list(teams or [])  # team codes in declared order
        self.table_lines = []

    def __repr__(self):
        return f"Group(id={self.id}, teams={self.teams})"


class Match:
    def __init__(self, id, category, team_references, venue=None, kickoff=None, periods=None):
        if len(team_references) != 2:
            raise ValueError(f"Match {id} needs exactly two team references")
        self.id = id
        self.category = category
        self.team_references = tuple(team_references)
        self.venue = venue
        self.kickoff = kickoff
        self.teams = [None, None]  # resolved team codes, home first
        self.scoreboard = Scoreboard(periods)

    @property
    def played(self):
        return self.scoreboard.played

    def is_group_match(self, prefix=DEFAULT_GROUP_PREFIX):
        return self.category.startswith(prefix)

    def group_id(self, prefix=DEFAULT_GROUP_PREFIX):
        """Return the group ID of a group match, or None for a knockout match."""
        if not self.is_group_match(prefix):
            return None
        return self.category[len(prefix):]

    def winner(self):
        """Return the resolved team on the winning side, or None."""
        if None in self.teams or not self.played:
            return None
        final = self.scoreboard.final_score
        if final.home_win:
            return self.teams[HOME]
        if final.away_win:
            return self.teams[AWAY]
        return None

    def __repr__(self):
        return (f"Match(id={self.id}, category={self.category}, "
                f"references={self.team_references}, teams={self.teams})")


class Tournament:
    """In-memory snapshot: every entity held in an ID-indexed mapping."""

    def __init__(self, venues=None, teams=None, groups=None, matches=None, rules=None):
        self.rules = rules if rules else Rules()
        self.venues = {v.id: v for v in (venues or [])}
        self.teams = {t.code: t for t in (teams or [])}
        self.groups = {}
        for group in (groups or []):
            if group.id == self.rules.third_place_group_id:
                raise ValueError(f"Group ID {group.id!r} is reserved for third-placed teams")
            self.groups[group.id] = group
        self.third_placed = Group(self.rules.third_place_group_id, "Third place")
        self.matches = {}
        for match in (matches or []):
            if match.id in self.matches:
                raise ValueError(f"Duplicate match ID {match.id!r}")
            self.matches[match.id] = match

    def match_list(self):
        return list(self.matches.values())

    def group_matches(self, group_id):
        return select(self.matches.values(), ByGroup(group_id, self.rules.group_category_prefix))

    def knockout_matches(self):
        return select(self.matches.values(), ByCategory(self.rules.knockout_category_prefix))

    def is_group_complete(self, group_id):
        return all(m.played for m in self.group_matches(group_id))

    def __repr__(self):
        return (f"Tournament(teams={len(self.teams)}, groups={list(self.groups)}, "
                f"matches={len(self.matches)})")
