# Command-line report: group tables, third-place pool and knockout fixtures

import argparse
import logging
import os
import sys

from database import SnapshotError, load_tournament
from engine.orchestrator import recompute


def format_table(lines):
    rows = [f"  {'#':>2} {'Team':<6} {'P':>2} {'W':>2} {'D':>2} {'L':>2} {'GF':>3} {'GA':>3} {'GD':>4} {'Pts':>4}"]
    for position, line in enumerate(lines, start=1):
        rows.append(
            f"  {position:>2} {line.team:<6} {line.played:>2} {line.wins:>2} {line.draws:>2} "
            f"{line.losses:>2} {line.goals_for:>3} {line.goals_against:>3} "
            f"{line.goal_difference:>+4} {line.points:>4}"
        )
    return rows


def format_fixture(match):
    sides = []
    for reference, team in zip(match.team_references, match.teams):
        sides.append(team if team else f"[{reference}]")
    line = f"  {match.id:<5} {match.category:<6} {sides[0]} vs {sides[1]}"
    if match.played:
        final = match.scoreboard.final_score
        line += f"  {final.home}-{final.away}"
    return line


def print_report(tournament, report):
    for group in tournament.groups.values():
        status = "complete" if tournament.is_group_complete(group.id) else "in progress"
        print(f"\n# {group.name} ({status})")
        for row in format_table(group.table_lines):
            print(row)

    print("\n# Third-placed teams")
    for position, line in enumerate(tournament.third_placed.table_lines, start=1):
        print(f"  {position:>2} {line.team:<6} (group {line.group_id}) {line.points} pts, "
              f"{line.goal_difference:+} GD, {line.goals_for} GF")

    print("\n# Knockout stage")
    for match in tournament.knockout_matches():
        print(format_fixture(match))

    if not report.ok:
        print("\n# Errors")
        for error in report.errors:
            print(f"  {error.match_id} ({error.to_dict()['side']}): {error.error}")
        for group_id, error in report.group_errors.items():
            print(f"  group {group_id}: {error}")


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description="Print standings and knockout fixtures.")
    parser.add_argument('snapshot', nargs='?',
                        default=os.path.join(base_dir, 'data', 'tournament.yaml'),
                        help="path to tournament.yaml")
    parser.add_argument('-v', '--verbose', action='store_true', help="log resolution details")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        tournament = load_tournament(args.snapshot)
    except (FileNotFoundError, SnapshotError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    report = recompute(tournament)
    print_report(tournament, report)
    return 0 if report.ok else 2


if __name__ == '__main__':
    sys.exit(main())
