import argparse
import os
import sys
import yaml
from bracket.errors import InsufficientParticipants
from bracket.fixtures import approved_teams, generate
from bracket.models import APPROVED, Team


def load_teams(file_path):
    """Load a roster: a YAML list of {id, team_name, status}. Missing status means approved."""
    teams = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        entries = yaml.safe_load(file) or []
        for entry in entries:
            teams.append(Team(
                id=str(entry['id']),
                team_name=entry['team_name'],
                status=entry.get('status', APPROVED),
            ))
    return teams


def format_schedule(schedule):
    lines = [f"# Round {schedule.round}"]
    for match in schedule.matches:
        lines.append(f"{match.team1.name} vs {match.team2.name}")
    return "\n".join(lines)


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Generate round-robin fixtures from a team roster.')
    parser.add_argument('teams_file', nargs='?', default=os.path.join(base_dir, 'data', 'teams.yaml'),
                        help='YAML roster file (default: data/teams.yaml)')
    parser.add_argument('--tournament-id', default='tournament', help='Tournament identifier')
    parser.add_argument('--round', type=int, default=1, help='Round number (default: 1)')
    parser.add_argument('--output', help='Write the schedule document to this YAML file')
    args = parser.parse_args(argv)

    teams = approved_teams(load_teams(args.teams_file))

    try:
        schedule = generate(args.tournament_id, args.round, teams)
    except (InsufficientParticipants, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_schedule(schedule))

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            yaml.safe_dump(schedule.to_dict(), f, default_flow_style=False, sort_keys=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
