"""
Standings table derived from the completed matches of a schedule.
"""
from typing import List

from bracket.models import Schedule

POINTS_WIN = 3
POINTS_DRAW = 1


def calculate_standings(schedule: Schedule) -> List[dict]:
    """
    Calculate the table for one round.

    Returns: [{'team_id': id, 'team': name, 'played': n, 'wins': n, 'draws': n,
               'losses': n, 'points_for': n, 'points_against': n,
               'point_diff': n, 'points': n}, ...]

    Every team that appears in the schedule is listed, even before it plays.
    Ranking: points -> point differential -> points scored -> name
    """
    team_stats = {}

    for match in schedule.matches:
        for ref in (match.team1, match.team2):
            if ref.id not in team_stats:
                team_stats[ref.id] = {
                    'team_id': ref.id,
                    'team': ref.name,
                    'played': 0,
                    'wins': 0,
                    'draws': 0,
                    'losses': 0,
                    'points_for': 0,
                    'points_against': 0,
                }

    for match in schedule.matches:
        if not match.is_completed:
            continue

        stats1 = team_stats[match.team1.id]
        stats2 = team_stats[match.team2.id]
        stats1['played'] += 1
        stats2['played'] += 1
        stats1['points_for'] += match.team1_score
        stats1['points_against'] += match.team2_score
        stats2['points_for'] += match.team2_score
        stats2['points_against'] += match.team1_score

        if match.winner_id is None:
            stats1['draws'] += 1
            stats2['draws'] += 1
        elif match.winner_id == match.team1.id:
            stats1['wins'] += 1
            stats2['losses'] += 1
        else:
            stats2['wins'] += 1
            stats1['losses'] += 1

    for stats in team_stats.values():
        stats['point_diff'] = stats['points_for'] - stats['points_against']
        stats['points'] = stats['wins'] * POINTS_WIN + stats['draws'] * POINTS_DRAW

    return sorted(
        team_stats.values(),
        key=lambda x: (-x['points'], -x['point_diff'], -x['points_for'], x['team'])
    )
