"""
Unit tests for standings calculation.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.results import apply_score
from bracket.standings import calculate_standings


class TestStandings:

    def test_all_teams_listed_before_any_result(self, schedule):
        standings = calculate_standings(schedule)
        assert [s['team'] for s in standings] == ["Alpha", "Beta", "Charlie"]
        assert all(s['played'] == 0 and s['points'] == 0 for s in standings)

    def test_win_loss_draw(self, schedule):
        # m1: Alpha-Beta, m2: Alpha-Charlie, m3: Beta-Charlie
        schedule = apply_score(schedule, "m1", 5, 2)
        schedule = apply_score(schedule, "m2", 1, 1)
        schedule = apply_score(schedule, "m3", 0, 3)

        by_team = {s['team_id']: s for s in calculate_standings(schedule)}
        assert (by_team["A"]['wins'], by_team["A"]['draws'], by_team["A"]['losses']) == (1, 1, 0)
        assert (by_team["B"]['wins'], by_team["B"]['draws'], by_team["B"]['losses']) == (0, 0, 2)
        assert (by_team["C"]['wins'], by_team["C"]['draws'], by_team["C"]['losses']) == (1, 1, 0)
        assert by_team["A"]['points'] == 4
        assert by_team["A"]['points_for'] == 6
        assert by_team["A"]['points_against'] == 3
        assert by_team["B"]['point_diff'] == -6

    def test_ranking_uses_point_diff(self, schedule):
        schedule = apply_score(schedule, "m1", 5, 2)
        schedule = apply_score(schedule, "m2", 1, 1)
        schedule = apply_score(schedule, "m3", 0, 3)

        standings = calculate_standings(schedule)
        # Alpha and Charlie are level on points and differential; Alpha scored more
        assert [s['team'] for s in standings] == ["Alpha", "Charlie", "Beta"]

    def test_scheduled_matches_ignored(self, schedule):
        schedule = apply_score(schedule, "m3", 2, 0)
        by_team = {s['team_id']: s for s in calculate_standings(schedule)}
        assert by_team["A"]['played'] == 0
        assert by_team["B"]['played'] == 1
        assert by_team["B"]['points'] == 3
