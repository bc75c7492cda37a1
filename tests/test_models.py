"""
Unit tests for the data models (Team, TeamRef, Match, Schedule).
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.models import (Completed, Match, Schedule, Scheduled, Team, TeamRef, Tournament,
                            schedule_id)


def make_match(match_id="m1"):
    return Match(match_id, TeamRef("A", "Alpha"), TeamRef("B", "Beta"))


class TestTeam:
    """Tests for the Team model."""

    def test_team_defaults(self):
        team = Team(id="A", team_name="Alpha")
        assert team.status == "pending"
        assert team.player_usernames == []
        assert team.rejection_reason is None

    def test_snapshot_captures_current_name(self):
        team = Team(id="A", team_name="Alpha")
        ref = team.snapshot()
        team.team_name = "Alpha Renamed"
        assert ref == TeamRef("A", "Alpha")

    def test_team_dict_round_trip_keeps_reason(self):
        team = Team(id="A", team_name="Alpha", tournament_id="t1", status="rejected",
                    rejection_reason="Blurry payment proof")
        restored = Team.from_dict(team.to_dict())
        assert restored.status == "rejected"
        assert restored.rejection_reason == "Blurry payment proof"

    def test_team_repr(self):
        assert "Alpha" in repr(Team(id="A", team_name="Alpha"))


class TestMatch:
    """Tests for match outcome derivation."""

    def test_new_match_is_scheduled(self):
        match = make_match()
        assert match.status == "scheduled"
        assert match.outcome == Scheduled()
        assert match.team1_score is None
        assert match.winner_id is None

    def test_completed_picks_higher_score(self):
        match = make_match().completed(1, 4)
        assert match.status == "completed"
        assert match.winner_id == "B"
        assert match.outcome == Completed(1, 4, TeamRef("B", "Beta"))

    def test_tie_has_no_winner(self):
        match = make_match().completed(2, 2)
        assert match.status == "completed"
        assert match.winner_id is None

    def test_completed_does_not_modify_original(self):
        match = make_match()
        match.completed(3, 0)
        assert match.status == "scheduled"

    def test_scheduled_dict_omits_scores(self):
        data = make_match().to_dict()
        assert data == {
            'id': 'm1',
            'team1': {'id': 'A', 'name': 'Alpha'},
            'team2': {'id': 'B', 'name': 'Beta'},
            'status': 'scheduled',
        }

    def test_tie_dict_omits_winner(self):
        data = make_match().completed(1, 1).to_dict()
        assert data['team1_score'] == 1
        assert data['team2_score'] == 1
        assert 'winner_id' not in data

    def test_from_dict_rederives_winner(self):
        data = make_match().to_dict()
        data.update({'status': 'completed', 'team1_score': 5, 'team2_score': 2, 'winner_id': 'B'})
        assert Match.from_dict(data).winner_id == "A"

    def test_from_dict_rejects_completed_without_scores(self):
        data = make_match().to_dict()
        data['status'] = 'completed'
        with pytest.raises(ValueError):
            Match.from_dict(data)

    def test_from_dict_rejects_unknown_status(self):
        data = make_match().to_dict()
        data['status'] = 'postponed'
        with pytest.raises(ValueError):
            Match.from_dict(data)


class TestSchedule:
    """Tests for the Schedule container."""

    def test_schedule_id_format(self):
        assert schedule_id("abc", 2) == "abc_round_2"

    def test_duplicate_match_ids_rejected(self):
        with pytest.raises(ValueError):
            Schedule("t1_round_1", "t1", 1, [make_match("m1"), make_match("m1")])

    def test_with_match_replaces_in_place_of_order(self):
        schedule = Schedule("t1_round_1", "t1", 1, [make_match("m1"), make_match("m2"), make_match("m3")])
        updated = schedule.with_match(schedule.get_match("m2").completed(1, 0))
        assert [m.id for m in updated.matches] == ["m1", "m2", "m3"]
        assert updated.get_match("m2").status == "completed"
        assert schedule.get_match("m2").status == "scheduled"

    def test_with_match_appends_new_id(self):
        schedule = Schedule("t1_round_1", "t1", 1, [make_match("m1")])
        updated = schedule.with_match(make_match("m9"))
        assert [m.id for m in updated.matches] == ["m1", "m9"]
        assert len(schedule) == 1

    def test_survives_yaml_serialization(self, schedule):
        schedule = schedule.with_match(schedule.get_match("m1").completed(5, 2))
        text = yaml.safe_dump(schedule.to_dict())
        restored = Schedule.from_dict(yaml.safe_load(text))
        assert restored == schedule
        assert [m.id for m in restored.matches] == ["m1", "m2", "m3"]

    def test_contains(self, schedule):
        assert "m1" in schedule
        assert "missing" not in schedule


class TestTournament:
    def test_round_trip(self, tournament):
        restored = Tournament.from_dict(tournament.to_dict())
        assert restored.name == "Spring Cup"
        assert restored.max_team_limit == 4

    def test_team_limit_defaults_to_sixteen(self):
        assert Tournament(id="t", name="Cup", game="Chess").max_team_limit == 16
        assert Tournament.from_dict({"id": "t", "name": "Cup", "game": "Chess"}).max_team_limit == 16
