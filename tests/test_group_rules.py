"""Tests for group validation and singles/doubles rules."""
from courtflow.config import SelectionPolicy
from courtflow.models.waitlist import Group, Player
from courtflow.services.group_rules import (
    group_type_for,
    is_court_eligible_for_group,
    session_duration_minutes,
    validate_group,
)


class TestGroupType:
    def test_by_head_count(self):
        assert group_type_for(1) == "singles"
        assert group_type_for(2) == "singles"
        assert group_type_for(3) == "singles"
        assert group_type_for(4) == "doubles"

    def test_follows_policy_threshold(self):
        group = Group(players=tuple(Player(name=n) for n in ("A", "B", "C")))
        assert group_type_for(group.player_count) == "singles"
        assert group_type_for(group.player_count, SelectionPolicy(doubles_min_players=3)) == "doubles"

    def test_session_duration(self):
        assert session_duration_minutes(2) == 60
        assert session_duration_minutes(4) == 90
        policy = SelectionPolicy(singles_session_minutes=45)
        assert session_duration_minutes(2, policy) == 45


class TestSinglesOnlyCourts:
    def test_court_8_rejects_four_players(self):
        assert is_court_eligible_for_group(8, 4) is False

    def test_court_8_accepts_singles(self):
        assert is_court_eligible_for_group(8, 2) is True
        assert is_court_eligible_for_group(8, 3) is True

    def test_other_courts_accept_doubles(self):
        assert is_court_eligible_for_group(1, 4) is True

    def test_explicit_court_set(self):
        assert is_court_eligible_for_group(3, 4, singles_only_courts=[3]) is False
        assert is_court_eligible_for_group(8, 4, singles_only_courts=[]) is True


class TestValidateGroup:
    def test_valid_names(self):
        assert validate_group(["Alice", "Bob"]).valid is True

    def test_valid_dicts_and_players(self):
        result = validate_group([{"displayName": "Alice", "memberId": "m1"}, Player(name="Bob", member_id="m2")])
        assert result.valid is True
        assert result.error is None

    def test_not_a_list(self):
        assert validate_group(None).error == "Group must be a list of players"
        assert validate_group("Alice").error == "Group must be a list of players"

    def test_empty(self):
        assert validate_group([]).error == "Group cannot be empty"

    def test_too_many(self):
        result = validate_group(["A", "B", "C", "D", "E"])
        assert result.valid is False
        assert result.error == "Group cannot have more than 4 players"

    def test_null_player(self):
        assert validate_group(["A", None]).error == "Player 2 is invalid"

    def test_blank_name(self):
        assert validate_group([{"name": "  "}]).error == "Player 1 must have a valid name"
        assert validate_group([Player(name="")]).error == "Player 1 must have a valid name"

    def test_duplicate_names_ignore_case_and_spacing(self):
        result = validate_group(["Alice", " alice "])
        assert result.error == "Duplicate players are not allowed in the same group"

    def test_duplicate_member_ids(self):
        result = validate_group([{"name": "Alice", "memberId": "m1"}, {"name": "Alicia", "memberId": "m1"}])
        assert result.valid is False

    def test_same_name_different_members_allowed(self):
        result = validate_group([{"name": "Sam", "memberId": "m1"}, {"name": "Sam", "memberId": "m2"}])
        assert result.valid is True
