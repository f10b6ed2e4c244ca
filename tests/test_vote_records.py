"""Tests for leaderboard shaping and fingerprinting."""

import random

from votebot.constants import TimeConstants
from votebot.data_models.votes import LeaderboardRecord, VoteEvent, VoterStanding
from votebot.utils.vote_records import (
    fingerprint_records,
    latest_events_by_nickname,
    serialize_records,
    shape_records,
)


def _standings(*pairs):
    return [VoterStanding(nickname=name, vote_count=count) for name, count in pairs]


EVENTS = [
    VoteEvent("Alex", "June 1st, 2024 10:00 AM EST", 100),
    VoteEvent("Alex", "June 2nd, 2024 10:00 AM EST", 200),
    VoteEvent("Steve", "June 3rd, 2024 09:30 PM EST", 150),
    VoteEvent("Herobrine", "June 4th, 2024 01:00 AM EST", 300),
]


class TestShapeRecords:
    def test_sorted_by_votes_descending(self):
        records = shape_records(_standings(("Alex", 3), ("Steve", 5), ("Notch", 1)), EVENTS)
        assert [r.nickname for r in records] == ["Steve", "Alex", "Notch"]

    def test_uses_latest_vote_per_nickname(self):
        records = shape_records(_standings(("Alex", 3)), EVENTS)
        assert records[0].last_activity_display == "02/06/2024, 8:30:00 PM IST"

    def test_missing_vote_is_unknown(self):
        records = shape_records(_standings(("Notch", 1)), EVENTS)
        assert records[0].last_activity_display == TimeConstants.UNKNOWN

    def test_equal_counts_keep_input_order(self):
        standings = _standings(("Xena", 2), ("Yuri", 2), ("Zed", 2))

        assert [r.nickname for r in shape_records(standings, [])] == ["Xena", "Yuri", "Zed"]
        assert [r.nickname for r in shape_records(list(reversed(standings)), [])] == ["Zed", "Yuri", "Xena"]

    def test_empty_standings(self):
        assert shape_records([], EVENTS) == []

    def test_unparseable_vote_time_does_not_abort(self):
        records = shape_records(_standings(("Alex", 1)), [VoteEvent("Alex", "yesterday-ish", 5)])
        assert records[0].last_activity_display == TimeConstants.INVALID


class TestLatestEvents:
    def test_equal_ordinals_resolve_independent_of_order(self):
        events = [
            VoteEvent("Alex", "June 1st, 2024 10:00 AM EST", 100),
            VoteEvent("Alex", "June 1st, 2024 11:00 AM EST", 100),
        ]

        assert latest_events_by_nickname(events) == latest_events_by_nickname(list(reversed(events)))


class TestFingerprint:
    def test_deterministic_regardless_of_input_order(self):
        standings = _standings(("Alex", 3), ("Steve", 5), ("Notch", 1), ("Herobrine", 9))
        expected = fingerprint_records(shape_records(standings, EVENTS))

        rng = random.Random(7)
        for _ in range(10):
            shuffled_standings = standings[:]
            shuffled_events = EVENTS[:]
            rng.shuffle(shuffled_standings)
            rng.shuffle(shuffled_events)
            assert fingerprint_records(shape_records(shuffled_standings, shuffled_events)) == expected

    def test_changes_when_vote_count_changes(self):
        before = fingerprint_records(shape_records(_standings(("Alex", 3)), []))
        after = fingerprint_records(shape_records(_standings(("Alex", 4)), []))
        assert before != after

    def test_changes_when_last_activity_changes(self):
        first = [LeaderboardRecord("Alex", 3, "01/06/2024, 8:30:00 PM IST")]
        second = [LeaderboardRecord("Alex", 3, "02/06/2024, 8:30:00 PM IST")]
        assert fingerprint_records(first) != fingerprint_records(second)

    def test_equal_records_give_equal_tokens(self):
        records = [LeaderboardRecord("Alex", 3, "Unknown")]
        assert fingerprint_records(records) == fingerprint_records(list(records))

    def test_token_is_short_hex(self):
        token = fingerprint_records(shape_records(_standings(("Alex", 3)), []))
        assert len(token) == 16
        int(token, 16)

    def test_serialization_does_not_merge_fields(self):
        # "ab" + "c" must not collide with "a" + "bc"
        left = [LeaderboardRecord("ab", 1, "c")]
        right = [LeaderboardRecord("a", 1, "bc")]
        assert serialize_records(left) != serialize_records(right)
