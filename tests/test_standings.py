"""
Tests for the Standings Calculator

Tests round-robin ranking, tie-breaks, ties, pool normalization and
pool-scoped ranks.
"""

import pytest

from engine.standings import compute_standings, normalize_pool, pool_rank, pool_standings


@pytest.fixture
def round_robin(make_match):
    """Four teams, six matches: Ana 3 wins, Ben 2, Cy 1, Di 0."""
    def played(match_id, a, b, score_a, score_b):
        return make_match(match_id, a=a, b=b, status="final",
                          score_a=score_a, score_b=score_b, pool="A")
    return [
        played("S-Q1", "Ana", "Ben", 21, 18),
        played("S-Q2", "Cy", "Di", 21, 10),
        played("S-Q3", "Ana", "Cy", 21, 12),
        played("S-Q4", "Ben", "Di", 21, 19),
        played("S-Q5", "Ana", "Di", 21, 5),
        played("S-Q6", "Ben", "Cy", 21, 20),
    ]


class TestComputeStandings:
    """Tests for the overall standings table."""

    def test_round_robin_order(self, round_robin):
        table = compute_standings(round_robin)

        assert [s.competitor for s in table] == ["Ana", "Ben", "Cy", "Di"]
        assert [s.wins for s in table] == [3, 2, 1, 0]
        assert [s.rank for s in table] == [1, 2, 3, 4]

    def test_aggregates(self, round_robin):
        ana = compute_standings(round_robin)[0]

        assert ana.played == 3
        assert ana.losses == 0
        assert ana.points_for == 63
        assert ana.points_against == 35
        assert ana.differential == 28

    def test_differential_breaks_win_ties(self, make_match):
        matches = [
            make_match("S-Q1", a="Ana", b="Ben", status="final", score_a=21, score_b=19),
            make_match("S-Q2", a="Cy", b="Di", status="final", score_a=21, score_b=5),
        ]
        table = compute_standings(matches)

        assert [s.competitor for s in table] == ["Cy", "Ana", "Ben", "Di"]

    def test_identical_records_ranked_by_id(self, make_match):
        matches = [
            make_match("S-Q1", a="Zed", b="Ann", status="final", score_a=21, score_b=15),
            make_match("S-Q2", a="Ann", b="Zed", status="final", score_a=21, score_b=15),
        ]
        table = compute_standings(matches)

        assert [s.competitor for s in table] == ["Ann", "Zed"]
        assert [s.rank for s in table] == [1, 2]

    def test_tie_counts_played_but_no_result(self, make_match):
        matches = [make_match("S-Q1", a="Ana", b="Ben", status="final", score_a=15, score_b=15)]
        table = compute_standings(matches)

        for standing in table:
            assert standing.played == 1
            assert standing.wins == 0
            assert standing.losses == 0
            assert standing.points_for == 15

    def test_ignores_unfinished_void_and_placeholders(self, make_match):
        matches = [
            make_match("S-Q1", a="Ana", b="Ben", status="live", score_a=10, score_b=3),
            make_match("S-Q2", a="Ana", b="Ben", status="void"),
            make_match("S-SF1-1", match_type="semifinal", a="S1", b="Ben",
                       status="final", score_a=21, score_b=3),
            make_match("S-Q3", a="Ana", b="Ben", status="final", score_a=None, score_b=None),
        ]
        assert compute_standings(matches) == []

    def test_empty(self):
        assert compute_standings([]) == []


class TestPools:
    """Tests for pool normalization and pool-scoped ranks."""

    @pytest.mark.parametrize("label,event_id,expected", [
        ("A", None, "A"),
        ("pool b", None, "B"),
        ("Group C", None, "C"),
        ("1", None, "A"),
        ("2", None, "B"),
        ("DA", "badminton_doubles", "A"),
        ("DO", "badminton_doubles", "B"),
        ("SD", "badminton_singles", "A"),
        ("", None, None),
        (None, None, None),
    ])
    def test_normalize_pool(self, label, event_id, expected):
        assert normalize_pool(label, event_id) == expected

    def test_pool_rank_scoped_to_own_pool(self, make_match, round_robin):
        other_pool = [
            make_match("S-Q7", a="Ed", b="Fi", status="final", score_a=21, score_b=3, pool="2"),
            make_match("S-Q8", a="Ed", b="Gus", status="final", score_a=21, score_b=3, pool="B"),
        ]
        matches = round_robin + other_pool

        assert pool_rank("Ben", matches) == 2
        assert pool_rank("Ed", matches) == 1
        assert pool_rank("Fi", matches) == 2

    def test_pool_rank_not_applicable(self, make_match, round_robin):
        unpooled = make_match("S-Q9", a="Hal", b="Ivy", status="final", score_a=21, score_b=3)

        assert pool_rank("Nobody", round_robin) is None
        assert pool_rank("Hal", round_robin + [unpooled]) is None

    def test_pool_standings_keyed_by_code(self, make_match, round_robin):
        other = make_match("S-Q7", a="Ed", b="Fi", status="final", score_a=21, score_b=3,
                           pool="Pool 2")
        tables = pool_standings(round_robin + [other])

        assert list(tables) == ["A", "B"]
        assert [s.competitor for s in tables["B"]] == ["Ed", "Fi"]
