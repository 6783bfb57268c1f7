import random

from carbon.models import Badge
from carbon.ranking import badge_for_rank, estimate_reduction_kg, rank_users


def _user(user_id, username, credits):
    return {"id": user_id, "username": username, "full_name": None, "carbon_credits": credits}


def test_ranks_are_contiguous_and_sorted():
    users = [_user(f"u{i}", f"name{i}", random.Random(i).randint(0, 50) * 10) for i in range(25)]
    rows = rank_users(users)
    assert [row.rank for row in rows] == list(range(1, 26))
    credits = [row.credits for row in rows]
    assert credits == sorted(credits, reverse=True)


def test_ties_break_by_username():
    users = [_user("3", "carol", 100), _user("1", "bob", 100), _user("2", "alice", 100)]
    rows = rank_users(users)
    assert [row.username for row in rows] == ["alice", "bob", "carol"]
    assert [row.rank for row in rows] == [1, 2, 3]


def test_ranking_is_stable_across_calls_and_input_order():
    users = [_user(str(i), f"user{i % 4}-{i}", (i % 3) * 50) for i in range(12)]
    expected = rank_users(users)
    shuffled = list(users)
    random.Random(7).shuffle(shuffled)
    assert rank_users(shuffled) == expected
    assert rank_users(users) == expected


def test_badges_for_three_or_more():
    rows = rank_users([_user(str(i), f"u{i}", i * 10) for i in range(6)])
    badges = [row.badge for row in rows]
    assert badges[:3] == [Badge.GOLD, Badge.SILVER, Badge.BRONZE]
    assert badges[3:] == [Badge.NONE] * 3


def test_badges_for_fewer_than_three():
    rows = rank_users([_user("a", "a", 5), _user("b", "b", 9)])
    assert [row.badge for row in rows] == [Badge.GOLD, Badge.SILVER]
    assert rank_users([]) == []


def test_badge_for_rank():
    assert badge_for_rank(1) == Badge.GOLD
    assert badge_for_rank(4) == Badge.NONE


def test_estimated_reduction():
    assert estimate_reduction_kg(18000, 0.01) == 180.0
    assert estimate_reduction_kg(12345, 0.01) == 123.45
    assert rank_users([_user("a", "a", 250)], kg_per_credit=0.01)[0].estimated_reduction_kg == 2.5


def test_submission_counts_follow_user_id():
    users = [_user("a", "alpha", 10), _user("b", "beta", 20)]
    rows = rank_users(users, submissions={"a": 4, "ghost": 9})
    assert [(row.user_id, row.submissions) for row in rows] == [("b", 0), ("a", 4)]
    assert all(row.submissions == 0 for row in rank_users(users))
