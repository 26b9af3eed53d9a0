"""
Platform-wide rates and averages from raw store counts.
"""
from core.stats import PlatformCounts, platform_stats


def test_rates_round_half_up():
    s = platform_stats(PlatformCounts(
        total_users=8, active_users=5,
        total_plans=8, active_plans=3, completed_plans=1,
    ))
    assert s["users"] == {"total": 8, "active": 5, "activity_rate": 63}
    assert s["plans"] == {"total": 8, "active": 3, "completed": 1, "completion_rate": 13}


def test_empty_platform_has_zero_rates_and_no_bmi():
    s = platform_stats(PlatformCounts())
    assert s["users"]["activity_rate"] == 0
    assert s["plans"]["completion_rate"] == 0
    assert s["health"] == {"average_bmi": None, "bmi_sample_size": 0}
    assert s["popular_goals"] == []
    assert s["recent_activity"] == 0


def test_bmi_average_and_top_goals():
    s = platform_stats(PlatformCounts(
        average_bmi=23.456,
        bmi_sample_size=4,
        goal_counts=[("a", 1), ("b", 6), ("c", 3), ("d", 2), ("e", 5), ("f", 4)],
        recent_activity=9,
    ))
    assert s["health"] == {"average_bmi": 23.5, "bmi_sample_size": 4}
    assert [g["goal"] for g in s["popular_goals"]] == ["b", "e", "f", "c", "d"]
    assert s["popular_goals"][0] == {"goal": "b", "count": 6}
    assert s["recent_activity"] == 9
