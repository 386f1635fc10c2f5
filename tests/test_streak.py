from __future__ import annotations

from datetime import date, timedelta

from lingo_progress.engine.streak import streak_status, update_streak


TODAY = date(2026, 3, 10)


def test_same_day_activity_is_idempotent() -> None:
    first = update_streak(last_active_date=TODAY - timedelta(days=1), current_streak=2, longest_streak=5, today=TODAY)
    second = update_streak(
        last_active_date=TODAY,
        current_streak=first.new_streak,
        longest_streak=first.longest_streak,
        today=TODAY,
    )
    third = update_streak(
        last_active_date=TODAY,
        current_streak=second.new_streak,
        longest_streak=second.longest_streak,
        today=TODAY,
    )

    assert first.new_streak == 3
    assert second.streak_maintained is True
    assert second.new_streak == 3
    assert third == second


def test_activity_after_yesterday_extends_streak_and_sets_record() -> None:
    result = update_streak(last_active_date=TODAY - timedelta(days=1), current_streak=6, longest_streak=6, today=TODAY)

    assert result.new_streak == 7
    assert result.longest_streak == 7
    assert result.streak_maintained is True
    assert result.streak_broken is False
    assert result.is_new_record is True


def test_extending_below_record_is_not_new_record() -> None:
    result = update_streak(last_active_date=TODAY - timedelta(days=1), current_streak=2, longest_streak=10, today=TODAY)

    assert result.new_streak == 3
    assert result.longest_streak == 10
    assert result.is_new_record is False


def test_gap_resets_streak() -> None:
    result = update_streak(last_active_date=TODAY - timedelta(days=3), current_streak=4, longest_streak=9, today=TODAY)

    assert result.new_streak == 1
    assert result.streak_broken is True
    assert result.streak_maintained is False
    assert result.longest_streak == 9


def test_first_activity_is_not_a_break() -> None:
    result = update_streak(last_active_date=None, current_streak=0, longest_streak=0, today=TODAY)

    assert result.new_streak == 1
    assert result.streak_broken is False
    assert result.is_new_record is True


def test_streak_status_tiers() -> None:
    assert streak_status(0).level == "beginner"
    assert streak_status(7).level == "intermediate"
    assert streak_status(14).level == "advanced"
    assert streak_status(30).message == "On fire!"
    assert streak_status(120).level == "master"
