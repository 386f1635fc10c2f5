from __future__ import annotations

from datetime import date

import pytest

from lingo_progress.engine.exceptions import InvalidInputError
from lingo_progress.engine.progress import DailyStats, LearnerProgress, SkillStatus


def test_new_learner_defaults() -> None:
    progress = LearnerProgress.new()

    assert progress.total_xp == 0
    assert progress.level == 1
    assert progress.last_active_date is None
    assert progress.xp_for_next_level == 100
    assert progress.progress_fraction == 0


def test_award_xp_keeps_level_consistent() -> None:
    progress = LearnerProgress.new()

    assert progress.award_xp(99) == 1
    assert progress.award_xp(1) == 2
    assert progress.award_xp(0) == 2
    assert progress.total_xp == 100


def test_negative_award_is_rejected() -> None:
    progress = LearnerProgress.new()

    with pytest.raises(InvalidInputError):
        progress.award_xp(-5)
    assert progress.total_xp == 0


def test_skill_status_only_moves_forward() -> None:
    progress = LearnerProgress.new()

    assert progress.skill("greetings") is SkillStatus.LOCKED
    assert progress.advance_skill("greetings", SkillStatus.MASTERED) is True
    assert progress.advance_skill("greetings", SkillStatus.IN_PROGRESS) is False
    assert progress.advance_skill("greetings", "locked") is False
    assert progress.skill("greetings") is SkillStatus.MASTERED


def test_complete_lesson_is_append_only() -> None:
    progress = LearnerProgress.new()

    assert progress.complete_lesson("lesson-1") is True
    assert progress.complete_lesson("lesson-1") is False
    assert progress.completed_lesson_ids == {"lesson-1"}


def test_copy_is_independent() -> None:
    progress = LearnerProgress(unlocked_achievement_ids={"streak_7"}, skill_status={"food": SkillStatus.IN_PROGRESS})

    clone = progress.copy()
    clone.unlocked_achievement_ids.add("level_5")
    clone.skill_status["food"] = SkillStatus.MASTERED

    assert progress.unlocked_achievement_ids == {"streak_7"}
    assert progress.skill_status["food"] is SkillStatus.IN_PROGRESS


def test_record_round_trip() -> None:
    progress = LearnerProgress(
        current_streak=3,
        longest_streak=8,
        last_active_date=date(2026, 3, 9),
        unlocked_achievement_ids={"first_activity", "streak_7"},
        skill_status={"greetings": SkillStatus.MASTERED, "food": SkillStatus.IN_PROGRESS},
        completed_lesson_ids={"lesson-2", "lesson-1"},
        total_activities_completed=12,
        total_minutes_learned=95,
        average_accuracy=0.8,
        high_accuracy_sessions=4,
        daily_stats={date(2026, 3, 9): DailyStats(activities_completed=2, xp_earned=71, minutes_practiced=9)},
    )
    progress.award_xp(345)

    record = progress.to_record()

    assert record["last_active_date"] == "2026-03-09"
    assert record["completed_lesson_ids"] == ["lesson-1", "lesson-2"]
    assert record["skill_status"] == {"food": "in-progress", "greetings": "mastered"}
    assert record["daily_stats"] == {"2026-03-09": {"activities_completed": 2, "xp_earned": 71, "minutes_practiced": 9}}
    assert LearnerProgress.from_record(record) == progress


def test_from_record_rederives_level_and_fills_defaults() -> None:
    progress = LearnerProgress.from_record({"total_xp": 250, "level": 9, "current_streak": 4})

    assert progress.level == 3
    assert progress.longest_streak == 4
    assert progress.unlocked_achievement_ids == set()


def test_record_activity_tracks_running_accuracy_and_daily_totals() -> None:
    progress = LearnerProgress.new()
    day = date(2026, 3, 10)

    progress.record_activity(day, 1.0, 4)
    progress.record_activity(day, 0.5, 6)
    progress.record_activity(date(2026, 3, 11), 0.9, 2)

    assert progress.total_activities_completed == 3
    assert progress.total_minutes_learned == 12
    assert progress.average_accuracy == pytest.approx(0.8)
    assert progress.high_accuracy_sessions == 2
    assert progress.daily_stats[day] == DailyStats(activities_completed=2, xp_earned=0, minutes_practiced=10)
    assert progress.daily_stats[date(2026, 3, 11)].activities_completed == 1


def test_today_activities_remaining_counts_down_to_zero() -> None:
    progress = LearnerProgress.new()
    day = date(2026, 3, 10)

    assert progress.today_activities_remaining(day) == 5
    assert day not in progress.daily_stats

    for _ in range(6):
        progress.record_activity(day, 0.5, 1)

    assert progress.today_activities_remaining(day) == 0
    assert progress.today_activities_remaining(date(2026, 3, 11)) == 5


def test_copy_does_not_share_daily_stats() -> None:
    day = date(2026, 3, 10)
    progress = LearnerProgress(daily_stats={day: DailyStats(activities_completed=1)})

    clone = progress.copy()
    clone.daily(day).activities_completed += 1

    assert progress.daily_stats[day].activities_completed == 1


def test_old_records_without_activity_stats_load() -> None:
    progress = LearnerProgress.from_record({"total_xp": 40, "total_activities_completed": 2})

    assert progress.average_accuracy == 0.0
    assert progress.high_accuracy_sessions == 0
    assert progress.daily_stats == {}
