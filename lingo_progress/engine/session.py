"""Practice session state machine and the end-of-session progress fold-in."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .achievements import DEFAULT_ACHIEVEMENTS, Achievement, AchievementUnlock, ActivityEvent, unlock_all_earned
from .clock import Clock, SystemClock
from .difficulty import MIN_TIER, adjust_difficulty, validate_tier
from .exceptions import InvalidInputError, InvalidSessionStateError
from .progress import LearnerProgress, SkillStatus
from .streak import StreakUpdate, update_streak
from .xp import calculate_xp, round_half_up


LOGGER = logging.getLogger(__name__)

MASTERY_ACCURACY = 0.9


class SessionPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Exercise:
    """An exercise as supplied by the exercise source."""

    id: str
    difficulty_tier: int


@dataclass(frozen=True, slots=True)
class AnswerSubmission:
    """Raw outcome of one exercise as reported by the UI."""

    exercise_id: str
    user_answer: str
    is_correct: bool
    time_spent_ms: int


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    exercise_id: str
    user_answer: str
    is_correct: bool
    time_spent_ms: int
    xp_earned: int
    difficulty_tier: int


@dataclass(frozen=True, slots=True)
class SessionSummary:
    total_xp: int
    accuracy: float
    time_spent_minutes: int
    exercises_completed: int
    new_level: Optional[int] = None


@dataclass(slots=True)
class SessionResult:
    """Everything produced when a session is folded into the learner record."""

    summary: SessionSummary
    progress: LearnerProgress
    streak: StreakUpdate
    unlocked_achievements: List[AchievementUnlock]
    lesson_completed: bool = False


@dataclass(slots=True)
class SessionState:
    exercises: Tuple[Exercise, ...]
    difficulty_tier: int
    started_at: datetime
    lesson_id: Optional[str] = None
    skill_id: Optional[str] = None
    current_index: int = 0
    correct_streak: int = 0
    incorrect_streak: int = 0
    correct_count: int = 0
    session_xp: int = 0
    answers: List[AnswerRecord] = field(default_factory=list)


class SessionAggregator:
    """Sequences one practice session at a time and folds it into progress.

    The aggregator is single-writer: the host must not call it from two
    places concurrently. Calling an operation in the wrong phase raises
    :class:`InvalidSessionStateError`.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        *,
        default_tier: int = MIN_TIER,
        achievements: Iterable[Achievement] = DEFAULT_ACHIEVEMENTS,
    ) -> None:
        self._clock = clock or SystemClock()
        self._default_tier = validate_tier(default_tier)
        self._achievements = list(achievements)
        self._phase = SessionPhase.IDLE
        self._state: Optional[SessionState] = None

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._phase is SessionPhase.ACTIVE

    @property
    def difficulty_tier(self) -> int:
        return self._require_active("read the difficulty tier of").difficulty_tier

    @property
    def session_xp(self) -> int:
        return self._require_active("read the XP of").session_xp

    @property
    def answers(self) -> Tuple[AnswerRecord, ...]:
        return tuple(self._require_active("read the answers of").answers)

    @property
    def correct_streak(self) -> int:
        return self._require_active("read the streak of").correct_streak

    @property
    def incorrect_streak(self) -> int:
        return self._require_active("read the streak of").incorrect_streak

    @property
    def current_exercise(self) -> Optional[Exercise]:
        """The exercise awaiting an answer, or ``None`` when all are answered."""
        state = self._require_active("read the current exercise of")
        if state.current_index < len(state.exercises):
            return state.exercises[state.current_index]
        return None

    def _require_active(self, action: str) -> SessionState:
        if self._phase is not SessionPhase.ACTIVE or self._state is None:
            raise InvalidSessionStateError(f"Cannot {action} a session that is {self._phase.value}.")
        return self._state

    def start_session(
        self,
        exercises: Sequence[Exercise],
        *,
        default_tier: Optional[int] = None,
        lesson_id: Optional[str] = None,
        skill_id: Optional[str] = None,
    ) -> None:
        """Begin a fresh session over ``exercises``.

        The starting tier is the first exercise's tier, falling back to
        ``default_tier`` (or the aggregator default) for an empty session.
        """
        if self._phase is SessionPhase.ACTIVE:
            raise InvalidSessionStateError("Cannot start a session while another one is active.")

        exercises = tuple(exercises)
        for exercise in exercises:
            validate_tier(exercise.difficulty_tier)

        if exercises:
            tier = exercises[0].difficulty_tier
        elif default_tier is not None:
            tier = validate_tier(default_tier)
        else:
            tier = self._default_tier

        self._state = SessionState(
            exercises=exercises,
            difficulty_tier=tier,
            started_at=self._clock.now(),
            lesson_id=lesson_id,
            skill_id=skill_id,
        )
        self._phase = SessionPhase.ACTIVE
        LOGGER.info("Started session with %s exercises at tier %s.", len(exercises), tier)

    def submit_answer(self, submission: AnswerSubmission) -> AnswerRecord:
        """Score one answer and adapt the session difficulty."""
        state = self._require_active("submit an answer to")

        if state.current_index >= len(state.exercises):
            raise InvalidSessionStateError("Every exercise in this session has already been answered.")
        expected = state.exercises[state.current_index]
        if submission.exercise_id != expected.id:
            raise InvalidInputError(
                f"Answer is for exercise {submission.exercise_id!r} but the current exercise is {expected.id!r}."
            )
        if submission.time_spent_ms < 0:
            raise InvalidInputError(f"Time spent cannot be negative, got {submission.time_spent_ms}.")

        breakdown = calculate_xp(
            difficulty_tier=state.difficulty_tier,
            is_correct=submission.is_correct,
            time_spent_ms=submission.time_spent_ms,
            current_streak=state.correct_streak,
        )
        record = AnswerRecord(
            exercise_id=submission.exercise_id,
            user_answer=submission.user_answer,
            is_correct=submission.is_correct,
            time_spent_ms=submission.time_spent_ms,
            xp_earned=breakdown.total_xp,
            difficulty_tier=state.difficulty_tier,
        )
        state.answers.append(record)
        state.session_xp += record.xp_earned
        state.current_index += 1

        if submission.is_correct:
            state.correct_count += 1
            state.correct_streak += 1
            state.incorrect_streak = 0
        else:
            state.correct_streak = 0
            state.incorrect_streak += 1

        adjustment = adjust_difficulty(
            current_tier=state.difficulty_tier,
            correct_streak=state.correct_streak,
            incorrect_streak=state.incorrect_streak,
        )
        if adjustment.difficulty_changed:
            LOGGER.info(
                "Difficulty changed from %s to %s (%s).",
                state.difficulty_tier,
                adjustment.new_tier,
                adjustment.reason,
            )
            state.difficulty_tier = adjustment.new_tier
            state.correct_streak = 0
            state.incorrect_streak = 0

        return record

    def abandon_session(self) -> None:
        """Drop the active session without touching any learner progress."""
        state = self._require_active("abandon")
        LOGGER.info("Abandoned session after %s answers.", len(state.answers))
        self._state = None
        self._phase = SessionPhase.IDLE

    def end_session(self, progress: LearnerProgress) -> SessionResult:
        """Close the session and fold it into a copy of ``progress``.

        XP and level are updated first, then the streak, then achievements.
        The caller's record is left untouched; the returned one is provisional
        until the store confirms the write.
        """
        state = self._require_active("end")
        now = self._clock.now()

        answered = len(state.answers)
        planned = len(state.exercises)
        accuracy = state.correct_count / planned if planned else 0.0
        today = self._clock.today()
        elapsed_minutes = max(0, round_half_up((now - state.started_at).total_seconds() / 60))

        updated = progress.copy()
        level_before = updated.level
        xp_before = updated.total_xp
        updated.award_xp(state.session_xp)

        streak = update_streak(
            last_active_date=updated.last_active_date,
            current_streak=updated.current_streak,
            longest_streak=updated.longest_streak,
            today=today,
        )
        updated.current_streak = streak.new_streak
        updated.longest_streak = streak.longest_streak
        updated.last_active_date = today
        updated.record_activity(today, accuracy, elapsed_minutes)

        lesson_completed = bool(planned) and answered == planned
        if state.lesson_id is not None and lesson_completed:
            updated.complete_lesson(state.lesson_id)
        if state.skill_id is not None:
            mastered = lesson_completed and accuracy >= MASTERY_ACCURACY
            updated.advance_skill(state.skill_id, SkillStatus.MASTERED if mastered else SkillStatus.IN_PROGRESS)

        event = ActivityEvent(accuracy=accuracy, exercises_completed=answered)
        unlocked = unlock_all_earned(updated, event, self._achievements)
        updated.daily(today).xp_earned += updated.total_xp - xp_before

        new_level = updated.level if updated.level != level_before else None
        if new_level is not None:
            LOGGER.info("Level up from %s to %s.", level_before, new_level)

        summary = SessionSummary(
            total_xp=state.session_xp,
            accuracy=accuracy,
            time_spent_minutes=elapsed_minutes,
            exercises_completed=answered,
            new_level=new_level,
        )
        LOGGER.info(
            "Completed session: %s XP, accuracy %.2f, %s exercises.",
            summary.total_xp,
            summary.accuracy,
            summary.exercises_completed,
        )

        self._state = None
        self._phase = SessionPhase.COMPLETED
        return SessionResult(
            summary=summary,
            progress=updated,
            streak=streak,
            unlocked_achievements=unlocked,
            lesson_completed=lesson_completed,
        )
