"""Deterministic session controller for the multiplication drill.

The controller owns the whole state of one quiz run: configuration, the
current operand pair, the error tally, the recency window used to avoid
repeating a question too soon, and the start/end timestamps.  It does not
import pygame; the UI layer calls into it and renders whatever it returns.

Time is read through an injected ``Clock`` and operands come from a seeded
``random.Random``, so a scripted run with a fake clock is fully reproducible.

The flow of one session is::

    configure -> (generate_next_question -> record_answer -> advance)* -> finish

``record_answer`` never moves to the next question by itself.  The caller
decides when to call ``advance`` (the UI waits for the feedback delay first).
"""

from __future__ import annotations

import logging
import math
import random
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .clock import Clock

logger = logging.getLogger(__name__)

MIN_QUESTIONS = 1
MAX_QUESTIONS = 100
MIN_MAX_NUMBER = 2
MAX_MAX_NUMBER = 9

OPERAND_MIN = 2
OPERAND_MAX = 9

RECENT_WINDOW = 10
MAX_GENERATION_ATTEMPTS = 50

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")

TOTAL_QUESTIONS_FIELD = "total_questions"
MAX_NUMBER_FIELD = "max_number"
ANSWER_FIELD = "answer"

NOT_A_NUMBER = "not a number"


class SessionState(str, Enum):
    UNCONFIGURED = "unconfigured"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    reason: str


class ValidationError(ValueError):
    """Rejected user input.

    Carries one ``FieldError`` per offending field so that a single call to
    ``configure`` can report both bad settings at once.  The controller state
    is never modified when this is raised.
    """

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors: tuple[FieldError, ...] = tuple(errors)
        if not self.errors:
            raise ValueError("ValidationError requires at least one field error")
        super().__init__("; ".join(f"{e.field}: {e.reason}" for e in self.errors))

    @property
    def field(self) -> str:
        return self.errors[0].field

    @property
    def reason(self) -> str:
        return self.errors[0].reason

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(e.field for e in self.errors)

    def reason_for(self, field_name: str) -> str | None:
        for e in self.errors:
            if e.field == field_name:
                return e.reason
        return None


@dataclass(frozen=True, slots=True)
class Question:
    a: int
    b: int

    @property
    def key(self) -> str:
        return f"{self.a}×{self.b}"

    @property
    def answer(self) -> int:
        return self.a * self.b

    @property
    def prompt(self) -> str:
        return f"{self.a} × {self.b} = ?"


@dataclass(frozen=True, slots=True)
class AnswerResult:
    is_correct: bool
    correct_answer: int
    user_answer: int


@dataclass(frozen=True, slots=True)
class Summary:
    total_questions: int
    error_count: int
    elapsed_seconds: int
    accuracy_percent: int

    @property
    def correct_count(self) -> int:
        return self.total_questions - self.error_count


@dataclass(slots=True)
class Session:
    """Mutable state of one quiz run, owned by a ``SessionController``."""

    total_questions: int
    max_number: int
    start_time: float
    current_question_index: int = 0
    error_count: int = 0
    current_operands: tuple[int, int] | None = None
    correct_answer: int | None = None
    recent_question_keys: list[str] = field(default_factory=list)
    end_time: float | None = None

    @property
    def elapsed_seconds(self) -> int | None:
        if self.end_time is None:
            return None
        return max(0, int(math.floor(self.end_time - self.start_time)))


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    state: SessionState
    question_number: int
    total_questions: int
    progress: float
    prompt: str
    error_count: int
    last_result: AnswerResult | None = None


class QuestionGenerator:
    """Draws operand pairs with a bounded retry against recent repeats.

    One operand is uniform on ``[2, max_number]`` and the other uniform on
    ``[2, 9]``; a fair coin decides which of them is written first.  A pair
    whose key is already in the recency window is redrawn, up to
    ``MAX_GENERATION_ATTEMPTS`` times.  When every attempt collides (small
    operand spaces such as ``max_number=2``) the last draw is used anyway, so
    this reduces repetition but does not rule it out.
    """

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def draw(self, *, max_number: int) -> Question:
        limited = self._rng.randint(OPERAND_MIN, max_number)
        full = self._rng.randint(OPERAND_MIN, OPERAND_MAX)
        if self._rng.random() < 0.5:
            return Question(limited, full)
        return Question(full, limited)

    def next_question(self, *, max_number: int, recent: Sequence[str]) -> Question:
        question = self.draw(max_number=max_number)
        attempts = 1
        while question.key in recent and attempts < MAX_GENERATION_ATTEMPTS:
            question = self.draw(max_number=max_number)
            attempts += 1
        if question.key in recent:
            logger.debug(
                "No fresh question after %d attempts (max_number=%d); repeating %s",
                attempts,
                max_number,
                question.key,
            )
        return question


class SessionController:
    """Owns one drill session and drives it through its states.

    UNCONFIGURED -> IN_PROGRESS -> COMPLETED

    ``configure`` may be called at any time and always starts a new session,
    discarding the previous one.  Calls made in the wrong state raise
    ``RuntimeError``; bad user input raises ``ValidationError``.
    """

    def __init__(self, *, clock: Clock, seed: int | None = None) -> None:
        self._clock = clock
        self._seed = seed
        self._generator = QuestionGenerator(random.Random(seed))

        self._state = SessionState.UNCONFIGURED
        self._session: Session | None = None
        self._current: Question | None = None
        self._last_result: AnswerResult | None = None
        self._summary: Summary | None = None

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def current_question(self) -> Question | None:
        return self._current

    @property
    def last_result(self) -> AnswerResult | None:
        return self._last_result

    def configure(self, total_questions: int | str, max_number: int | str) -> Session:
        """Validate settings and start a fresh session.

        Both fields are checked independently; every failure is reported in
        one ``ValidationError``.
        """
        errors: list[FieldError] = []

        total = _parse_int(total_questions)
        if total is None:
            errors.append(FieldError(TOTAL_QUESTIONS_FIELD, NOT_A_NUMBER))
        elif not (MIN_QUESTIONS <= total <= MAX_QUESTIONS):
            errors.append(
                FieldError(TOTAL_QUESTIONS_FIELD, f"must be between {MIN_QUESTIONS} and {MAX_QUESTIONS}")
            )

        maximum = _parse_int(max_number)
        if maximum is None:
            errors.append(FieldError(MAX_NUMBER_FIELD, NOT_A_NUMBER))
        elif not (MIN_MAX_NUMBER <= maximum <= MAX_MAX_NUMBER):
            errors.append(
                FieldError(MAX_NUMBER_FIELD, f"must be between {MIN_MAX_NUMBER} and {MAX_MAX_NUMBER}")
            )

        if errors:
            raise ValidationError(errors)
        assert total is not None and maximum is not None

        self._session = Session(
            total_questions=total,
            max_number=maximum,
            start_time=self._clock.now(),
        )
        self._state = SessionState.IN_PROGRESS
        self._current = None
        self._last_result = None
        self._summary = None
        logger.debug("Session configured: %d questions, max number %d", total, maximum)
        return self._session

    def generate_next_question(self) -> Question:
        """Deal a new operand pair; the question index is left unchanged."""
        session = self._require_in_progress()
        question = self._generator.next_question(
            max_number=session.max_number,
            recent=session.recent_question_keys,
        )

        session.recent_question_keys.append(question.key)
        del session.recent_question_keys[:-RECENT_WINDOW]
        session.current_operands = (question.a, question.b)
        session.correct_answer = question.answer

        self._current = question
        self._last_result = None
        return question

    def record_answer(self, user_input: int | str) -> AnswerResult:
        """Score an answer for the current question.

        Each generated question takes one answer.  Does not advance; call
        ``advance`` when the caller is ready to move on.
        """
        session = self._require_in_progress()
        if self._current is None or session.correct_answer is None:
            raise RuntimeError("No question has been generated")
        if self._last_result is not None:
            raise RuntimeError("Current question has already been answered")

        value = _parse_int(user_input)
        if value is None:
            raise ValidationError([FieldError(ANSWER_FIELD, NOT_A_NUMBER)])

        is_correct = value == session.correct_answer
        if not is_correct:
            session.error_count += 1

        result = AnswerResult(
            is_correct=is_correct,
            correct_answer=session.correct_answer,
            user_answer=value,
        )
        self._last_result = result
        return result

    def advance(self) -> SessionState:
        session = self._require_in_progress()
        session.current_question_index += 1
        self._current = None
        self._last_result = None

        if session.current_question_index < session.total_questions:
            return SessionState.IN_PROGRESS
        self._state = SessionState.COMPLETED
        return SessionState.COMPLETED

    def finish(self) -> Summary:
        """Stop the timer and return the summary.

        Finishing before the last question ends the session early.  Repeated
        calls return the summary computed the first time.
        """
        if self._summary is not None:
            return self._summary
        session = self._require_session()

        session.end_time = self._clock.now()
        self._state = SessionState.COMPLETED
        self._current = None

        elapsed = session.elapsed_seconds
        assert elapsed is not None
        self._summary = Summary(
            total_questions=session.total_questions,
            error_count=session.error_count,
            elapsed_seconds=elapsed,
            accuracy_percent=accuracy_percent(session.total_questions, session.error_count),
        )
        logger.debug(
            "Session finished: %d/%d correct in %ds",
            self._summary.correct_count,
            self._summary.total_questions,
            elapsed,
        )
        return self._summary

    def snapshot(self) -> DrillSnapshot:
        session = self._session
        if session is None:
            return DrillSnapshot(
                state=self._state,
                question_number=0,
                total_questions=0,
                progress=0.0,
                prompt="",
                error_count=0,
            )
        total = session.total_questions
        index = session.current_question_index
        return DrillSnapshot(
            state=self._state,
            question_number=min(index + 1, total),
            total_questions=total,
            progress=min(1.0, index / total),
            prompt="" if self._current is None else self._current.prompt,
            error_count=session.error_count,
            last_result=self._last_result,
        )

    def _require_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Session has not been configured")
        return self._session

    def _require_in_progress(self) -> Session:
        session = self._require_session()
        if self._state is not SessionState.IN_PROGRESS:
            raise RuntimeError("Session is already completed")
        return session


def accuracy_percent(total_questions: int, error_count: int) -> int:
    """Share of correct answers as a whole percentage, rounded half up."""
    if total_questions <= 0:
        return 0
    correct = total_questions - error_count
    return (200 * correct + total_questions) // (2 * total_questions)


def _parse_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if _INTEGER_TEXT.fullmatch(s) is None:
        return None
    return int(s)
