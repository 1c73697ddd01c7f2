from __future__ import annotations

from enum import Enum

from .drill_core import (
    ANSWER_FIELD,
    MAX_NUMBER_FIELD,
    TOTAL_QUESTIONS_FIELD,
    AnswerResult,
    Summary,
)


class AccuracyBand(str, Enum):
    SUCCESS = "success"
    PRIMARY = "primary"
    ERROR = "error"


BAND_COLORS: dict[AccuracyBand, tuple[int, int, int]] = {
    AccuracyBand.SUCCESS: (76, 196, 120),
    AccuracyBand.PRIMARY: (108, 150, 240),
    AccuracyBand.ERROR: (232, 96, 96),
}

# UI copy is hard-coded Polish.
FIELD_MESSAGES: dict[str, str] = {
    TOTAL_QUESTIONS_FIELD: "Liczba zadań musi być od 1 do 100",
    MAX_NUMBER_FIELD: "Maksymalna liczba musi być od 2 do 9",
    ANSWER_FIELD: "Proszę wpisać liczbę",
}


def format_elapsed(seconds: int) -> str:
    """Format whole seconds as ``MM:SS``; minutes are not wrapped at 60."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def accuracy_band(percent: int) -> AccuracyBand:
    if percent >= 90:
        return AccuracyBand.SUCCESS
    if percent >= 70:
        return AccuracyBand.PRIMARY
    return AccuracyBand.ERROR


def accuracy_color(percent: int) -> tuple[int, int, int]:
    return BAND_COLORS[accuracy_band(percent)]


def progress_text(question_number: int, total_questions: int) -> str:
    return f"Pytanie {question_number} z {total_questions}"


def feedback_text(result: AnswerResult) -> str:
    if result.is_correct:
        return "✓ Prawidłowo!"
    return f"✗ Nieprawidłowo. Prawidłowa odpowiedź: {result.correct_answer}"


def field_message(field_name: str) -> str:
    return FIELD_MESSAGES.get(field_name, "Nieprawidłowa wartość")


def summary_lines(summary: Summary) -> list[str]:
    """Lines shown on the results screen, top to bottom."""
    return [
        f"Liczba zadań: {summary.total_questions}",
        f"Liczba błędów: {summary.error_count}",
        f"Czas: {format_elapsed(summary.elapsed_seconds)}",
        f"Dokładność: {summary.accuracy_percent}%",
    ]
