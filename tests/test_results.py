from __future__ import annotations

import pytest

from multiplication_drill.drill_core import (
    ANSWER_FIELD,
    MAX_NUMBER_FIELD,
    TOTAL_QUESTIONS_FIELD,
    AnswerResult,
    Summary,
)
from multiplication_drill.results import (
    BAND_COLORS,
    AccuracyBand,
    accuracy_band,
    accuracy_color,
    feedback_text,
    field_message,
    format_elapsed,
    progress_text,
    summary_lines,
)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00"), (9, "00:09"), (61, "01:01"), (3599, "59:59"), (3600, "60:00"), (-5, "00:00")],
)
def test_format_elapsed(seconds: int, expected: str) -> None:
    assert format_elapsed(seconds) == expected


@pytest.mark.parametrize(
    ("percent", "band"),
    [
        (100, AccuracyBand.SUCCESS),
        (90, AccuracyBand.SUCCESS),
        (89, AccuracyBand.PRIMARY),
        (70, AccuracyBand.PRIMARY),
        (69, AccuracyBand.ERROR),
        (0, AccuracyBand.ERROR),
    ],
)
def test_accuracy_band_thresholds(percent: int, band: AccuracyBand) -> None:
    assert accuracy_band(percent) is band
    assert accuracy_color(percent) == BAND_COLORS[band]


def test_progress_and_feedback_text() -> None:
    assert progress_text(3, 10) == "Pytanie 3 z 10"
    assert feedback_text(AnswerResult(is_correct=True, correct_answer=12, user_answer=12)) == "✓ Prawidłowo!"
    assert (
        feedback_text(AnswerResult(is_correct=False, correct_answer=12, user_answer=13))
        == "✗ Nieprawidłowo. Prawidłowa odpowiedź: 12"
    )


def test_field_messages() -> None:
    assert field_message(TOTAL_QUESTIONS_FIELD) == "Liczba zadań musi być od 1 do 100"
    assert field_message(MAX_NUMBER_FIELD) == "Maksymalna liczba musi być od 2 do 9"
    assert field_message(ANSWER_FIELD) == "Proszę wpisać liczbę"
    assert field_message("unknown") == "Nieprawidłowa wartość"


def test_summary_lines() -> None:
    summary = Summary(total_questions=10, error_count=3, elapsed_seconds=125, accuracy_percent=70)
    assert summary_lines(summary) == [
        "Liczba zadań: 10",
        "Liczba błędów: 3",
        "Czas: 02:05",
        "Dokładność: 70%",
    ]
