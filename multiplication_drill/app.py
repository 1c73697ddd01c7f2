"""Pygame UI shell for the multiplication drill.

Three screens share one SessionController:
- Settings (question count and largest multiplier)
- Practice (question, answer entry, feedback)
- Results (errors, time and accuracy)

Deterministic timing/scoring/RNG/state lives in multiplication_drill.drill_core.
The only timing owned here is the pause between answer feedback and the next
question, measured on the injected clock.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .clock import Clock, RealClock
from .config import DrillConfig
from .drill_core import (
    ANSWER_FIELD,
    MAX_NUMBER_FIELD,
    TOTAL_QUESTIONS_FIELD,
    SessionController,
    SessionState,
    Summary,
    ValidationError,
)
from .results import (
    accuracy_color,
    feedback_text,
    field_message,
    progress_text,
    summary_lines,
)

logger = logging.getLogger(__name__)

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
TEXT_ERROR = (240, 120, 120)
TEXT_OK = (120, 220, 150)
BOX_FILL = (246, 250, 255)
BOX_BORDER = (142, 168, 210)
BOX_FOCUS = (255, 206, 84)
INPUT_COLOR = (12, 26, 88)

MAX_SETTING_CHARS = 3
MAX_ANSWER_CHARS = 4


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def replace(self, screen: Screen) -> None:
        if len(self._screens) > 1:
            self._screens.pop()
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


@dataclass(slots=True)
class _TextField:
    name: str
    label: str
    text: str


def _typed_digit(event: pygame.event.Event) -> str | None:
    ch = getattr(event, "unicode", "")
    if ch and len(ch) == 1 and ch.isdigit():
        return ch
    return None


def _draw_frame(surface: pygame.Surface) -> pygame.Rect:
    w, h = surface.get_size()
    surface.fill(BG)
    margin = max(10, min(26, w // 34))
    frame = pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))
    pygame.draw.rect(surface, PANEL_BG, frame)
    pygame.draw.rect(surface, BORDER, frame, 2)
    return frame


class SettingsScreen:
    """Root screen: collects the question count and the largest multiplier."""

    def __init__(
        self,
        app: App,
        *,
        controller: SessionController,
        clock: Clock,
        config: DrillConfig,
    ) -> None:
        self._app = app
        self._controller = controller
        self._clock = clock
        self._config = config
        self._fields = [
            _TextField(TOTAL_QUESTIONS_FIELD, "Liczba zadań (1-100)", str(config.default_total_questions)),
            _TextField(MAX_NUMBER_FIELD, "Maksymalna liczba (2-9)", str(config.default_max_number)),
        ]
        self._focus = 0
        self._errors: dict[str, str] = {}

        self._title_font = pygame.font.Font(None, 46)
        self._label_font = pygame.font.Font(None, 30)
        self._input_font = pygame.font.Font(None, 44)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    def set_value(self, field_name: str, text: str) -> None:
        for f in self._fields:
            if f.name == field_name:
                f.text = text
                self._errors.pop(field_name, None)
                return
        raise KeyError(field_name)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_DOWN, pygame.K_TAB):
            self._focus = (self._focus + (-1 if key == pygame.K_UP else 1)) % len(self._fields)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._start()
        elif key == pygame.K_ESCAPE:
            self._app.quit()
        elif key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            focused = self._fields[self._focus]
            focused.text = focused.text[:-1]
            self._errors.pop(focused.name, None)
        else:
            digit = _typed_digit(event)
            if digit is None:
                return
            focused = self._fields[self._focus]
            if len(focused.text) < MAX_SETTING_CHARS:
                focused.text += digit
            self._errors.pop(focused.name, None)

    def _start(self) -> None:
        values = {f.name: f.text for f in self._fields}
        try:
            self._controller.configure(values[TOTAL_QUESTIONS_FIELD], values[MAX_NUMBER_FIELD])
        except ValidationError as exc:
            self._errors = {name: field_message(name) for name in exc.fields}
            for idx, f in enumerate(self._fields):
                if f.name in self._errors:
                    self._focus = idx
                    break
            return

        self._errors = {}
        self._controller.generate_next_question()
        self._app.push(
            PracticeScreen(
                self._app,
                controller=self._controller,
                clock=self._clock,
                feedback_delay_s=self._config.feedback_delay_s,
            )
        )

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface)

        title = self._title_font.render("Tabliczka mnożenia", True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 24)))

        box_w = max(200, min(320, int(frame.w * 0.4)))
        box_h = 52
        y = frame.y + 110
        caret = "|" if (pygame.time.get_ticks() // 500) % 2 == 0 else ""
        for idx, f in enumerate(self._fields):
            focused = idx == self._focus
            label = self._label_font.render(f.label, True, TEXT_MUTED)
            surface.blit(label, label.get_rect(midbottom=(frame.centerx, y - 6)))

            box = pygame.Rect(frame.centerx - box_w // 2, y, box_w, box_h)
            pygame.draw.rect(surface, BOX_FILL, box)
            pygame.draw.rect(surface, BOX_FOCUS if focused else BOX_BORDER, box, 3 if focused else 2)
            entry = self._input_font.render(f.text + (caret if focused else ""), True, INPUT_COLOR)
            surface.blit(entry, (box.x + 12, box.y + (box.h - entry.get_height()) // 2))

            error = self._errors.get(f.name)
            if error:
                err = self._hint_font.render(error, True, TEXT_ERROR)
                surface.blit(err, err.get_rect(midtop=(frame.centerx, box.bottom + 6)))
            y += box_h + 96

        footer = "Enter: Start  |  Góra/Dół/Tab: Zmiana pola  |  Esc: Wyjście"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class PracticeScreen:
    """Question/answer loop for one configured session.

    After an answer is recorded the input is locked until the feedback delay
    has elapsed on the clock; the next frame then advances the controller.
    """

    def __init__(
        self,
        app: App,
        *,
        controller: SessionController,
        clock: Clock,
        feedback_delay_s: float,
    ) -> None:
        if feedback_delay_s < 0:
            raise ValueError("feedback_delay_s must be >= 0")
        self._app = app
        self._controller = controller
        self._clock = clock
        self._feedback_delay_s = float(feedback_delay_s)

        self._input = ""
        self._error: str | None = None
        self._advance_at: float | None = None

        self._header_font = pygame.font.Font(None, 28)
        self._prompt_font = pygame.font.Font(None, 112)
        self._input_font = pygame.font.Font(None, 58)
        self._small_font = pygame.font.Font(None, 26)

    @property
    def locked(self) -> bool:
        return self._advance_at is not None

    @property
    def input_text(self) -> str:
        return self._input

    @property
    def error(self) -> str | None:
        return self._error

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_ESCAPE:
            # Abandon the session; the settings screen starts a new one.
            self._app.pop()
            return
        if self.locked:
            return

        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit()
        elif event.key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            self._input = self._input[:-1]
            self._error = None
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            if not self._input:
                self._input = "-"
                self._error = None
        else:
            digit = _typed_digit(event)
            if digit is not None and len(self._input) < MAX_ANSWER_CHARS:
                self._input += digit
                self._error = None

    def _submit(self) -> None:
        try:
            self._controller.record_answer(self._input)
        except ValidationError:
            self._error = field_message(ANSWER_FIELD)
            return
        self._error = None
        self._advance_at = self._clock.now() + self._feedback_delay_s

    def update(self) -> None:
        if self._advance_at is None or self._clock.now() < self._advance_at:
            return
        self._advance_at = None
        self._input = ""

        if self._controller.advance() is SessionState.IN_PROGRESS:
            self._controller.generate_next_question()
            return

        summary = self._controller.finish()
        self._app.replace(ResultsScreen(self._app, summary=summary))

    def render(self, surface: pygame.Surface) -> None:
        self.update()
        if self._app.top is not self:
            return

        snap = self._controller.snapshot()
        frame = _draw_frame(surface)

        text = progress_text(snap.question_number, snap.total_questions)
        progress = self._header_font.render(text, True, TEXT_MUTED)
        surface.blit(progress, progress.get_rect(midtop=(frame.centerx, frame.y + 12)))

        bar = pygame.Rect(frame.x + 24, frame.y + 44, frame.w - 48, 12)
        pygame.draw.rect(surface, (6, 13, 92), bar)
        filled = bar.copy()
        filled.w = int(round(bar.w * snap.progress))
        if filled.w > 0:
            pygame.draw.rect(surface, BOX_BORDER, filled)
        pygame.draw.rect(surface, (78, 102, 170), bar, 1)

        prompt = self._prompt_font.render(snap.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(center=(frame.centerx, frame.y + int(frame.h * 0.34))))

        w, h = surface.get_size()
        box_w = max(220, min(380, int(w * 0.42)))
        box_h = max(52, min(66, int(h * 0.12)))
        box = pygame.Rect((w - box_w) // 2, int(h * 0.55), box_w, box_h)
        pygame.draw.rect(surface, BOX_FILL, box)
        pygame.draw.rect(surface, BOX_BORDER, box, 2)
        caret = "" if self.locked or (pygame.time.get_ticks() // 500) % 2 else "|"
        entry = self._input_font.render(self._input + caret, True, INPUT_COLOR)
        surface.blit(entry, (box.x + 12, box.y + max(2, (box.h - entry.get_height()) // 2)))

        message: str | None = None
        color = TEXT_MUTED
        if self._error is not None:
            message, color = self._error, TEXT_ERROR
        elif snap.last_result is not None:
            message = feedback_text(snap.last_result)
            color = TEXT_OK if snap.last_result.is_correct else TEXT_ERROR
        if message:
            msg = self._small_font.render(message, True, color)
            surface.blit(msg, msg.get_rect(midtop=(w // 2, box.bottom + 14)))

        hint = self._small_font.render("Wpisz odpowiedź i naciśnij Enter  |  Esc: Ustawienia", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class ResultsScreen:
    def __init__(self, app: App, *, summary: Summary) -> None:
        self._app = app
        self._summary = summary
        self._lines = summary_lines(summary)
        self._title_font = pygame.font.Font(None, 52)
        self._line_font = pygame.font.Font(None, 36)
        self._accuracy_font = pygame.font.Font(None, 48)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def summary(self) -> Summary:
        return self._summary

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE, pygame.K_ESCAPE):
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        frame = _draw_frame(surface)

        title = self._title_font.render("Wyniki", True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 24)))

        # Last line is the accuracy; it gets the larger, band-coloured font.
        *rows, accuracy_line = self._lines
        y = frame.y + 100
        for line in rows:
            text = self._line_font.render(line, True, TEXT_MAIN)
            surface.blit(text, text.get_rect(midtop=(frame.centerx, y)))
            y += 48

        accuracy = self._accuracy_font.render(
            accuracy_line,
            True,
            accuracy_color(self._summary.accuracy_percent),
        )
        surface.blit(accuracy, accuracy.get_rect(midtop=(frame.centerx, y + 20)))

        hint = self._hint_font.render("Enter: Zagraj ponownie", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: DrillConfig | None = None,
) -> int:
    cfg = config if config is not None else DrillConfig.from_env()

    pygame.init()
    pygame.display.set_caption("Tabliczka mnożenia")
    surface = pygame.display.set_mode(cfg.window_size, pygame.RESIZABLE)

    frame_clock = pygame.time.Clock()

    app = App(surface=surface)
    real_clock = RealClock()
    controller = SessionController(clock=real_clock, seed=cfg.seed)
    app.push(SettingsScreen(app, controller=controller, clock=real_clock, config=cfg))
    logger.debug("Drill UI started with %s", cfg)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(cfg.target_fps)
    finally:
        pygame.quit()

    return 0
