#!/usr/bin/env python3
"""
session.py - Input method session (入力セッション)

================================================================================
OVERVIEW / 概要
================================================================================

IMESession ties the two conversion stages together:

    Key source ──► IMESession ──► RomajiProcessor  (ローマ字→かな)
                        │    └──► HenkanProcessor  (かな→漢字)
                        ├──► DisplaySink  (preview / candidates / status)
                        └──► TextSink     (committed text / 確定文字列)

================================================================================
STATES / 状態
================================================================================

    INPUT   : romaji is being typed, the preview shows kana
              ローマ字入力中。プレビューはかな
    CONVERT : a segment is being converted, the preview shows
              confirmed segments + current candidate + remaining reading
              変換中。プレビューは 確定済み + 現在の候補 + 残りの読み

    INPUT ──Space──► CONVERT ──Enter (last segment)──► INPUT
                        │ ▲
                        └─┘ Enter (more segments left: chain to the next one)

Segments confirmed while chaining are collected in committed_text and sent
to the TextSink in one append() call when the conversion finishes.
連続変換で確定した文節は committed_text に溜め、変換終了時に一度だけ
TextSink に送る。

================================================================================
"""

from abc import ABC, abstractmethod
from enum import Enum
import logging

logger = logging.getLogger(__name__)

STATUS_ENABLED = 'あ'
STATUS_DISABLED = 'A'
SELECTION_DIGITS = '123456789'


class SessionState(Enum):
    INPUT = 'input'
    CONVERT = 'convert'


class DisplaySink(ABC):
    """Receives what the user should currently see."""

    @abstractmethod
    def show_preview(self, text):
        """Show the text being composed ('' clears the preview)."""

    @abstractmethod
    def show_candidates(self, candidates, highlight_index):
        """Show the candidate list; an empty list clears it."""

    @abstractmethod
    def show_status(self, text):
        """Show the input mode indicator (あ / A)."""


class TextSink(ABC):
    """Receives committed text."""

    @abstractmethod
    def append(self, text):
        pass


class NullDisplay(DisplaySink):
    """Display sink that shows nothing, for headless use."""

    def show_preview(self, text):
        pass

    def show_candidates(self, candidates, highlight_index):
        pass

    def show_status(self, text):
        pass


class IMESession:
    """
    The input method state machine.
    入力メソッドの状態マシン。

    One session owns one RomajiProcessor and one HenkanProcessor. Every
    event method processes a single logical key completely (state change
    and sink calls) before returning.

    Args:
        romaji: RomajiProcessor instance
        henkan: HenkanProcessor instance
        display: DisplaySink (defaults to NullDisplay)
        text_sink: TextSink receiving committed text (optional)
        enabled: Initial state of the IME (False = direct input)
        max_digit_selection: Number of candidates selectable with 1..9
    """

    def __init__(self, romaji, henkan, display=None, text_sink=None,
                 enabled=True, max_digit_selection=9):
        self._romaji = romaji
        self._henkan = henkan
        self._display = display if display is not None else NullDisplay()
        self._text_sink = text_sink
        self._enabled = enabled
        self._max_digit_selection = max(0, min(max_digit_selection, len(SELECTION_DIGITS)))

        self._state = SessionState.INPUT
        self._pre_conversion_reading = ''  # reading handed to the last start_conversion()
        self._committed_text = ''          # segments confirmed while chaining

        self._update_status()
        self._clear_display()

    @property
    def state(self):
        return self._state

    @property
    def enabled(self):
        return self._enabled

    # ─── Key Events ───────────────────────────────────────────────────────

    def on_character(self, text):
        if not self._enabled:
            self._output(text)
            return

        if self._state == SessionState.CONVERT:
            if self._try_select_candidate_by_key(text):
                return
            self._commit_conversion()

        self._romaji.add_input(text)
        self._update_input_display()

    def on_space(self):
        if not self._enabled:
            self._output(' ')
            return

        if self._state == SessionState.INPUT:
            self._start_conversion()
        else:
            self._henkan.next_candidate()
            self._update_candidate_display()

    def on_enter(self):
        if not self._enabled:
            self._output('\n')
            return

        if self._state == SessionState.CONVERT:
            self._commit_conversion()
        else:
            self._output(self._romaji.commit())
            self._clear_display()

    def on_backspace(self):
        if self._state == SessionState.CONVERT:
            self._cancel_conversion()
        else:
            self._romaji.backspace()
            self._update_input_display()

    def on_escape(self):
        if self._state == SessionState.CONVERT:
            self._cancel_conversion()
        else:
            self._romaji.clear()
        self._clear_display()

    def on_toggle_enabled(self):
        self._enabled = not self._enabled
        logger.debug(f'IMESession: enabled={self._enabled}')
        self._update_status()
        if not self._enabled:
            self.on_escape()

    def on_shrink_segment(self):
        if self._state == SessionState.CONVERT and self._henkan.shrink_segment():
            self._update_candidate_display()

    def on_extend_segment(self):
        if self._state == SessionState.CONVERT and self._henkan.extend_segment():
            self._update_candidate_display()

    def on_commit_as_hiragana(self):
        if self._state == SessionState.INPUT:
            self._output(self._romaji.commit())
            self._clear_display()
            return
        self._commit_segment_as(self._henkan.get_current_reading())

    def on_commit_as_katakana(self):
        if self._state == SessionState.INPUT:
            self._output(self._henkan.get_katakana_for(self._romaji.commit()))
            self._clear_display()
            return
        self._commit_segment_as(self._henkan.get_current_reading_as_katakana())

    # ─── Conversion Flow ──────────────────────────────────────────────────

    def _start_conversion(self):
        reading = self._romaji.commit()
        if not reading:
            return

        self._pre_conversion_reading = reading
        if self._henkan.start_conversion(reading):
            self._state = SessionState.CONVERT
            self._update_candidate_display()
        else:
            # No conversion possible; output the kana as typed
            self._output(reading)
            self._pre_conversion_reading = ''
            self._clear_display()

    def _try_select_candidate_by_key(self, key):
        if len(key) != 1 or key not in SELECTION_DIGITS[:self._max_digit_selection]:
            return False
        if not self._henkan.try_select_candidate(SELECTION_DIGITS.index(key)):
            return False
        self._commit_conversion()
        return True

    def _commit_conversion(self):
        """
        Confirm the selected candidate of the current segment and move on to
        the remaining reading, if any.
        """
        self._commit_segment_as(self._henkan.get_current_candidate())

    def _commit_segment_as(self, text):
        remainder = self._henkan.get_remaining_reading()
        logger.debug(f'IMESession commit: segment="{text}" remainder="{remainder}" '
                     f'committed_so_far="{self._committed_text}"')

        self._committed_text += text
        self._henkan.reset()

        if remainder:
            if self._henkan.start_conversion(remainder):
                # Stay in CONVERT with the next segment
                self._pre_conversion_reading = remainder
                self._update_candidate_display()
                return
            self._committed_text += remainder
        self._finish()

    def _finish(self):
        if self._committed_text:
            self._output(self._committed_text)
        self._committed_text = ''
        self._pre_conversion_reading = ''
        self._state = SessionState.INPUT
        self._clear_display()

    def _cancel_conversion(self):
        """
        Abandon the current segment. Segments confirmed earlier in the chain
        are sent out; the abandoned reading is shown as plain kana but is
        not put back into the romaji buffer.
        """
        self._henkan.reset()
        self._state = SessionState.INPUT

        if self._committed_text:
            self._output(self._committed_text)
            self._committed_text = ''

        logger.debug(f'IMESession: conversion of "{self._pre_conversion_reading}" cancelled')
        self._display.show_preview(self._pre_conversion_reading)
        self._display.show_candidates([], -1)

    # ─── Sinks ────────────────────────────────────────────────────────────

    def _output(self, text):
        if not text:
            return
        logger.debug(f'IMESession output: "{text}"')
        if self._text_sink is not None:
            self._text_sink.append(text)

    def _update_input_display(self):
        self._display.show_preview(self._romaji.get_display_text())
        self._display.show_candidates([], -1)

    def _update_candidate_display(self):
        preview = (self._committed_text
                   + self._henkan.get_current_candidate()
                   + self._henkan.get_remaining_reading())
        self._display.show_preview(preview)
        self._display.show_candidates(self._henkan.get_candidates(),
                                      self._henkan.get_candidate_index())

    def _update_status(self):
        self._display.show_status(STATUS_ENABLED if self._enabled else STATUS_DISABLED)

    def _clear_display(self):
        self._display.show_preview('')
        self._display.show_candidates([], -1)
        self._committed_text = ''
