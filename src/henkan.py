#!/usr/bin/env python3
# henkan.py - Kana to Kanji conversion (変換) processor

import logging

from dictionary import load_dictionaries
import util

logger = logging.getLogger(__name__)


class HenkanProcessor:
    """
    Processor for kana-to-kanji conversion (かな漢字変換).

    A conversion works on one segment at a time. Given a kana reading, the
    processor picks the leading part of it that is converted now (the
    segment), offers candidates for that segment, and leaves the rest of
    the reading for the next segment:

        reading "わたしはねこ"
            → segment "わたし" (私, わたし, 渡し, ワタシ), remainder "はねこ"

    Segment selection:
        1. The whole reading, if it is a dictionary entry.
        2. Otherwise the dictionary entry that is a strict prefix of the
           reading and scores best on
               len(prefix) + longest dictionary prefix of the remainder
           Ties go to the shorter prefix, which keeps particles such as
           は, が, を in their own segment.
        3. Otherwise the whole reading, unconverted.

    The segment can be resized afterwards with shrink_segment() /
    extend_segment(); resizing only uses exact dictionary matches.
    """

    def __init__(self, dictionary=None, dictionary_files=None):
        """
        Initialize the HenkanProcessor.

        Dictionary loading is synchronous. If loading fails, the processor
        stays uninitialized and start_conversion() retries once per call.

        Args:
            dictionary: A loaded Dictionary. Takes precedence over files.
            dictionary_files: List of dictionary file paths, loaded in order
                              and merged when no dictionary is given.
        """
        self._dictionary = dictionary
        self._dictionary_files = list(dictionary_files) if dictionary_files else []
        if self._dictionary is None:
            self._load_dictionaries()

        # Current segment
        self._full_reading = ''     # The reading passed to start_conversion()
        self._current_reading = ''  # The leading part being converted
        self._matched_length = 0    # len(self._current_reading)
        self._candidates = []
        self._selected_index = 0

    def _load_dictionaries(self):
        self._dictionary = load_dictionaries(self._dictionary_files)
        if self._dictionary is not None:
            logger.info(f'HenkanProcessor initialized with {len(self._dictionary)} readings')
        return self._dictionary is not None

    def is_ready(self):
        """
        Check if a dictionary is available.

        Returns:
            bool: True if dictionaries are loaded and ready for conversion
        """
        return self._dictionary is not None

    def start_conversion(self, reading):
        """
        Start converting a kana reading.

        Args:
            reading: The kana string to convert (e.g., "わたしは")

        Returns:
            bool: True if a segment was set up. False only for an empty
                  reading or when no dictionary could be loaded; the
                  processor is reset in that case.
        """
        if not self.is_ready():
            logger.debug('HenkanProcessor.start_conversion(): dictionary not ready, retrying load')
            if not self._load_dictionaries():
                self.reset()
                return False

        if not reading:
            self.reset()
            return False

        self._full_reading = reading
        self._selected_index = 0

        # 1. Whole-reading match
        entry = self._dictionary.find_exact(reading)
        if entry is not None:
            self._setup_candidates(entry)
            logger.debug(f'HenkanProcessor.start_conversion("{reading}") → exact match, '
                         f'{len(self._candidates)} candidates')
            return True

        # 2. Prefix match with one step of look-ahead
        best_entry = None
        best_score = -1
        # Shortest prefixes come first, so ">" keeps the shorter one on ties
        for entry in self._dictionary.scan_prefixes_of(reading):
            remainder = reading[len(entry.reading):]
            score = len(entry.reading) + self._dictionary.longest_prefix_length(remainder)
            if score > best_score:
                best_score = score
                best_entry = entry

        if best_entry is not None:
            self._setup_candidates(best_entry)
            logger.debug(f'HenkanProcessor.start_conversion("{reading}") → look-ahead match '
                         f'"{best_entry.reading}" (score={best_score})')
            return True

        # 3. No match - the reading itself
        self._setup_literal(reading)
        logger.debug(f'HenkanProcessor.start_conversion("{reading}") → no match, returning reading')
        return True

    def _setup_candidates(self, entry):
        """
        Build the candidate list for a dictionary hit:

            [first dictionary candidate, reading (hiragana),
             other dictionary candidates..., katakana (if different)]

        The reading sits second so that it is one step away while the
        dictionary's top candidate is still shown first.
        """
        reading = entry.reading
        self._current_reading = reading
        self._matched_length = len(reading)

        candidates = [entry.candidates[0], reading]
        candidates.extend(entry.candidates[1:])
        katakana = util.hiragana_to_katakana(reading)
        if katakana != reading:
            candidates.append(katakana)
        self._candidates = candidates

    def _setup_literal(self, reading):
        self._current_reading = reading
        self._matched_length = len(reading)
        self._candidates = [reading]
        katakana = util.hiragana_to_katakana(reading)
        if katakana != reading:
            self._candidates.append(katakana)

    # ─── Candidates ───────────────────────────────────────────────────────

    def get_candidates(self):
        """
        Get the current list of conversion candidates.

        Returns:
            list: List of candidate strings (empty when not converting)
        """
        return list(self._candidates)

    def get_candidate_index(self):
        return self._selected_index

    def get_current_candidate(self):
        """
        Get the currently selected candidate.

        Returns:
            str: The selected candidate, or the full reading if there are
                 no candidates
        """
        if not self._candidates:
            return self._full_reading
        return self._candidates[self._selected_index]

    def try_select_candidate(self, index):
        """
        Select a candidate by index.

        Args:
            index: The index of the candidate to select

        Returns:
            bool: True if the index was valid and is now selected
        """
        if 0 <= index < len(self._candidates):
            self._selected_index = index
            return True
        return False

    def next_candidate(self):
        """
        Move to the next candidate in the list, wrapping around.

        Returns:
            str: The new selected candidate
        """
        if self._candidates:
            self._selected_index = (self._selected_index + 1) % len(self._candidates)
        return self.get_current_candidate()

    def previous_candidate(self):
        """
        Move to the previous candidate in the list, wrapping around.

        Returns:
            str: The new selected candidate
        """
        if self._candidates:
            self._selected_index = (self._selected_index - 1) % len(self._candidates)
        return self.get_current_candidate()

    # ─── Segment ──────────────────────────────────────────────────────────

    def get_full_reading(self):
        return self._full_reading

    def get_current_reading(self):
        return self._current_reading

    def get_matched_length(self):
        return self._matched_length

    def get_remaining_reading(self):
        """
        Get the part of the reading after the current segment.

        Returns:
            str: The remainder, '' when the segment covers the whole reading
        """
        if not self._full_reading or self._matched_length >= len(self._full_reading):
            return ''
        return self._full_reading[self._matched_length:]

    def shrink_segment(self):
        """
        Shrink the current segment by one character.

        Returns:
            bool: False if the segment is already one character long
        """
        if not self._full_reading or self._matched_length <= 1:
            return False
        return self._adjust_segment_length(self._matched_length - 1)

    def extend_segment(self):
        """
        Extend the current segment by one character.

        Returns:
            bool: False if the segment already covers the whole reading
        """
        if not self._full_reading or self._matched_length >= len(self._full_reading):
            return False
        return self._adjust_segment_length(self._matched_length + 1)

    def _adjust_segment_length(self, new_length):
        if new_length < 1 or new_length > len(self._full_reading):
            return False

        segment = self._full_reading[:new_length]
        self._selected_index = 0

        entry = self._dictionary.find_exact(segment) if self._dictionary is not None else None
        if entry is not None:
            self._setup_candidates(entry)
        else:
            self._setup_literal(segment)

        logger.debug(f'HenkanProcessor segment resized to "{segment}" '
                     f'({len(self._candidates)} candidates)')
        return True

    # ─── Katakana ─────────────────────────────────────────────────────────

    def get_current_reading_as_katakana(self):
        return util.hiragana_to_katakana(self._current_reading)

    def get_katakana_for(self, text):
        """
        Convert any hiragana text to katakana (used for committing the
        romaji buffer as katakana without a conversion).
        """
        return util.hiragana_to_katakana(text)

    def reset(self):
        """
        Reset the processor state, clearing the segment and candidates.
        """
        self._full_reading = ''
        self._current_reading = ''
        self._matched_length = 0
        self._candidates = []
        self._selected_index = 0

    def get_dictionary_stats(self):
        """
        Get statistics about the loaded dictionary.

        Returns:
            dict: Dictionary containing:
                  - 'reading_count': Total number of unique readings
                  - 'candidate_count': Total number of candidate entries
                  - 'ready': Whether a dictionary is loaded
        """
        if self._dictionary is None:
            return {'reading_count': 0, 'candidate_count': 0, 'ready': False}
        return {
            'reading_count': len(self._dictionary),
            'candidate_count': self._dictionary.candidate_count(),
            'ready': True,
        }
