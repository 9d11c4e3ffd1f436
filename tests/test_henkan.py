#!/usr/bin/env python3
# tests/test_henkan.py - Unit tests for henkan.py

import pytest
import os
import sys
from unittest.mock import patch

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from dictionary import Dictionary
from henkan import HenkanProcessor


@pytest.fixture
def dictionary():
    """Small dictionary used by most tests"""
    return Dictionary.load([
        "わたし\t私,渡し",
        "は\tは,歯,葉",
        "ねこ\t猫,ネコ",
    ])


@pytest.fixture
def processor(dictionary):
    return HenkanProcessor(dictionary=dictionary)


class TestStartConversion:
    """Test suite for start_conversion()"""

    def test_lookahead_prefix_match(self, processor):
        assert processor.start_conversion("わたしは") is True

        assert processor.get_current_reading() == "わたし"
        assert processor.get_candidates() == ["私", "わたし", "渡し", "ワタシ"]
        assert processor.get_remaining_reading() == "は"
        assert processor.get_current_candidate() == "私"

    def test_exact_match_takes_precedence(self):
        dictionary = Dictionary.load([
            "わたし\t私",
            "は\tは",
            "わたしは\t私は",
        ])
        processor = HenkanProcessor(dictionary=dictionary)

        assert processor.start_conversion("わたしは") is True
        assert processor.get_current_reading() == "わたしは"
        assert processor.get_remaining_reading() == ""

    def test_lookahead_prefers_better_continuation(self):
        dictionary = Dictionary.load([
            "か\t蚊",
            "かい\t貝",
            "いしゃ\t医者",
        ])
        processor = HenkanProcessor(dictionary=dictionary)

        processor.start_conversion("かいしゃ")

        # か + いしゃ (1 + 3) beats かい + nothing (2 + 0)
        assert processor.get_current_reading() == "か"
        assert processor.get_remaining_reading() == "いしゃ"

    def test_tie_goes_to_shorter_segment(self):
        dictionary = Dictionary.load([
            "あ\t亜",
            "あい\t愛",
            "いう\t言う",
            "う\t鵜",
        ])
        processor = HenkanProcessor(dictionary=dictionary)

        processor.start_conversion("あいう")

        # あ + いう and あい + う both score 3
        assert processor.get_current_reading() == "あ"
        assert processor.get_remaining_reading() == "いう"

    def test_fallback_to_reading(self, processor):
        assert processor.start_conversion("ぬぬ") is True

        assert processor.get_current_reading() == "ぬぬ"
        assert processor.get_candidates() == ["ぬぬ", "ヌヌ"]
        assert processor.get_remaining_reading() == ""

    def test_fallback_without_katakana_variant(self, processor):
        processor.start_conversion("ーー")
        assert processor.get_candidates() == ["ーー"]

    def test_reading_kept_second_even_if_duplicated(self, processor):
        processor.start_conversion("は")
        assert processor.get_candidates() == ["は", "は", "歯", "葉", "ハ"]

    def test_empty_reading_fails_and_resets(self, processor):
        processor.start_conversion("わたしは")

        assert processor.start_conversion("") is False
        assert processor.get_candidates() == []
        assert processor.get_full_reading() == ""
        assert processor.get_matched_length() == 0

    def test_restart_resets_selection(self, processor):
        processor.start_conversion("わたし")
        processor.next_candidate()

        processor.start_conversion("わたし")
        assert processor.get_candidate_index() == 0


class TestDictionaryAvailability:
    """Test suite for the lazy dictionary retry"""

    def test_no_files_means_empty_dictionary(self):
        processor = HenkanProcessor()
        assert processor.is_ready() is True
        assert processor.start_conversion("ねこ") is True
        assert processor.get_candidates() == ["ねこ", "ネコ"]

    def test_unavailable_dictionary_fails(self, tmp_path):
        processor = HenkanProcessor(dictionary_files=[str(tmp_path / "missing.txt")])

        assert processor.is_ready() is False
        assert processor.start_conversion("ねこ") is False
        assert processor.get_candidates() == []

    def test_retry_loads_dictionary(self, dictionary):
        with patch('henkan.load_dictionaries', side_effect=[None, dictionary]) as mock_load:
            processor = HenkanProcessor(dictionary_files=["dict.txt"])
            assert processor.is_ready() is False

            assert processor.start_conversion("ねこ") is True
            assert processor.get_current_candidate() == "猫"
            assert mock_load.call_count == 2

    def test_dictionary_stats(self, processor):
        assert processor.get_dictionary_stats() == {
            'reading_count': 3,
            'candidate_count': 7,
            'ready': True,
        }

    def test_dictionary_stats_when_unavailable(self, tmp_path):
        processor = HenkanProcessor(dictionary_files=[str(tmp_path / "missing.txt")])
        assert processor.get_dictionary_stats()['ready'] is False


class TestCandidates:
    """Test suite for candidate navigation"""

    def test_next_candidate_cycles(self, processor):
        processor.start_conversion("わたし")
        candidates = processor.get_candidates()
        original = processor.get_current_candidate()

        seen = [processor.next_candidate() for _ in range(len(candidates))]

        assert seen == candidates[1:] + candidates[:1]
        assert processor.get_current_candidate() == original

    def test_previous_candidate_wraps(self, processor):
        processor.start_conversion("わたし")
        assert processor.previous_candidate() == "ワタシ"
        assert processor.previous_candidate() == "渡し"

    def test_try_select_candidate(self, processor):
        processor.start_conversion("わたし")

        assert processor.try_select_candidate(2) is True
        assert processor.get_current_candidate() == "渡し"

    def test_try_select_candidate_out_of_range(self, processor):
        processor.start_conversion("わたし")
        processor.try_select_candidate(1)

        assert processor.try_select_candidate(4) is False
        assert processor.try_select_candidate(-1) is False
        assert processor.get_candidate_index() == 1

    def test_navigation_without_conversion(self, processor):
        assert processor.next_candidate() == ""
        assert processor.previous_candidate() == ""
        assert processor.try_select_candidate(0) is False


class TestSegmentResize:
    """Test suite for shrink_segment() / extend_segment()"""

    def test_shrink_uses_literal_on_miss(self, processor):
        processor.start_conversion("わたしは")

        assert processor.shrink_segment() is True
        assert processor.get_current_reading() == "わた"
        assert processor.get_candidates() == ["わた", "ワタ"]
        assert processor.get_remaining_reading() == "しは"

    def test_shrink_stops_at_one_character(self, processor):
        processor.start_conversion("わたしは")
        processor.shrink_segment()
        processor.shrink_segment()
        assert processor.get_matched_length() == 1

        assert processor.shrink_segment() is False
        assert processor.get_matched_length() == 1
        assert processor.get_current_reading() == "わ"

    def test_extend_uses_exact_match(self, processor):
        processor.start_conversion("わたしは")
        processor.shrink_segment()

        assert processor.extend_segment() is True
        assert processor.get_current_reading() == "わたし"
        assert processor.get_candidates() == ["私", "わたし", "渡し", "ワタシ"]

    def test_extend_stops_at_full_reading(self, processor):
        processor.start_conversion("わたしは")

        assert processor.extend_segment() is True
        assert processor.get_matched_length() == 4
        assert processor.get_remaining_reading() == ""

        assert processor.extend_segment() is False
        assert processor.get_matched_length() == 4

    def test_resize_resets_selection(self, processor):
        processor.start_conversion("わたしは")
        processor.next_candidate()

        processor.shrink_segment()
        assert processor.get_candidate_index() == 0

    def test_resize_without_conversion(self, processor):
        assert processor.shrink_segment() is False
        assert processor.extend_segment() is False


class TestKatakana:
    """Test suite for katakana helpers and reset()"""

    def test_current_reading_as_katakana(self, processor):
        processor.start_conversion("わたしは")
        assert processor.get_current_reading_as_katakana() == "ワタシ"

    def test_katakana_for_text(self, processor):
        assert processor.get_katakana_for("らーめん") == "ラーメン"
        assert processor.get_katakana_for("") == ""

    def test_reset_is_idempotent(self, processor):
        processor.start_conversion("わたしは")
        processor.reset()
        processor.reset()

        assert processor.get_candidates() == []
        assert processor.get_remaining_reading() == ""
        assert processor.get_current_reading_as_katakana() == ""
