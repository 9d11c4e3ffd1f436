#!/usr/bin/env python3
# tests/test_dictionary.py - Unit tests for dictionary.py

import pytest
import os
import sys
import json
import tempfile
import shutil

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from dictionary import (
    Dictionary,
    DictionaryEntry,
    load_dictionaries,
    load_dictionary_file,
    parse_dictionary_line,
)


class TestParseDictionaryLine:
    """Test suite for parse_dictionary_line() function"""

    def test_simple_entry(self):
        reading, candidates = parse_dictionary_line("わたし\t私,渡し\n")
        assert reading == "わたし"
        assert candidates == ["私", "渡し"]

    def test_candidates_are_trimmed(self):
        reading, candidates = parse_dictionary_line("わたし\t 私 , 渡し \r\n")
        assert candidates == ["私", "渡し"]

    def test_blank_line(self):
        assert parse_dictionary_line("") == (None, None)
        assert parse_dictionary_line("   \n") == (None, None)

    def test_line_without_tab(self):
        assert parse_dictionary_line("わたし 私,渡し") == (None, None)

    def test_empty_reading(self):
        assert parse_dictionary_line("\t私") == (None, None)

    def test_empty_candidates(self):
        assert parse_dictionary_line("から\t , ,") == (None, None)


class TestDictionaryLoad:
    """Test suite for Dictionary.load()"""

    def test_load_skips_malformed_lines(self):
        lines = [
            "わたし\t私,渡し",
            "",
            "no tab here",
            "\t空",
            "は\tは,歯,葉",
        ]
        dictionary = Dictionary.load(lines)

        assert len(dictionary) == 2
        assert dictionary.find_exact("わたし") == DictionaryEntry("わたし", ("私", "渡し"))
        assert dictionary.find_exact("は").candidates == ("は", "歯", "葉")

    def test_duplicate_readings_are_merged(self):
        lines = [
            "わたし\t私,渡し",
            "わたし\t綿史,私",
        ]
        dictionary = Dictionary.load(lines)

        assert len(dictionary) == 1
        assert dictionary.find_exact("わたし").candidates == ("私", "渡し", "綿史")

    def test_duplicate_candidates_in_one_line(self):
        dictionary = Dictionary.load(["は\tは,歯,は"])
        assert dictionary.find_exact("は").candidates == ("は", "歯")

    def test_find_exact_miss(self):
        dictionary = Dictionary.load(["わたし\t私"])
        assert dictionary.find_exact("わた") is None
        assert "わた" not in dictionary
        assert "わたし" in dictionary

    def test_empty_dictionary(self):
        dictionary = Dictionary()
        assert len(dictionary) == 0
        assert dictionary.find_exact("あ") is None
        assert dictionary.scan_prefixes_of("あい") == []
        assert dictionary.longest_prefix_length("あい") == 0


class TestDictionaryFromMapping:
    """Test suite for Dictionary.from_mapping()"""

    def test_list_values(self):
        dictionary = Dictionary.from_mapping({"ねこ": ["猫", "ネコ"]})
        assert dictionary.find_exact("ねこ").candidates == ("猫", "ネコ")

    def test_count_values_sorted_descending(self):
        dictionary = Dictionary.from_mapping({"かく": {"書く": 1, "核": 5, "描く": 3}})
        assert dictionary.find_exact("かく").candidates == ("核", "描く", "書く")

    def test_legacy_cost_values_sorted_ascending(self):
        dictionary = Dictionary.from_mapping({"かく": {
            "書く": {"POS": "動詞", "cost": 10},
            "核": {"POS": "名詞", "cost": 2},
            "描く": {"POS": "動詞", "cost": 5},
        }})
        assert dictionary.find_exact("かく").candidates == ("核", "描く", "書く")

    def test_invalid_values_skipped(self):
        dictionary = Dictionary.from_mapping({"あ": 3, "": ["空"], "い": ["胃"]})
        assert dictionary.readings() == ["い"]


class TestPrefixLookup:
    """Test suite for scan_prefixes_of() and longest_prefix_length()"""

    @pytest.fixture
    def dictionary(self):
        return Dictionary.load([
            "わ\t輪",
            "わたし\t私",
            "わたしは\t私は",
            "ねこ\t猫",
        ])

    def test_strict_prefixes_shortest_first(self, dictionary):
        readings = [e.reading for e in dictionary.scan_prefixes_of("わたしはねこ")]
        assert readings == ["わ", "わたし", "わたしは"]

    def test_text_itself_is_not_a_strict_prefix(self, dictionary):
        readings = [e.reading for e in dictionary.scan_prefixes_of("わたしは")]
        assert readings == ["わ", "わたし"]

    def test_longest_prefix_includes_whole_text(self, dictionary):
        assert dictionary.longest_prefix_length("ねこ") == 2
        assert dictionary.longest_prefix_length("わたしはね") == 4

    def test_longest_prefix_no_match(self, dictionary):
        assert dictionary.longest_prefix_length("いぬ") == 0
        assert dictionary.longest_prefix_length("") == 0

    def test_code_point_comparison(self):
        """ー (U+30FC) must never be taken for は (U+306F)"""
        dictionary = Dictionary.load(["ー\t—", "らー\tラー"])
        assert dictionary.scan_prefixes_of("はい") == []
        assert dictionary.longest_prefix_length("は") == 0
        assert dictionary.longest_prefix_length("らは") == 0


class TestDictionaryFiles:
    """Test suite for load_dictionary_file() and load_dictionaries()"""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for test files"""
        temp_dir = tempfile.mkdtemp()
        yield temp_dir
        shutil.rmtree(temp_dir)

    def _write(self, path, content):
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_load_text_file(self, temp_dir):
        path = self._write(os.path.join(temp_dir, "dict.txt"), "わたし\t私,渡し\nは\tは,歯\n")
        dictionary = load_dictionary_file(path)

        assert len(dictionary) == 2
        assert dictionary.find_exact("わたし").candidates == ("私", "渡し")

    def test_load_json_file(self, temp_dir):
        path = self._write(os.path.join(temp_dir, "dict.json"),
                           json.dumps({"わたし": ["私", "渡し"], "は": ["は", "歯"]}, ensure_ascii=False))
        dictionary = load_dictionary_file(path)

        assert dictionary == Dictionary.load(["わたし\t私,渡し", "は\tは,歯"])

    def test_missing_file(self, temp_dir):
        assert load_dictionary_file(os.path.join(temp_dir, "missing.txt")) is None

    def test_invalid_json(self, temp_dir):
        path = self._write(os.path.join(temp_dir, "broken.json"), "{not json")
        assert load_dictionary_file(path) is None

    def test_json_not_an_object(self, temp_dir):
        path = self._write(os.path.join(temp_dir, "list.json"), "[1, 2, 3]")
        assert load_dictionary_file(path) is None

    def test_non_utf8_text_file(self, temp_dir):
        path = os.path.join(temp_dir, "eucjp.txt")
        with open(path, 'wb') as f:
            f.write("わたし\t私\n".encode('euc-jp'))
        assert load_dictionary_file(path) is None

    def test_load_sample_dictionary(self):
        path = os.path.join(os.path.dirname(__file__), '..', 'data', 'sample_dictionary.txt')
        dictionary = load_dictionary_file(path)

        assert len(dictionary) == 18
        assert dictionary.find_exact("にほんご").candidates == ("日本語",)

    def test_load_dictionaries_empty_list(self):
        dictionary = load_dictionaries([])
        assert dictionary is not None
        assert len(dictionary) == 0

    def test_load_dictionaries_all_missing(self, temp_dir):
        assert load_dictionaries([os.path.join(temp_dir, "a.txt")]) is None

    def test_load_dictionaries_merges_in_order(self, temp_dir):
        first = self._write(os.path.join(temp_dir, "first.txt"), "わたし\t私\n")
        second = self._write(os.path.join(temp_dir, "second.txt"), "わたし\t渡し,私\nねこ\t猫\n")
        missing = os.path.join(temp_dir, "missing.txt")

        dictionary = load_dictionaries([first, missing, second])

        assert dictionary.find_exact("わたし").candidates == ("私", "渡し")
        assert dictionary.find_exact("ねこ").candidates == ("猫",)
