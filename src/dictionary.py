#!/usr/bin/env python3
# dictionary.py - Reading → candidates table for kana-kanji conversion

import logging
import os
from typing import NamedTuple, Optional, Tuple

import orjson

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = '\t'
CANDIDATE_SEPARATOR = ','


class DictionaryEntry(NamedTuple):
    reading: str
    candidates: Tuple[str, ...]


def parse_dictionary_line(line):
    """
    Parse a single line of the tab-separated dictionary format.

    Format: reading<TAB>candidate1,candidate2,...
    Example: "わたし\t私,渡し"

    Args:
        line: A single line (a trailing newline is allowed)

    Returns:
        tuple: (reading, candidates_list) or (None, None) if the line is blank
               or malformed
    """
    line = line.rstrip('\r\n')
    if not line.strip() or FIELD_SEPARATOR not in line:
        return None, None

    reading, candidates_part = line.split(FIELD_SEPARATOR, 1)
    reading = reading.strip()
    if not reading:
        return None, None

    candidates = [c.strip() for c in candidates_part.split(CANDIDATE_SEPARATOR)]
    candidates = [c for c in candidates if c]
    if not candidates:
        return None, None

    return reading, candidates


class Dictionary:
    """
    Immutable mapping from a kana reading to its ordered candidates.

    Lookups compare code points exactly (plain dict/str equality). A
    collation-aware "starts with" can treat look-alike characters such as
    ー (U+30FC) and は (U+306F) as equal, which would produce bogus prefix
    matches during segmentation.

    Build instances with Dictionary.load() or Dictionary.from_mapping();
    once built, a Dictionary can be shared between sessions.
    """

    def __init__(self, entries=None):
        # {reading: (candidate, ...)}
        self._entries = dict(entries) if entries else {}
        self._max_reading_length = max((len(r) for r in self._entries), default=0)

    @classmethod
    def load(cls, lines):
        """
        Build a dictionary from lines of the tab-separated format.

        Malformed lines are skipped. Duplicate readings are merged, keeping
        the first-seen order of candidates and dropping repeated ones.

        Args:
            lines: Iterable of strings (e.g. an open text file)

        Returns:
            Dictionary: The loaded dictionary
        """
        merged = {}
        skipped = 0
        for line in lines:
            reading, candidates = parse_dictionary_line(line)
            if reading is None:
                if line.strip():
                    skipped += 1
                continue
            _merge_candidates(merged, reading, candidates)

        if skipped:
            logger.debug(f'Dictionary.load(): skipped {skipped} malformed line(s)')
        return cls(_freeze(merged))

    @classmethod
    def from_mapping(cls, mapping):
        """
        Build a dictionary from {reading: [candidate, ...]}.

        Values may also be {candidate: count} objects, as produced by
        frequency-counting dictionary tools; candidates are then ordered by
        descending count. The legacy {candidate: {"POS": ..., "cost": ...}}
        form is ranked by ascending cost.
        """
        merged = {}
        for reading, candidates in mapping.items():
            if not isinstance(reading, str) or not reading:
                continue
            if isinstance(candidates, dict):
                candidates = [c for c, _ in sorted(candidates.items(),
                                                   key=lambda x: _candidate_count(x[1]),
                                                   reverse=True)]
            elif isinstance(candidates, str):
                candidates = candidates.split(CANDIDATE_SEPARATOR)
            elif not isinstance(candidates, list):
                continue
            candidates = [c.strip() for c in candidates if isinstance(c, str) and c.strip()]
            if candidates:
                _merge_candidates(merged, reading, candidates)
        return cls(_freeze(merged))

    def merged_with(self, other):
        """
        Return a new dictionary holding the entries of both.

        Candidates of `other` are appended after the existing ones for
        readings present in both.
        """
        merged = {reading: list(candidates) for reading, candidates in self._entries.items()}
        for reading, candidates in other._entries.items():
            _merge_candidates(merged, reading, candidates)
        return Dictionary(_freeze(merged))

    def find_exact(self, reading) -> Optional[DictionaryEntry]:
        candidates = self._entries.get(reading)
        if candidates is None:
            return None
        return DictionaryEntry(reading, candidates)

    def scan_prefixes_of(self, text):
        """
        Find the entries whose reading is a strict prefix of text.

        Every prefix length is looked up directly in the hash map, so the
        cost depends on len(text), not on the dictionary size.

        Args:
            text: The kana string to scan

        Returns:
            list: DictionaryEntry objects, shortest reading first
        """
        found = []
        limit = min(len(text) - 1, self._max_reading_length)
        for length in range(1, limit + 1):
            prefix = text[:length]
            candidates = self._entries.get(prefix)
            if candidates is not None:
                found.append(DictionaryEntry(prefix, candidates))
        return found

    def longest_prefix_length(self, text):
        """
        Length of the longest reading that is a prefix of text (text itself
        included), or 0 when no reading matches.
        """
        limit = min(len(text), self._max_reading_length)
        for length in range(limit, 0, -1):
            if text[:length] in self._entries:
                return length
        return 0

    def readings(self):
        return list(self._entries)

    def candidate_count(self):
        return sum(len(candidates) for candidates in self._entries.values())

    def __len__(self):
        return len(self._entries)

    def __contains__(self, reading):
        return reading in self._entries

    def __eq__(self, other):
        if not isinstance(other, Dictionary):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self):
        return f'<Dictionary readings={len(self._entries)}>'


def _candidate_count(entry):
    # Higher count = better candidate
    if isinstance(entry, dict):
        # Legacy format - negate the cost so lower cost = higher count
        cost = entry.get("cost", 0)
        return -cost if isinstance(cost, (int, float)) else 0
    return entry if isinstance(entry, (int, float)) else 0


def _merge_candidates(merged, reading, candidates):
    existing = merged.setdefault(reading, [])
    for candidate in candidates:
        if candidate not in existing:
            existing.append(candidate)


def _freeze(merged):
    return {reading: tuple(candidates) for reading, candidates in merged.items()}


# ─── Dictionary Files ─────────────────────────────────────────────────

def load_dictionary_file(file_path):
    """
    Load one dictionary file.

    Files ending with .json hold a JSON object {reading: [candidates]} (or
    {reading: {candidate: count}}); anything else is read as UTF-8 text in
    the tab-separated format.

    Args:
        file_path: Path to the dictionary file

    Returns:
        Dictionary or None: None if the file is missing or cannot be parsed
    """
    if not os.path.exists(file_path):
        logger.warning(f'Dictionary file not found: {file_path}')
        return None

    try:
        if file_path.endswith('.json'):
            with open(file_path, 'rb') as f:
                data = orjson.loads(f.read())
            if not isinstance(data, dict):
                logger.warning(f'Invalid dictionary format (expected dict): {file_path}')
                return None
            dictionary = Dictionary.from_mapping(data)
        else:
            with open(file_path, encoding='utf-8') as f:
                dictionary = Dictionary.load(f)
    except orjson.JSONDecodeError as e:
        logger.error(f'Failed to parse dictionary JSON: {file_path} - {e}')
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f'Failed to load dictionary: {file_path} - {e}')
        return None

    logger.info(f'Loaded dictionary: {file_path} ({len(dictionary)} readings)')
    return dictionary


def load_dictionaries(file_paths):
    """
    Load and merge several dictionary files, in order.

    Args:
        file_paths: List of paths (may be empty)

    Returns:
        Dictionary or None: The merged dictionary. An empty list gives an
        empty Dictionary; None is returned only when files were given but
        none of them could be loaded.
    """
    if not file_paths:
        logger.info('No dictionary files provided - conversion will use passthrough mode')
        return Dictionary()

    result = None
    for file_path in file_paths:
        dictionary = load_dictionary_file(file_path)
        if dictionary is None:
            continue
        result = dictionary if result is None else result.merged_with(dictionary)

    if result is None:
        logger.warning('No dictionaries loaded')
    else:
        logger.info(f'Dictionaries merged: {len(result)} readings, '
                    f'{result.candidate_count()} candidates')
    return result
