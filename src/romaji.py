#!/usr/bin/env python3
"""
romaji.py - Romaji to kana (ローマ字→かな) processor

================================================================================
OVERVIEW / 概要
================================================================================

This module turns Latin keystrokes into hiragana incrementally. Keys are
appended to a "pending" buffer, and whatever can already be resolved is
moved into the "converted" buffer:

このモジュールはラテン文字のキー入力を逐次ひらがなに変換する。キーは
「保留」バッファに追加され、解決できた部分は「変換済み」バッファに移る:

    "k"   → converted=""     pending="k"
    "ka"  → converted="か"   pending=""
    "kan" → converted="か"   pending="n"     (ん or な? not known yet)
    "kank"→ converted="かん" pending="k"

================================================================================
REDUCTION RULES / 変換規則
================================================================================

The rules are tried in this order, and the loop restarts after every hit:
以下の順に規則を試し、一致するたびにループをやり直す:

1. "-"            → "ー" (long vowel / 長音)
2. "kk", "tt"...  → "っ" + the consonant is reprocessed (sokuon / 促音)
                    (not for n and vowels)
3. "n" + consonant other than y/n → "ん" (撥音)
4. ROMAJI_TABLE, first matching pattern wins (longest match / 最長一致)

Anything that matches nothing (digits, symbols) stays in "pending" so that
no keystroke is ever lost.
どれにも一致しない文字（数字・記号）は「保留」に残り、失われない。

================================================================================
"""

import logging

logger = logging.getLogger(__name__)


# Ordered by descending pattern length so that the first hit is the longest.
# If a pattern is a prefix of another pattern, the longer one comes first.
ROMAJI_TABLE = [
    # 4 characters
    ("ltsu", "っ"), ("xtsu", "っ"), ("ltu", "っ"), ("xtu", "っ"),

    # 3 characters (拗音 etc.)
    ("sha", "しゃ"), ("shi", "し"), ("shu", "しゅ"), ("she", "しぇ"), ("sho", "しょ"),
    ("cha", "ちゃ"), ("chi", "ち"), ("chu", "ちゅ"), ("che", "ちぇ"), ("cho", "ちょ"),
    ("tsu", "つ"), ("thi", "てぃ"),
    ("dha", "でゃ"), ("dhi", "でぃ"), ("dhu", "でゅ"), ("dhe", "でぇ"), ("dho", "でょ"),
    ("jya", "じゃ"), ("jyi", "じぃ"), ("jyu", "じゅ"), ("jye", "じぇ"), ("jyo", "じょ"),
    ("kya", "きゃ"), ("kyi", "きぃ"), ("kyu", "きゅ"), ("kye", "きぇ"), ("kyo", "きょ"),
    ("gya", "ぎゃ"), ("gyi", "ぎぃ"), ("gyu", "ぎゅ"), ("gye", "ぎぇ"), ("gyo", "ぎょ"),
    ("sya", "しゃ"), ("syi", "しぃ"), ("syu", "しゅ"), ("sye", "しぇ"), ("syo", "しょ"),
    ("zya", "じゃ"), ("zyi", "じぃ"), ("zyu", "じゅ"), ("zye", "じぇ"), ("zyo", "じょ"),
    ("tya", "ちゃ"), ("tyi", "ちぃ"), ("tyu", "ちゅ"), ("tye", "ちぇ"), ("tyo", "ちょ"),
    ("nya", "にゃ"), ("nyi", "にぃ"), ("nyu", "にゅ"), ("nye", "にぇ"), ("nyo", "にょ"),
    ("hya", "ひゃ"), ("hyi", "ひぃ"), ("hyu", "ひゅ"), ("hye", "ひぇ"), ("hyo", "ひょ"),
    ("bya", "びゃ"), ("byi", "びぃ"), ("byu", "びゅ"), ("bye", "びぇ"), ("byo", "びょ"),
    ("pya", "ぴゃ"), ("pyi", "ぴぃ"), ("pyu", "ぴゅ"), ("pye", "ぴぇ"), ("pyo", "ぴょ"),
    ("mya", "みゃ"), ("myi", "みぃ"), ("myu", "みゅ"), ("mye", "みぇ"), ("myo", "みょ"),
    ("rya", "りゃ"), ("ryi", "りぃ"), ("ryu", "りゅ"), ("rye", "りぇ"), ("ryo", "りょ"),
    ("lya", "ゃ"), ("lyi", "ぃ"), ("lyu", "ゅ"), ("lye", "ぇ"), ("lyo", "ょ"),
    ("xya", "ゃ"), ("xyi", "ぃ"), ("xyu", "ゅ"), ("xye", "ぇ"), ("xyo", "ょ"),
    ("wha", "うぁ"), ("whi", "うぃ"), ("whu", "う"), ("whe", "うぇ"), ("who", "うぉ"),
    ("tsa", "つぁ"), ("tsi", "つぃ"), ("tse", "つぇ"), ("tso", "つぉ"),
    ("tha", "てゃ"), ("thu", "てゅ"), ("the", "てぇ"), ("tho", "てょ"),
    ("dya", "ぢゃ"), ("dyi", "ぢぃ"), ("dyu", "ぢゅ"), ("dye", "ぢぇ"), ("dyo", "ぢょ"),
    ("xwa", "ゎ"), ("xka", "ヵ"), ("xke", "ヶ"),
    ("fya", "ふゃ"), ("fyi", "ふぃ"), ("fyu", "ふゅ"), ("fye", "ふぇ"), ("fyo", "ふょ"),
    ("vya", "ゔゃ"), ("vyi", "ゔぃ"), ("vyu", "ゔゅ"), ("vye", "ゔぇ"), ("vyo", "ゔょ"),

    # 2 characters
    ("ka", "か"), ("ki", "き"), ("ku", "く"), ("ke", "け"), ("ko", "こ"),
    ("sa", "さ"), ("si", "し"), ("su", "す"), ("se", "せ"), ("so", "そ"),
    ("ta", "た"), ("ti", "ち"), ("tu", "つ"), ("te", "て"), ("to", "と"),
    ("na", "な"), ("ni", "に"), ("nu", "ぬ"), ("ne", "ね"), ("no", "の"),
    ("ha", "は"), ("hi", "ひ"), ("hu", "ふ"), ("he", "へ"), ("ho", "ほ"),
    ("ma", "ま"), ("mi", "み"), ("mu", "む"), ("me", "め"), ("mo", "も"),
    ("ya", "や"), ("yi", "い"), ("yu", "ゆ"), ("ye", "いぇ"), ("yo", "よ"),
    ("ra", "ら"), ("ri", "り"), ("ru", "る"), ("re", "れ"), ("ro", "ろ"),
    ("wa", "わ"), ("wi", "うぃ"), ("wu", "う"), ("we", "うぇ"), ("wo", "を"),
    ("ga", "が"), ("gi", "ぎ"), ("gu", "ぐ"), ("ge", "げ"), ("go", "ご"),
    ("za", "ざ"), ("zi", "じ"), ("zu", "ず"), ("ze", "ぜ"), ("zo", "ぞ"),
    ("da", "だ"), ("di", "ぢ"), ("du", "づ"), ("de", "で"), ("do", "ど"),
    ("ba", "ば"), ("bi", "び"), ("bu", "ぶ"), ("be", "べ"), ("bo", "ぼ"),
    ("pa", "ぱ"), ("pi", "ぴ"), ("pu", "ぷ"), ("pe", "ぺ"), ("po", "ぽ"),
    ("fa", "ふぁ"), ("fi", "ふぃ"), ("fu", "ふ"), ("fe", "ふぇ"), ("fo", "ふぉ"),
    ("ja", "じゃ"), ("ji", "じ"), ("ju", "じゅ"), ("je", "じぇ"), ("jo", "じょ"),
    ("va", "ゔぁ"), ("vi", "ゔぃ"), ("vu", "ゔ"), ("ve", "ゔぇ"), ("vo", "ゔぉ"),
    ("la", "ぁ"), ("li", "ぃ"), ("lu", "ぅ"), ("le", "ぇ"), ("lo", "ぉ"),
    ("xa", "ぁ"), ("xi", "ぃ"), ("xu", "ぅ"), ("xe", "ぇ"), ("xo", "ぉ"),
    ("nn", "ん"), ("n'", "ん"),

    # 1 character
    ("a", "あ"), ("i", "い"), ("u", "う"), ("e", "え"), ("o", "お"),
]

LONG_VOWEL_KEY = '-'
LONG_VOWEL_MARK = 'ー'
SOKUON = 'っ'
HATSUON = 'ん'

# First characters that never start a sokuon when doubled
NO_SOKUON_CHARS = frozenset('naiueo')
# Characters after "n" that keep it pending (it may still become な, にゃ, ん...)
N_CONTINUATION_CHARS = frozenset('aiueoyn')


def validate_table(table):
    """
    Check the longest-match ordering of a transliteration table.

    For every pair of rules where one pattern is a proper prefix of the
    other, the longer pattern has to appear first; otherwise the shorter
    one would always win and the longer one would be unreachable.

    Args:
        table: List of (pattern, kana) tuples

    Returns:
        list: (shorter_pattern, longer_pattern) pairs that are out of order.
              Empty when the table is consistent.
    """
    violations = []
    for i, (earlier, _) in enumerate(table):
        for later, _ in table[i + 1:]:
            if len(later) > len(earlier) and later.startswith(earlier):
                violations.append((earlier, later))
    return violations


class RomajiProcessor:
    """
    Incremental romaji → hiragana converter.
    ローマ字→ひらがなの逐次変換器。

    The processor owns two buffers:
    2つのバッファを持つ:

    • converted: kana that is already decided / 確定済みのかな
    • pending:   romaji that cannot be resolved yet / まだ解決できないローマ字

    USAGE / 使用方法:

        >>> processor = RomajiProcessor()
        >>> processor.add_input('wa')
        'わ'
        >>> processor.add_input('tashin')
        'わたし'
        >>> processor.get_display_text()
        'わたしn'
        >>> processor.commit()
        'わたしん'
    """

    def __init__(self, table=None):
        """
        Args:
            table: Transliteration table, a list of (pattern, kana) tuples
                   ordered for longest match. Defaults to ROMAJI_TABLE.
        """
        self._table = table if table is not None else ROMAJI_TABLE
        self._converted = ''
        self._pending = ''

    def add_input(self, text):
        """
        Append keystrokes and reduce as much of the pending buffer as possible.

        Args:
            text: One or more typed characters (upper case is folded)

        Returns:
            str: The converted part of the buffer
        """
        self._pending += text.lower()
        self._process_buffer()
        return self._converted

    def _process_buffer(self):
        while self._pending:
            if self._pending[0] == LONG_VOWEL_KEY:
                self._consume(1, LONG_VOWEL_MARK)
                continue

            if len(self._pending) >= 2:
                first, second = self._pending[0], self._pending[1]

                # 促音: "tt" → "っ" and the second "t" is reprocessed
                if first == second and first not in NO_SOKUON_CHARS:
                    self._consume(1, SOKUON)
                    continue

                # 撥音: "nk" → "ん" and "k" is reprocessed
                if first == 'n' and second not in N_CONTINUATION_CHARS:
                    self._consume(1, HATSUON)
                    continue

            for pattern, kana in self._table:
                if self._pending.startswith(pattern):
                    self._consume(len(pattern), kana)
                    break
            else:
                # Nothing matched; wait for more input
                return

    def _consume(self, length, kana):
        self._converted += kana
        self._pending = self._pending[length:]

    def backspace(self):
        """
        Delete one character: from the pending romaji first, then from
        the converted kana.
        """
        if self._pending:
            self._pending = self._pending[:-1]
        elif self._converted:
            self._converted = self._converted[:-1]

    def clear(self):
        self._converted = ''
        self._pending = ''

    def commit(self):
        """
        Finish the input and return everything typed so far.

        A lone trailing "n" becomes "ん"; any other unresolved romaji is
        returned verbatim. Both buffers are cleared.

        Returns:
            str: converted + pending
        """
        if self._pending == 'n':
            self._converted += HATSUON
            self._pending = ''

        result = self._converted + self._pending
        logger.debug(f'RomajiProcessor.commit() → "{result}"')
        self.clear()
        return result

    def get_converted_text(self):
        return self._converted

    def get_pending(self):
        return self._pending

    def get_display_text(self):
        return self._converted + self._pending

    def is_empty(self):
        return not self._converted and not self._pending
