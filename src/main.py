"""
main.py - Console front end for the kana-kanji IME
かな漢字IMEのコンソールフロントエンド

================================================================================
WHAT THIS FILE DOES / このファイルの役割
================================================================================

This is a standalone driver for the conversion engine. It plays the roles
that a real keyboard front end would play:

エンジン単体で動かすためのドライバ。本物のキーボードの代わりに以下を担う:

    ┌────────────────┐      ┌────────────┐      ┌──────────────────┐
    │  Key script    │ ───► │ IMESession │ ───► │ ConsoleDisplay   │
    │  (stdin)       │      │            │      │ BufferedTextSink │
    └────────────────┘      └────────────┘      └──────────────────┘

Each line on stdin is a key script. Plain characters are typed as they
are, and special keys are written in angle brackets:

    watashihanekodesu<space><enter><enter><enter>

    <space> <enter> <bs> <esc> <toggle> <shrink> <extend> <hira> <kata>

================================================================================
"""

import getopt
import logging
import os
import re
import sys

from henkan import HenkanProcessor
from romaji import RomajiProcessor
from session import DisplaySink, IMESession, TextSink
import util

NAME_TO_LOGGING_LEVEL = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

# Bracketed key name → IMESession event method
SPECIAL_KEYS = {
    'space': IMESession.on_space,
    'enter': IMESession.on_enter,
    'bs': IMESession.on_backspace,
    'esc': IMESession.on_escape,
    'toggle': IMESession.on_toggle_enabled,
    'shrink': IMESession.on_shrink_segment,
    'extend': IMESession.on_extend_segment,
    'hira': IMESession.on_commit_as_hiragana,
    'kata': IMESession.on_commit_as_katakana,
}

KEY_TOKEN = re.compile(r'<([a-z]+)>')


class ConsoleDisplay(DisplaySink):
    """Prints preview, candidates and status changes to a stream."""

    def __init__(self, stream=None, max_shown=9):
        self._stream = stream if stream is not None else sys.stdout
        self._max_shown = max_shown
        self.preview = ''
        self.candidates = []
        self.highlight_index = -1
        self.status = ''

    def show_preview(self, text):
        self.preview = text
        if text:
            print(f'  > {text}', file=self._stream)

    def show_candidates(self, candidates, highlight_index):
        self.candidates = list(candidates)
        self.highlight_index = highlight_index
        line = util.format_candidates(self.candidates, highlight_index, self._max_shown)
        if line:
            print(f'    {line}', file=self._stream)

    def show_status(self, text):
        self.status = text
        print(f'[{text}]', file=self._stream)


class BufferedTextSink(TextSink):
    """Collects committed text."""

    def __init__(self):
        self.commits = []

    def append(self, text):
        self.commits.append(text)

    @property
    def text(self):
        return ''.join(self.commits)


def parse_key_script(script):
    """
    Split a key script into (event_method, argument) pairs.

    Args:
        script: e.g. "kanji<space><enter>"

    Returns:
        list: [(IMESession.on_character, 'k'), ..., (IMESession.on_space, None), ...].
              Unknown bracket tokens are typed character by character.
    """
    events = []
    pos = 0
    while pos < len(script):
        match = KEY_TOKEN.match(script, pos)
        if match and match.group(1) in SPECIAL_KEYS:
            events.append((SPECIAL_KEYS[match.group(1)], None))
            pos = match.end()
            continue
        events.append((IMESession.on_character, script[pos]))
        pos += 1
    return events


def dispatch(session, events):
    for handler, argument in events:
        if argument is None:
            handler(session)
        else:
            handler(session, argument)


def create_session(config, dictionary_files, display=None, text_sink=None):
    henkan = HenkanProcessor(dictionary_files=dictionary_files)
    return IMESession(RomajiProcessor(), henkan,
                      display=display,
                      text_sink=text_sink,
                      enabled=config['ime_enabled'])


def print_help(v: int = 0) -> None:
    """
    Print command-line usage help and exit.

    Args:
        v (int): Exit code. 0 for normal help request, 1 for error.
    """
    print("-d, --dictionary PATH  dictionary file to load (repeatable).")
    print("-c, --config PATH      config.json to use.")
    print("-l, --log-level LEVEL  DEBUG, INFO, WARNING, ERROR or CRITICAL.")
    print("-h, --help             show this message.")
    sys.exit(v)


def main(argv=None):
    shortopt = "hd:c:l:"
    longopt = ["help", "dictionary=", "config=", "log-level="]

    try:
        opts, args = getopt.getopt(sys.argv[1:] if argv is None else argv, shortopt, longopt)
    except getopt.GetoptError as err:
        sys.stderr.write(f'{err}\n')
        print_help(1)

    dictionary_files = []
    config_path = None
    log_level = None
    for o, a in opts:
        if o in ("-h", "--help"):
            print_help(0)
        elif o in ("-d", "--dictionary"):
            dictionary_files.append(a)
        elif o in ("-c", "--config"):
            config_path = a
        elif o in ("-l", "--log-level"):
            log_level = a.upper()

    os.makedirs(util.get_user_config_dir(), exist_ok=True)
    config, warnings = util.get_config_data(config_path)

    level_name = log_level or config['log_level'].upper()
    if level_name not in NAME_TO_LOGGING_LEVEL:
        sys.stderr.write(f'Unknown log level: {level_name}\n')
        print_help(1)
    logging.basicConfig(filename=util.get_logfile_path(),
                        level=NAME_TO_LOGGING_LEVEL[level_name],
                        format='%(asctime)s %(levelname)-8s %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')
    logger = logging.getLogger()
    logger.info(f'main.py user_configdir: {util.get_user_config_dir()}')
    if warnings:
        sys.stderr.write(warnings + '\n')

    if not dictionary_files:
        dictionary_files = util.get_dictionary_files(config)

    display = ConsoleDisplay(max_shown=config['max_candidates_shown'])
    text_sink = BufferedTextSink()
    session = create_session(config, dictionary_files, display, text_sink)

    for line in sys.stdin:
        dispatch(session, parse_key_script(line.rstrip('\n')))

    print(text_sink.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
