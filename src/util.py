import json
import logging
import os

logger = logging.getLogger(__name__)


# ─── Kana Helpers ─────────────────────────────────────────────────────

HIRAGANA_START = 0x3041
HIRAGANA_END = 0x3096
# Distance between a hiragana code point and its katakana counterpart
# (e.g. あ U+3042 → ア U+30A2).
KATAKANA_OFFSET = 0x60


def hiragana_to_katakana(text):
    """Convert hiragana to katakana by shifting the code points.

    Only U+3041..U+3096 are shifted. Everything else (katakana, the
    prolonged sound mark ー, kanji, ASCII) passes through unchanged, so
    applying the function twice gives the same result as applying it once.

    Example: "わたし" → "ワタシ", "ラーめん" → "ラーメン"

    Args:
        text: Input string

    Returns:
        str: The converted string ('' for None or empty input)
    """
    if not text:
        return ''
    return ''.join(
        chr(ord(c) + KATAKANA_OFFSET) if HIRAGANA_START <= ord(c) <= HIRAGANA_END else c
        for c in text
    )


def format_candidates(candidates, selected_index, max_shown=9):
    """Render a candidate list for a single-line display.

    Each candidate is numbered from 1 (matching the digit keys used for
    selection), the selected one is wrapped in brackets, and a trailing
    '...' marks candidates beyond max_shown.

    Example:
        format_candidates(['私', 'わたし', '渡し'], 1)
        → '1. 私  [2. わたし]  3. 渡し'

    Args:
        candidates: Ordered list of candidate strings
        selected_index: Index of the highlighted candidate (-1 for none)
        max_shown: Maximum number of candidates to render

    Returns:
        str: The rendered line ('' if there are no candidates)
    """
    if not candidates:
        return ''
    parts = []
    for i, candidate in enumerate(candidates[:max_shown]):
        item = f'{i + 1}. {candidate}'
        if i == selected_index:
            item = f'[{item}]'
        parts.append(item)
    if len(candidates) > max_shown:
        parts.append('...')
    return '  '.join(parts)


# ─── Package Information and Paths ────────────────────────────────────

def get_package_name():
    '''
    returns 'kana-kanji-ime'
    '''
    return 'kana-kanji-ime'


def get_homedir():
    '''
    Return the path to the $HOME directory.
    '''
    return os.path.expanduser('~')


def get_user_config_dir():
    '''
    Return the path to the config directory under $HOME.
    Typically, it would be $HOME/.config/kana-kanji-ime
    '''
    config_home = os.environ.get('XDG_CONFIG_HOME') or os.path.join(get_homedir(), '.config')
    return os.path.join(config_home, get_package_name())


def get_default_config_path():
    '''
    Return the path of config.json under the user config directory.
    '''
    return os.path.join(get_user_config_dir(), 'config.json')


def get_logfile_path():
    return os.path.join(get_user_config_dir(), get_package_name() + '.log')


def expand_path(path):
    '''
    Expand "~" and "${HOME}" in a configured path.
    '''
    return os.path.expanduser(path.replace('${HOME}', get_homedir()))


# ─── Configuration ────────────────────────────────────────────────────

DEFAULT_CONFIG = {
    "dictionaries": [],
    "log_level": "WARNING",
    "ime_enabled": True,
    "max_candidates_shown": 9,
}


def get_default_config_data():
    # A fresh deep copy on every call
    return json.loads(json.dumps(DEFAULT_CONFIG))


def get_config_data(configfile_path=None):
    '''
    Load config.json (by default from $HOME/.config/kana-kanji-ime).
    When the file is not present (e.g., on the first run), the default
    configuration is written there.

    Keys missing from the file, or whose value type differs from the
    default, are replaced with the default value.

    Args:
        configfile_path: Path of the config file. None means the file
                         under get_user_config_dir().

    Returns:
        tuple: (config_data, warnings_string) where warnings_string is empty if no warnings
    '''
    if configfile_path is None:
        configfile_path = get_default_config_path()
    default_config = get_default_config_data()
    warnings = ""

    if not os.path.exists(configfile_path):
        warning_msg = f'config.json is not found at {configfile_path} . Writing the default configuration ..'
        logger.warning(warning_msg)
        warnings = warning_msg
        save_config_data(default_config, configfile_path)
        return default_config, warnings

    try:
        with open(configfile_path, encoding='utf-8') as f:
            config_data = json.load(f)
    except (OSError, UnicodeDecodeError, json.decoder.JSONDecodeError) as e:
        logger.error(f'Error loading the config file {configfile_path}')
        logger.error(e)
        logger.error('Using (but not writing) the default configuration ..')
        return default_config, warnings

    if not isinstance(config_data, dict):
        warning_msg = f'The config file {configfile_path} does not hold a JSON object. Using the default configuration'
        logger.warning(warning_msg)
        return default_config, warning_msg

    for k in default_config:
        if k not in config_data:
            warning_msg = f'The key "{k}" was not found in {configfile_path} . Using the default value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]
        if type(config_data[k]) != type(default_config[k]):
            warning_msg = f'Type mismatch found for the key "{k}" in {configfile_path}. Replacing the value of this key with the default value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]

    if not all(isinstance(p, str) for p in config_data["dictionaries"]):
        warning_msg = 'Non-string entries in "dictionaries" are ignored'
        logger.warning(warning_msg)
        warnings += ("\n" if warnings else "") + warning_msg
        config_data["dictionaries"] = [p for p in config_data["dictionaries"] if isinstance(p, str)]

    return config_data, warnings


def save_config_data(config_data, configfile_path=None):
    '''
    Save config data to the user config directory.

    Args:
        config_data: Dictionary containing configuration data to save
        configfile_path: Destination path (defaults to the user config file)

    Returns:
        bool: True if save was successful, False otherwise
    '''
    if configfile_path is None:
        configfile_path = get_default_config_path()

    try:
        config_dir = os.path.dirname(configfile_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(configfile_path, 'w', encoding='utf-8') as f:
            json.dump(config_data, f, ensure_ascii=False, indent=2)

        logger.info(f'Configuration saved successfully to {configfile_path}')
        return True
    except OSError as e:
        logger.error(f'Error saving config.json to {configfile_path}')
        logger.error(e)
        return False


def get_dictionary_files(config=None):
    """
    Obtain the list of dictionary file paths to be used for kana-kanji conversion.

    The returned list contains, in this order:
    1. The paths listed under "dictionaries" in the config (if they exist)
    2. dictionary.txt in the user config directory (if it exists)
    3. dictionary.json in the user config directory (if it exists)

    Args:
        config: Configuration dictionary. If None, only the user config
                directory is searched.

    Returns:
        list: List of absolute paths to dictionary files that exist.
              Returns empty list if no dictionaries are found.
    """
    dictionary_files = []

    configured = config.get('dictionaries', []) if config else []
    for path in configured:
        full_path = os.path.abspath(expand_path(path))
        if os.path.exists(full_path):
            dictionary_files.append(full_path)
            logger.debug(f'Found configured dictionary: {full_path}')
        else:
            logger.warning(f'Configured dictionary not found: {full_path}')

    for name in ('dictionary.txt', 'dictionary.json'):
        user_dict_path = os.path.join(get_user_config_dir(), name)
        if os.path.exists(user_dict_path) and user_dict_path not in dictionary_files:
            dictionary_files.append(user_dict_path)
            logger.debug(f'Found user dictionary: {user_dict_path}')

    logger.info(f'Dictionary files to use: {len(dictionary_files)} file(s)')
    return dictionary_files
