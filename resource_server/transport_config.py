"""Persistent endpoint settings for the external monitoring service.

Values live in a ``java.util.Properties`` style text file under the application
data directory. Unset URLs fall back to the configured defaults; the API key
has no default.
"""

import datetime
import logging
import os
import traceback

from .constants import (
    DEFAULT_CHECK_URL,
    DEFAULT_CONTROLLER_PROPERTIES_NAME,
    DEFAULT_MONITORING_DIR_NAME,
    DEFAULT_STORAGE_URL,
)

logger = logging.getLogger(__name__)

STORAGE_URL_KEY = "url"
CHECK_URL_KEY = "checkurl"
API_KEY_KEY = "apikey"


class TransportConfigError(Exception):
    """Raised when the transport settings cannot be saved."""


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_SEPARATORS = "=: \t\f"


def _ends_with_continuation(line):
    """True when ``line`` ends in an odd number of backslashes."""
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _logical_lines(lines):
    """Joins backslash-continued lines; leading whitespace of each
    continuation line is dropped."""
    pending = None
    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if pending is not None:
            line = pending + line.lstrip(" \t\f")
            pending = None
        elif not line.lstrip(" \t\f") or line.lstrip(" \t\f")[0] in "#!":
            continue
        if _ends_with_continuation(line):
            pending = line[:-1]
            continue
        yield line.lstrip(" \t\f")
    if pending is not None:
        yield pending.lstrip(" \t\f")


def _unescape(text):
    chars = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\" or i + 1 >= len(text):
            chars.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u":
            digits = text[i + 2:i + 6]
            if len(digits) != 4:
                raise ValueError(f"Malformed \\uxxxx encoding: {text[i:]}")
            chars.append(chr(int(digits, 16)))
            i += 6
            continue
        chars.append(_ESCAPES.get(nxt, nxt))
        i += 2
    # Join surrogate pairs written as two \uXXXX escapes.
    return "".join(chars).encode("utf-16", "surrogatepass").decode("utf-16")


def _split_key_value(line):
    index = 0
    while index < len(line):
        ch = line[index]
        if ch == "\\":
            index += 2
            continue
        if ch in _SEPARATORS:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


def parse_properties(lines):
    """Parses lines in the ``java.util.Properties`` text format into a dict.

    Handles ``#``/``!`` comments, ``=``, ``:`` or whitespace separators,
    backslash line continuations and the ``\\t \\n \\r \\f \\uXXXX`` escapes.
    Any other escaped character stands for itself. Values are not trimmed.

    Raises:
        ValueError: On a malformed ``\\uXXXX`` escape.
    """
    properties = {}
    for line in _logical_lines(lines):
        key, value = _split_key_value(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


def _escape(text, is_key):
    chars = []
    for index, ch in enumerate(text):
        if ch == "\\":
            chars.append("\\\\")
        elif ch == "\t":
            chars.append("\\t")
        elif ch == "\n":
            chars.append("\\n")
        elif ch == "\r":
            chars.append("\\r")
        elif ch == "\f":
            chars.append("\\f")
        elif ch in "=:#!":
            chars.append("\\" + ch)
        elif ch == " " and (is_key or index == 0):
            chars.append("\\ ")
        elif ord(ch) < 0x20 or ord(ch) == 0x7f:
            chars.append(f"\\u{ord(ch):04X}")
        else:
            chars.append(ch)
    return "".join(chars)


def format_properties(properties):
    """Renders ``properties`` the way ``Properties.store`` does, so every
    value reads back unchanged through ``parse_properties``."""
    lines = [f"#{datetime.datetime.now().strftime('%a %b %d %H:%M:%S %Y')}"]
    lines.extend(
        f"{_escape(key, True)}={_escape(value, False)}"
        for key, value in properties.items())
    return "\n".join(lines) + "\n"


def _trimmed(properties, key):
    value = properties.get(key)
    return value.strip() if value is not None else None


class TransportConfig:
    """Monitoring endpoint settings backed by a properties file.

    Args:
        data_dir (str): The application data directory.
        monitoring_dir_name (str): Subdirectory holding the properties file.
        properties_name (str): File name of the properties file.
        default_storage_url (str): Used when no ``url`` is stored.
        default_check_url (str): Used when no ``checkurl`` is stored.
    """

    def __init__(self, data_dir,
                 monitoring_dir_name=DEFAULT_MONITORING_DIR_NAME,
                 properties_name=DEFAULT_CONTROLLER_PROPERTIES_NAME,
                 default_storage_url=DEFAULT_STORAGE_URL,
                 default_check_url=DEFAULT_CHECK_URL):
        self.data_dir = data_dir
        self.properties_name = properties_name
        self.properties_rel_path = os.path.join(monitoring_dir_name, properties_name)
        self.default_storage_url = default_storage_url
        self.default_check_url = default_check_url
        self._storage_url = None
        self._check_url = None
        self._api_key = None
        self.load()

    @property
    def properties_path(self):
        return os.path.join(self.data_dir, self.properties_rel_path)

    def find_properties_file(self):
        """Returns the properties file path, or None if it does not exist yet."""
        path = self.properties_path
        if not os.path.isfile(path):
            logger.warning(
                "Could not find controller properties file in data dir. "
                "Expected data dir location: %s", self.properties_rel_path)
            return None
        return path

    def load(self):
        """(Re)reads the stored values. Failures are logged, never raised."""
        storage_url = check_url = api_key = None
        try:
            path = self.find_properties_file()
            if path is not None:
                with open(path, encoding="utf-8") as f:
                    properties = parse_properties(f)
                api_key = _trimmed(properties, API_KEY_KEY)
                storage_url = _trimmed(properties, STORAGE_URL_KEY)
                check_url = _trimmed(properties, CHECK_URL_KEY)
                if api_key is None:
                    logger.error("Failure reading '%s' property from %s",
                                 API_KEY_KEY, self.properties_name)
        except (OSError, ValueError):
            logger.error("Failure reading: %s from data dir", self.properties_rel_path)
            logger.info(traceback.format_exc())
            storage_url = check_url = api_key = None
        self._storage_url = storage_url
        self._check_url = check_url
        self._api_key = api_key

    @property
    def storage_url(self):
        return self._storage_url if self._storage_url is not None else self.default_storage_url

    @storage_url.setter
    def storage_url(self, value):
        self._storage_url = value

    @property
    def check_url(self):
        return self._check_url if self._check_url is not None else self.default_check_url

    @check_url.setter
    def check_url(self, value):
        self._check_url = value

    @property
    def api_key(self):
        return self._api_key

    @api_key.setter
    def api_key(self, value):
        self._api_key = value

    def save(self):
        """Writes the current values to the properties file.

        URLs are only written when they were explicitly set or loaded, so
        defaults never get pinned into the file.

        Raises:
            TransportConfigError: If no API key is set.
            OSError: If the file cannot be written.
        """
        if self._api_key is None:
            raise TransportConfigError(
                f"need api key to save: {self.properties_rel_path}")

        properties = {API_KEY_KEY: self._api_key}
        if self._storage_url is not None:
            properties[STORAGE_URL_KEY] = self._storage_url
        if self._check_url is not None:
            properties[CHECK_URL_KEY] = self._check_url

        path = self.find_properties_file()
        if path is None:
            logger.warning("Creating controller properties: %s", self.properties_rel_path)
            path = self.properties_path
            os.makedirs(os.path.dirname(path), exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(format_properties(properties))

    def to_dict(self):
        return {
            "storage_url": self.storage_url,
            "check_url": self.check_url,
            "has_api_key": self._api_key is not None,
        }
