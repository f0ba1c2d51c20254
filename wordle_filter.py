#!/usr/bin/env python
"""
Wordle filter.

Given the feedback from a Wordle board so far, shows every dictionary word
that is still possible.

Wordle is:

- https://www.nytimes.com/games/wordle/index.html

Feedback is entered as three things:

- the green letters, as a pattern such as ``c_an_``, where ``_`` means "not
  known";
- any number of rows of orange (yellow) letters, one per guess, such as
  ``__as_``: those letters are in the word, but not where they are shown;
- the grey letters, which are not in the word at all.

The dictionary is fetched from the web each time (see ``DEFAULT_URL``), or
read from a local file if you prefer.

Run self-tests with:

.. code-block:: bash

    pip install pytest
    pytest wordle_filter.py

Run with:

.. code-block:: bash

    ./wordle_filter.py
    ./wordle_filter.py --wordlist_filename /usr/share/dict/words
    ./wordle_filter.py --help

"""  # noqa

# =============================================================================
# Imports
# =============================================================================

import argparse
from contextlib import contextmanager
import io
import logging
import os
import tempfile
from timeit import default_timer as timer
from typing import Generator, Iterable, List, Optional, Sequence, Set
import unittest
from unittest import mock
from urllib.parse import urlparse

from colors import color  # pip install ansicolors
from cardinal_pythonlib.argparse_func import (
    RawDescriptionArgumentDefaultsHelpFormatter,
)
from cardinal_pythonlib.logs import main_only_quicksetup_rootlogger
import requests

rootlog = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Where the dictionary lives
DEFAULT_URL = "http://www.mieliestronk.com/corncob_caps.txt"
DEFAULT_TIMEOUT_S = 30.0
DEFAULT_ENCODING = "utf-8"
DEFAULT_LINE_SEPARATOR = "\r\n"  # the corncob list uses Windows line endings
VALID_URL_SCHEMES = ("http", "https")

# Feedback entry
PLACEHOLDER = "_"

# Colours and styles for displaying feedback, via the ansicolors package
COLOUR_ABSENT = dict(fg="white", bg="black", style="bold")
COLOUR_PRESENT_WRONG_LOCATION = dict(fg="white", bg="yellow", style="bold")
COLOUR_PRESENT_RIGHT_LOCATION = dict(fg="white", bg="green", style="bold")

HELP_TEXT = f"""
Displays all words that satisfy the constraints of a given Wordle board.

First enter the locations and values of the green letters, with
{PLACEHOLDER!r} for unknown positions.

    The final word is 'crane'.
    We know 'c', 'a', and 'n'.
    So we enter:

        c_an_

Next enter the locations of the orange letters, one row for every guess that
contained orange letters. Press return on an empty line when done.

    The final word is 'nasty'.
    We know 'a' and 's' are in the word:

        __as_

    We also know 'n' is in the word:

        ___n_

Finally, enter all letters that are not in the word:

        gelpbc
"""


# =============================================================================
# Exceptions
# =============================================================================

class WordSourceError(Exception):
    """
    Base class for failures to obtain a word list.
    """
    pass


class BadSourceError(WordSourceError):
    """
    The location of the word list is invalid.
    """
    pass


class FetchError(WordSourceError):
    """
    The word list could not be retrieved or decoded.
    """
    pass


# =============================================================================
# Helper functions
# =============================================================================

def prettylist(words: Iterable[str]) -> str:
    """
    Formats a wordlist.
    """
    return ", ".join(str(x) for x in words)


def split_words(contents: str,
                line_separator: str = DEFAULT_LINE_SEPARATOR) -> List[str]:
    """
    Splits the contents of a word list into words, in order, dropping blank
    lines.
    """
    words = [
        word
        for word in (line.strip() for line in contents.split(line_separator))
        if word
    ]
    if len(words) == 1 and "\n" in words[0]:
        rootlog.debug(
            f"Word list did not split on {line_separator!r}; it may use "
            f"different line endings"
        )
    return words


@contextmanager
def time_section(name: str,
                 loglevel: int = logging.DEBUG) -> Generator[None, None, None]:
    start = timer()
    try:
        yield
    finally:
        end = timer()
        rootlog.log(loglevel, f"{name} took {end - start} s")


# =============================================================================
# Word sources
# =============================================================================

class WordSource:
    """
    Something that can provide an ordered list of dictionary words.
    """
    def get_words(self) -> List[str]:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.__class__.__name__


class UrlWordSource(WordSource):
    """
    Fetches a plain-text word list, one word per line, from the web.
    """
    def __init__(self,
                 url: str = DEFAULT_URL,
                 timeout: float = DEFAULT_TIMEOUT_S,
                 encoding: str = DEFAULT_ENCODING,
                 line_separator: str = DEFAULT_LINE_SEPARATOR) -> None:
        """
        Args:

            url: where the word list lives
            timeout: network timeout, in seconds
            encoding: text encoding of the word list
            line_separator: what separates one word from the next

        Raises:
            :exc:`BadSourceError` if the URL is not a usable HTTP(S) URL.
        """
        parsed = urlparse(url)
        if parsed.scheme.lower() not in VALID_URL_SCHEMES or not parsed.netloc:
            raise BadSourceError(f"Bad word list URL: {url!r}")
        self.url = url
        self.timeout = timeout
        self.encoding = encoding
        self.line_separator = line_separator

    def __str__(self) -> str:
        return self.url

    def get_words(self) -> List[str]:
        """
        Fetches and splits the word list.

        Raises:
            :exc:`FetchError` if the request fails or the reply can't be
            decoded.
        """
        rootlog.debug(f"GET {self.url}")
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            contents = response.content.decode(self.encoding)
        except requests.RequestException as e:
            raise FetchError(f"Unable to fetch {self.url}: {e}") from e
        except UnicodeDecodeError as e:
            raise FetchError(
                f"Unable to decode {self.url} as {self.encoding}: {e}"
            ) from e
        words = split_words(contents, self.line_separator)
        rootlog.debug(f"Read {len(words)} words from {self.url}")
        return words


class FileWordSource(WordSource):
    """
    Reads a word list, one word per line, from a local file.
    """
    def __init__(self,
                 filename: str,
                 encoding: str = DEFAULT_ENCODING,
                 line_separator: str = "\n") -> None:
        if not os.path.isfile(filename):
            raise BadSourceError(f"No such word list file: {filename!r}")
        self.filename = filename
        self.encoding = encoding
        self.line_separator = line_separator

    def __str__(self) -> str:
        return self.filename

    def get_words(self) -> List[str]:
        # newline="" so that the separator we split on is what's in the file
        try:
            with open(self.filename, "rt", encoding=self.encoding,
                      newline="") as f:
                contents = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"Unable to read {self.filename}: {e}") from e
        words = split_words(contents, self.line_separator)
        rootlog.debug(f"Read {len(words)} words from {self.filename}")
        return words


class InMemoryWordSource(WordSource):
    """
    A fixed word list.
    """
    def __init__(self, words: Iterable[str]) -> None:
        self.words = list(words)

    def get_words(self) -> List[str]:
        return list(self.words)


# =============================================================================
# Filtering
# =============================================================================

class FeedbackConstraints:
    """
    Represents everything we've been told by the board so far.
    """
    def __init__(self,
                 green: str,
                 not_allowed: str = "",
                 orange: Sequence[str] = (),
                 placeholder: str = PLACEHOLDER) -> None:
        """
        Args:

            green:
                the known letters at their known positions, with the
                placeholder elsewhere; also defines the word length
            not_allowed:
                letters known not to be in the word
            orange:
                one string per guess: letters known to be in the word, but
                not at the position shown
            placeholder:
                the "no information here" character
        """
        self.placeholder = placeholder
        self.green = green.lower()
        self.not_allowed = not_allowed.lower()
        self.orange = tuple(row.lower() for row in orange)

        self.green_letters = set(
            c for c in self.green if c != placeholder
        )  # type: Set[str]
        self.must_contain = set(
            c for row in self.orange for c in row if c != placeholder
        )  # type: Set[str]
        # A letter that is green can come back grey when guessed twice; treat
        # grey as "absent except where green".
        contradictory = self.green_letters.intersection(self.not_allowed)
        if contradictory:
            rootlog.warning(
                f"Letters marked both green and grey: "
                f"{''.join(sorted(contradictory))}; ignoring them as grey"
            )
        self.disallowed = (
            set(self.not_allowed) - self.green_letters - {placeholder}
        )  # type: Set[str]
        # Orange letters that are also grey exclude every word.
        grey_orange = self.disallowed.intersection(self.must_contain)
        if grey_orange:
            rootlog.warning(
                f"Letters marked both orange and grey: "
                f"{''.join(sorted(grey_orange))}; no word can match"
            )
        for row in self.orange:
            if len(row) != self.wordlen:
                rootlog.warning(
                    f"Orange row {row!r} is not the same length as the "
                    f"green pattern {self.green!r}"
                )

    def __str__(self) -> str:
        """
        Summary of our calculated details.
        """
        g = self.green or "?"
        p = "".join(sorted(self.must_contain | self.green_letters)) or "?"
        a = "".join(sorted(self.disallowed)) or "?"
        return f"Pattern: {g}. Target must contain {p}; must not contain {a}."

    @property
    def wordlen(self) -> int:
        return len(self.green)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    @classmethod
    def read_from_user(cls) -> "FeedbackConstraints":
        """
        Read the green pattern, the orange rows, and the grey letters from the
        user, and return our structure.
        """
        green = input(
            f"Enter green letters ({PLACEHOLDER!r} if unknown): "
        ).strip()
        orange = []  # type: List[str]
        while True:
            row = input(
                f"Enter orange letters ({PLACEHOLDER!r} if unknown, "
                f"return when done): "
            ).strip()
            if not row:
                break
            if len(row) != len(green):
                print(f"Please enter {len(green)} characters, to match "
                      f"{green!r}.")
                continue
            orange.append(row)
        not_allowed = input("Enter grey letters: ").strip()
        constraints = cls(green, not_allowed, orange)
        print(f"You have entered: {constraints.colourful_str}")
        print(constraints)
        return constraints

    # -------------------------------------------------------------------------
    # Checking words
    # -------------------------------------------------------------------------

    def compatible_excluding_green(self, word: str) -> bool:
        """
        Length, grey, and orange checks. The word must be in lower case.
        """
        if len(word) != self.wordlen:
            return False
        if any(c in self.disallowed for c in word):
            return False
        if any(c not in word for c in self.must_contain):
            return False
        for row in self.orange:
            for w_char, o_char in zip(word, row):
                if o_char != self.placeholder and w_char == o_char:
                    # Orange letters are never where they were guessed.
                    return False
        return True

    def matches_green(self, word: str) -> bool:
        """
        Does the word have every known letter in its known place?
        """
        return all(
            w_char == g_char
            for g_char, w_char in zip(self.green, word)
            if g_char != self.placeholder
        )

    def compatible(self, word: str) -> bool:
        word = word.lower()
        return (
            self.compatible_excluding_green(word)
            and self.matches_green(word)
        )

    def possible_words(self, words: Iterable[str]) -> List[str]:
        """
        Filters the words, preserving their order. Returns lower-case words.
        """
        lower_words = [w.lower() for w in words]
        filtered = [
            w for w in lower_words if self.compatible_excluding_green(w)
        ]
        return [w for w in filtered if self.matches_green(w)]

    # -------------------------------------------------------------------------
    # Displays
    # -------------------------------------------------------------------------

    @property
    def colourful_str(self) -> str:
        """
        Colourful representation: the green pattern, then each orange row,
        then the grey letters.
        """
        parts = [self._colourful_row(self.green,
                                     COLOUR_PRESENT_RIGHT_LOCATION)]
        for row in self.orange:
            parts.append(self._colourful_row(row,
                                             COLOUR_PRESENT_WRONG_LOCATION))
        if self.disallowed:
            parts.append(color("".join(sorted(self.disallowed)),
                               **COLOUR_ABSENT))
        return " ".join(parts)

    def _colourful_row(self, row: str, colour_params: dict) -> str:
        return "".join(
            c if c == self.placeholder else color(c, **colour_params)
            for c in row
        )


def get_possible_words(words: Iterable[str],
                       green: str,
                       not_allowed: str = "",
                       orange: Sequence[str] = (),
                       placeholder: str = PLACEHOLDER) -> List[str]:
    """
    Finds the words that satisfy the given constraints.

    Args:
        words: the available words, in any case
        green: known letters at known positions, e.g. ``c_an_``
        not_allowed: letters known to be absent (green letters are exempt)
        orange: one row per guess of letters present but misplaced
        placeholder: the "unknown" character

    Returns:
        the possible words, in lower case, in their original order
    """
    constraints = FeedbackConstraints(green, not_allowed, orange,
                                      placeholder=placeholder)
    return constraints.possible_words(words)


# =============================================================================
# Interactive use
# =============================================================================

def solve_interactive(source: WordSource) -> Optional[List[str]]:
    """
    Ask the user for the feedback, fetch the words, and show what's possible.
    Returns the possible words, or ``None`` if the words couldn't be fetched.
    """
    constraints = FeedbackConstraints.read_from_user()

    rootlog.info("Fetching word list...")
    try:
        with time_section("Fetching word list"):
            words = source.get_words()
    except WordSourceError as e:
        rootlog.debug(f"Word source {source} failed: {e}")
        rootlog.error("Failed.")
        return None
    rootlog.info("Done.")

    rootlog.info("Matching words...")
    with time_section("Matching words"):
        possible = constraints.possible_words(words)
    print(f"Possible words: {prettylist(possible)}")
    return possible


# =============================================================================
# Self-testing
# =============================================================================

class TestFilter(unittest.TestCase):
    WORDS = [
        "CRANE", "SLATE", "PLANE", "nasty", "toast", "stamp", "Crate",
        "caner", "scant", "cabin", "HUMOR", "honor", "pause", "eerie",
    ]

    def test_green(self) -> None:
        possible = get_possible_words(["CRANE", "SLATE", "PLANE"], "c_an_")
        assert possible == ["crane"], possible

    def test_orange(self) -> None:
        possible = get_possible_words(
            ["nasty", "toast", "stamp"], "_____", "", ["__as_"]
        )
        # toast and stamp both have "a" where the orange "a" was.
        assert possible == ["nasty"], possible

    def test_grey(self) -> None:
        possible = get_possible_words(
            ["CRANE", "SLATE", "PLANE"], "_____", "c"
        )
        assert possible == ["slate", "plane"], possible

    def test_no_orange_same_as_empty_orange(self) -> None:
        a = get_possible_words(self.WORDS, "c____", "z")
        b = get_possible_words(self.WORDS, "c____", "z", [])
        assert a == b == ["crane", "crate", "caner", "cabin"], a

    def test_case_insensitive(self) -> None:
        possible = get_possible_words(["CrAnE", "crane", "CRANE"], "C_AN_")
        assert possible == ["crane", "crane", "crane"], possible

    def test_order_preserved(self) -> None:
        words = ["toast", "nasty", "stamp", "scant"]
        possible = get_possible_words(words, "_____", "", ["s____"])
        assert possible == ["toast", "nasty"], possible

    def test_wrong_length_excluded(self) -> None:
        possible = get_possible_words(["cranes", "crane", "cran"], "_____")
        assert possible == ["crane"], possible

    def test_green_grey_contradiction(self) -> None:
        with self.assertLogs(rootlog, level=logging.WARNING) as cm:
            possible = get_possible_words(
                ["CRANE", "SLATE", "PLANE"], "c_an_", "cx"
            )
        assert possible == ["crane"], possible
        assert any("both green and grey" in line for line in cm.output)

    def test_orange_row_wrong_length_warns(self) -> None:
        with self.assertLogs(rootlog, level=logging.WARNING):
            FeedbackConstraints("_____", "", ["__a"])

    def test_grey_orange_contradiction_warns(self) -> None:
        # e.g. guessing EERIE against SPEED: the second E comes back grey
        with self.assertLogs(rootlog, level=logging.WARNING) as cm:
            possible = get_possible_words(["speed"], "_____", "rie",
                                          ["ee___"])
        assert possible == [], possible
        assert any("both orange and grey" in line for line in cm.output)

    def test_constraint_properties(self) -> None:
        cases = [
            ("c____", "", []),
            ("_____", "e", ["__as_"]),
            ("_a___", "lt", ["s____", "___n_"]),
            ("h__o_", "n", []),
            ("_____", "", ["e____", "_a___"]),
        ]
        for green, grey, orange in cases:
            constraints = FeedbackConstraints(green, grey, orange)
            possible = get_possible_words(self.WORDS, green, grey, orange)
            for word in possible:
                for pos, g_char in enumerate(green):
                    if g_char != PLACEHOLDER:
                        assert word[pos] == g_char, (word, green)
                assert not (set(word) & constraints.disallowed), (word, grey)
                for row in orange:
                    for pos, o_char in enumerate(row):
                        if o_char != PLACEHOLDER:
                            assert o_char in word, (word, row)
                            assert word[pos] != o_char, (word, row)
            # Nothing compatible was lost
            expected = [
                w.lower() for w in self.WORDS if constraints.compatible(w)
            ]
            assert possible == expected, (green, grey, orange)

    def test_summary(self) -> None:
        constraints = FeedbackConstraints("c_an_", "XE", ["_r___"])
        assert str(constraints) == (
            "Pattern: c_an_. Target must contain acnr; must not contain ex."
        ), str(constraints)
        assert constraints.must_contain == {"r"}


class TestWordSources(unittest.TestCase):
    @staticmethod
    def _response(content: bytes) -> mock.MagicMock:
        response = mock.MagicMock()
        response.content = content
        return response

    def test_bad_url(self) -> None:
        for url in ("not a url", "ftp://example.com/words.txt", "http://"):
            with self.assertRaises(BadSourceError):
                UrlWordSource(url)

    def test_fetch_splits_on_crlf(self) -> None:
        source = UrlWordSource("http://example.com/words.txt")
        with mock.patch.object(
                requests, "get",
                return_value=self._response(b"CRANE\r\nSLATE\r\n\r\n")) as g:
            words = source.get_words()
        g.assert_called_once_with("http://example.com/words.txt",
                                  timeout=DEFAULT_TIMEOUT_S)
        assert words == ["CRANE", "SLATE"], words

    def test_fetch_failure(self) -> None:
        source = UrlWordSource("https://example.com/words.txt")
        with mock.patch.object(
                requests, "get",
                side_effect=requests.ConnectionError("no network")):
            with self.assertRaises(FetchError):
                source.get_words()

    def test_http_error(self) -> None:
        source = UrlWordSource("https://example.com/words.txt")
        response = self._response(b"")
        response.raise_for_status.side_effect = requests.HTTPError("404")
        with mock.patch.object(requests, "get", return_value=response):
            with self.assertRaises(FetchError):
                source.get_words()

    def test_decode_error(self) -> None:
        source = UrlWordSource("https://example.com/words.txt")
        with mock.patch.object(requests, "get",
                               return_value=self._response(b"\xff\xfe\xfa")):
            with self.assertRaises(FetchError):
                source.get_words()

    def test_missing_file(self) -> None:
        with self.assertRaises(BadSourceError):
            FileWordSource("/nonexistent/path/to/words.txt")

    def test_file_line_endings(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            for name, content in (("crlf.txt", b"CRANE\r\nSLATE\r\n"),
                                  ("lf.txt", b"CRANE\nSLATE\n")):
                filename = os.path.join(tmpdir, name)
                with open(filename, "wb") as f:
                    f.write(content)
                words = FileWordSource(filename).get_words()
                assert words == ["CRANE", "SLATE"], (name, words)

    def test_file_decode_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, "bad.txt")
            with open(filename, "wb") as f:
                f.write(b"\xff\xfe\xfa\n")
            source = FileWordSource(filename)
            with self.assertRaises(FetchError):
                source.get_words()

    def test_wrong_line_separator_logged(self) -> None:
        with self.assertLogs(rootlog, level=logging.DEBUG) as cm:
            words = split_words("crane\nslate\n")
        assert words == ["crane\nslate"], words
        assert any("did not split" in line for line in cm.output)

    def test_in_memory(self) -> None:
        source = InMemoryWordSource(["crane", "slate"])
        assert source.get_words() == ["crane", "slate"]


class TestInteractive(unittest.TestCase):
    def _run(self, answers: List[str], source: WordSource) \
            -> Optional[List[str]]:
        with mock.patch("builtins.input", side_effect=answers), \
                mock.patch("sys.stdout", new_callable=io.StringIO) as out:
            result = solve_interactive(source)
        self.output = out.getvalue()
        return result

    def test_solve(self) -> None:
        source = InMemoryWordSource(["NASTY", "TOAST", "STAMP", "PLANE"])
        with self.assertLogs(rootlog, level=logging.INFO) as cm:
            result = self._run(["_____", "__as_", "___n_", "", "gelpbc"],
                               source)
        assert result == ["nasty"], result
        assert "Possible words: nasty" in self.output, self.output
        messages = [r.getMessage() for r in cm.records]
        assert messages == ["Fetching word list...", "Done.",
                            "Matching words..."], messages

    def test_orange_wrong_length_reprompts(self) -> None:
        source = InMemoryWordSource(["CRANE", "SLATE", "PLANE"])
        result = self._run(["c_an_", "r__", "r____", "", ""], source)
        assert result == ["crane"], result
        assert "Please enter 5 characters" in self.output, self.output

    def test_failure(self) -> None:
        source = UrlWordSource("https://example.com/words.txt")
        with mock.patch.object(requests, "get",
                               side_effect=requests.Timeout("slow")), \
                self.assertLogs(rootlog, level=logging.ERROR) as cm:
            result = self._run(["c_an_", "", ""], source)
        assert result is None
        assert "Possible words" not in self.output, self.output
        assert [r.getMessage() for r in cm.records] == ["Failed."]

    def test_help_does_not_filter(self) -> None:
        with mock.patch("sys.argv", ["wordle_filter.py", "-h"]), \
                mock.patch("sys.stdout", new_callable=io.StringIO) as out, \
                mock.patch("builtins.input") as fake_input:
            with self.assertRaises(SystemExit) as cm:
                main()
        assert cm.exception.code == 0
        fake_input.assert_not_called()
        assert "c_an_" in out.getvalue()

    def test_bad_url_fails_without_prompting(self) -> None:
        with mock.patch("sys.argv", ["wordle_filter.py", "--url",
                                     "ftp://bad"]), \
                mock.patch(f"{__name__}.main_only_quicksetup_rootlogger"), \
                mock.patch("builtins.input") as fake_input, \
                self.assertLogs(rootlog, level=logging.ERROR) as cm:
            result = main()
        assert result is None
        fake_input.assert_not_called()
        assert "Failed." in [r.getMessage() for r in cm.records]


# =============================================================================
# Command-line entry point
# =============================================================================

def main() -> None:
    # -------------------------------------------------------------------------
    # Arguments
    # -------------------------------------------------------------------------
    parser = argparse.ArgumentParser(
        description="Wordle filter.\n" + HELP_TEXT,
        formatter_class=RawDescriptionArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--url", default=DEFAULT_URL,
        help="URL of a plain-text word list, one word per line"
    )
    parser.add_argument(
        "--wordlist_filename", default=None,
        help="Local file of words, one per line (overrides --url)"
    )
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT_S,
        help="Network timeout (seconds) when fetching the word list"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Be verbose"
    )
    args = parser.parse_args()

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    loglevel = logging.DEBUG if args.verbose else logging.INFO
    main_only_quicksetup_rootlogger(level=loglevel)

    # -------------------------------------------------------------------------
    # Act
    # -------------------------------------------------------------------------
    try:
        if args.wordlist_filename:
            source = FileWordSource(args.wordlist_filename)
        else:
            source = UrlWordSource(args.url, timeout=args.timeout)
    except BadSourceError as e:
        rootlog.error(f"{e}")
        rootlog.error("Failed.")
        return
    solve_interactive(source)


if __name__ == '__main__':
    main()
