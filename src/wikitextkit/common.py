# Some definitions used by the title, tag, section, parameter and template
# scanners
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import re
from collections.abc import Callable
from typing import Optional

# Unicode bidirectional control characters.  MediaWiki strips these from
# titles and we strip them from template names and arguments.
UNICODE_BIDI_RE: re.Pattern[str] = re.compile(r"[\u200E\u200F\u202A-\u202E]+")

# Tags whose content is not interpreted as wikitext ("transclusion
# preventing" tags).  Headings, parameters and templates inside these are
# ignored by the scanners.
TP_TAG_NAMES: frozenset[str] = frozenset(
    [
        "comment",
        "nowiki",
        "pre",
        "syntaxhighlight",
        "source",
        "math",
    ]
)


def clean(text: str, trim: bool = True) -> str:
    """Removes unicode bidirectional characters from ``text`` and, unless
    ``trim`` is False, leading and trailing whitespace."""
    text = UNICODE_BIDI_RE.sub("", text)
    if trim:
        text = text.strip()
    return text


def byte_length(text: str) -> int:
    """Returns the length of the string in UTF-8 bytes."""
    return len(text.encode("utf-8", "surrogatepass"))


def code_point_length(text: str) -> int:
    # Python strings are sequences of code points already
    return len(text)


def uc_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def lc_first(text: str) -> str:
    return text[:1].lower() + text[1:]


def _trim_length(
    safe_val: str,
    new_val: str,
    length: int,
    length_fn: Callable[[str], int],
) -> tuple[str, bool]:
    """Trims ``new_val`` so that ``length_fn(new_val) <= length``.  Only the
    part of ``new_val`` that was inserted relative to ``safe_val`` is
    chopped, so "foo" -> "fobaro" with a limit of 4 gives "fobo"."""
    if length_fn(new_val) <= length:
        return new_val, False

    # Figure out what was added and limit the addition
    old_val = safe_val
    matches_len = min(len(new_val), len(old_val))
    start_matches = 0
    while (
        start_matches < matches_len
        and old_val[start_matches] == new_val[start_matches]
    ):
        start_matches += 1
    end_matches = 0
    while (
        end_matches < matches_len - start_matches
        and old_val[len(old_val) - 1 - end_matches]
        == new_val[len(new_val) - 1 - end_matches]
    ):
        end_matches += 1

    head = new_val[:start_matches]
    inserted = new_val[start_matches : len(new_val) - end_matches]
    tail = new_val[len(new_val) - end_matches :]
    while length_fn(head + inserted + tail) > length and inserted:
        inserted = inserted[:-1]

    result = head + inserted + tail
    # A pathological length_fn may never get under the limit
    return result, result != new_val


def trim_byte_length(
    safe_val: str,
    new_val: str,
    byte_limit: int,
    filter_fn: Optional[Callable[[str], str]] = None,
) -> tuple[str, bool]:
    """Trims down ``new_val`` to at most ``byte_limit`` UTF-8 bytes.
    Returns the new value and whether it was trimmed."""
    if filter_fn is not None:
        return _trim_length(
            safe_val, new_val, byte_limit, lambda v: byte_length(filter_fn(v))
        )
    return _trim_length(safe_val, new_val, byte_limit, byte_length)


def trim_code_point_length(
    safe_val: str,
    new_val: str,
    code_point_limit: int,
    filter_fn: Optional[Callable[[str], str]] = None,
) -> tuple[str, bool]:
    """Like ``trim_byte_length()``, but counts code points."""
    if filter_fn is not None:
        return _trim_length(
            safe_val,
            new_val,
            code_point_limit,
            lambda v: code_point_length(filter_fn(v)),
        )
    return _trim_length(safe_val, new_val, code_point_limit, code_point_length)
