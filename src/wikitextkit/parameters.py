# Scanner for template parameter references ({{{name|default}}})
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from .common import TP_TAG_NAMES
from .tags import TagSpan, in_tags

PARAMETER_RE = re.compile(r"\{\{\{[^{][^}]*\}\}\}")
LEFT_BRACES_RE = re.compile(r"\{{2,}")
RIGHT_BRACES_RE = re.compile(r"\}{2,}")
BRACES_RE = re.compile(r"\{{2,}|\}{2,}")


@dataclass
class ParameterSpan:
    text: str
    start_index: int
    end_index: int
    nest_level: int


def _count_braces(regex: re.Pattern[str], text: str) -> int:
    return sum(len(m.group(0)) for m in regex.finditer(text))


def _repair_end(text: str, start: int, end: int) -> Optional[int]:
    """Finds the real end of a parameter reference whose naive match
    ``text[start:end]`` was cut short by a nested template or parameter,
    e.g. ``{{{1|{{{page|{{PAGENAME}}}`` in
    ``{{{1|{{{page|{{PAGENAME}}}}}}}}``.  Returns None if the braces
    cannot be balanced."""
    para = text[start:end]
    left = _count_braces(LEFT_BRACES_RE, para)
    right = _count_braces(RIGHT_BRACES_RE, para)
    if left <= right:
        return end
    # Rescan from the closing braces of the naive match.  Opening braces
    # met on the way (e.g. a second nested parameter) need closing too.
    pos = end - 3
    right -= 3
    while True:
        m = BRACES_RE.search(text, pos)
        if m is None:
            return None
        run = len(m.group(0))
        if m.group(0)[0] == "{":
            left += run
        elif left <= right + run:
            return m.start() + (left - right)
        else:
            right += run
        pos = m.end()


def scan_parameters(
    text: str,
    tags: list[TagSpan],
    on_error: Optional[Callable[[str], None]] = None,
) -> list[ParameterSpan]:
    """Scans ``text`` for parameter references.  ``tags`` is the result of
    ``scan_tags(text)``; parameters inside transclusion-preventing tags are
    ignored.  Parameter references nested in the default value of another
    are also returned, with a ``nest_level`` greater than zero.  Spans
    whose braces cannot be balanced are skipped and reported through
    ``on_error``."""
    tp_tags = [t for t in tags if t.name in TP_TAG_NAMES]
    params: list[ParameterSpan] = []
    # End indexes of the accepted parameters enclosing the scan position
    enclosing: list[int] = []
    pos = 0
    while True:
        m = PARAMETER_RE.search(text, pos)
        if m is None:
            break
        start = m.start()
        end = _repair_end(text, start, m.end())
        if end is None:
            if on_error is not None:
                on_error(m.group(0))
            pos = m.end()
            continue
        pos = end
        if in_tags(tp_tags, start, end):
            continue
        while enclosing and enclosing[-1] <= start:
            enclosing.pop()
        para = text[start:end]
        params.append(ParameterSpan(para, start, end, len(enclosing)))
        if "{{{" in para[3:]:
            # Rescan the inside for nested parameters
            enclosing.append(end)
            pos = start + 3
    return params
