# Splitting wikitext into sections by headings
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import re
from dataclasses import dataclass
from typing import NamedTuple

from .common import TP_TAG_NAMES, clean
from .tags import TagSpan, in_tags

# Notes on the markup of headings:
#   "== 1 ===" is <h2>1 =</h2>
#   "=== 1 ==" is <h2>= 1</h2>
#   "== 1 ==x" is not a heading
#   "== 1 ==<!--x-->" is <h2>1</h2>
#   "======= 1 =======" is <h6>= 1 =</h6>
HEADING_RE = re.compile(r"^(={1,6})(.+?)(={1,6})([^\n]*)\n?$", re.MULTILINE)
HEADING_TAG_RE = re.compile(r"h([1-6])")
# Characters allowed after the closing "="s, in addition to comments
HEADING_TRAILER_WS_RE = re.compile(r"[\t \u00a0]")


@dataclass
class Section:
    title: str  # heading text without "="s and comments
    heading: str  # the whole heading line, or "" for the top section
    level: int
    index: int
    start_index: int
    end_index: int
    content: str


class _Heading(NamedTuple):
    text: str
    title: str
    level: int
    index: int


def _remove_comments(text: str, comments: list[TagSpan]) -> str:
    for tag in comments:
        text = text.replace(tag.text, "", 1)
    return text


def segment_sections(text: str, tags: list[TagSpan]) -> list[Section]:
    """Splits ``text`` into sections.  ``tags`` is the result of
    ``scan_tags(text)``.  The first section is the part before the first
    heading, with level 1 and an empty title.  The content of each
    section runs up to the next heading of the same or a higher level."""
    tp_tags = [t for t in tags if t.name in TP_TAG_NAMES]
    comments = [t for t in tp_tags if t.name == "comment"]

    headings: list[_Heading] = []
    for tag in tags:
        m = HEADING_TAG_RE.fullmatch(tag.name)
        if (
            m
            and not tag.self_closed
            and not in_tags(tp_tags, tag.start_index, tag.end_index)
        ):
            headings.append(
                _Heading(
                    tag.text,
                    clean(_remove_comments(tag.inner_text, comments)),
                    int(m.group(1)),
                    tag.start_index,
                )
            )

    for m in HEADING_RE.finditer(text):
        trailer = _remove_comments(m.group(4), comments)
        if HEADING_TRAILER_WS_RE.sub("", trailer):
            continue
        if in_tags(tp_tags, m.start(), m.end()):
            continue
        left, right = len(m.group(1)), len(m.group(3))
        level = min(left, right)
        # Extra "="s on either side are part of the title
        title = "=" * (left - level) + m.group(2) + "=" * (right - level)
        headings.append(
            _Heading(
                m.group(0).strip(),
                clean(_remove_comments(title, comments)),
                level,
                m.start(),
            )
        )

    headings.sort(key=lambda h: h.index)
    headings.insert(0, _Heading("", "", 1, 0))

    sections: list[Section] = []
    for i, h in enumerate(headings):
        end = len(text)
        if i == 0:
            if len(headings) > 1:
                end = headings[1].index
        else:
            for nxt in headings[i + 1 :]:
                if nxt.level <= h.level:
                    end = nxt.index
                    break
        sections.append(
            Section(
                title=h.title,
                heading=h.text,
                level=h.level,
                index=i,
                start_index=h.index,
                end_index=end,
                content=text[h.index : end],
            )
        )
    return sections
