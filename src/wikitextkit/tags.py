# Scanner for HTML-like tags and comments in wikitext
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import re
from dataclasses import dataclass
from typing import NamedTuple

# No whitespace is allowed between "<" and the tag name, "</" and the tag
# name, or inside "/>"
OPENING_TAG_RE = re.compile(r"<(?!/)([^>\s/]+)(?:/|\s[^>]*)?>")
CLOSING_TAG_RE = re.compile(r"</([^>\s]+)(?:\s[^>]*)?>")


@dataclass
class TagSpan:
    name: str  # lowercased tag name, or "comment" for <!-- -->
    text: str  # the tag from "<" to ">" of the end tag
    inner_text: str
    self_closed: bool
    unclosed: bool
    start_index: int
    end_index: int
    nest_level: int


class _OpenTag(NamedTuple):
    name: str
    index: int
    inner_index: int


def scan_tags(text: str) -> list[TagSpan]:
    """Scans ``text`` for tags and comments, resolving nesting with a stack.
    Mismatched end tags never cause an error: tags that are open above the
    matching start tag are closed as unclosed spans at the end tag, and
    tags still open at the end of the text run to the end of the text.
    The result is ordered by start index, outer tags first."""
    assert isinstance(text, str)
    tags: list[TagSpan] = []
    # The last-found open tag is at the end.  While a comment is open,
    # no other tag is opened.
    stack: list[_OpenTag] = []

    i = 0
    n = len(text)
    while i < n:
        if stack and stack[-1].name == "comment":
            if text.startswith("-->", i):
                top = stack.pop()
                end = i + 3
                tags.append(
                    TagSpan(
                        name="comment",
                        text=text[top.index : end],
                        inner_text=text[top.inner_index : i],
                        self_closed=i == top.inner_index,
                        unclosed=False,
                        start_index=top.index,
                        end_index=end,
                        nest_level=len(stack),
                    )
                )
                i = end
                continue
            i += 1
            continue

        if text[i] != "<":
            i += 1
            continue

        if text.startswith("<!--", i):
            stack.append(_OpenTag("comment", i, i + 4))
            i += 4
            continue

        m = OPENING_TAG_RE.match(text, i)
        if m:
            name = m.group(1).lower()
            if m.group(0).endswith("/>"):
                tags.append(
                    TagSpan(
                        name=name,
                        text=m.group(0),
                        inner_text="",
                        self_closed=True,
                        unclosed=False,
                        start_index=i,
                        end_index=m.end(),
                        nest_level=len(stack),
                    )
                )
            else:
                stack.append(_OpenTag(name, i, m.end()))
            i = m.end()
            continue

        m = CLOSING_TAG_RE.match(text, i) if stack else None
        if m:
            name = m.group(1).lower()
            # Pop until the matching start tag is found; everything above
            # it is closed as unclosed at the start of this end tag
            while stack:
                top = stack.pop()
                same = top.name == name
                end = m.end() if same else i
                tags.append(
                    TagSpan(
                        name=top.name,
                        text=text[top.index : end],
                        inner_text=text[top.inner_index : i],
                        self_closed=False,
                        unclosed=not same,
                        start_index=top.index,
                        end_index=end,
                        nest_level=len(stack),
                    )
                )
                if same:
                    break
            i = m.end()
            continue
        i += 1

    # Tags left open run to the end of the text
    for depth, top in enumerate(stack):
        tags.append(
            TagSpan(
                name=top.name,
                text=text[top.index :],
                inner_text=text[top.inner_index :],
                self_closed=False,
                unclosed=True,
                start_index=top.index,
                end_index=n,
                nest_level=depth,
            )
        )

    tags.sort(key=lambda t: (t.start_index, -t.end_index))
    return tags


def in_tags(tags: list[TagSpan], start: int, end: int) -> bool:
    """Returns True if the range [start, end) is strictly inside any of
    ``tags``."""
    return any(t.start_index < start and end < t.end_index for t in tags)
