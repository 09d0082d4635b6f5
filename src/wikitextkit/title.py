# Page title parsing and normalization, following the rules MediaWiki uses
# for mw.Title
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import json
import re
from collections.abc import Iterable
from functools import lru_cache
from importlib.resources import files
from typing import NamedTuple, Optional, Union

from lru import LRU

from .common import UNICODE_BIDI_RE, byte_length, trim_byte_length
from .namespaces import (
    EXTRA_SIGNATURE_NAMESPACES,
    NS_FILE,
    NS_MAIN,
    NS_MEDIA,
    NS_SPECIAL,
    NS_TALK,
    NamespaceTable,
    get_namespace_table,
)

TITLE_MAX_BYTES = 255
FILE_MAX_BYTES = 240

# Whitespace that is normalized to an underscore (from
# MediaWikiTitleCodec::splitTitleString()).  Tabs are not included.
WHITESPACE_RE = re.compile(
    r"[ _\u00A0\u1680\u180E\u2000-\u200A\u2028\u2029\u202F\u205F\u3000]+"
)
UNDERSCORE_TRIM_RE = re.compile(r"^_+|_+$")

# Splits a title into a namespace prefix (without colon) and the rest
SPLIT_RE = re.compile(r"^(.+?)_*:_*(.*)$", re.DOTALL)
USER_SPLIT_RE = re.compile(r"^(.+?)[ _]*:[ _]*(.*)$", re.DOTALL)

# Characters that cannot be used in page titles ($wgLegalTitleChars),
# URL percent encoding sequences and HTML character references
INVALID_RE = re.compile(
    r"[^ %!\"$&'()*,\-./0-9:;=?@A-Z\\^_`a-z~+\u0080-\U0010FFFF]"
    r"|%[0-9A-Fa-f]{2}"
    r"|&[0-9A-Za-z\u0080-\U0010FFFF]+;"
)

DIRECTORY_RE = re.compile(
    r"^(\.|\.\.|\./.*|\.\./.*|.*/\./.*|.*/\.\./.*|.*/\.|.*/\.\.)$", re.DOTALL
)


class SanitationRule(NamedTuple):
    pattern: re.Pattern[str]
    replace: str
    file_only: bool


# Rules applied by Title.new_from_user_input(), in order
SANITATION_RULES: tuple[SanitationRule, ...] = (
    # signature
    SanitationRule(re.compile(r"~{3}"), "", False),
    # control characters
    SanitationRule(re.compile(r"[\x00-\x1f\x7f]"), "", False),
    # URL encoding (possibly)
    SanitationRule(re.compile(r"%([0-9A-Fa-f]{2})"), r"% \1", False),
    # HTML character entities
    SanitationRule(
        re.compile(r"&(([0-9A-Za-z\x80-\xff]+|#\d+|#x[0-9A-Fa-f]+);)"),
        r"& \1",
        False,
    ),
    # slash, colon (not supported by file systems like NTFS/Windows,
    # Mac OS 9 [:], ext4 [/])
    SanitationRule(re.compile(r"[:/\\]"), "-", True),
    # brackets, greater than
    SanitationRule(re.compile(r"[}\]>]"), ")", False),
    # brackets, lower than
    SanitationRule(re.compile(r"[{\[<]"), "(", False),
    # everything that wasn't covered yet
    SanitationRule(INVALID_RE, "-", False),
    # directory structures
    SanitationRule(DIRECTORY_RE, "", False),
)

EXTENSION_NORMALIZATIONS: dict[str, str] = {
    "htm": "html",
    "jpeg": "jpg",
    "mpeg": "mpg",
    "tiff": "tif",
    "ogv": "ogg",
}


class InvalidTitleError(ValueError):
    """Raised by the Title constructor when a title cannot be parsed."""


class ParsedTitle(NamedTuple):
    namespace: int
    title: str
    fragment: Optional[str]


@lru_cache(maxsize=1)
def _load_upper_table() -> tuple[dict[str, Optional[str]], list[list[int]]]:
    with (
        files("wikitextkit")
        .joinpath("data/php_char_to_upper.json")
        .open(encoding="utf-8")
    ) as f:
        data = json.load(f)
    return data["map"], data["unchanged_ranges"]


def php_char_to_upper(ch: str) -> str:
    """Upper-cases a single character the way MediaWiki does for the first
    letter of a title.  This differs from ``str.upper()`` for titlecase
    digraphs, Georgian, and characters whose upper case form is longer
    than one character."""
    if not ch:
        return ch
    table, unchanged_ranges = _load_upper_table()
    if ch in table:
        mapped = table[ch]
        return ch if mapped is None else mapped
    cp = ord(ch)
    for first, last in unchanged_ranges:
        if first <= cp <= last:
            return ch
    upper = ch.upper()
    if len(upper) != 1:
        return ch
    return upper


def _text(dbkey: str) -> str:
    """Converts a db key to readable text."""
    return dbkey.replace("_", " ")


def _sanitize(text: str, file_rules: bool) -> str:
    for rule in SANITATION_RULES:
        if rule.file_only and not file_rules:
            continue
        text = rule.pattern.sub(rule.replace, text)
    return text


def _trim_to_byte_length(text: str, length: int) -> str:
    return trim_byte_length("", text, length)[0]


def _trim_file_name_to_byte_length(name: str, extension: str) -> str:
    # There is a special byte limit for file names; remember the dot
    return (
        _trim_to_byte_length(name, FILE_MAX_BYTES - len(extension) - 1)
        + "."
        + extension
    )


def _parse(
    title: str, namespace: Optional[int], table: NamespaceTable
) -> Optional[ParsedTitle]:
    ns = NS_MAIN if namespace is None else namespace
    title = UNICODE_BIDI_RE.sub("", title)
    title = WHITESPACE_RE.sub("_", title)
    title = UNDERSCORE_TRIM_RE.sub("", title)
    if "\ufffd" in title:
        # Contained illegal UTF-8 sequences or forbidden Unicode chars
        return None

    # An initial colon means the main namespace instead of the default
    if title.startswith(":"):
        ns = NS_MAIN
        title = UNDERSCORE_TRIM_RE.sub("", title[1:])
    if title == "":
        return None

    m = SPLIT_RE.match(title)
    if m:
        ns_id = table.get_ns_id_by_name(m.group(1))
        if ns_id is not None:
            ns = ns_id
            title = m.group(2)
            # Disallow titles like Talk:File:x (the subject page should
            # round-trip: talk:file:x -> file:x -> file_talk:x)
            if ns == NS_TALK:
                m = SPLIT_RE.match(title)
                if m and table.get_ns_id_by_name(m.group(1)) is not None:
                    return None

    fragment: Optional[str] = None
    i = title.find("#")
    if i != -1:
        # Must not be trimmed ("Example#_foo" is not the same as
        # "Example#foo")
        fragment = title[i + 1 :].replace("_", " ")
        title = UNDERSCORE_TRIM_RE.sub("", title[:i])

    if INVALID_RE.search(title):
        return None
    # Disallow titles that browsers or servers might resolve as directory
    # navigation
    if "." in title and (
        title in (".", "..")
        or title.startswith(("./", "../"))
        or "/./" in title
        or "/../" in title
        or title.endswith(("/.", "/.."))
    ):
        return None
    # Disallow the magic tilde sequence
    if "~~~" in title:
        return None
    # Titles exceeding the byte size limit are invalid, except for special
    # pages, e.g. [[Special:Block/Long name]]
    if ns != NS_SPECIAL and byte_length(title) > TITLE_MAX_BYTES:
        return None
    # Can't make a link to a namespace alone
    if title == "" and ns != NS_MAIN:
        return None
    # Any remaining initial colons are illegal
    if title.startswith(":"):
        return None

    if title and not table.is_case_sensitive(ns):
        title = php_char_to_upper(title[0]) + title[1:]
    return ParsedTitle(ns, title, fragment)


# Results of strict parsing.  Titles are immutable, so parse results can be
# shared between all callers.
_PARSE_CACHE = LRU(8192)


class Title:
    """A normalized page title: namespace id, canonical db key (spaces as
    underscores, first letter case-folded) and an optional fragment."""

    __slots__ = ("namespace", "title", "fragment", "lang_code", "_table")

    def __init__(
        self,
        title: str,
        namespace: Optional[int] = None,
        lang_code: str = "en",
        parsed: Optional[ParsedTitle] = None,
    ) -> None:
        """Parses ``title``; ``namespace`` is the default namespace, which
        a namespace prefix in ``title`` overrides.  Raises
        InvalidTitleError if the title is invalid."""
        assert isinstance(title, str)
        p = parsed or Title.parse(title, namespace, lang_code)
        if p is None:
            raise InvalidTitleError("Unable to parse title {!r}".format(title))
        self.namespace: int = p.namespace
        self.title: str = p.title
        self.fragment: Optional[str] = p.fragment
        self.lang_code = lang_code
        self._table = get_namespace_table(lang_code)

    @staticmethod
    def parse(
        title: str, namespace: Optional[int] = None, lang_code: str = "en"
    ) -> Optional[ParsedTitle]:
        """Parses a title string and returns its namespace, canonical title
        and fragment, or None if the title is invalid."""
        key = (title, namespace, lang_code)
        if key in _PARSE_CACHE:
            return _PARSE_CACHE[key]
        ret = _parse(title, namespace, get_namespace_table(lang_code))
        _PARSE_CACHE[key] = ret
        return ret

    @classmethod
    def new_from_text(
        cls, title: str, namespace: Optional[int] = None, lang_code: str = "en"
    ) -> Optional["Title"]:
        """Like the constructor, but returns None for invalid titles."""
        parsed = cls.parse(title, namespace, lang_code)
        if parsed is None:
            return None
        return cls(title, namespace, lang_code, parsed)

    @classmethod
    def make_title(
        cls, namespace: int, title: str, lang_code: str = "en"
    ) -> Optional["Title"]:
        """Creates a title in a fixed namespace.  Unlike new_from_text(),
        a namespace prefix in ``title`` does not override ``namespace``
        (except for the main namespace)."""
        table = get_namespace_table(lang_code)
        if not table.is_known_namespace(namespace):
            return None
        return cls.new_from_text(
            table.get_namespace_prefix(namespace) + title, lang_code=lang_code
        )

    @classmethod
    def new_from_user_input(
        cls,
        title: str,
        namespace: Optional[int] = None,
        for_uploading: bool = True,
        lang_code: str = "en",
    ) -> Optional["Title"]:
        """Creates a title from free-form user input, replacing characters
        that are not allowed in titles.  If ``for_uploading`` is true, file
        names are trimmed so that a file could be uploaded under the
        title.  Returns None if no valid title can be made."""
        table = get_namespace_table(lang_code)
        ns = NS_MAIN if namespace is None else namespace

        title = re.sub(r"\s", " ", title).strip()
        if title.startswith(":"):
            ns = NS_MAIN
            title = title[1:].strip(" _")

        m = USER_SPLIT_RE.match(title)
        if m:
            ns_id = table.get_ns_id_by_name(m.group(1))
            if ns_id is not None:
                ns = ns_id
                title = m.group(2)

        if ns == NS_MEDIA or (for_uploading and ns == NS_FILE):
            title = _sanitize(title, True)
            # Operate on the file extension.  Spaces between the name and
            # ".ext" are stripped.
            last_dot = title.rfind(".")
            if last_dot == -1 or last_dot >= len(title) - 1:
                # No or empty file extension
                return None
            ext = title[last_dot + 1 :]
            title = title[:last_dot].strip()
            title = _trim_file_name_to_byte_length(title, ext)
        else:
            title = _sanitize(title, False)
            # Cut titles exceeding the size of the database field
            if ns != NS_SPECIAL:
                title = _trim_to_byte_length(title, TITLE_MAX_BYTES)

        title = title.lstrip(":")
        return cls.new_from_text(title, ns, lang_code)

    @classmethod
    def new_from_file_name(
        cls, unclean_name: str, lang_code: str = "en"
    ) -> Optional["Title"]:
        """Sanitizes a file name from the user's file system into a valid
        file title."""
        return cls.new_from_user_input(
            unclean_name, NS_FILE, lang_code=lang_code
        )

    @staticmethod
    def is_talk_namespace(namespace: int) -> bool:
        return namespace > NS_MAIN and namespace % 2 == 1

    @staticmethod
    def want_signatures_namespace(namespace: int) -> bool:
        return (
            Title.is_talk_namespace(namespace)
            or namespace in EXTRA_SIGNATURE_NAMESPACES
        )

    @staticmethod
    def normalize_extension(extension: str) -> str:
        """Normalizes a file extension to the common form, making it
        lowercase and checking some synonyms.  Extensions with
        non-alphanumeric characters are discarded."""
        lower = extension.lower()
        if lower in EXTENSION_NORMALIZATIONS:
            return EXTENSION_NORMALIZATIONS[lower]
        if re.fullmatch(r"[0-9a-z]+", lower):
            return lower
        return ""

    def _concatable_fragment(self, with_fragment: bool) -> str:
        if with_fragment and self.fragment is not None:
            return "#" + self.fragment
        return ""

    def get_namespace_id(self) -> int:
        return self.namespace

    def get_namespace_prefix(self) -> str:
        """Returns e.g. "File:" for "File:Example_image.svg", or "" in the
        main namespace."""
        return self._table.get_namespace_prefix(self.namespace)

    def get_main(self, with_fragment: bool = False) -> str:
        """Returns the page name without namespace prefix, e.g.
        "Example_image.svg" for "File:Example_image.svg"."""
        return self.title + self._concatable_fragment(with_fragment)

    def get_main_text(self, with_fragment: bool = False) -> str:
        return _text(self.title) + self._concatable_fragment(with_fragment)

    def get_prefixed_db(self, with_fragment: bool = False) -> str:
        return (
            self.get_namespace_prefix()
            + self.title
            + self._concatable_fragment(with_fragment)
        )

    def get_prefixed_text(self, with_fragment: bool = False) -> str:
        return _text(
            self.get_namespace_prefix() + self.title
        ) + self._concatable_fragment(with_fragment)

    def get_relative_text(
        self, namespace: int, with_fragment: bool = False
    ) -> str:
        """Returns the page name relative to a namespace: "Foo:Bar" relative
        to the Foo namespace becomes "Bar", and "Bar" relative to any
        non-main namespace becomes ":Bar"."""
        if self.namespace == namespace:
            return self.get_main_text(with_fragment)
        if self.namespace == NS_MAIN:
            return ":" + self.get_prefixed_text(with_fragment)
        return self.get_prefixed_text(with_fragment)

    def get_fragment(self) -> Optional[str]:
        return self.fragment

    def get_extension(self) -> Optional[str]:
        last_dot = self.title.rfind(".")
        if last_dot == -1:
            return None
        return self.title[last_dot + 1 :] or None

    def get_file_name_without_extension(self) -> str:
        # Works for non-file titles too, with nonsensical results
        ext = self.get_extension()
        if ext is None:
            return self.get_main()
        return self.get_main()[: -len(ext) - 1]

    def get_file_name_text_without_extension(self) -> str:
        return _text(self.get_file_name_without_extension())

    def is_talk_page(self) -> bool:
        return Title.is_talk_namespace(self.namespace)

    def can_have_talk_page(self) -> bool:
        return self.namespace >= NS_MAIN

    def get_talk_page(self) -> Optional["Title"]:
        if not self.can_have_talk_page():
            return None
        if self.is_talk_page():
            return self
        return Title.make_title(
            self.namespace + 1, self.get_main_text(), self.lang_code
        )

    def get_subject_page(self) -> Optional["Title"]:
        if not self.is_talk_page():
            return self
        return Title.make_title(
            self.namespace - 1, self.get_main_text(), self.lang_code
        )

    def _coerce(self, other: Union[str, "Title"]) -> Optional["Title"]:
        if isinstance(other, Title):
            return other
        return Title.new_from_text(other, lang_code=self.lang_code)

    def equals(self, other: Union[str, "Title"]) -> bool:
        t = self._coerce(other)
        return t is not None and str(self) == str(t)

    def equals_to_any(self, others: Iterable[Union[str, "Title"]]) -> bool:
        return any(self.equals(x) for x in others)

    def equals_to_all(self, others: Iterable[Union[str, "Title"]]) -> bool:
        return all(self.equals(x) for x in others)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Title):
            return NotImplemented
        return (
            self.namespace == other.namespace
            and self.title == other.title
            and self.fragment == other.fragment
        )

    def __hash__(self) -> int:
        return hash((self.namespace, self.title, self.fragment))

    def __str__(self) -> str:
        return self.get_prefixed_db(True)

    def __repr__(self) -> str:
        return "Title({!r}, namespace={!r})".format(
            self.get_prefixed_db(True), self.namespace
        )
