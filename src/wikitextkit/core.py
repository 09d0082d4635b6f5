# Definition of the processing context for one wikitext snapshot: cached
# tag, section and parameter scans, template scanning, and diagnostics.
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Optional, TypedDict

from .common import byte_length
from .logging_utils import logger
from .parameters import ParameterSpan, scan_parameters
from .sections import Section, segment_sections
from .tags import TagSpan, scan_tags
from .template import ParsedTemplate
from .templates import scan_templates

if TYPE_CHECKING:
    from .revision import PageFetcher, Revision


class DiagnosticData(TypedDict):
    msg: str
    trace: str
    called_from: str


class CollatedDiagnosticData(TypedDict):
    warnings: list[DiagnosticData]
    debugs: list[DiagnosticData]


class Wikitext:
    """Context for parsing one immutable snapshot of wikitext.  Tags,
    sections and parameters are scanned once on first use and cached;
    the getters and parse methods return copies, so callers cannot modify
    the cache.  Templates are scanned anew on each call since they are
    returned as mutable objects owned by the caller."""

    __slots__ = (
        "wikitext",  # The input text, never modified
        "lang_code",  # Selects the namespace table used for titles
        "revision",  # Revision the text was fetched from, or None
        "tags",  # Cached result of scan_tags() or None
        "sections",  # Cached result of segment_sections() or None
        "parameters",  # Cached result of scan_parameters() or None
        "debugs",  # List of debug messages
        "warnings",  # List of warning messages
        "lock",  # Guards the first computation of each cache
    )

    def __init__(
        self,
        text: str,
        lang_code: str = "en",
        revision: Optional["Revision"] = None,
        quiet: bool = False,
    ) -> None:
        assert isinstance(text, str)
        assert isinstance(lang_code, str)
        self.wikitext = text
        self.lang_code = lang_code
        self.revision = revision
        self.tags: Optional[list[TagSpan]] = None
        self.sections: Optional[list[Section]] = None
        self.parameters: Optional[list[ParameterSpan]] = None
        self.debugs: list[DiagnosticData] = []
        self.warnings: list[DiagnosticData] = []
        self.lock = threading.Lock()
        if not quiet:
            logger.setLevel(logging.DEBUG)

    @classmethod
    def new_from_revision(
        cls, revision: "Revision", lang_code: str = "en"
    ) -> "Wikitext":
        return cls(revision.content, lang_code=lang_code, revision=revision)

    @classmethod
    def new_from_title(
        cls, fetcher: "PageFetcher", title: str, lang_code: str = "en"
    ) -> Optional["Wikitext"]:
        """Fetches the latest revision of a page with ``fetcher`` and
        returns a context for its text, or None if the page does not exist
        or could not be fetched."""
        revision = fetcher.fetch(title)
        if not revision:
            return None
        return cls.new_from_revision(revision, lang_code)

    @property
    def length(self) -> int:
        return len(self.wikitext)

    @property
    def byte_length(self) -> int:
        if self.revision is not None:
            return self.revision.length
        return byte_length(self.wikitext)

    def get_revision(self) -> Optional["Revision"]:
        if self.revision is None:
            return None
        return replace(self.revision)

    def _fmt_msg(self, kind: str, msg: str, trace: Optional[str]) -> str:
        loc = "ERROR_TITLE"
        if self.revision is not None:
            loc = self.revision.title
        if trace:
            msg += "\n" + trace
        return "{}: {}: {}".format(loc, kind, msg)

    def warning(
        self, msg: str, trace: Optional[str] = None, sortid="XYZunsorted"
    ) -> None:
        """Logs a warning message.  The message is also saved in
        self.warnings."""
        assert isinstance(msg, str)
        assert isinstance(trace, (str, type(None)))
        assert isinstance(sortid, str)
        # sortid should be a static string only used to sort
        # messages into buckets based on where they have been called
        self.warnings.append(
            {"msg": msg, "trace": trace or "", "called_from": sortid}
        )
        logger.warning(self._fmt_msg("WARNING", msg, trace))

    def debug(
        self, msg: str, trace: Optional[str] = None, sortid="XYZunsorted"
    ) -> None:
        """Logs a debug message.  The message is also saved in
        self.debugs."""
        assert isinstance(msg, str)
        assert isinstance(trace, (str, type(None)))
        assert isinstance(sortid, str)
        self.debugs.append(
            {"msg": msg, "trace": trace or "", "called_from": sortid}
        )
        logger.debug(self._fmt_msg("DEBUG", msg, trace))

    def merge_diagnostics(self, other: "Wikitext") -> None:
        """Appends the messages collected by ``other`` (a context used for a
        part of this text) to this context."""
        self.warnings.extend(other.warnings)
        self.debugs.extend(other.debugs)

    def to_return(self) -> CollatedDiagnosticData:
        """Returns a dictionary with warnings and debug messages from the
        context.  The value returned by this function is JSON-compatible
        and can easily be returned by a parallel process."""
        return {
            "warnings": self.warnings,
            "debugs": self.debugs,
        }

    def _ensure_tags(self) -> list[TagSpan]:
        if self.tags is None:
            with self.lock:
                if self.tags is None:
                    self.tags = scan_tags(self.wikitext)
        return self.tags

    def parse_tags(
        self, condition: Optional[Callable[[TagSpan], bool]] = None
    ) -> list[TagSpan]:
        """Returns the tags and comments in the text, outer tags before the
        tags they contain, optionally only those for which ``condition``
        returns True."""
        tags = [replace(x) for x in self._ensure_tags()]
        if condition is None:
            return tags
        return [x for x in tags if condition(x)]

    def get_tags(self) -> Optional[list[TagSpan]]:
        """Returns a copy of the cached tags, or None if parse_tags() has
        not been called."""
        if self.tags is None:
            return None
        return [replace(x) for x in self.tags]

    def modify_tags(
        self, modifier: Callable[[list[TagSpan]], list[Optional[str]]]
    ) -> str:
        """Calls ``modifier`` with (copies of) the tags in the text.  It
        returns a list with, for each tag, a replacement text or None to
        keep the tag.  Returns the modified text; this context is not
        changed.

        Replacements are applied from the outer tags to the inner ones.
        A tag nested in a replaced tag is still found at its original
        offset, so the replacement of the outer tag should keep the text
        up to the end of the inner tag in place (e.g. only add an end
        tag)."""
        tags = self.parse_tags()
        replacements = modifier([replace(x) for x in tags])
        assert len(replacements) == len(tags)
        text = self.wikitext
        starts = [x.start_index for x in tags]
        ends = [x.end_index for x in tags]
        for i, repl in enumerate(replacements):
            if repl is None:
                continue
            old_end = ends[i]
            text = text[: starts[i]] + repl + text[old_end:]
            gap = len(repl) - (old_end - starts[i])
            ends[i] += gap
            for j in range(len(tags)):
                if j == i:
                    continue
                if starts[j] >= old_end:
                    starts[j] += gap
                    ends[j] += gap
                elif starts[j] <= starts[i] and ends[j] >= old_end:
                    ends[j] += gap
        return text

    def parse_sections(self) -> list[Section]:
        """Returns the sections of the text, starting with the part before
        the first heading."""
        tags = self._ensure_tags()
        if self.sections is None:
            with self.lock:
                if self.sections is None:
                    self.sections = segment_sections(self.wikitext, tags)
        return [replace(x) for x in self.sections]

    def get_sections(self) -> Optional[list[Section]]:
        if self.sections is None:
            return None
        return [replace(x) for x in self.sections]

    def _unparsable_parameter(self, para: str) -> None:
        self.debug(
            "Unparsable parameter: {}".format(para), sortid="core/215"
        )

    def parse_parameters(
        self,
        recursive: bool = True,
        condition: Optional[Callable[[ParameterSpan], bool]] = None,
    ) -> list[ParameterSpan]:
        """Returns the parameter references ({{{name|default}}}) in the
        text.  Unless ``recursive`` is True, references nested in the
        default value of another reference are left out."""
        tags = self._ensure_tags()
        if self.parameters is None:
            with self.lock:
                if self.parameters is None:
                    self.parameters = scan_parameters(
                        self.wikitext, tags, self._unparsable_parameter
                    )
        params = [
            replace(x)
            for x in self.parameters
            if recursive or x.nest_level == 0
        ]
        if condition is None:
            return params
        return [x for x in params if condition(x)]

    def get_parameters(self) -> Optional[list[ParameterSpan]]:
        if self.parameters is None:
            return None
        return [replace(x) for x in self.parameters]

    def parse_templates(
        self,
        name_predicate: Optional[Callable[[str], bool]] = None,
        template_predicate: Optional[
            Callable[[ParsedTemplate], bool]
        ] = None,
        recursive_predicate: Optional[
            Callable[[ParsedTemplate], bool]
        ] = None,
        hierarchy: Optional[list[list[str]]] = None,
    ) -> list[ParsedTemplate]:
        """Returns the templates in the text, including templates nested
        in other templates.  See ``scan_templates()`` for the
        arguments."""
        return scan_templates(
            self,
            name_predicate=name_predicate,
            template_predicate=template_predicate,
            recursive_predicate=recursive_predicate,
            hierarchy=hierarchy,
        )

    def __str__(self) -> str:
        return self.wikitext

    def __repr__(self) -> str:
        return "<Wikitext {!r}>".format(
            self.wikitext if len(self.wikitext) < 40
            else self.wikitext[:37] + "..."
        )

