from .core import DiagnosticData, Wikitext
from .link import Link
from .parameters import ParameterSpan
from .revision import EditRequest, PageFetcher, PageWriter, Revision
from .sections import Section
from .tags import TagSpan
from .template import (
    LinebreakPredicate,
    NewArg,
    ParsedTemplate,
    Template,
    TemplateArgument,
)
from .title import InvalidTitleError, ParsedTitle, Title

__all__ = (
    "Wikitext",
    "DiagnosticData",
    "Title",
    "ParsedTitle",
    "InvalidTitleError",
    "TagSpan",
    "Section",
    "ParameterSpan",
    "Template",
    "ParsedTemplate",
    "TemplateArgument",
    "NewArg",
    "LinebreakPredicate",
    "Link",
    "Revision",
    "EditRequest",
    "PageFetcher",
    "PageWriter",
)
