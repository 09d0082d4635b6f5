# Page revisions and edit requests exchanged with the code that reads and
# writes pages on a wiki.  No network access is done here.
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import datetime
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

import dateparser

from .logging_utils import logger

TIMESTAMP_SETTINGS = {
    "RETURN_AS_TIMEZONE_AWARE": True,
    "TIMEZONE": "UTC",
}


@dataclass
class Revision:
    """The latest revision of a page, as returned by the MediaWiki API."""

    pageid: int
    revid: int
    ns: int
    title: str
    basetimestamp: str  # timestamp of the revision
    curtimestamp: str  # timestamp of the API request
    length: int  # bytes
    content: str
    redirect: bool = False

    @property
    def base_time(self) -> Optional[datetime.datetime]:
        return dateparser.parse(self.basetimestamp, settings=TIMESTAMP_SETTINGS)

    @property
    def fetch_time(self) -> Optional[datetime.datetime]:
        return dateparser.parse(self.curtimestamp, settings=TIMESTAMP_SETTINGS)


def revision_from_api(response: Any) -> Union[Revision, bool, None]:
    """Converts the response of an ``action=query&prop=info|revisions``
    request (with ``rvprop=ids|timestamp|content``, ``rvslots=main``,
    ``curtimestamp=1`` and ``formatversion=2``) for one page into a
    Revision.  Returns False if the page does not exist and None if the
    response is not what was expected."""
    if not isinstance(response, dict):
        return None
    query = response.get("query")
    if not isinstance(query, dict):
        return None
    pages = query.get("pages")
    if not isinstance(pages, list) or not pages:
        return None
    page = pages[0]
    if not isinstance(page, dict):
        return None
    if page.get("missing"):
        return False
    revisions = page.get("revisions")
    curtimestamp = response.get("curtimestamp")
    if (
        not isinstance(page.get("pageid"), int)
        or not isinstance(revisions, list)
        or not revisions
        or not isinstance(curtimestamp, str)
        or not isinstance(page.get("length"), int)
    ):
        logger.debug("unexpected API response for page {!r}".format(
            page.get("title")
        ))
        return None
    rev = revisions[0]
    try:
        content = rev["slots"]["main"]["content"]
        return Revision(
            pageid=page["pageid"],
            revid=rev["revid"],
            ns=page["ns"],
            title=page["title"],
            basetimestamp=rev["timestamp"],
            curtimestamp=curtimestamp,
            length=page["length"],
            content=content,
            redirect=bool(page.get("redirect")),
        )
    except (KeyError, TypeError):
        logger.debug("unexpected revision data for page {!r}".format(
            page.get("title")
        ))
        return None


@dataclass
class EditRequest:
    """Parameters of an ``action=edit`` request.  The timestamps let the
    wiki detect edit conflicts."""

    title: str
    text: str
    summary: str
    minor: bool = False
    basetimestamp: Optional[str] = None
    starttimestamp: Optional[str] = None

    @classmethod
    def from_revision(
        cls, revision: Revision, text: str, summary: str, minor: bool = False
    ) -> "EditRequest":
        return cls(
            title=revision.title,
            text=text,
            summary=summary,
            minor=minor,
            basetimestamp=revision.basetimestamp,
            starttimestamp=revision.curtimestamp,
        )


class PageFetcher(Protocol):
    def fetch(self, title: str) -> Union[Revision, bool, None]:
        """Returns the latest revision of the page, False if the page
        does not exist, or None if it could not be fetched."""
        ...


class PageWriter(Protocol):
    def write(self, request: EditRequest) -> bool:
        """Saves the page.  Returns True on success."""
        ...
