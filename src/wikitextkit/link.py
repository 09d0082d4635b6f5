# Model of a wikilink or external link
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

from typing import Optional

from .title import Title


class Link:
    """A link that can be rendered as ``[[target|display]]``, or as
    ``[target display]`` for external links."""

    __slots__ = ("target", "title", "display", "external", "lang_code")

    def __init__(
        self,
        target: str,
        display: str = "",
        external: bool = False,
        lang_code: str = "en",
    ) -> None:
        assert isinstance(target, str)
        assert isinstance(display, str)
        self.lang_code = lang_code
        self.target = target
        # None for targets like [[{{MAGICWORD}}]] and for URLs
        self.title: Optional[Title] = None
        if not external:
            self.title = Title.new_from_text(target, lang_code=lang_code)
        self.display = display
        self.external = external

    def get_target(self) -> str:
        return self.target

    def set_target(self, target: str) -> "Link":
        self.target = target
        if not self.external:
            self.title = Title.new_from_text(target, lang_code=self.lang_code)
        return self

    def get_display(self) -> str:
        return self.display

    def set_display(self, display: str) -> "Link":
        self.display = display
        return self

    def is_external(self) -> bool:
        return self.external

    def render(self) -> str:
        if self.external:
            if self.display:
                return "[{} {}]".format(self.target, self.display)
            return "[{}]".format(self.target)
        if self.display:
            return "[[{}|{}]]".format(self.target, self.display)
        return "[[{}]]".format(self.target)

    def __str__(self) -> str:
        return self.render()
