# In-memory model of a template invocation and its arguments
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import re
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass, replace
from typing import Any, NamedTuple, Optional, Union

from .common import clean, uc_first
from .namespaces import NS_MAIN, NS_TEMPLATE
from .title import Title

NAME_COLON_RE = re.compile(r"^[^\S\r\n]*:[^\S\r\n]*")
TRAILING_SPACE_RE = re.compile(r"[^\S\n\r]*\Z")
LEADING_SPACE_RE = re.compile(r"\A[^\S\n\r]*")

NAME_PROPS = (None, "full", "clean", "fullclean")


@dataclass
class TemplateArgument:
    # Cleaned name; numbered ("1", "2", ...) for unnamed arguments
    name: str
    # Cleaned value.  Unnamed arguments keep surrounding spaces but lose
    # trailing line breaks.
    value: str
    text: str  # "|name=value" or "|value" from name and value
    ufname: str  # unformatted name
    ufvalue: str  # unformatted value
    uftext: str  # "|ufname=ufvalue" or "|ufvalue"
    unnamed: bool


class NewArg(NamedTuple):
    """An argument to add.  An empty ``name`` makes an unnamed argument
    unless ``named`` is True, as for ``|=value``.
    Leading and trailing spaces are kept in the unformatted rendering, and
    ``value`` may end with "\\n" to put a line break before the next
    argument."""

    name: str
    value: str
    named: bool = False


class LinebreakPredicate(NamedTuple):
    # Whether to break the line after the name slot
    name: Callable[[str], bool]
    # Whether to break the line after an argument
    args: Callable[[TemplateArgument], bool]


def _name_regex(name: Union[str, re.Pattern[str]]) -> re.Pattern[str]:
    if isinstance(name, str):
        return re.compile(r"^{}$".format(re.escape(name)))
    return name


class Template:
    """A template invocation ``{{name|arg1|name2=value2}}``.  Arguments can
    be added, updated and deleted, and the template rendered back into
    wikitext.

    ``hierarchy`` lists groups of argument names that are aliases of each
    other, e.g. ``[["1", "user"]]`` for a template that reads
    ``{{{user|{{{1|}}}}}}``.  When an argument is added while an alias of
    it is already present, only one of them is kept and the other goes to
    the override log (see ``get_overridden_args()``)."""

    __slots__ = (
        "name",
        "full_name",
        "clean_name",
        "full_clean_name",
        "args",
        "keys",
        "overridden_args",
        "hierarchy",
    )

    def __init__(
        self,
        name: str,
        full_name: Optional[str] = None,
        hierarchy: Optional[list[list[str]]] = None,
        lang_code: str = "en",
    ) -> None:
        """``full_name`` is the whole name slot of the template (without the
        braces), which may contain more than the name itself, e.g.
        ``" <!--x-->Foo \\n"``.  Raises ValueError if the name contains a
        line break or ``full_name`` does not contain the name."""
        assert isinstance(name, str)
        assert isinstance(full_name, (str, type(None)))
        self.name = clean(name)
        if "\n" in self.name:
            raise ValueError(
                "Template name {!r} contains a line break".format(name)
            )
        self.full_name = clean(full_name or name, False)
        if self.name not in self.full_name:
            raise ValueError(
                "Template full name {!r} does not contain the name {!r}".format(
                    self.full_name, self.name
                )
            )
        self.args: list[TemplateArgument] = []
        self.keys: list[str] = []
        self.overridden_args: list[TemplateArgument] = []
        self.hierarchy: list[list[str]] = [list(x) for x in hierarchy or []]

        # A leading colon is kept only for main namespace pages
        colon = ""
        m = NAME_COLON_RE.match(name)
        if m:
            colon = m.group(0)
            name = name[m.end() :]

        title = Title.new_from_text(name, lang_code=lang_code)
        if title is None:
            self.clean_name = colon + uc_first(name)
        elif title.get_namespace_id() == NS_TEMPLATE:
            self.clean_name = title.get_main(True)
        elif title.get_namespace_id() == NS_MAIN:
            self.clean_name = colon.strip() + title.get_main(True)
        else:
            self.clean_name = title.get_prefixed_db(True)
        self.full_clean_name = self.full_name.replace(
            self.name, self.clean_name, 1
        )

    def get_name(self, prop: Optional[str] = None) -> str:
        """Returns the name as given (``prop=None``), the whole name slot
        (``"full"``), the canonical page name without the "Template:"
        prefix (``"clean"``), or the whole name slot with the canonical
        name in place of the name (``"fullclean"``)."""
        assert prop in NAME_PROPS
        if prop == "full":
            return self.full_name
        if prop == "clean":
            return self.clean_name
        if prop == "fullclean":
            return self.full_clean_name
        return self.name

    def _register_args(
        self, new_args: Iterable[NewArg], log_override: bool
    ) -> None:
        for new_arg in new_args:
            ufname, ufvalue, named = NewArg(*new_arg)
            assert isinstance(ufname, str)
            assert isinstance(ufvalue, str)
            name = clean(ufname)
            unnamed = not name and not named
            if unnamed:
                value = clean(ufvalue, False).rstrip("\n")
            else:
                value = clean(ufvalue)
            text = "|" + ("" if unnamed else name + "=") + value
            uftext = "|" + ("" if unnamed else ufname + "=") + ufvalue
            self._register_arg(
                TemplateArgument(
                    name=name,
                    value=value,
                    text=text,
                    ufname=ufname,
                    ufvalue=ufvalue,
                    uftext=uftext,
                    unnamed=unnamed,
                ),
                log_override,
            )

    def _register_arg(self, arg: TemplateArgument, log_override: bool) -> None:
        if arg.unnamed:
            i = 1
            while str(i) in self.keys:
                i += 1
            arg.name = str(i)

        hier = self._get_hier(arg.name)
        if hier is not None:
            index, priority = hier
            found = self.args[index]
            if (
                (priority == 1 and arg.value)
                or (priority == -1 and not found.value)
                or (priority == 0 and arg.value)
            ):
                if log_override:
                    self.overridden_args.append(found)
                del self.keys[index]
                del self.args[index]
            else:
                # The argument already present wins
                if log_override:
                    self.overridden_args.append(arg)
                return
        elif arg.name in self.keys:
            index = self.keys.index(arg.name)
            if log_override:
                self.overridden_args.append(self.args[index])
            del self.keys[index]
            del self.args[index]

        self.keys.append(arg.name)
        self.args.append(arg)

    def _get_hier(self, name: str) -> Optional[tuple[int, int]]:
        """Returns the index in ``self.keys`` of an argument that is ``name``
        or its alias, and the priority of ``name`` relative to it: 1 if
        ``name`` comes later in the alias group, -1 if earlier, 0 if it is
        the same name."""
        if not self.hierarchy or not self.keys:
            return None
        for group in self.hierarchy:
            if name not in group:
                continue
            pr_idx = group.index(name)
            pr_idx2 = next(
                (i for i, key in enumerate(group) if key in self.keys), -1
            )
            key_idx = next(
                (i for i, key in enumerate(self.keys) if key in group), -1
            )
            if pr_idx2 == -1 or key_idx == -1:
                continue
            if pr_idx2 > pr_idx:
                return key_idx, -1
            if pr_idx2 < pr_idx:
                return key_idx, 1
            return key_idx, 0
        return None

    def add_args(self, new_args: Iterable[NewArg]) -> None:
        """Adds arguments, logging any argument that gets overridden."""
        self._register_args(new_args, True)

    def set_args(self, new_args: Iterable[NewArg]) -> None:
        """Like ``add_args()``, but overridden arguments are not logged."""
        self._register_args(new_args, False)

    def get_args(self) -> list[TemplateArgument]:
        return [replace(x) for x in self.args]

    def get_arg(
        self,
        name: Union[str, re.Pattern[str]],
        condition: Optional[Callable[[TemplateArgument], bool]] = None,
        find_first: bool = False,
    ) -> Optional[TemplateArgument]:
        """Returns a copy of the last (or, with ``find_first``, the first)
        argument whose name matches ``name`` (a string for an exact match,
        or a compiled regular expression) and ``condition``."""
        regex = _name_regex(name)
        found: Optional[TemplateArgument] = None
        for arg in self.args:
            if regex.search(arg.name) and (condition is None or condition(arg)):
                found = arg
                if find_first:
                    break
        return replace(found) if found is not None else None

    def has_arg(
        self,
        name: Union[str, re.Pattern[str]],
        condition: Optional[Callable[[TemplateArgument], bool]] = None,
    ) -> bool:
        regex = _name_regex(name)
        return any(
            regex.search(arg.name) and (condition is None or condition(arg))
            for arg in self.args
        )

    def delete_arg(self, name: str) -> bool:
        """Deletes an argument.  Returns False if there was none."""
        if name not in self.keys:
            return False
        index = self.keys.index(name)
        del self.keys[index]
        del self.args[index]
        return True

    def delete_args(self, names: Iterable[str]) -> list[TemplateArgument]:
        """Deletes arguments and returns the deleted ones."""
        deleted: list[TemplateArgument] = []
        for name in names:
            if name in self.keys:
                index = self.keys.index(name)
                deleted.append(self.args[index])
                del self.keys[index]
                del self.args[index]
        return deleted

    def get_overridden_args(self) -> list[TemplateArgument]:
        return [replace(x) for x in self.overridden_args]

    def get_hierarchy(self) -> list[list[str]]:
        return [list(x) for x in self.hierarchy]

    def render(
        self,
        nameprop: Optional[str] = None,
        subst: bool = False,
        unformatted: bool = False,
        sort_key: Optional[Callable[[TemplateArgument], Any]] = None,
        linebreak: bool = False,
        linebreak_predicate: Optional[LinebreakPredicate] = None,
    ) -> str:
        """Renders the template as wikitext.  ``nameprop`` selects the name
        as in ``get_name()``; ``subst`` inserts "subst:" before the name;
        ``unformatted`` renders the arguments as they were given instead of
        cleaned.  Line breaks are added after the name and each argument
        with ``linebreak``, or where ``linebreak_predicate`` says so."""
        assert nameprop in NAME_PROPS
        prefix = "subst:" if subst else ""
        if nameprop == "full":
            n = self.full_name.replace(self.name, prefix + self.name, 1)
        elif nameprop == "clean":
            n = prefix + self.clean_name
        elif nameprop == "fullclean":
            n = self.full_clean_name.replace(
                self.clean_name, prefix + self.clean_name, 1
            )
        else:
            n = prefix + self.name

        parts = ["{{"]
        if linebreak_predicate is not None:
            parts.append(n + ("\n" if linebreak_predicate.name(n) else ""))
        elif linebreak:
            parts.append(n.rstrip("\n") + "\n")
        else:
            parts.append(n)

        args = self.args
        if sort_key is not None:
            args = sorted(args, key=sort_key)
        for arg in args:
            el = arg.uftext if unformatted else arg.text
            if linebreak_predicate is not None:
                parts.append(el + ("\n" if linebreak_predicate.args(arg) else ""))
            elif linebreak:
                parts.append(el.rstrip("\n") + "\n")
            else:
                parts.append(el)
        parts.append("}}")
        return "".join(parts)

    def __str__(self) -> str:
        return self.render(nameprop="full", unformatted=True)

    def __repr__(self) -> str:
        return "<{} {!r} args={}>".format(
            type(self).__name__, self.clean_name, self.keys
        )

    def to_dict(self) -> dict[str, Any]:
        """Returns the template as a JSON-compatible dictionary."""
        return {
            "name": self.name,
            "full_name": self.full_name,
            "clean_name": self.clean_name,
            "full_clean_name": self.full_clean_name,
            "args": [asdict(x) for x in self.args],
            "keys": list(self.keys),
            "overridden_args": [asdict(x) for x in self.overridden_args],
            "hierarchy": self.get_hierarchy(),
        }


class ParsedTemplate(Template):
    """A template found in wikitext by ``scan_templates()``, remembering
    where it was found so that it can be replaced in the same text."""

    __slots__ = (
        "original_text",
        "start_index",
        "end_index",
        "nest_level",
        "modified",  # True once the arguments are edited after parsing
    )

    def __init__(
        self,
        name: str,
        full_name: str,
        args: Iterable[NewArg],
        text: str,
        start_index: int,
        end_index: int,
        nest_level: int = 0,
        hierarchy: Optional[list[list[str]]] = None,
        lang_code: str = "en",
    ) -> None:
        super().__init__(name, full_name, hierarchy, lang_code)
        self.add_args(args)
        self.original_text = text
        self.start_index = start_index
        self.end_index = end_index
        self.nest_level = nest_level
        self.modified = False

    def add_args(self, new_args: Iterable[NewArg]) -> None:
        self.modified = True
        super().add_args(new_args)

    def set_args(self, new_args: Iterable[NewArg]) -> None:
        self.modified = True
        super().set_args(new_args)

    def delete_arg(self, name: str) -> bool:
        self.modified = True
        return super().delete_arg(name)

    def delete_args(self, names: Iterable[str]) -> list[TemplateArgument]:
        self.modified = True
        return super().delete_args(names)

    @classmethod
    def new(cls, *args: Any, **kwargs: Any) -> Optional["ParsedTemplate"]:
        """Like the constructor, but returns None instead of raising
        ValueError."""
        try:
            return cls(*args, **kwargs)
        except ValueError:
            return None

    def render_original(self) -> str:
        return self.original_text

    def to_dict(self) -> dict[str, Any]:
        ret = super().to_dict()
        ret["original_text"] = self.original_text
        ret["start_index"] = self.start_index
        ret["end_index"] = self.end_index
        ret["nest_level"] = self.nest_level
        ret["modified"] = self.modified
        return ret

    def replace_in(
        self,
        wikitext: str,
        replacement: Optional[str] = None,
        use_index: bool = True,
        **render_options: Any,
    ) -> str:
        """Replaces the template in ``wikitext`` with ``replacement``, or
        with ``render(**render_options)``.  Without render options, a
        template whose arguments have not been changed is replaced with
        its original text, and a changed one is rendered like
        ``str(self)``.  The template is located by its original position
        if the text there is unchanged, or else by searching for the
        original text.  Returns ``wikitext`` unchanged if the template is
        not found.

        When replacing with an empty string, a template standing alone on
        its line is removed together with that line.  Spaces next to the
        template on the side of a line break are trimmed as well.

        To replace several templates found in the same text by index,
        replace them from the last to the first."""
        assert isinstance(wikitext, str)
        if replacement is None and not render_options and not self.modified:
            replacement = self.original_text
        elif replacement is None:
            render_options.setdefault("nameprop", "full")
            render_options.setdefault("unformatted", True)
            replacement = self.render(**render_options)

        start = -1
        if (
            use_index
            and wikitext[self.start_index : self.end_index] == self.original_text
        ):
            start = self.start_index
        else:
            start = wikitext.find(self.original_text)
        if start == -1:
            return wikitext
        end = start + len(self.original_text)

        before = wikitext[:start]
        after = wikitext[end:]
        if replacement == "":
            head = TRAILING_SPACE_RE.sub("", before, count=1)
            tail = LEADING_SPACE_RE.sub("", after, count=1)
            at_line_start = head == "" or head.endswith("\n")
            at_line_end = tail == "" or tail.startswith("\n")
            if at_line_start and at_line_end:
                # Drop the template's own line only
                if tail:
                    before, after = head, tail[1:]
                else:
                    before, after = head[:-1], tail
            elif at_line_start:
                after = tail
            elif at_line_end:
                before = head
        return before + replacement + after
