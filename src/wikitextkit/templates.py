# Scanner for template invocations ({{name|arg1|name2=value2}})
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Optional

from .common import TP_TAG_NAMES
from .template import NewArg, ParsedTemplate

if TYPE_CHECKING:
    from .core import Wikitext

# [[target]] or [[target|display]], not containing other brackets
WIKILINK_RE = re.compile(r"\[\[[^[\]]*?\]\]")


class _ArgSlot:
    """Accumulates one slot of a template being scanned.  Slot 0 is the
    name slot; the others are arguments, whose ``text`` and ``name`` start
    with the "|" that opened them."""

    __slots__ = ("text", "name", "value")

    def __init__(self) -> None:
        self.text = ""
        self.name = ""
        self.value = ""


def _add_fragment(
    slots: list[_ArgSlot],
    fragment: str,
    nonname: bool = False,
    new: bool = False,
    split: bool = True,
) -> None:
    """Adds a fragment of text to the last slot, or to a new slot if
    ``new`` is True.  ``nonname`` fragments (comments, parameters, links)
    are not part of the template name and never split an argument into a
    name and a value.  With ``split=False`` an "=" does not split the
    argument either (used inside nested templates)."""
    idx = len(slots) if new else max(len(slots) - 1, 0)
    if idx == len(slots):
        slots.append(_ArgSlot())
    slot = slots[idx]
    if idx == 0:
        slot.text += fragment
        if not nonname:
            slot.name += fragment
    elif split and not nonname and not slot.name and "=" in fragment:
        j = fragment.index("=")
        slot.name = slot.text + fragment[:j]
        slot.text += fragment
        slot.value = slot.text[len(slot.name) + 1 :]
    else:
        slot.text += fragment
        slot.value += fragment


def _slot_to_arg(slot: _ArgSlot) -> NewArg:
    if slot.name:
        return NewArg(slot.name[1:], slot.value, True)
    return NewArg("", slot.value[1:])


def scan_templates(
    ctx: "Wikitext",
    name_predicate: Optional[Callable[[str], bool]] = None,
    template_predicate: Optional[Callable[[ParsedTemplate], bool]] = None,
    recursive_predicate: Optional[Callable[[ParsedTemplate], bool]] = None,
    hierarchy: Optional[list[list[str]]] = None,
    nest_level: int = 0,
) -> list[ParsedTemplate]:
    """Scans the text of ``ctx`` for templates, including templates nested
    in the arguments of other templates.  Templates are returned in the
    order in which they close, outer templates before the templates
    nested in them.

    ``name_predicate`` is called with the clean name and
    ``template_predicate`` with the template; templates for which either
    returns False are not returned.  Templates for which
    ``recursive_predicate`` returns False are not searched for nested
    templates.  ``hierarchy`` is passed to each template (see
    ``Template``)."""
    text = ctx.wikitext
    n = len(text)
    # Transclusion-preventing tags, parameters and links are skipped as a
    # whole
    tp_tags: dict[int, str] = {}
    for tag in ctx.parse_tags(lambda t: t.name in TP_TAG_NAMES):
        tp_tags.setdefault(tag.start_index, tag.text)
    params: dict[int, str] = {}
    for param in ctx.parse_parameters(recursive=False):
        params.setdefault(param.start_index, param.text)

    ret: list[ParsedTemplate] = []
    depth = 0
    start = 0
    slots: list[_ArgSlot] = []
    i = 0
    while i < n:
        skipped = tp_tags.get(i) or params.get(i)
        if skipped is None and text[i] == "[":
            m = WIKILINK_RE.match(text, i)
            if m:
                skipped = m.group(0)
        if skipped:
            if depth:
                _add_fragment(slots, skipped, nonname=True)
            i += len(skipped)
            continue

        if depth == 0:
            if text.startswith("{{", i):
                start = i
                slots = []
                depth = 2
                i += 2
            else:
                i += 1
        elif depth == 2:
            if text.startswith("{{", i):
                depth += 2
                _add_fragment(slots, "{{")
                i += 2
            elif text.startswith("}}", i):
                end = i + 2
                ret.extend(
                    _close_template(
                        ctx,
                        slots,
                        start,
                        end,
                        name_predicate,
                        template_predicate,
                        recursive_predicate,
                        hierarchy,
                        nest_level,
                    )
                )
                depth = 0
                i = end
            else:
                ch = text[i]
                _add_fragment(slots, ch, new=ch == "|")
                i += 1
        else:
            if text.startswith("{{", i):
                fragment = "{{"
                depth += 2
            elif text.startswith("}}", i):
                fragment = "}}"
                depth -= 2
            else:
                fragment = text[i]
            _add_fragment(slots, fragment, split=False)
            i += len(fragment)

    return ret


def _close_template(
    ctx: "Wikitext",
    slots: list[_ArgSlot],
    start: int,
    end: int,
    name_predicate: Optional[Callable[[str], bool]],
    template_predicate: Optional[Callable[[ParsedTemplate], bool]],
    recursive_predicate: Optional[Callable[[ParsedTemplate], bool]],
    hierarchy: Optional[list[list[str]]],
    nest_level: int,
) -> list[ParsedTemplate]:
    """Builds the template that ends at ``end`` and scans its inside for
    nested templates."""
    text = ctx.wikitext[start:end]
    name_slot = slots[0] if slots else _ArgSlot()
    t = ParsedTemplate.new(
        name_slot.name,
        name_slot.text,
        [_slot_to_arg(x) for x in slots[1:]],
        text,
        start,
        end,
        nest_level=nest_level,
        hierarchy=hierarchy,
        lang_code=ctx.lang_code,
    )
    ret: list[ParsedTemplate] = []
    if t is None:
        ctx.debug(
            "Unparsable template name {!r} in {!r}".format(
                name_slot.text, text
            ),
            sortid="templates/172",
        )
    elif (name_predicate is None or name_predicate(t.get_name("clean"))) and (
        template_predicate is None or template_predicate(t)
    ):
        ret.append(t)

    if t is not None and recursive_predicate is not None:
        if not recursive_predicate(t):
            return ret
    inner = text[2:-2]
    if "{{" in inner and "}}" in inner:
        nested_ctx = type(ctx)(inner, lang_code=ctx.lang_code, quiet=True)
        nested = scan_templates(
            nested_ctx,
            name_predicate,
            template_predicate,
            recursive_predicate,
            hierarchy,
            nest_level + 1,
        )
        for x in nested:
            x.start_index += start + 2
            x.end_index += start + 2
        ret.extend(nested)
        ctx.merge_diagnostics(nested_ctx)
    return ret
