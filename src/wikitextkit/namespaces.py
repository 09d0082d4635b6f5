# Namespace tables used for title normalization
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import json
from functools import lru_cache
from importlib.resources import files
from typing import Optional, TypedDict

NS_MEDIA = -2
NS_SPECIAL = -1
NS_MAIN = 0
NS_TALK = 1
NS_USER = 2
NS_PROJECT = 4
NS_FILE = 6
NS_TEMPLATE = 10
NS_HELP = 12

# Namespaces in which signature buttons are shown, in addition to talk
# namespaces
EXTRA_SIGNATURE_NAMESPACES: frozenset[int] = frozenset([NS_PROJECT, NS_HELP])


class NamespaceDataEntry(TypedDict):
    id: int
    name: str
    aliases: list[str]
    content: bool
    issubject: bool
    istalk: bool
    case: str  # "first-letter" or "case-sensitive"


def _alias_key(name: str) -> str:
    # Namespace names match case-insensitively.  Spaces and underscores
    # are equivalent.
    return name.lower().replace(" ", "_")


class NamespaceTable:
    """Namespace names, aliases and case rules of one wiki, loaded from
    ``data/<lang_code>/namespaces.json``."""

    __slots__ = (
        "lang_code",
        "NAMESPACE_DATA",
        "LOCAL_NS_NAME_BY_ID",
        "NS_ID_BY_ALIAS",
        "CASE_SENSITIVE_IDS",
    )

    def __init__(self, lang_code: str) -> None:
        self.lang_code = lang_code
        data_folder = files("wikitextkit") / "data" / lang_code
        with data_folder.joinpath("namespaces.json").open(encoding="utf-8") as f:
            self.NAMESPACE_DATA: dict[str, NamespaceDataEntry] = json.load(f)
        self.LOCAL_NS_NAME_BY_ID: dict[int, str] = {}
        self.NS_ID_BY_ALIAS: dict[str, int] = {}
        self.CASE_SENSITIVE_IDS: set[int] = set()
        for canonical, data in self.NAMESPACE_DATA.items():
            ns_id = data["id"]
            if ns_id == NS_MAIN:
                self.LOCAL_NS_NAME_BY_ID[ns_id] = ""
                continue
            self.LOCAL_NS_NAME_BY_ID[ns_id] = data["name"]
            for alias in [canonical, data["name"]] + data["aliases"]:
                self.NS_ID_BY_ALIAS[_alias_key(alias)] = ns_id
            if data.get("case") == "case-sensitive":
                self.CASE_SENSITIVE_IDS.add(ns_id)

    def get_ns_id_by_name(self, alias: str) -> Optional[int]:
        """Returns the namespace id for a namespace name or alias, or None
        if ``alias`` is not a namespace name.  The main namespace has no
        name, so it is never returned."""
        return self.NS_ID_BY_ALIAS.get(_alias_key(alias))

    def is_known_namespace(self, ns_id: int) -> bool:
        return ns_id in self.LOCAL_NS_NAME_BY_ID

    def is_case_sensitive(self, ns_id: int) -> bool:
        return ns_id in self.CASE_SENSITIVE_IDS

    def get_namespace_prefix(self, ns_id: int) -> str:
        """Returns "" for the main namespace, otherwise the local namespace
        name followed by a colon, spaces replaced by underscores."""
        if ns_id == NS_MAIN:
            return ""
        return self.LOCAL_NS_NAME_BY_ID[ns_id].replace(" ", "_") + ":"

    def get_ns_ids_by_type(self, ns_type: str) -> list[int]:
        """Returns the ids of subject (``ns_type="main"``) or talk
        (``ns_type="talk"``) namespaces, excluding virtual namespaces."""
        assert ns_type in ("main", "talk")
        return sorted(
            ns_id
            for ns_id in self.LOCAL_NS_NAME_BY_ID
            if ns_id >= NS_MAIN and (ns_id % 2 == 1) == (ns_type == "talk")
        )


@lru_cache(maxsize=None)
def get_namespace_table(lang_code: str = "en") -> NamespaceTable:
    return NamespaceTable(lang_code)
