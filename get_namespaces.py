import argparse
import json
import sys
from pathlib import Path

import requests


def get_siteinfo(domain: str) -> dict:
    # https://www.mediawiki.org/wiki/API:Siteinfo
    # https://www.mediawiki.org/wiki/Manual:Namespace
    params = {
        "action": "query",
        "format": "json",
        "meta": "siteinfo",
        "siprop": "namespaces|namespacealiases",
        "formatversion": "2",
    }
    r = requests.get(f"https://{domain}/w/api.php", params=params, timeout=30)
    r.raise_for_status()
    return r.json()["query"]


def build_namespace_table(siteinfo: dict) -> dict[str, dict]:
    """Converts siteinfo namespaces to the format of
    data/<lang_code>/namespaces.json, keyed by canonical name."""
    table: dict[str, dict] = {}
    by_id: dict[int, dict] = {}
    for data in siteinfo["namespaces"].values():
        ns_id = data["id"]
        entry = {
            "id": ns_id,
            "name": data["name"] or "Main",
            "aliases": [],
            "content": bool(data.get("content", False)),
            "issubject": ns_id < 0 or ns_id % 2 == 0,
            "istalk": ns_id >= 0 and ns_id % 2 == 1,
            "case": data.get("case", "first-letter"),
        }
        table[data.get("canonical", "Main")] = entry
        by_id[ns_id] = entry

    for alias in siteinfo.get("namespacealiases", []):
        entry = by_id.get(alias["id"])
        if entry is not None and alias["alias"] != entry["name"]:
            entry["aliases"].append(alias["alias"])
    return table


def main():
    """
    Writes src/wikitextkit/data/<lang_code>/namespaces.json from the
    siteinfo of a live wiki.  Check the result by hand: the canonical
    names are not always English, and namespaces of extensions that are
    not installed on the wiki are missing.
    """
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "domain", help="MediaWiki domain, for example: ja.wikipedia.org"
    )
    parser.add_argument("lang_code", help="MediaWiki language code")
    args = parser.parse_args()

    table = build_namespace_table(get_siteinfo(args.domain))
    data_folder = Path("src/wikitextkit/data") / args.lang_code
    data_folder.mkdir(parents=True, exist_ok=True)
    with data_folder.joinpath("namespaces.json").open("w", encoding="utf-8") as f:
        json.dump(table, f, ensure_ascii=False, indent=2)


if __name__ == "__main__":
    sys.exit(main())
