# Tests for the wikitext processing context
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import threading
import unittest

from wikitextkit import Wikitext


class WikitextTests(unittest.TestCase):
    def test_lengths(self):
        wt = Wikitext("a\u00e9\U0001F600", quiet=True)
        self.assertEqual(wt.length, 3)
        self.assertEqual(wt.byte_length, 7)
        self.assertIsNone(wt.get_revision())

    def test_str(self):
        wt = Wikitext("abc", quiet=True)
        self.assertEqual(str(wt), "abc")
        self.assertEqual(repr(wt), "<Wikitext 'abc'>")

    def test_tags_cache(self):
        wt = Wikitext("<b>x</b>", quiet=True)
        self.assertIsNone(wt.get_tags())
        tags = wt.parse_tags()
        self.assertEqual([t.name for t in tags], ["b"])
        tags[0].name = "i"
        self.assertEqual(wt.get_tags()[0].name, "b")

    def test_tags_condition(self):
        wt = Wikitext("<b>x</b><!-- y -->", quiet=True)
        tags = wt.parse_tags(lambda t: t.name == "comment")
        self.assertEqual([t.inner_text for t in tags], [" y "])

    def test_modify_tags(self):
        wt = Wikitext("<span>a<div>b", quiet=True)

        def close(tags):
            return [
                t.text + "</" + t.name + ">" if t.unclosed else None
                for t in tags
            ]

        self.assertEqual(wt.modify_tags(close), "<span>a<div>b</div></span>")
        # The context itself is not changed
        self.assertEqual(wt.wikitext, "<span>a<div>b")

    def test_modify_tags_siblings(self):
        wt = Wikitext("<!-- a -->x<!-- bb -->y", quiet=True)
        self.assertEqual(
            wt.modify_tags(lambda tags: ["" for t in tags]), "xy"
        )

    def test_modify_tags_keep(self):
        wt = Wikitext("<p>q</p><i>r</i>", quiet=True)
        self.assertEqual(
            wt.modify_tags(
                lambda tags: ["<b>r</b>" if t.name == "i" else None
                              for t in tags]
            ),
            "<p>q</p><b>r</b>",
        )

    def test_diagnostics(self):
        wt = Wikitext("x", quiet=True)
        with self.assertLogs("wikitextkit", level="DEBUG") as cm:
            wt.warning("w1", sortid="test/10")
            wt.debug("d1", trace="more", sortid="test/11")
        self.assertEqual(len(cm.output), 2)
        self.assertIn("ERROR_TITLE", cm.output[0])
        ret = wt.to_return()
        self.assertEqual(
            ret["warnings"],
            [{"msg": "w1", "trace": "", "called_from": "test/10"}],
        )
        self.assertEqual(
            ret["debugs"],
            [{"msg": "d1", "trace": "more", "called_from": "test/11"}],
        )

    def test_merge_diagnostics(self):
        a = Wikitext("a", quiet=True)
        b = Wikitext("b", quiet=True)
        b.debug("from b", sortid="test/20")
        a.merge_diagnostics(b)
        self.assertEqual([x["msg"] for x in a.debugs], ["from b"])

    def test_threads(self):
        text = "<div>" * 200 + "{{{1}}}\n==A==\n" + "</div>" * 200
        wt = Wikitext(text, quiet=True)
        results = []

        def work():
            results.append(
                (
                    len(wt.parse_tags()),
                    len(wt.parse_sections()),
                    len(wt.parse_parameters()),
                )
            )

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(results, [(200, 2, 1)] * 8)
