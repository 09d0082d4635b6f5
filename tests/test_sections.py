# Tests for splitting wikitext into sections
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import unittest

from wikitextkit import Wikitext
from wikitextkit.sections import segment_sections
from wikitextkit.tags import scan_tags


def sections_of(text):
    return segment_sections(text, scan_tags(text))


class SectionTests(unittest.TestCase):
    def test_no_headings(self):
        sections = sections_of("just text")
        self.assertEqual(len(sections), 1)
        s = sections[0]
        self.assertEqual(s.title, "")
        self.assertEqual(s.heading, "")
        self.assertEqual(s.level, 1)
        self.assertEqual(s.index, 0)
        self.assertEqual(s.content, "just text")

    def test_nested_levels(self):
        text = "A\n==B==\ntext\n===C===\nmore\n==D==\nend"
        sections = sections_of(text)
        self.assertEqual([s.title for s in sections], ["", "B", "C", "D"])
        self.assertEqual([s.level for s in sections], [1, 2, 3, 2])
        self.assertEqual([s.index for s in sections], [0, 1, 2, 3])
        self.assertEqual(
            [(s.start_index, s.end_index) for s in sections],
            [(0, 2), (2, 26), (13, 26), (26, 35)],
        )
        self.assertEqual(sections[0].content, "A\n")
        self.assertEqual(sections[1].heading, "==B==")
        self.assertEqual(
            sections[1].content, "==B==\ntext\n===C===\nmore\n"
        )
        self.assertEqual(sections[3].content, "==D==\nend")

    def test_unbalanced(self):
        sections = sections_of("=== A ==\nx")
        self.assertEqual(len(sections), 2)
        self.assertEqual(sections[1].level, 2)
        self.assertEqual(sections[1].title, "= A")

    def test_unbalanced_right(self):
        sections = sections_of("== A ===\nx")
        self.assertEqual(sections[1].level, 2)
        self.assertEqual(sections[1].title, "A =")

    def test_trailing_text(self):
        self.assertEqual(len(sections_of("== A ==x\n")), 1)

    def test_trailing_comment(self):
        sections = sections_of("== A == <!-- c -->\nx")
        self.assertEqual(len(sections), 2)
        self.assertEqual(sections[1].title, "A")

    def test_comment_in_title(self):
        sections = sections_of("==A<!-- c -->B==\n")
        self.assertEqual(sections[1].title, "AB")

    def test_heading_in_comment(self):
        self.assertEqual(len(sections_of("<!--\n==A==\n-->\n")), 1)

    def test_heading_in_nowiki(self):
        self.assertEqual(len(sections_of("<nowiki>\n==A==\n</nowiki>")), 1)

    def test_not_at_line_start(self):
        self.assertEqual(len(sections_of("x ==A==\n")), 1)

    def test_html_heading(self):
        sections = sections_of("a\n<h2>Foo</h2>\nb\n== Bar ==\nc")
        self.assertEqual([s.title for s in sections], ["", "Foo", "Bar"])
        self.assertEqual(sections[1].level, 2)
        self.assertEqual(sections[1].heading, "<h2>Foo</h2>")
        self.assertEqual(sections[1].end_index, sections[2].start_index)

    def test_deeper_to_end(self):
        sections = sections_of("==A==\n====B====\nx")
        self.assertEqual(sections[1].end_index, len("==A==\n====B====\nx"))
        self.assertEqual(sections[2].level, 4)


class WikitextSectionTests(unittest.TestCase):
    def test_cache(self):
        wt = Wikitext("==A==\nx", quiet=True)
        self.assertIsNone(wt.get_sections())
        sections = wt.parse_sections()
        self.assertEqual(len(sections), 2)
        self.assertEqual(len(wt.get_sections()), 2)
        # The tags were scanned on the way
        self.assertEqual(wt.get_tags(), [])

    def test_copies(self):
        wt = Wikitext("==A==\nx", quiet=True)
        sections = wt.parse_sections()
        sections[1].title = "changed"
        self.assertEqual(wt.parse_sections()[1].title, "A")
        self.assertEqual(wt.get_sections()[1].title, "A")
