# Tests for scanning templates and replacing them in wikitext
#
# Copyright (c) 2020-2022 Tatu Ylonen.  See file LICENSE and https://ylonen.org

import unittest

from wikitextkit import NewArg, Wikitext


class TemplateScanTests(unittest.TestCase):
    def parse(self, text, **kwargs):
        self.ctx = Wikitext(text, quiet=True)
        return self.ctx.parse_templates(**kwargs)

    def test_none(self):
        self.assertEqual(self.parse(""), [])
        self.assertEqual(self.parse("plain [[link]] text"), [])

    def test_simple(self):
        text = "a {{foo|x|y=z}} b"
        templates = self.parse(text)
        self.assertEqual(len(templates), 1)
        t = templates[0]
        self.assertEqual(t.get_name(), "foo")
        self.assertEqual(t.get_name("clean"), "Foo")
        self.assertEqual(t.keys, ["1", "y"])
        self.assertEqual(t.get_arg("1").value, "x")
        self.assertEqual(t.get_arg("y").value, "z")
        self.assertEqual((t.start_index, t.end_index), (2, 15))
        self.assertEqual(t.original_text, "{{foo|x|y=z}}")
        self.assertEqual(t.nest_level, 0)

    def test_nested(self):
        templates = self.parse("{{A|{{B}}}}")
        self.assertEqual([t.get_name() for t in templates], ["A", "B"])
        a, b = templates
        self.assertEqual(a.get_arg("1").value, "{{B}}")
        self.assertEqual((b.start_index, b.end_index), (4, 9))
        self.assertEqual(b.nest_level, 1)

    def test_sibling_nest_levels(self):
        text = "{{A|{{B}}|{{C|{{D}}}}}}"
        templates = self.parse(text)
        self.assertEqual(
            [(t.get_name(), t.nest_level) for t in templates],
            [("A", 0), ("B", 1), ("C", 1), ("D", 2)],
        )
        for t in templates:
            self.assertEqual(
                text[t.start_index : t.end_index], t.original_text
            )
        self.assertEqual(templates[2].original_text, "{{C|{{D}}}}")
        self.assertEqual(templates[3].start_index, 14)

    def test_equals_in_nested(self):
        templates = self.parse("{{A|{{B|x=y}}}}")
        a, b = templates
        self.assertEqual(a.keys, ["1"])
        self.assertEqual(a.get_arg("1").value, "{{B|x=y}}")
        self.assertEqual(b.get_arg("x").value, "y")

    def test_equals_after_nested(self):
        a = self.parse("{{A|{{B}}=x}}")[0]
        self.assertEqual(a.keys, ["{{B}}"])
        self.assertEqual(a.get_arg("{{B}}").value, "x")

    def test_spaces_and_newlines(self):
        text = "{{ foo\n | b = c \n | x \n}}"
        t = self.parse(text)[0]
        self.assertEqual(t.get_name(), "foo")
        self.assertEqual(t.get_name("full"), " foo\n ")
        self.assertEqual(t.get_arg("b").value, "c")
        self.assertEqual(t.get_arg("1").value, " x ")
        self.assertEqual(str(t), text)

    def test_comment_in_name(self):
        t = self.parse("{{foo<!-- c -->|x}}")[0]
        self.assertEqual(t.get_name(), "foo")
        self.assertEqual(t.get_name("full"), "foo<!-- c -->")

    def test_comment_only(self):
        self.assertEqual(self.parse("<!-- {{foo}} -->"), [])

    def test_nowiki(self):
        self.assertEqual(self.parse("<nowiki>{{foo}}</nowiki>"), [])
        t = self.parse("{{foo|<nowiki>|</nowiki>}}")[0]
        self.assertEqual(t.keys, ["1"])
        self.assertEqual(t.get_arg("1").value, "<nowiki>|</nowiki>")

    def test_pipe_in_link(self):
        t = self.parse("{{foo|[[a|b]]|c}}")[0]
        self.assertEqual(t.keys, ["1", "2"])
        self.assertEqual(t.get_arg("1").value, "[[a|b]]")

    def test_parameter_argument(self):
        t = self.parse("{{foo|{{{1|x}}}|b={{{b}}}}}")[0]
        self.assertEqual(t.keys, ["1", "b"])
        self.assertEqual(t.get_arg("1").value, "{{{1|x}}}")
        self.assertEqual(t.get_arg("b").value, "{{{b}}}")

    def test_parameter_is_not_template(self):
        self.assertEqual(self.parse("{{{1}}}"), [])

    def test_unclosed(self):
        self.assertEqual(self.parse("{{foo|x"), [])

    def test_two(self):
        templates = self.parse("{{a}}{{b}}")
        self.assertEqual([t.get_name() for t in templates], ["a", "b"])
        self.assertEqual([t.start_index for t in templates], [0, 5])

    def test_bad_name(self):
        self.assertEqual(self.parse("{{foo\nbar|x}}"), [])
        self.assertEqual(len(self.ctx.debugs), 1)
        self.assertEqual(self.ctx.debugs[0]["called_from"], "templates/172")

    def test_bad_name_nested(self):
        templates = self.parse("{{A|{{B\nC}}}}")
        self.assertEqual([t.get_name() for t in templates], ["A"])
        self.assertEqual(len(self.ctx.debugs), 1)

    def test_name_predicate(self):
        templates = self.parse(
            "{{A|{{B}}}}", name_predicate=lambda n: n == "B"
        )
        self.assertEqual([t.get_name() for t in templates], ["B"])

    def test_template_predicate(self):
        templates = self.parse(
            "{{A|{{B}}}}", template_predicate=lambda t: t.has_arg("1")
        )
        self.assertEqual([t.get_name() for t in templates], ["A"])

    def test_recursive_predicate(self):
        templates = self.parse(
            "{{A|{{B}}}} {{C|{{D}}}}",
            recursive_predicate=lambda t: t.get_name("clean") != "A",
        )
        self.assertEqual(
            [t.get_name() for t in templates], ["A", "C", "D"]
        )

    def test_hierarchy(self):
        t = self.parse("{{A|x|user=y}}", hierarchy=[["1", "user"]])[0]
        self.assertEqual(t.keys, ["user"])
        self.assertEqual(t.get_arg("user").value, "y")
        self.assertEqual(
            [x.value for x in t.get_overridden_args()], ["x"]
        )


class ReplaceInTests(unittest.TestCase):
    def test_round_trip(self):
        text = (
            "Intro {{ Foo | a = 1 |\n b }}\n"
            "== H ==\n{{bar|{{baz|q=[[x|y]]}}|<!-- c -->}} end"
        )
        for t in Wikitext(text, quiet=True).parse_templates():
            self.assertEqual(t.replace_in(text), text)

    def test_modified(self):
        text = "x {{A|b=1}} y"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        t.add_args([NewArg("b", "2")])
        self.assertEqual(t.replace_in(text), "x {{A|b=2}} y")
        self.assertEqual(
            t.replace_in(text, subst=True, nameprop=None, unformatted=False),
            "x {{subst:A|b=2}} y",
        )

    def test_remove_line(self):
        text = "a\n{{foo}}\nb"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, ""), "a\nb")

    def test_remove_inline(self):
        text = "a {{foo}} b"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, ""), "a  b")

    def test_stale_index(self):
        text = "a {{foo}} b"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in("zz" + text, "X"), "zza X b")

    def test_not_found(self):
        t = Wikitext("{{foo}}", quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in("nothing", "X"), "nothing")

    def test_use_index(self):
        text = "{{foo}} {{foo}}"
        t = Wikitext(text, quiet=True).parse_templates()[1]
        self.assertEqual(t.replace_in(text, "X"), "{{foo}} X")
        self.assertEqual(t.replace_in(text, "X", use_index=False), "X {{foo}}")

    def test_last_to_first(self):
        text = "{{a}} {{b}}"
        templates = Wikitext(text, quiet=True).parse_templates()
        for t in reversed(templates):
            text = t.replace_in(text, "[" + t.get_name() + "]")
        self.assertEqual(text, "[a] [b]")

    def test_unchanged_keeps_duplicates(self):
        text = "x {{A|x=1|x=2}} y"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.keys, ["x"])
        self.assertFalse(t.modified)
        self.assertEqual(t.replace_in(text), text)

    def test_unchanged_keeps_hierarchy_losers(self):
        text = "{{A|x|user=}}"
        t = Wikitext(text, quiet=True).parse_templates(
            hierarchy=[["1", "user"]]
        )[0]
        self.assertEqual(t.keys, ["1"])
        self.assertEqual(t.replace_in(text), text)

    def test_changed_is_rendered(self):
        text = "{{A|x=1|x=2}}"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        t.delete_arg("zz")
        self.assertTrue(t.modified)
        self.assertEqual(t.replace_in(text), "{{A|x=2}}")

    def test_render_options_render(self):
        text = "{{a|x=1|x=2}}"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, nameprop="clean"), "{{A|x=2}}")

    def test_empty_name(self):
        for text in ("{{A|=x}}", "{{A| =x}}"):
            with self.subTest(text=text):
                t = Wikitext(text, quiet=True).parse_templates()[0]
                self.assertEqual(t.keys, [""])
                arg = t.get_arg("")
                self.assertFalse(arg.unnamed)
                self.assertEqual(arg.value, "x")
                self.assertEqual(t.render(), "{{A|=x}}")
                self.assertEqual(t.render(nameprop="full", unformatted=True),
                                 text)
                t.add_args([])
                self.assertEqual(t.replace_in(text), text)

    def test_remove_paragraph_line(self):
        text = "para one\n\n{{foo}}\n\npara two"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, ""), "para one\n\n\npara two")

    def test_remove_last_line(self):
        text = "a\n{{foo}}  "
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, ""), "a")

    def test_remove_first_line(self):
        text = "{{foo}}\nb"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, ""), "b")

    def test_remove_line_end(self):
        text = "a {{foo}}\nb"
        t = Wikitext(text, quiet=True).parse_templates()[0]
        self.assertEqual(t.replace_in(text, ""), "a\nb")
