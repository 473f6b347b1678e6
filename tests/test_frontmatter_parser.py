import unittest

from obsidian_kb.core.frontmatter_parser import (
    coerce_scalar,
    parse_frontmatter_block,
    parse_note,
    split_flow_sequence,
)


class ParseNoteTests(unittest.TestCase):
    def test_parses_scalars_and_block_sequence(self) -> None:
        raw = "---\ntitle: Example Note\ntags:\n  - test\n  - draft\n---\nBody text."
        parsed = parse_note(raw)
        self.assertEqual(parsed.frontmatter, {"title": "Example Note", "tags": ["test", "draft"]})
        self.assertEqual(parsed.body, "Body text.")
        self.assertEqual(parsed.raw, raw)

    def test_without_block_returns_whole_document_as_body(self) -> None:
        raw = "No frontmatter here.\n---\nstill body"
        parsed = parse_note(raw)
        self.assertEqual(parsed.frontmatter, {})
        self.assertEqual(parsed.body, raw)

    def test_unclosed_block_is_treated_as_body(self) -> None:
        raw = "---\ntitle: x\nno closing delimiter"
        parsed = parse_note(raw)
        self.assertEqual(parsed.frontmatter, {})
        self.assertEqual(parsed.body, raw)

    def test_block_must_start_on_first_line(self) -> None:
        raw = "\n---\ntitle: x\n---\nBody"
        self.assertEqual(parse_note(raw).frontmatter, {})

    def test_first_closing_delimiter_wins(self) -> None:
        parsed = parse_note("---\na: 1\n---\nbody\n---\nmore")
        self.assertEqual(parsed.frontmatter, {"a": 1})
        self.assertEqual(parsed.body, "body\n---\nmore")

    def test_longer_dash_lines_do_not_close_the_block(self) -> None:
        parsed = parse_note("---\na: 1\n----\nb: 2\n---\nbody")
        self.assertEqual(parsed.frontmatter, {"a": 1, "b": 2})
        self.assertEqual(parsed.body, "body")

    def test_crlf_line_endings(self) -> None:
        parsed = parse_note("---\r\ntitle: x\r\n---\r\nBody")
        self.assertEqual(parsed.frontmatter, {"title": "x"})
        self.assertEqual(parsed.body, "Body")

    def test_empty_block(self) -> None:
        parsed = parse_note("---\n---\nBody")
        self.assertEqual(parsed.frontmatter, {})
        self.assertEqual(parsed.body, "Body")


class FrontmatterBlockTests(unittest.TestCase):
    def test_value_keeps_text_after_first_colon(self) -> None:
        self.assertEqual(parse_frontmatter_block("url: https://example.com"), {"url": "https://example.com"})

    def test_empty_value_opens_a_list(self) -> None:
        self.assertEqual(parse_frontmatter_block("aliases:\ntitle: x"), {"aliases": [], "title": "x"})

    def test_next_key_closes_the_list(self) -> None:
        block = "tags:\n  - a\nstatus: draft\n- stray"
        self.assertEqual(parse_frontmatter_block(block), {"tags": ["a"], "status": "draft"})

    def test_list_items_are_coerced(self) -> None:
        block = "values:\n  - 1\n  - true\n  - 'quoted'"
        self.assertEqual(parse_frontmatter_block(block), {"values": [1, True, "quoted"]})

    def test_comments_and_garbage_lines_are_ignored(self) -> None:
        block = "# comment\n: no key\njust text\ntitle: kept"
        self.assertEqual(parse_frontmatter_block(block), {"title": "kept"})


class CoerceScalarTests(unittest.TestCase):
    def test_booleans_and_null(self) -> None:
        self.assertIs(coerce_scalar("true"), True)
        self.assertIs(coerce_scalar("false"), False)
        self.assertIsNone(coerce_scalar("null"))
        self.assertIsNone(coerce_scalar("~"))

    def test_quoted_values_stay_strings(self) -> None:
        self.assertEqual(coerce_scalar("'true'"), "true")
        self.assertEqual(coerce_scalar('"42"'), "42")
        self.assertEqual(coerce_scalar("'a, b'"), "a, b")

    def test_numbers(self) -> None:
        self.assertEqual(coerce_scalar("42"), 42)
        self.assertEqual(coerce_scalar("-3"), -3)
        self.assertEqual(coerce_scalar("3.5"), 3.5)

    def test_dates_and_words_stay_strings(self) -> None:
        self.assertEqual(coerce_scalar("2025-01-01"), "2025-01-01")
        self.assertEqual(coerce_scalar("True"), "True")
        self.assertEqual(coerce_scalar("draft"), "draft")

    def test_inline_sequence(self) -> None:
        self.assertEqual(coerce_scalar("[a, 'b, c', 1, true]"), ["a", "b, c", 1, True])
        self.assertEqual(coerce_scalar("[]"), [])

    def test_split_flow_sequence_respects_quotes_and_nesting(self) -> None:
        self.assertEqual(split_flow_sequence("a, [b, c], \"d, e\""), ["a", "[b, c]", "\"d, e\""])


if __name__ == "__main__":
    unittest.main()
