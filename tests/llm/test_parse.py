import unittest

from journal_ai.errors import ErrorKind, ParseError
from journal_ai.llm.parse import extract_payload, normalize_tags, parse_entry, shorten_title
from journal_ai.models import MAX_TITLE_LENGTH, ProviderId


class ParseEntryTests(unittest.TestCase):
    def test_valid_payload_dedupes_tags_in_order(self):
        raw = '{"title": "T", "content": "C", "tags": ["a", "b", "a"]}'
        entry = parse_entry(raw, ProviderId.LOCAL)

        self.assertEqual(entry.title, "T")
        self.assertEqual(entry.content, "C")
        self.assertEqual(entry.tags, ("a", "b"))
        self.assertEqual(entry.source_provider, ProviderId.LOCAL)

    def test_empty_title_is_missing_field(self):
        with self.assertRaises(ParseError) as ctx:
            parse_entry('{"title": "", "content": "C"}', ProviderId.LOCAL)
        self.assertEqual(ctx.exception.kind, ErrorKind.MISSING_FIELD)

    def test_blank_content_is_missing_field(self):
        with self.assertRaises(ParseError) as ctx:
            parse_entry('{"title": "T", "content": "   "}', ProviderId.CLOUD)
        self.assertEqual(ctx.exception.kind, ErrorKind.MISSING_FIELD)

    def test_absent_content_is_missing_field(self):
        with self.assertRaises(ParseError) as ctx:
            parse_entry('{"title": "T"}', ProviderId.CLOUD)
        self.assertEqual(ctx.exception.kind, ErrorKind.MISSING_FIELD)

    def test_not_json_is_malformed(self):
        with self.assertRaises(ParseError) as ctx:
            parse_entry("Sure! Here is your entry: a day at the beach.", ProviderId.LOCAL)
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_OUTPUT)

    def test_json_array_is_malformed(self):
        with self.assertRaises(ParseError) as ctx:
            parse_entry('["title", "content"]', ProviderId.LOCAL)
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_OUTPUT)

    def test_non_string_title_is_malformed(self):
        with self.assertRaises(ParseError) as ctx:
            parse_entry('{"title": 42, "content": "C"}', ProviderId.LOCAL)
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_OUTPUT)

    def test_trims_title_and_content(self):
        entry = parse_entry('{"title": "  Beach day ", "content": "\\nSun and sand.\\n"}', ProviderId.LOCAL)
        self.assertEqual(entry.title, "Beach day")
        self.assertEqual(entry.content, "Sun and sand.")

    def test_missing_tags_default_to_empty(self):
        entry = parse_entry('{"title": "T", "content": "C"}', ProviderId.LOCAL)
        self.assertEqual(entry.tags, ())

    def test_long_title_is_shortened(self):
        title = "word " * 60
        entry = parse_entry(f'{{"title": "{title}", "content": "C"}}', ProviderId.LOCAL)
        self.assertLessEqual(len(entry.title), MAX_TITLE_LENGTH)
        self.assertTrue(entry.title.endswith("word"))

    def test_respects_max_tags(self):
        raw = '{"title": "T", "content": "C", "tags": ["a", "b", "c", "d"]}'
        entry = parse_entry(raw, ProviderId.LOCAL, max_tags=2)
        self.assertEqual(entry.tags, ("a", "b"))


class ExtractPayloadTests(unittest.TestCase):
    def test_code_fence(self):
        raw = 'Here you go:\n```json\n{"title": "T", "content": "C"}\n```\nEnjoy!'
        self.assertEqual(extract_payload(raw), {"title": "T", "content": "C"})

    def test_surrounding_prose(self):
        raw = 'The entry is {"title": "T", "content": "C", "tags": []} as requested.'
        self.assertEqual(extract_payload(raw), {"title": "T", "content": "C", "tags": []})

    def test_skips_broken_braces_before_payload(self):
        raw = 'Notes {not json} then {"title": "T", "content": "C"}'
        self.assertEqual(extract_payload(raw), {"title": "T", "content": "C"})

    def test_first_object_wins(self):
        raw = '{"title": "first", "content": "1"} {"title": "second", "content": "2"}'
        self.assertEqual(extract_payload(raw)["title"], "first")

    def test_nothing_found(self):
        self.assertIsNone(extract_payload(""))
        self.assertIsNone(extract_payload("no json here"))


class NormalizeTagsTests(unittest.TestCase):
    def test_lowercases_trims_and_drops_empties(self):
        self.assertEqual(normalize_tags([" Work ", "", "work", "IDEAS", "  "]), ("work", "ideas"))

    def test_comma_separated_string(self):
        self.assertEqual(normalize_tags("Travel, family ,travel"), ("travel", "family"))

    def test_non_string_items_are_dropped(self):
        self.assertEqual(normalize_tags(["a", 1, None, "b"]), ("a", "b"))

    def test_truncates_to_ten_by_default(self):
        tags = [f"t{i}" for i in range(15)]
        self.assertEqual(normalize_tags(tags), tuple(f"t{i}" for i in range(10)))

    def test_wrong_type_is_malformed(self):
        with self.assertRaises(ParseError) as ctx:
            normalize_tags({"a": 1})
        self.assertEqual(ctx.exception.kind, ErrorKind.MALFORMED_OUTPUT)


class ShortenTitleTests(unittest.TestCase):
    def test_short_title_unchanged(self):
        self.assertEqual(shorten_title("Short title"), "Short title")

    def test_cuts_at_word_boundary(self):
        self.assertEqual(shorten_title("alpha beta gamma", limit=12), "alpha beta")

    def test_single_long_word_is_hard_cut(self):
        self.assertEqual(shorten_title("x" * 200, limit=10), "x" * 10)


if __name__ == "__main__":
    unittest.main()
