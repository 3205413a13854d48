import unittest

from indent_config.exceptions import StructuralError
from indent_config.lines import BlankLine, CommentLine, KeyLine, classify_line, split_comment


class TestSplitComment(unittest.TestCase):

    def test_line_without_comment(self):
        self.assertEqual(split_comment("key: value"), ("key: value", None))

    def test_trailing_comment_keeps_leading_spaces(self):
        self.assertEqual(split_comment("key: value   # note"), ("key: value", "   # note"))

    def test_only_first_hash_starts_the_comment(self):
        self.assertEqual(split_comment("key: a # b # c"), ("key: a", " # b # c"))

    def test_standalone_comment(self):
        self.assertEqual(split_comment("  # note"), ("", "  # note"))


class TestClassifyLine(unittest.TestCase):

    def test_key_value_line(self):
        result = classify_line("  port:  8080", 1)
        self.assertEqual(result, KeyLine(indent=2, key="port", colon_space=2, value="8080"))

    def test_key_without_value(self):
        result = classify_line("server:", 1)
        self.assertEqual(result, KeyLine(indent=0, key="server", colon_space=0, value=""))

    def test_key_with_trailing_comment(self):
        result = classify_line("port: 8080 # default", 3)
        self.assertIsInstance(result, KeyLine)
        self.assertEqual(result.value, "8080")
        self.assertEqual(result.comment, " # default")

    def test_value_and_key_are_trimmed(self):
        result = classify_line("name :  John Smith  ", 1)
        self.assertEqual(result.key, "name")
        self.assertEqual(result.value, "John Smith")
        self.assertEqual(result.colon_space, 2)

    def test_comment_line_is_kept_verbatim(self):
        self.assertEqual(classify_line("    # indented: comment", 1), CommentLine("    # indented: comment"))

    def test_blank_line_records_its_width(self):
        self.assertEqual(classify_line("", 1), BlankLine(0))
        self.assertEqual(classify_line("   ", 1), BlankLine(3))

    def test_two_colons_is_a_structural_error(self):
        with self.assertRaises(StructuralError) as cm:
            classify_line("key: value: extra", 7)
        self.assertEqual(cm.exception.line_number, 7)
        self.assertIn("line 7", str(cm.exception))

    def test_text_before_comment_is_a_structural_error(self):
        with self.assertRaisesRegex(StructuralError, "Invalid sequence on line 2: just text"):
            classify_line("just text # comment", 2)

    def test_line_without_colon_is_a_structural_error(self):
        with self.assertRaises(StructuralError):
            classify_line("no colon here", 1)

    def test_key_must_not_start_with_colon(self):
        with self.assertRaises(StructuralError):
            classify_line(": value", 1)


if __name__ == '__main__':
    unittest.main()
