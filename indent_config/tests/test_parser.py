import unittest

from indent_config.exceptions import StructuralError
from indent_config.nodes import BlankNode, CommentNode, KeyNode
from indent_config.parser import deserialize, split_lines
from indent_config.serializer import serialize

EXAMPLE_DATA = """# Lobby settings

server:
  host: 0.0.0.0
  port: 25565 # default port
  motd:   Welcome!

  # Connection limits
  limits:
    players: 40
    per-ip:  3
world:
  name: lobby
"""


class TestParser(unittest.TestCase):

    def test_round_trip_is_byte_identical(self):
        """Tests that unmodified input is written back exactly as it was read."""
        result = deserialize(EXAMPLE_DATA)
        self.assertEqual(serialize(result.root), EXAMPLE_DATA)

    def test_serialized_output_is_a_fixed_point(self):
        once = serialize(deserialize(EXAMPLE_DATA).root, 4)
        twice = serialize(deserialize(once).root, 4)
        self.assertEqual(once, twice)

    def test_flat_index(self):
        cache = deserialize(EXAMPLE_DATA).cache
        self.assertEqual(cache, {
            "server.host": "0.0.0.0",
            "server.port": "25565",
            "server.motd": "Welcome!",
            "server.limits.players": "40",
            "server.limits.per-ip": "3",
            "world.name": "lobby",
        })

    def test_indent_nesting(self):
        """A deeper line becomes a child of the key before it."""
        result = deserialize("parent:\n  child: value")
        self.assertEqual(len(result.root.children), 1)
        parent = result.root.children[0]
        self.assertIsInstance(parent, KeyNode)
        self.assertEqual(parent.key, "parent")
        self.assertIsNone(parent.value)
        self.assertEqual(len(parent.children), 1)
        child = parent.children[0]
        self.assertEqual((child.key, child.value), ("child", "value"))
        self.assertIs(parent.key_children["child"], child)
        self.assertEqual(result.cache, {"parent.child": "value"})
        self.assertNotIn("parent", result.cache)

    def test_dedent_closes_several_levels(self):
        result = deserialize("a:\n  b:\n    c: 1\nd: 2")
        self.assertEqual([n.key for n in result.root.children], ["a", "d"])
        self.assertEqual(result.cache, {"a.b.c": "1", "d": "2"})

    def test_partial_dedent_stays_in_open_section(self):
        result = deserialize("a:\n    b: 1\n  c: 2")
        self.assertEqual(result.cache, {"a.b": "1", "a.c": "2"})

    def test_comment_merge(self):
        """Consecutive standalone comments form a single node."""
        result = deserialize("# a\n# b")
        self.assertEqual(result.root.children, [CommentNode("# a\n# b")])
        self.assertEqual(serialize(result.root), "# a\n# b")

    def test_comment_after_key_is_not_merged_into_the_key(self):
        result = deserialize("key: v\n# note")
        key, comment = result.root.children
        self.assertIsNone(key.comment)
        self.assertEqual(comment, CommentNode("# note"))

    def test_blank_run_counting(self):
        result = deserialize("a: 1\n\n\n\nb: 2")
        blank = result.root.children[1]
        self.assertEqual(blank, BlankNode(count=3, indent=0))
        self.assertEqual(serialize(result.root), "a: 1\n\n\n\nb: 2")

    def test_blank_runs_of_different_width_stay_separate(self):
        text = "a: 1\n  \n\nb: 2"
        result = deserialize(text)
        self.assertEqual(result.root.children[1:3], [BlankNode(1, 2), BlankNode(1, 0)])
        self.assertEqual(serialize(result.root), text)

    def test_blank_line_inside_section_keeps_structure(self):
        """Later keys of a section stay in it after an unindented blank line."""
        text = "a:\n  b: 1\n\n  c: 2"
        result = deserialize(text)
        self.assertEqual(result.cache, {"a.b": "1", "a.c": "2"})
        self.assertEqual(serialize(result.root), text)

    def test_comment_before_first_child_stays_in_section(self):
        text = "server:\n  # the port\n  port: 80"
        result = deserialize(text)
        server = result.root.key_children["server"]
        self.assertEqual(server.children[0], CommentNode("  # the port"))
        self.assertIs(server.children[1], server.key_children["port"])
        self.assertEqual(len(result.root.children), 1)
        self.assertEqual(serialize(result.root), text)

    def test_blank_run_before_first_child_stays_in_section(self):
        text = "server:\n\n\n  port: 80\nnext: 1"
        result = deserialize(text)
        server = result.root.key_children["server"]
        self.assertEqual(server.children[0], BlankNode(count=2, indent=0))
        self.assertEqual(result.cache, {"server.port": "80", "next": "1"})
        self.assertEqual(serialize(result.root), text)

    def test_mixed_run_before_nested_child_moves_one_level(self):
        """Only the innermost section opened by the key line receives the run."""
        text = "a:\n  b:\n\n    # about c\n    c: 1\n  d: 2"
        result = deserialize(text)
        a = result.root.key_children["a"]
        b = a.key_children["b"]
        self.assertEqual([type(n) for n in a.children], [KeyNode, KeyNode])
        self.assertEqual(b.children[:2], [BlankNode(1, 0), CommentNode("    # about c")])
        self.assertEqual(serialize(result.root), text)
        self.assertEqual(serialize(result.root, 4), "a:\n    b:\n\n    # about c\n        c: 1\n    d: 2")

    def test_comment_before_sibling_is_not_moved(self):
        text = "a:\n  b: 1\n# top level\nc: 2"
        result = deserialize(text)
        a = result.root.key_children["a"]
        self.assertEqual(a.children[-1], CommentNode("# top level"))
        self.assertEqual(serialize(result.root), text)

    def test_trailing_newline_round_trips(self):
        self.assertEqual(serialize(deserialize("a: 1\n").root), "a: 1\n")
        self.assertEqual(serialize(deserialize("a: 1\n\n").root), "a: 1\n\n")

    def test_duplicate_key_resolves_to_existing_node(self):
        result = deserialize("a:\n  x: 1\nb: 2\na:\n  y: 3")
        self.assertEqual([n.key for n in result.root.children], ["a", "b"])
        a = result.root.key_children["a"]
        self.assertEqual(list(a.key_children), ["x", "y"])
        self.assertEqual(result.cache, {"a.x": "1", "b": "2", "a.y": "3"})

    def test_indented_first_line_stays_at_top_level(self):
        result = deserialize("  a: 1\n  b: 2")
        self.assertEqual(result.cache, {"a": "1", "b": "2"})

    def test_indent_step_detection(self):
        self.assertEqual(deserialize("a:\n    b: 1").indent_step, 4)
        self.assertIsNone(deserialize("a: 1").indent_step)

    def test_empty_and_comments_only(self):
        self.assertEqual(deserialize("").root.children, [])
        self.assertEqual(deserialize("").cache, {})
        self.assertEqual(deserialize("# only a comment").cache, {})

    def test_malformed_line_reports_line_number(self):
        with self.assertRaisesRegex(StructuralError, "line 3"):
            deserialize("a: 1\nb: 2\nkey: value: extra\nc: 3")

    def test_split_lines(self):
        self.assertEqual(split_lines("a\nb"), ["a", "b"])
        self.assertEqual(split_lines("a\r\nb\r\n"), ["a", "b", ""])
        self.assertEqual(split_lines(""), [])

    def test_form_feed_is_not_a_line_break(self):
        self.assertEqual(split_lines("a: x\x0cy\nb: 2"), ["a: x\x0cy", "b: 2"])
        result = deserialize("a: x\x0cy\nb: 2")
        self.assertEqual(result.cache["a"], "x\x0cy")

    def test_line_numbers_ignore_other_separators(self):
        with self.assertRaisesRegex(StructuralError, "line 3"):
            deserialize("a: x\x0cy\u2028z\nb: 2\nnot valid")


class TestSerializer(unittest.TestCase):

    def test_uses_spaces_per_indent_for_keys_only(self):
        result = deserialize("a:\n  b: 1\n  # note")
        self.assertEqual(serialize(result.root, 4), "a:\n    b: 1\n  # note")

    def test_valueless_key_keeps_colon_spacing(self):
        self.assertEqual(serialize(deserialize("a: ").root), "a: ")

    def test_empty_tree(self):
        self.assertEqual(serialize(deserialize("").root), "")


if __name__ == '__main__':
    unittest.main()
