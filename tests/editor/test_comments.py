"""Tests for codelab.editor.comments."""

from codelab.editor.comments import toggle_comment


class TestComment:
    def test_caret_line_only(self):
        result = toggle_comment("int a;\nint b;", 0, 0, "//")
        assert result.text == "// int a;\nint b;"
        assert result.commented
        assert result.selection == (3, 3)

    def test_comment_goes_after_indentation(self):
        result = toggle_comment("    x = 1", 6, 6, "#")
        assert result.text == "    # x = 1"
        assert result.selection == (8, 8)

    def test_multi_line_selection(self):
        text = "a\nb\nc"
        result = toggle_comment(text, 0, len(text), "//")
        assert result.text == "// a\n// b\n// c"

    def test_selection_ending_at_column_zero_excludes_that_line(self):
        result = toggle_comment("a\nb\nc", 0, 4, "//")
        assert result.text == "// a\n// b\nc"
        assert result.selection == (3, 10)

    def test_blank_lines_are_left_alone(self):
        text = "a\n\nb"
        assert toggle_comment(text, 0, len(text), "#").text == "# a\n\n# b"

    def test_mixed_lines_are_all_commented(self):
        text = "// a\nb"
        result = toggle_comment(text, 0, len(text), "//")
        assert result.text == "// // a\n// b"
        assert result.commented

    def test_blank_only_range_is_unchanged(self):
        result = toggle_comment("\n\n", 0, 1, "//")
        assert result.text == "\n\n"
        assert not result.commented


class TestUncomment:
    def test_removes_token_and_one_space(self):
        text = "    // x\n    // y"
        result = toggle_comment(text, 0, len(text), "//")
        assert result.text == "    x\n    y"
        assert not result.commented

    def test_token_without_space(self):
        assert toggle_comment("#x", 0, 0, "#").text == "x"

    def test_caret_after_token_shifts_left(self):
        result = toggle_comment("    // x", 8, 8, "//")
        assert result.text == "    x"
        assert result.selection == (5, 5)

    def test_caret_inside_token_clamps_to_indent(self):
        result = toggle_comment("    // x", 5, 5, "//")
        assert result.selection == (4, 4)

    def test_round_trip_restores_text(self):
        text = "def f():\n    return 1"
        once = toggle_comment(text, 0, len(text), "#")
        twice = toggle_comment(once.text, *once.selection, "#")
        assert twice.text == text
