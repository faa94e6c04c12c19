"""Line-comment toggling over the caret line or a multi-line selection."""

from __future__ import annotations

from dataclasses import dataclass

from codelab.editor.types import offset_to_position


@dataclass
class CommentToggle:
    text: str
    selection: tuple[int, int]
    commented: bool  # True when comments were added


def _line_range(text: str, start: int, end: int) -> tuple[int, int]:
    first, _ = offset_to_position(text, start)
    last, last_col = offset_to_position(text, end)
    # A selection ending at column 0 does not reach into that line.
    if last > first and last_col == 0:
        last -= 1
    return first, last


def toggle_comment(text: str, start: int, end: int, token: str) -> CommentToggle:
    """Comment or uncomment the lines covered by ``[start, end]``.

    If every non-blank line already starts (after indentation) with ``token``
    the token and one following space are removed; otherwise ``token + " "``
    is inserted after each non-blank line's indentation. Both selection ends
    are shifted with their line's change, never moving before the point of
    the edit.
    """
    start, end = sorted((start, end))
    lines = text.split("\n")
    first, last = _line_range(text, start, end)
    targets = [i for i in range(first, last + 1) if lines[i].strip()]
    if not targets:
        return CommentToggle(text, (start, end), False)

    uncomment = all(lines[i].lstrip().startswith(token) for i in targets)

    # line index -> (edit column, inserted chars, removed chars)
    edits: dict[int, tuple[int, int, int]] = {}
    for i in targets:
        line = lines[i]
        indent = len(line) - len(line.lstrip())
        if uncomment:
            removed = len(token)
            if line[indent + removed : indent + removed + 1] == " ":
                removed += 1
            lines[i] = line[:indent] + line[indent + removed :]
            edits[i] = (indent, 0, removed)
        else:
            insert = token + " "
            lines[i] = line[:indent] + insert + line[indent:]
            edits[i] = (indent, len(insert), 0)

    new_text = "\n".join(lines)

    def remap(offset: int) -> int:
        line, column = offset_to_position(text, offset)
        edit = edits.get(line)
        if edit is not None:
            col, inserted, removed = edit
            if inserted and column >= col:
                column += inserted
            elif removed and column >= col + removed:
                column -= removed
            elif removed and column > col:
                column = col
        return sum(len(lines[i]) + 1 for i in range(line)) + column

    return CommentToggle(new_text, (remap(start), remap(end)), not uncomment)
