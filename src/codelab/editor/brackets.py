"""Bracket matching and auto-pair insertion rules."""

from __future__ import annotations

from dataclasses import dataclass

from codelab.editor.types import BracketPair

OPEN_TO_CLOSE = {"(": ")", "[": "]", "{": "}"}
CLOSE_TO_OPEN = {v: k for k, v in OPEN_TO_CLOSE.items()}

AUTO_PAIRS = {**OPEN_TO_CLOSE, '"': '"', "'": "'"}
AUTO_CLOSERS = frozenset(AUTO_PAIRS.values())


def find_matching_bracket(text: str, offset: int) -> BracketPair | None:
    """Find the bracket matching the one at ``offset``.

    Scans forward from an opener or backward from a closer with a signed
    depth counter: +1 for the same bracket type, -1 for its complement. The
    match is where the counter returns to zero. Returns None when ``offset``
    is not on a bracket or the bracket is unbalanced.
    """
    if not 0 <= offset < len(text):
        return None
    ch = text[offset]

    if ch in OPEN_TO_CLOSE:
        partner = OPEN_TO_CLOSE[ch]
        depth = 0
        for i in range(offset, len(text)):
            if text[i] == ch:
                depth += 1
            elif text[i] == partner:
                depth -= 1
                if depth == 0:
                    return BracketPair(offset, i, ch, partner)
        return None

    if ch in CLOSE_TO_OPEN:
        partner = CLOSE_TO_OPEN[ch]
        depth = 0
        for i in range(offset, -1, -1):
            if text[i] == ch:
                depth += 1
            elif text[i] == partner:
                depth -= 1
                if depth == 0:
                    return BracketPair(i, offset, partner, ch)
        return None

    return None


def bracket_at_caret(text: str, caret: int) -> BracketPair | None:
    """Match the bracket under the caret, or failing that the one before it."""
    return find_matching_bracket(text, caret) or find_matching_bracket(text, caret - 1)


@dataclass
class Insertion:
    """Outcome of typing a character: replace ``[start, end)`` with ``text``."""

    start: int
    end: int
    text: str
    caret: int
    selection: tuple[int, int] | None = None


def auto_pair_insertion(
    text: str,
    caret: int,
    ch: str,
    selection: tuple[int, int] | None = None,
) -> Insertion:
    """Compute the edit for typing ``ch`` at ``caret``.

    - a closer that is already the next character is stepped over;
    - an opener inserts its closer and leaves the caret between them;
    - with a selection, an opener wraps it and keeps it selected.
    Any other character replaces the selection (if any) and advances.
    """
    if selection is not None and selection[0] != selection[1]:
        start, end = sorted(selection)
        if ch in AUTO_PAIRS:
            closer = AUTO_PAIRS[ch]
            inner = text[start:end]
            return Insertion(
                start,
                end,
                ch + inner + closer,
                end + 1,
                (start + 1, end + 1),
            )
        return Insertion(start, end, ch, start + 1)

    if ch in AUTO_CLOSERS and caret < len(text) and text[caret] == ch:
        return Insertion(caret, caret, "", caret + 1)

    if ch in AUTO_PAIRS and _should_pair(text, caret, ch):
        return Insertion(caret, caret, ch + AUTO_PAIRS[ch], caret + 1)

    return Insertion(caret, caret, ch, caret + 1)


def _should_pair(text: str, caret: int, ch: str) -> bool:
    if ch in OPEN_TO_CLOSE:
        return True
    # Quotes do not pair straight after a word character (e.g. "don't").
    prev = text[caret - 1] if caret > 0 else ""
    return not (prev.isalnum() or prev == "_")


def is_empty_pair(text: str, caret: int) -> bool:
    """True when the caret sits between an auto-pair with nothing inside."""
    if caret <= 0 or caret >= len(text):
        return False
    opener = text[caret - 1]
    return opener in AUTO_PAIRS and text[caret] == AUTO_PAIRS[opener]
