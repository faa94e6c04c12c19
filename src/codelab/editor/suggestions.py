"""Context-sensitive completion with a per-line cache.

Two triggers feed the engine:

- the caret enters another line: the cached list for that line is shown if
  the line text is unchanged since it was computed, otherwise nothing;
- the text changes while the caret stays on its line: suggestions are
  recomputed from the line text up to the caret and cached.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from codelab.editor.languages import (
    IMPORT_KEYWORDS,
    imports_for,
    keyword_list_for,
    methods_for,
)
from codelab.editor.types import (
    Language,
    SourceDocument,
    SuggestionItem,
    line_bounds,
    offset_to_position,
)

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10
MIN_TOKEN_LENGTH = 2

_TOKEN_RE = re.compile(r"[A-Za-z_$][\w$]*$")


@dataclass
class CompletionContext:
    """What the text before the caret is asking for.

    ``prefix`` is the text that a selected candidate replaces (it ends at the
    caret). ``check`` is what the candidate must start with for the
    replacement to happen; otherwise the candidate is inserted verbatim.
    """

    kind: str  # "import" | "token"
    prefix: str
    check: str
    query: str


def completion_context(line_prefix: str, language: Language) -> CompletionContext:
    statement = line_prefix.lstrip()
    for keyword in IMPORT_KEYWORDS[language]:
        if statement.startswith(keyword) and statement[len(keyword) : len(keyword) + 1].isspace():
            query = statement[len(keyword) :].strip()
            return CompletionContext("import", statement, keyword, query)

    m = _TOKEN_RE.search(line_prefix)
    token = m.group() if m else ""
    return CompletionContext("token", token, token, token)


def compute_suggestions(
    line_prefix: str,
    language: Language,
    *,
    max_items: int = MAX_SUGGESTIONS,
    min_token_length: int = MIN_TOKEN_LENGTH,
) -> list[SuggestionItem]:
    """Candidates for the line text before the caret.

    In an import statement every known import containing the typed query
    (case-insensitive) is offered. Otherwise the trailing identifier, once it
    has ``min_token_length`` characters, is prefix-matched against keywords
    and then methods. At most ``max_items`` are returned.
    """
    ctx = completion_context(line_prefix, language)
    items: list[SuggestionItem] = []

    if ctx.kind == "import":
        query = ctx.query.lower()
        for statement in imports_for(language):
            if query in statement.lower():
                items.append(SuggestionItem(statement, statement, "import"))
        return items[:max_items]

    if len(ctx.query) < min_token_length:
        return []

    token = ctx.query.lower()
    for keyword in keyword_list_for(language):
        if keyword.lower().startswith(token):
            items.append(SuggestionItem(keyword, keyword, "keyword"))
    for method in methods_for(language):
        if method.name.lower().startswith(token):
            items.append(SuggestionItem(method.text, method.name, "method", method.description))
    return items[:max_items]


def apply_suggestion(
    text: str, caret: int, item: SuggestionItem, language: Language
) -> tuple[str, int]:
    """Insert ``item`` at the caret, replacing the matched prefix when it fits.

    Returns ``(new_text, new_caret)`` with the caret right after the inserted
    text.
    """
    line_start, _ = line_bounds(text, caret)
    ctx = completion_context(text[line_start:caret], language)

    if ctx.check and item.text.lower().startswith(ctx.check.lower()):
        start = caret - len(ctx.prefix)
    else:
        start = caret
    return text[:start] + item.text + text[caret:], start + len(item.text)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


@dataclass
class CacheEntry:
    line_text: str
    items: list[SuggestionItem]
    anchor: int  # column where the replaced prefix starts


@dataclass
class SuggestionEngine:
    """Holds the visible list, its highlight and the per-line cache."""

    max_items: int = MAX_SUGGESTIONS
    min_token_length: int = MIN_TOKEN_LENGTH
    items: list[SuggestionItem] = field(default_factory=list)
    selected_index: int = 0
    anchor: int = 0
    _cache: dict[int, CacheEntry] = field(default_factory=dict, repr=False)
    _line_count: int = field(default=1, repr=False)

    @property
    def visible(self) -> bool:
        return bool(self.items)

    @property
    def cached_lines(self) -> list[int]:
        return sorted(self._cache)

    def _sync_line_count(self, doc: SourceDocument) -> None:
        count = doc.text.count("\n") + 1
        if count != self._line_count:
            if self._cache:
                logger.debug("Line count %d -> %d, dropping suggestion cache", self._line_count, count)
            self._cache.clear()
            self._line_count = count

    def _show(self, items: list[SuggestionItem], anchor: int) -> None:
        self.items = items
        self.anchor = anchor
        self.selected_index = 0

    def on_text_changed(self, doc: SourceDocument) -> list[SuggestionItem]:
        """Recompute for the caret line and store the result in the cache."""
        self._sync_line_count(doc)
        line, column = offset_to_position(doc.text, doc.caret_offset)
        line_start, line_end = line_bounds(doc.text, doc.caret_offset)
        line_prefix = doc.text[line_start : doc.caret_offset]

        items = compute_suggestions(
            line_prefix,
            doc.language,
            max_items=self.max_items,
            min_token_length=self.min_token_length,
        )
        anchor = column - len(completion_context(line_prefix, doc.language).prefix)
        self._cache[line] = CacheEntry(doc.text[line_start:line_end], items, anchor)
        self._show(items, anchor)
        return items

    def on_line_entered(self, doc: SourceDocument) -> list[SuggestionItem]:
        """Serve the cached list for the caret line if its text is unchanged."""
        self._sync_line_count(doc)
        line, _ = offset_to_position(doc.text, doc.caret_offset)
        line_start, line_end = line_bounds(doc.text, doc.caret_offset)
        entry = self._cache.get(line)
        if entry is not None and entry.line_text == doc.text[line_start:line_end]:
            self._show(list(entry.items), entry.anchor)
        else:
            self._show([], 0)
        return self.items

    def move_selection(self, delta: int) -> None:
        """Move the highlight, wrapping at both ends."""
        if not self.items:
            return
        self.selected_index = (self.selected_index + delta) % len(self.items)

    def selected(self) -> SuggestionItem | None:
        if not self.items:
            return None
        return self.items[self.selected_index]

    def dismiss(self) -> None:
        self._show([], 0)

    def clear(self) -> None:
        self.dismiss()
        self._cache.clear()
