"""Editing surface: owns the SourceDocument and its derived state.

All mutations go through the edit operations below. After each one the
tokens, import analysis, diagnostics and bracket pair are recomputed from the
document; suggestions follow the caret-line rules of
:class:`~codelab.editor.suggestions.SuggestionEngine`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Literal

from codelab.editor.brackets import auto_pair_insertion, bracket_at_caret, is_empty_pair
from codelab.editor.comments import toggle_comment
from codelab.editor.config import EditorOptions
from codelab.editor.imports import analyze_imports, insert_import
from codelab.editor.keybindings import (
    EditorKeybindingsManager,
    KeyId,
    get_editor_keybindings,
)
from codelab.editor.languages import DEFAULT_TEMPLATES, LINE_COMMENT
from codelab.editor.suggestions import SuggestionEngine, apply_suggestion
from codelab.editor.tokenizer import merge_diagnostics, tokenize
from codelab.editor.types import (
    BracketPair,
    Diagnostic,
    ImportAnalysis,
    Language,
    SourceDocument,
    StyledSpan,
    SuggestionItem,
    line_bounds,
    offset_to_position,
    position_to_offset,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass
class TextChangedEvent:
    text: str
    type: Literal["text_changed"] = "text_changed"


@dataclass
class CaretMovedEvent:
    caret_offset: int
    line: int
    column: int
    type: Literal["caret_moved"] = "caret_moved"


SurfaceEvent = TextChangedEvent | CaretMovedEvent
SurfaceListener = Callable[[SurfaceEvent], None]


def import_warnings(analysis: ImportAnalysis) -> list[Diagnostic]:
    """Turn an import analysis into per-line warning diagnostics."""
    warnings: list[Diagnostic] = []
    for finding in analysis.missing:
        for line in sorted(finding.affected_lines):
            warnings.append(
                Diagnostic(line, "warning", f"Missing import: {finding.import_statement}", finding.class_name)
            )
    for unused in analysis.unused:
        warnings.append(Diagnostic(unused.line, "warning", f"Unused import: {unused.class_name}", unused.statement))
    return warnings


# ---------------------------------------------------------------------------
# Surface
# ---------------------------------------------------------------------------


@dataclass
class _Derived:
    spans: list[StyledSpan] = field(default_factory=list)
    import_analysis: ImportAnalysis = field(default_factory=ImportAnalysis)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    bracket_pair: BracketPair | None = None


class EditingSurface:
    """A single-document code editor without any rendering."""

    def __init__(
        self,
        text: str | None = None,
        language: Language = "java",
        options: EditorOptions | None = None,
    ) -> None:
        self.options = options or EditorOptions()
        self._keybindings = (
            EditorKeybindingsManager(self.options.keybindings)
            if self.options.keybindings
            else get_editor_keybindings()
        )
        self._doc = SourceDocument(
            text=DEFAULT_TEMPLATES[language] if text is None else text,
            language=language,
        )
        self._engine = SuggestionEngine(
            max_items=self.options.max_suggestions,
            min_token_length=self.options.min_token_length,
        )
        self._compile_errors: list[Diagnostic] = []
        self._derived = _Derived()
        self._listeners: set[SurfaceListener] = set()
        self._recompute()

    # --- Listeners ---

    def subscribe(self, fn: SurfaceListener) -> Callable[[], None]:
        """Subscribe to surface events. Returns an unsubscribe function."""
        self._listeners.add(fn)

        def unsubscribe() -> None:
            self._listeners.discard(fn)

        return unsubscribe

    def _emit(self, event: SurfaceEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # --- Read-only state ---

    @property
    def document(self) -> SourceDocument:
        return self._doc

    @property
    def text(self) -> str:
        return self._doc.text

    @property
    def language(self) -> Language:
        return self._doc.language

    @property
    def caret_offset(self) -> int:
        return self._doc.caret_offset

    @property
    def selection(self) -> tuple[int, int]:
        return self._doc.selection

    @property
    def caret_position(self) -> tuple[int, int]:
        """0-based ``(line, column)`` of the caret."""
        return offset_to_position(self._doc.text, self._doc.caret_offset)

    @property
    def spans(self) -> list[StyledSpan]:
        return self._derived.spans

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._derived.diagnostics

    @property
    def compile_errors(self) -> list[Diagnostic]:
        return list(self._compile_errors)

    @property
    def import_analysis(self) -> ImportAnalysis:
        return self._derived.import_analysis

    @property
    def bracket_pair(self) -> BracketPair | None:
        return self._derived.bracket_pair

    @property
    def suggestions(self) -> list[SuggestionItem]:
        return self._engine.items

    @property
    def selected_suggestion_index(self) -> int:
        return self._engine.selected_index

    @property
    def suggestion_engine(self) -> SuggestionEngine:
        return self._engine

    @property
    def keybindings(self) -> EditorKeybindingsManager:
        return self._keybindings

    # --- Recompute ---

    def _recompute(self) -> None:
        doc = self._doc
        analysis = analyze_imports(doc.text, doc.language)
        diagnostics = merge_diagnostics(self._compile_errors, import_warnings(analysis))
        self._derived = _Derived(
            spans=tokenize(doc.text, doc.language, diagnostics),
            import_analysis=analysis,
            diagnostics=diagnostics,
            bracket_pair=bracket_at_caret(doc.text, doc.caret_offset),
        )

    def _commit(
        self,
        text: str,
        caret: int,
        selection: tuple[int, int] | None = None,
    ) -> None:
        """Install new text and caret, then refresh derived state and notify."""
        doc = self._doc
        old_text = doc.text
        old_caret = doc.caret_offset
        old_line = offset_to_position(old_text, old_caret)[0]

        caret = max(0, min(caret, len(text)))
        doc.text = text
        doc.caret_offset = caret
        doc.selection = selection if selection is not None else (caret, caret)
        self._recompute()

        text_changed = text != old_text
        new_line, new_column = offset_to_position(text, caret)
        if new_line != old_line:
            self._engine.on_line_entered(doc)
        elif text_changed:
            self._engine.on_text_changed(doc)

        if text_changed:
            self._emit(TextChangedEvent(text))
        if caret != old_caret or text_changed:
            self._emit(CaretMovedEvent(caret, new_line, new_column))

    def _replace(self, start: int, end: int, replacement: str, caret: int | None = None) -> None:
        text = self._doc.text
        new_text = text[:start] + replacement + text[end:]
        self._commit(new_text, start + len(replacement) if caret is None else caret)

    def _selected_range(self) -> tuple[int, int] | None:
        if not self._doc.has_selection:
            return None
        start, end = sorted(self._doc.selection)
        return start, end

    # --- Document-level operations ---

    def set_text(self, text: str) -> None:
        """Replace the whole buffer, keeping the caret where it still fits."""
        self._engine.clear()
        self._commit(text, min(self._doc.caret_offset, len(text)))
        self._engine.dismiss()

    def set_language(self, language: Language, *, load_template: bool = False) -> None:
        """Switch language. Compile errors from the old language are dropped."""
        if language == self._doc.language and not load_template:
            return
        self._doc.language = language
        self._compile_errors = []
        self._engine.clear()
        if load_template:
            self._commit(DEFAULT_TEMPLATES[language], 0)
            self._engine.dismiss()
        else:
            self._recompute()
            self._emit(TextChangedEvent(self._doc.text))

    def set_caret(self, offset: int) -> None:
        self._commit(self._doc.text, offset)

    def set_selection(self, start: int, end: int) -> None:
        n = len(self._doc.text)
        start = max(0, min(start, n))
        end = max(0, min(end, n))
        self._commit(self._doc.text, end, (start, end))

    # --- Editing ---

    def type_char(self, ch: str) -> None:
        """Type one character, applying auto-pair rules."""
        if not self.options.auto_pairs:
            self.insert_text(ch)
            return
        sel = self._selected_range()
        edit = auto_pair_insertion(self._doc.text, self._doc.caret_offset, ch, sel)
        text = self._doc.text
        new_text = text[: edit.start] + edit.text + text[edit.end :]
        self._commit(new_text, edit.caret, edit.selection)

    def insert_text(self, text: str) -> None:
        """Insert text verbatim at the caret, replacing any selection."""
        sel = self._selected_range()
        if sel is not None:
            self._replace(sel[0], sel[1], text)
        else:
            caret = self._doc.caret_offset
            self._replace(caret, caret, text)

    def delete_backward(self) -> None:
        sel = self._selected_range()
        if sel is not None:
            self._replace(sel[0], sel[1], "")
            return
        caret = self._doc.caret_offset
        if caret == 0:
            return
        if self.options.auto_pairs and is_empty_pair(self._doc.text, caret):
            self._replace(caret - 1, caret + 1, "")
        else:
            self._replace(caret - 1, caret, "")

    def delete_forward(self) -> None:
        sel = self._selected_range()
        if sel is not None:
            self._replace(sel[0], sel[1], "")
            return
        caret = self._doc.caret_offset
        if caret < len(self._doc.text):
            self._replace(caret, caret + 1, "", caret)

    def new_line(self) -> None:
        """Break the line, carrying over the current indentation."""
        indent = ""
        if self.options.keep_indent:
            line_start, _ = line_bounds(self._doc.text, self._doc.caret_offset)
            line = self._doc.text[line_start : self._doc.caret_offset]
            indent = line[: len(line) - len(line.lstrip(" \t"))]
        self.insert_text("\n" + indent)

    def insert_tab(self) -> None:
        _, column = self.caret_position
        size = self.options.tab_size
        self.insert_text(" " * (size - column % size))

    def toggle_comment(self) -> None:
        start, end = self._doc.selection if self._doc.has_selection else (self._doc.caret_offset,) * 2
        token = LINE_COMMENT[self._doc.language]
        result = toggle_comment(self._doc.text, start, end, token)
        if result.text == self._doc.text:
            return
        sel_start, sel_end = result.selection
        if self._doc.has_selection:
            anchor_first = self._doc.selection[0] <= self._doc.selection[1]
            selection = (sel_start, sel_end) if anchor_first else (sel_end, sel_start)
            self._commit(result.text, selection[1], selection)
        else:
            self._commit(result.text, sel_start)

    def add_import(self, statement: str) -> bool:
        """Insert an import, shifting caret and selection past it. False if already present."""
        old_text = self._doc.text
        new_text, offset = insert_import(old_text, statement)
        if offset is None:
            return False
        delta = len(new_text) - len(old_text)

        def shift(pos: int) -> int:
            return pos + delta if pos >= offset else pos

        start, end = self._doc.selection
        logger.debug("Inserting %r at offset %d", statement, offset)
        self._commit(new_text, shift(self._doc.caret_offset), (shift(start), shift(end)))
        return True

    def add_all_missing_imports(self) -> int:
        added = 0
        for finding in list(self.import_analysis.missing):
            if self.add_import(finding.import_statement):
                added += 1
        return added

    def accept_suggestion(self, index: int | None = None) -> bool:
        """Insert the highlighted (or given) suggestion and close the list."""
        items = self._engine.items
        if not items:
            return False
        if index is None:
            item = self._engine.selected()
        elif 0 <= index < len(items):
            item = items[index]
        else:
            return False
        assert item is not None
        new_text, caret = apply_suggestion(self._doc.text, self._doc.caret_offset, item, self._doc.language)
        self._commit(new_text, caret)
        self._engine.dismiss()
        return True

    def dismiss_suggestions(self) -> None:
        self._engine.dismiss()

    # --- Caret movement ---

    def move_caret(self, delta_line: int = 0, delta_col: int = 0) -> None:
        doc = self._doc
        sel = self._selected_range()
        if sel is not None and delta_line == 0:
            # Horizontal moves collapse the selection to the side moved towards.
            self._commit(doc.text, sel[0] if delta_col < 0 else sel[1])
            return
        if delta_line:
            line, column = self.caret_position
            self._commit(doc.text, position_to_offset(doc.text, line + delta_line, column))
        else:
            self._commit(doc.text, doc.caret_offset + delta_col)

    def move_to_line_start(self) -> None:
        start, _ = line_bounds(self._doc.text, self._doc.caret_offset)
        self._commit(self._doc.text, start)

    def move_to_line_end(self) -> None:
        _, end = line_bounds(self._doc.text, self._doc.caret_offset)
        self._commit(self._doc.text, end)

    # --- Compile errors ---

    def set_compile_errors(self, errors: list[Diagnostic]) -> None:
        """Show compiler errors; they stay until cleared or replaced."""
        self._compile_errors = [
            Diagnostic(e.line, "error", e.message, e.context) for e in errors
        ]
        self._recompute()

    def clear_compile_errors(self) -> None:
        if self._compile_errors:
            self._compile_errors = []
            self._recompute()

    # --- Key dispatch ---

    def handle_key(self, key: KeyId) -> bool:  # noqa: C901
        """Dispatch a key id. Returns False for keys the surface does not handle."""
        kb = self._keybindings

        if self._engine.visible:
            if kb.matches(key, "selectCancel"):
                self._engine.dismiss()
                return True
            if kb.matches(key, "selectUp"):
                self._engine.move_selection(-1)
                return True
            if kb.matches(key, "selectDown"):
                self._engine.move_selection(1)
                return True
            if kb.matches(key, "selectConfirm"):
                return self.accept_suggestion()

        if kb.matches(key, "toggleComment"):
            self.toggle_comment()
        elif kb.matches(key, "addMissingImports"):
            self.add_all_missing_imports()
        elif kb.matches(key, "deleteCharBackward"):
            self.delete_backward()
        elif kb.matches(key, "deleteCharForward"):
            self.delete_forward()
        elif kb.matches(key, "newLine"):
            self.new_line()
        elif kb.matches(key, "tab"):
            self.insert_tab()
        elif kb.matches(key, "cursorUp"):
            self.move_caret(delta_line=-1)
        elif kb.matches(key, "cursorDown"):
            self.move_caret(delta_line=1)
        elif kb.matches(key, "cursorLeft"):
            self.move_caret(delta_col=-1)
        elif kb.matches(key, "cursorRight"):
            self.move_caret(delta_col=1)
        elif kb.matches(key, "cursorLineStart"):
            self.move_to_line_start()
        elif kb.matches(key, "cursorLineEnd"):
            self.move_to_line_end()
        elif len(key) == 1 and key.isprintable():
            self.type_char(key)
        else:
            return False
        return True
