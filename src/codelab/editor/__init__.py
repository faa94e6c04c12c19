"""codelab editor: tokenizer, analyzers and the editing surface."""

# Bracket matching
from codelab.editor.brackets import (
    auto_pair_insertion,
    bracket_at_caret,
    find_matching_bracket,
)

# Comment toggling
from codelab.editor.comments import CommentToggle, toggle_comment

# Configuration
from codelab.editor.config import EditorOptions

# Import analysis
from codelab.editor.imports import (
    analyze_imports,
    find_missing_imports,
    find_unused_imports,
    insert_import,
)

# Keybindings
from codelab.editor.keybindings import (
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    EditorKeybindingsManager,
    get_editor_keybindings,
    set_editor_keybindings,
)

# Language tables
from codelab.editor.languages import CLASS_TO_IMPORT, DEFAULT_TEMPLATES, LINE_COMMENT

# Suggestions
from codelab.editor.suggestions import (
    SuggestionEngine,
    apply_suggestion,
    compute_suggestions,
)

# Editing surface
from codelab.editor.surface import (
    CaretMovedEvent,
    EditingSurface,
    SurfaceEvent,
    TextChangedEvent,
)

# Tokenizer
from codelab.editor.tokenizer import iter_identifiers, merge_diagnostics, tokenize

# Core types
from codelab.editor.types import (
    SUPPORTED_LANGUAGES,
    BracketPair,
    Diagnostic,
    ImportAnalysis,
    ImportFinding,
    Language,
    SourceDocument,
    StyledSpan,
    SuggestionItem,
    UnusedImport,
    offset_to_position,
    position_to_offset,
)

__all__ = [
    "CLASS_TO_IMPORT",
    "DEFAULT_EDITOR_KEYBINDINGS",
    "DEFAULT_TEMPLATES",
    "LINE_COMMENT",
    "SUPPORTED_LANGUAGES",
    "BracketPair",
    "CaretMovedEvent",
    "CommentToggle",
    "Diagnostic",
    "EditingSurface",
    "EditorAction",
    "EditorKeybindingsManager",
    "EditorOptions",
    "ImportAnalysis",
    "ImportFinding",
    "Language",
    "SourceDocument",
    "StyledSpan",
    "SuggestionEngine",
    "SuggestionItem",
    "SurfaceEvent",
    "TextChangedEvent",
    "UnusedImport",
    "analyze_imports",
    "apply_suggestion",
    "auto_pair_insertion",
    "bracket_at_caret",
    "compute_suggestions",
    "find_matching_bracket",
    "find_missing_imports",
    "find_unused_imports",
    "get_editor_keybindings",
    "insert_import",
    "iter_identifiers",
    "merge_diagnostics",
    "offset_to_position",
    "position_to_offset",
    "set_editor_keybindings",
    "toggle_comment",
    "tokenize",
]
