"""Configuration for the editing surface."""

from __future__ import annotations

from dataclasses import dataclass, field

from codelab.editor.keybindings import EditorKeybindingsConfig
from codelab.editor.suggestions import MAX_SUGGESTIONS, MIN_TOKEN_LENGTH


@dataclass
class EditorOptions:
    """Editor behaviour switches."""

    tab_size: int = 4
    auto_pairs: bool = True
    keep_indent: bool = True
    max_suggestions: int = MAX_SUGGESTIONS
    min_token_length: int = MIN_TOKEN_LENGTH
    keybindings: EditorKeybindingsConfig = field(default_factory=dict)
