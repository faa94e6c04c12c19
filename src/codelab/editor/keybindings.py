"""Editor keybindings manager."""

from __future__ import annotations

from typing import Literal

KeyId = str

EditorAction = Literal[
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    # Text input
    "newLine",
    "tab",
    # Autocomplete
    "selectUp",
    "selectDown",
    "selectConfirm",
    "selectCancel",
    # Editing
    "toggleComment",
    "addMissingImports",
    # Execution
    "run",
    "stop",
    "save",
]

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorLineStart": "home",
    "cursorLineEnd": "end",
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    # Text input
    "newLine": "enter",
    "tab": "tab",
    # Autocomplete
    "selectUp": "up",
    "selectDown": "down",
    "selectConfirm": ["enter", "tab"],
    "selectCancel": "escape",
    # Editing
    "toggleComment": "ctrl+/",
    "addMissingImports": "ctrl+shift+i",
    # Execution
    "run": "ctrl+enter",
    "stop": "ctrl+c",
    "save": "ctrl+s",
}


def normalize_key(key: KeyId) -> KeyId:
    """Lower-case modifiers and order them ctrl, alt, shift.

    Single printable characters are returned unchanged so ``"A"`` and
    ``"a"`` stay distinct.
    """
    if len(key) == 1:
        return key
    *mods, base = key.split("+")
    order = {"ctrl": 0, "alt": 1, "shift": 2}
    mods = sorted({m.lower() for m in mods if m}, key=lambda m: order.get(m, 3))
    base = base if len(base) == 1 else base.lower()
    return "+".join([*mods, base])


class EditorKeybindingsManager:
    """Manages keybindings for the editor."""

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in {**DEFAULT_EDITOR_KEYBINDINGS, **config}.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = [normalize_key(k) for k in key_array]

    def matches(self, key: KeyId, action: EditorAction) -> bool:
        """Check if a key id triggers a specific action."""
        return normalize_key(key) in self._action_to_keys.get(action, [])

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def actions_for(self, key: KeyId) -> list[EditorAction]:
        """All actions bound to ``key``, in declaration order."""
        key = normalize_key(key)
        return [action for action, keys in self._action_to_keys.items() if key in keys]

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        self._build_maps(config)


_global_editor_keybindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    global _global_editor_keybindings
    if _global_editor_keybindings is None:
        _global_editor_keybindings = EditorKeybindingsManager()
    return _global_editor_keybindings


def set_editor_keybindings(manager: EditorKeybindingsManager) -> None:
    global _global_editor_keybindings
    _global_editor_keybindings = manager
