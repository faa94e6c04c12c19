"""Compiler workspace: one editing surface wired to one execution session."""

from __future__ import annotations

import logging

from codelab.activity.config import ActivityConfig
from codelab.editor.config import EditorOptions
from codelab.editor.keybindings import KeyId
from codelab.editor.surface import EditingSurface
from codelab.editor.types import Language
from codelab.runner.channel import ChannelError, ExecutionChannel, WebSocketChannel
from codelab.runner.session import CompileErrorsEvent, ExecutionSession, SessionEvent

logger = logging.getLogger(__name__)


class CompilerWorkspace:
    """Routes run/stop actions and keystrokes between the editor and the console.

    Compile errors reported for the live run become error diagnostics on the
    surface. They stay until the next run starts.
    """

    def __init__(
        self,
        channel: ExecutionChannel,
        language: Language = "java",
        text: str | None = None,
        options: EditorOptions | None = None,
    ) -> None:
        self.surface = EditingSurface(text, language, options)
        self.execution = ExecutionSession(channel, language)
        self._unsubscribe = self.execution.subscribe(self._on_session_event)
        self._owned_channel: WebSocketChannel | None = None

    @classmethod
    async def open(
        cls,
        config: ActivityConfig,
        language: Language = "java",
        text: str | None = None,
        options: EditorOptions | None = None,
    ) -> CompilerWorkspace:
        """Connect to ``config.sandbox_url`` and build a workspace over it."""
        channel = WebSocketChannel()
        try:
            await channel.connect(config.sandbox_url)
        except ChannelError:
            await channel.close()
            raise
        workspace = cls(channel, language, text, options)
        workspace._owned_channel = channel
        return workspace

    def _on_session_event(self, event: SessionEvent) -> None:
        if isinstance(event, CompileErrorsEvent):
            self.surface.set_compile_errors(event.errors)

    @property
    def is_running(self) -> bool:
        return self.execution.is_running

    async def run(self) -> bool:
        if self.execution.is_running:
            return False
        self.surface.clear_compile_errors()
        self.execution.language = self.surface.language
        return await self.execution.run(self.surface.text)

    async def stop(self) -> bool:
        return await self.execution.stop()

    def set_language(self, language: Language, *, load_template: bool = True) -> bool:
        """Switch language, loading its starter program. Refused while running."""
        if self.execution.is_running:
            return False
        self.surface.set_language(language, load_template=load_template)
        self.execution.language = language
        return True

    async def handle_key(self, key: KeyId) -> bool:
        kb = self.surface.keybindings
        if kb.matches(key, "run") and not self.execution.is_running:
            await self.run()
            return True
        if self.execution.is_running:
            if kb.matches(key, "stop"):
                await self.stop()
                return True
            return await self.execution.console.handle_key(key)
        return self.surface.handle_key(key)

    def close(self) -> None:
        self._unsubscribe()
        self.execution.close()

    async def aclose(self) -> None:
        """Close, and disconnect the channel opened by :meth:`open`."""
        self.close()
        if self._owned_channel is not None:
            await self._owned_channel.close()
            self._owned_channel = None
