"""Process-local registry of research workspaces keyed by session id."""

import threading
from typing import Callable

from .workspace import ResearchWorkspace

DEFAULT_SESSION_ID = "default"


class WorkspaceRegistry:
    """
    Thread-safe map of session id → ResearchWorkspace.

    Workspaces live only in process memory; nothing is persisted.
    """

    def __init__(self, factory: Callable[[], ResearchWorkspace]):
        self._lock = threading.Lock()
        self._factory = factory
        self._workspaces: dict[str, ResearchWorkspace] = {}

    def get(self, session_id: str = DEFAULT_SESSION_ID) -> ResearchWorkspace:
        """
        Get the workspace for a session, creating it on first use.

        Args:
            session_id: Session identifier

        Returns:
            The session's ResearchWorkspace
        """
        with self._lock:
            workspace = self._workspaces.get(session_id)
            if workspace is None:
                workspace = self._factory()
                self._workspaces[session_id] = workspace
            return workspace

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._workspaces.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._workspaces)
