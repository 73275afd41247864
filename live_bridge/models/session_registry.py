"""
Registry of active bridge sessions.

The registry only tracks which sessions are live so the health endpoint can report
them; each session still owns its own connections exclusively.
"""

from typing import Optional


class SessionRegistry:
    """
    Tracks active bridge sessions by session id.

    Sessions are added when a client connection is accepted and removed once the
    session has closed both of its connections.
    """

    def __init__(self):
        """Initialize an empty dictionary of active sessions."""
        self.active_sessions = {}

    def add_session(self, session_id: str, session) -> None:
        """
        Add a session to the registry.

        Args:
            session_id: Unique identifier of the session
            session: The BridgeSession instance
        """
        self.active_sessions[session_id] = session

    def get_session(self, session_id: str) -> Optional[object]:
        """Get an active session by its id, or None if it is not registered."""
        return self.active_sessions.get(session_id)

    def remove_session(self, session_id: str) -> None:
        if session_id in self.active_sessions:
            del self.active_sessions[session_id]

    def __len__(self) -> int:
        return len(self.active_sessions)
