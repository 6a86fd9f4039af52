"""
Saved conversation sessions.

Each session maps a short local id to the session id the claude CLI returned
when the conversation started; ``--resume`` with that id continues it. The
claude CLI keeps the conversation itself, this store only keeps the mapping
and some metadata, in ~/.pilot/sessions.json.
"""

import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DISPLAY_NAME_LENGTH = 40


class SessionNotFound(Exception):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} could not be found")
        self.session_id = session_id


class NoSessions(Exception):
    def __init__(self):
        super().__init__('No sessions exist yet. Use "pilot session start" first.')


def _now() -> datetime:
    return datetime.now(timezone.utc)


def display_name_for(prompt: str) -> str:
    """Short name derived from the opening prompt."""
    return " ".join(prompt.split())[:DISPLAY_NAME_LENGTH] or "Untitled session"


@dataclass
class Session:
    """
    A resumable claude CLI conversation.

    ``external_session_id`` never changes after creation and
    ``last_used_at`` only moves forward.
    """
    external_session_id: str
    display_name: str
    model: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=_now)
    last_used_at: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "external_session_id": self.external_session_id,
            "display_name": self.display_name,
            "model": self.model,
            "created_at": self.created_at.isoformat(),
            "last_used_at": self.last_used_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            id=data["id"],
            external_session_id=data["external_session_id"],
            display_name=data.get("display_name", ""),
            model=data.get("model", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
            last_used_at=datetime.fromisoformat(data["last_used_at"]),
        )


class SessionStore:
    """JSON-file backed session list."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, Session]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load sessions from %s: %s", self.path, e)
            return {}

        sessions = {}
        for item in data.get("sessions", []) if isinstance(data, dict) else []:
            try:
                session = Session.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed session entry: %s", e)
                continue
            sessions[session.id] = session
        return sessions

    def _save(self, sessions: Dict[str, Session]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({"sessions": [s.to_dict() for s in sessions.values()]}, f, indent=2)
        os.replace(tmp_path, self.path)

    @staticmethod
    def _next_timestamp(sessions: Dict[str, Session]) -> datetime:
        # Strictly later than anything stored, so "most recent" is never a tie
        now = _now()
        latest = max((s.last_used_at for s in sessions.values()), default=None)
        if latest is not None and now <= latest:
            now = latest + timedelta(microseconds=1)
        return now

    def create(self, external_session_id: str, display_name: str, model: str) -> Session:
        sessions = self._load()
        stamp = self._next_timestamp(sessions)
        session = Session(
            external_session_id=external_session_id,
            display_name=display_name,
            model=model,
            created_at=stamp,
            last_used_at=stamp,
        )
        sessions[session.id] = session
        self._save(sessions)
        logger.debug("Created session %s for %s", session.id, external_session_id)
        return session

    def get(self, session_id: str) -> Session:
        """Look a session up by local id (a unique prefix is enough)."""
        sessions = self._load()
        if session_id in sessions:
            return sessions[session_id]
        matches = [s for key, s in sessions.items() if key.startswith(session_id)]
        if session_id and len(matches) == 1:
            return matches[0]
        raise SessionNotFound(session_id)

    def touch(self, session_id: str) -> Session:
        """Mark a session as used now."""
        sessions = self._load()
        session = sessions.get(self.get(session_id).id)
        session.last_used_at = self._next_timestamp(sessions)
        self._save(sessions)
        return session

    def all(self) -> List[Session]:
        """All sessions, most recently used first."""
        return sorted(self._load().values(), key=lambda s: s.last_used_at, reverse=True)

    def most_recent(self) -> Optional[Session]:
        sessions = self.all()
        return sessions[0] if sessions else None

    def resolve(self, session_id: Optional[str] = None) -> Session:
        """The named session, or the most recent one when no id is given."""
        if session_id:
            return self.get(session_id)
        session = self.most_recent()
        if session is None:
            raise NoSessions()
        return session

    def delete(self, session_id: str) -> Session:
        sessions = self._load()
        session = self.get(session_id)
        del sessions[session.id]
        self._save(sessions)
        return session
