"""SessionStore implementations.

`FileSessionStore` plays the role of client-local persistent storage: a small
JSON document holding the token under a fixed key.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ganjoorcli.domain.interfaces.session_store import SessionStore
from ganjoorcli.domain.models.common import AuthToken

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "auth_token"


class InMemorySessionStore(SessionStore):
    """Keeps the token for the lifetime of the process only."""

    def __init__(self, token: Optional[str] = None):
        self._token: Optional[AuthToken] = AuthToken(token) if token else None

    def get_token(self) -> Optional[AuthToken]:
        return self._token

    def set_token(self, token: AuthToken) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None


class FileSessionStore(SessionStore):
    """Persists the token in a JSON file under a fixed key."""

    def __init__(self, path: Path, key: str = AUTH_TOKEN_KEY):
        self.path = Path(path)
        self.key = key

    def _read(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_token(self) -> Optional[AuthToken]:
        value = self._read().get(self.key)
        return AuthToken(value) if isinstance(value, str) and value else None

    def set_token(self, token: AuthToken) -> None:
        data = self._read()
        data[self.key] = str(token)
        self._write(data)
        logger.info(f"Stored credential in {self.path}")

    def clear_token(self) -> None:
        data = self._read()
        if self.key not in data:
            return
        del data[self.key]
        self._write(data)
        logger.info(f"Removed credential from {self.path}")
