# src/schedule_dashboard/auth/storage.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_KEY = "jwt_token"
IDENTITY_KEY = "user_data"


class CredentialFile:
    """
    Local key/value file holding the bearer credential and the identity profile.

    Both entries are written and removed together; a file holding only one of
    them is treated as absent.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> tuple[str, dict[str, Any]] | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable credential file %s; ignoring it.", self._path)
            return None
        if not isinstance(data, dict):
            return None

        token = data.get(TOKEN_KEY)
        identity = data.get(IDENTITY_KEY)
        if not isinstance(token, str) or not token or not isinstance(identity, dict):
            return None
        return token, identity

    def save(self, token: str, identity: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps({TOKEN_KEY: token, IDENTITY_KEY: identity}, ensure_ascii=False), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # The file holds a live credential; keep it private on disk.
            os.chmod(self._path, 0o600)
        logger.debug("Saved credentials to %s", self._path)

    def clear(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path.unlink()
            logger.debug("Cleared credentials at %s", self._path)
