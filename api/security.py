from __future__ import annotations

import secrets
import uuid
from pathlib import Path

from .config import SERVER_ID_PATH, TOKEN_PATH


def _read_or_create(path: Path, factory) -> str:
    if path.exists():
        value = path.read_text(encoding="utf-8").strip()
        if value:
            return value
    value = factory()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(value, encoding="utf-8")
    return value


def load_or_create_token(path: Path = TOKEN_PATH) -> str:
    return _read_or_create(path, lambda: secrets.token_hex(16))


def load_or_create_server_id(path: Path = SERVER_ID_PATH) -> str:
    return _read_or_create(path, lambda: str(uuid.uuid4()))


def tokens_match(presented: str, expected: str) -> bool:
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))
