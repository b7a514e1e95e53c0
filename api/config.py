from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from records import DATA_DIR

load_dotenv()

FILES_DIR = Path(os.environ.get("KINSHIP_DATA_DIR", DATA_DIR))
DB_PATH = FILES_DIR / "kinship.db"

TOKEN_PATH = FILES_DIR / "token.txt"
SERVER_ID_PATH = FILES_DIR / "server_id.txt"
API_HOST = os.environ.get("KINSHIP_API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("KINSHIP_API_PORT", "8000"))
API_VERSION = "1.0.0"
ENABLE_MDNS = os.environ.get("KINSHIP_ENABLE_MDNS", "true").lower() == "true"
SERVICE_TYPE = "_kinship._tcp.local."
INSTANCE_PREFIX = "Kinship-PC"

CHAT_API_URL = os.environ.get("KINSHIP_CHAT_API_URL", "https://api.openai.com/v1/chat/completions")
CHAT_API_KEY = os.environ.get("KINSHIP_CHAT_API_KEY", "")
CHAT_MODEL = os.environ.get("KINSHIP_CHAT_MODEL", "gpt-4o-mini")
CHAT_TIMEOUT_SECONDS = float(os.environ.get("KINSHIP_CHAT_TIMEOUT", "60"))
