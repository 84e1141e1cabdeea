"""Centralized configuration constants for Claude Log Vault."""

from pathlib import Path

# Storage
DATA_DIR = Path.home() / ".local" / "share" / "claude-log-vault"
DB_FILE = DATA_DIR / "conversations.db"
DB_PATH_ENV = "LOG_VAULT_DB_PATH"
DB_BUSY_TIMEOUT_MS = 5000

# Intake
TRANSCRIPT_EXTENSION = ".jsonl"

# Tool parameter display
MAX_DISPLAY_STRING_LENGTH = 200
INLINE_SEQUENCE_MAX_ITEMS = 3
INLINE_MAPPING_MAX_KEYS = 2
INLINE_MAPPING_MAX_WIDTH = 60

# Title generation
EMBEDDING_MODEL = "all-MiniLM-L6-v2"
TITLES_DISABLED_ENV = "LOG_VAULT_NO_TITLES"
TITLE_SOURCE_MESSAGES = 4
TITLE_SOURCE_CHARS = 1000
TITLE_MAX_WORDS = 6
TITLE_MIN_WORDS = 2
