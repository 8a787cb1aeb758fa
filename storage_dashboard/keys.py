"""Classification of storage keys.

Two independent classifications exist:

- classify_key() gives the human label shown for a single entry.
- key_type() gives the coarse bucket used by the global statistics
  (everything before the first ':').
"""

from enum import Enum

CHAT_DATA_KEY = "workbench.panel.aichat.view.aichat.chatdata"
COMPOSER_METADATA_KEY = "composer.composerData"
COMPOSER_DATA_PREFIX = "composerData:"


class KeyCategory(str, Enum):
    """Display category of a storage key."""

    CHAT_DATA = "Chat Data"
    COMPOSER_METADATA = "Composer Metadata"
    CHAT_MESSAGE = "Chat Message"
    CHECKPOINT = "Checkpoint"
    CODE_DIFF = "Code Diff"
    MESSAGE_CONTEXT = "Message Context"
    COMPOSER_DATA = "Composer Data"
    UNKNOWN = "Unknown"


# Checked in order, first match wins
_EXACT_KEYS: tuple[tuple[str, KeyCategory], ...] = (
    (CHAT_DATA_KEY, KeyCategory.CHAT_DATA),
    (COMPOSER_METADATA_KEY, KeyCategory.COMPOSER_METADATA),
)

_PREFIXES: tuple[tuple[str, KeyCategory], ...] = (
    ("bubbleId:", KeyCategory.CHAT_MESSAGE),
    ("checkpointId:", KeyCategory.CHECKPOINT),
    ("codeBlockDiff:", KeyCategory.CODE_DIFF),
    ("messageRequestContext:", KeyCategory.MESSAGE_CONTEXT),
    (COMPOSER_DATA_PREFIX, KeyCategory.COMPOSER_DATA),
)


def classify_key(key: str) -> KeyCategory:
    """Map a storage key to its display category."""
    for exact, category in _EXACT_KEYS:
        if key == exact:
            return category
    for prefix, category in _PREFIXES:
        if key.startswith(prefix):
            return category
    return KeyCategory.UNKNOWN


def key_type(key: str) -> str:
    """
    Return the statistical bucket of a key.

    Examples:
        bubbleId:abc:def -> bubbleId
        someSetting      -> someSetting
        :orphan          -> unknown
    """
    return key.split(":", 1)[0] or "unknown"


def is_composer_data(key: str) -> bool:
    """True for per-composer rows in the global database."""
    return key.startswith(COMPOSER_DATA_PREFIX)
