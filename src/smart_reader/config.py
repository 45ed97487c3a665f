"""Configuration constants for smart-reader."""

import os
from pathlib import Path

# Content longer than this (in characters) is split into chunks on save.
CONTENT_CHUNK_SIZE: int = int(os.getenv("SMART_READER_CHUNK_SIZE", "50000"))

# Characters of a chunked article kept inline as a preview.
CONTENT_PREVIEW_LENGTH: int = 200

# Top-level keys inside the host data blob.
ARTICLES_KEY: str = "articles"
CONTENT_CHUNKS_KEY: str = "contentChunks"

# Data file location. First file found is used.
DATA_FILES: list[Path] = [
    Path("~/.local/share/smart-reader/data.json").expanduser(),
    Path("~/.config/smart-reader/data.json").expanduser(),
]


def resolve_data_file() -> Path:
    """Return the data file to use.

    SMART_READER_DATA_FILE wins if set. Otherwise the first existing entry of
    DATA_FILES, falling back to the first entry when none exists yet.
    """
    override = os.getenv("SMART_READER_DATA_FILE")
    if override:
        return Path(override).expanduser()
    for candidate in DATA_FILES:
        if candidate.is_file():
            return candidate
    return DATA_FILES[0]
