"""File and directory path constants."""

from pathlib import Path

# Directory names
DATA_DIR = Path("data")

# File paths
INPUT_FILE_PATH = Path("tmp.txt")
CHARACTERS_JSON_PATH = DATA_DIR / "characters.json"
