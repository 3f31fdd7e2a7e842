"""Character registry access utilities."""

import json
from pathlib import Path

from ..constants.paths import CHARACTERS_JSON_PATH


def load_character_names(path: Path = CHARACTERS_JSON_PATH) -> dict[int, str]:
    """
    Load the character registry.
    
    Args:
        path: JSON file mapping character ids to display names,
            e.g. ``{"3": "Лелуш Ламперуж"}``
        
    Returns:
        Dict of character id to display name, or an empty dict if the file
        does not exist
    """
    if not path.exists():
        return {}
    
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    
    return {int(character_id): name for character_id, name in data.items()}
