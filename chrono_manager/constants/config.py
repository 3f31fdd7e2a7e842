"""Site and format constants for the chronology."""

# Forum host the chronology pages live on
CHRONO_HOST = "codegeass.ru"
CHRONO_BASE_URL = f"http://{CHRONO_HOST}"
CHRONOLOGY_PAGE_PATH = "/pages/chronology{arc}"

# Legacy pages are served in a single-byte Cyrillic encoding
PAGE_ENCODING = "windows-1251"

# Links emitted into rendered fragments
TOPIC_URL = f"{CHRONO_BASE_URL}/viewtopic.php?id={{id}}"
CHARACTER_URL = f"{CHRONO_BASE_URL}/pages/id{{id:02d}}"

# Pages before this arc are dated 2017, pages from it on are dated 2018
ERA_CUTOVER_ARC = 7
YEAR_BEFORE_CUTOVER = 2017
YEAR_FROM_CUTOVER = 2018

# Line separating entries in the post dump
ENTRY_DELIMITER = "------"

# Status line of a finished episode
STATUS_COMPLETED = "Завершен"

# Fixed values of the setepisode() call
EPISODE_MODE = 0
EPISODE_DONE = 1

# Width of the arc number in sort keys; arc 0 sorts as the largest value
ARC_DIGITS = 2
