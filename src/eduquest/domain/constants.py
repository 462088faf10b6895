"""Centralized constants for the EduQuest SRS.

All magic numbers and storage defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Scheduling ----------
MAX_LEVEL = 5
MS_PER_DAY = 24 * 60 * 60 * 1000

# ---------- Card identity ----------
CARD_ID_PREFIX = "card_"

# ---------- Storage ----------
SRS_STORAGE_KEY = "eduquest_srs_data"
STORAGE_FILE_SUFFIX = ".json"

# ---------- Deck files ----------
DECK_SUFFIXES = [".json", ".yaml", ".yml"]
