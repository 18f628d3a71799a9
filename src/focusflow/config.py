import os

# Storage
DATA_DIR = os.getenv("FOCUSFLOW_DATA_DIR", "data").strip() or "data"
KEY_PREFIX = os.getenv("FOCUSFLOW_KEY_PREFIX", "focusflow_")

# Logging
LOG_LEVEL = os.getenv("FOCUSFLOW_LOG_LEVEL", "INFO").upper()

# Input suggestions
MAX_SUGGESTED_TAGS = int(os.getenv("FOCUSFLOW_MAX_SUGGESTED_TAGS", "5"))

APP_VERSION = "1.0.0"
