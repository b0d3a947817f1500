import os

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")
STORAGE_PATH = os.getenv("STORAGE_PATH", os.path.expanduser(os.path.join("~", ".attendance_sync", "storage.db")))
STORAGE_QUOTA_BYTES = int(os.getenv("STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024)))

FLUSH_POLICY = os.getenv("FLUSH_POLICY", "debounced")
AUTOSAVE_DEBOUNCE_MS = int(os.getenv("AUTOSAVE_DEBOUNCE_MS", "500"))

LIVE_CODE_TTL_MINUTES = int(os.getenv("LIVE_CODE_TTL_MINUTES", "60"))
CHANNEL_PREFIX = os.getenv("CHANNEL_PREFIX", "aams")

PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_SEED = bool(int(os.getenv("AUTO_SEED", "0")))
