import os

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")
STORAGE_PATH = os.getenv("STORAGE_PATH", os.path.join(".aams", "storage.db"))
STORAGE_QUOTA_BYTES = int(os.getenv("STORAGE_QUOTA_BYTES", str(5 * 1024 * 1024)))

# "immediate" writes every mutation synchronously; "debounced" coalesces writes per key
FLUSH_POLICY = os.getenv("FLUSH_POLICY", "immediate")
AUTOSAVE_DEBOUNCE_MS = int(os.getenv("AUTOSAVE_DEBOUNCE_MS", "500"))

LIVE_CODE_TTL_MINUTES = int(os.getenv("LIVE_CODE_TTL_MINUTES", "60"))
CHANNEL_PREFIX = os.getenv("CHANNEL_PREFIX", "aams")

PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Seed demo users/catalog into empty storage on startup
AUTO_SEED = bool(int(os.getenv("AUTO_SEED", "1")))
