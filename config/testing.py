STORAGE_BACKEND = "memory"
STORAGE_PATH = None
STORAGE_QUOTA_BYTES = None

FLUSH_POLICY = "immediate"
AUTOSAVE_DEBOUNCE_MS = 500

LIVE_CODE_TTL_MINUTES = 60
CHANNEL_PREFIX = "aams"

# Cheap hashes keep the seeded demo users fast to create in tests
PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_SEED = True
