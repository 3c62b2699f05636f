"""Application configuration."""

import os

from dotenv import load_dotenv

from hopecare.core.errors import ConfigError

# Load .env so Firebase/Supabase settings are available
load_dotenv()

TRUE_VALUES = ("true", "1", "yes")
FALSE_VALUES = ("false", "0", "no", "")


def get_env_var(name: str, required: bool = False, default: str = "") -> str:
    """Read an environment variable; raise ConfigError if required and missing."""
    value = os.getenv(name)
    if value is None:
        if required:
            raise ConfigError(f"Environment variable {name} is required but not found")
        return default
    return value


def get_bool_env_var(name: str, required: bool = False, default: bool = False) -> bool:
    """Read a boolean environment variable (true/1/yes or false/0/no)."""
    value = get_env_var(name, required=required, default="true" if default else "false")
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigError(f"Environment variable {name} is not a valid boolean: {value!r}")


def use_supabase_storage() -> bool:
    """True when the Supabase storage backend should be used instead of Firebase."""
    return get_bool_env_var("USE_SUPABASE_STORAGE", default=False)


APP_NAME = os.getenv("APP_NAME", "HopeCare")
APP_VERSION = "0.1.0"
APP_ENVIRONMENT = os.getenv("APP_ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]

# Firebase (default storage backend)
FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET", "")
# Service account JSON; application default credentials are used when empty
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "")

# Supabase (used when USE_SUPABASE_STORAGE=true)
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
# Bucket for paths without a "bucket/" segment
SUPABASE_DEFAULT_BUCKET = os.getenv("SUPABASE_DEFAULT_BUCKET", "uploads")

# Storage behaviour
STORAGE_CACHE_CONTROL = os.getenv("STORAGE_CACHE_CONTROL", "3600")
SIGNED_URL_EXPIRES_IN = int(os.getenv("SIGNED_URL_EXPIRES_IN", "3600"))  # seconds
STORAGE_LIST_LIMIT = int(os.getenv("STORAGE_LIST_LIMIT", "100"))
# Max concurrent URL resolutions while listing a directory
STORAGE_LIST_CONCURRENCY = int(os.getenv("STORAGE_LIST_CONCURRENCY", "10"))

# File size limits (bytes)
MAX_FILE_SIZE_IMAGE = int(os.getenv("MAX_FILE_SIZE_IMAGE", 10 * 1024 * 1024))  # 10 MB
MAX_FILE_SIZE_DOCUMENT = int(os.getenv("MAX_FILE_SIZE_DOCUMENT", 20 * 1024 * 1024))  # 20 MB
MAX_FILE_SIZE_VIDEO = int(os.getenv("MAX_FILE_SIZE_VIDEO", 50 * 1024 * 1024))  # 50 MB
MAX_FILE_SIZE_TEXT = int(os.getenv("MAX_FILE_SIZE_TEXT", 1 * 1024 * 1024))  # 1 MB
