import os


class Config:
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    # "redis" for the shared datastore, "memory" for local runs
    store_backend = os.getenv("DOC_STORE_BACKEND", "redis")
    key_prefix = os.getenv("DOC_KEY_PREFIX", "doc")
    store_connect_attempts = int(os.getenv("STORE_CONNECT_ATTEMPTS", "5"))

    blob_storage_path = os.getenv("BLOB_STORAGE_PATH", "storage")
    public_base_url = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    default_search_limit = 50
    default_recent_limit = 10
    max_tags = 10

    api_host = os.getenv("API_HOST", "0.0.0.0")
    api_port = int(os.getenv("API_PORT", "8000"))

config = Config()
