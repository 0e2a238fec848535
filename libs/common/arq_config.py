"""Redis settings for the arq background worker.

REDIS_URL accepts ``redis://`` and ``rediss://`` (TLS) DSNs; the database
index comes from the path, e.g. ``redis://localhost:6379/2``.
"""

from urllib.parse import urlparse

from arq.connections import RedisSettings
from libs.common.config import get_settings

# Queue shared by every service's scheduled jobs
QUEUE_NAME = "vectorise:jobs"


def get_redis_settings() -> RedisSettings:
    """Translate REDIS_URL into arq RedisSettings."""
    parsed = urlparse(get_settings().REDIS_URL)
    if parsed.scheme not in ("redis", "rediss"):
        raise ValueError(f"Unsupported REDIS_URL scheme: {parsed.scheme!r}")

    database = parsed.path.lstrip("/")
    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        database=int(database) if database else 0,
        username=parsed.username or None,
        password=parsed.password,
        ssl=parsed.scheme == "rediss",
        conn_timeout=5,
        conn_retries=5,
        conn_retry_delay=1,
    )
