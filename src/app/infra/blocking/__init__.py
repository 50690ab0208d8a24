"""Pool de I/O bloqueante."""

from app.infra.blocking.processor import (
    DEFAULT_POOL_SIZE,
    DEFAULT_QUEUE_LIMIT,
    BlockingIOProcessor,
)

__all__ = ["DEFAULT_POOL_SIZE", "DEFAULT_QUEUE_LIMIT", "BlockingIOProcessor"]
