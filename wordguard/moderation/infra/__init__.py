"""Storage adapters for the moderation domain."""

from .redis_terms import RedisTermSource

__all__ = ["RedisTermSource"]
