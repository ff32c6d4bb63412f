"""Group news items into stories by embedding similarity, backed by PostgreSQL and Redis."""

__version__ = "0.1.0"
__all__ = ["__version__"]