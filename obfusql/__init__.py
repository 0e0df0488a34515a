"""Build SQL statements that anonymise sensitive PostgreSQL columns."""

__version__ = "0.1.0"
__all__ = ["formatter", "generate"]