"""Infrastructure adapters: relational stores and monitoring."""
