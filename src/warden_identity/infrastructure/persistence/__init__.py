"""User store adapters: in-memory and SQLAlchemy."""
