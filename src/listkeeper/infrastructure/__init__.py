"""Infrastructure layer — SQLite persistence and public-suffix lookups.

This layer depends on stdlib, third-party libs (SQLAlchemy, tldextract),
and the domain models it persists. It must never import from services,
commands, or output.
"""
