"""Row-level data scope rules for SQLAlchemy-backed FastAPI services."""
