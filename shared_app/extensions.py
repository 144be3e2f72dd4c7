"""Application-wide Flask extensions."""

from flask_sqlalchemy import SQLAlchemy


# A single SQLAlchemy handle shared across the application. The engine is
# configured in :func:`shared_app.factory.create_app` so the database URI can
# follow the test environment (file-based SQLite, Postgres, in-memory, ...).
db = SQLAlchemy()
