"""Database models for the default shared application."""

from __future__ import annotations

from sqlalchemy.sql import func

from .extensions import db


class Restaurant(db.Model):
    """Sample record that suites seed through their setup callbacks."""

    __tablename__ = "restaurants"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}
