# -*- coding: utf-8 -*-
from __future__ import annotations

import uuid
from datetime import datetime, time

from ..extensions import db


def new_sign_in_token() -> str:
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value is not None else None


class Show(db.Model):
    __tablename__ = "show"

    id = db.Column(db.Integer, primary_key=True)
    organization_id = db.Column(db.Integer, db.ForeignKey("organization.id"), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False, index=True)
    show_time = db.Column(db.String(5), nullable=False)  # zero-padded HH:mm

    # scheduled: both null | active: active_at | closed: locked_at
    active_at = db.Column(db.DateTime)
    locked_at = db.Column(db.DateTime)
    sign_in_token = db.Column(db.String(64), unique=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    attendance = db.relationship(
        "Attendance",
        backref="show",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.UniqueConstraint("organization_id", "date", "show_time", name="uq_show_slot"),
        # at most one active show per organization
        db.Index(
            "uq_show_one_active",
            "organization_id",
            unique=True,
            sqlite_where=db.text("active_at IS NOT NULL"),
            postgresql_where=db.text("active_at IS NOT NULL"),
        ),
    )

    @property
    def scheduled_at(self) -> datetime:
        """Local wall-clock start of the performance."""
        hh, mm = map(int, self.show_time.split(":"))
        return datetime.combine(self.date, time(hh, mm))

    @property
    def state(self) -> str:
        if self.active_at is not None:
            return "active"
        if self.locked_at is not None:
            return "closed"
        return "scheduled"

    def brief_dict(self) -> dict:
        return {"id": self.id, "date": self.date.isoformat(), "showTime": self.show_time}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "organizationId": self.organization_id,
            "date": self.date.isoformat(),
            "showTime": self.show_time,
            "activeAt": _iso(self.active_at),
            "lockedAt": _iso(self.locked_at),
            "signInToken": self.sign_in_token,
            "state": self.state,
        }
