from __future__ import annotations

from datetime import datetime

from ..extensions import db

STATUSES = ("signed_in", "absent", "vacation", "personal_day")


class Attendance(db.Model):
    __tablename__ = "attendance"

    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    show_id = db.Column(db.Integer, db.ForeignKey("show.id", ondelete="CASCADE"), primary_key=True, index=True)
    status = db.Column(db.String(16), nullable=False)  # signed_in|absent|vacation|personal_day
    signed_in_at = db.Column(db.DateTime)
    marked_by_user_id = db.Column(db.Integer, db.ForeignKey("user.id"))  # null = self-service
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", foreign_keys=[user_id], lazy="joined")

    def apply(self, status: str, marked_by: int | None, now: datetime) -> None:
        self.status = status
        self.signed_in_at = now if status == "signed_in" else None
        self.marked_by_user_id = marked_by

    def to_dict(self, with_refs: bool = False) -> dict:
        d = {
            "userId": self.user_id,
            "showId": self.show_id,
            "status": self.status,
            "signedInAt": self.signed_in_at.isoformat() if self.signed_in_at else None,
            "markedByUserId": self.marked_by_user_id,
        }
        if with_refs:
            d["user"] = self.user.brief_dict()
            d["show"] = self.show.brief_dict()
        return d
