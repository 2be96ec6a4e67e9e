from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..extensions import db

class Organization(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(80), nullable=False, unique=True, index=True)
    week_starts_on = db.Column(db.Integer, nullable=False, default=0)  # 0=Sunday .. 6=Saturday
    display_title = db.Column(db.String(200))
    timezone = db.Column(db.String(64), nullable=False, default="UTC")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def local_now(self) -> datetime:
        """Naive wall-clock time in the organization's timezone."""
        try:
            tz = ZoneInfo(self.timezone or "UTC")
        except ZoneInfoNotFoundError:
            tz = ZoneInfo("UTC")
        return datetime.now(tz).replace(tzinfo=None)

    def settings_dict(self) -> dict:
        return {
            "displayTitle": self.display_title,
            "weekStartsOn": self.week_starts_on,
            "timezone": self.timezone,
        }
