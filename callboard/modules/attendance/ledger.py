# -*- coding: utf-8 -*-
"""
Per-(actor, show) status ledger.

One row per pair, last writer wins, no history. A missing row means
"unset", which is different from any explicit status.
"""
from __future__ import annotations

import logging
from datetime import datetime

from ...extensions import db
from ...acl import org_actor_ids, org_show_or_404, org_user_or_none
from ...errors import NotFoundError, ValidationError
from ...models import Attendance, Show, STATUSES, User

logger = logging.getLogger(__name__)


def parse_status(value) -> str:
    if value not in STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(STATUSES)}")
    return value


def _upsert(user_id: int, show_id: int, status: str, marked_by: int | None, now: datetime) -> Attendance:
    row = db.session.get(Attendance, (user_id, show_id))
    if row is None:
        row = Attendance(user_id=user_id, show_id=show_id)
        db.session.add(row)
    row.apply(status, marked_by, now)
    return row


def set_status(org_id: int, user_id: int, show_id: int, status: str, marked_by: int | None) -> Attendance:
    user = org_user_or_none(org_id, user_id)
    show = db.session.query(Show).filter(Show.id == show_id, Show.organization_id == org_id).first()
    if user is None or show is None:
        raise NotFoundError("User or show not found")
    row = _upsert(user.id, show.id, parse_status(status), marked_by, datetime.utcnow())
    db.session.commit()
    return row


def clear_status(org_id: int, user_id: int, show_id: int) -> None:
    row = (
        db.session.query(Attendance)
        .join(User, User.id == Attendance.user_id)
        .join(Show, Show.id == Attendance.show_id)
        .filter(
            Attendance.user_id == user_id,
            Attendance.show_id == show_id,
            User.organization_id == org_id,
            Show.organization_id == org_id,
        )
        .first()
    )
    if row is None:
        raise NotFoundError("Attendance record not found")
    db.session.delete(row)
    db.session.commit()


def bulk_mark(org_id: int, show_id: int, user_ids, marked_by: int | None) -> int:
    """Mark every valid actor signed in; unknown or foreign ids are ignored."""
    show = org_show_or_404(org_id, show_id)
    valid = org_actor_ids(org_id, user_ids)
    now = datetime.utcnow()
    for uid in sorted(valid):
        _upsert(uid, show.id, "signed_in", marked_by, now)
    db.session.commit()
    logger.info("org=%s bulk-marked %d actor(s) on show %s", org_id, len(valid), show.id)
    return len(valid)


def list_attendance(org_id: int, show_id: int | None = None, user_id: int | None = None) -> list[Attendance]:
    q = (
        db.session.query(Attendance)
        .join(User, User.id == Attendance.user_id)
        .join(Show, Show.id == Attendance.show_id)
        .filter(User.organization_id == org_id, Show.organization_id == org_id)
    )
    if show_id is not None:
        q = q.filter(Attendance.show_id == show_id)
    if user_id is not None:
        q = q.filter(Attendance.user_id == user_id)
    return q.order_by(Show.date.asc(), Show.show_time.asc(), User.last_name.asc()).all()
