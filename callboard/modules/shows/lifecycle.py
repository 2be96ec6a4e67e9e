# -*- coding: utf-8 -*-
"""
Show lifecycle: scheduled -> active -> closed.

Activation and closing each run in a single transaction. The "clear every
other active show, then set this one" sequence must never be split across
commits; the partial unique index on ``show.organization_id`` (active rows
only) backs the same rule in the datastore.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ...extensions import db
from ...acl import org_show_or_404
from ...errors import (
    ClosedShowError,
    ConcurrentActivationError,
    DuplicateShowError,
    NotActiveError,
    NotFoundError,
    NotNextUpcomingError,
)
from ...models import Organization, Show, new_sign_in_token

logger = logging.getLogger(__name__)


# --- listing + GC ---

def sweep_expired_shows(org: Organization, now: datetime | None = None) -> int:
    """Delete past shows (older than the grace window) that nobody attended."""
    now = now or org.local_now()
    grace = timedelta(hours=current_app.config.get("SHOW_GC_GRACE_HOURS", 36))
    cutoff = now - grace

    candidates = (
        db.session.query(Show)
        .filter(
            Show.organization_id == org.id,
            Show.date <= cutoff.date(),
            ~Show.attendance.any(),
        )
        .all()
    )
    expired = [s for s in candidates if s.scheduled_at < cutoff]
    for s in expired:
        db.session.delete(s)
    if expired:
        db.session.commit()
        logger.info("org=%s swept %d expired show(s) without attendance", org.id, len(expired))
    return len(expired)


def list_shows(org: Organization, start: date | None = None, end: date | None = None,
               now: datetime | None = None) -> list[Show]:
    sweep_expired_shows(org, now)
    q = db.session.query(Show).filter(Show.organization_id == org.id)
    if start:
        q = q.filter(Show.date >= start)
    if end:
        q = q.filter(Show.date <= end)
    return q.order_by(Show.date.asc(), Show.show_time.asc()).all()


def week_bounds(org: Organization, ref: date) -> tuple[date, date]:
    # python: Monday=0; org setting: Sunday=0
    day = (ref.weekday() + 1) % 7
    diff = (day - int(org.week_starts_on or 0) + 7) % 7
    start = ref - timedelta(days=diff)
    return start, start + timedelta(days=6)


# --- CRUD ---

def get_show(org_id: int, show_id: int) -> Show:
    return org_show_or_404(org_id, show_id)


def _slot_taken(org_id: int, show_date: date, show_time: str, exclude_id: int | None = None) -> bool:
    q = db.session.query(Show.id).filter(
        Show.organization_id == org_id,
        Show.date == show_date,
        Show.show_time == show_time,
    )
    if exclude_id is not None:
        q = q.filter(Show.id != exclude_id)
    return q.first() is not None


def _commit_slot():
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateShowError()


def create_show(org_id: int, show_date: date, show_time: str) -> Show:
    if _slot_taken(org_id, show_date, show_time):
        raise DuplicateShowError()
    show = Show(organization_id=org_id, date=show_date, show_time=show_time)
    db.session.add(show)
    _commit_slot()
    return show


def update_show(org_id: int, show_id: int, show_date: date | None = None,
                show_time: str | None = None) -> Show:
    show = org_show_or_404(org_id, show_id)
    new_date = show_date or show.date
    new_time = show_time or show.show_time
    if (new_date, new_time) != (show.date, show.show_time):
        if _slot_taken(org_id, new_date, new_time, exclude_id=show.id):
            raise DuplicateShowError()
        show.date, show.show_time = new_date, new_time
        _commit_slot()
    return show


def delete_show(org_id: int, show_id: int) -> None:
    show = org_show_or_404(org_id, show_id)
    db.session.delete(show)
    db.session.commit()
    logger.info("org=%s deleted show %s (%s %s)", org_id, show_id, show.date, show.show_time)


# --- state machine ---

def find_next_upcoming(org_id: int, now: datetime, *, for_update: bool = False) -> Show | None:
    """Earliest scheduled show (by date, then time) that has not started yet."""
    q = (
        db.session.query(Show)
        .filter(
            Show.organization_id == org_id,
            Show.active_at.is_(None),
            Show.locked_at.is_(None),
            Show.date >= now.date(),
        )
        .order_by(Show.date.asc(), Show.show_time.asc())
    )
    if for_update:
        q = q.with_for_update()
    for s in q:
        if s.scheduled_at >= now:
            return s
    return None


def _deactivate_others(org_id: int, keep_id: int) -> None:
    db.session.query(Show).filter(
        Show.organization_id == org_id,
        Show.id != keep_id,
        Show.active_at.isnot(None),
    ).update({Show.active_at: None}, synchronize_session=False)


def activate(org: Organization, show_id: int, now: datetime | None = None) -> Show:
    now = now or org.local_now()
    show = org_show_or_404(org.id, show_id, for_update=True)
    if show.locked_at is not None:
        logger.warning("org=%s refused to activate closed show %s", org.id, show_id)
        raise ClosedShowError()

    nxt = find_next_upcoming(org.id, now, for_update=True)
    if nxt is None or nxt.id != show.id:
        logger.warning(
            "org=%s refused to activate show %s: next upcoming is %s",
            org.id, show_id, nxt.id if nxt else None,
        )
        raise NotNextUpcomingError()

    _deactivate_others(org.id, show.id)

    show.active_at = datetime.utcnow()
    show.locked_at = None
    # old QR codes stop working on every activation
    show.sign_in_token = new_sign_in_token()
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning("org=%s activation of show %s lost to a concurrent activation", org.id, show_id)
        raise ConcurrentActivationError()
    logger.info("org=%s activated show %s (%s %s)", org.id, show.id, show.date, show.show_time)
    return show


def close_sign_in(org_id: int, show_id: int) -> Show:
    show = org_show_or_404(org_id, show_id, for_update=True)
    if show.active_at is None:
        raise NotActiveError()
    show.locked_at = datetime.utcnow()
    show.active_at = None
    show.sign_in_token = new_sign_in_token()
    db.session.commit()
    logger.info("org=%s closed sign-in for show %s", org_id, show.id)
    return show


def get_active_show(org_id: int) -> Show:
    show = (
        db.session.query(Show)
        .filter(Show.organization_id == org_id, Show.active_at.isnot(None))
        .order_by(Show.active_at.desc())
        .first()
    )
    if show is None:
        raise NotFoundError("No active show")
    return show
