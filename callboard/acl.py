# -*- coding: utf-8 -*-
"""Tenant scoping helpers. Every lookup here is filtered by organization."""
from __future__ import annotations

from flask_login import current_user

from .extensions import db
from .errors import NotFoundError
from .models import Organization, Show, User
from .validators import as_id


def current_org_id() -> int:
    return int(getattr(current_user, "organization_id", 0) or 0)


def current_org() -> Organization:
    org = db.session.get(Organization, current_org_id())
    if org is None:
        raise NotFoundError("Organization not found")
    return org


def org_show_or_404(org_id: int, show_id: int, *, for_update: bool = False) -> Show:
    q = db.session.query(Show).filter(Show.id == show_id, Show.organization_id == org_id)
    if for_update:
        q = q.with_for_update()
    show = q.first()
    if show is None:
        raise NotFoundError("Show not found")
    return show


def org_user_or_none(org_id: int, user_id: int) -> User | None:
    return (
        db.session.query(User)
        .filter(User.id == user_id, User.organization_id == org_id)
        .first()
    )


def org_actor_ids(org_id: int, user_ids) -> set[int]:
    ids = {i for i in map(as_id, user_ids) if i is not None}
    if not ids:
        return set()
    rows = (
        db.session.query(User.id)
        .filter(User.id.in_(ids), User.organization_id == org_id, User.role == "actor")
        .all()
    )
    return {r[0] for r in rows}
