# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, jsonify

from ...acl import current_org_id
from ...extensions import db
from ...models import Attendance, User
from ...security import roles_required
from ..shows.lifecycle import get_active_show

bp = Blueprint("actor", __name__, url_prefix="/actor")


@bp.get("/callboard/active")
@roles_required("actor")
def active_callboard():
    """Read-only view of the open show for the actor dashboard. Never signs anyone in."""
    org_id = current_org_id()
    show = get_active_show(org_id)

    actors = (
        db.session.query(User)
        .filter(User.organization_id == org_id, User.role == "actor")
        .order_by(User.last_name.asc(), User.first_name.asc())
        .all()
    )
    rows = db.session.query(Attendance).filter(Attendance.show_id == show.id).all()

    show_d = show.to_dict()
    show_d.pop("signInToken", None)
    return jsonify({
        "show": show_d,
        "actors": [a.brief_dict() for a in actors],
        "attendance": [{"userId": r.user_id, "showId": r.show_id, "status": r.status} for r in rows],
    })
