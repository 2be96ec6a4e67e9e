# -*- coding: utf-8 -*-
"""Read-only roster and organization settings consumed by scheduling views."""
from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...acl import current_org, current_org_id
from ...extensions import db
from ...errors import ValidationError
from ...models import ROLES, User
from ...security import roles_required

bp = Blueprint("roster", __name__)


@bp.get("/users")
@roles_required("admin")
def users():
    q = db.session.query(User).filter(User.organization_id == current_org_id())
    role = request.args.get("role")
    if role:
        if role not in ROLES:
            raise ValidationError("role must be admin or actor")
        q = q.filter(User.role == role)
    rows = q.order_by(User.last_name.asc(), User.first_name.asc()).all()
    return jsonify([u.to_dict() for u in rows])


@bp.get("/organizations/me/settings")
@roles_required("admin", "actor")
def settings():
    return jsonify(current_org().settings_dict())
