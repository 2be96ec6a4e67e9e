# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user

from ...acl import current_org_id
from ...errors import ValidationError
from ...security import roles_required
from ...validators import json_body, parse_id
from . import ledger

bp = Blueprint("attendance", __name__, url_prefix="/attendance")


def _arg_id(name: str) -> int | None:
    raw = request.args.get(name)
    return parse_id(raw, name) if raw else None


@bp.get("")
@roles_required("admin")
def index():
    rows = ledger.list_attendance(current_org_id(), show_id=_arg_id("showId"), user_id=_arg_id("userId"))
    return jsonify([r.to_dict(with_refs=True) for r in rows])


@bp.post("")
@roles_required("admin")
def set_status():
    payload = json_body()
    row = ledger.set_status(
        current_org_id(),
        parse_id(payload.get("userId"), "userId"),
        parse_id(payload.get("showId"), "showId"),
        payload.get("status"),
        marked_by=current_user.id,
    )
    return jsonify(row.to_dict())


@bp.delete("")
@roles_required("admin")
def clear_status():
    user_id, show_id = _arg_id("userId"), _arg_id("showId")
    if user_id is None or show_id is None:
        raise ValidationError("userId and showId required")
    ledger.clear_status(current_org_id(), user_id, show_id)
    return jsonify({"ok": True})


@bp.post("/bulk")
@roles_required("admin")
def bulk():
    payload = json_body()
    user_ids = payload.get("userIds")
    if not isinstance(user_ids, list):
        raise ValidationError("userIds must be a list")
    count = ledger.bulk_mark(
        current_org_id(),
        parse_id(payload.get("showId"), "showId"),
        user_ids,
        marked_by=current_user.id,
    )
    return jsonify({"count": count})
