# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date

from flask import Blueprint, jsonify, request

from ...acl import current_org, current_org_id
from ...errors import ValidationError
from ...security import roles_required
from ...validators import json_body, parse_date, parse_flag, parse_show_time
from . import importer, lifecycle

bp = Blueprint("shows", __name__, url_prefix="/shows")


def _optional_date(name: str) -> date | None:
    raw = request.args.get(name)
    return parse_date(raw, name) if raw else None


@bp.get("")
@roles_required("admin")
def index():
    shows = lifecycle.list_shows(current_org(), _optional_date("start"), _optional_date("end"))
    return jsonify([s.to_dict() for s in shows])


@bp.get("/week")
@roles_required("admin")
def week():
    org = current_org()
    ref = _optional_date("date") or org.local_now().date()
    start, end = lifecycle.week_bounds(org, ref)
    shows = lifecycle.list_shows(org, start, end)
    return jsonify({
        "start": start.isoformat(),
        "end": end.isoformat(),
        "displayTitle": org.display_title,
        "shows": [s.to_dict() for s in shows],
    })


@bp.post("")
@roles_required("admin")
def create():
    payload = json_body()
    show = lifecycle.create_show(
        current_org_id(),
        parse_date(payload.get("date")),
        parse_show_time(payload.get("showTime")),
    )
    return jsonify(show.to_dict()), 201


@bp.get("/active")
@roles_required("admin")
def active():
    return jsonify(lifecycle.get_active_show(current_org_id()).to_dict())


@bp.get("/<int:show_id>")
@roles_required("admin")
def detail(show_id: int):
    return jsonify(lifecycle.get_show(current_org_id(), show_id).to_dict())


@bp.patch("/<int:show_id>")
@roles_required("admin")
def update(show_id: int):
    payload = json_body()
    show_date = parse_date(payload["date"]) if payload.get("date") is not None else None
    show_time = parse_show_time(payload["showTime"]) if payload.get("showTime") is not None else None
    show = lifecycle.update_show(current_org_id(), show_id, show_date, show_time)
    return jsonify(show.to_dict())


@bp.delete("/<int:show_id>")
@roles_required("admin")
def delete(show_id: int):
    lifecycle.delete_show(current_org_id(), show_id)
    return jsonify({"ok": True})


@bp.post("/<int:show_id>/activate")
@roles_required("admin")
def activate(show_id: int):
    return jsonify(lifecycle.activate(current_org(), show_id).to_dict())


@bp.post("/<int:show_id>/close-signin")
@roles_required("admin")
def close_signin(show_id: int):
    return jsonify(lifecycle.close_sign_in(current_org_id(), show_id).to_dict())


@bp.post("/import")
@roles_required("admin")
def import_file():
    f = request.files.get("file")
    if not f:
        raise ValidationError("No file uploaded")
    rows = importer.read_rows(getattr(f, "filename", "") or "", f.read())
    skip = parse_flag(request.form.get("skipDuplicates"), default=True)
    result = importer.import_rows(current_org_id(), rows, skip_duplicates=skip)
    return jsonify(result.to_dict())


@bp.post("/bulk-generate")
@roles_required("admin")
def bulk_generate():
    payload = json_body()
    result = importer.bulk_generate(
        current_org_id(),
        payload.get("startDate"),
        payload.get("endDate"),
        payload.get("weekdayTimes"),
        skip_duplicates=parse_flag(payload.get("skipDuplicates"), default=True),
    )
    return jsonify(result.to_dict())
