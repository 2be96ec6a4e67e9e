# -*- coding: utf-8 -*-
from flask import Blueprint, jsonify
from flask_login import current_user

from ...security import roles_required
from .protocol import sign_in

bp = Blueprint("sign_in", __name__, url_prefix="/sign-in")


@bp.get("/<token>")
@roles_required("actor")
def by_token(token: str):
    return jsonify(sign_in(token, current_user))
