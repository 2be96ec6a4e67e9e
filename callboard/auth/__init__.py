# -*- coding: utf-8 -*-

from flask import Blueprint, jsonify
from flask_login import current_user, login_user, logout_user, login_required
from ..extensions import db
from ..models.user import User
from ..validators import json_body

auth_bp = Blueprint("auth", __name__)

@auth_bp.post("/login")
def login():
    payload = json_body()
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""
    u = db.session.query(User).filter_by(email=email).first()
    if not u or not u.check_password(password):
        return jsonify({"error": "Invalid email or password"}), 401
    # identity only; sign-in to a show happens exclusively via /sign-in/<token>
    login_user(u, remember=True)
    return jsonify({"user": u.to_dict()})

@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})

@auth_bp.get("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
