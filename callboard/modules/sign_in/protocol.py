# -*- coding: utf-8 -*-
"""
Self-service sign-in from a scanned QR link.

Tokens are globally unique, so the show is looked up before the tenant
check. This is the only code path that enrolls an actor on a show; logging
in or opening the actor dashboard never does.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ...extensions import db
from ...errors import CrossOrgError, InvalidTokenError, ShowNotActiveError, SignInClosedError
from ...models import Attendance, Show

logger = logging.getLogger(__name__)


def resolve_token(token: str) -> Show:
    show = db.session.query(Show).filter(Show.sign_in_token == token).first() if token else None
    if show is None:
        raise InvalidTokenError()
    if show.active_at is None:
        raise ShowNotActiveError()
    if show.locked_at is not None:
        raise SignInClosedError()
    return show


def sign_in(token: str, actor) -> dict:
    show = resolve_token(token)
    if actor.organization_id != show.organization_id:
        logger.warning("user=%s tried to sign into show %s of another organization", actor.id, show.id)
        raise CrossOrgError()

    response = {"success": True, "alreadySignedIn": True, "show": show.brief_dict()}

    # any existing row wins, whatever its status
    if db.session.get(Attendance, (actor.id, show.id)) is not None:
        return response

    db.session.add(Attendance(
        user_id=actor.id,
        show_id=show.id,
        status="signed_in",
        signed_in_at=datetime.utcnow(),
        marked_by_user_id=None,
    ))
    try:
        db.session.commit()
    except IntegrityError:
        # a concurrent scan created the row first
        db.session.rollback()
        return response

    logger.info("user=%s signed in to show %s", actor.id, show.id)
    response["alreadySignedIn"] = False
    return response
