# -*- coding: utf-8 -*-
"""
Error taxonomy shared by every blueprint.

Each error carries the HTTP status it surfaces as; the handler registered in
``create_app`` renders them as ``{"error": message}``. Missing and
cross-tenant entities raise the same ``NotFoundError`` so existence never
leaks across organizations.
"""
from __future__ import annotations


class CallboardError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- 400: malformed input ---
class ValidationError(CallboardError):
    status_code = 400
    default_message = "Invalid input"


class ImportFormatError(ValidationError):
    default_message = "Unsupported format. Use CSV or Excel (.xlsx)"


# --- 404 ---
class NotFoundError(CallboardError):
    status_code = 404
    default_message = "Not found"


class InvalidTokenError(NotFoundError):
    default_message = "Invalid or expired sign-in link"


# --- 400: state machine conflicts ---
class StateConflictError(CallboardError):
    status_code = 400
    default_message = "Conflict with current state"


class ClosedShowError(StateConflictError):
    default_message = "Closed shows cannot re-open sign-in"


class NotNextUpcomingError(StateConflictError):
    default_message = "Only the next upcoming show can be opened for sign-in"


class NotActiveError(StateConflictError):
    default_message = "Only the current active show can be closed"


class ShowNotActiveError(StateConflictError):
    default_message = "This show is not currently active"


class SignInClosedError(StateConflictError):
    default_message = "Sign-in sheet is locked for this show"


class DuplicateShowError(StateConflictError):
    default_message = "A show already exists at that date and time"


class ConcurrentActivationError(StateConflictError):
    default_message = "Another show was opened for sign-in at the same time"


# --- 403 ---
class AuthorizationError(CallboardError):
    status_code = 403
    default_message = "Forbidden"


class CrossOrgError(AuthorizationError):
    default_message = "You are not in this organization"
