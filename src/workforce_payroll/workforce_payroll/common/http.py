from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import jsonify, session

from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, PersistenceError, ValidationError


def ok(data=None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def fail(message: str, status: int = 400, code: Optional[str] = None):
    return jsonify({"success": False, "message": message, "code": code}), status


def current_actor() -> Optional[Actor]:
    """Identity the auth layer left in the session, if any."""

    if "user_id" not in session:
        return None
    try:
        role = Role(session.get("role"))
    except ValueError:
        return None
    return Actor(user_id=int(session["user_id"]), role=role)


def domain_errors(view):
    """Map domain exceptions to JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return fail(str(e), 400, "VALIDATION")
        except AuthorizationError as e:
            return fail(str(e), 403, "FORBIDDEN")
        except NotFoundError as e:
            return fail(str(e), 404, "NOT_FOUND")
        except PersistenceError:
            return fail("Storage unavailable, try again", 503, "UNAVAILABLE")
        except DomainError as e:
            return fail(str(e), 400, "DOMAIN")

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_actor() is None:
            return fail("Login required", 401, "UNAUTHENTICATED")
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = current_actor()
        if actor is None:
            return fail("Login required", 401, "UNAUTHENTICATED")
        if not actor.is_admin:
            return fail("Administrator role required", 403, "FORBIDDEN")
        return view(*args, **kwargs)

    return wrapper
