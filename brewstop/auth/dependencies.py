from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from .users import display_name

SESSION_USER_KEY = "user"


def sign_in(request: Request, user: dict) -> None:
    request.session[SESSION_USER_KEY] = user


def sign_out(request: Request) -> None:
    """Forget the rider; other session state (favorites) is left alone."""
    request.session.pop(SESSION_USER_KEY, None)


def get_current_user(request: Request) -> dict | None:
    """The rider stored in the session cookie, or ``None``."""
    return request.session.get(SESSION_USER_KEY)


def require_user(user: dict | None = Depends(get_current_user)) -> dict:
    """Raise 401 unless a rider is logged in."""
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def review_author(user_name: str | None, user: dict | None) -> str:
    """
    Name shown on a review.

    An explicit name wins. Logged-in riders may omit it and get their
    profile name; anonymous reviewers must supply one.
    """
    if user_name:
        return user_name
    if user:
        return display_name(user)
    raise HTTPException(status_code=400, detail="userName is required for anonymous reviews")
