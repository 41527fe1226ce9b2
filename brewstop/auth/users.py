from __future__ import annotations

from typing import Any

import bcrypt

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed demo riders on import."""
    _users["rider"] = {
        "id": "user-rider",
        "password_hash": _hash_password("rider123"),
        "first_name": "Robin",
        "last_name": "Rider",
    }
    _users["guest"] = {
        "id": "user-guest",
        "password_hash": _hash_password("guest123"),
        "first_name": "Gale",
        "last_name": None,
    }


def display_name(user: dict[str, Any]) -> str:
    """``"First Last"``, falling back to the username."""
    parts = [user.get("first_name"), user.get("last_name")]
    name = " ".join(p for p in parts if p)
    return name or user["username"]


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the public user dict or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {
            "id": record["id"],
            "username": username,
            "first_name": record["first_name"],
            "last_name": record["last_name"],
        }
    return None


_seed_users()
