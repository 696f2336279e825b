"""Shared test helpers: users and token minting."""
import time

import jwt

TEST_JWT_SECRET = "test-secret-key-with-enough-bytes-for-hs256"

USER_A = "user-a"
USER_B = "user-b"


def make_token(
    user_id: str,
    *,
    email: str | None = None,
    expires_in: int = 3600,
    secret: str = TEST_JWT_SECRET,
) -> str:
    """Mint an HS256 access token the way the identity provider would."""
    now = int(time.time())
    claims: dict = {"sub": user_id, "iat": now, "exp": now + expires_in}
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id: str) -> dict[str, str]:
    """Authorization header for a user."""
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def bookmark_json(bookmark_id: str, user_id: str = USER_A, title: str = "Example") -> dict:
    """A bookmark record as the API returns it."""
    return {
        "id": bookmark_id,
        "title": title,
        "url": f"https://example.com/{bookmark_id}",
        "userId": user_id,
        "createdAt": "2024-05-01T12:00:00Z",
    }


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)
