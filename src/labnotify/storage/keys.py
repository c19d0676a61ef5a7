"""Key layout shared by everything that persists engine state."""

from __future__ import annotations

# Install-wide permission flags
PERMISSION_ASKED_KEY = "permission-asked"
PERMISSION_GRANTED_KEY = "permission-granted"
PERMISSION_SKIPPED_KEY = "permission-skipped"


def notifications_key(user_id: str) -> str:
    return f"notifications:{user_id}"


def states_key(user_id: str) -> str:
    return f"laststates:{user_id}"
