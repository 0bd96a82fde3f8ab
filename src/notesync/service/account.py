# SPDX-License-Identifier: MIT

from typing import Optional

from loguru import logger

from notesync.backend.base import NoteBackend, Session
from notesync.errors import AuthenticationError

CREDENTIAL_KEYS = ("email", "password", "firebase_id", "supabase_id")


def validate_credentials(email: Optional[str], password: Optional[str]) -> None:
    """Raises AuthenticationError naming every missing credential."""
    errors = []
    if not email or not email.strip():
        errors.append("Invalid email")
    if not password:
        errors.append("Invalid password")
    if errors:
        raise AuthenticationError(f"Validation errors: {', '.join(errors)}")


async def login(backend: NoteBackend, email: str, password: str) -> dict[str, Optional[str]]:
    """
    Sign in and return the settings to store for the account.

    The returned mapping holds the tenant ids: `supabase_id` is the user
    id and `firebase_id` the legacy id kept in the user metadata.
    """
    validate_credentials(email, password)
    session: Session = await backend.sign_in(email.strip(), password)
    logger.info(f"Signed in as {session['email'] or email}")
    return {
        "email": email.strip(),
        "password": password,
        "supabase_id": session["user_id"],
        "firebase_id": session["firebase_id"],
    }


async def logout(backend: Optional[NoteBackend]) -> tuple[str, ...]:
    """Sign out of the backend. Returns the settings to clear."""
    if backend is not None:
        await backend.sign_out()
    logger.info("Signed out")
    return CREDENTIAL_KEYS
