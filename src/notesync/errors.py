# SPDX-License-Identifier: MIT

from typing import NoReturn, Optional

from loguru import logger


class NoteSyncError(Exception):
    """Base error. The message is always safe to show to the user."""


class NotSignedInError(NoteSyncError):
    def __init__(self, message: str = "Sync failed - please sign in") -> None:
        super().__init__(message)


class AuthenticationError(NoteSyncError):
    pass


class EncryptionKeyMissingError(NoteSyncError):
    def __init__(self, message: str = "No encryption key found") -> None:
        super().__init__(message)


class WrongKeyError(NoteSyncError):
    def __init__(self, message: str = "Wrong encryption key") -> None:
        super().__init__(message)


class TemplateError(NoteSyncError):
    pass


class LocalStoreError(NoteSyncError):
    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class RemoteStoreError(NoteSyncError):
    pass


def wrap_error(error: BaseException, message: str) -> NoReturn:
    """
    Re-raise an error with a user-facing message.

    Errors that are already user-facing pass through unchanged. Anything
    else is logged in full and replaced by a NoteSyncError carrying
    `message`.
    """
    if isinstance(error, NoteSyncError):
        raise error
    logger.opt(exception=error).error(message)
    raise NoteSyncError(message) from error
