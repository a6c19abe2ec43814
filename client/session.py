"""
Client-side session context.

Holds the bearer token for one signed-in user.  Whatever issues requests
receives this object explicitly; signing out clears it in one place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class NotAuthenticatedError(RuntimeError):
    """A protected call was attempted without a token."""


@dataclass
class SessionContext:
    token: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def sign_in(self, token: str, email: Optional[str] = None) -> None:
        self.token = token
        self.email = email

    def sign_out(self) -> None:
        if self.token is not None:
            logger.debug("Session for %s invalidated", self.email or "<unknown>")
        self.token = None
        self.email = None

    def authorization_header(self) -> Dict[str, str]:
        if self.token is None:
            raise NotAuthenticatedError("No token found.")
        return {"Authorization": f"Bearer {self.token}"}
