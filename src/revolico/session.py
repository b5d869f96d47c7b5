"""
Admin session -- who may write, and with which credential.

    LOGGED_OUT --login--> AWAITING_TOKEN --supply_token--> ACTIVE
    LOGGED_OUT --login (shared token decrypts)-----------> ACTIVE
    ACTIVE --logout--> LOGGED_OUT

The upstream token is entered once, encrypted under the static
passphrase and stored in the shared document so later sessions on any
machine can reuse it. Logging out only clears this machine's flag.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from . import codec
from .audit import audit_event
from .context import ClientContext
from .errors import InvalidCredentials, SessionStateError
from .gateway import WriteGateway
from .models import AdminRecord

logger = logging.getLogger("revolico.session")


class SessionState(str, Enum):
    """Admin session states."""

    LOGGED_OUT = "logged_out"
    AWAITING_TOKEN = "awaiting_token"
    ACTIVE = "active"


class AdminSession:
    """Admin state machine bound to one client context."""

    def __init__(self, ctx: ClientContext, gateway: Optional[WriteGateway] = None):
        self.ctx = ctx
        self.gateway = gateway or WriteGateway(ctx)
        self.state = SessionState.LOGGED_OUT
        self._password_hash: Optional[str] = None

    def login(self, username: str, password: str) -> SessionState:
        """Check admin credentials against the shared document.

        The stored (base64) password and the configured initial password
        are both accepted.

        Raises:
            InvalidCredentials: If the username or password is wrong.
        """
        config = self.ctx.config
        admin = self.ctx.document.admin
        stored = admin.password_hash if admin else None

        password_ok = (
            codec.password_matches(password, stored)
            or password == config.admin_initial_password
        )
        if username != config.admin_user or not password_ok:
            audit_event(self.ctx.home, "LOGIN_FAILED", f"Bad credentials for {username!r}")
            raise InvalidCredentials("Incorrect credentials")

        self._password_hash = codec.encode_password(password)
        audit_event(self.ctx.home, "LOGIN", f"Admin {username} logged in")
        return self._activate_from_document()

    def resume(self) -> SessionState:
        """Restore a session this machine left open."""
        if not self.ctx.local_state.admin_logged_in:
            self.state = SessionState.LOGGED_OUT
            return self.state
        return self._activate_from_document()

    def _activate_from_document(self) -> SessionState:
        admin = self.ctx.document.admin
        token = None
        if admin and admin.encrypted_token:
            token = codec.decrypt(admin.encrypted_token, self.ctx.config.passphrase)
            if token is None:
                logger.warning("Shared token could not be decrypted; re-enter it")

        if token:
            self.ctx.credential = token
            self._set_logged_in(True)
            self.state = SessionState.ACTIVE
        else:
            self.ctx.credential = None
            self.state = SessionState.AWAITING_TOKEN
        return self.state

    def supply_token(self, token: str) -> SessionState:
        """Share the upstream credential through the document.

        A failed write leaves the session in AWAITING_TOKEN.

        Raises:
            SessionStateError: Unless the session is AWAITING_TOKEN.
        """
        if self.state != SessionState.AWAITING_TOKEN:
            raise SessionStateError(f"Cannot supply a token while {self.state.value}")

        token = token.strip()
        if not token:
            return self.state

        if not self.ctx.config.passphrase:
            logger.warning("Empty passphrase: shared token is only base64-deep")

        password_hash = self._password_hash
        if password_hash is None and self.ctx.document.admin:
            password_hash = self.ctx.document.admin.password_hash

        document = self.ctx.working_copy()
        document.admin = AdminRecord(
            password_hash=password_hash,
            encrypted_token=codec.encrypt(token, self.ctx.config.passphrase),
        )

        self.ctx.credential = token
        if not self.gateway.write(document):
            self.ctx.credential = None
            logger.error("Could not store the token; session still awaiting it")
            return self.state

        self._set_logged_in(True)
        self.state = SessionState.ACTIVE
        audit_event(self.ctx.home, "TOKEN", "Upstream token shared through document")
        return self.state

    def logout(self) -> SessionState:
        """Close the local session. The shared encrypted token stays."""
        self.ctx.credential = None
        self._password_hash = None
        self._set_logged_in(False)
        self.state = SessionState.LOGGED_OUT
        audit_event(self.ctx.home, "LOGOUT", "Admin logged out")
        return self.state

    def _set_logged_in(self, value: bool) -> None:
        if self.ctx.local_state.admin_logged_in != value:
            self.ctx.local_state.admin_logged_in = value
            self.ctx.save_local_state()
