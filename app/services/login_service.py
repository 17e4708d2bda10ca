# app/services/login_service.py

from typing import Optional, Protocol

from jose import JWTError

from app.common.session_registry import Session, SessionRegistry
from app.core.exceptions import DuplicateSessionError, UnauthenticatedError
from app.core.logger import logger
from app.core.security import create_session_token, decode_session_token


class CredentialVerifier(Protocol):

    def verify_credentials(self, user_id: str, password: str):
        """Return the user, or raise IncorrectCredentialsError."""
        ...


class LoginService:
    """One live session per user; a second login is refused, not swapped in."""

    def __init__(self, registry: SessionRegistry, users: Optional[CredentialVerifier] = None):
        self.registry = registry
        self.users = users

    def login(self, user_id: str, password: str) -> str:
        if self.users is None:
            raise RuntimeError("LoginService.login needs a credential verifier")

        # a wrong password must never touch the registry
        self.users.verify_credentials(user_id, password)

        session = Session(user_id=user_id, token=create_session_token(user_id))
        if not self.registry.register_if_absent(session):
            logger.warning(f"Rejected duplicate login for {user_id}")
            raise DuplicateSessionError(f"{user_id} is already logged in")

        logger.info(f"User logged in: {user_id}")
        return session.token

    def logout(self, token: Optional[str]) -> None:
        if not token:
            return
        session = self.registry.get_by_token(token)
        if session is None:
            return
        if self.registry.remove(session):
            logger.info(f"User logged out: {session.user_id}")

    def resolve_current_user(self, token: Optional[str]) -> str:
        if not token:
            raise UnauthenticatedError("no session token")

        try:
            payload = decode_session_token(token)
        except JWTError:
            raise UnauthenticatedError("invalid or expired session token")

        session = self.registry.get_by_token(token)
        if session is None or session.user_id != payload.get("sub"):
            raise UnauthenticatedError("session is not live")
        return session.user_id

    def end_sessions_for(self, user_id: str) -> None:
        if self.registry.remove_user(user_id) is not None:
            logger.info(f"Session ended for {user_id}")
