# app/common/deps.py

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.common.session_registry import SessionRegistry
from app.core.config import settings
from app.core.exceptions import UnauthenticatedError
from app.db.session import get_db
from app.repositories.relationship_store import RelationshipStore
from app.services.file_service import FileService
from app.services.friend_service import FriendService
from app.services.login_service import LoginService
from app.services.user_service import UserService

# auto_error=False: logout must work without a token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/users/login", auto_error=False)


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def get_relationship_store(request: Request) -> RelationshipStore:
    return request.app.state.relationship_store


def get_file_service() -> FileService:
    return FileService(upload_dir=settings.UPLOAD_DIR)


def get_user_service(
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
) -> UserService:
    return UserService(db=db, files=files)


def get_login_service(
    registry: SessionRegistry = Depends(get_session_registry),
    users: UserService = Depends(get_user_service),
) -> LoginService:
    return LoginService(registry=registry, users=users)


def get_friend_service(store: RelationshipStore = Depends(get_relationship_store)) -> FriendService:
    return FriendService(store=store)


def get_current_user_id(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    registry: SessionRegistry = Depends(get_session_registry),
) -> str:
    """
    Resolve the bearer token to the logged-in user id, or answer 401.

    Routes that need a logged-in user declare this dependency; it runs before
    the route body, so an anonymous request never reaches a service.
    """
    try:
        user_id = LoginService(registry=registry).resolve_current_user(token)
    except UnauthenticatedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.user_id = user_id
    return user_id
