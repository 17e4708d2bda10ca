# app/routers/users.py

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from app.common.deps import get_current_user_id, get_login_service, get_user_service, oauth2_scheme
from app.core.exceptions import (
    DuplicateSessionError,
    DuplicateUserError,
    FileUploadError,
    IncorrectCredentialsError,
)
from app.models.user import (
    Token,
    UserCreate,
    UserLoginRequest,
    UserPasswordRequest,
    UserRead,
    UserUpdateRequest,
)
from app.services.login_service import LoginService
from app.services.user_service import UserService

router = APIRouter()


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserRead)
def signup(user: UserCreate, users: UserService = Depends(get_user_service)):
    try:
        return users.create_user(user)
    except DuplicateUserError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/idcheck")
def check_user_id(user_id: str, users: UserService = Depends(get_user_service)):
    if users.is_user_id_duplicate(user_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User id is taken")
    return {"message": "User id is available"}


@router.post("/login", response_model=Token)
def login(login_request: UserLoginRequest, login_service: LoginService = Depends(get_login_service)):
    try:
        token = login_service.login(login_request.user_id, login_request.password)
    except IncorrectCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateSessionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=token)


@router.get("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    token: Optional[str] = Depends(oauth2_scheme),
    login_service: LoginService = Depends(get_login_service),
):
    login_service.logout(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserRead)
def read_users_me(
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
):
    user = users.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/account/password")
def update_password(
    password_request: UserPasswordRequest,
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
    login_service: LoginService = Depends(get_login_service),
):
    users.update_password(user_id, password_request.new_password)
    # the old session goes away with the old password
    login_service.end_sessions_for(user_id)
    return {"message": "Password changed, please log in again"}


@router.put("/account", response_model=UserRead)
def update_account(
    profile_image: UploadFile = File(...),
    gender: Optional[str] = Form(None),
    living_country: Optional[str] = Form(None),
    living_town: Optional[str] = Form(None),
    about_me: Optional[str] = Form(None),
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
):
    fields = {
        "gender": gender,
        "living_country": living_country,
        "living_town": living_town,
        "about_me": about_me,
    }
    update_in = UserUpdateRequest(**{k: v for k, v in fields.items() if v is not None})

    try:
        user = users.update_profile(user_id, update_in, profile_image)
    except FileUploadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
