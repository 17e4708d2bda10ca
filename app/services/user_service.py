# app/services/user_service.py

from typing import Optional

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateUserError, FileUploadError, IncorrectCredentialsError
from app.core.logger import logger
from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserCreate, UserUpdateRequest
from app.services.file_service import FileData, FileService


class UserService:

    def __init__(self, db: Session, files: Optional[FileService] = None):
        self.db = db
        self.files = files

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.user_id == user_id).first()

    def is_user_id_duplicate(self, user_id: str) -> bool:
        return self.get_user(user_id) is not None

    def create_user(self, user_in: UserCreate) -> User:
        data = user_in.model_dump()
        data["password"] = get_password_hash(user_in.password)
        db_user = User(**data)

        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateUserError(f"user id {user_in.user_id} is taken") from e
        self.db.refresh(db_user)
        logger.info(f"Created user: {db_user.user_id}")
        return db_user

    def verify_credentials(self, user_id: str, password: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise IncorrectCredentialsError("no such user, check the id")
        if not verify_password(password, user.password):
            raise IncorrectCredentialsError("password does not match")
        return user

    def update_password(self, user_id: str, new_password: str) -> None:
        updated = self.db.query(User).filter(User.user_id == user_id).update(
            {User.password: get_password_hash(new_password)}, synchronize_session=False
        )
        self.db.commit()
        if updated:
            logger.info(f"Password changed for {user_id}")

    def update_profile(
        self, user_id: str, update_in: UserUpdateRequest, profile_image: Optional[UploadFile] = None
    ) -> Optional[User]:
        db_user = self.get_user(user_id)
        if db_user is None:
            return None

        old_image = None
        if profile_image is not None:
            if self.files is None:
                raise RuntimeError("UserService needs a FileService to store profile images")
            if db_user.profile_image_path:
                old_image = FileData(original_name=db_user.profile_image_name, path=db_user.profile_image_path)
            new_image = self.files.upload_file(profile_image, user_id)
            db_user.profile_image_name = new_image.original_name
            db_user.profile_image_path = new_image.path

        # fields the client left out stay as they are
        for key, value in update_in.model_dump(exclude_unset=True).items():
            setattr(db_user, key, value)

        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)

        # the row no longer points at the old file
        if old_image is not None:
            try:
                self.files.delete_file(old_image)
            except FileUploadError as e:
                logger.warning(f"Could not remove old profile image {old_image.path}: {e}")
        return db_user
