# app/services/file_service.py

import os
import shutil
import uuid
from dataclasses import dataclass
from typing import Optional

from fastapi import UploadFile

from app.core.exceptions import FileUploadError
from app.core.logger import logger


@dataclass(frozen=True)
class FileData:
    original_name: str
    path: str


class FileService:
    """Profile images on the local disk, one folder per user."""

    def __init__(self, upload_dir: str):
        self.upload_dir = upload_dir

    def upload_file(self, upload: UploadFile, owner_id: str) -> FileData:
        original_name = os.path.basename(upload.filename or "upload")
        folder = os.path.join(self.upload_dir, owner_id)
        path = os.path.join(folder, f"{uuid.uuid4().hex}_{original_name}")

        try:
            os.makedirs(folder, exist_ok=True)
            with open(path, "wb") as out:
                shutil.copyfileobj(upload.file, out)
        except OSError as e:
            logger.error(f"File upload failed for {owner_id}: {e}")
            raise FileUploadError("could not store the uploaded file") from e

        logger.info(f"Stored file for {owner_id}: {path}")
        return FileData(original_name=original_name, path=path)

    def delete_file(self, file_data: Optional[FileData]) -> None:
        if file_data is None:
            return
        try:
            os.remove(file_data.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FileUploadError("could not delete the previous file") from e
