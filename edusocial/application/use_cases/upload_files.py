"""File uploads for assignment submissions and post images.

Files are validated here (type and size) and handed to the configured
object store; the store returns the public URL clients attach to
submissions or posts.
"""
import os
import time
import uuid

import structlog

from ...domain.entities import Identity, utc_isoformat, utcnow
from ...domain.errors import InternalError, ServiceUnavailable, ValidationError
from ...domain.policy import Action, authorize
from ...infrastructure.storage import StorageClient, StorageError
from ..dto import FileData, StoredFile
from .manage_assignments import IAssignmentRepository, load_assignment
from .submit_assignment import DEADLINE_PASSED

logger = structlog.get_logger()

MB = 1024 * 1024
MAX_ASSIGNMENT_FILE_SIZE = 10 * MB
MAX_POST_IMAGE_SIZE = 5 * MB

ASSIGNMENT_FILE_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/zip",
    "application/x-zip-compressed",
})
IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


def upload_info(prefix: str, configured: bool) -> dict:
    return {
        "limits": {
            "assignmentFiles": {
                "maxSize": "10MB",
                "allowedTypes": ["PDF", "DOC", "DOCX", "TXT", "JPG", "PNG", "GIF", "WEBP", "ZIP"],
            },
            "postImages": {
                "maxSize": "5MB",
                "allowedTypes": ["JPG", "PNG", "GIF", "WEBP"],
            },
        },
        "endpoints": {
            "assignmentUpload": f"{prefix}/upload/assignment/:assignmentId",
            "postImageUpload": f"{prefix}/upload/post-image",
        },
        "configured": configured,
    }


def storage_status(actor: Identity, storage: StorageClient | None) -> dict:
    authorize(actor, Action.VIEW_UPLOAD_STATUS)
    configured = storage is not None
    return {
        "service": "Object Storage File Upload",
        "status": "active" if configured else "inactive",
        "configured": configured,
        "bucket": storage.bucket if configured else "Not configured",
        "message": (
            "Object storage is properly configured"
            if configured
            else "Object storage credentials missing in environment variables"
        ),
    }


def validate_assignment_file(file: FileData) -> None:
    if file.size > MAX_ASSIGNMENT_FILE_SIZE:
        raise ValidationError("File size exceeds 10MB limit")
    if file.content_type not in ASSIGNMENT_FILE_TYPES:
        raise ValidationError("Invalid file type. Allowed types: PDF, DOC, DOCX, TXT, JPG, PNG, GIF, WEBP, ZIP")


def validate_post_image(file: FileData) -> None:
    if file.content_type not in IMAGE_TYPES:
        raise ValidationError("Invalid file type. Only JPG, PNG, GIF, and WEBP images are allowed")
    if file.size > MAX_POST_IMAGE_SIZE:
        raise ValidationError("Image size exceeds 5MB limit")


def file_format(file: FileData) -> str:
    ext = os.path.splitext(file.filename)[1].lstrip(".").lower()
    if ext:
        return ext
    return file.content_type.rsplit("/", 1)[-1]


def _store(storage: StorageClient, key: str, file: FileData, failure: str) -> StoredFile:
    try:
        url = storage.upload_bytes(key, file.data, file.content_type)
    except StorageError as exc:
        logger.error("storage_upload_failed", key=key, error=str(exc))
        raise InternalError(failure) from exc
    return StoredFile(
        url=url,
        public_id=key,
        original_name=file.filename,
        format=file_format(file),
        size=file.size,
        uploaded_at=utcnow(),
    )


class UploadAssignmentFile:
    def __init__(self, storage: StorageClient | None, assignments: IAssignmentRepository, folder: str):
        self.storage = storage
        self.assignments = assignments
        self.folder = folder

    def execute(self, actor: Identity, assignment_id: int, file: FileData | None) -> StoredFile:
        authorize(actor, Action.UPLOAD_ASSIGNMENT_FILE)
        if self.storage is None:
            raise ServiceUnavailable(
                "File upload service not configured",
                details="Please configure object storage credentials",
            )
        assignment = load_assignment(self.assignments, assignment_id)
        if assignment.is_overdue():
            raise ValidationError(DEADLINE_PASSED, dueDate=utc_isoformat(assignment.due_date))
        if file is None:
            raise ValidationError("Please select a file to upload")
        validate_assignment_file(file)
        ext = os.path.splitext(file.filename)[1].lower()
        key = f"{self.folder}/assignments/{assignment_id}/{actor.id}-{int(time.time() * 1000)}{ext}"
        stored = _store(self.storage, key, file, "Failed to upload file")
        logger.info("file_uploaded", kind="assignment", key=key, user_id=actor.id, size=stored.size)
        return stored


class UploadPostImage:
    def __init__(self, storage: StorageClient | None, folder: str):
        self.storage = storage
        self.folder = folder

    def execute(self, actor: Identity, file: FileData | None) -> StoredFile:
        authorize(actor, Action.UPLOAD_POST_IMAGE)
        if self.storage is None:
            raise ServiceUnavailable(
                "Image upload service not configured",
                details="Please configure object storage credentials",
            )
        if file is None:
            raise ValidationError("Please select an image to upload")
        validate_post_image(file)
        ext = os.path.splitext(file.filename)[1].lower()
        key = f"{self.folder}/posts/{actor.id}/{uuid.uuid4().hex}{ext}"
        stored = _store(self.storage, key, file, "Failed to upload image")
        logger.info("file_uploaded", kind="post-image", key=key, user_id=actor.id, size=stored.size)
        return stored
