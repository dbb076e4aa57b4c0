from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from sqlalchemy.orm import Session

from ....application.dto import FileData
from ....application.use_cases.upload_files import (
    MAX_ASSIGNMENT_FILE_SIZE,
    MAX_POST_IMAGE_SIZE,
    UploadAssignmentFile,
    UploadPostImage,
    storage_status,
    upload_info,
)
from ....domain.entities import Identity
from ....infrastructure.db import get_db
from ....infrastructure.metrics import uploads_total
from ....infrastructure.repositories import AssignmentRepository
from ..authz import get_current_user
from ..schemas import FileUploadResp, ImageUploadResp

router = APIRouter(prefix="/upload", tags=["upload"])


def read_upload(upload: UploadFile | None, limit: int) -> FileData | None:
    """Read at most ``limit + 1`` bytes so oversized files fail the size check."""
    if upload is None or not upload.filename:
        return None
    data = upload.file.read(limit + 1)
    return FileData(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


@router.post("/assignment/{assignment_id}", response_model=FileUploadResp, status_code=status.HTTP_201_CREATED)
def upload_assignment_file(
    assignment_id: int,
    request: Request,
    file: UploadFile | None = File(None),
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    state = request.app.state
    uc = UploadAssignmentFile(state.storage, AssignmentRepository(db), state.settings.STORAGE_FOLDER)
    stored = uc.execute(user, assignment_id, read_upload(file, MAX_ASSIGNMENT_FILE_SIZE))
    uploads_total.labels(kind="assignment").inc()
    return FileUploadResp.build(stored)


@router.post("/post-image", response_model=ImageUploadResp, status_code=status.HTTP_201_CREATED)
def upload_post_image(
    request: Request,
    image: UploadFile | None = File(None),
    user: Identity = Depends(get_current_user),
):
    state = request.app.state
    uc = UploadPostImage(state.storage, state.settings.STORAGE_FOLDER)
    stored = uc.execute(user, read_upload(image, MAX_POST_IMAGE_SIZE))
    uploads_total.labels(kind="post-image").inc()
    return ImageUploadResp.build(stored)


@router.get("/info")
def get_upload_info(request: Request, user: Identity = Depends(get_current_user)):
    state = request.app.state
    return upload_info(state.settings.API_PREFIX, state.storage is not None)


@router.get("/status")
def get_storage_status(request: Request, user: Identity = Depends(get_current_user)):
    return storage_status(user, request.app.state.storage)
