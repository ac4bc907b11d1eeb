from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from pokerpal.constants import UploadConstants
from pokerpal.routes.deps import get_storage, require_auth
from pokerpal.routes.schemas import UploadResponse
from pokerpal.services.image_storage import ImageStorage
from pokerpal.utils.exceptions import InvalidDataError

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload", response_model=UploadResponse, dependencies=[Depends(require_auth)])
async def upload_image(
    image: Optional[UploadFile] = File(default=None, alias=UploadConstants.FIELD_NAME),
    entity_type: Optional[str] = Form(default=None, alias="entityType"),
    storage: ImageStorage = Depends(get_storage),
):
    if image is None:
        raise InvalidDataError("Upload without file", "No file uploaded")

    # At most one byte past the size limit is buffered
    content = await image.read(UploadConstants.MAX_FILE_SIZE + 1)
    stored = await storage.store(content, image.filename, image.content_type, entity_type)
    return UploadResponse(image_url=stored.url)
