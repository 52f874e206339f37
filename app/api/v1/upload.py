"""Image upload endpoints backed by Cloudinary"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from cloudinary.exceptions import Error as CloudinaryError
from typing import List
import io
import logging

from app.api.deps import require_admin
from app.core import cloudinary_client

router = APIRouter()
logger = logging.getLogger(__name__)


async def read_image(file: UploadFile) -> bytes:
    """
    Read an uploaded file after checking its type and size

    Raises:
        HTTPException: 400 for non-image types or files over the size limit
    """
    if file.content_type not in cloudinary_client.ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed"
        )

    content = await file.read()

    if len(content) > cloudinary_client.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum size is {cloudinary_client.MAX_FILE_SIZE // (1024 * 1024)}MB"
        )

    return content


def image_to_response(result: dict, file: UploadFile) -> dict:
    return {
        "url": result["secure_url"],
        "public_id": result["public_id"],
        "original_name": file.filename,
        "size": result.get("bytes"),
        "width": result.get("width"),
        "height": result.get("height"),
        "format": result.get("format"),
    }


async def upload_to_cloudinary(content: bytes) -> dict:
    try:
        return await cloudinary_client.upload_image(io.BytesIO(content))
    except CloudinaryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error uploading image: {str(e)}"
        )


@router.post("/image")
async def upload_image(
    image: UploadFile = File(...),
    current_user: dict = Depends(require_admin)
):
    """
    Upload a single product image (Admin only).
    """
    content = await read_image(image)
    result = await upload_to_cloudinary(content)

    return {
        "success": True,
        "message": "Image uploaded successfully",
        "image": image_to_response(result, image),
    }


@router.post("/images")
async def upload_images(
    images: List[UploadFile] = File(...),
    current_user: dict = Depends(require_admin)
):
    """
    Upload up to five product images in one request (Admin only).
    """
    if len(images) > cloudinary_client.MAX_FILES_PER_REQUEST:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many files. Maximum is {cloudinary_client.MAX_FILES_PER_REQUEST} files"
        )

    contents = [await read_image(image) for image in images]

    uploaded = []
    for image, content in zip(images, contents):
        result = await upload_to_cloudinary(content)
        uploaded.append(image_to_response(result, image))

    return {
        "success": True,
        "message": "Images uploaded successfully",
        "images": uploaded,
    }


@router.delete("/image/{public_id:path}")
async def delete_image(
    public_id: str,
    current_user: dict = Depends(require_admin)
):
    """
    Delete an image by Cloudinary public id, which may contain folder slashes.
    """
    try:
        result = await cloudinary_client.delete_image(public_id)
    except CloudinaryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting image: {str(e)}"
        )

    if result.get("result") != "ok":
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )

    return {"success": True, "message": "Image deleted successfully"}
