"""Cloudinary integration for product and category images"""

import cloudinary
import cloudinary.api
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from app.config import settings
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = ["jpg", "jpeg", "png", "gif", "webp"]
ALLOWED_CONTENT_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
MAX_FILES_PER_REQUEST = 5

ROOT_FOLDER = "clothing-store"

TRANSFORMATION = [
    {"width": 800, "height": 800, "crop": "limit"},
    {"quality": "auto"},
    {"fetch_format": "auto"},
]

REQUIRED_SETTINGS = {
    "CLOUDINARY_CLOUD_NAME": "cloudinary_cloud_name",
    "CLOUDINARY_API_KEY": "cloudinary_api_key",
    "CLOUDINARY_API_SECRET": "cloudinary_api_secret",
}

# Initialize Cloudinary
cloudinary.config(
    cloud_name=settings.cloudinary_cloud_name,
    api_key=settings.cloudinary_api_key,
    api_secret=settings.cloudinary_api_secret,
    secure=True,
)


def missing_config() -> List[str]:
    """Names of Cloudinary environment variables that are not set"""
    return [env for env, attr in REQUIRED_SETTINGS.items() if not getattr(settings, attr)]


async def upload_image(file, folder: Optional[str] = None, public_id: Optional[str] = None) -> Dict:
    """
    Upload an image to Cloudinary

    Args:
        file: File-like object, bytes, local path or remote URL
        folder: Target folder (default: settings.cloudinary_folder)
        public_id: Optional explicit public id

    Returns:
        Cloudinary upload result (secure_url, public_id, bytes, format, ...)
    """
    options = {
        "folder": folder or settings.cloudinary_folder,
        "allowed_formats": ALLOWED_FORMATS,
        "transformation": TRANSFORMATION,
        "resource_type": "image",
    }
    if public_id:
        options["public_id"] = public_id

    try:
        result = cloudinary.uploader.upload(file, **options)
        logger.info(f"Uploaded image to Cloudinary: {result.get('public_id')}")
        return result
    except CloudinaryError as e:
        logger.error(f"Cloudinary error uploading image: {str(e)}")
        raise


async def delete_image(public_id: str) -> Dict:
    """
    Delete an image from Cloudinary

    Returns:
        Cloudinary result, {"result": "ok"} or {"result": "not found"}
    """
    try:
        result = cloudinary.uploader.destroy(public_id)
        logger.info(f"Deleted Cloudinary image {public_id}: {result.get('result')}")
        return result
    except CloudinaryError as e:
        logger.error(f"Cloudinary error deleting {public_id}: {str(e)}")
        raise


async def ping() -> Dict:
    """Check API credentials"""
    return cloudinary.api.ping()


async def list_resources(prefix: str = ROOT_FOLDER + "/", max_results: int = 5) -> List[Dict]:
    """List uploaded images under a folder prefix"""
    result = cloudinary.api.resources(type="upload", prefix=prefix, max_results=max_results)
    return result.get("resources", [])


def extract_public_id(url: Optional[str]) -> Optional[str]:
    """
    Derive the public id from a Cloudinary delivery URL

    The folder path is kept when the URL lives under the store's root folder,
    e.g. ".../upload/v123/clothing-store/products/abc.jpg" gives
    "clothing-store/products/abc".
    """
    if not url:
        return None

    parts = url.split("/")
    filename = parts[-1]
    public_id = filename.split(".")[0]

    if ROOT_FOLDER in parts:
        folder_index = parts.index(ROOT_FOLDER)
        folder_path = "/".join(parts[folder_index:-1])
        return f"{folder_path}/{public_id}"

    return public_id
