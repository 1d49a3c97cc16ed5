"""
Product image storage using Cloudinary
"""

import cloudinary
import cloudinary.uploader
from typing import Optional, Dict, Any
import asyncio
import logging

from app.core.config import settings
from app.core.exceptions import BadRequestException

logger = logging.getLogger(__name__)


class StorageService:
    """Uploads and deletes product images on the image host"""

    def __init__(self):
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET
        )

    async def upload_image(self, source: str, folder: str = "products") -> Dict[str, Any]:
        """
        Upload an image to Cloudinary

        Args:
            source: Base64 data URI or remote URL of the image
            folder: Cloudinary folder

        Returns:
            Dictionary with the hosted url and its public_id
        """
        try:
            loop = asyncio.get_event_loop()
            return await loop.run_in_executor(None, self._upload_image_sync, source, folder)
        except Exception as e:
            logger.error(f"Failed to upload image: {str(e)}")
            raise BadRequestException("Image upload failed", error_code="IMAGE_UPLOAD_FAILED")

    def _upload_image_sync(self, source: str, folder: str) -> Dict[str, Any]:
        options = {
            "folder": folder,
            "resource_type": "image",
            "allowed_formats": ["jpg", "jpeg", "png", "webp"],
        }
        result = cloudinary.uploader.upload(source, **options)
        return {
            "url": result["secure_url"],
            "public_id": result["public_id"],
        }

    async def delete_image(self, public_id: Optional[str]) -> bool:
        """Delete an image; failures are logged and reported as False"""
        if not public_id:
            return False
        try:
            loop = asyncio.get_event_loop()
            result = await loop.run_in_executor(
                None,
                cloudinary.uploader.destroy,
                public_id
            )
            return result.get("result") == "ok"
        except Exception as e:
            logger.error(f"Failed to delete image {public_id}: {str(e)}")
            return False


def get_storage_service() -> StorageService:
    """Dependency returning a storage service"""
    return StorageService()
