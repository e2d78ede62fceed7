"""
SheetRelay Backend — Abstract Image Storage Interface
=======================================================

What:  Contract for services that host uploaded product images.
Why:   POST /upload only needs "bytes in, public link out". Keeping that
       behind an interface lets tests and future backends (S3, Cloudinary)
       slot in without touching the route.
How:   Concrete implementations inherit from ImageStorage and implement
       store_image() and health_check().
"""

from abc import ABC, abstractmethod
from typing import Optional


class ImageStorage(ABC):
    """
    Abstract interface for image hosting.

    Contract:
        - store_image() validates the upload and returns a shareable link
        - Invalid input raises ValidationError before anything is stored
        - Backend failures raise UpstreamServiceError or FileStorageError
    """

    @abstractmethod
    async def store_image(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Store an uploaded image and return its view link.

        Args:
            filename:       Original client filename (used for the extension
                            check and as the stored file's display name)
            content:        Raw file bytes
            content_length: Size reported by the client, if any

        Returns:
            str: Link a browser can open to view the image.
        """
        ...

    @abstractmethod
    def health_check(self) -> str:
        """Report storage readiness: "configured" or "not_configured"."""
        ...
