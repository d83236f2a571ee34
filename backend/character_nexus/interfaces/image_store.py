"""
Image store interface.
"""

from abc import ABC, abstractmethod


class IImageStore(ABC):
    """Stores character avatars under generated filenames."""

    @abstractmethod
    async def download(self, url: str) -> str:
        """
        Download, normalize and store an image.

        Returns:
            The stored filename

        Raises:
            ImageProcessingError: On download, decode or write failure
        """
        pass

    @abstractmethod
    async def delete(self, filename: str) -> bool:
        """Remove a stored image. Returns False if it did not exist."""
        pass
