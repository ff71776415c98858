# coding: utf-8
"""@brief Module declaring the interface to which must comply all concrete implementations of memory image file handlers
"""
import abc

from domain.memory_image import MemoryImage

class ImageFileHandler(metaclass=abc.ABCMeta):
    """@brief Interface to which must comply all concrete implementations of memory image file handlers"""

    @abc.abstractmethod
    def read_image_from(self, filename: str, start_address: int, byte_count: int = None) -> MemoryImage:
        """@brief Load a memory image from a file

        @param filename The file to read
        @param start_address The target address the image is meant to be located at
        @param byte_count The number of bytes to load, or None to load the whole file

        @return The loaded image
        @warning Raises a FileIOError if the file cannot be opened, is empty or is shorter than @p byte_count
        """
        raise NotImplementedError

    @abc.abstractmethod
    def write_image_to(self, filename: str, image: MemoryImage):
        """@brief Save a memory image to a file

        @param filename The file to (over)write
        @param image The image to save

        @warning Raises a FileIOError on open or write failures
        """
        raise NotImplementedError

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is not ImageFileHandler:
            return NotImplemented
        return (
            callable(getattr(subclass, "read_image_from", None))
            and callable(getattr(subclass, "write_image_to", None))
            or NotImplemented
        )
