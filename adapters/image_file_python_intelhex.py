# coding: utf-8
"""@brief Module implementing memory image file load/save for flat binary and Intel Hex files (using python intelhex)
"""
import os

from intelhex import IntelHex, IntelHexError

from domain.ext_adapters_interface.image_file_interface import ImageFileHandler
from domain.memory_image import MemoryImage
from domain.errors import FileIOError

INTEL_HEX_EXTENSIONS = ('.hex', '.ihex')

class PythonIntelHexImageFile(ImageFileHandler):
    """@brief Image file handler storing flat binaries, or Intel Hex files when the filename has a .hex/.ihex extension"""

    @staticmethod
    def is_intel_hex(filename: str) -> bool:
        return os.path.splitext(filename)[1].lower() in INTEL_HEX_EXTENSIONS

    def _read_content(self, filename: str) -> bytes:
        if self.is_intel_hex(filename):
            intel_hex = IntelHex()
            try:
                intel_hex.loadhex(filename)
            except IntelHexError as e:
                raise FileIOError(f"Failed to load file '{filename}' (parse error: {e})") from e
            if len(intel_hex) == 0:
                return b''
            return intel_hex.tobinstr(start=intel_hex.minaddr(), end=intel_hex.maxaddr())
        with open(filename, mode="rb") as f:
            return f.read()

    def read_image_from(self, filename: str, start_address: int, byte_count: int = None) -> MemoryImage:
        try:
            content = self._read_content(filename)
        except OSError as e:
            raise FileIOError(f"Failed to load file '{filename}' (open error)") from e
        if len(content) == 0:
            raise FileIOError(f"Failed to load file '{filename}' (zero length)")
        if byte_count is None:
            byte_count = len(content)
        if len(content) < byte_count:
            raise FileIOError(f"Failed to load file '{filename}' ({byte_count} bytes, read error)")
        return MemoryImage(start_address=start_address, content=content[:byte_count])

    def write_image_to(self, filename: str, image: MemoryImage):
        try:
            if self.is_intel_hex(filename):
                intel_hex = IntelHex()
                intel_hex.puts(image.start_address, bytes(image.get_content()))
                with open(filename, mode="wt") as f:
                    intel_hex.write_hex_file(f)
            else:
                with open(filename, mode="wb") as f:
                    f.write(image.get_content())
        except OSError as e:
            raise FileIOError(f"Error writing {image.size} bytes to file '{filename}'") from e
