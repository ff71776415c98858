#!/usr/bin/env python3
# coding: utf-8
"""@file Target memory representation
"""
from typing import Iterator

DUMP_BYTES_PER_LINE = 16

class AddressRange:
    """@brief Class representing an address range in the target's 32-bit address space
    """
    def __init__(self, start_address: int, end_address: int):
        """@brief Constructor
        @param start_address The address of the first byte in the range
        @param end_address The address of the byte after the last byte included in the range (thus end_address is excluded)
        """
        assert(start_address <= end_address)
        self.start_address = start_address
        self.end_address = end_address

    def __str__(self):
        return f'AddressRange[0x{self.start_address:06x},0x{self.end_address:06x}['

    def __repr__(self):
        return str(self)

    def get_size(self) -> int:
        """@brief Get the size in bytes of this range
        @return The number of bytes included in this range
        """
        return self.end_address - self.start_address

    def contains(self, address: int) -> bool:
        """@brief Check if the specified address is within this address range
        @param address The address to check
        @return True if the provided address is inside the range represented by this instance
        """
        return (address >= self.start_address and address < self.end_address)


class MemoryImage:
    """@brief Class representing a contiguous chunk of target memory located at a specific start address
    """
    def __init__(self, start_address: int, content):
        """@brief Constructor
        @param start_address The target address of the first byte of this image
        @param content A byte buffer containing the content of this image (its length is the image size)
        """
        if not isinstance(start_address, int):
            raise TypeError('Unsupported argument type ' + str(type(start_address)))
        self.start_address = start_address
        self.content = bytearray(content)
        self.size = len(self.content)

    @staticmethod
    def create_blank(start_address: int, size: int):
        """@brief Create a zero-filled image of @p size bytes
        """
        return MemoryImage(start_address=start_address, content=bytes(size))

    @property
    def end_address(self) -> int:
        return self.start_address + self.size

    def get_content(self) -> bytearray:
        """@brief Get the image's raw bytes
        @return The image bytes as a bytearray buffer
        """
        return self.content

    def to_address_range(self) -> AddressRange:
        return AddressRange(start_address=self.start_address, end_address=self.end_address)

    def format_dump_lines(self) -> Iterator[str]:
        """@brief Render this image as an hex+ASCII dump

        @return A sequence of text lines, one per 16 bytes, each starting with the target address of its first byte

        @note Hex groups are padded to a fixed width so that the ASCII gutter is always aligned, non-printable bytes are shown as '.'
        """
        address = self.start_address
        for offset in range(0, self.size, DUMP_BYTES_PER_LINE):
            row = self.content[offset:offset + DUMP_BYTES_PER_LINE]
            hex_part = ''.join(f'{b:02x} ' for b in row).ljust(3 * DUMP_BYTES_PER_LINE + 1)
            ascii_part = ''.join(chr(b) if 0x20 <= b < 0x7f else '.' for b in row).ljust(DUMP_BYTES_PER_LINE)
            yield f'${address:06x}  {hex_part}{ascii_part}'
            address += DUMP_BYTES_PER_LINE

    def __str__(self):
        return f'MemoryImage({self.size} bytes @ 0x{self.start_address:06x},0x{self.end_address:06x})'

    def __repr__(self):
        return str(self)
