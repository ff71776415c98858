#!/usr/bin/env python3
# coding: utf-8
import struct
from typing import Iterator, Optional

from domain.transfer_context import TransferContext
from domain.memory_image import MemoryImage, AddressRange
from domain.errors import ConfigurationError, TargetUnresponsiveError, TransferShortfallError, VerifyMismatchError
import domain.sam9.monitor_comm as comm

WORD_CHUNK_WIDTH = 4
BYTE_CHUNK_WIDTH = 1
PROGRESS_GRANULARITY = 256  # Progress is redrawn every time this many bytes have been transferred

class TransferCursor:
    """@brief Iteration state of one chunked memory transfer

    Chunks are 32-bit words while at least 4 bytes remain, then single bytes for the remainder (never words again)
    """
    def __init__(self, start_address: int, count: int):
        """@brief Constructor
        @param start_address The target address of the first byte to transfer
        @param count The total number of bytes to transfer
        """
        self.start_address = start_address
        self.address = start_address
        self.count = count
        self.offset = 0
        self.chunk_width = WORD_CHUNK_WIDTH if count >= WORD_CHUNK_WIDTH else BYTE_CHUNK_WIDTH

    def is_done(self) -> bool:
        return self.offset >= self.count

    def get_remaining(self) -> int:
        return self.count - self.offset

    def advance(self) -> None:
        """@brief Move past the current chunk, degrading to byte chunks once fewer than 4 bytes remain
        """
        self.address += self.chunk_width
        self.offset += self.chunk_width
        if self.get_remaining() < WORD_CHUNK_WIDTH:
            self.chunk_width = BYTE_CHUNK_WIDTH

    def iter_chunks(self) -> Iterator[int]:
        """@brief Walk through the transfer, yielding the width of each chunk before advancing past it
        @note The cursor's address and offset describe the current chunk while the consumer handles it
        """
        while not self.is_done():
            yield self.chunk_width
            self.advance()

    def __str__(self) -> str:
        return f'TransferCursor(0x{self.address:06x}, {self.offset}/{self.count} bytes, width {self.chunk_width})'


def pack_chunk(content, offset: int, width: int) -> int:
    """@brief Get @p width bytes of @p content at @p offset as a little-endian integer
    """
    return int.from_bytes(bytes(content[offset:offset + width]), byteorder='little')

def unpack_chunk(value: int, width: int) -> bytes:
    """@brief Get the @p width least significant bytes of @p value in little-endian order
    """
    return struct.pack('<I', value & 0xffffffff)[:width]

def _update_progress(progress_updater, transferred: int) -> None:
    if transferred % PROGRESS_GRANULARITY == 0:
        try:
            progress_updater.update(transferred)
        except (AttributeError, IndexError):
            pass


def download_memory(context: TransferContext, start_address: int, count: int, progress_updater=None) -> MemoryImage:
    """@brief Read a contiguous range of target memory

    @param context The context container for transfer operations
    @param start_address The target address of the first byte to read
    @param count The number of bytes to read
    @param progress_updater An optional handler used to display progress

    @return A MemoryImage of exactly @p count bytes located at @p start_address

    @warning Raises a TargetUnresponsiveError as soon as one read command gets no reply
    """
    image = MemoryImage.create_blank(start_address=start_address, size=count)
    content = image.get_content()
    cursor = TransferCursor(start_address=start_address, count=count)
    for width in cursor.iter_chunks():
        response = context.execute_on_target(comm.create_read_command(cursor.address, width))
        if response.bytes_read == 0:
            raise TargetUnresponsiveError(f"Failed to download memory from ${start_address:x} ({cursor.offset} bytes, {count} expected, target unresponsive)!",
                                          address=cursor.address, transferred=cursor.offset, expected=count)
        content[cursor.offset:cursor.offset + width] = unpack_chunk(response.value, width)
        _update_progress(progress_updater, cursor.offset + width)
    if cursor.offset != count:
        raise TransferShortfallError(f"Failed to download memory from ${start_address:x} ({cursor.offset} bytes, {count} expected)!",
                                     address=cursor.address, transferred=cursor.offset, expected=count)
    context.logger.debug(f"Read {count} bytes in {str(image.to_address_range())}")
    return image

def upload_memory(context: TransferContext, image: MemoryImage, progress_updater=None) -> int:
    """@brief Write a memory image to the target

    @param context The context container for transfer operations
    @param image The data to write, located at its target address
    @param progress_updater An optional handler used to display progress

    @return The number of bytes written

    @note Write acknowledgements are drained (and echoed in trace mode) but carry no value to check
    """
    content = image.get_content()
    cursor = TransferCursor(start_address=image.start_address, count=image.size)
    for width in cursor.iter_chunks():
        value = pack_chunk(content, cursor.offset, width)
        context.execute_on_target(comm.create_write_command(cursor.address, width, value))
        _update_progress(progress_updater, cursor.offset + width)
    if cursor.offset != image.size:
        raise TransferShortfallError(f"Failed to upload memory to ${image.start_address:x} ({cursor.offset} bytes, {image.size} expected)!",
                                     address=cursor.address, transferred=cursor.offset, expected=image.size)
    return cursor.offset

def find_first_mismatch(expected, actual, count: int) -> Optional[int]:
    """@brief Compare two buffers byte per byte over @p count bytes
    @return The offset of the first difference (a missing byte counts as a difference), or None if both buffers match
    """
    for offset in range(count):
        if offset >= len(expected) or offset >= len(actual) or expected[offset] != actual[offset]:
            return offset
    return None

def verify_memory(context: TransferContext, expected: MemoryImage, memory_image: MemoryImage) -> None:
    """@brief Check that memory downloaded from the target matches a reference image

    @param context The context container for transfer operations
    @param expected The reference image (usually loaded from a file)
    @param memory_image The image previously downloaded from the target over the same range

    @warning Raises a VerifyMismatchError reporting the first differing offset
    """
    count = memory_image.size
    if count == 0:
        raise ConfigurationError("Parameter '-v' requires '-n'!")
    mismatch_offset = find_first_mismatch(expected.get_content(), memory_image.get_content(), count)
    if mismatch_offset is not None:
        raise VerifyMismatchError(f"Verify memory at ${memory_image.start_address:x} ({count} bytes) error at offset {mismatch_offset}!",
                                  offset=mismatch_offset)
    context.logger.info(f"Verified memory at ${memory_image.start_address:x} ({count} bytes).")

def query_chip_id(context: TransferContext) -> int:
    """@brief Read the CPU part identifier (chip id register of the debug unit)
    @return The 32-bit chip id
    """
    response = context.execute_on_target(comm.CommandReadWord(comm.CHIP_ID_REGISTER))
    if response.bytes_read == 0:
        raise TargetUnresponsiveError("Failed to get cpu type (target unresponsive)!", address=comm.CHIP_ID_REGISTER, transferred=0, expected=WORD_CHUNK_WIDTH)
    return response.value


def sam9_download_cmd(context: TransferContext, start_address: int, count: int) -> MemoryImage:
    """@brief Download memory from the target with a progress display
    @param context The context container for transfer operations
    @param start_address The target address of the first byte to read
    @param count The number of bytes to read
    """
    address_range = AddressRange(start_address=start_address, end_address=start_address + count)
    with context.create_progress_bar_from_range(name=f"Downloading memory from ${start_address:x} ", range=address_range, show_eta=True) as bar:
        bar.start()
        image = download_memory(context=context, start_address=start_address, count=count, progress_updater=bar)
        bar.finish()
    context.logger.info(f"Downloaded memory from ${start_address:x} ({count} bytes).")
    return image

def sam9_upload_cmd(context: TransferContext, image: MemoryImage, source_name: str = 'image') -> None:
    """@brief Upload an image to the target with a progress display
    @param context The context container for transfer operations
    @param image The image to write
    @param source_name The name of the image's origin (usually the file name), for display purposes
    """
    with context.create_progress_bar_from_range(name=f"Uploading file '{source_name}' to memory at ${image.start_address:x} ", range=image.to_address_range(), show_eta=True) as bar:
        bar.start()
        uploaded = upload_memory(context=context, image=image, progress_updater=bar)
        bar.finish()
    context.logger.info(f"Uploaded file '{source_name}' ({uploaded} bytes) to memory at ${image.start_address:x}.")

def sam9_go_cmd(context: TransferContext, address: int) -> None:
    """@brief Make the target jump to @p address
    """
    context.logger.info(f"Starting execution at ${address:x}")
    context.execute_on_target(comm.CommandGo(address))
