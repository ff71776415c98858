# coding: utf-8
"""@brief Module providing non-blocking single byte access to the console and to the serial link
"""
import abc
import os
import select
from typing import Optional

DEFAULT_QUIET_WINDOW = 0.004    # 4ms: the heuristic gap after which the monitor is assumed to have finished replying

class ByteChannel(metaclass=abc.ABCMeta):
    """@brief Interface to which must comply all bidirectional byte channels (console, serial link)"""

    @abc.abstractmethod
    def poll_ready(self, timeout: float = DEFAULT_QUIET_WINDOW) -> bool:
        """@brief Check whether input is ready on this channel
        @param timeout The maximum amount of time (in s) we accept to wait for an incoming byte
        @return True if a subsequent read_byte() will return a byte without blocking
        """
        raise NotImplementedError

    @abc.abstractmethod
    def read_byte(self) -> Optional[int]:
        """@brief Read one byte without blocking
        @return The byte value, or None if no byte could be read
        @note Only meant to be called after poll_ready() returned True
        """
        raise NotImplementedError

    @abc.abstractmethod
    def write(self, data: bytes) -> None:
        """@brief Send bytes on this channel
        @param data The bytes to write
        """
        raise NotImplementedError


class SerialByteChannel(ByteChannel):
    """@brief Byte channel on top of a pyserial Serial instance (or any object with the same read/write/timeout API)
    """
    def __init__(self, device):
        """@brief Constructor
        @param device The device we read/write serial data from/to
        """
        self.device = device
        self._pending = None

    def _set_timeout(self, timeout: float) -> None:
        if self.device.timeout != timeout:  # pyserial reconfigures the port on every timeout change
            self.device.timeout = timeout

    def poll_ready(self, timeout: float = DEFAULT_QUIET_WINDOW) -> bool:
        if self._pending is not None:
            return True
        self._set_timeout(timeout)
        incoming = self.device.read(1)
        if len(incoming) < 1:
            return False
        self._pending = incoming[0]
        return True

    def read_byte(self) -> Optional[int]:
        if self._pending is not None:
            byte, self._pending = self._pending, None
            return byte
        self._set_timeout(0)
        incoming = self.device.read(1)
        if len(incoming) < 1:
            return None
        return incoming[0]

    def write(self, data: bytes) -> None:
        self.device.write(data)
        self.device.flush()


class FileDescriptorByteChannel(ByteChannel):
    """@brief Byte channel on top of raw file descriptors (typically the console's stdin and stdout)
    """
    def __init__(self, in_fd: int, out_fd: int = None):
        """@brief Constructor
        @param in_fd The file descriptor we read bytes from
        @param out_fd The file descriptor we write bytes to (defaults to @p in_fd)
        """
        self.in_fd = in_fd
        self.out_fd = in_fd if out_fd is None else out_fd

    def poll_ready(self, timeout: float = DEFAULT_QUIET_WINDOW) -> bool:
        readable, _, _ = select.select([self.in_fd], [], [], timeout)
        return len(readable) > 0

    def read_byte(self) -> Optional[int]:
        try:
            incoming = os.read(self.in_fd, 1)
        except OSError:
            return None
        if len(incoming) < 1:   # End of file
            return None
        return incoming[0]

    def write(self, data: bytes) -> None:
        while data:
            written = os.write(self.out_fd, data)
            data = data[written:]
