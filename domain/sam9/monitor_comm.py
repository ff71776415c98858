#!/usr/bin/env python3
# coding: utf-8

import abc
import re
from logging import getLogger

from domain.byte_channel import ByteChannel, DEFAULT_QUIET_WINDOW
from domain.errors import CommandArgumentError

logger = getLogger(__name__)

RESPONSE_BUFFER_SIZE = 30   # Monitor replies are short: a prompt, an echo or a single 0x-prefixed value
LINE_TERMINATOR = '#'   # SAM-BA uses # as EOL character
CHIP_ID_REGISTER = 0xfffff240   # DBGU_CIDR

_HEX_DIGITS_RE = re.compile(rb'\s*(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)')

def scan_hex_value(buffer) -> int:
    """@brief Extract the first embedded 0x<hex digits> token from a monitor reply

    @param buffer The raw bytes captured from the monitor

    @return The 32-bit value following the first "0x" sequence, or 0 if there is none (or if it carries no digits)

    @note This is a 3-state forward automaton: state 0 waits for '0', state 1 expects 'x', state 2 parses the value.
          On a state 1 mismatch, we go back to state 0 without re-examining the mismatching character, so "00x12" yields 0
    """
    data = bytes(buffer)
    state = 0
    for index, c in enumerate(data):
        if state == 0:
            if c == ord('0'):
                state = 1
        elif state == 1:
            if c == ord('x'):
                state = 2
            else:
                state = 0
        else:
            match = _HEX_DIGITS_RE.match(data, index)
            if match is None:
                return 0
            return int(match.group(1), 16) & 0xffffffff
    return 0


class MonitorResponse:
    """@brief Outcome of one response cycle from the monitor
    """
    def __init__(self, value: int, raw: bytes):
        """@brief Constructor
        @param value The value parsed from the first 0x token in @p raw (0 if none)
        @param raw The bytes captured during the cycle
        """
        self.value = value
        self.raw = raw

    @property
    def bytes_read(self) -> int:
        """@brief Number of bytes captured, 0 means the target stayed silent for the whole quiet window"""
        return len(self.raw)

    def __str__(self) -> str:
        return f'MonitorResponse(0x{self.value:08x}, {self.bytes_read} bytes: {self.raw!r})'


def read_response(channel: ByteChannel, echo_output=None, quiet_window: float = DEFAULT_QUIET_WINDOW) -> MonitorResponse:
    """@brief Drain all bytes currently sent by the monitor and extract an optional embedded hex value

    @param channel The byte channel connected to the target
    @param echo_output An optional object with a write() method to which the captured bytes are echoed verbatim
    @param quiet_window The poll timeout (in s) after which the reply is considered complete

    @return A MonitorResponse instance

    @note There is no explicit reply terminator: framing relies only on the quiet window, which is a heuristic
    """
    captured = bytearray()
    while len(captured) < RESPONSE_BUFFER_SIZE and channel.poll_ready(quiet_window):
        byte = channel.read_byte()
        if byte is None:
            break
        captured.append(byte)
    if len(captured) > 0 and echo_output is not None:
        echo_output.write(bytes(captured))
    return MonitorResponse(value=scan_hex_value(captured), raw=bytes(captured))


class MonitorCommand(metaclass=abc.ABCMeta):
    """@brief Interface to which must comply all concrete implementations of monitor command encoders
    A RomBOOT monitor command is a short ASCII line terminated by '#'
    get_command_text() returns that line, get_as_buffer() returns the bytes actually sent on the serial link
    """
    COMMAND_NAME = '(unknown)'

    def __init__(self, append_newline: bool = True):
        """@brief Constructor
        @param append_newline Should a trailing newline follow the '#' terminator on the serial link
        """
        self.append_newline = append_newline

    @staticmethod
    def check_address(address: int) -> int:
        if not isinstance(address, int):
            raise TypeError('Unsupported argument type ' + str(type(address)))
        if address < 0 or address > 0xffffffff:
            raise CommandArgumentError(f"Invalid address 0x{address:x}")
        return address

    @abc.abstractmethod
    def get_command_text(self) -> str:
        """@brief Get the textual command, including its terminator
        """
        raise NotImplementedError

    def get_as_buffer(self) -> bytes:
        """@brief Represent this command as a byte buffer ready to be sent to the target
        """
        text = self.get_command_text()
        if self.append_newline:
            text += '\n'
        return text.encode('ascii')

    def __str__(self) -> str:
        return self.COMMAND_NAME + '(' + self.get_command_text() + ')'


class CommandSync(MonitorCommand):
    COMMAND_NAME = 'SYNC'

    def get_command_text(self) -> str:
        return LINE_TERMINATOR


class CommandVersion(MonitorCommand):
    COMMAND_NAME = 'VERSION'

    def get_command_text(self) -> str:
        return 'V' + LINE_TERMINATOR


class CommandReadWord(MonitorCommand):
    """@brief Read a 32-bit word at a given address, the monitor replies with 0x<8 hex digits>"""
    COMMAND_NAME = 'READ_WORD'
    WIDTH = 4

    def __init__(self, address: int, **kwargs):
        self.address = self.check_address(address)
        super().__init__(**kwargs)

    def get_command_text(self) -> str:
        return f'w{self.address:05X},4' + LINE_TERMINATOR


class CommandReadByte(MonitorCommand):
    """@brief Read one byte at a given address, the monitor replies with 0x<2 hex digits>"""
    COMMAND_NAME = 'READ_BYTE'
    WIDTH = 1

    def __init__(self, address: int, **kwargs):
        self.address = self.check_address(address)
        super().__init__(**kwargs)

    def get_command_text(self) -> str:
        return f'o{self.address:05X},1' + LINE_TERMINATOR


class CommandWriteWord(MonitorCommand):
    COMMAND_NAME = 'WRITE_WORD'
    WIDTH = 4

    def __init__(self, address: int, value: int, **kwargs):
        self.address = self.check_address(address)
        if value < 0 or value > 0xffffffff:
            raise CommandArgumentError(f"Invalid word value 0x{value:x}")
        self.value = value
        super().__init__(**kwargs)

    def get_command_text(self) -> str:
        return f'W{self.address:05X},{self.value:08X}' + LINE_TERMINATOR


class CommandWriteByte(MonitorCommand):
    COMMAND_NAME = 'WRITE_BYTE'
    WIDTH = 1

    def __init__(self, address: int, value: int, **kwargs):
        self.address = self.check_address(address)
        if value < 0 or value > 0xff:
            raise CommandArgumentError(f"Invalid byte value 0x{value:x}")
        self.value = value
        super().__init__(**kwargs)

    def get_command_text(self) -> str:
        return f'O{self.address:05X},{self.value:02X}' + LINE_TERMINATOR


class CommandGo(MonitorCommand):
    """@brief Jump to a given address"""
    COMMAND_NAME = 'GO'

    def __init__(self, address: int, **kwargs):
        self.address = self.check_address(address)
        super().__init__(**kwargs)

    def get_command_text(self) -> str:
        return f'G{self.address:X}' + LINE_TERMINATOR


def create_read_command(address: int, width: int) -> MonitorCommand:
    """@brief Build the read command matching a chunk width (4 for words, 1 for bytes)
    """
    if width == CommandReadWord.WIDTH:
        return CommandReadWord(address)
    if width == CommandReadByte.WIDTH:
        return CommandReadByte(address)
    raise CommandArgumentError(f"Unsupported chunk width {width}")

def create_write_command(address: int, width: int, value: int) -> MonitorCommand:
    """@brief Build the write command matching a chunk width (4 for words, 1 for bytes)
    """
    if width == CommandWriteWord.WIDTH:
        return CommandWriteWord(address, value)
    if width == CommandWriteByte.WIDTH:
        return CommandWriteByte(address, value)
    raise CommandArgumentError(f"Unsupported chunk width {width}")


class MonitorProtocol:
    """@brief Class representing the request/response exchanges with the RomBOOT monitor
    @note Exactly one command is outstanding at any time, commands are never pipelined
    """
    def __init__(self, channel: ByteChannel, console=None, trace: bool = False, quiet_window: float = DEFAULT_QUIET_WINDOW):
        """@brief Constructor
        @param channel The byte channel connected to the target
        @param console An optional object with a write() method where command texts and replies are traced
        @param trace Should we trace every command and reply on @p console
        @param quiet_window The poll timeout (in s) after which a reply is considered complete
        """
        self.channel = channel
        self.console = console
        self.trace = trace
        self.quiet_window = quiet_window

    def _echo_output(self, echo):
        if echo is None:
            echo = self.trace
        return self.console if echo else None

    def read_response(self, echo: bool = None) -> MonitorResponse:
        """@brief Drain the monitor's current reply
        @param echo Should the reply be copied to the console (defaults to the trace setting)
        """
        return read_response(self.channel, echo_output=self._echo_output(echo), quiet_window=self.quiet_window)

    def send(self, command: MonitorCommand, echo: bool = None) -> None:
        """@brief Send a command without waiting for its reply
        @param echo Should the command text be copied to the console (defaults to the trace setting)
        """
        assert isinstance(command, MonitorCommand)  # command provided as argument should implement the MonitorCommand interface
        logger.debug('Sending command: ' + str(command))
        self.channel.write(command.get_as_buffer())
        echo_output = self._echo_output(echo)
        if echo_output is not None:
            echo_output.write(command.get_command_text().encode('ascii'))

    def execute(self, command: MonitorCommand, echo: bool = None) -> MonitorResponse:
        """@brief Send a command to the monitor and collect its reply
        @param command The command to execute
        @param echo Should the command and its reply be copied to the console (defaults to the trace setting)
        @return The MonitorResponse for this command
        """
        self.send(command, echo=echo)
        response = self.read_response(echo=echo)
        logger.debug('Got ' + str(response))
        return response
