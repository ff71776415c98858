# coding: utf-8
"""@brief Module implementing a pass-through terminal between the console and the RomBOOT monitor
"""
import enum
import os
import termios
import tty
from logging import getLogger

from domain.byte_channel import ByteChannel, DEFAULT_QUIET_WINDOW
import domain.sam9.monitor_comm as comm

logger = getLogger(__name__)

KEY_CR = 0x0d
KEY_ESC = 0x1b
KEY_CTRL_C = 0x03
EXIT_KEYS = (KEY_ESC, KEY_CTRL_C)

class ConsoleRawMode:
    """@brief Class allowing RAII for the console's raw (character at a time, no echo, no signals) mode

    The original terminal attributes are restored on every exit path, including exceptions and KeyboardInterrupt
    When the console is not a terminal (redirected stdin), entering and leaving raw mode does nothing
    """
    def __init__(self, fd: int):
        """@brief Constructor
        @param fd The file descriptor of the console terminal
        """
        self.fd = fd
        self.original_attributes = None
        self.entered = False

    def __enter__(self):
        if self.entered:
            raise RuntimeError("Console raw mode can only be entered once")
        self.entered = True
        if not os.isatty(self.fd):
            logger.debug("Console is not a terminal, raw mode not applied")
            return self
        self.original_attributes = termios.tcgetattr(self.fd)
        tty.setraw(self.fd, termios.TCSANOW)
        raw_attributes = termios.tcgetattr(self.fd)
        raw_attributes[tty.IFLAG] |= termios.BRKINT
        termios.tcsetattr(self.fd, termios.TCSANOW, raw_attributes)
        return self

    def __exit__(self, type, value, traceback):
        if self.original_attributes is None:
            return
        termios.tcsetattr(self.fd, termios.TCSANOW, self.original_attributes)
        logger.debug("Console mode restored")


class TerminalState(enum.Enum):
    ACTIVE = 'active'
    EXITED = 'exited'


class TerminalPassThrough:
    """@brief A primitive single-threaded pass-through terminal emulator with local echo

    Each loop iteration polls the console then the target, there is no buffering across iterations
    """
    def __init__(self, console: ByteChannel, target: ByteChannel, raw_mode, go_address: int = None, quiet_window: float = DEFAULT_QUIET_WINDOW):
        """@brief Constructor
        @param console The byte channel connected to the user's console
        @param target The byte channel connected to the monitor
        @param raw_mode A context manager switching the console to raw mode (see ConsoleRawMode)
        @param go_address If not None, a go command for this address is injected right after entering raw mode
        @param quiet_window The poll timeout (in s) used on both channels
        """
        self.console = console
        self.target = target
        self.raw_mode = raw_mode
        self.go_address = go_address
        self.quiet_window = quiet_window
        self.state = TerminalState.EXITED

    def _inject_go(self) -> None:
        go_command = comm.CommandGo(self.go_address, append_newline=False)
        self.target.write(go_command.get_as_buffer())
        comm.read_response(self.target, quiet_window=self.quiet_window)
        self.console.write(go_command.get_command_text().encode('ascii'))

    def _relay_console_key(self) -> None:
        """@brief Forward one console key (if any) to the target, with local echo of printable characters
        """
        if not self.console.poll_ready(self.quiet_window):
            return
        key = self.console.read_byte()
        if key is None:   # Console reached end of file, nothing more will ever come
            self.state = TerminalState.EXITED
            return
        if key == KEY_CR:
            key = ord(comm.LINE_TERMINATOR)
        self.target.write(bytes([key]))
        if 0x20 <= key <= 0x7e:
            self.console.write(bytes([key]))
        if key in EXIT_KEYS:
            self.state = TerminalState.EXITED

    def _relay_target_output(self) -> None:
        while self.target.poll_ready(self.quiet_window):
            byte = self.target.read_byte()
            if byte is None:
                break
            self.console.write(bytes([byte]))

    def run(self) -> None:
        """@brief Run the terminal until the user hits <esc> or <ctrl-c>
        """
        self.console.write(b"\n[[ interactive terminal mode - <esc> or <ctrl-c> to exit ]]\n")
        with self.raw_mode:
            self.state = TerminalState.ACTIVE
            if self.go_address is not None:
                self._inject_go()
            while self.state == TerminalState.ACTIVE:
                self._relay_console_key()
                self._relay_target_output()
        self.console.write(b"\n[[ exit terminal mode ]]\n")
