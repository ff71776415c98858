# coding: utf-8
"""@brief Module parsing and validating the command-line configuration of the RomBOOT utility
"""
import os
from typing import List

from domain.byte_channel import DEFAULT_QUIET_WINDOW
from domain.common import parse_numeric_value
from domain.errors import ConfigurationError

DEFAULT_PORT = "/dev/ttyUSB0"
DEFAULT_BAUDRATE = 115200
DEFAULT_START_ADDRESS = "$300000"
PORT_ENV_VARIABLE = "SAM9BOOT_PORT"

HELP_TEXT = """
Utility to simplify dealing with the SAM9 RomBOOT facility via a serial interface.

Usage:  {progname}
           {{-p=port}} {{-b=baud}} {{-w=ms}}
              {{-f=filename {{-a=address}} {{-n=bytes {{-r}} {{-d}}}} {{-s}}}}
                  {{-g{{=address}}}} {{-c}} {{-v}} {{-q}} {{-t}} {{-i}}

Where:

   -p=port  . . . . . . . . port to communicate with RomBOOT (default {port})
   -b=baud  . . . . . . . . serial baudrate (default {baudrate})
   -w=ms  . . . . . . . . . quiet window ending a monitor reply (default {quiet_ms}ms)
   -f=filename  . . . . . . filename (needed by -r, -s and -v, .hex files use Intel Hex format)
   -a=address . . . . . . . address (default 0x300000, used by -r, -d and -s)
   -n=bytes . . . . . . . . number of bytes (defaults to filesize for -s)
   -r . . . . . . . . . . . receive file (also specify -f, -a and -n)
   -d . . . . . . . . . . . dump memory (also specify -a and -n or -s)
   -s . . . . . . . . . . . send file (also specify -f and -a)
   -g{{=address}} . . . . . . address to jump to (default -a)
   -c . . . . . . . . . . . query cpu part id
   -v . . . . . . . . . . . verify memory against file (also specify -f)
   -q . . . . . . . . . . . quiet (no non-essential i/o or messages)
   -t . . . . . . . . . . . trace details of upload/verify activity
   -i . . . . . . . . . . . interactive (terminal) mode

All parameters are additive.  Relative order only matters for -a and -g.  Numeric
values may be entered as decimal (no prefix) or as hex with either 0x or $ prefix.
Parameters -r and -s are mutually exclusive.  If -s is specified, the actual send
file size overrides -n.  The default port may also be set with the {env} environment
variable.
"""

def get_help_text(progname: str) -> str:
    return HELP_TEXT.format(progname=progname, port=DEFAULT_PORT, baudrate=DEFAULT_BAUDRATE,
                            quiet_ms=int(DEFAULT_QUIET_WINDOW * 1000), env=PORT_ENV_VARIABLE)

class BootConfiguration:
    """@brief Validated set of parameters for one run of the utility
    """
    VALUE_PARAMETERS = ('p', 'b', 'w', 'f', 'a', 'n', 'g')
    FLAG_PARAMETERS = {
        'r': 'receive',
        'd': 'dump',
        's': 'send',
        'c': 'cpu',
        'v': 'verify',
        'q': 'quiet',
        't': 'trace',
        'i': 'interactive',
    }

    def __init__(self):
        self.port = os.environ.get(PORT_ENV_VARIABLE, DEFAULT_PORT)
        self.baudrate = DEFAULT_BAUDRATE
        self.quiet_window = DEFAULT_QUIET_WINDOW
        self.filename = None
        self.start_address = parse_numeric_value(DEFAULT_START_ADDRESS)
        self.go_address = None
        self.byte_count = None
        self.receive = False
        self.dump = False
        self.send = False
        self.cpu = False
        self.verify = False
        self.quiet = False
        self.trace = False
        self.interactive = False

    def needs_file_image(self) -> bool:
        return self.send or self.verify

    def needs_memory_image(self) -> bool:
        return self.verify or self.receive or self.dump

    def validate(self) -> None:
        """@brief Check parameter co-dependencies
        @warning Raises a ConfigurationError on the first inconsistency found
        """
        if not (self.port.startswith('/dev/') or '://' in self.port):
            raise ConfigurationError(f"Invalid parameter: '-p={self.port}'")
        if (self.receive or self.send) and self.filename is None:
            raise ConfigurationError("Parameters '-r' and '-s' require '-f'!")
        if self.verify and self.filename is None:
            raise ConfigurationError("Parameters '-s' and '-v' require '-f'!")
        if (self.receive or self.dump) and self.byte_count is None and not self.needs_file_image():
            raise ConfigurationError("Parameters '-r' and '-d' require '-n'!")
        if self.receive and self.send:
            raise ConfigurationError("Parameters '-r' and '-s' may not both be specified!")

    def __str__(self) -> str:
        flags = ''.join(flag for (flag, name) in self.FLAG_PARAMETERS.items() if getattr(self, name))
        go = 'none' if self.go_address is None else f'${self.go_address:x}'
        return f'BootConfiguration(port={self.port}, file={self.filename}, start=${self.start_address:x}, go={go}, bytes={self.byte_count}, flags={flags})'


def _parse_value(option: str, text: str) -> int:
    try:
        return parse_numeric_value(text)
    except ValueError as e:
        raise ConfigurationError(f"Invalid parameter: '-{option}={text}'") from e

def parse_parameters(args: List[str]) -> BootConfiguration:
    """@brief Build a BootConfiguration from command-line arguments (program name excluded)

    @param args Arguments of the form -x (flag) or -x=value

    @return The validated configuration
    @warning Raises a ConfigurationError on any invalid or missing parameter
    """
    config = BootConfiguration()
    start_address_text = DEFAULT_START_ADDRESS
    for arg in args:
        if len(arg) < 2 or arg[0] != '-':
            raise ConfigurationError(f"Invalid parameter: '{arg}'")
        option = arg[1]
        if option in BootConfiguration.VALUE_PARAMETERS:
            if len(arg) > 3 and arg[2] == '=':
                value = arg[3:]
            elif option == 'g' and len(arg) == 2:
                value = start_address_text  # Bare -g jumps to the start address known so far
            else:
                raise ConfigurationError(f"Invalid parameter: '{arg}'")
            if option == 'p':
                config.port = value
            elif option == 'f':
                config.filename = value
            elif option == 'a':
                start_address_text = value
                config.start_address = _parse_value(option, value)
            elif option == 'g':
                config.go_address = _parse_value(option, value)
            elif option == 'n':
                config.byte_count = _parse_value(option, value)
                if config.byte_count == 0:
                    raise ConfigurationError(f"Invalid parameter: '{arg}'")
            elif option == 'b':
                config.baudrate = _parse_value(option, value)
                if config.baudrate == 0:
                    raise ConfigurationError(f"Invalid parameter: '{arg}'")
            elif option == 'w':
                config.quiet_window = _parse_value(option, value) / 1000
                if config.quiet_window == 0:
                    raise ConfigurationError(f"Invalid parameter: '{arg}'")
        elif option in BootConfiguration.FLAG_PARAMETERS and len(arg) == 2:
            setattr(config, BootConfiguration.FLAG_PARAMETERS[option], True)
        else:
            raise ConfigurationError(f"Invalid parameter: '{arg}'")
    config.validate()
    return config
