#!/usr/bin/env python3
# coding: utf-8
"""Utility to simplify dealing with the SAM9 RomBOOT facility via a serial interface

Usage:
  sam9_boot.py {-p=port} {-f=filename} {-a=address} {-n=bytes} {-r} {-d} {-s} {-g{=address}} {-c} {-v} {-q} {-t} {-i}

Run without arguments for the full list of parameters
"""

from logging import INFO
import os
import sys

import serial

from domain.boot_config import parse_parameters, get_help_text
from domain.byte_channel import SerialByteChannel, FileDescriptorByteChannel
from domain.common import create_main_logger, select_log_level
from domain.errors import Sam9BootError, DeviceOpenError
from domain.sam9.boot_session import Sam9BootSession
from domain.sam9.terminal import ConsoleRawMode, TerminalPassThrough
from adapters.image_file_python_intelhex import PythonIntelHexImageFile
from adapters.progressbar_progressbar2 import ProgressBar2Factory
from adapters.progressbar_silent import SilentProgressBarFactory

VERSION = "1.01"

def open_device(port: str, baudrate: int):
    """@brief Open the serial link to the target
    @param port A device path or any URL accepted by pyserial's serial_for_url()
    @param baudrate The serial baudrate
    """
    try:
        return serial.serial_for_url(port, baudrate=baudrate)
    except (serial.SerialException, ValueError) as e:
        raise DeviceOpenError(f"Unable to open device '{port}' for i/o!") from e

def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv
    progname = os.path.basename(argv[0])
    print(f"\nSAM9 Boot Utility Version {VERSION}")
    if len(argv) < 2:
        print(get_help_text(progname))
        return 0
    logger = create_main_logger(name="sam9_boot", log_level=INFO)
    try:
        config = parse_parameters(argv[1:])
    except Sam9BootError as e:
        logger.error(str(e))
        return 1
    logger = create_main_logger(name="sam9_boot", log_level=select_log_level(trace=config.trace))
    logger.debug(str(config))
    if config.quiet or config.trace:
        progressbar_factory = SilentProgressBarFactory
    else:
        progressbar_factory = ProgressBar2Factory
    console = FileDescriptorByteChannel(sys.__stdin__.fileno(), sys.__stdout__.fileno())
    sys.stdout.flush()
    try:
        device = open_device(config.port, config.baudrate)
    except DeviceOpenError as e:
        logger.error(str(e))
        return 1
    with device:
        target = SerialByteChannel(device)

        def terminal_factory(go_address):
            """@brief Closure building the interactive terminal on the opened link

            @param go_address An optional address to jump to once the terminal is started
            """
            return TerminalPassThrough(console=console, target=target, raw_mode=ConsoleRawMode(console.in_fd),
                                       go_address=go_address, quiet_window=config.quiet_window)

        session = Sam9BootSession(config=config,
                                  target=target,
                                  console=console,
                                  logger=logger,
                                  image_files=PythonIntelHexImageFile(),
                                  progressbar_factory=progressbar_factory,
                                  terminal_factory=terminal_factory)
        success = session.run()
    if success:
        logger.info("Exit code 0 - success.")
        return 0
    logger.error("Exit code 1 - failure!")
    return 1

if __name__ == "__main__":
    sys.exit(main(sys.argv))
