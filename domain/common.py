#!/usr/bin/env python3
# coding: utf-8

from logging import getLogger, StreamHandler, Formatter
from logging import DEBUG, INFO, WARNING

def create_main_logger(name: str, log_level=WARNING, also_log_libs: bool = False):
    """@brief Create the main applicative logger and return it
    @param name The name of the logger
    @param log_level The log level over which logs are output
    @param also_log_libs Also configure all python loggers similarly to the main applicative logger
    """
    LOG_FORMAT = "%(asctime)s :: %(levelname)s :: %(name)s: %(message)s"
    main_logger = getLogger(name=name)
    main_logger.handlers = []
    main_logger.setLevel(log_level)
    stream_handler = StreamHandler()
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(Formatter(LOG_FORMAT))
    if also_log_libs:
        root_logger = getLogger()
        root_logger.setLevel(log_level)
        root_logger.addHandler(stream_handler)
    else:  # We do not enable a handler on the main_logger if the root logger is already generating messages to avoid duplicates
        main_logger.addHandler(stream_handler)
    return main_logger

def select_log_level(trace: bool) -> int:
    """@brief Map the trace command-line flag to a log level
    @note Quiet mode keeps INFO: it only hides the banner and the progress bars, transfer results are still logged
    """
    if trace:
        return DEBUG
    return INFO

def parse_numeric_value(text: str) -> int:
    """@brief Convert a string to an unsigned 32-bit value
    @param text The string to convert. Prefixes of 0x or $ indicate hex strings, otherwise decimal is assumed
    @return The parsed value
    @warning Raises a ValueError if the string does not contain a number
    """
    if text is None:
        raise ValueError("Missing numeric value")
    text = text.lstrip(' ')
    if text.startswith('$'):
        value = int(text[1:], 16)
    elif text[0:2] in ('0x', '0X'):
        value = int(text[2:], 16)
    else:
        value = int(text, 10)
    if value < 0 or value > 0xffffffff:
        raise ValueError(f"Value {text} does not fit in 32 bits")
    return value
