# coding: utf-8
"""@brief Module declaring the exceptions raised while driving the RomBOOT monitor
"""

class Sam9BootError(Exception):
    pass

class ConfigurationError(Sam9BootError):
    pass

class CommandArgumentError(Sam9BootError):
    pass

class DeviceOpenError(Sam9BootError):
    pass

class FileIOError(Sam9BootError):
    pass

class TransferError(Sam9BootError):
    """@brief Base class for errors raised in the middle of a memory transfer
    """
    def __init__(self, message: str, address: int = None, transferred: int = None, expected: int = None):
        """@brief Constructor
        @param message The human readable description of the failure
        @param address The target address at which the transfer stalled
        @param transferred The number of bytes actually moved before the failure
        @param expected The number of bytes that were requested
        """
        self.address = address
        self.transferred = transferred
        self.expected = expected
        super().__init__(message)

class TargetUnresponsiveError(TransferError):
    pass

class TransferShortfallError(TransferError):
    pass

class VerifyMismatchError(Sam9BootError):
    def __init__(self, message: str, offset: int):
        self.offset = offset
        super().__init__(message)
