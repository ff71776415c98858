# coding: utf-8
"""@brief Module providing context for memory transfer code
"""

from domain.ext_adapters_interface.progressbar_interface import ProgressBarInterface, ProgressBarFactoryInterface
from domain.memory_image import AddressRange

class TransferContext:
    """@brief Transfer context container, including handlers for UI (logger, progressbar) and for target access
    @note This class is used for dependency injection
    """

    def __init__(self, progressbar_factory: ProgressBarFactoryInterface, logger, target_command_executor):
        """@brief Construct a transfer context container
        @param progressbar_factory A factory generating progress bar instances
        @param logger A logger to use
        @param target_command_executor A callback executing one MonitorCommand on the target and returning its MonitorResponse
        """
        self.progressbar_factory = progressbar_factory
        self.logger = logger
        if not callable(target_command_executor):
            raise TypeError("target_command_executor argument is not callable")
        self._command_executor = target_command_executor

    def create_progress_bar(self, name: str, min_value: int, max_value: int, *args, **kwargs) -> ProgressBarInterface:
        """@brief Construct a progress bar based on min and max values
        @param name The name of the progress bar
        @param min_value The minimum value for progress display (corresponds to 0% progress)
        @param max_value The maximum value for progress display (corresponds to 100% progress)
        @return The Progress bar that has been created
        @note All other arguments are to be passed as are to the ProgressBar contructor
        """
        return self.progressbar_factory.create(name=name, min_value=min_value, max_value=max_value, *args, **kwargs)

    def create_progress_bar_from_range(self, name: str, range: AddressRange, *args, **kwargs) -> ProgressBarInterface:
        """@brief Construct a progress bar counting bytes over an AddressRange
        @param name The name of the progress bar
        @param range The range being transferred, progress goes from 0 to its size
        """
        return self.create_progress_bar(name=name, min_value=0, max_value=range.get_size(), *args, **kwargs)

    def execute_on_target(self, command):
        """@brief Execute a command on the target, using the provided target_command_executor

        @param command The command to execute

        @return The MonitorResponse produced by the command
        """
        return self._command_executor(command)
