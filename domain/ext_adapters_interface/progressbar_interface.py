# coding: utf-8
"""@brief Module declaring the interface to which must comply all concrete implementations of transfer progress displays
"""
import abc

class ProgressBarInterface(metaclass=abc.ABCMeta):
    """@brief Interface to which must comply all concrete implementations of progress bar handlers"""

    @abc.abstractmethod
    def __init__(self, name: str, min_value: int, max_value: int, show_eta: bool = False, *args, **kwargs):
        """@brief Construct a progressbar object based on its name

        @param name The label displayed in front of the bar (eg: "Downloading memory from $300000 ")
        @param min_value The byte count at 0% progress
        @param max_value The byte count at 100% progress (the transfer size)
        @param show_eta Should we calculate and display an estimated completion time?
        """
        raise NotImplementedError

    @abc.abstractmethod
    def __enter__(self):
        """@brief Ressource acquisition entry point"""
        raise NotImplementedError

    @abc.abstractmethod
    def __exit__(self, type, value, traceback):
        """@brief Ressource release"""
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, value: int, raise_on_out_of_bounds = False):
        """Redraw the progressbar for a given number of transferred bytes

        @param value The number of bytes transferred so far
        @param raise_on_outofbounds Should we raise on out of bounds values? If set to no, we will saturate the value to bounds instead.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def start(self):
        """Start displaying the progressbar with 0 bytes transferred
        """
        raise NotImplementedError

    @abc.abstractmethod
    def finish(self):
        """Close the progressbar display
        """
        raise NotImplementedError

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is not ProgressBarInterface:
            return NotImplemented
        return (
            all(callable(getattr(subclass, method, None)) for method in ("__enter__", "__exit__", "update", "start", "finish"))
            or NotImplemented
        )

class ProgressBarFactoryInterface(metaclass=abc.ABCMeta):
    """@brief Interface to which must comply all factories of progress bars"""

    @staticmethod
    @abc.abstractmethod
    def create(*args, **kwargs):
        """@brief Generate a progressbar instance

        @note All arguments are to be passed as are to the ProgressBar contructor
        """
        raise NotImplementedError

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is not ProgressBarFactoryInterface:
            return NotImplemented
        return callable(getattr(subclass, "create", None)) or NotImplemented
