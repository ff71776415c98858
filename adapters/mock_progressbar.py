# coding: utf-8
"""@brief Module implementing a recording progress bar for unit tests
"""
from typing import List

from domain.ext_adapters_interface.progressbar_interface import ProgressBarInterface, ProgressBarFactoryInterface

class MockProgressBar(ProgressBarInterface):
    """@brief Concrete implementation of ProgressBarInterface keeping track of every update, for unit test purposes"""
    instances: List['MockProgressBar'] = []

    def __init__(self, name: str, min_value: int, max_value: int, show_eta: bool = False, *args, **kwargs):
        self.name = name
        self.min_value = min_value
        self.max_value = max_value
        self.bar_active = False
        self.finished = False
        self.updates_history: List[int] = []
        MockProgressBar.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, type, value, traceback):
        pass

    def update(self, value: int, raise_on_out_of_bounds = False):
        self.bar_active = True
        if value < self.min_value or value > self.max_value:
            raise IndexError("Update value out of bounds")
        self.updates_history.append(value)

    def finish(self):
        self.bar_active = False
        self.finished = True

    def start(self):
        self.update(self.min_value)

class MockProgressBarFactory(ProgressBarFactoryInterface):
    @staticmethod
    def create(*args, **kwargs):
        return MockProgressBar(*args, **kwargs)

    @staticmethod
    def reset():
        MockProgressBar.instances = []
