"""Top-level control loop dispatching on the panel's active window."""

from __future__ import annotations

from enum import IntEnum

from .calibration import Calibration, Stepper
from .execution import Executor, RecordingKeyboard
from .loader import ProgramLoader
from .registers import WINDOW_REGISTER, RegisterBank


class Window(IntEnum):
    """Screens of the operator panel."""

    MAIN = 1
    LOAD_PROGRAM = 2
    EXECUTION = 3
    CALIBRATION = 4
    SETUP = 5


class Controller:
    """Owns the register bank and runs the screen that the panel shows."""

    def __init__(self, keyboard=None, clock=None, log=None):
        self.registers = RegisterBank()
        self.registers.apply_defaults()
        self.keyboard = keyboard if keyboard is not None else RecordingKeyboard()
        self.loader = ProgramLoader(self.registers, log)
        self.stepper = Stepper()
        self.calibration = Calibration(self.registers, self.stepper)
        self.executor = Executor(
            self.registers, self.loader, self.calibration, self.keyboard, clock, log
        )
        self._handlers = {
            Window.LOAD_PROGRAM: self.loader.poll,
            Window.EXECUTION: self.executor.loop,
            Window.CALIBRATION: self.calibration.loop,
        }

    def loop(self):
        """Run one pass: step the motor, then serve the active window."""
        self.stepper.run()
        handler = self._handlers.get(self.registers.read_holding(WINDOW_REGISTER))
        if handler is not None:
            handler()

    def run(self, iterations):
        """Run ``iterations`` passes of the control loop."""
        for _ in range(iterations):
            self.loop()