"""Automatic engraving: opens each program through keyboard shortcuts and turns the plate."""

from __future__ import annotations

from enum import Enum, auto

from .calibration import FULL_ROTATION_STEPS, PlateErrorCorrector
from .registers import (
    EXEC_CONTROL_BUTTONS,
    EXEC_DELAY,
    EXEC_PLATE_COUNT,
    RegisterOp,
)

START_PRESSED = 1
PAUSE_PRESSED = 2
STOP_PRESSED = 3

SHORTCUT_DELAY_MS = 1000
FILE_MENU_OPEN_MS = 4000
FILE_OPEN_MS = 5000

KEY_LEFT_ALT = 0x82
KEY_RETURN = 0xB0
KEY_F = 0x46
KEY_O = 0x4F

_SHORTCUT_KEYS = (KEY_LEFT_ALT, KEY_F, KEY_O)
_WORD_MASK = 0xFFFF


class ExecutionState(Enum):
    """Steps of the engraving sequence."""

    OPENING_FILE_MENU = auto()
    AFTER_KEY_PRESS = auto()
    WAITING_FOR_FILE_MENU = auto()
    WRITING_FILE_NAME = auto()
    WAITING_FOR_FILE = auto()
    CHECKING_FILE = auto()
    EXECUTING_FILE = auto()
    ENGRAVING_DELAY = auto()
    ROTATING_PLATE = auto()
    COMPLETED = auto()


class RecordingKeyboard:
    """Keyboard that records what it is asked to type."""

    def __init__(self):
        self.events = []

    def write(self, key):
        """Press and release one key code."""
        self.events.append(("write", key))

    def print(self, text):
        """Type ``text``."""
        self.events.append(("print", str(text)))

    def println(self, text):
        """Type ``text`` followed by a line end."""
        self.events.append(("println", str(text)))


class Executor:
    """Runs the loaded programs one after another, rotating the plate in between."""

    def __init__(self, registers, loader, calibration, keyboard=None, clock=None, log=None):
        self.registers = registers
        self.loader = loader
        self.calibration = calibration
        self.keyboard = keyboard if keyboard is not None else RecordingKeyboard()
        self.clock = clock if clock is not None else _default_clock
        self.log = log
        self.state = ExecutionState.OPENING_FILE_MENU
        self.current_plate = 0
        self.engrave_time = 0
        self._shortcut_step = 0
        self._file_index = 0
        self._repetition = 0
        self._timer = 0
        self._corrector = None

    @property
    def file_index(self):
        """Index of the program being engraved."""
        return self._file_index

    def loop(self):
        """Advance the sequence according to the panel's control buttons."""
        regs = self.registers
        status = regs.read_holding(EXEC_CONTROL_BUTTONS)
        self.engrave_time = (regs.read_holding(EXEC_DELAY) * 1000) & _WORD_MASK
        plates = regs.read_holding(EXEC_PLATE_COUNT)
        if plates == 0:
            raise ValueError("plate count must be positive")
        steps_per_plate = FULL_ROTATION_STEPS // plates

        if status == START_PRESSED:
            if self.loader.file_count != 0:
                self._step(steps_per_plate)
        elif status == STOP_PRESSED:
            self.current_plate = 0
            self._file_index = 0
            self._shortcut_step = 0
            self._repetition = 0
            self.state = ExecutionState.OPENING_FILE_MENU

    def _step(self, steps_per_plate):
        now = self.clock()
        elapsed = now - self._timer
        state = self.state
        S = ExecutionState

        if state is S.OPENING_FILE_MENU:
            self.current_plate = 0
            self._shortcut_step += 1
            if self._shortcut_step <= len(_SHORTCUT_KEYS):
                self.keyboard.write(_SHORTCUT_KEYS[self._shortcut_step - 1])
                self.state = S.AFTER_KEY_PRESS
            else:
                self._shortcut_step = 0
                self.state = S.WAITING_FOR_FILE_MENU
            self._timer = self.clock()
        elif state is S.AFTER_KEY_PRESS:
            if elapsed > SHORTCUT_DELAY_MS:
                self.state = S.OPENING_FILE_MENU
        elif state is S.WAITING_FOR_FILE_MENU:
            if elapsed > FILE_MENU_OPEN_MS:
                self.state = S.WRITING_FILE_NAME
        elif state is S.WRITING_FILE_NAME:
            self.keyboard.print(self.loader.file_name(self._file_index))
            self.keyboard.write(KEY_RETURN)
            self.state = S.WAITING_FOR_FILE
            self._timer = self.clock()
        elif state is S.WAITING_FOR_FILE:
            if elapsed >= FILE_OPEN_MS:
                self.state = S.CHECKING_FILE
        elif state is S.CHECKING_FILE:
            self._check_file()
        elif state is S.EXECUTING_FILE:
            self.keyboard.println(str(self.calibration.stepper.position))
            self._repetition += 1
            self._timer = self.clock()
            self.state = S.ENGRAVING_DELAY
        elif state is S.ENGRAVING_DELAY:
            if elapsed >= self.engrave_time:
                self._rotate_plate(steps_per_plate)
                self.state = S.ROTATING_PLATE
        elif state is S.ROTATING_PLATE:
            if self.calibration.stepper.speed == 0:
                self.state = S.CHECKING_FILE

        if self._file_index >= self.loader.file_count:
            self._file_index = 0
            self.state = S.OPENING_FILE_MENU
            self.registers.access(RegisterOp.WRITE_HOLDING, EXEC_CONTROL_BUTTONS, STOP_PRESSED)

    def _check_file(self):
        if self._repetition >= self.loader.repetition(self._file_index):
            self._repetition = 0
            self._file_index += 1
            if self._file_index >= self.loader.file_count:
                if self.log is not None:
                    self.log(str(self.calibration.stepper.position))
                self.state = ExecutionState.COMPLETED
            else:
                self.state = ExecutionState.OPENING_FILE_MENU
        else:
            self.state = ExecutionState.EXECUTING_FILE

    def _rotate_plate(self, steps_per_plate):
        if self._corrector is None:
            self._corrector = PlateErrorCorrector(
                self.registers.read_holding(EXEC_PLATE_COUNT)
            )
        self.current_plate += 1
        extra, self.current_plate = self._corrector.advance(self.current_plate)
        self.calibration.move_steps(steps_per_plate + 1 if extra else steps_per_plate)


def _default_clock():
    import time

    return time.monotonic_ns() // 1_000_000