"""Modbus register bank shared between the operator panel and the control loops."""

from __future__ import annotations

from enum import IntEnum


class RegisterOp(IntEnum):
    """Kind of access made to the register bank."""

    READ_COILS = 0x01
    READ_DISCRETE_INPUTS = 0x02
    READ_HOLDING = 0x03
    READ_INPUT = 0x04
    WRITE_COILS = 0x05
    WRITE_DISCRETE_INPUTS = 0x06
    WRITE_HOLDING = 0x07
    WRITE_INPUT = 0x08

    @property
    def is_write(self) -> bool:
        return self >= RegisterOp.WRITE_COILS


COIL_COUNT = 200
DISCRETE_INPUT_COUNT = 200
HOLDING_REGISTER_COUNT = 500
INPUT_REGISTER_COUNT = 500

WINDOW_REGISTER = 99
SEND_DATA_BUTTON = 4
FILE_NAME_WRITE_REGISTER = 39
FILE_NAME_READ_REGISTER = 39
PROGRAM_REPEAT_REGISTER = 100
PROGRAM_NAME_REGISTER = 110
PROGRAM_SLOTS = 10
PROGRAM_NAME_LENGTH = 20
EXEC_CONTROL_BUTTONS = 434
EXEC_PLATE_COUNT = 435
EXEC_DELAY = 436
CALIB_ROTATION_LENGTH = 437
CALIB_DIRECTION = 438

DEFAULT_DELAY_SECONDS = 20
DEFAULT_PLATE_COUNT = 60

_WORD_MASK = 0xFFFF

_TABLES = {
    RegisterOp.READ_COILS: "coils",
    RegisterOp.WRITE_COILS: "coils",
    RegisterOp.READ_DISCRETE_INPUTS: "discrete_inputs",
    RegisterOp.WRITE_DISCRETE_INPUTS: "discrete_inputs",
    RegisterOp.READ_HOLDING: "holding",
    RegisterOp.WRITE_HOLDING: "holding",
    RegisterOp.READ_INPUT: "inputs",
    RegisterOp.WRITE_INPUT: "inputs",
}

_BIT_TABLES = {"coils", "discrete_inputs"}


class RegisterBank:
    """Coils, discrete inputs, holding and input registers of the Modbus slave."""

    def __init__(self):
        self.coils = [False] * COIL_COUNT
        self.discrete_inputs = [False] * DISCRETE_INPUT_COUNT
        self.holding = [0] * HOLDING_REGISTER_COUNT
        self.inputs = [0] * INPUT_REGISTER_COUNT

    def access(self, op, number, value=0):
        """Read (returning an int) or write (returning None) one register.

        Raises ValueError for an unknown operation and IndexError for an
        address outside the table.
        """
        op = RegisterOp(op)
        name = _TABLES[op]
        table = getattr(self, name)
        if not 0 <= number < len(table):
            raise IndexError(f"{name} address {number} out of range 0..{len(table) - 1}")
        if not op.is_write:
            return int(table[number])
        word = value & _WORD_MASK
        table[number] = word != 0 if name in _BIT_TABLES else word
        return None

    def read_holding(self, number):
        """Return the value of a holding register."""
        return self.access(RegisterOp.READ_HOLDING, number)

    def write_holding(self, number, value):
        """Store a 16-bit value in a holding register."""
        self.access(RegisterOp.WRITE_HOLDING, number, value)

    def apply_defaults(self):
        """Preset the engraving delay and plate count shown on the panel."""
        self.write_holding(EXEC_DELAY, DEFAULT_DELAY_SECONDS)
        self.write_holding(EXEC_PLATE_COUNT, DEFAULT_PLATE_COUNT)