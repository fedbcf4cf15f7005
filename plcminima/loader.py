"""Loading of engraving programs entered on the operator panel."""

from __future__ import annotations

from .registers import (
    FILE_NAME_READ_REGISTER,
    FILE_NAME_WRITE_REGISTER,
    PROGRAM_NAME_LENGTH,
    PROGRAM_NAME_REGISTER,
    PROGRAM_REPEAT_REGISTER,
    PROGRAM_SLOTS,
    SEND_DATA_BUTTON,
    RegisterOp,
)

_FILE_NAME_MIRROR_LENGTH = 20


def decimal_to_hex(value):
    """Return ``value`` as upper-case hexadecimal without leading zeros."""
    if value < 0:
        raise ValueError("value must not be negative")
    return format(value, "X")


def hex_to_ascii(hex_string):
    """Decode register words written as hex, low byte of each word first.

    Zero bytes are dropped. A trailing two-digit group is decoded as one byte;
    a trailing group of odd length is ignored.
    """
    chars = []
    full = len(hex_string) - len(hex_string) % 4
    for start in range(0, full, 4):
        high, low = hex_string[start:start + 2], hex_string[start + 2:start + 4]
        for byte in (low, high):
            if byte != "00":
                chars.append(chr(int(byte, 16)))
    if len(hex_string) % 4 == 2:
        last = hex_string[-2:]
        if last != "00":
            chars.append(chr(int(last, 16)))
    return "".join(chars)


class ProgramLoader:
    """Holds the list of program files and their repetition counts."""

    def __init__(self, registers, log=None):
        self.registers = registers
        self.log = log
        self.file_count = 0
        self._names = [""] * PROGRAM_SLOTS
        self._repetitions = [0] * PROGRAM_SLOTS

    def poll(self):
        """Load the programs when the panel's send button is pressed."""
        if self.registers.access(RegisterOp.READ_COILS, SEND_DATA_BUTTON) == 1:
            self.load()
            self.registers.access(RegisterOp.WRITE_COILS, SEND_DATA_BUTTON, 0)

    def load(self):
        """Read the program table from the holding registers and clear it."""
        regs = self.registers
        rows = sum(
            1
            for slot in range(PROGRAM_SLOTS)
            if regs.read_holding(PROGRAM_REPEAT_REGISTER + slot) != 0
        )
        self.file_count = 0
        self._names = [""] * PROGRAM_SLOTS
        self._repetitions = [0] * PROGRAM_SLOTS
        if rows == 0:
            return

        for row in range(rows):
            self._repetitions[row] = regs.read_holding(PROGRAM_REPEAT_REGISTER + row)
            name = self._read_name(row)
            self._names[self.file_count] = name
            self.file_count += 1
            if self.log is not None:
                self.log(name)

        for offset in range(_FILE_NAME_MIRROR_LENGTH):
            regs.access(
                RegisterOp.WRITE_INPUT,
                FILE_NAME_WRITE_REGISTER + offset,
                regs.read_holding(FILE_NAME_READ_REGISTER + offset),
            )
        for slot in range(PROGRAM_SLOTS):
            regs.write_holding(PROGRAM_REPEAT_REGISTER + slot, 0)
            base = PROGRAM_NAME_REGISTER + slot * PROGRAM_NAME_LENGTH
            for address in range(base, base + PROGRAM_NAME_LENGTH):
                regs.write_holding(address, 0)

    def _read_name(self, row):
        base = PROGRAM_NAME_REGISTER + row * PROGRAM_NAME_LENGTH
        parts = []
        for address in range(base, base + PROGRAM_NAME_LENGTH):
            word = self.registers.read_holding(address)
            if word == 0:
                break
            parts.append(hex_to_ascii(decimal_to_hex(word)))
        return "".join(parts)

    def _check_index(self, index):
        if not 0 <= index < PROGRAM_SLOTS:
            raise IndexError(f"program index {index} out of range 0..{PROGRAM_SLOTS - 1}")

    def file_name(self, index):
        """Return the name of the program in slot ``index``."""
        self._check_index(index)
        return self._names[index]

    def repetition(self, index):
        """Return how many times the program in slot ``index`` is run."""
        self._check_index(index)
        return self._repetitions[index]