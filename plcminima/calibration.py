"""Stepper motor control and the manual calibration screen."""

from __future__ import annotations

import math

from .registers import CALIB_DIRECTION, CALIB_ROTATION_LENGTH, RegisterOp

FULL_ROTATION_STEPS = 64000
STEPPER_SPEED = 500
ONE_MM_IN_STEPS = 212

DIRECTION_NONE = 0
DIRECTION_LEFT = 1
DIRECTION_RIGHT = 2


class Stepper:
    """A stepper driver that advances one step towards its target per ``run``."""

    def __init__(self):
        self.position = 0
        self.target = 0
        self.max_speed = 1.0
        self.acceleration = 1.0

    @property
    def distance_to_go(self):
        """Steps left between the current position and the target."""
        return self.target - self.position

    @property
    def speed(self):
        """Signed speed in steps per second; zero when the motor stands still."""
        distance = self.distance_to_go
        if distance == 0:
            return 0.0
        return math.copysign(self.max_speed, distance)

    def move(self, steps):
        """Set the target relative to the current position."""
        self.target = self.position + steps

    def run(self):
        """Make one step towards the target; return whether motion remains."""
        distance = self.distance_to_go
        if distance:
            self.position += 1 if distance > 0 else -1
        return self.distance_to_go != 0

    def set_current_position(self, position):
        """Declare the current position, stopping the motor there."""
        self.position = position
        self.target = position


class PlateErrorCorrector:
    """Spreads the remainder of a full rotation over the plates of a round.

    A full rotation rarely divides evenly by the plate count; every so often
    one extra step is needed so that a whole round adds up to a full turn.
    """

    def __init__(self, plate_count):
        if plate_count <= 0:
            raise ValueError("plate count must be positive")
        self.plate_count = plate_count
        self.steps_per_plate = FULL_ROTATION_STEPS // plate_count
        self.remainder = FULL_ROTATION_STEPS - plate_count * self.steps_per_plate
        self.accumulator = 0

    def advance(self, current_plate):
        """Account for one plate move.

        Returns ``(needs_extra_step, current_plate)``; the plate counter is
        reset to zero once a whole round has been made.
        """
        self.accumulator += self.remainder
        if self.accumulator >= self.plate_count:
            self.accumulator -= self.plate_count
            return True, current_plate
        if current_plate >= self.plate_count:
            self.accumulator = 0
            return False, 0
        return False, current_plate


class Calibration:
    """Moves the plate by hand from the calibration screen."""

    def __init__(self, registers, stepper=None):
        self.registers = registers
        self.stepper = stepper if stepper is not None else Stepper()
        self.stepper.max_speed = float(STEPPER_SPEED)
        self.stepper.acceleration = float(STEPPER_SPEED * 2)
        self.stepper.set_current_position(0)

    def move_steps(self, steps):
        """Start a relative move of ``steps`` steps."""
        self.stepper.move(steps)

    def _clear_direction(self):
        self.registers.access(RegisterOp.WRITE_HOLDING, CALIB_DIRECTION, DIRECTION_NONE)

    def loop(self):
        """Act on the direction button and rotation length set on the panel."""
        direction = self.registers.read_holding(CALIB_DIRECTION)
        rotation = self.registers.read_holding(CALIB_ROTATION_LENGTH) * ONE_MM_IN_STEPS
        stepper = self.stepper

        if direction == DIRECTION_LEFT:
            if stepper.speed == 0:
                stepper.move(rotation)
                self._clear_direction()
            return

        if direction == DIRECTION_RIGHT and stepper.speed == 0:
            stepper.set_current_position(0)
            stepper.move(-rotation)
            self._clear_direction()

        if stepper.speed == 0:
            stepper.set_current_position(0)