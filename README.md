# plcminima

`plcminima` holds the control logic of a small controller that drives a
rotary engraving table from an operator panel. Everything the panel shows
and sets lives in a Modbus-style register bank; the controller reads that
bank on every pass of its loop and acts on it.

## Modules

### `plcminima.registers`

`RegisterBank` holds 200 coils, 200 discrete inputs, 500 holding registers
and 500 input registers. `RegisterBank.access(op, number, value=0)` takes a
`RegisterOp` (a read or a write of one of the four tables) and a register
number. Reads return the value as an `int` (0 or 1 for coils and discrete
inputs); writes store the value masked to 16 bits (any non-zero value sets a
coil or discrete input) and return `None`. An unknown operation raises
`ValueError`, an address outside the table raises `IndexError`.

`read_holding` and `write_holding` are shortcuts for holding registers.
`apply_defaults` sets the engraving delay (register 436) to 20 seconds and
the plate count (register 435) to 60. The module also names the register
addresses the panel uses, such as `WINDOW_REGISTER`, `EXEC_CONTROL_BUTTONS`
and `CALIB_DIRECTION`.

### `plcminima.loader`

`ProgramLoader.poll` checks the "Send" coil (coil 4). When it is set, it
calls `load` and clears the coil. `load` counts the non-zero repetition
counts in holding registers 100–109, then for each of those rows reads the
repetition count and a file name of up to 20 registers starting at 110
(20 registers per row, stopping at the first zero register). Each register
holds two characters, low byte first. The loaded names are passed to the
optional `log` callable, holding registers 39–58 are copied to input
registers 39–58, and the whole program table is cleared.

`file_count` is the number of loaded programs; `file_name(index)` and
`repetition(index)` return one slot and raise `IndexError` outside 0–9.
`decimal_to_hex` and `hex_to_ascii` are the two decoding steps.

### `plcminima.calibration`

`Stepper` is a simple stepper model: `move(steps)` sets a target relative to
the current position, each `run()` moves one step towards it, `speed` is
zero when the target is reached, and `set_current_position` redefines the
position and stops there.

`Calibration.loop` acts on the direction register (438): 1 moves the table
forward by the length in register 437 times 212 steps per millimetre, 2
zeroes the position and moves the same distance backwards; either clears the
direction once the motor is idle. While the motor stands still the position
is otherwise reset to zero. `move_steps` starts a relative move.

`PlateErrorCorrector` spreads the remainder of dividing one full rotation
(64000 steps) by the plate count over the plates, telling when one extra
step is needed; it raises `ValueError` for a plate count that is not
positive.

### `plcminima.execution`

`Executor.loop` reads the control register (434): 1 starts or continues,
2 pauses, 3 stops and resets. While running, with programs loaded, it steps
through `ExecutionState`: it types Alt, F and O with a 1000 ms pause after
each key, waits 4000 ms for the file menu, types the file name and Return,
waits 5000 ms, and then for each repetition types the stepper position with
a line end, waits the engraving delay (register 436, in seconds) and turns
the table by one plate (64000 divided by the plate count, plus a step when
the corrector asks for one). After the last program it logs the stepper
position and writes 3 (stop) into the control register. A plate count of
zero raises `ValueError`.

`RecordingKeyboard` records every `write`, `print` and `println` call in
its `events` list.

### `plcminima.controller`

`Controller(keyboard=None, clock=None, log=None)` creates the register bank
with its defaults, the loader, the stepper, the calibration and the
executor. `loop` makes one stepper step and then serves the screen named in
register 99 (`Window`): load program, execution or calibration. The main
and setup screens do nothing. `run(iterations)` calls `loop` that many
times. `clock` returns the time in milliseconds (a monotonic clock by
default) and `log` receives diagnostic lines.

```python
from plcminima.controller import Controller, Window
from plcminima.registers import WINDOW_REGISTER

controller = Controller()
controller.registers.write_holding(WINDOW_REGISTER, Window.CALIBRATION)
controller.run(1000)
print(controller.stepper.position)
```

## What it does not do

The package has no Modbus serial link, no real keyboard output and no
stepper driver output. The register bank is set and read directly from
Python, keystrokes go to `RecordingKeyboard` or any object with the same
`write`, `print` and `println` methods, and the motor is the `Stepper`
model. There is no command-line program.

## Tests

The tests use pytest and live in `tests/`:

```
pip install -e .[test]
pytest
```