import pytest

from plcminima.calibration import FULL_ROTATION_STEPS, Calibration
from plcminima.execution import (
    KEY_F,
    KEY_LEFT_ALT,
    KEY_O,
    KEY_RETURN,
    PAUSE_PRESSED,
    START_PRESSED,
    STOP_PRESSED,
    ExecutionState,
    Executor,
    RecordingKeyboard,
)
from plcminima.loader import ProgramLoader
from plcminima.registers import (
    EXEC_CONTROL_BUTTONS,
    EXEC_DELAY,
    EXEC_PLATE_COUNT,
    PROGRAM_NAME_LENGTH,
    PROGRAM_NAME_REGISTER,
    PROGRAM_REPEAT_REGISTER,
    RegisterBank,
)

PLATES = 64


class FakeClock:
    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now


def build(programs, plates=PLATES, delay=1):
    bank = RegisterBank()
    bank.apply_defaults()
    bank.write_holding(EXEC_PLATE_COUNT, plates)
    bank.write_holding(EXEC_DELAY, delay)
    for row, (name, reps) in enumerate(programs):
        bank.write_holding(PROGRAM_REPEAT_REGISTER + row, reps)
        for offset, char in enumerate(name):
            bank.write_holding(
                PROGRAM_NAME_REGISTER + row * PROGRAM_NAME_LENGTH + offset, ord(char)
            )
    loader = ProgramLoader(bank)
    loader.load()
    calibration = Calibration(bank)
    clock = FakeClock()
    keyboard = RecordingKeyboard()
    logged = []
    executor = Executor(bank, loader, calibration, keyboard, clock, logged.append)
    return bank, executor, clock, keyboard, logged


def drive(bank, executor, clock, limit=20000):
    stepper = executor.calibration.stepper
    for _ in range(limit):
        executor.loop()
        stepper.run()
        clock.now += 100
        if bank.read_holding(EXEC_CONTROL_BUTTONS) == STOP_PRESSED:
            return
    raise AssertionError("execution did not finish")


def test_recording_keyboard_keeps_order():
    keyboard = RecordingKeyboard()
    keyboard.write(KEY_O)
    keyboard.print("name")
    keyboard.println(12)
    assert keyboard.events == [("write", KEY_O), ("print", "name"), ("println", "12")]


def test_single_program_runs_to_completion():
    bank, executor, clock, keyboard, logged = build([("AB", 1)])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    drive(bank, executor, clock)
    assert keyboard.events == [
        ("write", KEY_LEFT_ALT),
        ("write", KEY_F),
        ("write", KEY_O),
        ("print", "AB"),
        ("write", KEY_RETURN),
        ("println", "0"),
    ]
    assert logged == [str(FULL_ROTATION_STEPS // PLATES)]
    assert executor.state is ExecutionState.OPENING_FILE_MENU
    assert executor.file_index == 0


def test_two_programs_type_positions_after_each_plate():
    bank, executor, clock, keyboard, _ = build([("AB", 1), ("C", 1)])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    drive(bank, executor, clock)
    step = FULL_ROTATION_STEPS // PLATES
    shortcut = [("write", KEY_LEFT_ALT), ("write", KEY_F), ("write", KEY_O)]
    assert keyboard.events == shortcut + [
        ("print", "AB"),
        ("write", KEY_RETURN),
        ("println", "0"),
    ] + shortcut + [
        ("print", "C"),
        ("write", KEY_RETURN),
        ("println", str(step)),
    ]


def test_repetitions_rotate_plate_each_time():
    bank, executor, clock, keyboard, logged = build([("X", 2)])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    drive(bank, executor, clock)
    step = FULL_ROTATION_STEPS // PLATES
    printed = [text for kind, text in keyboard.events if kind == "println"]
    assert printed == ["0", str(step)]
    assert logged == [str(2 * step)]


def test_nothing_happens_without_programs():
    bank, executor, clock, keyboard, _ = build([])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    for _ in range(50):
        executor.loop()
        clock.now += 1000
    assert keyboard.events == []
    assert bank.read_holding(EXEC_CONTROL_BUTTONS) == START_PRESSED


def test_pause_holds_the_sequence():
    bank, executor, clock, keyboard, _ = build([("AB", 1)])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    executor.loop()
    bank.write_holding(EXEC_CONTROL_BUTTONS, PAUSE_PRESSED)
    for _ in range(20):
        clock.now += 5000
        executor.loop()
    assert keyboard.events == [("write", KEY_LEFT_ALT)]
    assert executor.state is ExecutionState.AFTER_KEY_PRESS


def test_stop_restarts_shortcut():
    bank, executor, clock, keyboard, _ = build([("AB", 1)])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    executor.loop()
    bank.write_holding(EXEC_CONTROL_BUTTONS, STOP_PRESSED)
    executor.loop()
    assert executor.state is ExecutionState.OPENING_FILE_MENU
    assert executor.current_plate == 0
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    executor.loop()
    assert keyboard.events == [("write", KEY_LEFT_ALT), ("write", KEY_LEFT_ALT)]


def test_shortcut_waits_for_delay():
    bank, executor, clock, keyboard, _ = build([("AB", 1)])
    bank.write_holding(EXEC_CONTROL_BUTTONS, START_PRESSED)
    executor.loop()
    clock.now += 1000
    executor.loop()
    assert executor.state is ExecutionState.AFTER_KEY_PRESS
    clock.now += 1
    executor.loop()
    assert executor.state is ExecutionState.OPENING_FILE_MENU


def test_zero_plate_count_is_rejected():
    bank, executor, _, _, _ = build([("AB", 1)])
    bank.write_holding(EXEC_PLATE_COUNT, 0)
    with pytest.raises(ValueError):
        executor.loop()