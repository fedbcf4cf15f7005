"""Register-driven control logic for an HMI-operated rotary engraving table."""

__version__ = "0.1.0"

__all__ = ["calibration", "controller", "execution", "loader", "registers"]