"""Exception types raised by the PWM engine."""


class PwmError(ValueError):
    """Base class for all PWM engine errors."""


class StructureError(PwmError):
    """PWM positions are not contiguous from 0, or a nucleotide entry is missing."""


class ProbabilityError(PwmError):
    """Probabilities at a PWM position do not sum to 1."""


class AlphabetError(PwmError):
    """A sequence character lies outside the A/C/G/T alphabet."""

    def __init__(self, index: int, char: str):
        self.index = index
        self.char = char
        super().__init__(f"position {index} (={char!r}) not a valid nt ('A'/'C'/'G'/'T')")


class DomainError(PwmError):
    """A numeric parameter is outside its allowed domain."""


class RangeError(PwmError):
    """The PWM window is wider than the sequence being searched."""
