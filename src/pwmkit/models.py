"""
Value Types Module
==================

Immutable containers for nucleotides, nucleotide sequences and position
weight matrices, together with their on-demand validation.

Key Features:
- ``Nt`` is a closed enumeration of the DNA alphabet mapped to codes 0-3
- ``Pwm`` stores probabilities as a ``(length, 4)`` matrix indexed ``[position][base]``
- ``NtSeq`` wraps raw text and checks the alphabet only when asked to
- Validation never runs implicitly; it is a pass/fail gate raising ``PwmError`` subclasses
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from dataclasses import field as dc_field
from enum import IntEnum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import numpy as np

from pwmkit.config import NUCLEOTIDES, SUM_TOLERANCE
from pwmkit.errors import AlphabetError, ProbabilityError, StructureError

INVALID_CODE = 4

_ENCODE_TABLE = bytearray([INVALID_CODE] * 256)
for _code, _char in enumerate(NUCLEOTIDES.encode("ascii")):
    _ENCODE_TABLE[_char] = _code


class Nt(IntEnum):
    """DNA nucleotide with its matrix column index."""

    A = 0
    C = 1
    G = 2
    T = 3

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_char(cls, char: Any) -> Nt:
        """Return the nucleotide for ``char``; raise KeyError for anything else."""
        if isinstance(char, cls):
            return char
        if not isinstance(char, str):
            raise KeyError(char)
        return cls[char]


def encode_text(text: str) -> np.ndarray:
    """Convert text to an int8 array of nucleotide codes, 4 for non-ACGT characters."""
    raw = text.encode("ascii", errors="replace")
    return np.frombuffer(raw.translate(_ENCODE_TABLE), dtype=np.int8).copy()


@dataclass(frozen=True)
class NtSeq:
    """Nucleotide sequence held as raw text.

    The alphabet is not enforced at construction; call :meth:`validate`
    before trusting text that came from outside the program.
    """

    text: str

    @classmethod
    def from_nts(cls, nts: Iterable[Nt]) -> NtSeq:
        """Build a sequence from nucleotides, valid by construction."""
        return cls("".join(Nt.from_char(nt).name for nt in nts))

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def validate(self) -> None:
        """Raise AlphabetError for the first character outside A/C/G/T."""
        for index, char in enumerate(self.text):
            if char not in NUCLEOTIDES:
                raise AlphabetError(index, char)

    def encode(self) -> np.ndarray:
        """Return the integer-encoded sequence."""
        return encode_text(self.text)


def _as_position(key: Any) -> int:
    """Convert a mapping key (int or decimal string) to a position index."""
    if isinstance(key, (int, np.integer)) and not isinstance(key, bool):
        return int(key)
    if isinstance(key, str):
        try:
            return int(key)
        except ValueError:
            raise StructureError(f"position key {key!r} is not an integer") from None
    raise StructureError(f"position key {key!r} is not an integer")


@dataclass(frozen=True, eq=False)
class Pwm:
    """Immutable position weight matrix.

    The matrix is read-only once the object exists. Positions are kept
    sorted and may be non-contiguous until :meth:`validate` rejects them.

    Attributes
    ----------
    matrix : np.ndarray
        ``(length, 4)`` float64 probabilities, columns in A, C, G, T order.
        Missing nucleotide entries are NaN.
    positions : tuple of int
        Position index of each matrix row, ascending.
    """

    matrix: np.ndarray = dc_field(hash=False)
    positions: Optional[Tuple[int, ...]] = None

    def __post_init__(self):
        matrix = np.array(self.matrix, dtype=np.float64)
        if matrix.size == 0:
            matrix = matrix.reshape(0, len(NUCLEOTIDES))
        if matrix.ndim != 2 or matrix.shape[1] != len(NUCLEOTIDES):
            raise StructureError(f"PWM matrix must have shape (length, 4), got {matrix.shape}")

        if self.positions is None:
            positions = tuple(range(matrix.shape[0]))
        else:
            positions = tuple(int(p) for p in self.positions)
        if len(positions) != matrix.shape[0]:
            raise StructureError(f"{len(positions)} position indices given for {matrix.shape[0]} matrix rows")

        # rows follow ascending position order
        order = np.argsort(np.array(positions, dtype=np.int64), kind="stable")
        matrix = matrix[order]
        positions = tuple(positions[i] for i in order)

        matrix.flags.writeable = False
        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "positions", positions)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Mapping[Any, float]]) -> Pwm:
        """Build a PWM from ``{position: {"A": p, "C": p, "G": p, "T": p}}``."""
        items = sorted(((_as_position(key), probs) for key, probs in mapping.items()), key=lambda item: item[0])

        matrix = np.full((len(items), len(NUCLEOTIDES)), np.nan, dtype=np.float64)
        for row, (position, probs) in enumerate(items):
            for base, prob in probs.items():
                try:
                    nt = Nt.from_char(base)
                except KeyError:
                    raise StructureError(f"unknown nt {base!r} at position {position}") from None
                matrix[row, nt] = float(prob)

        return cls(matrix=matrix, positions=tuple(position for position, _ in items))

    def to_mapping(self) -> Dict[int, Dict[str, float]]:
        """Return the PWM as a nested ``{position: {nt: probability}}`` mapping."""
        return {
            position: {nt.name: float(row[nt]) for nt in Nt if not np.isnan(row[nt])}
            for position, row in zip(self.positions, self.matrix)
        }

    def __len__(self) -> int:
        return self.matrix.shape[0]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pwm):
            return NotImplemented
        return self.positions == other.positions and np.array_equal(self.matrix, other.matrix, equal_nan=True)

    def __hash__(self):
        """Hash on positions and raw matrix bytes; the matrix is read-only."""
        return hash((self.positions, self.matrix.tobytes()))

    def validate(self) -> None:
        """Check contiguous positions, complete rows and normalised probabilities.

        Positions are scanned in increasing order, so the error reported is
        the one at the lowest offending position.

        Raises
        ------
        StructureError
            Positions are not exactly ``0 .. length - 1`` or a nucleotide is missing.
        ProbabilityError
            The probabilities of a position do not sum to 1 within ``SUM_TOLERANCE``.
        """
        for i, position in enumerate(self.positions):
            if position != i:
                if i > 0 and position == self.positions[i - 1]:
                    raise StructureError(f"position {position} appears more than once in pwm")
                raise StructureError(f"position {i} not in pwm - must be indexed consecutively from 0")

            row = self.matrix[i]
            for nt in Nt:
                if np.isnan(row[nt]):
                    raise StructureError(f"nt {nt.name} not in pwm at position {i}")

            total = float(row.sum())
            if abs(total - 1) > SUM_TOLERANCE:
                raise ProbabilityError(f"pos. {i} prob sums to {total:f}")

    @functools.cached_property
    def log_table(self) -> np.ndarray:
        """``(length, 5)`` log10 probabilities; the last column scores non-ACGT codes as -inf."""
        table = np.full((len(self), len(NUCLEOTIDES) + 1), -np.inf, dtype=np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            table[:, : len(NUCLEOTIDES)] = np.log10(self.matrix)
        table.flags.writeable = False
        return table
