"""
pwmkit
==================

This package scores DNA sequences against position weight matrices (PWMs).
A PWM is validated on demand, smoothed with pseudocounts so that log
scoring does not collapse on zero probabilities, and then used either to
score a sequence of the motif's length or to locate the best-matching
window inside a longer sequence.

The top level modules expose the following key components:

``models``
    The ``Nt`` alphabet, the ``NtSeq`` sequence wrapper and the ``Pwm``
    matrix, each with its ``validate`` method.

``functions``
    Pseudocount smoothing, log10 scoring and best-match search, backed by
    numba kernels that also scan batches of sequences in parallel.

``ragged``
    Flat storage of many integer-encoded sequences for batch scanning.

``io``
    Readers for FASTA sequences and for PWMs stored as JSON mappings or
    tab-delimited matrices.

``cli``
    A command line interface exposing validation, smoothing and scanning.

Errors are reported with the exception classes in ``errors``; all of them
derive from ``PwmError`` (a ``ValueError``).
"""
from pwmkit.errors import AlphabetError, DomainError, ProbabilityError, PwmError, RangeError, StructureError
from pwmkit.functions import (
    add_pseudo_if_necessary,
    add_pseudocount,
    find_best_matches,
    get_best_match_pos,
    score_seq,
)
from pwmkit.models import Nt, NtSeq, Pwm

__all__ = [
    "AlphabetError",
    "DomainError",
    "Nt",
    "NtSeq",
    "ProbabilityError",
    "Pwm",
    "PwmError",
    "RangeError",
    "StructureError",
    "add_pseudo_if_necessary",
    "add_pseudocount",
    "find_best_matches",
    "get_best_match_pos",
    "score_seq",
]
