from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from numba import njit, prange

from pwmkit.config import MIN_PROB, NUCLEOTIDES, ScanConfig
from pwmkit.errors import DomainError, RangeError
from pwmkit.models import NtSeq, Pwm, encode_text
from pwmkit.ragged import RaggedData, encode_sequences

SeqLike = Union[str, NtSeq]


def add_pseudocount(pwm: Pwm, pseudo: float) -> Pwm:
    """Return a new PWM with ``pseudo`` added to every base and each position renormalised."""
    pwm.validate()
    if not np.isfinite(pseudo):
        raise DomainError(f"pseudo {pseudo} is not a finite number")
    if pseudo < 0:
        raise DomainError(f"pseudo {pseudo} is less than 0")

    total = 1 + len(NUCLEOTIDES) * pseudo
    return Pwm(matrix=(pwm.matrix + pseudo) / total, positions=pwm.positions)


def smoothing_floor(min_prob: float = MIN_PROB) -> float:
    """Smallest probability a matrix smoothed with ``min_prob`` can contain."""
    return min_prob / (1 + len(NUCLEOTIDES) * min_prob)


def add_pseudo_if_necessary(pwm: Pwm, min_prob: float = MIN_PROB) -> Pwm:
    """Smooth the whole PWM with ``min_prob`` if any probability is too small.

    A probability counts as too small when it lies below
    :func:`smoothing_floor`, the value a zero becomes after smoothing, so
    applying this twice gives the same matrix as applying it once.
    """
    pwm.validate()
    if not np.isfinite(min_prob) or min_prob < 0:
        raise DomainError(f"min_prob {min_prob} must be a finite number >= 0")

    floor = smoothing_floor(min_prob)
    n_small = int(np.count_nonzero(pwm.matrix < floor))
    if n_small == 0:
        return pwm

    logger = logging.getLogger(__name__)
    logger.info(f"{n_small} probabilit(ies) below {floor:.6g}; adding pseudocount {min_prob} to all positions")
    return add_pseudocount(pwm, min_prob)


def prepare_pwm(pwm: Pwm, config: Optional[ScanConfig] = None) -> Pwm:
    """Validate and smooth a PWM as described by ``config``."""
    config = config or ScanConfig()
    if config.validate:
        pwm.validate()
    if config.pseudocount is not None:
        return add_pseudocount(pwm, config.pseudocount)
    if config.smooth:
        return add_pseudo_if_necessary(pwm)
    return pwm


@njit(cache=True)
def _window_score(codes, start, log_table):
    """Sum log10 probabilities of one window, stopping at the first -inf."""
    score = 0.0
    for i in range(log_table.shape[0]):
        value = log_table[i, codes[start + i]]
        if value == -np.inf:
            return -np.inf
        score += value
    return score


@njit(cache=True)
def _best_window(codes, start, n_windows, log_table):
    """Return offset and score of the first highest-scoring window."""
    best_pos = 0
    best_score = _window_score(codes, start, log_table)
    for k in range(1, n_windows):
        score = _window_score(codes, start + k, log_table)
        if score > best_score:
            best_score = score
            best_pos = k
    return best_pos, best_score


@njit(cache=True)
def _all_window_scores_jit(codes, log_table):
    """Score every window of a single encoded sequence."""
    n_windows = max(codes.shape[0] - log_table.shape[0] + 1, 0)
    results = np.empty(n_windows, dtype=np.float64)
    for k in range(n_windows):
        results[k] = _window_score(codes, k, log_table)
    return results


@njit(parallel=True, cache=True)
def _batch_best_matches_jit(data, offsets, log_table):
    """Best window of each sequence; -1 / -inf where the PWM does not fit."""
    n_seq = len(offsets) - 1
    m = log_table.shape[0]

    positions = np.full(n_seq, -1, dtype=np.int64)
    scores = np.full(n_seq, -np.inf, dtype=np.float64)

    # each iteration owns its output slot, so the per-sequence tie-break is untouched
    for i in prange(n_seq):
        start = offsets[i]
        n_windows = offsets[i + 1] - start - m + 1
        if n_windows > 0:
            pos, score = _best_window(data, start, n_windows, log_table)
            positions[i] = pos
            scores[i] = score

    return positions, scores


def score_seq(pwm: Pwm, seq: SeqLike) -> float:
    """Log10 likelihood of ``seq`` under ``pwm``.

    Returns -inf when the lengths differ, when either is empty, or when any
    observed base has probability 0. Inputs are not validated.
    """
    text = str(seq)
    if len(text) != len(pwm) or len(text) == 0:
        return float("-inf")
    return float(_window_score(encode_text(text), 0, pwm.log_table))


def all_window_scores(pwm: Pwm, seq: SeqLike) -> np.ndarray:
    """Score of every ``len(pwm)``-wide window of ``seq``, by start offset."""
    return _all_window_scores_jit(encode_text(str(seq)), pwm.log_table)


def get_best_match_pos(pwm: Pwm, seq: SeqLike) -> int:
    """Start offset of the highest-scoring window; the lowest offset wins ties.

    Raises
    ------
    RangeError
        If the PWM is longer than the sequence.
    """
    codes = encode_text(str(seq))
    width = len(pwm)
    if width > codes.shape[0]:
        raise RangeError(f"PWM longer than sequence ({width} > {codes.shape[0]})")

    pos, score = _best_window(codes, 0, codes.shape[0] - width + 1, pwm.log_table)
    logger = logging.getLogger(__name__)
    logger.debug(f"Best match at {pos} with score {score:.4f}")
    return int(pos)


def batch_best_matches(pwm: Pwm, sequences: RaggedData) -> Tuple[np.ndarray, np.ndarray]:
    """Best-match offset and score for every sequence in a batch.

    Sequences shorter than the PWM get offset -1 and score -inf.
    """
    positions, scores = _batch_best_matches_jit(sequences.data, sequences.offsets, pwm.log_table)

    n_short = int(np.count_nonzero(positions < 0))
    if n_short:
        logger = logging.getLogger(__name__)
        logger.warning(f"{n_short} of {sequences.num_sequences} sequence(s) shorter than PWM ({len(pwm)})")
    return positions, scores


def find_best_matches(
    pwm: Pwm,
    sequences: Sequence[SeqLike],
    names: Optional[Sequence[str]] = None,
    config: Optional[ScanConfig] = None,
) -> pd.DataFrame:
    """Table of best-matching sites, one row per sequence the PWM fits into."""
    if names is None:
        names = [str(i) for i in range(len(sequences))]
    if len(names) != len(sequences):
        raise ValueError(f"{len(names)} names given for {len(sequences)} sequences")

    if config is not None:
        pwm = prepare_pwm(pwm, config)
        if config.validate:
            for seq in sequences:
                NtSeq(str(seq)).validate()

    positions, scores = batch_best_matches(pwm, encode_sequences(sequences))

    width = len(pwm)
    results = []
    for name, seq, pos, score in zip(names, sequences, positions, scores):
        if pos < 0:
            continue
        text = str(seq)
        results.append(
            {
                "name": name,
                "start": int(pos),
                "end": int(pos + width),
                "score": float(score),
                "site": text[pos : pos + width],
            }
        )

    df = pd.DataFrame(results, columns=["name", "start", "end", "score", "site"])

    logger = logging.getLogger(__name__)
    logger.info(f"Found {len(df)} best match(es) in {len(sequences)} sequence(s)")
    return df
