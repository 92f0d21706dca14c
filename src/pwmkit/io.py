from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Tuple

import numpy as np

from pwmkit.models import Pwm


def read_fasta(path: str | Path) -> Tuple[List[str], List[str]]:
    """Read a FASTA file and return record names and raw sequence text.

    Sequence text is returned as written; alphabet checks are left to
    ``NtSeq.validate``.
    """
    names: List[str] = []
    sequences: List[str] = []

    with open(path, "r") as handle:
        current_name = None
        current_seq: List[str] = []
        for line in handle:
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if current_name is not None:
                    names.append(current_name)
                    sequences.append("".join(current_seq))
                current_name = line[1:].split()[0] if len(line) > 1 else str(len(names))
                current_seq = []
            else:
                if current_name is None:
                    current_name = str(len(names))
                current_seq.append(line)

        if current_name is not None:
            names.append(current_name)
            sequences.append("".join(current_seq))

    logger = logging.getLogger(__name__)
    logger.debug(f"Read {len(sequences)} sequence(s) from {path}")
    return names, sequences


def read_pfm(path: str | Path) -> Pwm:
    """Read a tab-delimited matrix, one row per position with A C G T columns."""
    matrix = np.loadtxt(path, comments=">", ndmin=2)
    return Pwm(matrix=matrix)


def read_pwm_json(path: str | Path) -> Pwm:
    """Read a ``{position: {nt: probability}}`` mapping stored as JSON."""
    with open(path, "r") as handle:
        mapping = json.load(handle)
    if not isinstance(mapping, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(mapping).__name__}")
    return Pwm.from_mapping(mapping)


def read_pwm(path: str | Path) -> Pwm:
    """Load a PWM from a ``.json`` mapping or a ``.pfm`` / ``.txt`` matrix."""
    _, ext = os.path.splitext(str(path).lower())

    if ext == ".json":
        pwm = read_pwm_json(path)
    elif ext in (".pfm", ".txt"):
        pwm = read_pfm(path)
    else:
        raise ValueError(f"Unsupported PWM format: {path}")

    logger = logging.getLogger(__name__)
    logger.debug(f"Loaded PWM of length {len(pwm)} from {path}")
    return pwm
