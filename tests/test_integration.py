"""
Integration tests for pwmkit covering file loading and command-line scenarios.
"""

import json
import math
import subprocess
import sys
from io import StringIO

import pandas as pd
import pytest

from pwmkit.io import read_fasta, read_pwm
from pwmkit.models import Pwm

ACA_MAPPING = {
    "0": {"A": 0.5, "C": 0.3, "G": 0.1, "T": 0.1},
    "1": {"A": 0.05, "C": 0.75, "G": 0.1, "T": 0.1},
    "2": {"A": 0.5, "C": 0.3, "G": 0.1, "T": 0.1},
}


def run_cli(cmd: list[str]) -> subprocess.CompletedProcess:
    """Run CLI through current Python env to avoid global PATH contamination."""
    args = cmd[1:] if cmd and cmd[0] == "pwmkit" else cmd
    return subprocess.run([sys.executable, "-m", "pwmkit.cli", *args], capture_output=True, text=True)


@pytest.fixture
def aca_json(temp_dir):
    """PWM favouring ACA stored as a JSON mapping."""
    path = temp_dir / "aca.json"
    path.write_text(json.dumps(ACA_MAPPING))
    return path


@pytest.fixture
def always_a_pfm(temp_dir):
    """One-position PWM with zero probabilities stored as a matrix."""
    path = temp_dir / "always_a.pfm"
    path.write_text(">always_a\n1.0\t0.0\t0.0\t0.0\n")
    return path


@pytest.fixture
def fasta_file(temp_dir):
    """Three records, one split over several lines and one too short for the PWM."""
    path = temp_dir / "sequences.fa"
    path.write_text(">first description\nTGTATACGAC\nAAGGCGAA\n>short\nAC\n>third\nGACAT\n")
    return path


def test_read_fasta(fasta_file):
    """Test FASTA parsing of names and multi-line records"""
    names, sequences = read_fasta(fasta_file)

    assert names == ["first", "short", "third"]
    assert sequences == ["TGTATACGACAAGGCGAA", "AC", "GACAT"]


def test_read_pwm_json(aca_json):
    """Test loading a JSON mapping"""
    pwm = read_pwm(aca_json)

    assert pwm == Pwm.from_mapping(ACA_MAPPING)
    pwm.validate()


def test_read_pwm_pfm(always_a_pfm):
    """Test loading a tab-delimited matrix"""
    pwm = read_pwm(always_a_pfm)

    assert len(pwm) == 1
    assert pwm.to_mapping() == {0: {"A": 1.0, "C": 0.0, "G": 0.0, "T": 0.0}}


def test_read_pwm_unsupported(temp_dir):
    """Test that unknown extensions are rejected"""
    path = temp_dir / "motif.meme"
    path.write_text("MEME version 4\n")

    with pytest.raises(ValueError, match="Unsupported PWM format"):
        read_pwm(path)


def test_cli_validate(aca_json):
    """Test validating a PWM and a sequence"""
    result = run_cli(["pwmkit", "validate", str(aca_json), "--seq", "ACGT"])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    assert result.stdout.strip() == "OK"


def test_cli_validate_invalid_sequence(aca_json):
    """Test that an invalid sequence fails with its position"""
    result = run_cli(["pwmkit", "validate", str(aca_json), "--seq", "ACNT"])

    assert result.returncode == 1
    assert "position 2" in result.stderr


def test_cli_validate_invalid_pwm(temp_dir):
    """Test that a PWM with a position gap fails"""
    path = temp_dir / "gap.json"
    path.write_text(json.dumps({"0": ACA_MAPPING["0"], "2": ACA_MAPPING["2"]}))

    result = run_cli(["pwmkit", "validate", str(path)])

    assert result.returncode == 1
    assert "position 1 not in pwm" in result.stderr


def test_cli_missing_file(temp_dir):
    """Test that a missing PWM file is reported"""
    result = run_cli(["pwmkit", "validate", str(temp_dir / "missing.json")])

    assert result.returncode == 1
    assert "PWM file not found" in result.stderr


def test_cli_smooth(always_a_pfm):
    """Test automatic smoothing of a matrix with zeros"""
    result = run_cli(["pwmkit", "smooth", str(always_a_pfm)])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    smoothed = Pwm.from_mapping(json.loads(result.stdout))
    smoothed.validate()
    assert abs(smoothed.to_mapping()[0]["C"] - 0.001 / 1.004) < 1e-9


def test_cli_smooth_explicit_pseudocount(always_a_pfm):
    """Test smoothing with a given pseudocount"""
    result = run_cli(["pwmkit", "smooth", str(always_a_pfm), "--pseudocount", "1"])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    mapping = json.loads(result.stdout)
    assert mapping["0"] == pytest.approx({"A": 0.4, "C": 0.2, "G": 0.2, "T": 0.2})


def test_cli_smooth_negative_pseudocount(always_a_pfm):
    """Test that a negative pseudocount fails"""
    result = run_cli(["pwmkit", "smooth", str(always_a_pfm), "--pseudocount", "-1"])

    assert result.returncode == 1
    assert "less than 0" in result.stderr


def test_cli_score(aca_json):
    """Test scoring a sequence of the PWM's length"""
    result = run_cli(["pwmkit", "score", str(aca_json), "ACA", "--no-smooth"])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    expected = math.log10(0.5) + math.log10(0.75) + math.log10(0.5)
    assert abs(float(result.stdout) - expected) < 1e-9


def test_cli_score_length_mismatch(aca_json):
    """Test that a length mismatch prints -inf rather than failing"""
    result = run_cli(["pwmkit", "score", str(aca_json), "AC"])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    assert float(result.stdout) == float("-inf")


def test_cli_best_match_fasta(aca_json, fasta_file):
    """Test the best-match table for a FASTA file"""
    result = run_cli(["pwmkit", "best-match", str(aca_json), "--fasta", str(fasta_file), "-v"])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    table = pd.read_csv(StringIO(result.stdout), sep="\t")
    assert list(table["name"]) == ["first", "third"]
    assert list(table["start"]) == [8, 1]
    assert list(table["site"]) == ["ACA", "ACA"]
    assert "shorter than PWM" in result.stderr


def test_cli_best_match_first_of_ties(temp_dir):
    """Test that equal windows resolve to the first one"""
    path = temp_dir / "ac.json"
    path.write_text(
        json.dumps(
            {
                "0": {"A": 0.5, "C": 0.3, "G": 0.2, "T": 0.0},
                "1": {"A": 0.05, "C": 0.75, "G": 0.1, "T": 0.1},
            }
        )
    )

    result = run_cli(["pwmkit", "best-match", str(path), "--seq", "TTACACACATT", "--no-smooth"])

    assert result.returncode == 0, f"Command failed with stderr: {result.stderr}"
    table = pd.read_csv(StringIO(result.stdout), sep="\t")
    assert table["start"].tolist() == [2]


def test_cli_best_match_invalid_sequence(aca_json):
    """Test that sequences are validated before scanning"""
    result = run_cli(["pwmkit", "best-match", str(aca_json), "--seq", "acaGG"])

    assert result.returncode == 1
    assert "not a valid nt" in result.stderr
