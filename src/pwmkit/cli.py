import argparse
import json
import logging
import os
import sys

from pwmkit.config import MIN_PROB, create_scan_config
from pwmkit.functions import add_pseudo_if_necessary, add_pseudocount, find_best_matches, prepare_pwm, score_seq
from pwmkit.io import read_fasta, read_pwm
from pwmkit.models import NtSeq


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    if verbose:
        logging.getLogger("numba").setLevel(logging.WARNING)


def _add_smoothing_options(parser: argparse.ArgumentParser) -> None:
    """Options controlling how the PWM is prepared before scoring."""
    group = parser.add_argument_group("Smoothing Options")
    group.add_argument(
        "--pseudocount",
        type=float,
        help=(
            "Add this pseudocount to every probability before scoring. "
            "Overrides the automatic smoothing of near-zero probabilities."
        ),
    )
    group.add_argument(
        "--no-smooth",
        action="store_true",
        help="Score with the PWM exactly as given, without automatic pseudocount smoothing.",
    )


def _add_technical_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("Technical Options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging to standard output for detailed execution tracking.",
    )


def create_arg_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        description="pwmkit: validate, smooth and scan DNA sequences with position weight matrices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
 Examples:
   # Check a PWM and a sequence
   pwmkit validate motif.json --seq ACGTACGT

   # Smooth near-zero probabilities and print the new matrix
   pwmkit smooth motif.pfm

   # Log10 likelihood of a sequence as long as the motif
   pwmkit score motif.json ACA

   # Best-matching window in every FASTA record
   pwmkit best-match motif.json --fasta sequences.fa --pseudocount 0.01
         """,
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operation mode", required=True)

    validate_parser = subparsers.add_parser("validate", help="Check a PWM (and optionally a sequence) for errors.")
    validate_parser.add_argument("pwm", help="Path to a PWM file (.json mapping or .pfm/.txt matrix).")
    validate_parser.add_argument("--seq", help="Sequence to check against the A/C/G/T alphabet.")
    _add_technical_options(validate_parser)

    smooth_parser = subparsers.add_parser("smooth", help="Apply pseudocount smoothing and print the PWM as JSON.")
    smooth_parser.add_argument("pwm", help="Path to a PWM file (.json mapping or .pfm/.txt matrix).")
    smooth_parser.add_argument(
        "--pseudocount",
        type=float,
        help=(
            "Pseudocount added to every probability. If omitted, a pseudocount of "
            f"{MIN_PROB} is added only when some probability is near zero."
        ),
    )
    _add_technical_options(smooth_parser)

    score_parser = subparsers.add_parser("score", help="Score a sequence of the same length as the PWM.")
    score_parser.add_argument("pwm", help="Path to a PWM file (.json mapping or .pfm/.txt matrix).")
    score_parser.add_argument("seq", help="Sequence to score.")
    _add_smoothing_options(score_parser)
    _add_technical_options(score_parser)

    match_parser = subparsers.add_parser("best-match", help="Find the best-scoring window in each sequence.")
    match_parser.add_argument("pwm", help="Path to a PWM file (.json mapping or .pfm/.txt matrix).")
    match_source = match_parser.add_mutually_exclusive_group(required=True)
    match_source.add_argument("--seq", help="A single sequence to search.")
    match_source.add_argument("--fasta", help="Path to a FASTA file of sequences to search.")
    _add_smoothing_options(match_parser)
    _add_technical_options(match_parser)

    return parser


def validate_inputs(args) -> None:
    """Validate input files and parameters."""
    logger = logging.getLogger(__name__)
    if not os.path.exists(args.pwm):
        logger.error(f"PWM file not found: {args.pwm}")
        sys.exit(1)
    if getattr(args, "fasta", None) and not os.path.exists(args.fasta):
        logger.error(f"FASTA file not found: {args.fasta}")
        sys.exit(1)


def run(args) -> None:
    """Execute the selected subcommand and print its result."""
    pwm = read_pwm(args.pwm)

    if args.mode == "validate":
        pwm.validate()
        if args.seq is not None:
            NtSeq(args.seq).validate()
        print("OK")
        return

    if args.mode == "smooth":
        if args.pseudocount is not None:
            smoothed = add_pseudocount(pwm, args.pseudocount)
        else:
            smoothed = add_pseudo_if_necessary(pwm)
        print(json.dumps(smoothed.to_mapping()))
        return

    config = create_scan_config(smooth=not args.no_smooth, pseudocount=args.pseudocount)

    if args.mode == "score":
        seq = NtSeq(args.seq)
        seq.validate()
        print(score_seq(prepare_pwm(pwm, config), seq))
        return

    if args.mode == "best-match":
        if args.fasta:
            names, sequences = read_fasta(args.fasta)
        else:
            names, sequences = ["seq"], [args.seq]
        table = find_best_matches(pwm, sequences, names=names, config=config)
        table.to_csv(sys.stdout, sep="\t", index=False)
        return

    raise ValueError(f"Unknown mode: {args.mode}")


def main_cli(argv=None):
    """Main CLI entry point."""
    parser = create_arg_parser()

    if argv is None and len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    validate_inputs(args)

    try:
        run(args)
    except (OSError, ValueError) as e:
        logger = logging.getLogger(__name__)
        logger.error(f"{args.mode} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
