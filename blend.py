"""Merge together batches of images, e.g. light painting or faking long exposures."""
import argparse
import logging
import sys
from pathlib import Path

from frameblend import BlendError, BlendOptions, Policy, run
from frameblend.policies import choice_names

logger = logging.getLogger("blend")

LOG_FORMAT = "%(levelname)s: %(message)s"


def _mode(text):
    try:
        return Policy.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="blend",
        description="Merge together batches of images, e.g. light painting or faking long exposures.",
    )
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output image.")
    parser.add_argument("inputs", type=Path, nargs="+", help="Input images.")
    parser.add_argument(
        "-m",
        "--mode",
        type=_mode,
        default=Policy.SUM,
        metavar="{" + ",".join(choice_names()) + "}",
        help="Image processing mode (default: sum).",
    )
    parser.add_argument(
        "-y", "--overwrite", action="store_true", help="Allow overwriting output file."
    )
    parser.add_argument(
        "--min-from-first",
        action="store_true",
        help="In min mode, start from the first image instead of black.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug output.")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logger.debug("Arguments: %s", args)

    options = BlendOptions(
        output=args.output,
        inputs=tuple(args.inputs),
        mode=args.mode,
        overwrite=args.overwrite,
        min_from_first=args.min_from_first,
    )
    try:
        run(options)
    except BlendError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
