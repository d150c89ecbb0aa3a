# main.py

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path for robust execution
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tokensplit.config import load_config
from tokensplit.errors import SplitterError
from tokensplit.io_utils import load_domain_prefixes, load_texts, save_results
from tokensplit.splitter import Splitter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split concatenated tokens (domains, hashtags, identifiers) into words.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "texts",
        nargs="*",
        help="Tokens to split. Combined with --input when both are given."
    )
    parser.add_argument(
        "--input",
        help="Path to a text file with one token per line."
    )
    parser.add_argument(
        "--domains-csv",
        help="Path to a CSV domain ranking; the label before the first dot of each domain is split."
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of labels to read from --domains-csv."
    )
    parser.add_argument(
        "--output",
        help="Path to write the results as JSON instead of printing them."
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the configuration YAML file."
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Maximum number of equal-length tokens per scoring call (overrides the config)."
    )
    return parser


def main(argv=None) -> int:
    """
    Command-line interface for the word splitter.

    1.  Loads the configuration file and sets up logging.
    2.  Collects tokens from the positional arguments and the input files.
    3.  Builds the `Splitter` (emission model plus transition tables).
    4.  Splits all tokens in one batch.
    5.  Prints `token -> words` lines or writes a JSON results file.
    """
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
        logging.basicConfig(level=cfg.log_level, format="%(levelname)s %(name)s: %(message)s")

        texts = list(args.texts)
        if args.input:
            print(f"Loading tokens from {args.input}...")
            texts.extend(load_texts(args.input))
        if args.domains_csv:
            print(f"Loading domains from {args.domains_csv}...")
            texts.extend(load_domain_prefixes(args.domains_csv, limit=args.limit))

        if not texts:
            print("Error: no tokens given.", file=sys.stderr)
            return 1

        print(f"Loading models from {cfg.model_dir}...")
        with Splitter.from_config(cfg) as splitter:
            results = splitter.split_batch(texts, args.batch_size)

        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            save_results(str(output_path), texts, results)
            print(f"Successfully wrote {len(results)} results to {args.output}")
        else:
            for text, words in zip(texts, results):
                print(f"{text} -> {' '.join(words)}")

    except (SplitterError, FileNotFoundError, ValueError, TypeError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
