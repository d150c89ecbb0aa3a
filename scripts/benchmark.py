# scripts/benchmark.py
"""Command-line script for measuring splitter throughput.

Compares splitting a list of tokens one at a time with splitting the same
list through the length-bucketed batch path, and optionally runs the
labeled accuracy cases. Reported figures are items per second (QPS), mean
latency and the batch speedup over single mode.
"""
import argparse
import sys
import time
from pathlib import Path

# Add project root to path to allow for package imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from tokensplit.config import load_config
from tokensplit.errors import SplitterError
from tokensplit.evaluate import evaluate, format_report
from tokensplit.splitter import Splitter

BASE_TEXTS = [
    "chatgptlogin",
    "microsoftoffice",
    "kubernetescluster",
    "helloworld",
    "openaiapi",
    "machinelearning",
    "deeplearning",
    "naturallanguage",
    "computervision",
    "neuralnetwork",
]

ACCURACY_CASES = [
    ("chatgptlogin", ["chatgpt", "login"]),
    ("microsoftoffice", ["microsoft", "office"]),
    ("openaiapi", ["openai", "api"]),
    ("kubernetescluster", ["kubernetes", "cluster"]),
    ("dockercontainer", ["docker", "container"]),
    ("machinelearning", ["machine", "learning"]),
    ("beijingdaxue", ["beijing", "daxue"]),
    ("pinduoduo", ["pin", "duo", "duo"]),
    ("mercibeaucoup", ["merci", "beaucoup"]),
    ("gutenmorgen", ["guten", "morgen"]),
    ("buenosdias", ["buenos", "dias"]),
    ("helloworld", ["hello", "world"]),
    ("goodmorning", ["good", "morning"]),
]


def run_benchmark(splitter: Splitter, n_items: int, batch_size: int, warmup: int = 100) -> dict:
    """Times single-item and batch splitting over ``n_items`` repeated texts."""
    texts = [BASE_TEXTS[i % len(BASE_TEXTS)] for i in range(n_items)]

    for i in range(warmup):
        splitter.split(texts[i % len(texts)])
    splitter.split_batch(texts[:warmup], batch_size)

    start = time.perf_counter()
    for text in texts:
        splitter.split(text)
    single_s = time.perf_counter() - start

    start = time.perf_counter()
    splitter.split_batch(texts, batch_size)
    batch_s = time.perf_counter() - start

    return {
        "items": n_items,
        "single_s": single_s,
        "batch_s": batch_s,
        "single_qps": n_items / max(single_s, 1e-9),
        "batch_qps": n_items / max(batch_s, 1e-9),
        "single_latency_us": single_s / max(n_items, 1) * 1e6,
        "speedup": single_s / max(batch_s, 1e-9),
    }


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark single versus batch splitting throughput.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--config", default="config.yaml", help="Path to the configuration YAML file.")
    parser.add_argument("--items", type=int, default=1000, help="Number of tokens to split in each mode.")
    parser.add_argument("--batch-size", type=int, default=256, help="Maximum tokens per scoring call.")
    parser.add_argument("--accuracy", action="store_true", help="Also run the labeled accuracy cases.")
    args = parser.parse_args()

    try:
        cfg = load_config(args.config)
        with Splitter.from_config(cfg) as splitter:
            stats = run_benchmark(splitter, args.items, args.batch_size)

            print(f"\n=== Comparison ({stats['items']} items) ===")
            print(f"Single mode: {stats['single_s']:.3f}s ({stats['single_qps']:.2f}/s, "
                  f"{stats['single_latency_us']:.0f} us/item)")
            print(f"Batch mode:  {stats['batch_s']:.3f}s ({stats['batch_qps']:.2f}/s)")
            print(f"Speedup: {stats['speedup']:.2f}x")

            if args.accuracy:
                print("\n=== Accuracy ===")
                print(format_report(evaluate(splitter, ACCURACY_CASES, args.batch_size)))
    except (SplitterError, FileNotFoundError, ValueError, TypeError) as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
