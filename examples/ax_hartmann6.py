"""Constrained Ax search on the Hartmann6 landscape.

Ax proposes points in the unit hypercube subject to ``x1 + x2 <= 2.0``;
trials whose ``l2norm`` exceeds 1.25 count as infeasible.  At most four
trials run at once, and ``AsyncHyperBandScheduler`` stops weak ones early.

Run it with:
    python examples/ax_hartmann6.py --num-samples 10
"""

from __future__ import annotations

import argparse
import logging

from rltune.benchmarks import HARTMANN6_MIN
from rltune.optim import run_hartmann6_search


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--num-samples", type=int, default=10)
    parser.add_argument("--max-concurrent", type=int, default=4)
    parser.add_argument("--iterations", type=int, default=100)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(name)s %(message)s")

    result = run_hartmann6_search(
        num_samples=args.num_samples,
        max_concurrent=args.max_concurrent,
        iterations=args.iterations,
    )

    print("=" * 60)
    print(f"Trials        : {result.n_trials}")
    print(f"Best hartmann6: {result.best_value:.5f} (global minimum {HARTMANN6_MIN})")
    print("Best point    :", {k: round(v, 4) for k, v in result.best_config.items() if k.startswith("x")})
    print("=" * 60)


if __name__ == "__main__":
    main()
