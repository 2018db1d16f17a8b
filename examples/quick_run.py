"""Quick-start demo for rltune.

Loads every shipped tuned example, switches it to PyTorch and prints the
experiment mapping that would be handed to Ray Tune.  Pass ``--train`` to
actually start the runs (needs ``ray[rllib]``).

Run it with:
    python examples/quick_run.py
"""

from __future__ import annotations

import argparse

import yaml

from rltune.runtime import RunExperiment, load_run_specs
from rltune.tuned_examples import list_tuned_examples, tuned_example_path


def main() -> None:
    parser = argparse.ArgumentParser(description="Dry-run or train the shipped tuned examples.")
    parser.add_argument("--train", action="store_true", help="Start the runs for real")
    args = parser.parse_args()

    for relpath in list_tuned_examples():
        for spec in load_run_specs(tuned_example_path(relpath)):
            exp = RunExperiment(spec, overrides={"framework": "torch"})
            print(f"# {relpath}")
            if not args.train:
                print(yaml.dump({spec.name: exp.dry_run()}, default_flow_style=False, sort_keys=False))
                continue
            summary = exp.run()
            print(f"{spec.name}: learning {'achieved' if summary['passed'] else 'not achieved'}")


if __name__ == "__main__":
    main()
