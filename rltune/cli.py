"""Command-line interface for rltune.

Subcommands
-----------
``rltune info``
    Print version information.

``rltune list``
    List the run specifications shipped with the package.

``rltune show <file>``
    Print the normalised run blocks of a YAML file.

``rltune train -f <file>``
    Hand a run block to Ray Tune / RLlib, optionally with overrides.

``rltune ax-search``
    Minimise the Hartmann6 landscape with a constrained Ax search.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

import yaml

from rltune import __version__

logger = logging.getLogger(__name__)


# ── Helpers ─────────────────────────────────────────────────────────────


class CLIError(Exception):
    """User-facing error; reported on stderr with exit status 1."""


def _resolve_path(path: str) -> str:
    """Accept a file path or the relative name of a shipped tuned example."""
    if os.path.isfile(path):
        return path
    from rltune.tuned_examples import tuned_example_path

    try:
        return tuned_example_path(path)
    except FileNotFoundError:
        raise CLIError(f'config file not found: {path}') from None


def _parse_json(text: Optional[str], option: str) -> Dict[str, Any]:
    """Parse a JSON object given on the command line."""
    if not text:
        return {}
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CLIError(f'{option} is not valid JSON: {exc}') from None
    if not isinstance(value, dict):
        raise CLIError(f'{option} must be a JSON object')
    return value


def _load(path: str, name: Optional[str]):
    from rltune.runtime.spec import RunSpecError, load_run_spec, load_run_specs

    resolved = _resolve_path(path)
    try:
        if name is None:
            return load_run_specs(resolved)
        return [load_run_spec(resolved, name)]
    except RunSpecError as exc:
        raise CLIError(str(exc)) from None
    except yaml.YAMLError as exc:
        raise CLIError(f'cannot parse {path}: {exc}') from None


# ── Subcommands ─────────────────────────────────────────────────────────


def cmd_info(_args: argparse.Namespace) -> int:
    """Print version information."""
    print(f'rltune {__version__}')
    return 0


def cmd_list(_args: argparse.Namespace) -> int:
    """Print shipped tuned examples."""
    from rltune.tuned_examples import list_tuned_examples

    for relpath in list_tuned_examples():
        print(relpath)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print the normalised run blocks."""
    from rltune.runtime.spec import run_specs_to_yaml

    specs = _load(args.file, args.name)
    print(run_specs_to_yaml(specs), end='')
    return 0


def cmd_train(args: argparse.Namespace) -> int:
    """Run every selected block; fail when one does not reach its reward."""
    from rltune.runtime.experiment import RunExperiment

    overrides = _parse_json(args.config, '--config')
    if args.framework:
        overrides['framework'] = args.framework
    stop_overrides = _parse_json(args.stop, '--stop')

    exit_code = 0
    for spec in _load(args.file, args.name):
        if args.dry_run:
            exp = RunExperiment(spec, overrides=overrides, stop_overrides=stop_overrides)
            print(yaml.dump({spec.name: exp.dry_run()}, default_flow_style=False, sort_keys=False), end='')
            continue
        exp_logger = _make_logger(args, spec)
        exp = RunExperiment(
            spec,
            exp_logger=exp_logger,
            overrides=overrides,
            stop_overrides=stop_overrides,
        )
        try:
            summary = exp.run()
        finally:
            if exp_logger is not None:
                exp_logger.finish()
        _print_summary(spec.name, summary)
        if not summary['passed']:
            exit_code = 1
    return exit_code


def cmd_ax_search(args: argparse.Namespace) -> int:
    """Run the Hartmann6 Ax example."""
    from rltune.optim.ax_optimizer import run_hartmann6_search

    result = run_hartmann6_search(
        num_samples=args.num_samples,
        max_concurrent=args.max_concurrent,
        iterations=args.iterations,
        storage_path=args.storage_path,
    )
    print(f'\n{"=" * 50}')
    print(f'  Trials: {result.n_trials}')
    print(f'  Best hartmann6: {result.best_value:.6f}')
    for key in sorted(result.best_config):
        if key.startswith('x'):
            print(f'    {key} = {result.best_config[key]:.4f}')
    print(f'{"=" * 50}')
    return 0


def _make_logger(args: argparse.Namespace, spec: Any):
    if not args.wandb_project:
        return None
    from rltune.loggers.wandb_logger import WandbLogger

    return WandbLogger(project=args.wandb_project, name=spec.name, config=spec.to_dict())


def _print_summary(name: str, summary: Dict[str, Any]) -> None:
    """Pretty-print run summary."""
    print(f'\n{"=" * 50}')
    print(f'  Run: {name}')
    print(f'  Status: {summary["status"]}')
    print(f'  Trials: {len(summary["trials"])}')
    print(f'  Learning achieved: {"yes" if summary["passed"] else "no"}')
    print(f'  Artifacts: {summary.get("artifacts_dir", "N/A")}')
    print(f'{"=" * 50}')


# ── Main entry point ───────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rltune',
        description='Run tuned RLlib examples and Ax searches through Ray Tune.',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'rltune {__version__}',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        help='Enable verbose (DEBUG) logging.',
    )

    subparsers = parser.add_subparsers(dest='command', help='Available subcommands')

    sp_info = subparsers.add_parser('info', help='Show version information')
    sp_info.set_defaults(func=cmd_info)

    sp_list = subparsers.add_parser('list', help='List shipped tuned examples')
    sp_list.set_defaults(func=cmd_list)

    sp_show = subparsers.add_parser('show', help='Print normalised run blocks')
    sp_show.add_argument('file', help='YAML file or shipped example name')
    sp_show.add_argument('--name', help='Only this run block')
    sp_show.set_defaults(func=cmd_show)

    sp_train = subparsers.add_parser('train', help='Run a tuned example')
    sp_train.add_argument('-f', '--file', required=True, help='YAML file or shipped example name')
    sp_train.add_argument('--name', help='Only this run block')
    sp_train.add_argument('--framework', choices=['tf', 'tf2', 'torch'], help='Override config.framework')
    sp_train.add_argument('--config', help='JSON object deep-merged into config')
    sp_train.add_argument('--stop', help='JSON object merged into stop')
    sp_train.add_argument('--wandb-project', help='Log trial results to this WandB project')
    sp_train.add_argument('--dry-run', action='store_true', help='Print the experiment, do not run it')
    sp_train.set_defaults(func=cmd_train)

    sp_ax = subparsers.add_parser('ax-search', help='Constrained Ax search on Hartmann6')
    sp_ax.add_argument('--num-samples', type=int, default=10)
    sp_ax.add_argument('--max-concurrent', type=int, default=4)
    sp_ax.add_argument('--iterations', type=int, default=100)
    sp_ax.add_argument('--storage-path', help='Where Ray Tune keeps results')
    sp_ax.set_defaults(func=cmd_ax_search)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``rltune`` CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s %(message)s')
    else:
        logging.basicConfig(level=logging.INFO, format='%(message)s')

    if not hasattr(args, 'func'):
        parser.print_help()
        return 0
    try:
        return args.func(args)
    except CLIError as exc:
        print(f'Error: {exc}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
