"""
BOQ vs Drawings Reconciliation - CLI Entry Point

Commands:
    reconcile    - Reconcile BOQ and Drawing item files (JSON)
    demo         - Reconcile the built-in sample item sets
    init-config  - Write the default reconciliation policy YAML
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .alignment import run_reconciliation_engine
from .config import create_default_policy_yaml, load_policy
from .errors import ReconciliationError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def load_items(path: Path) -> list:
    """Load raw item records from a JSON list, or a JSON object with an 'items' list."""
    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('items')

    if not isinstance(data, list):
        raise ReconciliationError(f"{path} does not contain a list of item records")

    return data


def print_summary(summary: dict, output_dir: Path):
    print(f"\n{'='*60}")
    print("RECONCILIATION RESULT")
    print(f"{'='*60}")
    print(f"BOQ items: {summary['total_boq_items']}")
    print(f"Drawing items: {summary['total_drawing_items']}")
    print(f"Matched: {summary['matched_items']}")
    print(f"Alignment score: {summary['alignment_score']:.1f}%")
    print(f"Conflicts: {summary['conflicts']} ({summary['high_severity']} high severity)")
    for conflict_type, count in summary['by_type'].items():
        print(f"  - {conflict_type}: {count}")
    if summary['error']:
        print(f"\nWARNING: {summary['error']}")
    print(f"\nOutputs: {output_dir}/")
    print("  - conflicts.json")
    print("  - matches.json")
    print("  - conflicts.xlsx")
    print("  - reconciliation_report.md")


def cmd_reconcile(args):
    """Reconcile BOQ and Drawing item files."""
    output_dir = Path(args.output)

    try:
        boq_items = load_items(Path(args.boq))
        drawing_items = load_items(Path(args.drawings))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read item records: {e}")
        return 1

    policy = load_policy(Path(args.config) if args.config else None)
    project_id = args.project_id or policy.project_name or Path(args.boq).stem

    summary = run_reconciliation_engine(project_id, boq_items, drawing_items, output_dir, policy)
    print_summary(summary, output_dir)
    return 0


def cmd_demo(args):
    """Reconcile the sample item sets."""
    from .sample_data import SAMPLE_PROJECT_ID, sample_items

    output_dir = Path(args.output)
    boq_items, drawing_items = sample_items()

    summary = run_reconciliation_engine(SAMPLE_PROJECT_ID, boq_items, drawing_items, output_dir)
    print_summary(summary, output_dir)
    return 0


def cmd_init_config(args):
    """Write the default policy file."""
    path = create_default_policy_yaml(Path(args.output), args.project_id or "")
    print(f"Policy file: {path}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="boqrecon",
        description="BOQ vs Drawings Reconciliation Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reconcile two item files
  python -m boqrecon reconcile --boq boq.json --drawings drawings.json --output ./out

  # Use a custom classification policy
  python -m boqrecon reconcile --boq boq.json --drawings drawings.json --config reconciliation_policy.yaml

  # Run on the sample data
  python -m boqrecon demo --output ./out/demo
        """
    )

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Reconcile command
    rec_parser = subparsers.add_parser('reconcile', help='Reconcile BOQ and Drawing item files')
    rec_parser.add_argument('--boq', '-b', required=True,
                            help='JSON file of raw BOQ item records')
    rec_parser.add_argument('--drawings', '-d', required=True,
                            help='JSON file of raw Drawing item records')
    rec_parser.add_argument('--output', '-o', default='./out',
                            help='Output directory')
    rec_parser.add_argument('--config', '-c',
                            help='Reconciliation policy YAML')
    rec_parser.add_argument('--project-id', '-p',
                            help='Project identifier for reports')
    rec_parser.set_defaults(func=cmd_reconcile)

    # Demo command
    demo_parser = subparsers.add_parser('demo', help='Reconcile the sample item sets')
    demo_parser.add_argument('--output', '-o', default='./out/demo',
                             help='Output directory')
    demo_parser.set_defaults(func=cmd_demo)

    # Init-config command
    init_parser = subparsers.add_parser('init-config', help='Write default policy YAML')
    init_parser.add_argument('--output', '-o', default='.',
                             help='Directory for reconciliation_policy.yaml')
    init_parser.add_argument('--project-id', '-p',
                             help='Project identifier written into the file')
    init_parser.set_defaults(func=cmd_init_config)

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except ReconciliationError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
