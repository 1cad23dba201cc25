# =============================================================================
# AGIP XP TRACKER
# Module: analyzer/__main__.py
# Purpose: CLI entry point
# =============================================================================
#
# COMMANDS:
#   run            - Fetch, classify, match, validate and update the ledger
#   pending        - List pending XP drops (deployment order)
#   status         - Ledger status breakdown
#   mark-deployed  - Record a deployment performed outside this tool
#   inspect        - Explain the quorum/passing verdict for one proposal
#
# USAGE:
#   python -m analyzer run
#   python -m analyzer run --dry-run --limit 100
#   python -m analyzer pending
#   python -m analyzer mark-deployed --agip 153 --tx 0xabc...
#   python -m analyzer inspect 0xfcf7bb...
#
# EXIT CODES:
#   0 success, 1 any failure, 130 interrupted
#
# =============================================================================

import argparse
import logging
import sys
from typing import List, Optional

from collector.client import SnapshotClient
from pairing.outcome import OutcomeClassifier
from pairing.sequence import SequenceGapError, SequenceParser
from shared.config import ConfigError, TrackerConfig, load_config
from shared.logging_config import AuditLogger, setup_logging
from tracking.reconciler import mark_deployed, pending_entries, status_counts
from tracking.storage import LedgerStorage
from .analyzer import Analyzer
from .report import format_sequence_report

logger = logging.getLogger("analyzer")


def _client(config: TrackerConfig) -> SnapshotClient:
    return SnapshotClient(
        endpoint=config.snapshot_endpoint,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
    )


# =============================================================================
# COMMANDS
# =============================================================================


def cmd_run(args, config: TrackerConfig) -> int:
    """Run the full pipeline."""
    audit = None if args.dry_run else AuditLogger(config.log_path)
    analyzer = Analyzer(config, client=_client(config), audit=audit)

    try:
        stats = analyzer.run(dry_run=args.dry_run, limit=args.limit)
    except SequenceGapError as e:
        print("\n".join(format_sequence_report(e.report)))
        raise
    finally:
        if audit is not None:
            audit.close()

    print("\n" + "=" * 60)
    print("RUN SUMMARY")
    print("=" * 60)
    print(f"Proposals fetched:  {stats.total_fetched}")
    print(f"Qualified:          {stats.total_qualified}")
    print(f"  Sigprops:         {stats.sigprops_count}")
    print(f"  Coreprops:        {stats.coreprops_count}")
    print(f"Matched pairs:      {stats.matched_pairs_count}")
    print(f"Duration:           {stats.run_duration_seconds:.1f}s")
    print()

    print("PASSED AGIPs (Sigprop + Coreprop):")
    parser = SequenceParser(config.proposal_tag)
    numbered = sorted(
        stats.pairs,
        key=lambda p: parser.pair_number(p) or 0,
        reverse=True,
    )
    for pair in numbered:
        number = parser.pair_number(pair)
        print(
            f"  AGIP {number if number is not None else '?'}: "
            f"{parser.clean_title(pair.coreprop.title)} "
            f"({pair.similarity_percentage:.1f}%)"
        )
    print()

    for line in format_sequence_report(stats.sequence):
        print(line)
    print()

    summary = stats.reconcile
    print("Tracking ledger:")
    print(f"  New entries:      {summary.created}")
    print(f"  Updated entries:  {summary.updated}")
    print(f"  Scripts written:  {summary.scripts_written}")
    for status, count in summary.status_counts.items():
        print(f"  {status}: {count}")
    print()

    if stats.matched_pairs_count == 0:
        print("No matched pairs found. Check quorum/passing criteria and matching thresholds.")

    if args.dry_run:
        print("[DRY RUN - No files written]")
    else:
        print(f"Results saved to: {stats.results_path}")
        print(f"Ledger saved to:  {stats.ledger_path}")

    print("=" * 60)
    return 0


def cmd_pending(args, config: TrackerConfig) -> int:
    """List pending XP drops, lowest AGIP first."""
    ledger = LedgerStorage(config.ledger_path).load()
    pending = pending_entries(ledger)

    print(f"\nFound {len(pending)} pending AGIPs:")
    for entry in pending:
        print(f"  AGIP {entry.agip_number}: {entry.title}")
        if args.verbose:
            print(f"      sigprop:  {entry.sigprop_id}  {entry.sigprop_script or ''}")
            print(f"      coreprop: {entry.coreprop_id}  {entry.coreprop_script or ''}")
    print()
    return 0


def cmd_status(args, config: TrackerConfig) -> int:
    """Show the ledger status breakdown."""
    ledger = LedgerStorage(config.ledger_path).load()

    print("\n" + "=" * 40)
    print("XP DROP TRACKING STATUS")
    print("=" * 40)
    print(f"Total tracked AGIPs: {len(ledger)}")
    for status, count in status_counts(ledger).items():
        print(f"  {status}: {count}")
    print()
    return 0


def cmd_mark_deployed(args, config: TrackerConfig) -> int:
    """Record an external deployment in the ledger."""
    parser = SequenceParser(config.proposal_tag)
    key = parser.ledger_key(args.agip)
    storage = LedgerStorage(config.ledger_path)
    ledger = storage.load()

    try:
        entry = mark_deployed(ledger, key, args.tx)
    except KeyError:
        logger.error(f"AGIP {args.agip} is not tracked in {config.ledger_path}")
        return 1

    storage.save(ledger)

    audit = AuditLogger(config.log_path)
    try:
        audit.log_event("MARK_DEPLOYED", key, {"tx_hash": entry.tx_hash})
    finally:
        audit.close()

    print(f"AGIP {args.agip} marked as deployed ({entry.deployed_date})")
    return 0


def cmd_inspect(args, config: TrackerConfig) -> int:
    """Fetch one proposal and explain its verdict."""
    proposal = _client(config).fetch_proposal(args.proposal_id)
    if proposal is None:
        print(f"Proposal not found: {args.proposal_id}")
        return 1

    classifier = OutcomeClassifier.from_config(config)
    outcome = classifier.classify(proposal)

    print(f"\nTitle:          {proposal.title}")
    print(f"Track:          {classifier.track_of(proposal).value}")
    print(f"State:          {proposal.state}")
    print(f"Votes:          {proposal.votes}")
    print(f"Scores total:   {proposal.scores_total:,.2f}")
    print(f"Scores:         {list(proposal.scores)}")
    print(f"Quorum:         {outcome.quorum_threshold:,.0f}"
          f"{'' if proposal.quorum > 0 else ' (fallback)'}")
    print()
    print("Voting analysis:")
    print(f"  Number of options:     {len(proposal.scores)}")
    print(f"  Required differential: {outcome.required_differential:.0f}%")
    print(f"  Winning percentage:    {outcome.winning_percentage:.1f}%")
    print(f"  Second highest:        {outcome.second_percentage:.1f}%")
    print(f"  Actual differential:   {outcome.differential:.1f}%")
    print()
    print(f"Reached quorum: {outcome.quorum_reached}")
    print(f"Passed:         {outcome.passed}")
    print(f"Qualified:      {outcome.qualified}")
    print()
    return 0


# =============================================================================
# MAIN
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m analyzer",
        description="AGIP XP Tracker - pair sigprops with coreprops and track XP drops",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m analyzer run
  python -m analyzer run --dry-run
  python -m analyzer -v pending
  python -m analyzer mark-deployed --agip 153 --tx 0xabc
  python -m analyzer inspect 0xfcf7bb54...

Note: This tool never deploys anything on-chain. It only reads
      deployment markers left by the deployment task.
        """,
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to tracker.yaml (default: config/tracker.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to console only",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the full pipeline")
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't write results, scripts or ledger",
    )
    run_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum proposals to fetch (default: from config)",
    )
    run_parser.set_defaults(func=cmd_run)

    pending_parser = subparsers.add_parser("pending", help="List pending XP drops")
    pending_parser.set_defaults(func=cmd_pending)

    status_parser = subparsers.add_parser("status", help="Ledger status breakdown")
    status_parser.set_defaults(func=cmd_status)

    mark_parser = subparsers.add_parser(
        "mark-deployed",
        help="Record an XP drop deployed outside this tool",
    )
    mark_parser.add_argument("--agip", type=int, required=True, help="AGIP number")
    mark_parser.add_argument(
        "--tx",
        action="append",
        default=[],
        help="Transaction hash (repeatable)",
    )
    mark_parser.set_defaults(func=cmd_mark_deployed)

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Explain the quorum/passing verdict for one proposal",
    )
    inspect_parser.add_argument("proposal_id", help="Snapshot proposal id (0x...)")
    inspect_parser.set_defaults(func=cmd_inspect)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    level_name = "DEBUG" if args.verbose else config.log_level.upper()
    setup_logging(
        level=getattr(logging, level_name, logging.INFO),
        file_output=not args.no_log_file,
        log_dir=config.log_path,
    )

    try:
        return args.func(args, config)

    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        return 130

    except SequenceGapError as e:
        logger.error(f"CRITICAL: {e}")
        return 1

    except Exception as e:
        logger.exception(f"Run failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
