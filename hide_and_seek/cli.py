"""
Hide and Seek state CLI

Inspects or resets the durable state file written by a file-backed
extension (see HideAndSeekExtension.from_files).
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from .constants import HIDDEN_KEY
from .extension import setup_logging
from .persistence import JsonStateStore
from .services.snapshot_store import SnapshotStore


class StateCLI:
    """CLI over the JSON state file."""

    def __init__(self):
        self.store: Optional[JsonStateStore] = None
        self.snapshot_store: Optional[SnapshotStore] = None

    def open(self, state_file: Optional[Path]) -> None:
        self.store = JsonStateStore(state_file)
        self.snapshot_store = SnapshotStore(self.store)

    async def cmd_status(self, args) -> int:
        """Show the hidden flag, hidden documents and known positions."""
        snapshot = self.snapshot_store.load_snapshot()
        positions = self.snapshot_store.load_positions()
        summary = {
            "state_file": str(self.store.state_file),
            "hidden": self.store.get(HIDDEN_KEY) is True,
            "hidden_documents": snapshot.document_ids if snapshot else [],
            "active_index": snapshot.active_index if snapshot else -1,
            "known_positions": len(positions),
        }

        if args.json:
            print(json.dumps(summary, indent=2))
            return 0

        print(f"State file: {summary['state_file']}")
        print(f"Hidden: {'yes' if summary['hidden'] else 'no'}")
        for document_id in summary["hidden_documents"]:
            print(f"  {document_id}")
        print(f"Known positions: {summary['known_positions']}")
        return 0

    async def cmd_reset(self, args) -> int:
        """Forget the hidden snapshot (and optionally all positions)."""
        ok = await self.snapshot_store.clear_snapshot()
        if args.positions:
            ok = await self.snapshot_store.save_positions({}) and ok

        if not ok:
            print(f"Failed to reset {self.store.state_file}", file=sys.stderr)
            return 1

        print("Hidden state cleared" + (" (positions too)" if args.positions else ""))
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parse arguments and dispatch."""
        parser = argparse.ArgumentParser(
            description="Inspect or reset hide-and-seek state",
            prog="hide-and-seek-state",
        )
        parser.add_argument("--state-file", type=Path, help="State file (default: ~/.local/share/hide-and-seek/state.json)")
        parser.add_argument("--log-level", help="Log level (default: LOG_LEVEL environment variable or INFO)")

        subparsers = parser.add_subparsers(dest="command", help="Command to execute")

        status_parser = subparsers.add_parser("status", help="Show hidden documents and known positions")
        status_parser.add_argument("--json", action="store_true", help="Output as JSON")

        reset_parser = subparsers.add_parser("reset", help="Clear the hidden snapshot")
        reset_parser.add_argument("--positions", action="store_true", help="Also forget remembered positions")

        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return 1

        setup_logging(args.log_level)
        self.open(args.state_file)

        cmd_map = {
            "status": self.cmd_status,
            "reset": self.cmd_reset,
        }

        try:
            return asyncio.run(cmd_map[args.command](args))
        except KeyboardInterrupt:
            print("\nInterrupted")
            return 130


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    sys.exit(StateCLI().run(argv))
