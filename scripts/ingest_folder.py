#!/usr/bin/env python3
"""
Parse every log file and archive in a folder and print one line per
application.

Features:
- Format auto-detection per file and per archive member
- Nested zip/gzip/7z archives
- Rotated, dated and versioned files merged into one application

Usage: python scripts/ingest_folder.py [path]
"""

import sys
import time
from pathlib import Path
from typing import Any, Dict

# Add the api package to path
sys.path.insert(0, str(Path(__file__).parent.parent / "apps" / "api"))

from logsync.core.config import settings
from logsync.services.ingest_service import IngestService


class SimpleProgress:
    """Simple progress tracker without external dependencies."""

    def __init__(self):
        self.start_time = time.time()
        self.entries = 0

    def update(self, current: int, total: int, message: str, metadata: Dict[str, Any]):
        phase = metadata.get("phase", "")

        if phase == "ingesting":
            self.entries += metadata.get("entries", 0)
            elapsed = time.time() - self.start_time
            rate = self.entries / elapsed if elapsed > 0 else 0
            print(f"[{current}/{total}] 📁 {metadata.get('file', '')} | Total: {self.entries:,} entries | {rate:.0f}/sec")

        elif phase == "complete":
            elapsed = time.time() - self.start_time
            print(f"\n✅ All files processed in {elapsed:.1f}s")


def main():
    if len(sys.argv) > 1:
        folder = Path(sys.argv[1])
    else:
        folder = settings.logs_folder_resolved

    print("=" * 70)
    print("🚀 LOG INGESTION")
    print("=" * 70)
    print(f"📂 Source:    {folder}")
    print("=" * 70)
    print()

    tracker = SimpleProgress()
    service = IngestService()
    result = service.group_by_application([folder], progress_callback=tracker.update)

    print()
    print("=" * 70)
    print("📊 APPLICATIONS")
    print("=" * 70)
    for name, group in sorted(result.groups.items()):
        timestamps = [e.timestamp for e in group.entries if e.timestamp is not None]
        span = f"{min(timestamps)} → {max(timestamps)}" if timestamps else "no timestamps"
        print(f"{name:<30} {len(group.entries):>10,} entries  {group.file_count:>3} files  {span}")
    print("=" * 70)

    if result.errors:
        print(f"\n⚠️  {len(result.errors)} errors:")
        for e in result.errors[:5]:
            print(f"   • {e[:80]}")
        if len(result.errors) > 5:
            print(f"   ... and {len(result.errors) - 5} more")


if __name__ == "__main__":
    main()
