#!/usr/bin/env python3
"""
Helium 10 Brand Revenue Runner

Walks the brands CSV in file order, searches every brand that has not been
processed yet and writes the revenue (or a note) back to the CSV.

Features:
- Resumable: rows that already have a Revenue or a Note are skipped
- The whole CSV is saved after every searched brand
- On an unexpected failure the current progress is saved and the run stops

Usage:
    # First-time login (saves auth.json)
    python helium10_session_runner.py --setup

    # Fill in revenues
    python helium10_session_runner.py --csv brands.csv

    # Show progress without opening a browser
    python helium10_session_runner.py --status --csv brands.csv
"""

import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from helium10_revenue_fetcher import (
    ERROR_SENTINEL,
    FetchConfig,
    fetch_brand_revenue,
    open_search_page,
    setup_session,
)
from helium10_row_store import (
    NOTE_ERROR,
    NOTE_NO_REVENUE,
    BrandRow,
    RowState,
    load_rows,
    read_rows,
    rows_to_frame,
    save_rows,
)

COMMENT_PATTERN = re.compile(r"\s*\(.*?\)\s*")


class BrandOutcome(Enum):
    """What happened to a row during this run"""
    SKIPPED = "skipped"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    FAILED = "failed"


@dataclass
class RunSummary:
    """Results of one pass over the CSV"""
    total_rows: int = 0
    resolved: List[str] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    fault: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    def __post_init__(self):
        if self.started_at is None:
            self.started_at = datetime.now().isoformat()

    @property
    def searched(self) -> int:
        return len(self.resolved) + len(self.unresolved) + len(self.failed)


def normalize_brand(raw_brand: str) -> str:
    """
    Clean a brand name before searching.

    Comments in parentheses are dropped and ALL CAPS names are converted to
    title case, e.g. "ACME CORP (distributor)" -> "Acme Corp".
    """
    formatted = COMMENT_PATTERN.sub(" ", raw_brand).strip()

    if formatted == formatted.upper():
        words = formatted.split(" ")
        formatted = " ".join(word[:1].upper() + word[1:].lower() for word in words)

    return formatted


def should_search(row: BrandRow) -> bool:
    """A row is searched only if it has a brand and no Revenue or Note yet"""
    return bool(row.brand.strip()) and row.revenue == "" and row.note == ""


def apply_fetch_result(row: BrandRow, result: str) -> BrandOutcome:
    """Write a fetcher result into the row and report the outcome"""
    if result == ERROR_SENTINEL:
        row.note = NOTE_ERROR
        return BrandOutcome.FAILED
    if not result or result == "-":
        row.note = NOTE_NO_REVENUE
        return BrandOutcome.UNRESOLVED
    row.revenue = result
    return BrandOutcome.RESOLVED


def reset_failed_rows(rows: List[BrandRow]) -> int:
    """Clear the error note on failed rows so they are searched again"""
    reset = 0
    for row in rows:
        if row.state == RowState.FAILED:
            row.note = ""
            reset += 1
    return reset


def process_rows(rows: List[BrandRow], fetch: Callable[[str], str],
                 save: Callable[[List[BrandRow]], None]) -> RunSummary:
    """
    Search every unprocessed row and persist progress.

    fetch(brand) returns a revenue string, "" or ERROR_SENTINEL; save(rows)
    writes the whole row set. Any exception from fetch or save stops the loop
    after a best-effort save.
    """
    summary = RunSummary(total_rows=len(rows))

    try:
        for index, row in enumerate(rows):
            brand = row.brand.strip()

            if not should_search(row):
                print(f"⏭️  Skipping brand: {brand}, it was searched before ({index}/{len(rows)})")
                summary.skipped.append(brand)
                continue

            formatted_brand = normalize_brand(brand)
            print(f"🔍 Searching brand: {formatted_brand} ({index}/{len(rows)})")
            result = fetch(formatted_brand)
            outcome = apply_fetch_result(row, result)

            if outcome == BrandOutcome.FAILED:
                print(f"❌ Error retrieving revenue for brand: {formatted_brand}")
                summary.failed.append(brand)
                continue

            if outcome == BrandOutcome.RESOLVED:
                print(f"✅ Found revenue for brand {formatted_brand}: {result}")
                summary.resolved.append(brand)
            else:
                print(f"ℹ️  No revenue found for brand {formatted_brand}")
                summary.unresolved.append(brand)

            save(rows)
    except Exception as e:
        print(f"❌ Error during brand search: {e}, saving processed rows to CSV")
        summary.fault = str(e) or e.__class__.__name__
        try:
            save(rows)
        except Exception as save_error:
            print(f"❌ Error saving CSV: {save_error}")

    print("💾 Finished searching brands, saving results...")
    save(rows)
    summary.completed_at = datetime.now().isoformat()
    return summary


def print_run_summary(summary: RunSummary):
    """Print the final results of a run"""
    print(f"\n🎯 FINAL RESULTS")
    print("=" * 50)
    print(f"✅ Revenue Found: {len(summary.resolved)} brands")
    print(f"ℹ️  No Revenue: {len(summary.unresolved)} brands")
    print(f"❌ Errors: {len(summary.failed)} brands")
    for brand in summary.failed[:10]:
        print(f"   • {brand}")
    if len(summary.failed) > 10:
        print(f"   ... and {len(summary.failed) - 10} more")
    print(f"⏭️  Skipped: {len(summary.skipped)} brands")

    if summary.searched:
        rate = len(summary.resolved) / summary.searched * 100
        print(f"\n📈 Success Rate: {rate:.1f}% ({len(summary.resolved)}/{summary.searched})")

    if summary.fault:
        print(f"\n💥 Run stopped early: {summary.fault}")
        print("💡 Progress was saved. Run again to continue with the remaining brands.")
    print("=" * 50)


def print_status_table(rows: List[BrandRow]):
    """Print the current progress of the CSV"""
    print(f"\n📊 BRAND REVENUE PROGRESS")
    print("=" * 80)
    if not rows:
        print("No brands loaded")
        print("=" * 80)
        return

    print(rows_to_frame(rows).to_string(index=False))
    print("-" * 80)
    counts = {}
    for row in rows:
        counts[row.state.value] = counts.get(row.state.value, 0) + 1
    print(f"Summary: {' | '.join(f'{state}: {count}' for state, count in sorted(counts.items()))}")
    print("=" * 80)


def run_revenue_session(config: FetchConfig, retry_errors: bool = False) -> RunSummary:
    """Load the CSV, search all unprocessed brands in one browser session and save"""
    rows, load_error = read_rows(config.csv_path)

    # Never save over a file that could not be read, or the user's rows would be lost
    if load_error:
        print(f"❌ Could not read {config.csv_path}, leaving it untouched")
        return RunSummary(fault=load_error)
    if not rows:
        print(f"ℹ️  No brands to process in {config.csv_path}")
        return RunSummary()

    if retry_errors:
        reset = reset_failed_rows(rows)
        print(f"♻️  Reset {reset} failed brands for retry")

    print(f"\n🚀 Starting revenue search for {len(rows)} brands")
    print(f"🔧 Configuration:")
    print(f"   • CSV file: {config.csv_path}")
    print(f"   • Headless mode: {config.headless}")
    print(f"   • Settle delay: {config.settle_seconds}s | Result timeout: {config.result_timeout_seconds}s")
    print("=" * 60)

    def save(current_rows):
        save_rows(config.csv_path, current_rows)

    with open_search_page(config) as page:
        summary = process_rows(
            rows,
            fetch=lambda brand: fetch_brand_revenue(page, brand, config),
            save=save,
        )

    print_run_summary(summary)
    return summary


def _pop_option(argv: List[str], flag: str) -> Optional[str]:
    """Remove "--flag value" from argv and return the value"""
    if flag not in argv:
        return None
    index = argv.index(flag)
    if index + 1 >= len(argv):
        raise ValueError(f"Value required after {flag}")
    value = argv[index + 1]
    del argv[index:index + 2]
    return value


def _pop_flag(argv: List[str], flag: str) -> bool:
    if flag in argv:
        argv.remove(flag)
        return True
    return False


def parse_args(argv: List[str], config: FetchConfig) -> dict:
    """Apply command line options to config and return the selected command"""
    argv = list(argv)
    options = {
        "command": "run",
        "retry_errors": False,
    }

    if _pop_flag(argv, "--help") or _pop_flag(argv, "-h"):
        options["command"] = "help"
        return options

    csv_path = _pop_option(argv, "--csv")
    if csv_path:
        config.csv_path = csv_path

    settle = _pop_option(argv, "--settle")
    if settle is not None:
        config.settle_seconds = float(settle)

    timeout = _pop_option(argv, "--timeout")
    if timeout is not None:
        config.result_timeout_seconds = float(timeout)

    if _pop_flag(argv, "--headless"):
        config.headless = True
    options["retry_errors"] = _pop_flag(argv, "--retry-errors")

    if _pop_flag(argv, "--setup"):
        options["command"] = "setup"
    elif _pop_flag(argv, "--status"):
        options["command"] = "status"

    if argv:
        raise ValueError(f"Unknown arguments: {' '.join(argv)}")
    return options


def print_usage():
    """Print CLI usage information"""
    print("""
🎯 Helium 10 Brand Revenue Runner

USAGE:
  First-time setup (log in and save the session):
    python helium10_session_runner.py --setup

  Fill in revenues:
    python helium10_session_runner.py [--csv brands.csv] [options]

  Show progress:
    python helium10_session_runner.py --status [--csv brands.csv]

OPTIONS:
  --csv <path>          Brands CSV with Brand, Revenue, Note columns (default: ./brands.csv)
  --headless            Run the browser in the background
  --settle <seconds>    Wait after opening the search page (default: 3)
  --timeout <seconds>   Maximum wait for search results (default: 10)
  --retry-errors        Search brands marked "Error retrieving revenue" again

ENVIRONMENT:
  HELIUM10_BRANDS_CSV, HELIUM10_STORAGE_STATE, HELIUM10_ACCOUNT_ID, HELIUM10_SEARCH_URL,
  HELIUM10_SETTLE_SECONDS, HELIUM10_RESULT_TIMEOUT_SECONDS, HELIUM10_HEADLESS
""")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI interface"""
    if argv is None:
        argv = sys.argv[1:]

    config = FetchConfig.from_env()
    try:
        options = parse_args(argv, config)
    except ValueError as e:
        print(f"❌ {e}")
        print_usage()
        return 2

    command = options["command"]
    if command == "help":
        print_usage()
        return 0
    if command == "setup":
        setup_session(config)
        return 0
    if command == "status":
        print_status_table(load_rows(config.csv_path))
        return 0

    if config.headless:
        print("🤖 Running in headless mode (background)")
    else:
        print("🖥️  Running with visible browser window")

    summary = run_revenue_session(config, retry_errors=options["retry_errors"])
    return 1 if summary.fault else 0


if __name__ == "__main__":
    sys.exit(main())
