#!/usr/bin/env python3
"""
Sales Export Script

Exports the sales of a date range (whole days, inclusive) to CSV, in the same
format as the dashboard download.

Usage:
    python export_sales.py --start 2025-01-01 --end 2025-01-31
    python export_sales.py --start 2025-01-01 --end 2025-01-31 --output january.csv
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.errors import NotFoundError, ValidationError
from services.csv_export_service import export_filename, generate_sales_csv


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Export sales from Supabase database to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export January's sales to sales_2025-01-01_to_2025-01-31.csv
  python export_sales.py --start 2025-01-01 --end 2025-01-31

  # Export a single day to a chosen file
  python export_sales.py --start 2025-02-14 --end 2025-02-14 --output valentines.csv
        """
    )

    parser.add_argument(
        "--start",
        required=True,
        type=date.fromisoformat,
        help="First day to include (YYYY-MM-DD)"
    )

    parser.add_argument(
        "--end",
        required=True,
        type=date.fromisoformat,
        help="Last day to include (YYYY-MM-DD)"
    )

    parser.add_argument(
        "--output",
        "-o",
        help="Path to output CSV file (default: sales_<start>_to_<end>.csv)"
    )

    args = parser.parse_args()
    output = args.output or export_filename(args.start, args.end)

    try:
        print(f"Fetching sales from {args.start} to {args.end}...")
        csv_content = generate_sales_csv(args.start, args.end)

        with open(output, "w", newline="", encoding="utf-8") as f:
            f.write(csv_content)

        rows = csv_content.count("\n") - 1
        print()
        print("=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Sales exported: {rows}")
        print(f"Output file:    {output}")
        print("=" * 60)
        return 0

    except (NotFoundError, ValidationError) as e:
        print(str(e))
        return 1

    except KeyboardInterrupt:
        print("\n\nExport interrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
