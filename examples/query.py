"""Query an exported diff log - placement activity per cell and per color."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <export_dir> [top_n]")
        print("Example: place-replay export out/ && python query.py out/ 10")
        sys.exit(1)

    export_dir = Path(sys.argv[1])
    top_n = int(sys.argv[2]) if len(sys.argv) > 2 else 10

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW diffs AS SELECT * FROM '{export_dir}/diffs.parquet'")

    # Most contested cells, with the color that currently holds each one
    sql = f"""
    SELECT
        d.offset,
        COUNT(*) AS placements,
        arg_max(d.pixel, d.seq) AS current_pixel,
        to_timestamp(MAX(d.timestamp_ms) / 1000) AS last_placed
    FROM diffs d
    GROUP BY d.offset
    ORDER BY placements DESC, d.offset
    LIMIT {top_n}
    """

    print(f"--- Most contested cells (top {top_n}) ---\n")
    df = con.execute(sql).fetchdf()
    if df.empty:
        print("No placements recorded.")
        return
    for _, row in df.iterrows():
        print(f"CELL {row['offset']}: {row['placements']} placements, now {row['current_pixel']}")
        print(f"  Last placed: {row['last_placed']}")

    print("\n--- Placements per color ---\n")
    colors = con.execute(
        "SELECT pixel, COUNT(*) AS n FROM diffs GROUP BY pixel ORDER BY n DESC, pixel"
    ).fetchall()
    for pixel, n in colors:
        print(f"{pixel:<10} {n}")


if __name__ == "__main__":
    main()
