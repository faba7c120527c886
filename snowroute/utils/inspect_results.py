"""
Small helper to inspect the route table written by a pipeline run.

The goal is to quickly check that every route got a score, that the
class counts look sane and which route came out safest.
"""
import sys
from pathlib import Path

import pandas as pd
import pyarrow.parquet as pq

from ..config import NO_COVERAGE_DANGER_INDEX, RESULTS_DIR, ROUTE_TABLE_NAME


def inspect_results(results_dir) -> pd.DataFrame:
    """
    Print basic information about a route table.

    This shows the schema, number of rows, the routes ordered by danger
    index and the safest route. Returns the table as a DataFrame, empty
    when nothing was found.
    """
    path = Path(results_dir) / ROUTE_TABLE_NAME
    print(f"\nInspecting {path}")

    if not path.exists():
        print("  Parquet file not found!")
        return pd.DataFrame()

    table = pq.read_table(path)
    print(f"  Schema: {table.schema}")
    print(f"  Rows: {table.num_rows}")

    df = table.to_pandas()
    if df.empty:
        print("  No rows in table.")
        return df

    df = df.sort_values("danger_index", kind="mergesort")
    for _, row in df.iterrows():
        counts = "/".join(str(row[f"class_{cls}"]) for cls in (1, 2, 3, 4))
        if row["danger_index"] >= NO_COVERAGE_DANGER_INDEX:
            score = "no coverage"
        else:
            score = f"{row['danger_index']:.3f}"
        print(f"  {row['name']}: {score} (pixels per class {counts})")

    safest = df[df["is_safest"]]
    if safest.empty:
        print("  No safest route (no route has coverage)")
    else:
        print(f"  Safest: {', '.join(str(n) for n in safest['name'])}")

    return df


def main() -> None:
    """Inspect the given results directory, or the default one."""
    results_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else RESULTS_DIR
    inspect_results(results_dir)


if __name__ == "__main__":
    main()
