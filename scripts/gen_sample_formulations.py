#!/usr/bin/env python3
"""Sample formulation workbook generator.

Writes synthetic ingredient lists in the layout customers upload:
- Row 1: Header row (header wording varies per --header-style)
- Row 2+: One ingredient per row

Concentrations are drawn so that each formulation sums to 100%. --defects
injects rows the ingestion pipeline reports (blank INCI names, text in the
concentration column, out of range values) for manual review runs, and a large
--rows value doubles as a throughput check.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

INGREDIENTS: list[tuple[str, str, str]] = [
    ("Aqua", "7732-18-5", "Solvent"),
    ("Glycerin", "56-81-5", "Humectant"),
    ("Cetearyl Alcohol", "67762-27-0", "Emollient"),
    ("Caprylic/Capric Triglyceride", "65381-09-1", "Emollient"),
    ("Niacinamide", "98-92-0", "Skin conditioning"),
    ("Sodium Hyaluronate", "9067-32-7", "Humectant"),
    ("Tocopherol", "59-02-9", "Antioxidant"),
    ("Phenoxyethanol", "122-99-6", "Preservative"),
    ("Xanthan Gum", "11138-66-2", "Viscosity controlling"),
    ("Citric Acid", "77-92-9", "pH adjuster"),
    ("Panthenol", "81-13-0", "Skin conditioning"),
    ("Allantoin", "97-59-6", "Soothing"),
]

HEADER_STYLES: dict[str, list[str]] = {
    "standard": ["INCI Name", "CAS Number", "Concentration (%)", "Function"],
    "short": ["Ingredient", "CAS", "%", "Role"],
    "verbose": ["INCI_Name", "CAS_Number", "Percentage", "Purpose"],
}


def generate_formulation(rows: int, seed: int = 42, defects: int = 0) -> pd.DataFrame:
    """Generate one formulation as a DataFrame with canonical column names.

    The first ingredient (Aqua) takes whatever share is left so the total is
    exactly 100 before defects are injected.
    """
    rng = np.random.default_rng(seed)

    picks = [INGREDIENTS[0]] + [
        INGREDIENTS[1 + (i % (len(INGREDIENTS) - 1))] for i in range(rows - 1)
    ]
    minor = np.round(rng.uniform(0.05, 30.0 / max(rows - 1, 1), rows - 1), 2)
    water = round(100.0 - float(minor.sum()), 2)
    concentrations: list[object] = [water, *minor.tolist()]

    data = {
        "inci_name": [p[0] for p in picks],
        "cas_number": [p[1] for p in picks],
        "concentration": concentrations,
        "function": [p[2] for p in picks],
    }
    df = pd.DataFrame(data).astype({"concentration": object})

    # 不良行は先頭 (Aqua) 以外のランダム位置に注入
    for k in range(min(defects, rows)):
        idx = int(rng.integers(1, rows)) if rows > 1 else 0
        kind = k % 3
        if kind == 0:
            df.at[idx, "inci_name"] = ""
        elif kind == 1:
            df.at[idx, "concentration"] = "n/a"
        else:
            df.at[idx, "concentration"] = 150
    return df


def create_workbook(
    output_path: Path,
    rows: int,
    header_style: str = "standard",
    seed: int = 42,
    defects: int = 0,
) -> None:
    """Write a formulation workbook with the chosen header wording."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = generate_formulation(rows, seed, defects)
    df.columns = HEADER_STYLES[header_style]

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Formulation", index=False)

    print(f"Created workbook: {output_path}")
    print(f"  Ingredients: {rows} (defects: {defects})")
    print(f"  Headers: {', '.join(HEADER_STYLES[header_style])}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic formulation workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One clean 10 ingredient formulation
  %(prog)s uploads/serum.xlsx --rows 10

  # Short headers with three defective rows
  %(prog)s uploads/cream.xlsx --rows 25 --header-style short --defects 3

  # Throughput check
  %(prog)s /tmp/large.xlsx --rows 5000
        """,
    )
    parser.add_argument("output", type=Path, help="Output workbook path")
    parser.add_argument("--rows", type=int, default=10, help="Number of ingredients (default: 10)")
    parser.add_argument(
        "--header-style",
        choices=sorted(HEADER_STYLES),
        default="standard",
        help="Header wording (default: standard)",
    )
    parser.add_argument("--defects", type=int, default=0, help="Number of defective rows to inject")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if args.defects < 0:
        print("Error: --defects must not be negative", file=sys.stderr)
        return 1

    try:
        create_workbook(args.output, args.rows, args.header_style, args.seed, args.defects)
    except OSError as e:
        print(f"\nError writing workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
