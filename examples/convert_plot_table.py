#!/usr/bin/env python3
"""
Example: Converting Plot Volumes to Biomass

This example demonstrates converting gross merchantable volume to
above-ground biomass with PyV2B, first for a single stand and then for a
table of inventory plots.

The workflow covers:
1. Converting one stand with convert_volume_to_biomass()
2. Building a plot table with volume, taxon, jurisdiction and ecozone
3. Converting the whole table with convert_volume_table()
4. Summarising biomass by taxon
5. Optionally writing the result to CSV

Usage:
    python examples/convert_plot_table.py
    python examples/convert_plot_table.py /path/to/plots.csv
    python examples/convert_plot_table.py /path/to/plots.csv --output biomass.csv

An input CSV needs the columns volume, species, jurisdiction and ecozone.

Requirements:
    - pyv2b (this package)
    - pandas
    - rich (for terminal output)
"""
import argparse
import sys
from pathlib import Path
from typing import Optional

import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add src to path for pyv2b imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pyv2b import (
    BIOMASS_COMPONENTS,
    V2BError,
    convert_volume_table,
    convert_volume_to_biomass,
    get_ecozone_name,
)

console = Console()


def create_mock_plots() -> pd.DataFrame:
    """Plots covering every key in the bundled sample tables."""
    return pd.DataFrame({
        'plot_id': ['BC-001', 'BC-002', 'BC-003', 'AB-001', 'AB-002'],
        'volume': [350.0, 85.0, 210.0, 120.0, 40.0],
        'species': ['PINU.CON', 'PINU.CON', 'PINU.CON.LAT', 'POPU.TRE', 'POPU.TRE'],
        'jurisdiction': ['BC', 'BC', 'BC', 'AB', 'AB'],
        'ecozone': [4, 4, 4, 9, 9],
    })


def show_single_stand() -> None:
    console.print("\n[bold]Step 1: Convert a Single Stand[/bold]")
    result = convert_volume_to_biomass(350, species="PINU.CON", jurisdiction="BC", ecozone=4)

    table = Table(title=f"350 m3/ha PINU.CON, BC, {get_ecozone_name(4)}")
    table.add_column("Component", style="cyan")
    table.add_column("Biomass (t/ha)", justify="right")
    for name in BIOMASS_COMPONENTS:
        table.add_row(name, f"{getattr(result, name):.2f}")
    console.print(table)


def convert_plots(plots: pd.DataFrame, output: Optional[Path]) -> None:
    console.print("\n[bold]Step 2: Plot Table[/bold]")
    console.print(plots)

    console.print("\n[bold]Step 3: Convert the Table[/bold]")
    try:
        biomass = convert_volume_table(plots)
    except V2BError as e:
        console.print(f"[red]Conversion failed: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]Converted {len(biomass):,} plots[/green]")

    console.print("\n[bold]Step 4: Biomass by Taxon[/bold]")
    by_taxon = biomass.groupby('species')[['volume', 'b_total', 'b_foliage']].sum()
    table = Table()
    table.add_column("Taxon", style="cyan")
    table.add_column("Volume (m3/ha)", justify="right")
    table.add_column("Total (t/ha)", justify="right")
    table.add_column("Foliage (t/ha)", justify="right")
    for species, row in by_taxon.iterrows():
        table.add_row(species, f"{row['volume']:.1f}", f"{row['b_total']:.2f}",
                      f"{row['b_foliage']:.2f}")
    console.print(table)

    if output:
        biomass.to_csv(output, index=False)
        console.print(f"\n[green]Results saved to {output}[/green]")


def main():
    parser = argparse.ArgumentParser(description="Convert plot volumes to biomass")
    parser.add_argument("plots", nargs="?", type=Path, help="Plot CSV (default: mock plots)")
    parser.add_argument("--output", type=Path, help="Write converted plots to CSV")
    args = parser.parse_args()

    console.print(Panel.fit(
        "[bold]PyV2B Example[/bold]\nVolume-to-biomass conversion",
        border_style="blue",
    ))

    show_single_stand()
    plots = pd.read_csv(args.plots) if args.plots else create_mock_plots()
    convert_plots(plots, args.output)


if __name__ == "__main__":
    main()
