#!/usr/bin/env python
"""
PyV2B Validation Suite

Runs the reference example and checks the model invariants for every
taxon/jurisdiction/ecozone key in a parameter dataset:

- proportions of stem wood, bark, branches and foliage sum to one
- bark, branch and foliage biomass are consistent with total biomass
- b_nm = b_m + b_n and b_snm = b_nm + b_s
- zero volume gives zero biomass

Usage:
    python validation/run_validation.py                   # bundled sample tables
    python validation/run_validation.py --data-dir DIR    # another dataset
    python validation/run_validation.py --output results.json
"""
import argparse
import json
import math
import sys
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add src to path for pyv2b imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pyv2b import (
    BIOMASS_COMPONENTS,
    ConfigLoader,
    ParameterResolver,
    V2BError,
    compute,
    convert_volume_to_biomass,
    get_config_loader,
    setup_logging,
)

console = Console()

TOLERANCE = 1e-9
VOLUMES = (0.0, 1.0, 10.0, 50.0, 100.0, 250.0, 350.0, 600.0)
REFERENCE_EXAMPLE = {'volume': 350, 'species': 'PINU.CON', 'jurisdiction': 'BC', 'ecozone': 4}


@dataclass
class ValidationResult:
    """Container for validation test results."""
    test_name: str
    key: str
    passed: bool
    message: str
    details: Optional[Dict[str, Any]] = None


class ValidationSuite:
    """Check model invariants over a parameter dataset."""

    def __init__(self, data_dir: Optional[Path] = None, verbose: bool = False):
        loader = ConfigLoader(data_dir) if data_dir else get_config_loader()
        self.dataset = loader.load_dataset()
        self.resolver = ParameterResolver(self.dataset)
        self.verbose = verbose
        self.results: List[ValidationResult] = []

    def _record(self, test_name: str, key: str, passed: bool, message: str,
                details: Optional[Dict[str, Any]] = None) -> None:
        self.results.append(ValidationResult(test_name, key, passed, message, details))
        if self.verbose and not passed:
            console.print(f"  [red]✗[/red] {test_name} [{key}]: {message}")

    def run_reference_example(self) -> Optional[Dict[str, float]]:
        """Convert the reference example, if the dataset has its key."""
        try:
            result = convert_volume_to_biomass(dataset=self.dataset, **REFERENCE_EXAMPLE)
        except V2BError as e:
            console.print(f"[yellow]Reference example not available: {e}[/yellow]")
            return None
        return result.to_dict()

    def check_key(self, taxon, jurisdiction, ecozone) -> None:
        key = f"{taxon} / {jurisdiction} / {ecozone}"
        try:
            bundle = self.resolver.resolve(taxon, jurisdiction, ecozone)
        except V2BError as e:
            self._record("resolution", key, False, str(e))
            return
        self._record("resolution", key, True, "ok")

        for volume in VOLUMES:
            result = compute(bundle, volume)

            total_p = result.p_stemwood + result.p_bark + result.p_branches + result.p_foliage
            self._record("proportions_sum", key, math.isclose(total_p, 1.0, abs_tol=TOLERANCE),
                         f"volume {volume}: sum {total_p:.12f}")

            consistent = all(
                math.isclose(getattr(result, f"b_{part}") / getattr(result, f"p_{part}"),
                             result.b_total, rel_tol=TOLERANCE, abs_tol=TOLERANCE)
                for part in ("bark", "branches", "foliage")
            )
            self._record("components_consistent", key, consistent, f"volume {volume}")

            stages = math.isclose(result.b_nm, result.b_m + result.b_n,
                                  rel_tol=TOLERANCE, abs_tol=TOLERANCE)
            if result.b_snm is not None:
                stages = stages and math.isclose(result.b_snm, result.b_nm + result.b_s,
                                                 rel_tol=TOLERANCE, abs_tol=TOLERANCE)
            self._record("stages_add_up", key, stages, f"volume {volume}")

            if volume == 0.0:
                self._record("zero_volume", key, result.b_total == 0.0,
                             f"b_total {result.b_total}")

    def run_all(self) -> Dict[str, Any]:
        console.print(Panel.fit(
            f"[bold]PyV2B Validation[/bold]\n"
            f"Dataset: {self.dataset.name} (published: {self.dataset.published})",
            border_style="blue",
        ))
        reference = self.run_reference_example()
        for taxon, jurisdiction, ecozone in self.dataset.available_keys():
            self.check_key(taxon, jurisdiction, ecozone)
        return self.generate_summary(reference)

    def generate_summary(self, reference: Optional[Dict[str, float]]) -> Dict[str, Any]:
        total = len(self.results)
        passed = sum(1 for r in self.results if r.passed)
        return {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'dataset': self.dataset.summary(),
            'reference_example': {'input': REFERENCE_EXAMPLE, 'output': reference},
            'total_tests': total,
            'passed': passed,
            'failed': total - passed,
            'pass_rate': 100.0 * passed / total if total else 0.0,
            'failures': [asdict(r) for r in self.results if not r.passed],
        }

    def print_summary(self, summary: Dict[str, Any]) -> None:
        """Print validation summary to console."""
        reference = summary['reference_example']['output']
        if reference is not None:
            table = Table(title="Reference example: 350 m3/ha PINU.CON, BC, ecozone 4")
            table.add_column("Component", style="cyan")
            table.add_column("t/ha", justify="right")
            for name in BIOMASS_COMPONENTS:
                table.add_row(name, f"{reference[name]:.4f}")
            console.print(table)

        table = Table(title="Validation Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        table.add_row("Total checks", str(summary['total_tests']))
        table.add_row("Passed", f"[green]{summary['passed']}[/green]")
        table.add_row("Failed", f"[red]{summary['failed']}[/red]")
        table.add_row("Pass rate", f"{summary['pass_rate']:.1f}%")
        console.print(table)

        if summary['failed']:
            console.print("\n[bold red]Failed checks:[/bold red]")
            for failure in summary['failures']:
                console.print(f"  [red]✗[/red] {failure['test_name']} "
                              f"[{failure['key']}]: {failure['message']}")
        else:
            console.print("\n[bold green]✓ All validation checks passed![/bold green]")


def main():
    """Main entry point for validation suite."""
    parser = argparse.ArgumentParser(
        description="PyV2B Validation Suite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--data-dir", type=Path,
                        help="Dataset directory (default: $V2B_DATA_DIR or bundled sample)")
    parser.add_argument("--output", type=Path, help="Write the summary as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    args = parser.parse_args()

    setup_logging("DEBUG" if args.verbose else "WARNING")

    suite = ValidationSuite(data_dir=args.data_dir, verbose=args.verbose)
    summary = suite.run_all()
    suite.print_summary(summary)

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(summary, indent=2), encoding="utf-8")
        console.print(f"[green]Results saved to {args.output}[/green]")

    sys.exit(0 if summary['failed'] == 0 else 1)


if __name__ == "__main__":
    main()
