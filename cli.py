"""
Command-Line Interface for Test Data Generation

Provides commands for:
- analyze: Profile a CSV sample and save the archive
- generate: Generate synthetic CSV data from an archive
- validate: Score generated data against a reference sample
- demo: Print values from the built-in demo profiles
- config: Create a configuration file
"""

import argparse
import sys
import json
import logging
from typing import Optional
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel

from tdg.config import Config, ConfigLoader, ConfigValidator, get_default_config
from tdg.data_sample_parser import DataSampleParser
from tdg.utils import setup_logging, read_data
from tdg.validation import RealismValidator

# Setup console
console = Console()


class CLI:
    """Main CLI class"""

    def __init__(self):
        self.parser = self._create_parser()
        self.config_loader = ConfigLoader()
        self.verbose = False

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser"""
        parser = argparse.ArgumentParser(
            description="Test Data Generation CLI",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Profile a sample file
  python cli.py analyze sample.csv profiles/people

  # Generate synthetic data from the saved profiles
  python cli.py generate profiles/people generated.csv --rows 1000 --seed 42

  # Score generated data against the sample
  python cli.py validate sample.csv generated.csv
            """
        )

        parser.add_argument(
            '--verbose', '-v',
            action='store_true',
            help='Enable verbose output'
        )
        parser.add_argument('--config', '-c', help='Configuration file (YAML)')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Analyze command
        analyze_parser = subparsers.add_parser('analyze', help='Profile a CSV sample file')
        analyze_parser.add_argument('input', help='Input sample data file')
        analyze_parser.add_argument('archive', help='Output archive path (.json appended if missing)')

        # Generate command
        generate_parser = subparsers.add_parser('generate', help='Generate synthetic data')
        generate_parser.add_argument('archive', help='Archive produced by analyze')
        generate_parser.add_argument('output', help='Output CSV file')
        generate_parser.add_argument('--rows', '-n', type=int, help='Number of rows to generate')
        generate_parser.add_argument('--seed', '-s', type=int, help='Random seed for reproducibility')

        # Validate command
        validate_parser = subparsers.add_parser('validate', help='Score generated data')
        validate_parser.add_argument('reference', help='Reference sample file')
        validate_parser.add_argument('generated', help='Generated data file')
        validate_parser.add_argument('--threshold', '-t', type=float, default=0.5, help='Realism threshold')
        validate_parser.add_argument('--output', '-o', help='Output report file (JSON)')

        # Demo command
        subparsers.add_parser('demo', help='Generate demo values')

        # Config command
        config_parser = subparsers.add_parser('config', help='Manage configurations')
        config_subparsers = config_parser.add_subparsers(dest='config_command')
        create_parser = config_subparsers.add_parser('create', help='Create a configuration file')
        create_parser.add_argument('output', help='Output configuration file')

        return parser

    def _load_config(self, path: Optional[str]) -> Config:
        if not path:
            return get_default_config()

        config = self.config_loader.load_from_file(path)
        is_valid, errors = ConfigValidator.validate(config)
        if not is_valid:
            raise ValueError("Invalid configuration: " + "; ".join(errors))

        # --verbose wins over the configured level
        level = logging.DEBUG if self.verbose else config.logging.level
        setup_logging(level=level, log_file=config.logging.log_file)

        console.print(f"✓ Loaded configuration: {path}")
        return config

    def run(self, args=None):
        """Run CLI"""
        args = self.parser.parse_args(args)
        self.verbose = args.verbose

        # Setup logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        setup_logging(level=log_level)

        commands = {
            'analyze': self.cmd_analyze,
            'generate': self.cmd_generate,
            'validate': self.cmd_validate,
            'demo': self.cmd_demo,
            'config': self.cmd_config,
        }

        if args.command not in commands:
            self.parser.print_help()
            return

        try:
            commands[args.command](args)
        except Exception as e:
            console.print(f"[bold red]✗ Error:[/bold red] {str(e)}")
            if args.verbose:
                console.print_exception()
            sys.exit(1)

    def cmd_analyze(self, args):
        """Profile a CSV sample"""
        console.print(Panel.fit(
            "🔍 [bold]Sample Analysis[/bold]",
            border_style="cyan"
        ))

        config = self._load_config(args.config)
        dsp = DataSampleParser(config)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Analyzing sample data...", total=None)
            records = dsp.analyze_csv_file(args.input)
            progress.update(task, completed=True)

        table = Table(title="Column Profiles", show_header=True)
        table.add_column("Column", style="cyan")
        table.add_column("Patterns", style="yellow")
        table.add_column("Observations", style="green")

        for name, profile in dsp.profiles.items():
            table.add_row(name, str(len(profile.patterns)), str(profile.total_observations))

        console.print(table)

        path = dsp.save(args.archive)
        console.print(f"✓ Analyzed {records:,} records")
        console.print(f"✓ Saved archive to: {path}")
        console.print("\n[bold green]✓ Analysis complete![/bold green]")

    def cmd_generate(self, args):
        """Generate synthetic data"""
        console.print(Panel.fit(
            "🎲 [bold]Test Data Generation[/bold]",
            border_style="blue"
        ))

        config = self._load_config(args.config)
        if args.seed is not None:
            config.generation.seed = args.seed
        rows = args.rows if args.rows is not None else config.generation.num_rows

        dsp = DataSampleParser.from_file(args.archive, config=config)
        console.print(f"✓ Loaded {len(dsp.profiles)} column profiles")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Generating synthetic data...", total=None)
            path = dsp.generate_csv(rows, args.output)
            progress.update(task, completed=True)

        table = Table(title="Generation Summary", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Rows Generated", f"{rows:,}")
        table.add_row("Columns", str(len(dsp.profiles)))
        table.add_row("Seed", str(config.generation.seed if config.generation.seed is not None else "Random"))
        table.add_row("Output File", str(path))

        console.print(table)
        console.print("\n[bold green]✓ Generation complete![/bold green]")

    def cmd_validate(self, args):
        """Score generated data against a reference sample"""
        console.print(Panel.fit(
            "✅ [bold]Realism Validation[/bold]",
            border_style="green"
        ))

        config = self._load_config(args.config)
        reference = read_data(args.reference, config.csv)
        generated = read_data(args.generated, config.csv)

        console.print(f"✓ Loaded reference: {len(reference):,} rows")
        console.print(f"✓ Loaded generated: {len(generated):,} rows")

        report = RealismValidator(args.threshold).validate_frame(reference, generated)

        table = Table(title="Realism Metrics", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="yellow")
        table.add_column("Status", style="green")

        for metric in report.metrics:
            table.add_row(metric.name, f"{metric.value:.3f}", "✓" if metric.passed else "✗")

        table.add_row(
            "Overall Score",
            f"{report.overall_score:.3f}",
            "✓ Pass" if report.passed else "✗ Fail"
        )
        console.print(table)

        if args.output:
            with open(args.output, 'w') as f:
                json.dump(report.to_dict(), f, indent=2)
            console.print(f"\n✓ Report saved to: {args.output}")

        console.print("\n[bold green]✓ Validation complete![/bold green]")

    def cmd_demo(self, args):
        """Print demo values"""
        dsp = DataSampleParser(self._load_config(args.config))
        console.print(f"generate date: {dsp.demo_date()}")
        console.print(f"generate person: {dsp.demo_person_name()}")

    def cmd_config(self, args):
        """Manage configurations"""
        if args.config_command == 'create':
            self.config_loader.save_config(get_default_config(), args.output)
            console.print(f"✓ Created configuration file: {args.output}")
            console.print("  Edit this file to customize settings")
        else:
            console.print("Use 'config create <file>'")


def main():
    """CLI entry point"""
    cli = CLI()
    cli.run()


if __name__ == "__main__":
    main()
