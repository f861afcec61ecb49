"""Command-line interface for expense insights."""

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from expense_insights import __version__
from expense_insights.config import Config, ConfigError, load_config
from expense_insights.models.expense import Expense, ExpenseInput
from expense_insights.processing.importer import ImportFileError
from expense_insights.processing.record_builder import ValidationError
from expense_insights.service import ExpenseService
from expense_insights.storage.base import ExpenseNotFound
from expense_insights.utils.date_utils import InvalidDateFormat, parse_date
from expense_insights.utils.decimal_utils import format_currency, parse_amount
from expense_insights.utils.logging_config import get_logger, setup_logging

# Load environment variables from .env file (if it exists)
load_dotenv()

console = Console()
logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="expense-insights",
        description="Track expenses, categorize vendors and flag unusual spending",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s add --date 2024-03-05 --amount 450 --vendor "Swiggy"
  %(prog)s import statements/march.csv -v
  %(prog)s dashboard --year 2024 --month 3 --xlsx dashboard.xlsx
  %(prog)s delete 42
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=Path("config"),
        help="Base config directory (default: ./config)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (overrides settings.yaml and DATABASE_URL)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v, -vv)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    add = subparsers.add_parser("add", help="Add an expense")
    add.add_argument("--date", required=True, help="Expense date (e.g. 2024-03-05 or 05/03/2024)")
    add.add_argument("--amount", required=True, help="Positive amount, e.g. 120.50")
    add.add_argument("--vendor", required=True, help="Vendor or merchant name")
    add.add_argument("--description", default=None, help="Optional description")
    add.add_argument("--category", default=None, help="Category override (skips rule matching)")

    list_cmd = subparsers.add_parser("list", help="List all expenses")
    list_cmd.add_argument("--category", default=None, help="Only show this category")
    list_cmd.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    delete = subparsers.add_parser("delete", help="Delete an expense by id")
    delete.add_argument("expense_id", type=int, help="Expense id")

    import_cmd = subparsers.add_parser("import", help="Import expenses from a CSV file")
    import_cmd.add_argument(
        "file",
        type=Path,
        help="CSV with header row and columns: date, amount, vendor_name, description",
    )

    anomalies = subparsers.add_parser("anomalies", help="List expenses flagged as anomalies")
    anomalies.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    dashboard = subparsers.add_parser("dashboard", help="Show the monthly dashboard")
    dashboard.add_argument("--year", type=int, default=None, help="Year (default: current)")
    dashboard.add_argument("--month", type=int, default=None, help="Month 1-12 (default: current)")
    dashboard.add_argument("--xlsx", type=Path, default=None, metavar="FILE", help="Also write an Excel workbook")
    dashboard.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    rules = subparsers.add_parser("rules", help="Show vendor categorization rules")
    rules.add_argument("--category", default=None, help="Only show rules for this category")

    export = subparsers.add_parser("export", help="Export all expenses to CSV")
    export.add_argument("output", type=Path, help="Output CSV path")

    return parser


def get_log_level(verbosity: int) -> str:
    """Convert verbosity count to log level.

    Args:
        verbosity: Number of -v flags.

    Returns:
        Log level string.
    """
    if verbosity >= 2:
        return "DEBUG"
    elif verbosity >= 1:
        return "INFO"
    else:
        return "WARNING"


def build_service(config: Config) -> ExpenseService:
    """Build the service for the configured database."""
    return ExpenseService.from_config(config)


def expense_table(expenses: list[Expense], title: str) -> Table:
    """Render expenses as a rich table."""
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Vendor")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Anomaly", justify="center")
    table.add_column("Description")

    for e in expenses:
        table.add_row(
            str(e.id),
            e.date.isoformat(),
            e.vendor_name,
            e.category,
            format_currency(e.amount),
            "[red]yes[/red]" if e.is_anomaly else "",
            e.description or "",
        )
    return table


def print_json(data: object) -> None:
    console.print_json(json.dumps(data))


def add_command(args: argparse.Namespace, service: ExpenseService) -> int:
    """Add one expense.

    Returns:
        Exit code.
    """
    try:
        expense_date = parse_date(args.date)
        amount = parse_amount(args.amount)
    except (InvalidDateFormat, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    try:
        expense = service.add_expense(
            ExpenseInput(
                date=expense_date,
                amount=amount,
                vendor_name=args.vendor,
                description=args.description,
                category=args.category,
            )
        )
    except ValidationError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    console.print(
        f"[green]Added expense {expense.id}:[/green] {expense.vendor_name} "
        f"{format_currency(expense.amount)} -> {expense.category}"
    )
    if expense.is_anomaly:
        console.print("[yellow]Flagged as an anomaly for its category[/yellow]")
    return 0


def list_command(args: argparse.Namespace, service: ExpenseService) -> int:
    expenses = service.list_expenses()
    if args.category:
        expenses = [e for e in expenses if e.category == args.category]

    if args.json:
        print_json([e.to_dict() for e in expenses])
    elif not expenses:
        console.print("[dim]No expenses found.[/dim]")
    else:
        console.print(expense_table(expenses, f"Expenses ({len(expenses)})"))
    return 0


def delete_command(args: argparse.Namespace, service: ExpenseService) -> int:
    try:
        service.delete_expense(args.expense_id)
    except ExpenseNotFound as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    console.print(f"[green]Deleted expense {args.expense_id}[/green]")
    return 0


def import_command(args: argparse.Namespace, service: ExpenseService) -> int:
    """Import a CSV file, reporting saved rows and, with -v, skipped rows.

    Returns:
        Exit code (1 only when the file itself cannot be read).
    """
    if not args.file.exists():
        console.print(f"[red]Error: File not found: {args.file}[/red]")
        return 1

    try:
        with console.status(f"[bold green]Importing {args.file.name}..."):
            result = service.import_file(args.file)
    except ImportFileError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    console.print(f"[green]Imported {result.saved_count} expenses from {args.file.name}[/green]")
    if result.categories:
        console.print(f"  Categories reconciled: {', '.join(result.categories)}")

    flagged = sum(1 for e in result.saved if e.is_anomaly)
    if flagged:
        console.print(f"  [yellow]{flagged} imported expenses flagged as anomalies[/yellow]")

    if result.skipped:
        console.print(f"\n[yellow]Skipped rows ({result.skipped_count}):[/yellow]")
        if args.verbose:
            for skipped in result.skipped[:20]:
                console.print(f"  - line {skipped.line_number}: {skipped.reason}")
            if len(result.skipped) > 20:
                console.print(f"  ... and {len(result.skipped) - 20} more")
        else:
            console.print("  [dim]Run with -v for details[/dim]")
    return 0


def anomalies_command(args: argparse.Namespace, service: ExpenseService) -> int:
    anomalies = service.list_anomalies()
    if args.json:
        print_json([e.to_dict() for e in anomalies])
    elif not anomalies:
        console.print("[dim]No anomalies flagged.[/dim]")
    else:
        console.print(expense_table(anomalies, f"Anomalies ({len(anomalies)})"))
    return 0


def dashboard_command(
    args: argparse.Namespace,
    service: ExpenseService,
    today: Optional[date] = None,
) -> int:
    """Show the dashboard, defaulting to the current year and month.

    Returns:
        Exit code.
    """
    today = today or date.today()
    year = args.year if args.year is not None else today.year
    month = args.month if args.month is not None else today.month

    try:
        summary = service.get_dashboard(year, month)
    except ValidationError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if args.json:
        print_json(summary.to_dict())
    else:
        totals = Table(title=f"Spending by category, {summary.period_display}")
        totals.add_column("Category")
        totals.add_column("Total", justify="right")
        for category, total in summary.monthly_category_totals.items():
            totals.add_row(category, format_currency(total))
        totals.add_row("[bold]Total[/bold]", f"[bold]{format_currency(summary.monthly_total)}[/bold]")
        console.print(totals)

        vendors = Table(title="Top vendors (all time)")
        vendors.add_column("#", justify="right")
        vendors.add_column("Vendor")
        vendors.add_column("Total", justify="right")
        for rank, vendor in enumerate(summary.top_vendors, 1):
            vendors.add_row(str(rank), vendor.vendor_name, format_currency(vendor.total))
        console.print(vendors)

        console.print(f"Anomalies: {summary.anomaly_count}")
        if summary.anomalies:
            console.print(expense_table(summary.anomalies, "Flagged expenses"))

    if args.xlsx:
        from expense_insights.output import ExcelWriter

        path = ExcelWriter().write_dashboard(args.xlsx, summary)
        console.print(f"[green]Dashboard workbook written to {path}[/green]")
    return 0


def rules_command(args: argparse.Namespace, service: ExpenseService) -> int:
    table = Table(title="Vendor categorization rules (checked top to bottom)")
    table.add_column("Keyword")
    table.add_column("Category")
    for keyword, category in service.list_mappings().items():
        if args.category and category != args.category:
            continue
        table.add_row(keyword, category)
    console.print(table)
    return 0


def export_command(args: argparse.Namespace, service: ExpenseService) -> int:
    from expense_insights.output import CSVExporter

    expenses = service.list_expenses()
    path = CSVExporter().export_expenses(args.output, expenses)
    console.print(f"[green]Exported {len(expenses)} expenses to {path}[/green]")
    return 0


COMMANDS = {
    "add": add_command,
    "list": list_command,
    "delete": delete_command,
    "import": import_command,
    "anomalies": anomalies_command,
    "dashboard": dashboard_command,
    "rules": rules_command,
    "export": export_command,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config(config_dir=args.config_dir)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 1

    if args.database_url:
        config.storage.database_url = args.database_url

    log_level = get_log_level(args.verbose) if args.verbose else config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file, console_output=args.verbose > 0)
    logger.debug(f"Running '{args.command}' on {config.storage.database_url.split(':', 1)[0]} storage")

    service = build_service(config)
    return COMMANDS[args.command](args, service)


if __name__ == "__main__":
    sys.exit(main())
