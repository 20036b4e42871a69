"""Command-line interface for Invoice Manager."""

import argparse
import signal
import sys
from pathlib import Path
from types import FrameType
from uuid import UUID

from invoice_manager import __version__
from invoice_manager.config import get_settings
from invoice_manager.container import Container
from invoice_manager.domain.documents import Document
from invoice_manager.domain.value_objects import DocumentKind, round_money
from invoice_manager.exceptions import InvoiceManagerError
from invoice_manager.exports import render
from invoice_manager.logging_config import configure_logging
from invoice_manager.repositories.sqlite import SQLiteDatabase
from invoice_manager.services.exports import to_export_model


def get_db_path(args: argparse.Namespace) -> Path:
    """Database path from --database, else from settings."""
    if args.database:
        return Path(args.database)
    return Path(get_settings().sqlite_path)


def open_container(db_path: Path) -> Container:
    """Open an existing or new database and wire the services around it."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return Container(database=SQLiteDatabase(str(db_path), check_same_thread=False))


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = get_db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    with open_container(db_path) as container:
        _ = container.database

    print(f"Initialized database at {db_path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show database status."""
    db_path = get_db_path(args)

    if not db_path.exists():
        print(f"No database found at {db_path}")
        print("Run 'invm init' to create a new database")
        return 1

    with open_container(db_path) as container:
        db = container.database
        print(f"Database: {db_path}")
        print(f"Products: {db.count_rows('products')}")
        print(f"Invoices: {db.count_rows('invoices')}")
        print(f"Receipts: {db.count_rows('receipts')}")
        print(f"Next invoice number: {container.invoice_service.next_number()}")
        print(f"Next receipt number: {container.receipt_service.next_number()}")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Invoice Manager v{__version__}")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    """Wipe the database and load demo data."""
    settings = get_settings()
    products = args.products if args.products is not None else settings.seed_products
    invoices = args.invoices if args.invoices is not None else settings.seed_invoices
    receipts = args.receipts if args.receipts is not None else settings.seed_receipts

    with open_container(get_db_path(args)) as container:
        try:
            result = container.seed_service.seed(
                products=products, invoices=invoices, receipts=receipts
            )
        except (InvoiceManagerError, ValueError) as e:
            print(f"Error: {e}")
            return 1

    print(
        f"Seeded {result.products} products, {result.invoices} invoices "
        f"and {result.receipts} receipts"
    )
    return 0


def cmd_wipe(args: argparse.Namespace) -> int:
    """Delete all documents and products."""
    db_path = get_db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        return 1

    with open_container(db_path) as container:
        result = container.seed_service.wipe()

    print(
        f"Deleted {result.products} products, {result.invoices} invoices "
        f"and {result.receipts} receipts"
    )
    return 0


def cmd_scheduler(args: argparse.Namespace) -> int:
    """Reseed the database now and then on the configured interval."""
    with open_container(get_db_path(args)) as container:
        scheduler = container.scheduler

        if args.once:
            succeeded = scheduler.run_once()
            _print_scheduler_status(container)
            return 0 if succeeded else 1

        def handle_signal(signum: int, frame: FrameType | None) -> None:
            scheduler.stop()

        signal.signal(signal.SIGTERM, handle_signal)
        scheduler.start()
        print(
            f"Scheduler running every {scheduler.interval_seconds / 3600:g} hour(s). "
            "Press Ctrl+C to stop."
        )
        try:
            scheduler.wait()
        except KeyboardInterrupt:
            print("\nStopping scheduler...")
        _print_scheduler_status(container)
    return 0


def _print_scheduler_status(container: Container) -> None:
    status = container.scheduler.status()
    print("Scheduler status:")
    print(f"  Running: {'yes' if status.is_running else 'no'}")
    print(f"  Last run: {status.last_run.isoformat() if status.last_run else 'never'}")
    print(
        f"  Next run: {status.next_run.isoformat() if status.next_run else 'not scheduled'}"
    )
    print(f"  Runs: {status.run_count}")
    print(f"  Errors: {status.error_count}")


def cmd_next_number(args: argparse.Namespace) -> int:
    """Print the suggested next document number."""
    with open_container(get_db_path(args)) as container:
        service = container.document_service(DocumentKind(args.kind))
        print(service.next_number())
    return 0


def _find_document(container: Container, kind: DocumentKind, ref: str) -> Document | None:
    service = container.document_service(kind)
    try:
        return service.get_by_id(UUID(ref))
    except ValueError:
        return service.get_by_number(ref)


def cmd_list(args: argparse.Namespace) -> int:
    """List documents of one kind."""
    kind = DocumentKind(args.kind)
    with open_container(get_db_path(args)) as container:
        documents = container.document_service(kind).list()

    if not documents:
        print(f"No {kind.value}s found")
        return 0

    print(f"{'Number':<14} {'Issue Date':<12} {'Counterparty':<28} {'Total':>14}")
    print("-" * 72)
    for document in documents:
        counterparty = document.client_name or (
            document.payment_method.value if document.payment_method else ""
        )
        print(
            f"{document.document_number:<14} {document.issue_date.isoformat():<12} "
            f"{counterparty[:26]:<28} {round_money(document.total):>14,.2f}"
        )
    print(f"\nTotal: {len(documents)} {kind.value}s")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export one document to PDF or XLSX."""
    kind = DocumentKind(args.kind)
    with open_container(get_db_path(args)) as container:
        document = _find_document(container, kind, args.document)

    if document is None:
        print(f"Error: {kind.label} not found: {args.document}")
        return 1

    record = to_export_model(document)
    output = Path(args.output) if args.output else Path(record.filename(args.format))
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(render(record, args.format))
    print(f"Exported {kind.value} {document.document_number} to {output}")
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    """Print revenue totals."""
    with open_container(get_db_path(args)) as container:
        summary = container.analytics_service.summary()

    print(f"Invoices: {summary.invoice_count}")
    print(f"Receipts: {summary.receipt_count}")
    print(f"Total revenue: {round_money(summary.total_revenue):,.2f}")
    print(f"Total tax: {round_money(summary.total_tax):,.2f}")
    print(f"Net revenue: {round_money(summary.net_revenue):,.2f}")
    for month, amount in summary.revenue_by_month.items():
        print(f"  {month}: {round_money(amount):,.2f}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "invoice_manager.api.app:create_app",
        factory=True,
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="invm",
        description="Invoice Manager - invoices, receipts and product catalog",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # status command
    status_parser = subparsers.add_parser("status", help="Show database status")
    status_parser.set_defaults(func=cmd_status)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # seed command
    seed_parser = subparsers.add_parser(
        "seed", help="Wipe the database and load demo data"
    )
    seed_parser.add_argument("--products", type=int, default=None)
    seed_parser.add_argument("--invoices", type=int, default=None)
    seed_parser.add_argument("--receipts", type=int, default=None)
    seed_parser.set_defaults(func=cmd_seed)

    # wipe command
    wipe_parser = subparsers.add_parser("wipe", help="Delete all documents and products")
    wipe_parser.set_defaults(func=cmd_wipe)

    # scheduler command
    scheduler_parser = subparsers.add_parser(
        "scheduler", help="Periodically reseed the database with demo data"
    )
    scheduler_parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single seeding cycle and exit",
    )
    scheduler_parser.set_defaults(func=cmd_scheduler)

    kinds = [kind.value for kind in DocumentKind]

    # next-number command
    next_parser = subparsers.add_parser(
        "next-number", help="Suggest the next document number"
    )
    next_parser.add_argument("kind", choices=kinds)
    next_parser.set_defaults(func=cmd_next_number)

    # list command
    list_parser = subparsers.add_parser("list", help="List invoices or receipts")
    list_parser.add_argument("kind", choices=kinds)
    list_parser.set_defaults(func=cmd_list)

    # export command
    export_parser = subparsers.add_parser("export", help="Export a document")
    export_parser.add_argument("kind", choices=kinds)
    export_parser.add_argument("document", help="Document ID or number")
    export_parser.add_argument(
        "--format", choices=["pdf", "xlsx"], default="pdf", help="Output format"
    )
    export_parser.add_argument("--output", "-o", help="Output file path")
    export_parser.set_defaults(func=cmd_export)

    # summary command
    summary_parser = subparsers.add_parser("summary", help="Show revenue totals")
    summary_parser.set_defaults(func=cmd_summary)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(get_settings())

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
