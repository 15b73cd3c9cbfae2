import argparse
import asyncio
import sys
from typing import Optional, Sequence

import uvicorn

from gear_console.client import InventoryApiClient
from gear_console.config import MAX_PAGE_SIZE, Settings
from gear_console.exceptions import ReportedFailure, TransportFailure
from gear_console.logging_config import get_child_logger
from gear_console.monitor import ConnectionMonitor
from gear_console.table.controllers import InventoryTableController, OperationLogTableController
from gear_console.table.dialogs import PresetDialogs
from gear_console.table.fetcher import TRANSPORT_FAILURE_MESSAGE
from gear_console.table.query_state import QueryState
from gear_console.table.renderer import INVENTORY_COLUMNS, LOG_COLUMNS
from gear_console.table.views import TextTableView

logger = get_child_logger("cli")

CATALOG_FIELDS = ("category", "grade", "effect", "description", "note")


def page_size_arg(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {raw!r}")
    if not 0 < value <= MAX_PAGE_SIZE:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_PAGE_SIZE}")
    return value


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gear_console", description="Inventory admin console")
    parser.add_argument("--base-url", default=settings.base_url, help="Backend base URL")
    commands = parser.add_subparsers(dest="command", required=True)

    for name in ("inventory", "logs"):
        table = commands.add_parser(name, help=f"Show one page of the {name} table")
        table.add_argument("--page", type=int, default=1)
        table.add_argument("--per-page", type=page_size_arg, default=settings.page_size)
        table.add_argument("--search", default="")

    commands.add_parser("status", help="Check the backend connection once")

    add = commands.add_parser("add", help="Add stock of an item, registering new items in the catalog")
    add.add_argument("name")
    add.add_argument("--quantity", required=True)
    add.add_argument("--location", required=True)
    add.add_argument("--reason", required=True)
    for field in CATALOG_FIELDS:
        add.add_argument(f"--{field}", default="", help="Catalog field, used for new items only")

    catalog = commands.add_parser("catalog", help="Search the item catalog by name")
    catalog.add_argument("query")

    edit = commands.add_parser("edit", help="Update quantity and location of an item")
    edit.add_argument("inventory_id", type=int)
    edit.add_argument("--quantity")
    edit.add_argument("--location")
    edit.add_argument("--reason", required=True)

    delete = commands.add_parser("delete", help="Delete an item")
    delete.add_argument("inventory_id", type=int)
    delete.add_argument("--reason", required=True)
    delete.add_argument("--yes", action="store_true", help="Confirm the deletion")

    serve = commands.add_parser("serve", help="Run the in-memory backend")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8080)
    return parser


async def _show_table(client: InventoryApiClient, args) -> int:
    if args.command == "inventory":
        view = TextTableView(INVENTORY_COLUMNS)
        controller = InventoryTableController(client, view, PresetDialogs())
    else:
        view = TextTableView(LOG_COLUMNS)
        controller = OperationLogTableController(client, view)

    controller.state.apply_search(args.search)
    controller.state.set_page_size(args.per_page)
    # total_pages is unknown before the first fetch, so the page is set directly
    controller.state.page = max(args.page, 1)
    result = await controller.refresh()
    if view.pagination is not None:
        print(view.pagination.caption)
    return 0 if result is not None else 1


async def _search_catalog(client: InventoryApiClient, query: str) -> int:
    try:
        items = await client.search_items(query)
    except ReportedFailure as e:
        print(e.message, file=sys.stderr)
        return 1
    except TransportFailure:
        print(TRANSPORT_FAILURE_MESSAGE, file=sys.stderr)
        return 1

    for item in items:
        print(" | ".join([str(item.id), item.name, item.category, item.grade, item.effect]))
    return 0


async def _run(args, settings: Settings) -> int:
    async with InventoryApiClient(args.base_url, timeout=settings.timeout) as client:
        if args.command in ("inventory", "logs"):
            return await _show_table(client, args)

        if args.command == "status":
            monitor = ConnectionMonitor(client, TextTableView(()), interval=settings.poll_interval)
            status = await monitor.check_now()
            return 0 if status.connected else 1

        if args.command == "catalog":
            return await _search_catalog(client, args.query)

        dialogs = PresetDialogs(
            quantity=getattr(args, "quantity", None),
            location=getattr(args, "location", None),
            reason=args.reason,
            assume_yes=getattr(args, "yes", False),
            item_name=getattr(args, "name", None),
            item_details={field: getattr(args, field, "") for field in CATALOG_FIELDS},
        )
        controller = InventoryTableController(
            client,
            TextTableView(INVENTORY_COLUMNS, stream=sys.stderr),
            dialogs,
            state=QueryState(page_size=settings.page_size),
        )
        if args.command == "add":
            done = await controller.add_item()
        elif args.command == "edit":
            done = await controller.edit_item(args.inventory_id)
        else:
            done = await controller.delete_item(args.inventory_id)
        return 0 if done else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = Settings.from_env()
    args = build_parser(settings).parse_args(argv)

    if args.command == "serve":
        logger.info("Starting backend", extra={"host": args.host, "port": args.port})
        uvicorn.run("gear_console.backend.app:app", host=args.host, port=args.port)
        return 0

    return asyncio.run(_run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
