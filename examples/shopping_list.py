"""Shopping list stored as JSON, with CSV import and export.

Usage:
    python examples/shopping_list.py add milk "bread, rye"
    python examples/shopping_list.py done 2
    python examples/shopping_list.py remove 1
    python examples/shopping_list.py export list.csv
    python examples/shopping_list.py import list.csv    # merged by id
    python examples/shopping_list.py list
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
import sys

from pydantic import BaseModel

from ministate import AppRunner, ImportStrategies, MiniApp


logger = logging.getLogger(__name__)


class ShoppingItem(BaseModel):
    id: int
    name: str
    done: bool = False


class _ArgumentParser(argparse.ArgumentParser):
    """Report bad arguments as errors of the run phase instead of exiting."""

    def error(self, message: str):
        raise ValueError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="shopping_list", description="Keep a shopping list between runs.")
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Add items by name")
    add.add_argument("names", nargs="+")
    for name, help_text in (("remove", "Remove an item"), ("done", "Mark an item as bought")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("item_id", type=int)
    commands.add_parser("list", help="Show every item")
    for name, help_text in (("export", "Write the list as CSV"), ("import", "Merge items from a CSV file by id")):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("path")
    return parser


class ShoppingListApp(MiniApp):
    autoload = ("json",)
    autosave = ("json",)

    def run(self) -> None:
        args = build_parser().parse_args(self.argv)
        items: list[ShoppingItem] = self.context.get_data()

        if args.command == "add":
            next_id = max((item.id for item in items), default=0) + 1
            for offset, name in enumerate(args.names):
                items.append(ShoppingItem(id=next_id + offset, name=name))
            self.context.set_data(items)
        elif args.command in ("remove", "done"):
            if not any(item.id == args.item_id for item in items):
                raise ValueError(f"No item with id {args.item_id}")
            if args.command == "remove":
                items = [item for item in items if item.id != args.item_id]
            else:
                for item in items:
                    if item.id == args.item_id:
                        item.done = True
            self.context.set_data(items)
        elif args.command == "export":
            written = self.context.export_data("csv", path=args.path)
            print(f"Exported {len(items)} item(s) to {written}")
            return
        elif args.command == "import":
            count = self.context.import_data("csv", path=args.path, strategy=ImportStrategies.merge_by_id())
            logger.info("Merged %d item(s) from %s", count, args.path)

        for item in self.context.get_data():
            print(f"{item.id}. [{'x' if item.done else ' '}] {item.name}")


def main(argv: Sequence[str] | None = None) -> int:
    return (
        AppRunner.for_app(ShoppingListApp)
        .with_record_type(ShoppingItem)
        .with_formats("json", "csv")
        .named("ShoppingList")
        .run(argv)
    )


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
