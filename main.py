#!/usr/bin/env python3
"""
Pagesmith - Block-based Page Workspace

Main entry point for Pagesmith. Browses and edits the page workspace stored
in a DuckDB file: page tree, page contents, templates, and JSON
export/import.
"""

import asyncio
import logging
import sys
import argparse
from pathlib import Path
from typing import List

from pagesmith.agents import GenerationRunner, WritingAssistant
from pagesmith.config import config
from pagesmith.models import PageTreeNode
from pagesmith.pages import PageService
from pagesmith.storage import DuckDBBackend, PersistenceStore, StorageError
from pagesmith.templates import ALL_CATEGORIES, TemplateLibrary


def setup_logging():
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper(), logging.INFO)
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def print_tree(nodes: List[PageTreeNode], depth: int = 0):
    for node in nodes:
        icon = f"{node.icon} " if node.icon else ""
        print(f"{'  ' * depth}{icon}{node.title}  [{node.id}]")
        print_tree(node.children, depth + 1)


def cmd_tree(args, service: PageService) -> int:
    forest = service.tree()
    if not forest:
        print("No pages.")
        return 0
    print_tree(forest)
    return 0


def cmd_show(args, service: PageService) -> int:
    page = service.get(args.page_id)
    if page is None:
        print(f"Page not found: {args.page_id}")
        return 1

    print(f"{page.icon or ''} {page.title}".strip())
    print(f"id: {page.id}  parent: {page.parent_id or '-'}  updated: {page.updated_at.isoformat()}")
    print("-" * 60)
    for block in page.content:
        print(f"[{block.type.value}] {block.plain_text()}")
    return 0


def cmd_new(args, service: PageService) -> int:
    try:
        if args.template:
            page = service.create_from_template(args.template, title=args.title, parent_id=args.parent)
        else:
            page = service.create_page(args.title, icon=args.icon, description=args.description,
                                       parent_id=args.parent)
    except (KeyError, ValueError) as e:
        print(f"Could not create page: {e}")
        return 1

    print(f"Created page {page.id}")
    return 0


def cmd_delete(args, service: PageService) -> int:
    removed = service.delete(args.page_id)
    if not removed:
        print(f"Page not found: {args.page_id}")
        return 1
    print(f"Deleted {len(removed)} page(s): {', '.join(removed)}")
    return 0


def cmd_move(args, service: PageService) -> int:
    if not service.reparent(args.page_id, args.parent):
        print(f"Could not move page {args.page_id}")
        return 1
    print(f"Moved page {args.page_id} under {args.parent or 'the top level'}")
    return 0


def cmd_templates(args, service: PageService) -> int:
    templates = service.templates.search(args.search or "", args.category)
    for template in templates:
        print(f"{template.icon} {template.name}  [{template.id}]  ({template.category}, used {template.usage_count}x)")
        if template.description:
            print(f"    {template.description}")
    if not templates:
        print("No matching templates.")
    return 0


async def generate_template(library: TemplateLibrary, description: str, category: str):
    async with GenerationRunner() as runner:
        return await library.generate(description, WritingAssistant(runner), category=category)


def cmd_generate_template(args, service: PageService) -> int:
    template = asyncio.run(generate_template(service.templates, args.description, args.category))
    print(f"Saved template {template.id} with {len(template.content)} block(s)")
    return 0


def cmd_export(args, service: PageService) -> int:
    data = service.store.export_data()
    if args.file:
        Path(args.file).write_text(data, encoding="utf-8")
        print(f"Exported workspace to {args.file}")
    else:
        print(data)
    return 0


def cmd_import(args, service: PageService) -> int:
    try:
        data = Path(args.file).read_text(encoding="utf-8")
    except OSError as e:
        print(f"Could not read {args.file}: {e}")
        return 1

    result = service.store.import_data(data)
    if not result.success:
        print(f"Import failed: {result.error}")
        return 1
    print(f"Imported workspace from {args.file}")
    return 0


COMMANDS = {
    "tree": cmd_tree,
    "show": cmd_show,
    "new": cmd_new,
    "delete": cmd_delete,
    "move": cmd_move,
    "templates": cmd_templates,
    "generate-template": cmd_generate_template,
    "export": cmd_export,
    "import": cmd_import,
}


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Pagesmith - Block-based Page Workspace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py tree                              # Show the page tree
  python main.py new "Weekly Review" --icon 📅      # Create a page
  python main.py new "Sprint 12" --template template_project_brief
  python main.py move page_123 --parent page_456   # Reparent a page
  python main.py generate-template "Reading log for novels"
  python main.py export backup.json                # Export everything as JSON
        """
    )

    parser.add_argument("--config", type=str, help="Path to the configuration file")
    parser.add_argument("--db", type=str, help="Path to the workspace database (defaults to config value)")
    parser.add_argument("--version", action="version", version="Pagesmith 0.1.0")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("tree", help="Show the page tree")

    show = subparsers.add_parser("show", help="Print a page's blocks")
    show.add_argument("page_id")

    new = subparsers.add_parser("new", help="Create a page")
    new.add_argument("title")
    new.add_argument("--parent", help="Id of the parent page")
    new.add_argument("--icon", default="📄", help="Page icon (default: 📄)")
    new.add_argument("--description", default="", help="Opening paragraph")
    new.add_argument("--template", help="Id of a template to start from")

    delete = subparsers.add_parser("delete", help="Delete a page and its direct children")
    delete.add_argument("page_id")

    move = subparsers.add_parser("move", help="Move a page under another page")
    move.add_argument("page_id")
    move.add_argument("--parent", help="New parent id (omit for the top level)")

    templates = subparsers.add_parser("templates", help="List templates")
    templates.add_argument("--search", help="Filter by name or description")
    templates.add_argument("--category", default=ALL_CATEGORIES, help="Filter by category")

    generate = subparsers.add_parser("generate-template", help="Draft a template with the assistant")
    generate.add_argument("description")
    generate.add_argument("--category", default="custom")

    export = subparsers.add_parser("export", help="Export the workspace as JSON")
    export.add_argument("file", nargs="?", help="Output file (default: stdout)")

    import_parser = subparsers.add_parser("import", help="Import a workspace export")
    import_parser.add_argument("file")

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    if args.config:
        config.config_path = Path(args.config)
        config.reload()

    setup_logging()

    db_path = args.db or config.database_filename

    try:
        with DuckDBBackend(db_path) as backend:
            service = PageService(PersistenceStore(backend))
            exit_code = COMMANDS[args.command](args, service)

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")
        exit_code = 130

    except StorageError as e:
        logging.error(f"Storage failure: {e}")
        print(f"\nStorage failure: {e}")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
