#!/usr/bin/env python
"""
Show the products parsed from the menu stored for a branch.

Optionally stores a menu file for the branch first, which is how menus are
loaded outside the admin dashboard.

Usage:
    # List parsed products for a branch
    python scripts/check_menu_products.py --branch-id branch_01

    # Store a new menu text for the branch, then list
    python scripts/check_menu_products.py --branch-id branch_01 --load-file menu.txt

    # Also print the lines that were ignored as noise
    python scripts/check_menu_products.py --branch-id branch_01 --show-dropped
"""
import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from branch_bot.db import create_db_engine, create_session_factory
from branch_bot.logging_config import setup_logging
from branch_bot.menu_data_cache import MenuCache
from branch_bot.models import BranchMenu
from branch_bot.tasks.message_builder import format_price


def store_menu(session, branch_id, menu_text):
    """Insert or replace the menu text for a branch."""
    menu = session.query(BranchMenu).filter(BranchMenu.branch_id == branch_id).first()
    if menu:
        menu.menu_text = menu_text
    else:
        session.add(BranchMenu(branch_id=branch_id, menu_text=menu_text))
    session.commit()
    print(f"Stored {len(menu_text)} characters of menu text for {branch_id}")


def check_products(branch_id, load_file=None, show_dropped=False):
    engine = create_db_engine()
    Session = create_session_factory(engine)
    session = Session()

    try:
        if load_file:
            with open(load_file, encoding="utf-8") as f:
                store_menu(session, branch_id, f.read())

        menu = session.query(BranchMenu).filter(BranchMenu.branch_id == branch_id).first()
        if menu is None or not menu.menu_text.strip():
            print(f"ERROR: no menu stored for branch {branch_id}")
            sys.exit(1)

        report = MenuCache().get_report(branch_id, menu.menu_text)

        print(f"Branch {branch_id}: {len(report.items)} products ({report.strategy} strategy)\n")
        current_category = None
        for item in report.items:
            if item.category != current_category:
                current_category = item.category
                print(f"[{current_category or 'Sin categoría'}]")
            print(f"  {item.id:>8}  {item.display_name:<40} {format_price(item.price):>10}")

        if show_dropped and report.dropped_lines:
            print(f"\nIgnored {len(report.dropped_lines)} lines:")
            for line in report.dropped_lines:
                print(f"  {line}")

    finally:
        session.close()


def main():
    parser = argparse.ArgumentParser(
        description="Show the products parsed from a branch's stored menu."
    )
    parser.add_argument("--branch-id", required=True, help="Branch identifier")
    parser.add_argument("--load-file", default=None, help="Store this menu file for the branch first")
    parser.add_argument(
        "--show-dropped",
        action="store_true",
        help="Print the lines ignored by the parser",
    )
    args = parser.parse_args()

    setup_logging()
    check_products(args.branch_id, load_file=args.load_file, show_dropped=args.show_dropped)


if __name__ == "__main__":
    main()
