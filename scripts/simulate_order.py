#!/usr/bin/env python
"""
Quote customer messages against a menu file, as the WhatsApp flow would.

Parses the menu, matches each message and prints the reply the customer
would receive.

Usage:
    python scripts/simulate_order.py --menu-file menu.txt "quiero 2 capuchinos y un croissant"

    # Several messages, custom delivery fee and minimum order
    python scripts/simulate_order.py --menu-file menu.txt --delivery-fee 4000 \
        --minimum-order 20000 "una limonada" "3 alitas bbq"
"""
import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from branch_bot.logging_config import setup_logging
from branch_bot.menu_data_cache import MenuCache
from branch_bot.services.order import OrderService
from branch_bot.tasks.message_builder import MessageBuilder, format_price


def read_menu(path):
    with open(path, encoding="utf-8") as f:
        return f.read()


def simulate(menu_text, messages, branch_id, delivery_fee=None, minimum_order=None, show_menu=False):
    cache = MenuCache()
    service = OrderService(cache)
    builder = MessageBuilder()

    report = cache.get_report(branch_id, menu_text)
    print(f"Parsed {len(report.items)} products ({report.strategy} strategy, "
          f"{len(report.dropped_lines)} lines ignored)")
    if show_menu:
        for item in report.items:
            print(f"  {item.id:>8}  {item.display_name:<40} {format_price(item.price):>10}  [{item.category}]")
    print()

    for message in messages:
        print(f"> {message}")
        quote = service.quote(
            branch_id,
            menu_text,
            message,
            delivery_fee=delivery_fee,
            minimum_order=minimum_order,
        )
        print(builder.build_order_summary(quote))
        print()


def main():
    parser = argparse.ArgumentParser(
        description="Quote customer messages against a menu file."
    )
    parser.add_argument("messages", nargs="+", help="Customer messages to quote")
    parser.add_argument("--menu-file", required=True, help="Path to the menu text")
    parser.add_argument("--branch-id", default="local", help="Branch id used as cache key")
    parser.add_argument("--delivery-fee", type=int, default=None, help="Override the delivery fee")
    parser.add_argument("--minimum-order", type=int, default=None, help="Override the minimum order")
    parser.add_argument("--show-menu", action="store_true", help="List the parsed products first")
    args = parser.parse_args()

    setup_logging()
    if not os.path.exists(args.menu_file):
        print(f"ERROR: menu file not found: {args.menu_file}")
        sys.exit(1)

    simulate(
        read_menu(args.menu_file),
        args.messages,
        args.branch_id,
        delivery_fee=args.delivery_fee,
        minimum_order=args.minimum_order,
        show_menu=args.show_menu,
    )


if __name__ == "__main__":
    main()
