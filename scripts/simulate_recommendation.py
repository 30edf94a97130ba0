#!/usr/bin/env python
"""
Drive a recommendation session with scripted answers.

Each answer is given to the next question in the session's order; once all
questions are answered the ranked recommendations are printed.

Usage:
    python scripts/simulate_recommendation.py --menu-file menu.txt \
        --people 2 --answers 2 1 Ninguna 5 1
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
from branch_bot.tasks.errors import EmptyCandidateSetError, MenuUnavailableError
from branch_bot.tasks.message_builder import MessageBuilder
from branch_bot.tasks.models import QuestionPrompt
from branch_bot.tasks.recommendation import RecommendationEngine


def run_session(menu_text, answers, people_count=1, phone_number=None, branch_id="local"):
    items = MenuCache().get_items(branch_id, menu_text)
    engine = RecommendationEngine()
    builder = MessageBuilder()

    session = engine.create_session(
        phone_number=phone_number,
        branch_id=branch_id,
        people_count=people_count,
    )
    print(f"Session {session.session_id} ({len(items)} products on the menu)\n")

    pending = list(answers)
    while True:
        try:
            step = engine.next_question(session, items)
        except EmptyCandidateSetError:
            print(builder.build_no_candidates())
            return None
        except MenuUnavailableError as e:
            print(f"ERROR: {e}")
            return None

        if not isinstance(step, QuestionPrompt):
            print(builder.build_recommendations(step))
            return step

        print(builder.build_question(step))
        if not pending:
            print("\n(no more scripted answers; stopping)")
            return None
        answer = pending.pop(0)
        print(f"> {answer}\n")
        engine.answer(session, answer)


def main():
    parser = argparse.ArgumentParser(
        description="Drive a recommendation session with scripted answers."
    )
    parser.add_argument("--menu-file", required=True, help="Path to the menu text")
    parser.add_argument("--answers", nargs="*", default=[], help="Answers in question order")
    parser.add_argument("--people", type=int, default=1, help="Number of people")
    parser.add_argument("--phone", default=None, help="Customer phone number")
    args = parser.parse_args()

    setup_logging()
    if not os.path.exists(args.menu_file):
        print(f"ERROR: menu file not found: {args.menu_file}")
        sys.exit(1)

    with open(args.menu_file, encoding="utf-8") as f:
        menu_text = f.read()
    run_session(menu_text, args.answers, people_count=args.people, phone_number=args.phone)


if __name__ == "__main__":
    main()
