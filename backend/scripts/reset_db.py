#!/usr/bin/env python3
"""Empty the listings and news tables, optionally refilling news with the sample articles."""
import argparse
import sys
from pathlib import Path

backend = Path(__file__).resolve().parent.parent
if str(backend) not in sys.path:
    sys.path.insert(0, str(backend))

from homepick.database import flush_db
from homepick.sample_news import SAMPLE_NEWS
from homepick.services.document_store import get_store


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed-news", action="store_true", help="insert the sample news articles afterwards")
    args = parser.parse_args()

    flush_db()
    print("Listings and news tables emptied.")
    if args.seed_news:
        store = get_store()
        for article in SAMPLE_NEWS:
            store.create("news", article)
        print(f"Inserted {len(SAMPLE_NEWS)} sample news articles.")


if __name__ == "__main__":
    main()
