"""Create the database tables if they do not exist."""

from __future__ import annotations

import logging

from dotenv import load_dotenv


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    load_dotenv()

    from news_db.connection import init_db

    init_db()


if __name__ == "__main__":
    main()
