"""
Library Store Backend - Default Genre Seed
===========================================

Usage:
    python -m library_api.seed

Idempotent: genres already present are left as they are, so the command
can run on every deploy.
"""

import asyncio
import logging
import sys

from library_api.config import settings
from library_api.database import Database
from library_api.services.genre_service import genre_service

logger = logging.getLogger("library_api.seed")

DEFAULT_GENRES = (
    "Fiction",
    "Non-Fiction",
    "Mystery",
    "Thriller",
    "Romance",
    "Science Fiction",
    "Fantasy",
    "Horror",
    "Biography",
    "Autobiography",
    "History",
    "Science",
    "Technology",
    "Self-Help",
    "Business",
    "Education",
    "Philosophy",
    "Psychology",
    "Religion",
    "Poetry",
    "Drama",
    "Comedy",
    "Adventure",
    "Children",
    "Young Adult",
    "Comics",
    "Graphic Novel",
    "Cookbook",
    "Travel",
    "Art",
    "Music",
    "Sports",
    "Health",
    "Fitness",
    "Medical",
    "Law",
    "Politics",
    "Economics",
    "Mathematics",
    "Programming",
)


async def seed(database: Database) -> int:
    async with database.session_factory() as session:
        return await genre_service.seed_genres(session, DEFAULT_GENRES)


async def main() -> None:
    database = Database(settings)
    try:
        inserted = await seed(database)
        logger.info(
            "Seeding finished: %d of %d default genres inserted",
            inserted, len(DEFAULT_GENRES),
        )
    finally:
        await database.dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )
    asyncio.run(main())
