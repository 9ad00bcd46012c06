"""Seed a development database with publishers, readers, articles and comments.

Prints a bearer token for every seeded user so the API can be exercised
straight away, e.g. ``curl -H "Authorization: Bearer <token>" ...``.
"""
import asyncio
import argparse
import random
import time

from newsroom.auth.tokens import Principal, Role, get_token_codec
from newsroom.database import engine, async_session, Base
from newsroom.models import User, Article, Comment

CATEGORIES = ["Politics", "Business", "Technology", "Science", "Sports",
              "Health", "Entertainment", "World"]


async def seed(small: bool = False):
    num_publishers = 2 if small else 5
    num_readers = 5 if small else 50
    num_articles = 20 if small else 1000
    max_comments_per_article = 2 if small else 5

    print(f"Seeding: {num_publishers} publishers, {num_readers} readers, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        publishers = [
            User(username=f"publisher_{i:02d}", email=f"publisher_{i:02d}@example.com",
                 role=Role.PUBLISHER.value)
            for i in range(num_publishers)
        ]
        readers = [
            User(username=f"reader_{i:03d}", email=f"reader_{i:03d}@example.com",
                 role=Role.READER.value)
            for i in range(num_readers)
        ]
        session.add_all(publishers + readers)
        await session.flush()
        print(f"  Created {len(publishers) + len(readers)} users")

        articles = []
        for i in range(num_articles):
            category = random.choice(CATEGORIES)
            article = Article(
                title=f"{category} briefing #{i}",
                content=f"Full story for {category.lower()} briefing {i}. " * 20,
                category=category,
                author_id=random.choice(publishers).id,
            )
            session.add(article)
            articles.append(article)
        await session.flush()
        print(f"  Created {len(articles)} articles")

        total_comments = 0
        everyone = publishers + readers
        for article in articles:
            for _ in range(random.randint(0, max_comments_per_article)):
                session.add(Comment(
                    text=f"Thoughts on article {article.id}.",
                    author_id=random.choice(everyone).id,
                    article_id=article.id,
                ))
                total_comments += 1
        await session.flush()

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s ({total_comments} comments)")

    codec = get_token_codec()
    print("\nBearer tokens:")
    for user in publishers + readers[:3]:
        token = codec.issue(Principal(id=user.id, role=Role(user.role)))
        print(f"  {user.username:<14} {user.role:<10} {token}")


def main():
    parser = argparse.ArgumentParser(description="Seed the newsroom database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
