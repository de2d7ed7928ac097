"""Database seeder with sample users and articles for local development."""
import asyncio
import argparse
import time
from datetime import datetime, timezone
from app.database import Database
from app.models import User, Article
from app.security import hash_password

SAMPLE_PASSWORD = "password123"

USERS = [
    ("john_doe", "john@example.com"),
    ("jane_smith", "jane@example.com"),
    ("bob_wilson", "bob@example.com"),
]

# (owner index, title, body, status, created)
ARTICLES = [
    (0, "Introduction to Node.js",
     "Node.js is a JavaScript runtime built on Chrome's V8 JavaScript engine. "
     "It allows you to run JavaScript on the server side.",
     "published", "2024-01-15"),
    (0, "Express.js Framework Guide",
     "Express.js is a minimal and flexible Node.js web application framework that provides "
     "a robust set of features for web and mobile applications.",
     "published", "2024-01-20"),
    (0, "Sequelize ORM Tutorial",
     "Sequelize is a promise-based Node.js ORM for Postgres, MySQL, MariaDB, SQLite "
     "and Microsoft SQL Server.",
     "draft", "2024-01-25"),
    (1, "JavaScript Best Practices",
     "Learn the best practices for writing clean, maintainable JavaScript code.",
     "published", "2024-01-10"),
    (1, "REST API Design Principles",
     "Understanding the fundamental principles of designing RESTful APIs.",
     "published", "2024-01-18"),
    (2, "PostgreSQL Database Management",
     "A comprehensive guide to managing PostgreSQL databases effectively.",
     "draft", "2024-01-22"),
    (2, "JWT Authentication Implementation",
     "How to implement secure JWT authentication in your applications.",
     "published", "2024-01-28"),
    (0, "Golang Programming Language",
     "Go is an open source programming language that makes it easy to build simple, "
     "reliable, and efficient software.",
     "published", "2024-02-01"),
    (1, "Advanced Golang Concepts",
     "Exploring advanced concepts in the Go programming language including goroutines, "
     "channels, and interfaces.",
     "draft", "2024-02-05"),
    (2, "Golang Web Development",
     "Building web applications using Go and popular frameworks like Gin and Echo.",
     "published", "2024-02-10"),
]


async def seed(database: Database) -> None:
    print(f"Seeding: {len(USERS)} users, {len(ARTICLES)} articles")
    start = time.perf_counter()

    await database.drop_all()
    await database.create_all()

    async with database.session() as session:
        # One hash for everyone; bcrypt is slow on purpose.
        password_hash = hash_password(SAMPLE_PASSWORD)
        users = []
        for username, email in USERS:
            user = User(username=username, email=email, password_hash=password_hash)
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        for owner, title, body, status, created in ARTICLES:
            session.add(Article(
                user_id=users[owner].id,
                title=title,
                body=body,
                status=status,
                created_at=datetime.fromisoformat(created).replace(tzinfo=timezone.utc),
            ))
        await session.flush()
        print(f"  Created {len(ARTICLES)} articles")

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print("\nSample users:")
    for username, email in USERS:
        print(f"  - {username} ({email}) / {SAMPLE_PASSWORD}")
    print("\nSample articles:")
    for owner, title, _, status, _ in ARTICLES:
        print(f'  - "{title}" ({status}) by {USERS[owner][0]}')


async def main_async(database_url: str | None) -> None:
    database = Database(database_url) if database_url else Database.from_settings()
    try:
        await seed(database)
    finally:
        await database.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Drop, recreate and seed the article database"
    )
    parser.add_argument(
        "--database-url", default=None, help="Override DATABASE_URL from settings"
    )
    args = parser.parse_args()
    asyncio.run(main_async(args.database_url))


if __name__ == "__main__":
    main()
