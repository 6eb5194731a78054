"""Seed a running Conduit API with users, articles, comments, follows and favorites.

The store lives in the server process, so seeding goes through the HTTP
API rather than touching state directly.
"""
import argparse
import asyncio
import random
import time

import httpx

TAGS = ["python", "fastapi", "concurrency", "testing", "docker", "kubernetes",
        "react", "typescript", "aws", "devops", "performance", "security"]


async def _register(client: httpx.AsyncClient, i: int) -> tuple[str, dict]:
    username = f"user_{i:04d}"
    resp = await client.post("/api/users", json={
        "user": {"username": username, "email": f"{username}@example.com", "password": "password"},
    })
    resp.raise_for_status()
    return username, {"Authorization": f"Token {resp.json()['user']['token']}"}


async def seed(base_url: str, small: bool = False):
    num_users = 10 if small else 50
    num_articles = 100 if small else 2000
    num_comments_per_article = 2 if small else 5

    print(f"Seeding {base_url}: {num_users} users, {num_articles} articles, "
          f"~{num_articles * num_comments_per_article} comments")
    start = time.perf_counter()

    async with httpx.AsyncClient(base_url=base_url, timeout=30) as client:
        users = [await _register(client, i) for i in range(num_users)]
        print(f"  Created {len(users)} users")

        # Each user follows a handful of others.
        follows = 0
        for username, headers in users:
            for other, _ in random.sample(users, k=min(5, num_users)):
                if other != username:
                    (await client.post(f"/api/profiles/{other}/follow", headers=headers)).raise_for_status()
                    follows += 1
        print(f"  Created {follows} follows")

        total_comments = 0
        total_favorites = 0
        for i in range(num_articles):
            _, author_headers = random.choice(users)
            resp = await client.post("/api/articles", headers=author_headers, json={
                "article": {
                    "title": f"Article {i}: How to optimize {random.choice(TAGS)} applications",
                    "description": f"A guide to optimizing {random.choice(TAGS)} applications.",
                    "body": f"This is the full content of article {i}. " * 20,
                    "tagList": random.sample(TAGS, k=random.randint(1, 4)),
                },
            })
            resp.raise_for_status()
            slug = resp.json()["article"]["slug"]

            for _ in range(random.randint(1, num_comments_per_article)):
                commenter, headers = random.choice(users)
                (await client.post(f"/api/articles/{slug}/comments", headers=headers, json={
                    "comment": {"body": f"Great article! Very helpful. Comment by {commenter}."},
                })).raise_for_status()
                total_comments += 1

            for _, headers in random.sample(users, k=random.randint(0, 3)):
                (await client.post(f"/api/articles/{slug}/favorite", headers=headers)).raise_for_status()
                total_favorites += 1

            if (i + 1) % 500 == 0:
                print(f"  {i + 1} articles created")

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users}")
    print(f"  Articles: {num_articles}")
    print(f"  Comments: {total_comments}")
    print(f"  Favorites: {total_favorites}")


def main():
    parser = argparse.ArgumentParser(description="Seed a running Conduit API")
    parser.add_argument("--small", action="store_true", help="Use small dataset (100 articles)")
    parser.add_argument("--base-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    asyncio.run(seed(args.base_url, small=args.small))


if __name__ == "__main__":
    main()
