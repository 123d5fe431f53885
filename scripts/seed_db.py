#!/usr/bin/env python3
"""
Seed the database with test users, a friendship, a few posts and a short chat.

Usage:
    python scripts/seed_db.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import logging
logging.basicConfig(level=logging.INFO)

from sqlalchemy import select
from database import AsyncSessionLocal, engine, Base
from models import User, Friendship, Post, Comment, Like, Message
from models.friendship import canonical_pair, ACCEPTED, PENDING
from api.auth import hash_password

TEST_USERS = [
    {"username": "amina", "email": "amina@peoplegrid.dev", "bio": "Coffee and climbing", "pronouns": "she/her", "age": 27},
    {"username": "bruno", "email": "bruno@peoplegrid.dev", "bio": "Backend tinkerer", "pronouns": "he/him", "age": 31},
    {"username": "chidi", "email": "chidi@peoplegrid.dev", "bio": "Moral philosophy nerd", "pronouns": "they/them", "age": 35},
]

TEST_PASSWORD = "peoplegrid123"


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        users: dict[str, User] = {}
        for u in TEST_USERS:
            result = await db.execute(select(User).where(User.email == u["email"]))
            existing = result.scalar_one_or_none()
            if existing:
                print(f"  [skip] {u['email']} already exists")
                users[u["username"]] = existing
                continue

            user = User(password_hash=hash_password(TEST_PASSWORD), **u)
            db.add(user)
            await db.flush()
            users[u["username"]] = user
            print(f"  [ok] Created {u['username']} (id={user.id})")

        amina, bruno, chidi = users["amina"], users["bruno"], users["chidi"]

        # amina <-> bruno are friends; chidi has asked amina
        for requester, recipient, status in ((amina, bruno, ACCEPTED), (chidi, amina, PENDING)):
            key = canonical_pair(requester.id, recipient.id)
            if await db.get(Friendship, key):
                continue
            db.add(Friendship(
                user_one_id=key[0],
                user_two_id=key[1],
                action_user_id=recipient.id if status == ACCEPTED else requester.id,
                status=status,
            ))

        existing_posts = await db.execute(select(Post.id).limit(1))
        if existing_posts.first() is None:
            hello = Post(user_id=amina.id, content="First post on PeopleGrid!", title="Hello", post_type="text")
            db.add(hello)
            await db.flush()
            db.add(Comment(post_id=hello.id, user_id=bruno.id, comment_text="Welcome!"))
            db.add(Like(user_id=bruno.id, post_id=hello.id))
            db.add(Message(sender_id=amina.id, receiver_id=bruno.id, message_text="hi"))
            db.add(Message(sender_id=bruno.id, receiver_id=amina.id, message_text="hey there"))

        await db.commit()

    print(f"Done! Log in as any seeded email with password '{TEST_PASSWORD}'.")


if __name__ == "__main__":
    asyncio.run(seed())
