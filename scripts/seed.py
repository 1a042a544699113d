#!/usr/bin/env python3
"""
Script to load a demo user and book into Lendbook and print an access
token for the user, for trying the API locally.
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lendbook.configs import DB_URI
from lendbook.core.auth import IdentityResolver
from lendbook.core.models import Item, Role, User
from lendbook.core.store import SQLAlchemyLendingStore


def main():
    parser = argparse.ArgumentParser(description="Seed a Lendbook database")
    parser.add_argument("--db-uri", default=DB_URI)
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--admin", action="store_true", default=False)
    parser.add_argument("--title", help="Also add a book owned by this user")
    parser.add_argument("--author", default="Unknown")
    parser.add_argument("--isbn", default="")
    args = parser.parse_args()

    store = SQLAlchemyLendingStore.from_uri(args.db_uri).init()
    with store.transaction() as session:
        user = session.query(User).filter(User.email == args.email).first()
        if not user:
            user = User(
                name=args.name,
                email=args.email,
                role=Role.ADMIN if args.admin else Role.USER
            )
            session.add(user)
            session.flush()
        print(f"User '{user.name}' id: {user.id}")

        if args.title:
            item = Item(
                title=args.title,
                author=args.author,
                isbn=args.isbn,
                owner_id=user.id
            )
            session.add(item)
            session.flush()
            print(f"Item '{item.title}' id: {item.id}")

    print(f"Token: {IdentityResolver(store).issue_token(user.id)}")


if __name__ == "__main__":
    main()
