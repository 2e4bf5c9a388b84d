"""Administrative commands that are deliberately not exposed over HTTP.

Usage (from the repository root):
  python -m data.admin_tools migrate-categories
  python -m data.admin_tools reset-status 42
  python -m data.admin_tools create-user --email n@example.com --password secret1 --role nutritionist --nutritionist-id NUTR001
  python -m data.admin_tools promote --email someone@example.com --role admin

The database is taken from WRITE_DATABASE_URL, like the API.
"""
from __future__ import annotations

import argparse
from typing import Dict

from sqlalchemy import func

from core.logger import get_logger
from database import init_db
from database.database import WriteSessionLocal
from database.models import Recipe
from services.accounts import create_user, set_role
from services.categories import LEGACY_CATEGORIES
from services.moderation import recipe_moderation

logger = get_logger("data.admin_tools")


def category_counts(session) -> Dict[str, int]:
    rows = session.query(Recipe.category, func.count(Recipe.id)).group_by(Recipe.category).all()
    return {category: count for category, count in rows}


def migrate_categories(session=None) -> Dict[str, int]:
    """Rewrite legacy recipe categories to their canonical value.

    If `session` is not supplied, a `WriteSessionLocal` session is used.

    Returns:
        Number of recipes converted, keyed by legacy category.
    """
    close_session = False
    if session is None:
        session = WriteSessionLocal()
        close_session = True
    try:
        logger.info("Categories before migration: %s", category_counts(session))
        converted = {}
        for legacy, canonical in LEGACY_CATEGORIES.items():
            converted[legacy] = (
                session.query(Recipe)
                .filter(Recipe.category == legacy)
                .update(
                    {Recipe.category: canonical, Recipe.version: Recipe.version + 1},
                    synchronize_session=False,
                )
            )
            if converted[legacy]:
                logger.info("Converted %s recipes from '%s' to '%s'", converted[legacy], legacy, canonical)
        session.commit()
        logger.info("Categories after migration: %s", category_counts(session))
        return converted
    finally:
        if close_session:
            session.close()


def main(argv=None) -> int:
    p = argparse.ArgumentParser("Recipe service administration")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("migrate-categories", help="Convert legacy categories to plats/dessert")

    reset = sub.add_parser("reset-status", help="Put a recipe back into the pending state")
    reset.add_argument("recipe_id", type=int)

    create = sub.add_parser("create-user", help="Create an account")
    create.add_argument("--email", required=True)
    create.add_argument("--password", required=True)
    create.add_argument("--role", default="user", choices=["user", "nutritionist", "admin"])
    create.add_argument("--username")
    create.add_argument("--nutritionist-id")

    promote = sub.add_parser("promote", help="Change the role of an existing account")
    promote.add_argument("--email", required=True)
    promote.add_argument("--role", required=True, choices=["user", "nutritionist", "admin"])
    promote.add_argument("--nutritionist-id")

    args = p.parse_args(argv)
    init_db()

    if args.command == "migrate-categories":
        converted = migrate_categories()
        print(f"Converted {sum(converted.values())} recipes")
        return 0

    session = WriteSessionLocal()
    try:
        if args.command == "reset-status":
            recipe = recipe_moderation.reset_status(session, args.recipe_id)
            print(f"Recipe {recipe.id} is now {recipe.status}")
        elif args.command == "create-user":
            user = create_user(
                session,
                email=args.email,
                password=args.password,
                role=args.role,
                username=args.username,
                nutritionist_id=args.nutritionist_id,
            )
            print(f"Created {user.role} {user.email} (id={user.id})")
        elif args.command == "promote":
            user = set_role(session, args.email, args.role, args.nutritionist_id)
            print(f"User {user.email} updated to role={user.role}")
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
