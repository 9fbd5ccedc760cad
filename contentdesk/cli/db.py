"""Database CLI commands."""
import click
from flask import Blueprint
from flask.cli import with_appcontext
from contentdesk.extensions import db
from contentdesk.store import get_content_store

bp = Blueprint("db_cli", __name__)

SAMPLE_AUTHORS = [
    {"name": "Ada Lovelace", "bio": "Writes about engines, analytical and otherwise."},
    {"name": "Grace Hopper", "bio": "Compilers, COBOL and nanoseconds."},
]

SAMPLE_CATEGORIES = [
    {"title": "Engineering", "description": "How things are built."},
    {"title": "Announcements", "description": "News and release notes."},
]

SAMPLE_POSTS = [
    {"title": "Hello, World!", "status": "published", "categories": [0, 1]},
    {"title": "Notes on the Analytical Engine", "status": "draft", "categories": [0]},
    {"title": "Finding the First Bug", "status": "draft", "categories": [0]},
]


@bp.cli.command("init")
@with_appcontext
def init_db():
    """Create the database tables."""
    click.echo("Creating database tables...")
    db.create_all()
    click.echo("✅ Database initialization completed!")


@bp.cli.command("reset")
@click.confirmation_option(prompt="This will delete all data. Are you sure?")
@with_appcontext
def reset_db():
    """Reset the database (drop and recreate all tables)."""
    click.echo("Dropping all database tables...")
    db.drop_all()

    click.echo("Recreating database tables...")
    db.create_all()

    click.echo("✅ Database reset completed!")


@bp.cli.command("seed")
@with_appcontext
def seed_db():
    """Seed the database with sample authors, categories and posts."""
    from contentdesk.services.post_service import current_timestamp, slugify

    click.echo("Seeding database with sample data...")
    store = get_content_store()

    authors = [store.create("authors", data) for data in SAMPLE_AUTHORS]
    categories = [store.create("categories", data) for data in SAMPLE_CATEGORIES]
    click.echo(f"Created {len(authors)} authors and {len(categories)} categories")

    for i, sample in enumerate(SAMPLE_POSTS):
        data = {
            "title": sample["title"],
            "slug": slugify(sample["title"]),
            "excerpt": f"Sample post {i + 1}",
            "status": sample["status"],
            "author": authors[i % len(authors)]["id"],
            "categories": [categories[index]["id"] for index in sample["categories"]],
        }
        if sample["status"] == "published":
            data["publishedOn"] = current_timestamp()
        store.create("posts", data)
    click.echo(f"Created {len(SAMPLE_POSTS)} posts")

    click.echo("✅ Database seeding completed!")
