#!/usr/bin/env python
"""CLI entry point for the blog content API."""

import asyncio
import os
from pathlib import Path

import click
from dotenv import load_dotenv

from blog_backend import config
from blog_backend.cache import CacheInvalidator, CacheService
from blog_backend.db import CategoryRepository, Database, DatabaseConfig, UserRepository, create_tables
from blog_backend.errors import BlogError
from blog_backend.redis_client import RedisConfig, RedisConnection
from blog_backend.services import ROLES, AuthService, CategoryService

load_dotenv()


@click.group()
def cli():
    """Blog Content API - posts, comments, categories and knowledge articles."""
    pass


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", type=int, default=config.BACKEND_PORT, help="Port (default: PORT_BACKEND)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    click.echo(f"Starting Blog Content API on {host}:{port}")
    uvicorn.run("blog_backend.main:app", host=host, port=port, reload=reload)


@cli.command("init-db")
def init_db():
    """Create tables and indexes (safe to re-run)."""

    async def run():
        db = Database()
        await db.connect()
        try:
            await create_tables(db)
        finally:
            await db.close()

    asyncio.run(run())
    click.echo("✓ Database schema is up to date")


@cli.command("seed-categories")
def seed_categories():
    """Insert the default categories if none exist."""

    async def run():
        db = Database()
        redis = RedisConnection()
        await db.connect()
        try:
            await redis.connect()
        except Exception as e:
            click.echo(f"Redis unavailable ({e}), category cache not cleared")

        try:
            cache = CacheService(redis)
            service = CategoryService(CategoryRepository(db), cache, CacheInvalidator(cache))
            return await service.seed_defaults()
        finally:
            await redis.close()
            await db.close()

    inserted = asyncio.run(run())
    if inserted:
        click.echo(f"✓ Inserted {inserted} categories")
    else:
        click.echo("Categories already exist, nothing to seed")


@cli.command("create-user")
@click.argument("username")
@click.option("--role", type=click.Choice(ROLES), default="user", show_default=True)
@click.password_option(help="Password (prompted when omitted)")
def create_user(username: str, role: str, password: str):
    """Create an account, e.g. an admin that cannot self-register."""

    async def run():
        db = Database()
        await db.connect()
        try:
            return await AuthService(UserRepository(db)).create_user(username, password, role)
        finally:
            await db.close()

    try:
        user = asyncio.run(run())
    except BlogError as e:
        raise click.ClickException(e.message)
    click.echo(f"✓ Created {user['role']} '{user['username']}' (id {user['id']})")


@cli.command("clear-cache")
@click.argument("prefix")
def clear_cache(prefix: str):
    """Delete every cache key under PREFIX (e.g. posts, comments:42, knowledge)."""

    async def run():
        redis = RedisConnection()
        await redis.connect()
        try:
            return await CacheService(redis).delete_by_prefix(prefix)
        finally:
            await redis.close()

    removed = asyncio.run(run())
    click.echo(f"✓ Removed {removed} keys under '{prefix}:'")


@cli.command()
def status():
    """Show configuration."""
    click.echo("Blog Content API Status")
    click.echo("=" * 40)
    click.echo(f"Working Directory: {Path.cwd()}")
    click.echo(f"Environment: {os.getenv('ENV', 'development')}")
    click.echo(f"Port: {config.BACKEND_PORT}")

    if os.getenv("API_KEYS"):
        click.echo("✓ API keys configured")
    else:
        click.echo("✗ API keys missing (all writes will be rejected)")

    if config.JWT_SECRET:
        click.echo("✓ JWT secret configured")
    else:
        click.echo("✗ JWT secret missing (tokens reset on every restart)")

    click.echo(f"Database: {DatabaseConfig()}")
    click.echo(f"Redis: {RedisConfig()}")
    click.echo(f"CORS origins: {', '.join(config.get_cors_origins())}")


if __name__ == "__main__":
    cli()
