"""Diagnostics CLI: inspect the course catalog and a user's unlock state."""

import asyncio
from typing import Any, Awaitable, Callable

import click

from learnpath.config import settings
from learnpath.deps import create_mongo_client, create_redis_client
from learnpath.logging_config import setup_logging
from learnpath.services import unlock_service


def _run(job: Callable[..., Awaitable[Any]]) -> Any:
    """Run an unlock_service coroutine against the configured MongoDB and Redis."""

    async def runner():
        mongo = create_mongo_client(settings.MONGO_URI)
        r = create_redis_client(settings.REDIS_URL)
        try:
            return await job(mongo.get_default_database(), r)
        finally:
            await r.close()
            mongo.close()

    return asyncio.run(runner())


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Course unlocking diagnostics."""
    setup_logging(log_level="DEBUG" if verbose else "WARNING")


@cli.command()
def catalog() -> None:
    """List active courses with lesson counts and ordering problems."""
    report = _run(unlock_service.audit_catalog)

    if not report["courses"]:
        click.echo("No active courses.")
        return

    for course in report["courses"]:
        click.echo(f"{course['order_index']:>3}. {course['title']} (id={course['course_id']}) "
                   f"- {course['total_lessons']} lessons")

    problems = report["irregularities"]
    if problems:
        click.echo(f"\n{len(problems)} ordering irregularities:")
        for item in problems:
            click.echo(f"  {item['kind']} at order_index={item['order_index']} courses={item['course_ids']}")
    else:
        click.echo("\nOrdering OK")


@cli.command()
@click.argument("user_id", type=int)
def unlock(user_id: int) -> None:
    """Show which courses USER_ID can open, and why."""
    items = _run(lambda db, r: unlock_service.course_overview(db, r, user_id))

    click.echo(f"User {user_id}:")
    for it in items:
        status = "UNLOCKED" if it["is_unlocked"] else "LOCKED"
        click.echo(f"  {it['order_index']:>3}. {it['title']}: {status} ({it['unlock_reason']}) "
                   f"- {it['completed_lessons']}/{it['total_lessons']}")


@cli.command()
@click.argument("user_id", type=int)
def progress(user_id: int) -> None:
    """Show per-course completion for USER_ID."""
    items = _run(lambda db, r: unlock_service.compute_progress(db, r, user_id))

    click.echo(f"User {user_id}:")
    for p in items:
        click.echo(f"  course {p.course_id} (order {p.order_index}): "
                   f"{p.completed_lessons}/{p.total_lessons} {p.percent:.0f}%")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
