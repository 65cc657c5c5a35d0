import asyncio
import logging
from typing import Iterable

from .models import Repository, SortKey

HEADER = [
    "Name",
    "IsFork",
    "Parent Repo",
    "Stargazers",
    "Watchers",
    "Open Issues",
    "License",
    "Default Branch",
]

# Spaces added to the widest cell of each column
PADDING = 2


async def gather_repositories(
    queue: asyncio.Queue[Repository | None],
) -> list[Repository]:
    """Drain the queue in arrival order until the end-of-stream sentinel."""
    repos: list[Repository] = []
    while (repo := await queue.get()) is not None:
        repos.append(repo)
    logging.info(f"Collected {len(repos)} repositories")
    return repos


def sort_repositories(repos: Iterable[Repository], key: SortKey) -> list[Repository]:
    # sorted() is stable, ties keep arrival order
    return sorted(repos, key=lambda repo: getattr(repo, key.field))


def format_row(repo: Repository) -> list[str]:
    parent = repo.parent.full_name if repo.fork and repo.parent else ""
    license_name = repo.license.name if repo.license else ""
    return [
        repo.full_name,
        "true" if repo.fork else "false",
        parent,
        str(repo.stargazers_count),
        str(repo.watchers_count),
        str(repo.open_issues_count),
        license_name,
        repo.default_branch,
    ]


def render_table(repos: Iterable[Repository]) -> str:
    rows = [HEADER] + [format_row(repo) for repo in repos]
    widths = [max(len(row[i]) for row in rows) + PADDING for i in range(len(HEADER))]
    lines = [
        "".join(cell.rjust(width) + "|" for cell, width in zip(row, widths))
        for row in rows
    ]
    return "\n".join(lines) + "\n"


async def report_repositories(
    queue: asyncio.Queue[Repository | None], key: SortKey
) -> str:
    repos = await gather_repositories(queue)
    return render_table(sort_repositories(repos, key))
