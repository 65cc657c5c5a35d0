"""
Three-stage dependency pipeline. Asynchronous, so lookups overlap.
Manifest lines -> identifiers -> repository metadata -> sorted table.
Stages hand items over through queues and signal completion with a None sentinel.
"""

import asyncio
import logging
import time
from typing import Iterable

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .manifest import collect_identifiers
from .models import Identifier, Repository, SortKey
from .report import report_repositories
from .service import GitHubService


class PipelineConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="DEPSTATS_", extra="ignore"
    )

    # Concurrent repository lookups
    workers: int = Field(default=4, ge=1)
    # Overall time budget for a run in seconds, unlimited when unset
    deadline: float | None = None


async def resolve_worker(
    service: GitHubService,
    identifiers: asyncio.Queue[Identifier | None],
    results: asyncio.Queue[Repository | None],
) -> int:
    resolved = 0
    while True:
        identifier = await identifiers.get()
        if identifier is None:
            # Put the sentinel back so sibling workers also see it
            await identifiers.put(None)
            return resolved

        repo = await service.fetch_repository(identifier)
        if repo is not None:
            await results.put(repo)
            resolved += 1


async def resolve_repositories(
    service: GitHubService,
    identifiers: asyncio.Queue[Identifier | None],
    results: asyncio.Queue[Repository | None],
    workers: int = 1,
) -> int:
    try:
        counts = await asyncio.gather(
            *[resolve_worker(service, identifiers, results) for _ in range(workers)]
        )
    finally:
        # Downstream only finishes once every worker is done
        await results.put(None)

    logging.info(f"Resolved {sum(counts)} repositories with {workers} workers")
    return sum(counts)


async def run_pipeline(
    lines: Iterable[str],
    service: GitHubService,
    sort_key: SortKey,
    config: PipelineConfig,
) -> str:
    start_time = time.time()

    identifiers: asyncio.Queue[Identifier | None] = asyncio.Queue()
    results: asyncio.Queue[Repository | None] = asyncio.Queue()

    _, _, table = await asyncio.gather(
        collect_identifiers(lines, identifiers),
        resolve_repositories(service, identifiers, results, config.workers),
        report_repositories(results, sort_key),
    )

    logging.info(f"Pipeline time: {time.time() - start_time:.2f}s")
    return table


async def run_with_deadline(
    lines: Iterable[str],
    service: GitHubService,
    sort_key: SortKey,
    config: PipelineConfig,
) -> str:
    if config.deadline is None:
        return await run_pipeline(lines, service, sort_key, config)
    return await asyncio.wait_for(
        run_pipeline(lines, service, sort_key, config), timeout=config.deadline
    )
