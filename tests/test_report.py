import asyncio

import pytest

from depstats.models import Repository, SortKey
from depstats.report import (
    HEADER,
    format_row,
    gather_repositories,
    render_table,
    report_repositories,
    sort_repositories,
)

from .fakes import repo_payload


def make_repo(full_name, **fields) -> Repository:
    return Repository.model_validate(repo_payload(full_name, **fields))


def test_sort_by_each_key():
    repos = [
        make_repo("a/one", watchers_count=3, stargazers_count=1, forks_count=9, open_issues_count=5),
        make_repo("a/two", watchers_count=1, stargazers_count=7, forks_count=2, open_issues_count=0),
        make_repo("a/three", watchers_count=2, stargazers_count=4, forks_count=5, open_issues_count=8),
    ]

    def names(key):
        return [repo.full_name for repo in sort_repositories(repos, key)]

    assert names(SortKey.WATCHERS) == ["a/two", "a/three", "a/one"]
    assert names(SortKey.STARS) == ["a/one", "a/three", "a/two"]
    assert names(SortKey.FORKS) == ["a/two", "a/three", "a/one"]
    assert names(SortKey.ISSUES) == ["a/two", "a/one", "a/three"]


def test_sort_is_stable_for_ties():
    repos = [
        make_repo("a/first", watchers_count=5),
        make_repo("a/low", watchers_count=1),
        make_repo("a/second", watchers_count=5),
        make_repo("a/third", watchers_count=5),
    ]
    ordered = sort_repositories(repos, SortKey.WATCHERS)
    assert [repo.full_name for repo in ordered] == ["a/low", "a/first", "a/second", "a/third"]


def test_sorted_rows_are_non_decreasing():
    repos = [make_repo(f"a/r{i}", forks_count=(i * 7) % 5) for i in range(10)]
    counts = [repo.forks_count for repo in sort_repositories(repos, SortKey.FORKS)]
    assert all(left <= right for left, right in zip(counts, counts[1:]))


def test_format_row_for_fork_with_parent():
    repo = make_repo(
        "someone/widget",
        fork=True,
        parent=repo_payload("acme/widget"),
        stargazers_count=3,
        watchers_count=4,
        open_issues_count=5,
        license={"key": "mit", "name": "MIT License"},
        default_branch="develop",
    )
    assert format_row(repo) == [
        "someone/widget",
        "true",
        "acme/widget",
        "3",
        "4",
        "5",
        "MIT License",
        "develop",
    ]


def test_format_row_ignores_parent_when_not_a_fork():
    repo = make_repo("acme/widget", fork=False, parent=repo_payload("other/widget"))
    row = format_row(repo)
    assert row[1] == "false"
    assert row[2] == ""
    assert row[6] == ""


def test_render_table_empty_is_header_only():
    table = render_table([])
    lines = table.splitlines()
    assert len(lines) == 1
    assert [cell.strip() for cell in lines[0].split("|")[:-1]] == HEADER


def test_render_table_right_aligns_columns():
    repos = [
        make_repo("acme/widget", stargazers_count=12345),
        make_repo("a/b", stargazers_count=1),
    ]
    lines = render_table(repos).splitlines()

    assert len(lines) == 3
    assert len({len(line) for line in lines}) == 1
    star_column = [line.split("|")[3] for line in lines]
    assert star_column[1].endswith("12345")
    assert star_column[2].endswith("1")
    assert len(star_column[1]) == len(star_column[2])


def test_render_table_is_deterministic():
    repos = [make_repo("acme/widget"), make_repo("acme/gadget")]
    assert render_table(repos) == render_table(list(repos))


@pytest.mark.asyncio
async def test_gather_repositories_reads_until_sentinel():
    queue = asyncio.Queue()
    for name in ["a/one", "a/two"]:
        queue.put_nowait(make_repo(name))
    queue.put_nowait(None)

    repos = await gather_repositories(queue)
    assert [repo.full_name for repo in repos] == ["a/one", "a/two"]


@pytest.mark.asyncio
async def test_report_repositories_sorts_before_rendering():
    queue = asyncio.Queue()
    queue.put_nowait(make_repo("a/many", watchers_count=10))
    queue.put_nowait(make_repo("a/few", watchers_count=1))
    queue.put_nowait(None)

    lines = (await report_repositories(queue, SortKey.WATCHERS)).splitlines()
    assert lines[1].split("|")[0].strip() == "a/few"
    assert lines[2].split("|")[0].strip() == "a/many"
