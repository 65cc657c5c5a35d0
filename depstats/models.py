from enum import Enum

from pydantic import BaseModel, ConfigDict


class Identifier(BaseModel):
    """A module path pointing at a hosted repository, e.g. github.com/acme/widget."""

    model_config = ConfigDict(frozen=True)

    path: str

    @property
    def owner(self) -> str:
        return self.path.split("/")[-2]

    @property
    def name(self) -> str:
        return self.path.split("/")[-1]

    @property
    def full_name(self) -> str:
        # Only the last two segments are trusted, the host segment is dropped
        return f"{self.owner}/{self.name}"


class Owner(BaseModel):
    login: str = ""


class License(BaseModel):
    key: str = ""
    name: str = ""
    spdx_id: str | None = None
    url: str | None = None


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = 0
    name: str = ""
    full_name: str
    owner: Owner | None = None
    # Only one level of lineage is kept, the parent's own parent is never fetched
    parent: "Repository | None" = None
    fork: bool = False
    url: str = ""
    forks_count: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0
    open_issues_count: int = 0
    license: License | None = None
    default_branch: str = ""


class SortKey(str, Enum):
    WATCHERS = "watchers"
    STARS = "stars"
    FORKS = "forks"
    ISSUES = "issues"

    @property
    def field(self) -> str:
        return {
            SortKey.WATCHERS: "watchers_count",
            SortKey.STARS: "stargazers_count",
            SortKey.FORKS: "forks_count",
            SortKey.ISSUES: "open_issues_count",
        }[self]
