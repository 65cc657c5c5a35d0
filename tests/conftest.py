import pytest

from depstats.service import GitHubConfig, GitHubService

from .fakes import FakeSession


@pytest.fixture
def github_config() -> GitHubConfig:
    return GitHubConfig(token="secret", _env_file=None)


@pytest.fixture
def make_service(github_config):
    def _make(responses: dict | None = None) -> GitHubService:
        return GitHubService(github_config, FakeSession(responses))

    return _make
