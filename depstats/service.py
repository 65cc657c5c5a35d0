import asyncio
import logging
import time

import aiohttp
import ujson
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Identifier, Repository


class GitHubConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="GITHUB_", extra="ignore"
    )

    api_url: str = "https://api.github.com"
    # An empty token is never sent, so it fails validation like a missing one
    token: str = Field(min_length=1)

    connection_limit: int = 4
    # Seconds allowed for a single repository lookup
    request_timeout: float = 30


class GitHubService:
    def __init__(self, config: GitHubConfig, session: aiohttp.ClientSession):
        self.settings = config
        self.session = session

    @classmethod
    async def create(cls, config: GitHubConfig):
        connector = aiohttp.TCPConnector(limit=config.connection_limit)
        timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        session = aiohttp.ClientSession(connector=connector, timeout=timeout)
        return cls(config, session)

    async def close(self):
        await self.session.close()

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"token {self.settings.token}",
            "Accept": "application/vnd.github+json",
        }

    def repository_url(self, identifier: Identifier) -> str:
        return f"{self.settings.api_url.rstrip('/')}/repos/{identifier.full_name}"

    async def fetch_repository(self, identifier: Identifier) -> Repository | None:
        """
        Look up metadata for one identifier.
        Any failure is logged and yields None, so one bad dependency never stops the others.
        """
        if identifier.path.count("/") < 1:
            logging.warning(f"Invalid repo format: {identifier.path}")
            return None

        repo = identifier.full_name
        try:
            request_start = time.time()
            async with self.session.get(
                self.repository_url(identifier), headers=self.headers
            ) as response:
                logging.debug(f"Lookup time for {repo}: {time.time() - request_start:.2f}s")
                if response.status != 200:
                    logging.warning(
                        f"Received non-200 response from GitHub API for repo {repo}: {response.status}"
                    )
                    return None

                # Decode regardless of the Content-Type header
                payload = await response.json(loads=ujson.loads, content_type=None)
                return Repository.model_validate(payload)
        except aiohttp.ClientError as e:
            logging.warning(f"Error making request for repo {repo}: {e!r}")
        except asyncio.TimeoutError:
            logging.warning(f"Timeout in request for repo {repo}")
        except ValueError as e:
            # ujson decode errors and pydantic ValidationError both land here
            logging.warning(f"Error decoding response for repo {repo}: {e}")
        return None
