"""GitHub API client declared with feignhttp."""

import asyncio
import os
from typing import Annotated

from pydantic import BaseModel

from feignhttp import Body, ClientConfig, Header, HttpxTransport, Path, feign, get, post


class Repository(BaseModel):
    name: str
    full_name: str
    stargazers_count: int


class Issue(BaseModel):
    title: str
    body: str | None = None


# Shared base URL, headers and timeouts for every endpoint
@feign(
    "https://api.github.com",
    headers={"Accept": "application/vnd.github.v3+json"},
    connect_timeout=2000,
    timeout=10_000,
)
class GitHubClient:
    """Client for the GitHub REST API."""

    def __init__(self, transport=None):
        self.transport = transport

    @get("/repos/{owner}/{repo}")
    async def repository(
        self, owner: Annotated[str, Path()], repo: Annotated[str, Path()]
    ) -> Repository: ...

    @get("/users/{user}/repos")
    async def repositories(
        self, user: Annotated[str, Path()], page: int = 1, per_page: int = 5
    ) -> list[Repository]: ...

    @post(path="/markdown/raw", headers="Content-Type: text/plain")
    async def render_markdown(self, text: Annotated[str, Body()]) -> str: ...

    @post("/repos/{owner}/{repo}/issues")
    async def create_issue(
        self,
        owner: Annotated[str, Path()],
        repo: Annotated[str, Path()],
        issue: Annotated[Issue, Body()],
        authorization: Annotated[str, Header()],
    ) -> dict: ...


async def main():
    """Main function demonstrating declared endpoints."""
    async with HttpxTransport(ClientConfig.from_env()) as transport:
        github = GitHubClient(transport)

        print("Fetching repository...")
        repo = await github.repository("dxx", "feignhttp")
        print(f"{repo.full_name}: {repo.stargazers_count} stars")

        print("\nFetching repositories...")
        for repo in await github.repositories("octocat", per_page=3):
            print(f"- {repo.name}")

        print("\nRendering markdown...")
        print(await github.render_markdown("Hello **feignhttp**"))

        token = os.getenv("GITHUB_TOKEN")
        if token:
            issue = await github.create_issue(
                "octocat", "Hello-World", Issue(title="Found a bug"), authorization=f"token {token}"
            )
            print(f"\nCreated issue #{issue['number']}")


if __name__ == "__main__":
    asyncio.run(main())
