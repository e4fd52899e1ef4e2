# /// script
# dependencies = [
#   "conduit-clients[fastapi]",
#   "fastapi[standard]==0.115.12",
# ]
# ///
import os
import typing as t

import fastapi
import uvicorn

import conduit
import conduit.ext.fastapi


class GitHubApi(t.Protocol):
    @conduit.get("/users/{username}")
    def get_user(self, username: str) -> dict[str, t.Any]: ...

    @conduit.get("/users/{username}/repos")
    def list_repos(self, username: str, per_page: int | None = None) -> list[dict[str, t.Any]]: ...


def github_settings(_: conduit.Container) -> conduit.ClientSettings:
    token = os.environ.get("GITHUB_TOKEN")
    return conduit.ClientSettings(
        transport_name="github",
        base_address="https://api.github.com",
        auth_supplier=(lambda: token) if token else None,
    )


registry = conduit.Registry()
conduit.register_client(registry, GitHubApi, github_settings).configure_client(
    lambda c: c.headers.update({"Accept": "application/vnd.github+json"})
)

app = fastapi.FastAPI(lifespan=conduit.ext.fastapi.lifespan(registry))
GitHub = t.Annotated[GitHubApi, fastapi.Depends(conduit.ext.fastapi.provide(GitHubApi))]


@app.get("/users/{username}")
def get_user(username: str, github: GitHub) -> dict[str, t.Any]:
    user = github.get_user(username)
    repos = github.list_repos(username, per_page=5)
    return {"login": user["login"], "repos": [r["name"] for r in repos]}


if __name__ == "__main__":
    uvicorn.run(app, port=8000)
