"""Shared fixtures: an in-memory repository service and application builders."""

from typing import Any, Optional

import pytest

from shared.config import Settings
from domains.gitlab.schemas import (
    CreateIssueOptions,
    CreateMergeRequestOptions,
    CreateRepositoryOptions,
    FileOperation,
    GitLabCommit,
    GitLabContent,
    GitLabCreateUpdateFileResponse,
    GitLabFileContent,
    GitLabFork,
    GitLabIssue,
    GitLabMergeRequest,
    GitLabReference,
    GitLabRepository,
    GitLabSearchResponse,
)
from domains.gitlab.service import RepositoryService

USER = {
    "username": "octo",
    "id": 7,
    "name": "Octo Cat",
    "web_url": "https://gitlab.example.com/octo",
}

PROJECT = {
    "id": 42,
    "name": "demo",
    "path_with_namespace": "octo/demo",
    "visibility": "private",
    "web_url": "https://gitlab.example.com/octo/demo",
    "description": None,
    "default_branch": "main",
}


class FakeRepositoryService(RepositoryService):
    """Records every call and answers with canned GitLab objects."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.closed = False
        self.fail_with: Optional[Exception] = None

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with

    async def fork_project(self, project_id, namespace=None) -> GitLabFork:
        self._record("fork_project", project_id, namespace)
        return GitLabFork.model_validate(PROJECT)

    async def create_branch(self, project_id, name, ref) -> GitLabReference:
        self._record("create_branch", project_id, name, ref)
        return GitLabReference.model_validate({"name": name, "commit": {"id": "abc123"}})

    async def get_default_branch_ref(self, project_id) -> str:
        self._record("get_default_branch_ref", project_id)
        return "main"

    async def get_file_contents(self, project_id, file_path, ref=None) -> GitLabContent:
        self._record("get_file_contents", project_id, file_path, ref)
        return GitLabFileContent(
            file_name=file_path.rsplit("/", 1)[-1],
            file_path=file_path,
            size=5,
            encoding="base64",
            content="hello",
            content_sha256="0" * 64,
            ref=ref or "main",
            blob_id="b1",
            commit_id="c1",
            last_commit_id="c0",
        )

    async def create_or_update_file(
        self, project_id, file_path, content, commit_message, branch, previous_path=None
    ) -> GitLabCreateUpdateFileResponse:
        self._record(
            "create_or_update_file",
            project_id, file_path, content, commit_message, branch, previous_path,
        )
        return GitLabCreateUpdateFileResponse(file_path=file_path, branch=branch)

    async def create_commit(
        self, project_id, message, branch, actions: list[FileOperation]
    ) -> GitLabCommit:
        self._record("create_commit", project_id, message, branch, actions)
        return GitLabCommit(
            id="c2",
            short_id="c2",
            title=message,
            author_name="Octo Cat",
            author_email="octo@example.com",
            authored_date="2024-01-01T00:00:00Z",
            committer_name="Octo Cat",
            committer_email="octo@example.com",
            committed_date="2024-01-01T00:00:00Z",
            web_url="https://gitlab.example.com/octo/demo/-/commit/c2",
            parent_ids=["c1"],
        )

    async def create_issue(self, project_id, options: CreateIssueOptions) -> GitLabIssue:
        self._record("create_issue", project_id, options)
        return GitLabIssue.model_validate({
            "id": 1,
            "iid": 1,
            "project_id": 42,
            "title": options.title,
            "description": options.description,
            "state": "opened",
            "author": USER,
            "labels": options.labels or [],
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
            "web_url": "https://gitlab.example.com/octo/demo/-/issues/1",
        })

    async def create_merge_request(
        self, project_id, options: CreateMergeRequestOptions
    ) -> GitLabMergeRequest:
        self._record("create_merge_request", project_id, options)
        return GitLabMergeRequest.model_validate({
            "id": 3,
            "iid": 3,
            "project_id": 42,
            "title": options.title,
            "state": "opened",
            "author": USER,
            "source_branch": options.source_branch,
            "target_branch": options.target_branch,
            "web_url": "https://gitlab.example.com/octo/demo/-/merge_requests/3",
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
        })

    async def search_projects(self, query, page=1, per_page=20) -> GitLabSearchResponse:
        self._record("search_projects", query, page, per_page)
        return GitLabSearchResponse.model_validate({"count": 1, "items": [PROJECT]})

    async def create_repository(self, options: CreateRepositoryOptions) -> GitLabRepository:
        self._record("create_repository", options)
        return GitLabRepository.model_validate({**PROJECT, "name": options.name})

    async def close(self) -> None:
        self.closed = True


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the process environment and any .env file."""
    values: dict[str, Any] = {
        "gitlab_personal_access_token": "test-token",
        "gitlab_api_url": "https://gitlab.example.com/api/v4",
        "disabled_handlers": "",
        "allowed_read_projects": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def fake_service() -> FakeRepositoryService:
    return FakeRepositoryService()


@pytest.fixture
def build_app(fake_service):
    """Factory building an application around the fake service."""
    from mcp_server.app import build_application

    def _build(**overrides: Any):
        return build_application(make_settings(**overrides), service=fake_service)

    return _build
