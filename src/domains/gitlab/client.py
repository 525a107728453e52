"""GitLab REST API client.

Implements the RepositoryService operations against the GitLab v4 API.
Each operation issues its request once; failures surface as BackendError.
"""

import base64
from typing import Any, Optional

import httpx

from shared.logging import get_logger
from shared.models import DomainConfig
from domains.base import RESTClient, encode_path_segment
from domains.gitlab.schemas import (
    CreateIssueOptions,
    CreateMergeRequestOptions,
    CreateRepositoryOptions,
    FileOperation,
    GitLabCommit,
    GitLabContent,
    GitLabCreateUpdateFileResponse,
    GitLabDirectoryListing,
    GitLabFileContent,
    GitLabFork,
    GitLabIssue,
    GitLabMergeRequest,
    GitLabReference,
    GitLabRepository,
    GitLabSearchResponse,
)
from domains.gitlab.service import RepositoryService

logger = get_logger(__name__)


def drop_none(payload: dict[str, Any]) -> dict[str, Any]:
    """Omit unset optional fields from a request body."""
    return {key: value for key, value in payload.items() if value is not None}


class GitLabClient(RESTClient, RepositoryService):
    """
    GitLab API client.

    Authenticates with a personal access token sent as a bearer token.
    """

    def __init__(
        self,
        config: DomainConfig,
        token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        super().__init__(
            config,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
        )

    @staticmethod
    def _project_path(project_id: str) -> str:
        return f"/projects/{encode_path_segment(project_id)}"

    async def fork_project(
        self, project_id: str, namespace: Optional[str] = None
    ) -> GitLabFork:
        params = {"namespace": namespace} if namespace else None
        return await self._request(
            "POST",
            f"{self._project_path(project_id)}/fork",
            GitLabFork,
            params=params,
        )

    async def create_branch(self, project_id: str, name: str, ref: str) -> GitLabReference:
        return await self._request(
            "POST",
            f"{self._project_path(project_id)}/repository/branches",
            GitLabReference,
            json={"branch": name, "ref": ref},
        )

    async def get_default_branch_ref(self, project_id: str) -> str:
        project = await self._request(
            "GET", self._project_path(project_id), GitLabRepository
        )
        return project.default_branch

    async def get_file_contents(
        self, project_id: str, file_path: str, ref: Optional[str] = None
    ) -> GitLabContent:
        path = (
            f"{self._project_path(project_id)}/repository/files/"
            f"{encode_path_segment(file_path)}"
        )
        response = await self._send("GET", path, params={"ref": ref} if ref else None)
        payload = response.json()

        if isinstance(payload, list):
            return self._parse(GitLabDirectoryListing, payload, response.status_code)

        data: GitLabFileContent = self._parse(
            GitLabFileContent, payload, response.status_code
        )
        if data.content:
            # Binary files decode lossily instead of failing the read
            data.content = base64.b64decode(data.content).decode("utf-8", errors="replace")
        return data

    async def create_or_update_file(
        self,
        project_id: str,
        file_path: str,
        content: str,
        commit_message: str,
        branch: str,
        previous_path: Optional[str] = None,
    ) -> GitLabCreateUpdateFileResponse:
        path = (
            f"{self._project_path(project_id)}/repository/files/"
            f"{encode_path_segment(file_path)}"
        )
        body = drop_none({
            "branch": branch,
            "content": content,
            "commit_message": commit_message,
            "previous_path": previous_path or None,
        })

        # Best-effort existence probe: any failure means "create"
        method = "POST"
        try:
            await self.get_file_contents(project_id, file_path, branch)
            method = "PUT"
        except Exception as e:
            logger.debug(
                "File existence probe failed, creating",
                project_id=project_id,
                file_path=file_path,
                error=str(e),
            )

        return await self._request(method, path, GitLabCreateUpdateFileResponse, json=body)

    async def create_commit(
        self,
        project_id: str,
        message: str,
        branch: str,
        actions: list[FileOperation],
    ) -> GitLabCommit:
        return await self._request(
            "POST",
            f"{self._project_path(project_id)}/repository/commits",
            GitLabCommit,
            json={
                "branch": branch,
                "commit_message": message,
                "actions": [
                    {"action": "create", "file_path": action.path, "content": action.content}
                    for action in actions
                ],
            },
        )

    async def create_issue(
        self, project_id: str, options: CreateIssueOptions
    ) -> GitLabIssue:
        return await self._request(
            "POST",
            f"{self._project_path(project_id)}/issues",
            GitLabIssue,
            json=drop_none({
                "title": options.title,
                "description": options.description,
                "assignee_ids": options.assignee_ids,
                "milestone_id": options.milestone_id,
                "labels": ",".join(options.labels) if options.labels is not None else None,
            }),
        )

    async def create_merge_request(
        self, project_id: str, options: CreateMergeRequestOptions
    ) -> GitLabMergeRequest:
        return await self._request(
            "POST",
            f"{self._project_path(project_id)}/merge_requests",
            GitLabMergeRequest,
            json=drop_none({
                "title": options.title,
                "description": options.description,
                "source_branch": options.source_branch,
                "target_branch": options.target_branch,
                "allow_collaboration": options.allow_collaboration,
                "draft": options.draft,
            }),
        )

    async def search_projects(
        self, query: str, page: int = 1, per_page: int = 20
    ) -> GitLabSearchResponse:
        response = await self._send(
            "GET",
            "/projects",
            params={"search": query, "page": str(page), "per_page": str(per_page)},
        )
        total = response.headers.get("X-Total") or "0"
        return self._parse(
            GitLabSearchResponse,
            {"count": int(total) if total.isdigit() else 0, "items": response.json()},
            response.status_code,
        )

    async def create_repository(self, options: CreateRepositoryOptions) -> GitLabRepository:
        return await self._request(
            "POST",
            "/projects",
            GitLabRepository,
            json=drop_none({
                "name": options.name,
                "description": options.description,
                "visibility": options.visibility,
                "initialize_with_readme": options.initialize_with_readme,
            }),
        )
