"""Remote repository service boundary.

The adapter talks to GitLab only through this interface, so the dispatch
pipeline can be exercised against an in-memory implementation.
"""

from abc import ABC, abstractmethod
from typing import Optional

from domains.gitlab.schemas import (
    CreateIssueOptions,
    CreateMergeRequestOptions,
    CreateRepositoryOptions,
    FileOperation,
    GitLabCommit,
    GitLabContent,
    GitLabCreateUpdateFileResponse,
    GitLabFork,
    GitLabIssue,
    GitLabMergeRequest,
    GitLabReference,
    GitLabRepository,
    GitLabSearchResponse,
)


class RepositoryService(ABC):
    """Typed operations against a remote repository service."""

    @abstractmethod
    async def fork_project(
        self, project_id: str, namespace: Optional[str] = None
    ) -> GitLabFork:
        pass

    @abstractmethod
    async def create_branch(self, project_id: str, name: str, ref: str) -> GitLabReference:
        pass

    @abstractmethod
    async def get_default_branch_ref(self, project_id: str) -> str:
        pass

    @abstractmethod
    async def get_file_contents(
        self, project_id: str, file_path: str, ref: Optional[str] = None
    ) -> GitLabContent:
        pass

    @abstractmethod
    async def create_or_update_file(
        self,
        project_id: str,
        file_path: str,
        content: str,
        commit_message: str,
        branch: str,
        previous_path: Optional[str] = None,
    ) -> GitLabCreateUpdateFileResponse:
        pass

    @abstractmethod
    async def create_commit(
        self,
        project_id: str,
        message: str,
        branch: str,
        actions: list[FileOperation],
    ) -> GitLabCommit:
        pass

    @abstractmethod
    async def create_issue(
        self, project_id: str, options: CreateIssueOptions
    ) -> GitLabIssue:
        pass

    @abstractmethod
    async def create_merge_request(
        self, project_id: str, options: CreateMergeRequestOptions
    ) -> GitLabMergeRequest:
        pass

    @abstractmethod
    async def search_projects(
        self, query: str, page: int = 1, per_page: int = 20
    ) -> GitLabSearchResponse:
        pass

    @abstractmethod
    async def create_repository(self, options: CreateRepositoryOptions) -> GitLabRepository:
        pass

    async def close(self) -> None:
        """Release any resources held by the service."""
        return None
