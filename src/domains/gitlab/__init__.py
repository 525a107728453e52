"""GitLab Domain - repository, file, issue and merge request tools.

Maps each validated tool call onto one RepositoryService operation.
"""

from typing import TYPE_CHECKING, Any, Awaitable, Callable

from pydantic import BaseModel

from shared.logging import get_logger
from shared.models import DomainConfig, ExecutionType, ToolDefinition
from shared.schema import create_tool_schema
from domains.base import BaseAdapter
from domains.gitlab.schemas import (
    CreateBranchParams,
    CreateIssueOptions,
    CreateIssueParams,
    CreateMergeRequestOptions,
    CreateMergeRequestParams,
    CreateOrUpdateFileParams,
    CreateRepositoryOptions,
    CreateRepositoryParams,
    FileOperation,
    ForkRepositoryParams,
    GetFileContentsParams,
    PushFilesParams,
    SearchRepositoriesParams,
)
from domains.gitlab.service import RepositoryService

if TYPE_CHECKING:
    from mcp_server.registry import ToolRegistry
    from mcp_server.router import ToolRouter

logger = get_logger(__name__)

DOMAIN = "gitlab"


def _tool(
    name: str,
    description: str,
    arguments_model: type[BaseModel],
    execution_type: ExecutionType = ExecutionType.WRITE,
    project_scoped: bool = True,
) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        domain=DOMAIN,
        description=description,
        input_schema=create_tool_schema(arguments_model),
        arguments_model=arguments_model,
        execution_type=execution_type,
        project_scoped=project_scoped,
    )


class GitLabAdapter(BaseAdapter):
    """
    GitLab Domain Adapter.

    Provides tools for:
    - File reads and writes (single file or multi-file commit)
    - Project search, creation and forking
    - Branches, issues and merge requests
    """

    def __init__(self, config: DomainConfig, service: RepositoryService) -> None:
        super().__init__(config)
        self.service = service
        self._define_tools()

    def _define_tools(self) -> None:
        """Define all GitLab tools. Declaration order is listing order."""
        for tool in (
            _tool(
                "create_or_update_file",
                "Create or update a single file in a GitLab project",
                CreateOrUpdateFileParams,
            ),
            _tool(
                "search_repositories",
                "Search for GitLab projects",
                SearchRepositoriesParams,
                execution_type=ExecutionType.READ,
                project_scoped=False,
            ),
            _tool(
                "create_repository",
                "Create a new GitLab project",
                CreateRepositoryParams,
                project_scoped=False,
            ),
            _tool(
                "get_file_contents",
                "Get the contents of a file or directory from a GitLab project",
                GetFileContentsParams,
                execution_type=ExecutionType.READ,
            ),
            _tool(
                "push_files",
                "Push multiple files to a GitLab project in a single commit",
                PushFilesParams,
            ),
            _tool(
                "create_issue",
                "Create a new issue in a GitLab project",
                CreateIssueParams,
            ),
            _tool(
                "create_merge_request",
                "Create a new merge request in a GitLab project",
                CreateMergeRequestParams,
            ),
            _tool(
                "fork_repository",
                "Fork a GitLab project to your account or specified namespace",
                ForkRepositoryParams,
            ),
            _tool(
                "create_branch",
                "Create a new branch in a GitLab project",
                CreateBranchParams,
            ),
        ):
            self._tools[tool.name] = tool

    async def execute(self, action: str, arguments: BaseModel) -> BaseModel:
        """Execute a GitLab action."""
        logger.debug("GitLab action", action=action)

        handlers: dict[str, Callable[[Any], Awaitable[BaseModel]]] = {
            "fork_repository": self._fork_repository,
            "create_branch": self._create_branch,
            "search_repositories": self._search_repositories,
            "create_repository": self._create_repository,
            "get_file_contents": self._get_file_contents,
            "create_or_update_file": self._create_or_update_file,
            "push_files": self._push_files,
            "create_issue": self._create_issue,
            "create_merge_request": self._create_merge_request,
        }

        if self.get_tool(action) is None:
            raise ValueError(f"Action '{action}' not found in domain '{self.domain}'")

        return await handlers[action](arguments)

    async def _fork_repository(self, params: ForkRepositoryParams) -> BaseModel:
        return await self.service.fork_project(params.project_id, params.namespace)

    async def _create_branch(self, params: CreateBranchParams) -> BaseModel:
        ref = params.ref
        if not ref:
            ref = await self.service.get_default_branch_ref(params.project_id)
        return await self.service.create_branch(params.project_id, params.branch, ref)

    async def _search_repositories(self, params: SearchRepositoriesParams) -> BaseModel:
        return await self.service.search_projects(params.search, params.page, params.per_page)

    async def _create_repository(self, params: CreateRepositoryParams) -> BaseModel:
        return await self.service.create_repository(
            CreateRepositoryOptions.model_validate(params.model_dump())
        )

    async def _get_file_contents(self, params: GetFileContentsParams) -> BaseModel:
        return await self.service.get_file_contents(
            params.project_id, params.file_path, params.ref
        )

    async def _create_or_update_file(self, params: CreateOrUpdateFileParams) -> BaseModel:
        return await self.service.create_or_update_file(
            params.project_id,
            params.file_path,
            params.content,
            params.commit_message,
            params.branch,
            params.previous_path,
        )

    async def _push_files(self, params: PushFilesParams) -> BaseModel:
        return await self.service.create_commit(
            params.project_id,
            params.commit_message,
            params.branch,
            [FileOperation(path=f.file_path, content=f.content) for f in params.files],
        )

    async def _create_issue(self, params: CreateIssueParams) -> BaseModel:
        options = CreateIssueOptions.model_validate(
            params.model_dump(exclude={"project_id"})
        )
        return await self.service.create_issue(params.project_id, options)

    async def _create_merge_request(self, params: CreateMergeRequestParams) -> BaseModel:
        options = CreateMergeRequestOptions.model_validate(
            params.model_dump(exclude={"project_id"})
        )
        return await self.service.create_merge_request(params.project_id, options)


def register_gitlab_domain(
    registry: "ToolRegistry",
    router: "ToolRouter",
    config: DomainConfig,
    service: RepositoryService,
) -> GitLabAdapter:
    """Register the GitLab domain with the MCP server."""
    adapter = GitLabAdapter(config, service)

    registry.register_many(adapter.tools)
    router.register_adapter(DOMAIN, adapter.execute)

    logger.info("GitLab domain registered", tool_count=len(adapter.tools))
    return adapter


__all__ = ["DOMAIN", "GitLabAdapter", "register_gitlab_domain"]
