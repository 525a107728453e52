"""GitLab domain schemas.

Argument models validate tool input; response models type what the GitLab
REST API (v4) returns. Unknown response fields are dropped on parse.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, RootModel


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class GitLabAuthor(BaseModel):
    name: str
    email: str
    date: str


class GitLabOwner(BaseModel):
    username: str
    id: int
    avatar_url: Optional[str] = None
    web_url: str
    name: str


class GitLabNamespace(BaseModel):
    id: int
    name: str
    path: str
    kind: str
    full_path: str


class GitLabRepository(BaseModel):
    id: int
    name: str
    path_with_namespace: str
    visibility: Optional[str] = None
    owner: Optional[GitLabOwner] = None
    web_url: str
    description: Optional[str] = None
    fork: Optional[bool] = None
    ssh_url_to_repo: Optional[str] = None
    http_url_to_repo: Optional[str] = None
    created_at: Optional[str] = None
    last_activity_at: Optional[str] = None
    default_branch: Optional[str] = None
    namespace: Optional[GitLabNamespace] = None


class GitLabForkParent(BaseModel):
    name: str
    path_with_namespace: str
    owner: Optional[GitLabOwner] = None
    web_url: str


class GitLabFork(GitLabRepository):
    forked_from_project: Optional[GitLabForkParent] = None


class GitLabFileContent(BaseModel):
    file_name: str
    file_path: str
    size: int
    encoding: str
    content: str
    content_sha256: str
    ref: str
    blob_id: str
    commit_id: str
    last_commit_id: str
    execute_filemode: Optional[bool] = None


class GitLabDirectoryEntry(BaseModel):
    id: str
    name: str
    type: Literal["blob", "tree"]
    path: str
    mode: str


class GitLabDirectoryListing(RootModel[list[GitLabDirectoryEntry]]):
    pass


GitLabContent = Union[GitLabFileContent, GitLabDirectoryListing]


class GitLabCreateUpdateFileResponse(BaseModel):
    file_path: str
    branch: str


class GitLabCommitRef(BaseModel):
    id: str
    web_url: Optional[str] = None


class GitLabReference(BaseModel):
    name: str
    commit: GitLabCommitRef


class GitLabCommit(BaseModel):
    id: str
    short_id: str
    title: str
    author_name: str
    author_email: str
    authored_date: str
    committer_name: str
    committer_email: str
    committed_date: str
    web_url: str
    parent_ids: list[str]


class GitLabLabel(BaseModel):
    id: int
    name: str
    color: str
    description: Optional[str] = None


class GitLabUser(BaseModel):
    username: str
    id: int
    name: str
    avatar_url: Optional[str] = None
    web_url: str


class GitLabMilestone(BaseModel):
    id: int
    iid: int
    title: str
    description: Optional[str] = None
    state: str
    web_url: str


class GitLabIssue(BaseModel):
    id: int
    iid: int
    project_id: int
    title: str
    description: Optional[str] = None
    state: str
    author: GitLabUser
    assignees: list[GitLabUser] = Field(default_factory=list)
    # Issue payloads carry label names unless with_labels_details is set
    labels: list[Union[str, GitLabLabel]] = Field(default_factory=list)
    milestone: Optional[GitLabMilestone] = None
    created_at: str
    updated_at: str
    closed_at: Optional[str] = None
    web_url: str


class GitLabDiffRefs(BaseModel):
    base_sha: str
    head_sha: str
    start_sha: str


class GitLabMergeRequest(BaseModel):
    id: int
    iid: int
    project_id: int
    title: str
    description: Optional[str] = None
    state: str
    merged: Optional[bool] = None
    author: GitLabUser
    assignees: list[GitLabUser] = Field(default_factory=list)
    source_branch: str
    target_branch: str
    diff_refs: Optional[GitLabDiffRefs] = None
    web_url: str
    created_at: str
    updated_at: str
    merged_at: Optional[str] = None
    closed_at: Optional[str] = None
    merge_commit_sha: Optional[str] = None


class GitLabSearchResponse(BaseModel):
    count: int
    items: list[GitLabRepository]


# ---------------------------------------------------------------------------
# Backend option models
# ---------------------------------------------------------------------------

class FileOperation(BaseModel):
    path: str
    content: str


class CreateRepositoryOptions(BaseModel):
    name: str
    description: Optional[str] = None
    visibility: Optional[Literal["private", "internal", "public"]] = None
    initialize_with_readme: Optional[bool] = None


class CreateIssueOptions(BaseModel):
    title: str
    description: Optional[str] = None
    assignee_ids: Optional[list[int]] = None
    milestone_id: Optional[int] = None
    labels: Optional[list[str]] = None


class CreateMergeRequestOptions(BaseModel):
    title: str
    description: Optional[str] = None
    source_branch: str
    target_branch: str
    allow_collaboration: Optional[bool] = None
    draft: Optional[bool] = None


# ---------------------------------------------------------------------------
# Tool argument models
# ---------------------------------------------------------------------------

class ProjectParams(BaseModel):
    project_id: str = Field(..., description="Project ID or URL-encoded path")


class CreateOrUpdateFileParams(ProjectParams):
    file_path: str = Field(..., description="Path where to create/update the file")
    content: str = Field(..., description="Content of the file")
    commit_message: str = Field(..., description="Commit message")
    branch: str = Field(..., description="Branch to create/update the file in")
    previous_path: Optional[str] = Field(
        default=None, description="Path of the file to move/rename"
    )


class SearchRepositoriesParams(BaseModel):
    search: str = Field(..., description="Search query")
    page: int = Field(default=1, ge=1, description="Page number for pagination (default: 1)")
    per_page: int = Field(
        default=20, ge=1, le=100, description="Number of results per page (default: 20)"
    )


class CreateRepositoryParams(CreateRepositoryOptions):
    name: str = Field(..., description="Repository name")
    description: Optional[str] = Field(default=None, description="Repository description")
    visibility: Optional[Literal["private", "internal", "public"]] = Field(
        default=None, description="Repository visibility level"
    )
    initialize_with_readme: Optional[bool] = Field(
        default=None, description="Initialize with README.md"
    )


class GetFileContentsParams(ProjectParams):
    file_path: str = Field(..., description="Path to the file or directory")
    ref: Optional[str] = Field(default=None, description="Branch/tag/commit to get contents from")


class PushFileEntry(BaseModel):
    file_path: str = Field(..., description="Path where to create the file")
    content: str = Field(..., description="Content of the file")


class PushFilesParams(ProjectParams):
    branch: str = Field(..., description="Branch to push to")
    files: list[PushFileEntry] = Field(..., min_length=1, description="Array of files to push")
    commit_message: str = Field(..., description="Commit message")


class CreateIssueParams(ProjectParams):
    title: str = Field(..., description="Issue title")
    description: Optional[str] = Field(default=None, description="Issue description")
    assignee_ids: Optional[list[int]] = Field(
        default=None, description="Array of user IDs to assign"
    )
    labels: Optional[list[str]] = Field(default=None, description="Array of label names")
    milestone_id: Optional[int] = Field(default=None, description="Milestone ID to assign")


class CreateMergeRequestParams(ProjectParams):
    title: str = Field(..., description="Merge request title")
    description: Optional[str] = Field(default=None, description="Merge request description")
    source_branch: str = Field(..., description="Branch containing changes")
    target_branch: str = Field(..., description="Branch to merge into")
    draft: Optional[bool] = Field(default=None, description="Create as draft merge request")
    allow_collaboration: Optional[bool] = Field(
        default=None, description="Allow commits from upstream members"
    )


class ForkRepositoryParams(ProjectParams):
    namespace: Optional[str] = Field(
        default=None, description="Namespace to fork to (full path)"
    )


class CreateBranchParams(ProjectParams):
    branch: str = Field(..., description="Name for the new branch")
    ref: Optional[str] = Field(
        default=None, description="Source branch/commit for new branch"
    )
