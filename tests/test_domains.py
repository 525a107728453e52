"""Tests for the GitLab domain: API client and adapter."""

import base64
import json

import httpx
import pytest

from shared.errors import BackendError
from shared.models import DomainConfig
from domains.gitlab.schemas import (
    CreateIssueOptions,
    FileOperation,
    GitLabDirectoryListing,
    GitLabFileContent,
)

from conftest import PROJECT, USER

API_URL = "https://gitlab.example.com/api/v4"

FILE_PAYLOAD = {
    "file_name": "README.md",
    "file_path": "docs/README.md",
    "size": 11,
    "encoding": "base64",
    "content": base64.b64encode("hello world".encode("utf-8")).decode("ascii"),
    "content_sha256": "0" * 64,
    "ref": "main",
    "blob_id": "b1",
    "commit_id": "c1",
    "last_commit_id": "c0",
}

BINARY_PAYLOAD = {
    **FILE_PAYLOAD,
    "file_name": "logo.png",
    "file_path": "logo.png",
    "content": base64.b64encode(b"\x89PNG\xff\xfe").decode("ascii"),
}


def make_config(**overrides):
    values = {
        "name": "gitlab",
        "description": "GitLab",
        "base_url": API_URL,
    }
    values.update(overrides)
    return DomainConfig(**values)


class Recorder:
    """MockTransport handler that records requests and replays queued responses."""

    def __init__(self, *responses):
        self.requests: list[httpx.Request] = []
        self.responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    def client(self, token="secret-token"):
        from domains.gitlab.client import GitLabClient

        return GitLabClient(make_config(), token=token, transport=httpx.MockTransport(self))


class TestEncodePathSegment:
    """Tests for path segment encoding."""

    def test_slashes_are_encoded(self):
        from domains.base import encode_path_segment

        assert encode_path_segment("group/sub/project") == "group%2Fsub%2Fproject"

    def test_uri_component_safe_characters(self):
        from domains.base import encode_path_segment

        assert encode_path_segment("a b!~*'()") == "a%20b!~*'()"


class TestBackendError:
    """Tests for backend error formatting."""

    def test_json_body_is_compacted(self):
        error = BackendError.from_body(404, "Not Found", '{ "message": "404 Not Found" }')

        assert str(error) == 'GitLab API error: Not Found (404) - {"message":"404 Not Found"}'

    def test_raw_body_is_kept(self):
        error = BackendError.from_body(502, "Bad Gateway", "<html>upstream</html>")

        assert str(error) == "GitLab API error: Bad Gateway (502) - <html>upstream</html>"
        assert error.status_code == 502


class TestGitLabClient:
    """Tests for the GitLab REST client."""

    @pytest.mark.asyncio
    async def test_auth_header_and_encoded_project(self):
        recorder = Recorder(httpx.Response(200, json=FILE_PAYLOAD))

        async with recorder.client() as client:
            await client.get_file_contents("group/project", "docs/README.md")

        request = recorder.requests[0]
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.url.raw_path.decode() == (
            "/api/v4/projects/group%2Fproject/repository/files/docs%2FREADME.md"
        )
        assert "ref" not in request.url.params

    @pytest.mark.asyncio
    async def test_file_content_is_decoded(self):
        recorder = Recorder(httpx.Response(200, json=FILE_PAYLOAD))

        async with recorder.client() as client:
            result = await client.get_file_contents("42", "docs/README.md", "dev")

        assert isinstance(result, GitLabFileContent)
        assert result.content == "hello world"
        assert recorder.requests[0].url.params["ref"] == "dev"

    @pytest.mark.asyncio
    async def test_binary_content_is_decoded_lossily(self):
        """Test that a non UTF-8 file is read with replacement characters."""
        recorder = Recorder(httpx.Response(200, json=BINARY_PAYLOAD))

        async with recorder.client() as client:
            result = await client.get_file_contents("42", "logo.png")

        assert result.content == "\ufffdPNG\ufffd\ufffd"

    @pytest.mark.asyncio
    async def test_update_binary_file_when_present(self):
        """Test that an existing binary file is still updated with PUT."""
        recorder = Recorder(
            httpx.Response(200, json=BINARY_PAYLOAD),
            httpx.Response(200, json={"file_path": "logo.png", "branch": "main"}),
        )

        async with recorder.client() as client:
            await client.create_or_update_file("42", "logo.png", "new", "update", "main")

        assert [request.method for request in recorder.requests] == ["GET", "PUT"]

    @pytest.mark.asyncio
    async def test_directory_listing(self):
        entries = [
            {"id": "t1", "name": "src", "type": "tree", "path": "src", "mode": "040000"},
            {"id": "b1", "name": "a.py", "type": "blob", "path": "a.py", "mode": "100644"},
        ]
        recorder = Recorder(httpx.Response(200, json=entries))

        async with recorder.client() as client:
            result = await client.get_file_contents("42", "")

        assert isinstance(result, GitLabDirectoryListing)
        assert [entry.name for entry in result.root] == ["src", "a.py"]

    @pytest.mark.asyncio
    async def test_error_response_with_json_body(self):
        recorder = Recorder(httpx.Response(404, json={"message": "404 File Not Found"}))

        async with recorder.client() as client:
            with pytest.raises(BackendError) as exc_info:
                await client.get_file_contents("42", "missing.txt")

        assert str(exc_info.value) == (
            'GitLab API error: Not Found (404) - {"message":"404 File Not Found"}'
        )

    @pytest.mark.asyncio
    async def test_error_response_with_text_body(self):
        recorder = Recorder(httpx.Response(500, text="boom"))

        async with recorder.client() as client:
            with pytest.raises(BackendError, match=r"Internal Server Error \(500\) - boom"):
                await client.fork_project("42")

    @pytest.mark.asyncio
    async def test_unexpected_response_shape(self):
        recorder = Recorder(httpx.Response(201, json={"unexpected": True}))

        async with recorder.client() as client:
            with pytest.raises(BackendError) as exc_info:
                await client.create_branch("42", "feature", "main")

        assert exc_info.value.status_code == 201
        assert exc_info.value.status_text == "Unexpected response"

    @pytest.mark.asyncio
    async def test_create_file_when_probe_fails(self):
        """Test that a failed existence probe leads to a POST."""
        recorder = Recorder(
            httpx.Response(404, json={"message": "404 File Not Found"}),
            httpx.Response(201, json={"file_path": "a.txt", "branch": "main"}),
        )

        async with recorder.client() as client:
            result = await client.create_or_update_file("42", "a.txt", "a", "add", "main")

        probe, write = recorder.requests
        assert probe.method == "GET"
        assert probe.url.params["ref"] == "main"
        assert write.method == "POST"
        assert json.loads(write.content) == {
            "branch": "main",
            "content": "a",
            "commit_message": "add",
        }
        assert result.file_path == "a.txt"

    @pytest.mark.asyncio
    async def test_update_file_when_present(self):
        """Test that an existing file is updated with PUT."""
        recorder = Recorder(
            httpx.Response(200, json=FILE_PAYLOAD),
            httpx.Response(200, json={"file_path": "docs/README.md", "branch": "main"}),
        )

        async with recorder.client() as client:
            await client.create_or_update_file(
                "42", "docs/README.md", "new", "update", "main", previous_path="README.md"
            )

        write = recorder.requests[1]
        assert write.method == "PUT"
        assert json.loads(write.content)["previous_path"] == "README.md"

    @pytest.mark.asyncio
    async def test_empty_previous_path_is_omitted(self):
        recorder = Recorder(
            httpx.Response(404, json={}),
            httpx.Response(201, json={"file_path": "a.txt", "branch": "main"}),
        )

        async with recorder.client() as client:
            await client.create_or_update_file("42", "a.txt", "a", "add", "main", "")

        assert "previous_path" not in json.loads(recorder.requests[1].content)

    @pytest.mark.asyncio
    async def test_create_commit_uses_create_actions(self):
        commit = {
            "id": "c2",
            "short_id": "c2",
            "title": "add",
            "author_name": "Octo Cat",
            "author_email": "octo@example.com",
            "authored_date": "2024-01-01T00:00:00Z",
            "committer_name": "Octo Cat",
            "committer_email": "octo@example.com",
            "committed_date": "2024-01-01T00:00:00Z",
            "web_url": "https://gitlab.example.com/c2",
            "parent_ids": [],
        }
        recorder = Recorder(httpx.Response(201, json=commit))

        async with recorder.client() as client:
            await client.create_commit(
                "42", "add", "main",
                [FileOperation(path="a.txt", content="a"), FileOperation(path="b.txt", content="b")],
            )

        body = json.loads(recorder.requests[0].content)
        assert body["branch"] == "main"
        assert body["commit_message"] == "add"
        assert body["actions"] == [
            {"action": "create", "file_path": "a.txt", "content": "a"},
            {"action": "create", "file_path": "b.txt", "content": "b"},
        ]

    @pytest.mark.asyncio
    async def test_issue_labels_are_joined(self):
        issue = {
            "id": 1,
            "iid": 1,
            "project_id": 42,
            "title": "Bug",
            "state": "opened",
            "author": USER,
            "labels": ["bug", "ui"],
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:00Z",
            "web_url": "https://gitlab.example.com/octo/demo/-/issues/1",
        }
        recorder = Recorder(httpx.Response(201, json=issue))

        async with recorder.client() as client:
            result = await client.create_issue(
                "42", CreateIssueOptions(title="Bug", labels=["bug", "ui"])
            )

        assert json.loads(recorder.requests[0].content) == {"title": "Bug", "labels": "bug,ui"}
        assert result.labels == ["bug", "ui"]

    @pytest.mark.asyncio
    async def test_search_reads_total_header(self):
        recorder = Recorder(
            httpx.Response(200, json=[PROJECT], headers={"X-Total": "37"}),
            httpx.Response(200, json=[]),
        )

        async with recorder.client() as client:
            first = await client.search_projects("demo", page=2, per_page=5)
            second = await client.search_projects("none")

        assert first.count == 37
        assert first.items[0].path_with_namespace == "octo/demo"
        params = recorder.requests[0].url.params
        assert (params["search"], params["page"], params["per_page"]) == ("demo", "2", "5")
        assert second.count == 0
        assert second.items == []

    @pytest.mark.asyncio
    async def test_fork_with_namespace(self):
        recorder = Recorder(httpx.Response(201, json=PROJECT))

        async with recorder.client() as client:
            await client.fork_project("42", "team")

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v4/projects/42/fork"
        assert request.url.params["namespace"] == "team"

    @pytest.mark.asyncio
    async def test_default_branch_ref(self):
        recorder = Recorder(httpx.Response(200, json=PROJECT))

        async with recorder.client() as client:
            ref = await client.get_default_branch_ref("42")

        assert ref == "main"
        assert recorder.requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_create_repository_omits_unset_fields(self):
        from domains.gitlab.schemas import CreateRepositoryOptions

        recorder = Recorder(httpx.Response(201, json=PROJECT))

        async with recorder.client() as client:
            await client.create_repository(
                CreateRepositoryOptions(name="demo", visibility="private")
            )

        request = recorder.requests[0]
        assert request.url.path == "/api/v4/projects"
        assert json.loads(request.content) == {"name": "demo", "visibility": "private"}

    @pytest.mark.asyncio
    async def test_calls_are_not_retried(self):
        recorder = Recorder(httpx.Response(503, text="unavailable"))

        async with recorder.client() as client:
            with pytest.raises(BackendError):
                await client.create_branch("42", "feature", "main")

        assert len(recorder.requests) == 1


class TestGitLabAdapter:
    """Tests for the GitLab adapter."""

    def make_adapter(self, service):
        from domains.gitlab import GitLabAdapter

        return GitLabAdapter(make_config(), service)

    def test_tool_metadata(self, fake_service):
        from shared.models import ExecutionType

        adapter = self.make_adapter(fake_service)
        tools = {tool.name: tool for tool in adapter.tools}

        assert len(tools) == 9
        assert tools["get_file_contents"].execution_type == ExecutionType.READ
        assert tools["search_repositories"].execution_type == ExecutionType.READ
        assert not tools["search_repositories"].project_scoped
        assert not tools["create_repository"].project_scoped
        assert "project_id" in tools["create_issue"].input_schema["required"]
        assert adapter.get_tool("create_issue") is tools["create_issue"]
        assert adapter.get_tool("delete_project") is None

    @pytest.mark.asyncio
    async def test_create_branch_defaults_ref(self, fake_service):
        """Test that a missing ref is resolved to the default branch."""
        from domains.gitlab.schemas import CreateBranchParams

        adapter = self.make_adapter(fake_service)

        result = await adapter.execute(
            "create_branch", CreateBranchParams(project_id="42", branch="feature")
        )

        assert result.name == "feature"
        assert fake_service.calls == [
            ("get_default_branch_ref", ("42",)),
            ("create_branch", ("42", "feature", "main")),
        ]

    @pytest.mark.asyncio
    async def test_create_branch_with_ref(self, fake_service):
        from domains.gitlab.schemas import CreateBranchParams

        adapter = self.make_adapter(fake_service)

        await adapter.execute(
            "create_branch", CreateBranchParams(project_id="42", branch="feature", ref="dev")
        )

        assert fake_service.calls == [("create_branch", ("42", "feature", "dev"))]

    @pytest.mark.asyncio
    async def test_push_files_maps_entries(self, fake_service):
        from domains.gitlab.schemas import PushFilesParams

        adapter = self.make_adapter(fake_service)

        await adapter.execute("push_files", PushFilesParams(
            project_id="42",
            branch="main",
            files=[{"file_path": "a.txt", "content": "a"}],
            commit_message="add",
        ))

        name, args = fake_service.calls[0]
        assert name == "create_commit"
        assert args[:3] == ("42", "add", "main")
        assert args[3] == [FileOperation(path="a.txt", content="a")]

    @pytest.mark.asyncio
    async def test_create_merge_request_options(self, fake_service):
        from domains.gitlab.schemas import CreateMergeRequestParams

        adapter = self.make_adapter(fake_service)

        result = await adapter.execute("create_merge_request", CreateMergeRequestParams(
            project_id="42", title="MR", source_branch="feature", target_branch="main"
        ))

        _, (project_id, options) = fake_service.calls[0]
        assert project_id == "42"
        assert options.source_branch == "feature"
        assert result.target_branch == "main"

    @pytest.mark.asyncio
    async def test_unknown_action(self, fake_service):
        from domains.gitlab.schemas import ProjectParams

        adapter = self.make_adapter(fake_service)

        with pytest.raises(ValueError, match="not found in domain 'gitlab'"):
            await adapter.execute("delete_project", ProjectParams(project_id="42"))
