"""Contract tests for comparison provider behavior."""

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from github import GithubException

from changematch.compare import (
    Comparison,
    ComparisonProvider,
    FixtureComparisonProvider,
    GithubComparisonProvider,
    build_comparison_provider,
)
from changematch.errors import ComparisonError, ConfigError


class _FakeRepo:
    def __init__(self, comparison: SimpleNamespace | None = None, error: Exception | None = None) -> None:
        self.comparison = comparison
        self.error = error
        self.compared: list[tuple[str, str]] = []

    def compare(self, base: str, head: str) -> SimpleNamespace:
        self.compared.append((base, head))
        if self.error is not None:
            raise self.error
        return self.comparison


class _FakeGithub:
    def __init__(self, repo: _FakeRepo) -> None:
        self.repo = repo
        self.requested: list[str] = []

    def get_repo(self, full_name: str) -> _FakeRepo:
        self.requested.append(full_name)
        return self.repo


def _api_comparison(status: str, filenames: list[str] | None) -> SimpleNamespace:
    files = None if filenames is None else [SimpleNamespace(filename=name, status="modified") for name in filenames]
    return SimpleNamespace(status=status, files=files)


@pytest.fixture
def fixture_provider(tmp_path: Path) -> FixtureComparisonProvider:
    """Build a fixture provider with a valid comparison payload."""
    payload_path = tmp_path / "comparison.json"
    payload_path.write_text(
        json.dumps({"status": "ahead", "files": [{"filename": "README.md"}, {"filename": "src/index.ts"}]}),
        encoding="utf-8",
    )
    return FixtureComparisonProvider(payload_file=payload_path)


@pytest.fixture
def github_provider() -> GithubComparisonProvider:
    """Build a GitHub provider over a fake API client."""
    repo = _FakeRepo(comparison=_api_comparison("ahead", ["README.md", "src/index.ts"]))
    return GithubComparisonProvider(token=None, client=_FakeGithub(repo))


@pytest.mark.contract
@pytest.mark.parametrize("provider_fixture", ["fixture_provider", "github_provider"])
def test_provider_contract_returns_status_and_filenames(request: pytest.FixtureRequest, provider_fixture: str) -> None:
    """Every provider returns the comparison status and the changed filenames."""
    provider: ComparisonProvider = request.getfixturevalue(provider_fixture)

    result = provider.compare(owner="octo", repo="demo", base="b0", head="h1")

    assert result == Comparison(status="ahead", files=["README.md", "src/index.ts"])


@pytest.mark.contract
def test_github_provider_scopes_request_to_repository() -> None:
    repo = _FakeRepo(comparison=_api_comparison("behind", None))
    client = _FakeGithub(repo)

    result = GithubComparisonProvider(token=None, client=client).compare(owner="octo", repo="demo", base="b0", head="h1")

    assert client.requested == ["octo/demo"]
    assert repo.compared == [("b0", "h1")]
    assert result == Comparison(status="behind", files=None)


@pytest.mark.contract
def test_github_provider_wraps_api_errors() -> None:
    repo = _FakeRepo(error=GithubException(404, {"message": "Not Found"}, None))
    provider = GithubComparisonProvider(token=None, client=_FakeGithub(repo))

    with pytest.raises(ComparisonError, match="comparing b0...h1 in octo/demo failed.*status 404"):
        provider.compare(owner="octo", repo="demo", base="b0", head="h1")


@pytest.mark.contract
def test_github_provider_requires_token_only_when_comparing() -> None:
    provider = GithubComparisonProvider(token=None)

    with pytest.raises(ConfigError, match="missing required input: token"):
        provider.compare(owner="octo", repo="demo", base="b0", head="h1")


@pytest.mark.contract
def test_fixture_provider_records_requests_and_accepts_plain_names(tmp_path: Path) -> None:
    payload_path = tmp_path / "comparison.json"
    payload_path.write_text(json.dumps({"status": "diverged", "files": ["a.md", "b.txt"]}), encoding="utf-8")
    provider = FixtureComparisonProvider(payload_file=payload_path)

    result = provider.compare(owner="o", repo="r", base="b", head="h")

    assert result == Comparison(status="diverged", files=["a.md", "b.txt"])
    assert provider.requests == [("o", "r", "b", "h")]


@pytest.mark.contract
def test_fixture_provider_errors_with_helpful_message(tmp_path: Path) -> None:
    missing = FixtureComparisonProvider(payload_file=tmp_path / "missing.json")
    with pytest.raises(ConfigError, match="what: comparison payload file not found.*how-to-fix"):
        missing.compare(owner="o", repo="r", base="b", head="h")

    bad_files = tmp_path / "bad.json"
    bad_files.write_text(json.dumps({"status": "ahead", "files": "README.md"}), encoding="utf-8")
    with pytest.raises(ComparisonError, match="'files' must be a list"):
        FixtureComparisonProvider(payload_file=bad_files).compare(owner="o", repo="r", base="b", head="h")


@pytest.mark.contract
def test_build_comparison_provider_selects_backend(tmp_path: Path) -> None:
    assert isinstance(build_comparison_provider(provider="github", token="t"), GithubComparisonProvider)
    assert isinstance(
        build_comparison_provider(provider="Fixture", token=None, comparison_payload=str(tmp_path / "c.json")),
        FixtureComparisonProvider,
    )

    with pytest.raises(ConfigError, match="missing required config key: comparison_payload"):
        build_comparison_provider(provider="fixture", token=None)
    with pytest.raises(ConfigError, match="unsupported provider: gitlab"):
        build_comparison_provider(provider="gitlab", token=None)


@pytest.mark.contract
def test_fixture_provider_rejects_file_entry_without_filename(tmp_path: Path) -> None:
    payload_path = tmp_path / "comparison.json"
    payload_path.write_text(
        json.dumps({"status": "ahead", "files": [{"filename": "a.md"}, {"status": "added"}]}),
        encoding="utf-8",
    )
    provider = FixtureComparisonProvider(payload_file=payload_path)

    with pytest.raises(ComparisonError, match="file entry .*'status': 'added'.* has no 'filename'") as excinfo:
        provider.compare(owner="o", repo="r", base="b", head="h")

    assert excinfo.value.exit_code == 4
