"""Integration tests using real git repositories.

Hosted repositories are simulated by bare repos laid out as
``<root>/github.com/<owner>/<name>.git`` so that local-path remotes match
the hosted URL pattern. The hosting service itself is a fake.
"""

import json
import subprocess
from pathlib import Path

import pytest

from _fakes import FakeHostingClient

from pygit_reconcile import (
    INITIAL_COMMIT_MESSAGE,
    Category,
    GitPythonRepository,
    NullOutputHandler,
    ReconcileConfig,
    ReconcileOrchestrator,
    RemediationStatus,
    main,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _git(cwd: Path, *args: str) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _make_local(workspace: Path, name: str, *, commit: bool = True) -> Path:
    """Create a working repository, optionally with one commit."""
    repo = workspace / name
    repo.mkdir(parents=True)
    _git(repo, "init", "-b", "main")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test")
    (repo / "README.md").write_text(f"# {name}\n")
    if commit:
        _git(repo, "add", "README.md")
        _git(repo, "commit", "-m", "First")
    return repo


def _hosted_path(hosted_root: Path, name: str, owner: str = "alice") -> Path:
    return hosted_root / "github.com" / owner / f"{name}.git"


def _publish(hosted_root: Path, local: Path) -> Path:
    """Create the bare hosted counterpart of local, add it as origin and push."""
    bare = _hosted_path(hosted_root, local.name)
    bare.mkdir(parents=True)
    _git(bare, "init", "--bare", "-b", "main")
    _git(local, "remote", "add", "origin", str(bare))
    _git(local, "push", "-u", "origin", "main")
    return bare


def _remotes(repo: Path) -> list[str]:
    out = _git(repo, "remote", "-v")
    return sorted({line.split()[1] for line in out.splitlines() if line})


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def hosted_root(tmp_path: Path) -> Path:
    root = tmp_path / "hosted"
    root.mkdir()
    return root


@pytest.fixture
def workspace(tmp_path: Path, hosted_root: Path) -> Path:
    """A root folder holding one repository per category."""
    ws = tmp_path / "workspace"
    ws.mkdir()

    foo = _make_local(ws, "foo")
    _publish(hosted_root, foo)

    bar = _make_local(ws, "bar")
    _git(bar, "remote", "add", "origin", str(_hosted_path(hosted_root, "bar")))

    _make_local(ws, "baz")
    _make_local(ws, "qux", commit=False)
    _make_local(ws, "broken", commit=False)
    return ws


def _orchestrator(hosting, answer="yes", **overrides):
    settings = dict(delay_seconds=7, json_output=True, probe_timeout=30)
    settings.update(overrides)
    sleep = RecordingSleep()
    orchestrator = ReconcileOrchestrator(
        ReconcileConfig(**settings),
        NullOutputHandler(),
        hosting,
        confirm=lambda prompt: answer,
        sleep=sleep,
    )
    return orchestrator, sleep


def _names(partition, category):
    return sorted(o.name for o in partition.get(category))


# ---------------------------------------------------------------------------
# Tests: GitPythonRepository against real git
# ---------------------------------------------------------------------------

class TestGitPythonRepository:
    def test_is_repository(self, tmp_path: Path):
        repo = _make_local(tmp_path, "r")
        plain = tmp_path / "plain"
        plain.mkdir()
        bare = tmp_path / "bare.git"
        bare.mkdir()
        _git(bare, "init", "--bare")

        assert GitPythonRepository.is_repository(repo) is True
        assert GitPythonRepository.is_repository(plain) is False
        assert GitPythonRepository.is_repository(bare) is False
        assert GitPythonRepository.is_repository(tmp_path / "missing") is False

    def test_most_recent_commit(self, tmp_path: Path):
        full = GitPythonRepository(_make_local(tmp_path, "full"))
        empty = GitPythonRepository(_make_local(tmp_path, "empty", commit=False))
        try:
            assert full.most_recent_commit() == _git(full.path, "rev-parse", "HEAD")
            assert empty.most_recent_commit() is None
        finally:
            full.close()
            empty.close()

    def test_remote_lifecycle(self, tmp_path: Path, hosted_root: Path):
        local = _make_local(tmp_path, "r")
        _publish(hosted_root, local)
        repo = GitPythonRepository(local)
        try:
            assert repo.list_remotes() == [("origin", str(_hosted_path(hosted_root, "r")))]
            assert repo.probe_remote_reachable("origin", timeout=30) is True

            assert repo.remove_remote("origin").success is True
            assert repo.list_remotes() == []
            assert repo.remove_remote("origin").success is False

            assert repo.add_remote("origin", str(tmp_path / "nowhere.git")).success is True
            assert repo.add_remote("origin", "x").success is False
            assert repo.probe_remote_reachable("origin", timeout=30) is False
        finally:
            repo.close()

    def test_stage_and_commit(self, tmp_path: Path):
        repo = GitPythonRepository(_make_local(tmp_path, "r", commit=False))
        try:
            assert repo.stage_all().success is True
            assert repo.commit("Initial commit").success is True
            assert repo.most_recent_commit() is not None
            assert repo.commit("again").success is False
        finally:
            repo.close()

    def test_config(self, tmp_path: Path):
        repo = GitPythonRepository(_make_local(tmp_path, "r"))
        try:
            assert repo.get_config("user", "name") == "Test"
            assert repo.get_config("reconcile", "missing") is None
            assert repo.set_config("reconcile", "flag", "on").success is True
            assert repo.get_config("reconcile", "flag") == "on"
        finally:
            repo.close()


# ---------------------------------------------------------------------------
# Tests: full runs
# ---------------------------------------------------------------------------

class TestAnalysis:
    def test_every_category(self, workspace: Path):
        hosting = FakeHostingClient(names=["foo", "bar", "broken"])
        orchestrator, _ = _orchestrator(hosting, analyze_only=True)
        result = orchestrator.run(workspace)
        partition = result.partition

        assert _names(partition, Category.ALREADY_SYNCED) == ["foo"]
        assert _names(partition, Category.NEEDS_RECONNECTION) == ["bar"]
        assert _names(partition, Category.READY_TO_PUSH) == ["baz"]
        assert _names(partition, Category.NEEDS_COMMITS) == ["qux"]
        assert _names(partition, Category.PROBLEMS) == ["broken"]
        assert result.report is None
        assert hosting.created == []

    def test_empty_hosted_list(self, workspace: Path):
        hosting = FakeHostingClient(names=[])
        orchestrator, _ = _orchestrator(hosting, analyze_only=True)
        partition = orchestrator.run(workspace).partition

        assert _names(partition, Category.READY_TO_PUSH) == ["bar", "baz", "foo"]
        assert _names(partition, Category.NEEDS_COMMITS) == ["broken", "qux"]

    def test_no_repositories(self, tmp_path: Path):
        hosting = FakeHostingClient(names=["foo"])
        orchestrator, _ = _orchestrator(hosting)
        result = orchestrator.run(tmp_path)
        assert result.partition.total == 0
        assert result.report is None


class TestRemediation:
    def test_confirmed_run(self, workspace: Path, hosted_root: Path):
        hosting = FakeHostingClient(names=["foo", "bar", "broken"])
        orchestrator, sleep = _orchestrator(hosting)
        result = orchestrator.run(workspace)
        report = result.report

        assert report is not None
        assert not report.has_failures()
        assert [c[1] for c in hosting.created] == ["baz", "qux"]
        assert sleep.calls == [7]

        assert _remotes(workspace / "bar") == ["git@github.com:alice/bar.git"]
        assert _remotes(workspace / "baz") == []
        assert _remotes(workspace / "foo") == [str(_hosted_path(hosted_root, "foo"))]

        qux = workspace / "qux"
        assert _git(qux, "rev-list", "--count", "HEAD") == "1"
        assert _git(qux, "log", "-1", "--format=%s") == INITIAL_COMMIT_MESSAGE
        assert _git(qux, "status", "--porcelain") == ""

        assert _git(workspace / "baz", "rev-list", "--count", "HEAD") == "1"
        assert _git(workspace / "broken", "status", "--porcelain") == "?? README.md"

        statuses = {o.observation.name: o.status for o in report.outcomes}
        assert statuses == {
            "foo": RemediationStatus.SKIPPED,
            "bar": RemediationStatus.SUCCEEDED,
            "baz": RemediationStatus.SUCCEEDED,
            "qux": RemediationStatus.SUCCEEDED,
        }

    def test_declined_run_changes_nothing(self, workspace: Path, hosted_root: Path):
        hosting = FakeHostingClient(names=["foo", "bar", "broken"])
        orchestrator, sleep = _orchestrator(hosting, answer="y")
        result = orchestrator.run(workspace)

        assert result.remediation_declined is True
        assert result.report is None
        assert hosting.created == []
        assert sleep.calls == []
        assert _remotes(workspace / "bar") == [str(_hosted_path(hosted_root, "bar"))]

    def test_rerun_after_reconnect_is_synced(self, workspace: Path, hosted_root: Path):
        hosting = FakeHostingClient(names=["foo", "bar", "broken"])
        orchestrator, _ = _orchestrator(hosting)
        orchestrator.run(workspace)

        # Repoint the reconnected remote at a reachable local counterpart
        bar = workspace / "bar"
        bare = _hosted_path(hosted_root, "bar")
        bare.mkdir(parents=True)
        _git(bare, "init", "--bare", "-b", "main")
        _git(bar, "remote", "set-url", "origin", str(bare))
        _git(bar, "push", "origin", "main")

        rerun, _ = _orchestrator(hosting, analyze_only=True)
        partition = rerun.run(workspace).partition
        assert "bar" in _names(partition, Category.ALREADY_SYNCED)

    def test_create_failure_reported(self, workspace: Path):
        hosting = FakeHostingClient(names=["foo", "bar", "broken"])
        hosting.failures["baz"] = "HTTP 403: You have exceeded a secondary rate limit"
        orchestrator, _ = _orchestrator(hosting)
        result = orchestrator.run(workspace)

        assert result.has_critical_issues() is True
        assert [o.observation.name for o in result.report.rate_limited] == ["baz"]
        assert [c[1] for c in hosting.created] == ["baz", "qux"]


class TestCli:
    def test_missing_directory_exits_nonzero(self, tmp_path: Path):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing")])
        assert exc.value.code == 1

    def test_analyze_only_json(self, workspace: Path, monkeypatch, capsys):
        hosting = FakeHostingClient(names=["foo", "bar", "broken"])
        monkeypatch.setattr("pygit_reconcile.cli.GitHubCliClient", lambda: hosting)
        monkeypatch.setenv("HOME", str(workspace.parent / "home"))

        with pytest.raises(SystemExit) as exc:
            main([str(workspace), "--analyze-only", "--json"])
        assert exc.value.code == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload['analysis']['total'] == 5
        assert payload['analysis']['counts']['PROBLEMS'] == 1
        assert payload['remediation'] is None

    def test_hosting_failure_exits_nonzero(self, workspace: Path, monkeypatch, capsys):
        from pygit_reconcile import HostingError

        class Unauthenticated(FakeHostingClient):
            def list_repository_names(self, limit):
                raise HostingError("Could not list hosted repositories: not logged in")

        monkeypatch.setattr("pygit_reconcile.cli.GitHubCliClient", lambda: Unauthenticated())
        monkeypatch.setenv("HOME", str(workspace.parent / "home"))

        with pytest.raises(SystemExit) as exc:
            main([str(workspace), "--json"])
        assert exc.value.code == 1
        assert "not logged in" in json.loads(capsys.readouterr().out)['error']
