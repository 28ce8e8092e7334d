import pytest

from ghash.errors import RepositoryAccessError
from ghash.repo import GitRepo
from ghash.sources import MemorySource, RepositorySource
from tests.helpers import fake_ids, make_idx_v2, write_pack


class TestDiscover:
    def test_from_root(self, git_repo):
        found = GitRepo.discover(git_repo.root)
        assert found.git_dir == git_repo.git_dir
        assert found.root == git_repo.root

    def test_from_subdirectory(self, git_repo):
        sub = git_repo.root / "a" / "b"
        sub.mkdir(parents=True)
        assert GitRepo.discover(sub).git_dir == git_repo.git_dir

    def test_gitfile(self, git_repo, tmp_path):
        worktree = tmp_path / "wt"
        worktree.mkdir()
        (worktree / ".git").write_text(f"gitdir: {git_repo.git_dir}\n")
        found = GitRepo.discover(worktree)
        assert found.git_dir == git_repo.git_dir
        assert found.root == worktree.resolve()

    def test_relative_gitfile(self, git_repo):
        sub = git_repo.root / "module"
        sub.mkdir()
        (sub / ".git").write_text("gitdir: ../.git\n")
        assert GitRepo.discover(sub).git_dir == git_repo.git_dir

    def test_bad_gitfile(self, tmp_path):
        (tmp_path / ".git").write_text("nonsense\n")
        with pytest.raises(RepositoryAccessError, match="gitfile"):
            GitRepo.discover(tmp_path)

    def test_bare(self, tmp_path):
        bare = GitRepo.init(tmp_path / "bare.git", bare=True)
        assert GitRepo.discover(bare.root).git_dir == bare.git_dir

    def test_git_dir_env(self, git_repo, tmp_path, monkeypatch):
        monkeypatch.setenv("GIT_DIR", str(git_repo.git_dir))
        assert GitRepo.discover(tmp_path).git_dir == git_repo.git_dir

    def test_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        (plain / ".git").mkdir()  # no HEAD, no objects
        with pytest.raises(RepositoryAccessError, match="Not a git repository"):
            GitRepo.discover(plain)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(RepositoryAccessError, match="No such directory"):
            GitRepo.discover(tmp_path / "missing")


class TestConfig:
    def test_sha1_default(self, git_repo):
        assert git_repo.hash_len == 40

    def test_sha256(self, tmp_path):
        repo = GitRepo.init(tmp_path, object_format="sha256")
        assert repo.hash_len == 64
        oid = repo.store_object("blob", b"data")
        assert len(oid) == 64
        assert repo.object_ids() == {oid}

    def test_config_value(self, git_repo):
        with git_repo.config_file.open("a", encoding="utf-8") as f:
            f.write('[core]\n\tabbrev = 7\n[remote "origin"]\n\tfetch = a\n\tfetch = b\n')
        assert git_repo.config_value("core", "abbrev") == "7"
        assert git_repo.config_value("core", "bare") == "false"
        assert git_repo.config_value("user", "name") is None

    def test_missing_config(self, git_repo):
        git_repo.config_file.unlink()
        assert git_repo.hash_len == 40


class TestObjects:
    def test_loose_and_packed(self, git_repo):
        loose = {git_repo.store_object("blob", f"file {i}".encode()) for i in range(5)}
        packed = fake_ids(20)
        write_pack(git_repo, "one", make_idx_v2(packed))
        assert git_repo.object_ids() == loose | set(packed)

    def test_same_object_loose_and_packed(self, git_repo):
        oid = git_repo.store_object("blob", b"twice")
        write_pack(git_repo, "one", make_idx_v2([oid]))
        assert git_repo.object_ids() == {oid}

    def test_empty(self, git_repo):
        assert git_repo.object_ids() == set()


class TestSources:
    def test_repository_source(self, git_repo):
        oid = git_repo.store_object("commit", b"tree 0\n")
        assert RepositorySource(git_repo).list_all() == {oid}

    def test_memory_source(self):
        source = MemorySource.of(["a", "b", "a"])
        assert source.list_all() == {"a", "b"}
        # callers get a copy
        source.list_all().add("c")
        assert source.list_all() == {"a", "b"}

    def test_empty_memory_source(self):
        assert MemorySource().list_all() == set()


class TestUnreadable:
    def test_undecodable_gitfile(self, tmp_path):
        (tmp_path / ".git").write_bytes(b"gitdir: \xff\xfe\n")
        with pytest.raises(RepositoryAccessError, match="Cannot read"):
            GitRepo.discover(tmp_path)

    def test_undecodable_config(self, git_repo):
        git_repo.config_file.write_bytes(b"[core]\n\tbare = \xff\n")
        with pytest.raises(RepositoryAccessError, match="Cannot read"):
            git_repo.config_value("core", "bare")

    def test_malformed_config(self, git_repo):
        git_repo.config_file.write_text("no section header\n", encoding="utf-8")
        with pytest.raises(RepositoryAccessError):
            git_repo.read_config()


def test_relative_git_dir_env_uses_start(git_repo, tmp_path, monkeypatch):
    other = tmp_path / "other"
    other.mkdir()
    monkeypatch.chdir(other)
    monkeypatch.setenv("GIT_DIR", ".git")
    found = GitRepo.discover(git_repo.root)
    assert found.git_dir == git_repo.git_dir
    assert found.root == git_repo.root
