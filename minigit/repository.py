"""A small content-addressed version-control repository kept in ``.minigit``."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import TextIO

from .objects import Commit, compute_hash

AUTHOR = "MiniGit User <user@example.com>"
HEAD_PREFIX = "ref: "
BRANCH_REF_PREFIX = "ref: refs/heads/"
PROTECTED_FILES = frozenset({"minigit", ".minigit"})


class MiniGitError(Exception):
    """Raised when a repository command cannot be carried out."""


def _first_line(text: str) -> str:
    return text.split("\n", 1)[0]


class Repository:
    """Repository state plus the user-level commands that act on it."""

    def __init__(self, root: str | Path = ".", out: TextIO | None = None) -> None:
        self.root = Path(root)
        self._out = out
        self.git_dir = self.root / ".minigit"
        self.objects_dir = self.git_dir / "objects"
        self.commits_dir = self.git_dir / "commits"
        self.refs_dir = self.git_dir / "refs"
        self.heads_dir = self.refs_dir / "heads"
        self.head_file = self.git_dir / "HEAD"
        self.index_file = self.git_dir / "index"

        self.current_branch = ""
        self.branches: dict[str, str] = {}
        self.staging: dict[str, str] = {}
        self.in_merge_state = False
        self.merge_target_branch = ""

    def _print(self, text: str = "") -> None:
        print(text, file=sys.stdout if self._out is None else self._out)

    # -- state ---------------------------------------------------------------

    def load_state(self) -> None:
        """Read HEAD, branch refs and the staging index from disk."""
        if self.head_file.exists():
            head = _first_line(self.head_file.read_text(encoding="utf-8"))
            if head.startswith(BRANCH_REF_PREFIX):
                self.current_branch = head[len(BRANCH_REF_PREFIX):]
        if self.heads_dir.exists():
            for entry in self.heads_dir.iterdir():
                if entry.is_file():
                    self.branches[entry.name] = _first_line(
                        entry.read_text(encoding="utf-8")
                    )
        self._load_staging()

    def _load_staging(self) -> None:
        self.staging = {}
        if not self.index_file.is_file():
            return
        for line in self.index_file.read_text(encoding="utf-8").split("\n"):
            name, sep, blob = line.partition(":")
            if sep:
                self.staging[name] = blob

    def _persist_staging(self) -> None:
        text = "".join(f"{name}:{blob}\n" for name, blob in sorted(self.staging.items()))
        self.index_file.write_text(text, encoding="utf-8", newline="\n")

    # -- commands ------------------------------------------------------------

    def init(self) -> str:
        """Create the repository with an initial commit on ``main``; return its hash."""
        if self.git_dir.exists():
            raise MiniGitError("MiniGit already initialized")
        for directory in (
            self.git_dir,
            self.objects_dir,
            self.commits_dir,
            self.refs_dir,
            self.heads_dir,
        ):
            directory.mkdir()
        self.index_file.write_text("", encoding="utf-8")

        message = "Initial commit"
        timestamp = time.ctime()
        initial = Commit(compute_hash(message + timestamp), message, timestamp)
        self._write_commit(initial)

        self.current_branch = "main"
        self.branches[self.current_branch] = initial.hash
        self._update_branch(self.current_branch)
        self.head_file.write_text(
            f"{BRANCH_REF_PREFIX}main\n", encoding="utf-8", newline="\n"
        )
        self._print("Initialized MiniGit repository with 'main' branch")
        return initial.hash

    def add(self, filename: str) -> str:
        """Stage a file and store its content as a blob; return the blob hash."""
        path = self.root / filename
        if not path.is_file():
            raise MiniGitError(f"File not found: {filename}")
        content = path.read_bytes()
        blob_hash = compute_hash(content)
        self.staging[filename] = blob_hash
        self._persist_staging()
        self._write_blob(blob_hash, content)
        self._print(f"Added {filename} to staging area")
        return blob_hash

    def commit(self, message: str) -> str:
        """Record the staged files on top of the current commit; return the new hash."""
        self._load_staging()
        if not self.staging:
            raise MiniGitError("No changes staged for commit")

        parents: list[str] = []
        files: dict[str, str] = {}
        current = self.current_commit_hash()
        if current:
            parents.append(current)
            parent = self.read_commit(current)
            if parent is not None:
                files = dict(parent.files)
        files.update(self.staging)

        timestamp = time.ctime()
        data = (
            message
            + timestamp
            + "".join(parents)
            + "".join(name + blob for name, blob in sorted(files.items()))
        )
        new_commit = Commit(compute_hash(data), message, timestamp, parents, files)
        self._write_commit(new_commit)
        if self.current_branch:
            self.branches[self.current_branch] = new_commit.hash
            self._update_branch(self.current_branch)

        self.staging = {}
        self._persist_staging()
        self._print(f"[{self.current_branch} {new_commit.hash[:7]}] {message}")
        return new_commit.hash

    def log(self) -> None:
        """Print the first-parent history from the current commit."""
        current = self.current_commit_hash()
        if not current:
            self._print("No commits yet")
            return
        while current:
            entry = self.read_commit(current)
            if entry is None:
                break
            self._print(f"commit {entry.hash}")
            self._print(f"Author: {AUTHOR}")
            self._print(f"Date:   {entry.timestamp}")
            self._print(f"\n    {entry.message}\n")
            current = entry.parents[0] if entry.parents else ""

    def status(self) -> None:
        """Print the current branch, staged files and all branches."""
        self._print(f"On branch {self.current_branch or 'DETACHED HEAD'}")
        current = self.current_commit_hash()
        if not current:
            self._print("No commits yet")
            return
        if self.read_commit(current) is None:
            return

        self._print("\nStaged changes:")
        if not self.staging:
            self._print("  (no files staged)")
        else:
            for name in sorted(self.staging):
                self._print(f"  {self.file_status(name)} {name}")

        self._print("\nBranches:")
        for name in sorted(self.branches):
            marker = "* " if name == self.current_branch else "  "
            self._print(f"{marker}{name}")

    def file_status(self, filename: str) -> str:
        """Return a one-letter status of a file against the current commit."""
        current = self.current_commit_hash()
        if not current:
            return "A"
        head = self.read_commit(current)
        if head is None:
            return "?"
        if filename in head.files:
            if filename in self.staging:
                return "M" if head.files[filename] != self.staging[filename] else " "
            return "D"
        if filename in self.staging:
            return "A"
        return "?"

    def branch(self, branch_name: str) -> None:
        """Create a branch pointing at the current commit."""
        if branch_name in self.branches:
            raise MiniGitError("Branch already exists")
        self.branches[branch_name] = self.current_commit_hash()
        self._update_branch(branch_name)
        self._print(f"Created branch: {branch_name}")

    def checkout(self, target: str) -> None:
        """Switch to a branch, or detach HEAD at a commit hash."""
        if target in self.branches:
            self.current_branch = target
            self._update_head()
            self._restore_commit(self.branches[target])
            self._print(f"Switched to branch '{target}'")
            return
        if target and (self.commits_dir / target).is_file():
            self.current_branch = ""
            self.head_file.write_text(f"{target}\n", encoding="utf-8", newline="\n")
            self._restore_commit(target)
            self._print(f"Detached HEAD at {target}")
            return
        raise MiniGitError(f"Invalid branch or commit: {target}")

    def merge(self, branch_name: str) -> None:
        """Merge a branch into the current one."""
        if branch_name not in self.branches:
            raise MiniGitError(f"Branch not found: {branch_name}")
        current = self.current_commit_hash()
        target = self.branches[branch_name]
        base = self.find_lca(current, target)

        if base == target:
            self._print("Already up-to-date")
            return
        if base == current:
            self.checkout(branch_name)
            self._print("Fast-forward merge")
            return

        self._three_way_merge(current, target, base)
        self.in_merge_state = True
        self.merge_target_branch = branch_name
        self._print("Merge started. Resolve conflicts and commit")

    # -- queries -------------------------------------------------------------

    def current_commit_hash(self) -> str:
        """Return the hash HEAD points at, or an empty string."""
        if self.current_branch and self.current_branch in self.branches:
            return self.branches[self.current_branch]
        if self.head_file.exists():
            head = _first_line(self.head_file.read_text(encoding="utf-8"))
            if not head.startswith(HEAD_PREFIX):
                return head
        return ""

    def find_lca(self, first: str, second: str) -> str:
        """Return the first ancestor of ``second`` that is also an ancestor of ``first``."""
        ancestors: set[str] = set()
        stack = [first]
        while stack:
            current = stack.pop()
            ancestors.add(current)
            entry = self.read_commit(current)
            if entry is not None:
                stack.extend(entry.parents)

        stack = [second]
        while stack:
            current = stack.pop()
            if current in ancestors:
                return current
            entry = self.read_commit(current)
            if entry is not None:
                stack.extend(entry.parents)
        return ""

    def read_commit(self, commit_hash: str) -> Commit | None:
        """Load a commit by hash, or return None when there is none."""
        if not commit_hash:
            return None
        path = self.commits_dir / commit_hash
        if not path.is_file():
            return None
        return Commit.from_text(commit_hash, path.read_text(encoding="utf-8"))

    def read_blob(self, blob_hash: str) -> bytes:
        """Return a stored blob's content, or empty bytes when it is missing."""
        if not blob_hash:
            return b""
        path = self.objects_dir / blob_hash
        if not path.is_file():
            return b""
        return path.read_bytes()

    # -- storage helpers -----------------------------------------------------

    def _write_blob(self, blob_hash: str, content: bytes) -> None:
        (self.objects_dir / blob_hash).write_bytes(content)

    def _write_commit(self, entry: Commit) -> None:
        (self.commits_dir / entry.hash).write_text(
            entry.to_text(), encoding="utf-8", newline="\n"
        )

    def _update_head(self) -> None:
        self.head_file.write_text(
            f"{BRANCH_REF_PREFIX}{self.current_branch}\n", encoding="utf-8", newline="\n"
        )

    def _update_branch(self, branch_name: str) -> None:
        (self.heads_dir / branch_name).write_text(
            self.branches[branch_name], encoding="utf-8"
        )

    def _restore_commit(self, commit_hash: str) -> None:
        entry = self.read_commit(commit_hash)
        if entry is None:
            return
        for name, blob in entry.files.items():
            path = self.root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(self.read_blob(blob))
        for path in self.root.iterdir():
            if not path.is_file():
                continue
            name = path.name
            protected = name in PROTECTED_FILES or name.startswith(".minigit")
            if name not in entry.files and not protected:
                path.unlink()

    def _three_way_merge(self, current_hash: str, target_hash: str, base_hash: str) -> None:
        base = self.read_commit(base_hash)
        current = self.read_commit(current_hash)
        target = self.read_commit(target_hash)
        if base is None or current is None or target is None:
            return

        for name in sorted(base.files.keys() | current.files.keys() | target.files.keys()):
            base_content = self.read_blob(base.files.get(name, ""))
            current_content = self.read_blob(current.files.get(name, ""))
            target_content = self.read_blob(target.files.get(name, ""))
            if current_content == target_content:
                continue
            if base_content == current_content:
                self.staging[name] = target.files.get(name, "")
            elif base_content == target_content:
                self.staging[name] = current.files.get(name, "")
            else:
                self._mark_conflict(name, current_content, target_content)
        self._persist_staging()

    def _mark_conflict(self, filename: str, current: bytes, incoming: bytes) -> None:
        (self.root / filename).write_bytes(
            b"<<<<<<< HEAD\n"
            + current
            + b"\n=======\n"
            + incoming
            + b"\n>>>>>>> incoming\n"
        )
        self._print(f"CONFLICT: {filename} - manual resolution required")