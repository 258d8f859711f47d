# minigit

A small version control system that keeps its history in a `.minigit`
directory next to your files. File contents and commits are stored under
64-bit FNV-1a hashes. It supports staging, commits, a log, branches,
checkout of a branch or a single commit, and merges: fast-forward when
possible, three-way otherwise.

## Installation

```
pip install .
```

## Command line

Run every command from the directory you want to track.

```
minigit init                     # create .minigit with a 'main' branch
minigit add notes.txt todo.txt   # stage one or more files
minigit commit -m "First notes"  # record the staged files
minigit log                      # walk first-parent history from the current commit
minigit status                   # current branch, staged files, branches
minigit branch feature           # create a branch at the current commit
minigit branch                   # same output as status
minigit checkout feature         # switch to a branch
minigit checkout <commit-hash>   # detach HEAD at a commit
minigit merge feature            # merge a branch into the current one
```

A command that fails prints its error on standard error and exits with
status 1. `minigit add` stages every file it can find and reports each one
it cannot.

Status letters in `minigit status`:

- `A`: staged, not in the current commit
- `M`: staged content differs from the current commit
- `D`: in the current commit but not staged
- blank: staged content matches the current commit

Checking out a branch or commit writes its tracked files and deletes every
other regular file at the top level of the working directory (anything
named `minigit` or starting with `.minigit` is kept). Commit anything you
care about before switching.

With a detached HEAD a commit is still stored, but neither HEAD nor any
branch moves to it.

## Merging

`minigit merge <branch>` reports "Already up-to-date" when the branch is
already contained in the current history, and fast-forwards (a checkout of
that branch) when the current commit is its ancestor. Otherwise it compares
each file across the common ancestor and both sides: a file changed on only
one side has that side's version staged; a file changed differently on both
sides gets conflict markers written into it:

```
<<<<<<< HEAD
...your version...
=======
...incoming version...
>>>>>>> incoming
```

Edit the file, `minigit add` it, and commit. The resulting commit has the
current commit as its only parent.

## Library use

```python
import io
from pathlib import Path

from minigit.repository import MiniGitError, Repository

out = io.StringIO()
repo = Repository(Path("."), out)
repo.init()
Path("hello.txt").write_text("hello\n")
repo.add("hello.txt")
repo.commit("Add greeting")
print(repo.current_commit_hash())
print(out.getvalue())
```

`Repository` has the commands above as methods (`init`, `add`, `commit`,
`log`, `status`, `branch`, `checkout`, `merge`), plus `load_state`,
`file_status`, `current_commit_hash`, `find_lca`, `read_commit` and
`read_blob`. `init`, `add` and `commit` return the new commit or blob hash.
Messages go to the `out` stream, or standard output when it is not given.
Operations that fail, such as committing with nothing staged or checking
out an unknown target, raise `MiniGitError`.

`minigit.objects` has `compute_hash` and the `Commit` record with its
plain-text form (`Commit.to_text` and `Commit.from_text`).

## What it does not do

There are no diffs, no removal of files from tracking, no remotes, and no
configurable author: every log entry shows the same fixed author line. The
merge state is not kept between commands.

## Running the tests

```
pip install .[test]
pytest
```