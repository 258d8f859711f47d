"""Command-line entry point for the repository commands."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from .repository import MiniGitError, Repository

PROGRAM = "minigit"
COMMANDS = 'init, add, commit -m "message", log, status, branch, checkout, merge'


def _usage() -> None:
    print(f"Usage: {PROGRAM} <command> [args]", file=sys.stderr)
    print(f"Commands: {COMMANDS}", file=sys.stderr)


def _invalid() -> int:
    print("Invalid command or arguments", file=sys.stderr)
    return 1


def _run(repo: Repository, command: str, args: list[str]) -> int:
    if command == "init":
        repo.init()
    elif command == "add" and args:
        failed = False
        for filename in args:
            try:
                repo.add(filename)
            except MiniGitError as error:
                print(error, file=sys.stderr)
                failed = True
        return 1 if failed else 0
    elif command == "commit" and len(args) >= 2 and args[0] == "-m":
        repo.commit(args[1])
    elif command == "log":
        repo.log()
    elif command == "status":
        repo.status()
    elif command == "branch":
        if args:
            repo.branch(args[0])
        else:
            repo.status()
    elif command == "checkout" and args:
        repo.checkout(args[0])
    elif command == "merge" and args:
        repo.merge(args[0])
    else:
        return _invalid()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run one repository command in the current directory; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        _usage()
        return 1

    repo = Repository(".")
    if repo.git_dir.exists():
        repo.load_state()

    command, rest = args[0], args[1:]
    try:
        return _run(repo, command, rest)
    except (MiniGitError, OSError) as error:
        print(error, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())