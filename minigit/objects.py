"""Content hashing and the commit record stored in the repository."""

from __future__ import annotations

from dataclasses import dataclass, field

_FNV_OFFSET_BASIS = 14695981039346656037
_FNV_PRIME = 1099511628211
_MASK_64 = (1 << 64) - 1
_SIGN_EXTENSION = 0xFFFFFFFFFFFFFF00

SEPARATOR = "---"


def compute_hash(content: str | bytes) -> str:
    """Return the 64-bit FNV-1a hash of ``content`` as 16 lowercase hex digits.

    Text is hashed as its UTF-8 bytes. Bytes of 0x80 and above are mixed in
    as signed characters, sign-extended to 64 bits.
    """
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    value = _FNV_OFFSET_BASIS
    for byte in data:
        if byte >= 0x80:
            byte |= _SIGN_EXTENSION
        value = ((value ^ byte) * _FNV_PRIME) & _MASK_64
    return f"{value:016x}"


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return parts


@dataclass
class Commit:
    """A snapshot: message, time, parent hashes and a file-to-blob map."""

    hash: str
    message: str
    timestamp: str
    parents: list[str] = field(default_factory=list)
    files: dict[str, str] = field(default_factory=dict)

    def to_text(self) -> str:
        """Serialise the commit in its on-disk form (the hash is not stored)."""
        lines = [self.message, self.timestamp, *self.parents, SEPARATOR]
        lines.extend(f"{name}:{blob}" for name, blob in sorted(self.files.items()))
        return "".join(f"{line}\n" for line in lines)

    @classmethod
    def from_text(cls, commit_hash: str, text: str) -> Commit:
        """Parse the on-disk form of a commit stored under ``commit_hash``."""
        lines = iter(_lines(text))
        message = next(lines, "")
        timestamp = next(lines, "")
        parents = []
        for line in lines:
            if line == SEPARATOR:
                break
            parents.append(line)
        files = {}
        for line in lines:
            name, sep, blob = line.partition(":")
            if sep:
                files[name] = blob
        return cls(commit_hash, message, timestamp, parents, files)