"""Markdown vault on disk as a DocumentStore."""

from __future__ import annotations

import copy
import hashlib
import logging
import os
import re
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from ..errors import DocumentNotFoundError, StoreError, WriteConflictError
from ..models import Document
from .store import Mutation

logger = logging.getLogger(__name__)


def compute_text_hash(text: str) -> str:
    """SHA-256 of file text, used to detect writes racing with other editors."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def dump_note(metadata: dict[str, Any], content: str) -> str:
    """Serialize frontmatter and body back into Markdown text."""
    if not metadata:
        return content
    post = frontmatter.Post(content)
    post.metadata.update(metadata)
    text = frontmatter.dumps(post, sort_keys=False)
    return text if text.endswith("\n") else text + "\n"


_OPENING_FENCE = re.compile(r"\A---[ \t]*\r?\n")
_CLOSING_FENCE = re.compile(r"^---[ \t]*(?:\r?\n|\Z)", re.MULTILINE)
# A top-level "key:" line; list items and indented lines continue the key above
_KEY_LINE = re.compile(r"""^(?P<key>"[^"]*"|'[^']*'|[^\s#'"\-][^:]*?)[ \t]*:(?:\s|$)""")


def _split_frontmatter(text: str) -> tuple[str, str, str] | None:
    """Split into (opening fence, frontmatter, rest from the closing fence on)."""
    opening = _OPENING_FENCE.match(text)
    if opening is None:
        return None
    closing = _CLOSING_FENCE.search(text, opening.end())
    if closing is None:
        return None
    return text[: opening.end()], text[opening.end() : closing.start()], text[closing.start() :]


def _key_blocks(fm: str) -> list[tuple[str | None, list[str]]]:
    """Group frontmatter lines by the top-level key they belong to.

    Lines before the first key (comments, blank lines) form a block with
    key None. Raises ValueError for layouts that cannot be attributed.
    """
    blocks: list[tuple[str | None, list[str]]] = []
    for line in fm.splitlines(keepends=True):
        m = _KEY_LINE.match(line)
        if m:
            blocks.append((m.group("key").strip("\"'"), [line]))
        elif blocks:
            blocks[-1][1].append(line)
        elif not line.strip() or line.startswith("#"):
            blocks.append((None, [line]))
        else:
            raise ValueError(f"cannot attribute frontmatter line {line!r}")
    return blocks


def _trailing_comments(lines: list[str]) -> list[str]:
    i = len(lines)
    while i > 1 and (not lines[i - 1].strip() or lines[i - 1].startswith("#")):
        i -= 1
    return lines[i:]


def _same(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def _dump_key(key: Any, value: Any) -> str:
    return yaml.safe_dump({key: value}, sort_keys=False, default_flow_style=False, allow_unicode=True)


def update_note_text(text: str, old: dict[str, Any], new: dict[str, Any]) -> str | None:
    """Rewrite only the frontmatter keys that differ between ``old`` and ``new``.

    Untouched keys keep their original lines, and the body is kept
    byte for byte. Returns None when the frontmatter layout is not one
    this can edit line by line.
    """
    parts = _split_frontmatter(text)
    if parts is None:
        if old:
            return None
        if not new:
            return text
        return "---\n" + "".join(_dump_key(k, v) for k, v in new.items()) + "---\n" + text

    opening, fm, rest = parts
    try:
        blocks = _key_blocks(fm)
    except ValueError:
        return None

    by_name = {str(k): k for k in old}
    names = [name for name, _ in blocks if name is not None]
    if len(names) != len(set(names)) or set(names) != set(by_name):
        return None

    out: list[str] = []
    for name, lines in blocks:
        if name is None:
            out.extend(lines)
            continue
        key = by_name[name]
        if key not in new:
            out.extend(_trailing_comments(lines))
        elif _same(old[key], new[key]):
            out.extend(lines)
        else:
            out.append(_dump_key(key, new[key]))
            out.extend(_trailing_comments(lines))
    for key, value in new.items():
        if key not in old:
            out.append(_dump_key(key, value))

    body = "".join(out)
    if body and not body.endswith("\n"):
        body += "\n"
    return opening + body + rest


class FileStore:
    """Markdown files under a vault directory.

    Paths are vault-relative POSIX strings including the ``.md`` suffix.
    Hidden files and directories (``.obsidian``, ``.viewday``, ...) are
    ignored.
    """

    def __init__(self, root: Path):
        self.root = root.resolve()

    def absolute_path(self, path: str) -> Path:
        """Resolve a vault-relative path, refusing anything outside the vault."""
        candidate = (self.root / path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise DocumentNotFoundError(path)
        return candidate

    def _relative(self, file: Path) -> str:
        return file.relative_to(self.root).as_posix()

    def documents(self) -> Iterator[Document]:
        for md_file in sorted(self.root.rglob("*.md")):
            rel_parts = md_file.relative_to(self.root).parts
            if any(part.startswith(".") for part in rel_parts):
                continue
            try:
                post = frontmatter.load(md_file)
            except (OSError, UnicodeDecodeError, ValueError, TypeError, yaml.YAMLError) as e:
                logger.warning("Skipping %s: %s", md_file, e)
                continue
            yield Document(path=self._relative(md_file), metadata=dict(post.metadata))

    def exists(self, path: str) -> bool:
        try:
            return self.absolute_path(path).is_file()
        except DocumentNotFoundError:
            return False

    def _read(self, path: str) -> tuple[Path, str]:
        file = self.absolute_path(path)
        if not file.is_file():
            raise DocumentNotFoundError(path)
        return file, file.read_text(encoding="utf-8")

    def _parse(self, path: str, text: str) -> frontmatter.Post:
        try:
            return frontmatter.loads(text)
        except (ValueError, TypeError, yaml.YAMLError) as e:
            raise StoreError(f"Invalid frontmatter in {path}: {e}") from e

    def read_metadata(self, path: str) -> dict[str, Any]:
        _, text = self._read(path)
        return dict(self._parse(path, text).metadata)

    def read_content(self, path: str) -> str:
        _, text = self._read(path)
        return self._parse(path, text).content

    def mutate_metadata(self, path: str, mutate: Mutation) -> dict[str, Any]:
        file, text = self._read(path)
        original_hash = compute_text_hash(text)

        post = self._parse(path, text)
        original = dict(post.metadata)
        working = copy.deepcopy(original)
        mutate(working)
        try:
            new_text = update_note_text(text, original, working)
            if new_text is None:
                logger.debug("Rewriting all frontmatter of %s", path)
                new_text = dump_note(working, post.content)
        except yaml.YAMLError as e:
            raise StoreError(f"Cannot write frontmatter of {path}: {e}") from e

        # Someone else saved the file while we were working on it
        if compute_text_hash(file.read_text(encoding="utf-8")) != original_hash:
            raise WriteConflictError(path)

        self._write_atomic(file, new_text)
        logger.debug("Updated frontmatter of %s", path)
        return working

    def create(self, path: str, metadata: dict[str, Any], content: str = "") -> Document:
        file = self.absolute_path(path)
        file.parent.mkdir(parents=True, exist_ok=True)
        with file.open("x", encoding="utf-8") as f:
            f.write(dump_note(metadata, content))
        logger.debug("Created %s", path)
        return Document(path=self._relative(file), metadata=dict(metadata))

    @staticmethod
    def _write_atomic(file: Path, text: str) -> None:
        fd, tmp = tempfile.mkstemp(dir=file.parent, prefix=f".{file.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, file)
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise
