from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Any

from .models import LineObservation

HUNK_HEADER_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@(?P<header>.*)$"
)
MARKDOWN_PATH_RE = re.compile(r"\.(md|mdx|markdown)$", re.IGNORECASE)
MARKDOWN_PATHSPECS = ("*.md", "*.mdx", "*.markdown")
GIT_HEADER_RE = re.compile(r'^diff --git (?P<a>"(?:[^"\\]|\\.)*"|\S+) (?P<b>"(?:[^"\\]|\\.)*"|\S+)\s*$')
OCTAL_ESCAPE_RE = re.compile(r"[0-7]{1,3}")
C_ESCAPES = {"a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v"}


def run_git(repo: Path, args: list[str]) -> str:
    process = subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )
    if process.returncode != 0:
        message = process.stderr.strip() or process.stdout.strip()
        raise RuntimeError(f"git {' '.join(args)} failed: {message}")
    return process.stdout


def read_git_diff(repo: Path, base_ref: str, head_ref: str) -> str:
    run_git(repo, ["rev-parse", "--verify", base_ref])
    run_git(repo, ["rev-parse", "--verify", head_ref])
    return run_git(
        repo,
        [
            "-c",
            "core.quotePath=false",
            "diff",
            "--no-color",
            "--find-renames=50%",
            f"{base_ref}...{head_ref}",
            "--",
            *MARKDOWN_PATHSPECS,
        ],
    )


def unquote_diff_path(raw: str) -> str:
    """Undo git's C-style quoting of paths with special or non-ASCII characters."""
    if len(raw) < 2 or not (raw.startswith('"') and raw.endswith('"')):
        return raw
    body = raw[1:-1]
    data = bytearray()
    index = 0
    while index < len(body):
        char = body[index]
        if char != "\\" or index + 1 >= len(body):
            data.extend(char.encode("utf-8"))
            index += 1
            continue
        octal = OCTAL_ESCAPE_RE.match(body, index + 1)
        if octal:
            data.append(int(octal.group(0), 8) & 0xFF)
            index = octal.end()
            continue
        escaped = body[index + 1]
        data.extend(C_ESCAPES.get(escaped, escaped).encode("utf-8"))
        index += 2
    return data.decode("utf-8", errors="replace")


def normalize_diff_path(raw: str) -> str | None:
    value = unquote_diff_path(raw.strip())
    if value == "/dev/null":
        return None
    if value.startswith("a/") or value.startswith("b/"):
        return value[2:]
    return value


def _file_header_path(line: str) -> str | None:
    return normalize_diff_path(line[4:].split("\t")[0])


def is_markdown_path(path: str | None) -> bool:
    return bool(path) and MARKDOWN_PATH_RE.search(path) is not None


def file_path_of(file_entry: dict[str, Any]) -> str:
    return file_entry.get("b_path") or file_entry.get("a_path") or "UNKNOWN"


def parse_unified_diff(diff_text: str) -> list[dict[str, Any]]:
    """Parse git or plain ``diff -u`` output into files, hunks and numbered lines."""
    lines = diff_text.splitlines()
    files: list[dict[str, Any]] = []
    current_file: dict[str, Any] | None = None
    current_hunk: dict[str, Any] | None = None
    old_cursor = new_cursor = 0
    old_remaining = new_remaining = 0
    index = 0

    while index < len(lines):
        line = lines[index]

        if current_hunk is not None:
            if line.startswith("\\ "):
                current_hunk["lines"].append({"kind": "meta", "text": line[2:], "oldLine": None, "newLine": None})
                index += 1
                continue
            if old_remaining <= 0 and new_remaining <= 0:
                current_hunk = None
                continue
            if line.startswith(" ") or line == "":
                current_hunk["lines"].append(
                    {"kind": "context", "text": line[1:], "oldLine": old_cursor, "newLine": new_cursor}
                )
                old_cursor += 1
                new_cursor += 1
                old_remaining -= 1
                new_remaining -= 1
            elif line.startswith("+"):
                current_hunk["lines"].append({"kind": "add", "text": line[1:], "oldLine": None, "newLine": new_cursor})
                new_cursor += 1
                new_remaining -= 1
            elif line.startswith("-"):
                current_hunk["lines"].append({"kind": "delete", "text": line[1:], "oldLine": old_cursor, "newLine": None})
                old_cursor += 1
                old_remaining -= 1
            else:
                current_hunk = None
                continue
            index += 1
            continue

        if line.startswith("diff --git "):
            header = GIT_HEADER_RE.match(line)
            current_file = {
                "a_path": normalize_diff_path(header.group("a")) if header else None,
                "b_path": normalize_diff_path(header.group("b")) if header else None,
                "hunks": [],
                "has_headers": False,
            }
            files.append(current_file)
            index += 1
            continue

        if line.startswith("--- ") and index + 1 < len(lines) and lines[index + 1].startswith("+++ "):
            # Plain `diff -u` output has no `diff --git` line; the header pair opens a new file.
            if current_file is None or current_file["hunks"] or current_file["has_headers"]:
                current_file = {"a_path": None, "b_path": None, "hunks": [], "has_headers": False}
                files.append(current_file)
            current_file["a_path"] = _file_header_path(line)
            current_file["b_path"] = _file_header_path(lines[index + 1])
            current_file["has_headers"] = True
            index += 2
            continue

        if line.startswith("@@ ") and current_file is not None:
            match = HUNK_HEADER_RE.match(line)
            if not match:
                raise RuntimeError(f"Unsupported hunk header: {line}")
            old_cursor = int(match.group("old_start"))
            new_cursor = int(match.group("new_start"))
            old_remaining = int(match.group("old_count") or "1")
            new_remaining = int(match.group("new_count") or "1")
            current_hunk = {
                "old": {"start": old_cursor, "count": old_remaining},
                "new": {"start": new_cursor, "count": new_remaining},
                "header": match.group("header").strip(),
                "lines": [],
            }
            current_file["hunks"].append(current_hunk)
            index += 1
            continue

        index += 1

    return files


def observations_from_diff_file(file_entry: dict[str, Any]) -> list[LineObservation]:
    observations: list[LineObservation] = []
    for hunk in file_entry.get("hunks") or []:
        for line in hunk.get("lines") or []:
            kind = line.get("kind")
            if kind not in {"add", "context"} or line.get("newLine") is None:
                continue
            observations.append(
                LineObservation(
                    line_number=line["newLine"],
                    is_addition=kind == "add",
                    text=str(line.get("text", "")),
                )
            )
    return observations


def markdown_files(parsed_files: list[dict[str, Any]], path_filter: str | None = None) -> list[dict[str, Any]]:
    selected: list[dict[str, Any]] = []
    for file_entry in parsed_files:
        if file_entry.get("b_path") is None:
            continue
        path = file_path_of(file_entry)
        if not is_markdown_path(path):
            continue
        if path_filter and path_filter.lower() not in path.lower():
            continue
        selected.append(file_entry)
    return selected
