"""Commit history mining via `git log`."""

from __future__ import annotations

import re
import subprocess
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..config import DEFAULT_GIT_TIMEOUT, DEFAULT_MAX_OUTPUT_BYTES
from ..logging import get_logger
from ..models import GitCommit
from .base import Collector

LOG_FORMAT = "%H|%an|%ae|%aI|%s"

SINCE_BY_SCOPE = {
    "incremental": "1 week ago",
    "module": "1 month ago",
    "full": "6 months ago",
}

_HASH_PATTERN = re.compile(r"^[0-9a-f]{7,40}$")
_NUMSTAT_PATTERN = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")

_RUNNER_ERRORS = (OSError, subprocess.SubprocessError, ValueError)


def parse_log(output: str) -> List[GitCommit]:
    """Parse `--pretty=format:hash|author|email|isodate|subject --numstat` text."""
    commits: List[GitCommit] = []
    current: Optional[GitCommit] = None

    for line in output.splitlines():
        if not line.strip():
            continue

        numstat = _NUMSTAT_PATTERN.match(line)
        if numstat:
            if current is None:
                continue
            insertions, deletions, filename = numstat.groups()
            current.files.append(filename.strip())
            current.insertions += 0 if insertions == "-" else int(insertions)
            current.deletions += 0 if deletions == "-" else int(deletions)
            continue

        commit = _parse_header(line)
        if commit is not None:
            commits.append(commit)
        # A malformed header must not absorb the numstat lines that follow it.
        current = commit

    return commits


def _parse_header(line: str) -> Optional[GitCommit]:
    parts = line.split("|", 4)
    if len(parts) != 5:
        return None
    commit_hash, author, email, raw_date, subject = parts
    if not _HASH_PATTERN.match(commit_hash.strip()):
        return None
    try:
        date = datetime.fromisoformat(raw_date.strip())
    except ValueError:
        return None
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return GitCommit(
        hash=commit_hash.strip(),
        author=author.strip(),
        email=email.strip(),
        date=date,
        message=subject.strip(),
    )


def contributor_stats(commits: Iterable[GitCommit]) -> Dict[str, Dict[str, Any]]:
    """Aggregate commit counts and line changes per author email."""
    stats: Dict[str, Dict[str, Any]] = {}
    for commit in commits:
        key = commit.email or commit.author
        entry = stats.setdefault(
            key,
            {"name": commit.author, "email": commit.email, "commits": 0, "insertions": 0, "deletions": 0},
        )
        entry["commits"] += 1
        entry["insertions"] += commit.insertions
        entry["deletions"] += commit.deletions
    return dict(sorted(stats.items(), key=lambda item: (-item[1]["commits"], item[0])))


class HistoryCollector(Collector):
    """Collects a bounded commit log plus branch and contributor views."""

    def __init__(
        self,
        root: Path,
        *,
        runner: Callable[..., str] | None = None,
        timeout: float = DEFAULT_GIT_TIMEOUT,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ) -> None:
        self.root = Path(root)
        self.timeout = timeout
        self.max_output_bytes = max_output_bytes
        self._runner = runner or self._default_runner
        self.logger = get_logger("collectors.history")

    def collect(self, scope: str) -> Dict[str, Any]:
        started = time.perf_counter()
        metadata: Dict[str, Any] = {"scope": scope, "is_git_repository": False}

        if not (self.root / ".git").exists():
            self.logger.debug("No .git directory under %s; skipping history", self.root)
            metadata.update(total_commits=0, date_range=None, collection_time_ms=0)
            return {"commits": [], "branches": {}, "contributors": {}, "metadata": metadata}

        metadata["is_git_repository"] = True
        commits: List[GitCommit] = []
        try:
            commits = parse_log(self._run(self._log_args(scope)))
        except _RUNNER_ERRORS as exc:
            self.logger.warning("git log failed in %s: %s", self.root, exc)
            metadata["error"] = str(exc)

        metadata.update(
            total_commits=len(commits),
            date_range=_date_range(commits),
            collection_time_ms=int((time.perf_counter() - started) * 1000),
        )
        return {
            "commits": commits,
            "branches": self.branch_info(),
            "contributors": contributor_stats(commits),
            "metadata": metadata,
        }

    def branch_info(self) -> Dict[str, Any]:
        """Return the current branch and every local/remote branch name."""
        try:
            current = self._run(["git", "rev-parse", "--abbrev-ref", "HEAD"]).strip()
            listing = self._run(["git", "branch", "-a", "--no-color"])
        except _RUNNER_ERRORS as exc:
            self.logger.debug("Branch listing failed: %s", exc)
            return {"current": "unknown", "branches": []}

        branches: List[str] = []
        for line in listing.splitlines():
            name = line.strip().lstrip("*").strip()
            if not name:
                continue
            name = name.split(" -> ", 1)[0]
            if name not in branches:
                branches.append(name)
        return {"current": current or "unknown", "branches": branches}

    def _log_args(self, scope: str) -> List[str]:
        since = SINCE_BY_SCOPE.get(scope, SINCE_BY_SCOPE["full"])
        return [
            "git",
            "log",
            f"--pretty=format:{LOG_FORMAT}",
            "--numstat",
            "--no-color",
            f"--since={since}",
        ]

    def _run(self, args: Sequence[str]) -> str:
        return self._runner(
            list(args), cwd=self.root, max_bytes=self.max_output_bytes, timeout=self.timeout
        )

    @staticmethod
    def _default_runner(
        args: Iterable[str], *, cwd: Path, max_bytes: int, timeout: float
    ) -> str:
        timed_out = threading.Event()
        with subprocess.Popen(
            list(args), cwd=str(cwd), stdout=subprocess.PIPE, stderr=subprocess.DEVNULL
        ) as process:

            def _expire() -> None:
                timed_out.set()
                process.kill()

            timer = threading.Timer(timeout, _expire)
            timer.start()
            try:
                data = process.stdout.read(max_bytes + 1)
                truncated = len(data) > max_bytes
                if truncated:
                    process.kill()
                    # Keep whole lines only; a cut header would be misparsed.
                    data = data[:max_bytes]
                    data = data[: data.rfind(b"\n") + 1]
                returncode = process.wait()
            finally:
                timer.cancel()

        if timed_out.is_set():
            raise subprocess.TimeoutExpired(list(args), timeout)
        if returncode != 0 and not truncated:
            raise subprocess.CalledProcessError(returncode, list(args))
        return data.decode("utf-8", errors="replace")


def _date_range(commits: Sequence[GitCommit]) -> Optional[Dict[str, str]]:
    if not commits:
        return None
    dates = sorted(commit.date for commit in commits)
    return {"earliest": dates[0].isoformat(), "latest": dates[-1].isoformat()}


__all__ = ["HistoryCollector", "SINCE_BY_SCOPE", "contributor_stats", "parse_log"]
