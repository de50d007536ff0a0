"""Job bookkeeping for a small job-control shell, and its command-line parser."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator

MAX_JOBS = 16
MAX_JID = 1 << 16


class JobState(enum.IntEnum):
    """Life-cycle state of a job."""

    UNDEF = 0
    FOREGROUND = 1
    BACKGROUND = 2
    STOPPED = 3


_STATE_LABELS = {
    JobState.BACKGROUND: "Running",
    JobState.FOREGROUND: "Foreground",
    JobState.STOPPED: "Stopped",
}


@dataclass
class Job:
    """A process started by the shell, identified by its pid and job id."""

    pid: int
    jid: int
    state: JobState
    cmdline: str


class JobTable:
    """A fixed number of job slots, with job ids handed out in sequence."""

    def __init__(self, max_jobs: int = MAX_JOBS, verbose: bool = False) -> None:
        if max_jobs < 1:
            raise ValueError("the job table needs at least one slot")
        self.max_jobs = max_jobs
        self.verbose = verbose
        self._slots: list[Job | None] = [None] * max_jobs
        self.next_jid = 1

    def __iter__(self) -> Iterator[Job]:
        return (job for job in self._slots if job is not None)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def add(self, pid: int, state: JobState, cmdline: str) -> Job:
        """Record a new job in the first free slot and return it."""
        if pid < 1:
            raise ValueError(f"invalid pid: {pid}")
        for index, slot in enumerate(self._slots):
            if slot is not None:
                continue
            job = Job(pid, self.next_jid, JobState(state), cmdline)
            self._slots[index] = job
            self.next_jid += 1
            if self.next_jid > self.max_jobs:
                self.next_jid = 1
            if self.verbose:
                print(f"Added job [{job.jid}] {job.pid} {job.cmdline}")
            return job
        raise RuntimeError("Tried to create too many jobs")

    def delete(self, pid: int) -> bool:
        """Remove the job with ``pid``; return whether one was removed."""
        if pid < 1:
            return False
        for index, slot in enumerate(self._slots):
            if slot is not None and slot.pid == pid:
                self._slots[index] = None
                self.next_jid = self.max_jid() + 1
                return True
        return False

    def max_jid(self) -> int:
        """Largest job id in use, or 0 when the table is empty."""
        return max((job.jid for job in self), default=0)

    def foreground_pid(self) -> int | None:
        """Pid of the foreground job, or None if there is none."""
        return next(
            (job.pid for job in self if job.state is JobState.FOREGROUND), None
        )

    def by_pid(self, pid: int) -> Job | None:
        """Find a job by process id."""
        if pid < 1:
            return None
        return next((job for job in self if job.pid == pid), None)

    def by_jid(self, jid: int) -> Job | None:
        """Find a job by job id."""
        if jid < 1:
            return None
        return next((job for job in self if job.jid == jid), None)

    def pid_to_jid(self, pid: int) -> int:
        """Job id of the job with ``pid``, or 0 if there is none."""
        job = self.by_pid(pid)
        return job.jid if job is not None else 0

    def listing(self) -> str:
        """Text of the job list, one job after another in slot order."""
        parts = []
        for index, job in enumerate(self._slots):
            if job is None:
                continue
            label = _STATE_LABELS.get(job.state)
            if label is None:
                label = (
                    f"listjobs: Internal error: job[{index}].state={int(job.state)}"
                )
            parts.append(f"[{job.jid}] ({job.pid}) {label} {job.cmdline}")
        return "".join(parts)


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] == " ":
        pos += 1
    return pos


def parse_line(cmdline: str) -> tuple[list[str], bool]:
    """Split a command line into arguments and tell whether it runs in the background.

    Text in single quotes forms one argument. A trailing ``&`` argument marks
    a background job and is removed. A blank line counts as background.
    """
    text = (cmdline[:-1] if cmdline.endswith("\n") else cmdline) + " "
    argv: list[str] = []
    pos = _skip_spaces(text, 0)
    while True:
        if pos < len(text) and text[pos] == "'":
            pos += 1
            delim = text.find("'", pos)
        else:
            delim = text.find(" ", pos)
        if delim == -1:
            break
        argv.append(text[pos:delim])
        pos = _skip_spaces(text, delim + 1)

    if not argv:
        return argv, True
    background = argv[-1].startswith("&")
    if background:
        argv.pop()
    return argv, background