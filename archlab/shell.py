"""A tiny job-control shell: runs programs in the foreground or background."""

from __future__ import annotations

import getopt
import os
import signal
import subprocess
import sys
import time
from typing import Callable, Sequence, TextIO

from archlab.jobs import MAX_JOBS, Job, JobState, JobTable, parse_line

PROMPT = "tsh> "
_BUILTIN_PREFIXES = ("quit", "bg", "fg", "jobs")
_POLL_INTERVAL = 0.01


def _leading_int(text: str) -> int:
    """Parse the leading decimal integer of ``text``; 0 if there is none."""
    stripped = text.lstrip()
    sign = 1
    if stripped[:1] in "+-" and stripped[:1]:
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for char in stripped:
        if not char.isdigit():
            break
        digits += char
    return sign * int(digits) if digits else 0


def _exec_path(program: str) -> str:
    """Path to execute ``program`` at; a bare name is taken relative to the cwd."""
    return program if os.path.dirname(program) else os.path.join(os.curdir, program)


def _child_setup(mask: set[int]) -> None:
    os.setpgid(0, 0)
    signal.pthread_sigmask(signal.SIG_SETMASK, mask)


class Shell:
    """Evaluates command lines, keeping a table of the jobs it has started."""

    def __init__(self, verbose: bool = False, out: TextIO | None = None) -> None:
        self.jobs = JobTable(MAX_JOBS, verbose)
        self.out = out if out is not None else sys.stdout
        self._processes: dict[int, subprocess.Popen] = {}

    def _write(self, text: str) -> None:
        self.out.write(text)

    def _start_job(self, argv: list[str], state: JobState, cmdline: str) -> Job | None:
        previous = signal.pthread_sigmask(signal.SIG_BLOCK, {signal.SIGCHLD})
        try:
            try:
                process = subprocess.Popen(
                    argv,
                    executable=_exec_path(argv[0]),
                    env={},
                    preexec_fn=lambda: _child_setup(previous),
                )
            except (OSError, subprocess.SubprocessError):
                self._write(f"{argv[0]}: Command not found\n")
                return None
            self._processes[process.pid] = process
            try:
                return self.jobs.add(process.pid, state, cmdline)
            except RuntimeError as exc:
                self._write(f"{exc}\n")
                return None
        finally:
            signal.pthread_sigmask(signal.SIG_SETMASK, previous)

    def eval(self, cmdline: str) -> None:
        """Run a built-in command, or start a program as a new job."""
        argv, background = parse_line(cmdline)
        if cmdline.startswith(_BUILTIN_PREFIXES):
            if not self.builtin_command(argv):
                self._write("Not a builtin command.\n")
            return
        if not argv:
            return

        state = JobState.BACKGROUND if background else JobState.FOREGROUND
        job = self._start_job(argv, state, cmdline)
        if job is None:
            return
        if background:
            self._write(f"[{job.jid}] ({job.pid}) {job.cmdline}")
        else:
            self.wait_foreground(job.pid)

    def builtin_command(self, argv: Sequence[str]) -> bool:
        """Execute a built-in command; return False if ``argv`` is not one."""
        if not argv:
            return False
        name = argv[0]
        if name.startswith("quit"):
            raise SystemExit(0)
        if name.startswith(("bg", "fg")):
            self.do_bgfg(argv)
            return True
        if name.startswith("jobs"):
            self._write(self.jobs.listing())
            return True
        return False

    def _continue(self, pid: int) -> None:
        try:
            os.killpg(pid, signal.SIGCONT)
        except OSError:
            self._write("kill function failed.\n")

    def do_bgfg(self, argv: Sequence[str]) -> None:
        """Resume a stopped or background job by ``%jid`` or pid."""
        command = argv[0]
        if len(argv) < 2:
            self._write(f"{command} command requires PID or %jobid argument\n")
            return

        to_background = command.startswith("bg")
        target = argv[1]
        if target.startswith("%"):
            jid = _leading_int(target[1:])
            job = self.jobs.by_jid(jid)
            if job is None:
                self._write(f"%{jid}: No such job\n")
                return
        elif target[:1].isdigit() and target[:1] in "0123456789":
            pid = _leading_int(target)
            job = self.jobs.by_pid(pid)
            if job is None:
                self._write(f"({pid}): No such process\n")
                return
        else:
            name = "bg" if to_background else "fg"
            self._write(f"{name}: argument must be a pid or %jobid\n")
            return

        if to_background:
            job.state = JobState.BACKGROUND
            self._write(f"[{job.jid}] ({job.pid}) {job.cmdline}")
            self._continue(job.pid)
        else:
            job.state = JobState.FOREGROUND
            self._continue(job.pid)
            self.wait_foreground(job.pid)

    def wait_foreground(self, pid: int) -> None:
        """Block until the job with ``pid`` is no longer in the foreground."""
        job = self.jobs.by_pid(pid)

        def in_foreground() -> bool:
            return (
                job is not None
                and job.state is JobState.FOREGROUND
                and self.jobs.by_pid(pid) is job
            )

        while in_foreground():
            self.reap_children()
            if in_foreground():
                time.sleep(_POLL_INTERVAL)

    def reap_children(self) -> list[int]:
        """Collect every child that has ended or stopped; return their pids."""
        reaped = []
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG | os.WUNTRACED)
            except ChildProcessError:
                break
            if pid == 0:
                break
            reaped.append(pid)
            job = self.jobs.by_pid(pid)
            if os.WIFEXITED(status) or os.WIFSIGNALED(status):
                if os.WIFSIGNALED(status) and job is not None:
                    self._write(
                        f"Job [{job.jid}] ({job.pid}) terminated by signal "
                        f"{os.WTERMSIG(status)}\n"
                    )
                self.jobs.delete(pid)
                process = self._processes.pop(pid, None)
                if process is not None:
                    process.returncode = os.waitstatus_to_exitcode(status)
            elif os.WIFSTOPPED(status) and job is not None:
                self._write(
                    f"Job [{job.jid}] ({job.pid}) stopped by signal "
                    f"{os.WSTOPSIG(status)}\n"
                )
                job.state = JobState.STOPPED
        return reaped

    def forward_signal(self, signum: int) -> int | None:
        """Send ``signum`` to the foreground job's process group; return its pid."""
        pid = self.jobs.foreground_pid()
        if pid is None:
            return None
        try:
            os.killpg(pid, signum)
        except OSError:
            self._write("kill function failed.\n")
        return pid

    def install_signal_handlers(self) -> dict[int, Callable | int | None]:
        """Install the shell's handlers; return the handlers they replace."""

        def on_quit(signum: int, frame: object) -> None:
            self._write("Terminating after receipt of SIGQUIT signal\n")
            raise SystemExit(1)

        handlers = {
            signal.SIGINT: lambda signum, frame: self.forward_signal(signum),
            signal.SIGTSTP: lambda signum, frame: self.forward_signal(signum),
            signal.SIGCHLD: lambda signum, frame: self.reap_children(),
            signal.SIGQUIT: on_quit,
        }
        previous = {}
        for signum, handler in handlers.items():
            previous[signum] = signal.signal(signum, handler)
        return previous


def usage() -> str:
    """Return the command-line help text."""
    return "\n".join(
        [
            "Usage: shell [-hvp]",
            "   -h   print this message",
            "   -v   print additional diagnostic information",
            "   -p   do not emit a command prompt",
            "",
        ]
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the shell's read/eval loop on standard input."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        sys.stderr.flush()
        os.dup2(1, 2)
    except OSError:
        pass

    try:
        options, _ = getopt.getopt(args, "hvp")
    except getopt.GetoptError:
        sys.stdout.write(usage())
        return 1
    verbose = False
    emit_prompt = True
    for flag, _value in options:
        if flag == "-h":
            sys.stdout.write(usage())
            return 1
        if flag == "-v":
            verbose = True
        elif flag == "-p":
            emit_prompt = False

    shell = Shell(verbose)
    previous = shell.install_signal_handlers()
    try:
        while True:
            if emit_prompt:
                sys.stdout.write(PROMPT)
                sys.stdout.flush()
            try:
                line = sys.stdin.readline()
            except OSError:
                print("fgets error")
                return 1
            # A final line without a newline is dropped, as at end of file.
            if not line.endswith("\n"):
                sys.stdout.flush()
                return 0
            shell.eval(line)
            sys.stdout.flush()
    except SystemExit as exc:
        sys.stdout.flush()
        return exc.code if isinstance(exc.code, int) else 0
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


if __name__ == "__main__":
    sys.exit(main())