# src/hoist/utils/ssh_runner.py

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

import paramiko

log = logging.getLogger("hoist")


class SSHCommandError(RuntimeError):
    def __init__(self, cmd: str, rc: int, stderr: str):
        self.cmd = cmd
        self.rc = rc
        self.stderr = stderr
        super().__init__(f"command failed ({rc}): {cmd}: {stderr.strip()}")


class CommandResult(NamedTuple):
    rc: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.rc == 0


class SSHRunner:
    """
    Runs shell commands on one host over an established paramiko client.

    Commands are passed through verbatim; callers add `sudo` themselves.
    """

    def __init__(self, client: paramiko.SSHClient, host: str = ""):
        self.client = client
        self.host = host

    def run(self, cmd: str, *, timeout: Optional[float] = None) -> CommandResult:
        log.debug("[%s] $ %s", self.host or "ssh", cmd)
        _, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
        out = stdout.read().decode(errors="replace")
        err = stderr.read().decode(errors="replace")
        return CommandResult(stdout.channel.recv_exit_status(), out, err)

    def check(self, cmd: str, *, timeout: Optional[float] = None) -> str:
        """Run a command and return its stdout, raising SSHCommandError on failure."""
        result = self.run(cmd, timeout=timeout)
        if not result.ok:
            raise SSHCommandError(cmd, result.rc, result.stderr)
        return result.stdout

    def put_text(self, content: str, remote_path: str) -> None:
        sftp = self.client.open_sftp()
        try:
            with sftp.open(remote_path, "w") as f:
                f.write(content)
        finally:
            sftp.close()

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "SSHRunner":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
