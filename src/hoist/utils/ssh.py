# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import io
import os
import select
import shutil
import socket
import sys
from typing import Optional

import paramiko

from hoist.machine.models import Machine
from hoist.utils.ssh_runner import SSHRunner


def _load_pkey(path: Optional[str]) -> Optional[paramiko.PKey]:
    if not path:
        return None
    for key_cls in (
        paramiko.RSAKey,
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key_file(path)
        except paramiko.SSHException:
            continue
    raise paramiko.SSHException(f"Unsupported private key format for {path}")


def load_pkey_text(text: str) -> paramiko.PKey:
    for key_cls in (
        paramiko.RSAKey,
        paramiko.Ed25519Key,
        paramiko.ECDSAKey,
    ):
        try:
            return key_cls.from_private_key(io.StringIO(text))
        except paramiko.SSHException:
            continue
    raise paramiko.SSHException("Unsupported private key format")


def connect(
    *,
    address: str,
    username: str,
    key_path: Optional[str] = None,
    pkey: Optional[paramiko.PKey] = None,
    port: int = 22,
    connect_timeout: float = 20.0,
) -> paramiko.SSHClient:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    client.connect(
        hostname=address,
        port=port,
        username=username,
        pkey=pkey or _load_pkey(key_path),
        look_for_keys=False,
        allow_agent=False,
        timeout=connect_timeout,
    )
    return client


def open_ssh(machine: Machine, *, connect_timeout: float = 20.0) -> SSHRunner:
    client = connect(
        address=machine.address,
        username=machine.ssh_user,
        key_path=machine.ssh_key_path,
        port=machine.ssh_port,
        connect_timeout=connect_timeout,
    )
    return SSHRunner(client, host=machine.name)


def interactive_shell(client: paramiko.SSHClient) -> None:
    """
    Attach the local terminal to a remote login shell until it exits.
    """
    import termios
    import tty

    size = shutil.get_terminal_size()
    chan = client.invoke_shell(
        term=os.environ.get("TERM", "xterm"),
        width=size.columns,
        height=size.lines,
    )

    old_tty = termios.tcgetattr(sys.stdin)
    try:
        tty.setraw(sys.stdin.fileno())
        tty.setcbreak(sys.stdin.fileno())
        chan.settimeout(0.0)

        while True:
            readable, _, _ = select.select([chan, sys.stdin], [], [])
            if chan in readable:
                try:
                    data = chan.recv(1024)
                except socket.timeout:
                    data = None
                if data is not None:
                    if not data:
                        break
                    sys.stdout.write(data.decode("utf-8", errors="replace"))
                    sys.stdout.flush()
            if sys.stdin in readable:
                data = os.read(sys.stdin.fileno(), 1)
                if not data:
                    break
                chan.send(data)
    finally:
        termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_tty)
        chan.close()
