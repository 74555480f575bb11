"""Process and host introspection backing the statistics endpoints."""

from __future__ import annotations

import getpass
import logging
import os
import platform
import socket
import sys
import threading
import traceback
from datetime import UTC, datetime
from typing import Any

import psutil

logger = logging.getLogger(__name__)


def host_info() -> dict[str, str]:
    """Return host name/address, local time, user and OS details."""

    props: dict[str, str] = {}
    try:
        host_name = socket.gethostname()
        props["host.name"] = host_name
        props["host.address"] = socket.gethostbyname(host_name)
    except OSError as exc:
        logger.error("Unable to obtain host address: %s", exc)

    props["host.time"] = datetime.now(tz=UTC).isoformat()
    try:
        props["user.name"] = getpass.getuser()
    except (KeyError, OSError) as exc:
        logger.error("Unable to obtain user name: %s", exc)
    props["os.name"] = platform.system()
    props["os.version"] = platform.release()
    return props


def memory_usage() -> dict[str, int]:
    """Return process resident memory and system free/total memory in bytes."""

    process = psutil.Process(os.getpid())
    system = psutil.virtual_memory()
    return {
        "memory.used": process.memory_info().rss,
        "memory.free": system.available,
        "memory.maximum": system.total,
    }


def system_properties() -> dict[str, Any]:
    """Return interpreter and process properties (no environment variables)."""

    return {
        "python.version": platform.python_version(),
        "python.implementation": platform.python_implementation(),
        "python.executable": sys.executable,
        "python.path": list(sys.path),
        "platform": platform.platform(),
        "machine": platform.machine(),
        "process.pid": os.getpid(),
        "process.argv": list(sys.argv),
        "process.cwd": os.getcwd(),
        "process.threads": threading.active_count(),
        "file.encoding": sys.getfilesystemencoding(),
    }


def thread_dump() -> str:
    """Render every live thread and its current stack, innermost frame last."""

    frames = sys._current_frames()
    lines: list[str] = []
    for thread in threading.enumerate():
        flags = " daemon" if thread.daemon else ""
        lines.append(f'"{thread.name}" ident={thread.ident}{flags}')
        frame = frames.get(thread.ident) if thread.ident is not None else None
        if frame is None:
            lines.append("    <no frame>")
        else:
            for entry in traceback.format_stack(frame):
                lines.extend(f"    {line}" for line in entry.rstrip().splitlines())
        lines.append("")
    return "\n".join(lines)
