"""Where the HTTP server gets its listening socket from.

A supervisor doing zero-downtime restarts (systemd, systemfd, ...) can hand
over an already-bound socket using the ``LISTEN_FDS`` convention. Without
one we bind a fresh socket on the configured address.
"""
import logging
import os
import socket
from abc import ABC, abstractmethod
from typing import Mapping, Optional

from werkzeug.serving import BaseWSGIServer, make_server

from dashboard.errors import StartupError

logger = logging.getLogger(__name__)

LISTEN_FDS_START = 3

# werkzeug picks the address family for fromfd() from the host string
FAMILY_HOSTS = {
    socket.AF_INET: "127.0.0.1",
    socket.AF_INET6: "::1",
}


def _socket_family(fd: int) -> int:
    sock = socket.socket(fileno=fd)
    try:
        return sock.family
    finally:
        sock.detach()


class ListenerSource(ABC):
    @abstractmethod
    def make_server(self, app) -> BaseWSGIServer:
        ...

    @abstractmethod
    def describe(self) -> str:
        ...


class InheritedSocket(ListenerSource):
    def __init__(self, fd: int = LISTEN_FDS_START):
        self.fd = fd

    def make_server(self, app) -> BaseWSGIServer:
        family = _socket_family(self.fd)
        host = FAMILY_HOSTS.get(family)
        if host is None:
            raise StartupError(f"inherited fd {self.fd} is not a TCP socket (family {family!r})")
        # the bound address comes from the socket itself when fd is given
        return make_server(host, 0, app, threaded=True, fd=self.fd)

    def describe(self) -> str:
        return "Using inherited socket"


class FreshBind(ListenerSource):
    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port

    def make_server(self, app) -> BaseWSGIServer:
        return make_server(self.host, self.port, app, threaded=True)

    def describe(self) -> str:
        return f"Using {self.host}:{self.port}"


def _inherited_fd(environ: Mapping[str, str]) -> Optional[int]:
    pid = (environ.get("LISTEN_PID") or "").strip()
    if pid and pid != str(os.getpid()):
        return None
    try:
        count = int(environ.get("LISTEN_FDS") or "0")
    except ValueError:
        return None
    return LISTEN_FDS_START if count >= 1 else None


def resolve_listener(host: str, port: int,
                     environ: Optional[Mapping[str, str]] = None) -> ListenerSource:
    env = os.environ if environ is None else environ
    fd = _inherited_fd(env)
    source = InheritedSocket(fd) if fd is not None else FreshBind(host, port)
    logger.info(source.describe())
    return source
