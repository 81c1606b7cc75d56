import os
import pathlib
import socket
import sys

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from dashboard import listener
from dashboard.errors import StartupError
from dashboard.listener import FreshBind, InheritedSocket, resolve_listener


def test_fresh_bind_without_inherited_socket():
    source = resolve_listener("0.0.0.0", 3000, environ={})

    assert isinstance(source, FreshBind)
    assert (source.host, source.port) == ("0.0.0.0", 3000)
    assert source.describe() == "Using 0.0.0.0:3000"


def test_inherited_socket_when_listen_fds_set():
    source = resolve_listener("0.0.0.0", 3000, environ={"LISTEN_FDS": "1", "LISTEN_PID": str(os.getpid())})

    assert isinstance(source, InheritedSocket)
    assert source.fd == 3
    assert source.describe() == "Using inherited socket"


def test_inherited_socket_without_listen_pid():
    assert isinstance(resolve_listener("h", 1, environ={"LISTEN_FDS": "2"}), InheritedSocket)


def test_sockets_for_another_process_are_ignored():
    environ = {"LISTEN_FDS": "1", "LISTEN_PID": str(os.getpid() + 1)}
    assert isinstance(resolve_listener("h", 1, environ=environ), FreshBind)


def test_zero_or_garbage_listen_fds_binds_fresh():
    assert isinstance(resolve_listener("h", 1, environ={"LISTEN_FDS": "0"}), FreshBind)
    assert isinstance(resolve_listener("h", 1, environ={"LISTEN_FDS": "many"}), FreshBind)


def test_fresh_bind_makes_threaded_server(monkeypatch):
    calls = []

    def fake_make_server(host, port, app, threaded=False, fd=None):
        calls.append((host, port, app, threaded, fd))
        return "server"

    monkeypatch.setattr(listener, "make_server", fake_make_server)
    monkeypatch.setattr(listener, "_socket_family", lambda fd: socket.AF_INET)

    assert FreshBind("127.0.0.1", 8080).make_server("app") == "server"
    assert InheritedSocket(3).make_server("app") == "server"
    assert calls[0] == ("127.0.0.1", 8080, "app", True, None)
    assert calls[1][2:] == ("app", True, 3)


def test_socket_family_is_read_without_closing_the_fd():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind(("127.0.0.1", 0))
        assert listener._socket_family(sock.fileno()) == socket.AF_INET
        # still open and usable
        assert sock.getsockname()[0] == "127.0.0.1"
    finally:
        sock.close()


def test_inherited_ipv6_socket_gets_ipv6_host(monkeypatch):
    calls = []

    def fake_make_server(host, port, app, threaded=False, fd=None):
        calls.append((host, fd))
        return "server"

    monkeypatch.setattr(listener, "make_server", fake_make_server)
    monkeypatch.setattr(listener, "_socket_family", lambda fd: socket.AF_INET6)

    assert InheritedSocket(5).make_server("app") == "server"
    assert calls == [("::1", 5)]


def test_inherited_non_tcp_socket_is_startup_error(monkeypatch):
    monkeypatch.setattr(listener, "make_server", lambda *a, **kw: pytest.fail("must not build a server"))
    monkeypatch.setattr(listener, "_socket_family", lambda fd: -1)

    with pytest.raises(StartupError):
        InheritedSocket(3).make_server("app")
