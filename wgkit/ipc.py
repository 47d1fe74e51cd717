"""Unix-socket endpoint for the userspace configuration protocol."""

from __future__ import annotations

import enum
import errno
import os
import queue
import select
import socket
import threading
from typing import Optional, Union

SOCKET_DIRECTORY = "/var/run/wireguard"

_WATCH_INTERVAL = 0.1


class IpcErrorCode(enum.IntEnum):
    """Status codes reported back to configuration clients."""

    IO = -errno.EIO
    PROTOCOL = -errno.EPROTO
    INVALID = -errno.EINVAL
    PORT_IN_USE = -errno.EADDRINUSE
    UNKNOWN = -55  # ENOANO


def socket_path(iface: str, directory: str = SOCKET_DIRECTORY) -> str:
    """Return the path of the control socket for interface ``iface``."""
    return f"{directory}/{iface}.sock"


def _listen_unix(path: str) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        sock.listen()
    except BaseException:
        sock.close()
        raise
    return sock


def _in_use(path: str) -> bool:
    probe = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        probe.connect(path)
    except OSError:
        return False
    finally:
        probe.close()
    return True


def uapi_open(name: str, directory: str = SOCKET_DIRECTORY) -> socket.socket:
    """Create and return the listening control socket for interface ``name``.

    A stale socket file left by a previous process is removed; a socket that
    still accepts connections raises ``OSError`` with ``EADDRINUSE``.
    """
    os.makedirs(directory, mode=0o755, exist_ok=True)
    path = socket_path(name, directory)
    old_umask = os.umask(0o077)
    try:
        try:
            return _listen_unix(path)
        except OSError:
            pass
        if _in_use(path):
            raise OSError(errno.EADDRINUSE, "unix socket in use", path)
        os.remove(path)
        return _listen_unix(path)
    finally:
        os.umask(old_umask)


class UAPIListener:
    """Accepts control connections until closed or its socket file is deleted.

    Errors are sticky: once ``accept`` raises, later calls raise the same error.
    """

    def __init__(self, sock: socket.socket, path: str, watch_interval: float = _WATCH_INTERVAL) -> None:
        self._sock = sock
        self._path = path
        self._interval = watch_interval
        self._events: queue.Queue[Union[socket.socket, BaseException]] = queue.Queue()
        self._stop = threading.Event()
        self._closed = False
        self._sock.setblocking(False)
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def __enter__(self) -> UAPIListener:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _run(self) -> None:
        while not self._stop.is_set():
            # check the path first so a deletion is never missed
            try:
                os.lstat(self._path)
            except FileNotFoundError as err:
                self._events.put(err)
                return
            try:
                readable, _, _ = select.select([self._sock], [], [], self._interval)
            except (OSError, ValueError) as err:
                if not self._stop.is_set():
                    self._events.put(err if isinstance(err, OSError) else OSError(errno.EBADF, str(err)))
                return
            if not readable or self._stop.is_set():
                continue
            try:
                conn, _ = self._sock.accept()
            except BlockingIOError:
                continue
            except OSError as err:
                self._events.put(err)
                return
            self._events.put(conn)

    def accept(self) -> socket.socket:
        """Wait for and return the next client connection."""
        item = self._events.get()
        if isinstance(item, BaseException):
            self._events.put(item)
            raise item
        return item

    def close(self) -> None:
        """Stop accepting, close the socket and remove its file."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        self._thread.join()
        self._sock.close()
        try:
            os.unlink(self._path)
        except FileNotFoundError:
            pass
        self._events.put(OSError(errno.EBADF, "listener closed"))

    def address(self) -> str:
        """Return the filesystem path the listener is bound to."""
        return self._path


def uapi_listen(
    name: str, sock: Union[socket.socket, int], directory: str = SOCKET_DIRECTORY
) -> UAPIListener:
    """Wrap an already listening socket (or its descriptor) in a ``UAPIListener``.

    Raises ``FileNotFoundError`` if the socket file for ``name`` does not exist.
    """
    if isinstance(sock, int):
        sock = socket.socket(fileno=sock)
    path = socket_path(name, directory)
    os.lstat(path)
    return UAPIListener(sock, path)


_ = Optional