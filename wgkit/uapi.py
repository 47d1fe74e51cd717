"""Framing of the userspace configuration protocol spoken over a control socket."""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable, Tuple, Union

from wgkit.ipc import IpcErrorCode

KEY_SIZE = 32

logger = logging.getLogger(__name__)


class IPCError(Exception):
    """A protocol failure carrying the status code reported to the client."""

    def __init__(self, code: Union[int, IpcErrorCode], message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def error_code(self) -> int:
        """The numeric status code sent back as ``errno``."""
        return int(self.code)

    def __str__(self) -> str:
        return f"IPC error {int(self.code)}: {self.message}"


def ipc_errorf(code: Union[int, IpcErrorCode], msg: str, *args: object) -> IPCError:
    """Build an ``IPCError`` from a %-style message.

    The first argument that is an exception becomes the error's cause.
    """
    message = msg % args if args else msg
    error = IPCError(code, message)
    cause = next((arg for arg in args if isinstance(arg, BaseException)), None)
    if cause is not None:
        error.__cause__ = cause
    return error


def split_config_line(line: str) -> Tuple[str, str]:
    """Split a ``key=value`` line at its first ``=``.

    Raises ``IPCError`` with a protocol code when there is no ``=``.
    """
    key, sep, value = line.partition("=")
    if not sep:
        raise ipc_errorf(IpcErrorCode.PROTOCOL, "failed to parse line %r", line)
    return key, value


def format_key(prefix: str, key: bytes) -> str:
    """Render a 32-byte key as a ``prefix=<lowercase hex>`` line ending in a newline."""
    if len(key) != KEY_SIZE:
        raise ValueError(f"key must be {KEY_SIZE} bytes, got {len(key)}")
    return f"{prefix}={bytes(key).hex()}\n"


def _run_get(stream: BinaryIO, get_operation: Callable[[BinaryIO], None]) -> Union[BaseException, None, bool]:
    next_byte = stream.read(1)
    if not next_byte:
        return False
    if next_byte != b"\n":
        return ipc_errorf(
            IpcErrorCode.INVALID,
            "trailing character in UAPI get: %r",
            next_byte.decode("latin-1"),
        )
    try:
        get_operation(stream)
    except Exception as err:  # reported to the client as a status code
        return err
    return None


def handle_connection(
    stream: BinaryIO,
    get_operation: Callable[[BinaryIO], None],
    set_operation: Callable[[BinaryIO], None],
) -> None:
    """Serve ``get=1`` and ``set=1`` requests on ``stream`` until it ends.

    ``get_operation`` writes the configuration to the stream; ``set_operation``
    reads configuration lines from it. After each request an ``errno=<code>``
    status followed by a blank line is written. An unknown request or the end
    of input ends the session, and the stream is closed.
    """
    try:
        while True:
            op = stream.readline()
            if not op or not op.endswith(b"\n"):
                return

            if op == b"set=1\n":
                try:
                    set_operation(stream)
                    error: Union[BaseException, None] = None
                except Exception as err:  # reported to the client as a status code
                    error = err
            elif op == b"get=1\n":
                result = _run_get(stream, get_operation)
                if result is False:
                    return
                error = result  # type: ignore[assignment]
            else:
                logger.error("invalid UAPI operation: %r", op.decode("latin-1"))
                return

            status: Union[IPCError, None]
            if error is None:
                status = None
            elif isinstance(error, IPCError):
                status = error
            else:
                status = ipc_errorf(IpcErrorCode.UNKNOWN, "other UAPI error: %s", error)

            if status is not None:
                logger.error("%s", status)
                stream.write(f"errno={status.error_code}\n\n".encode())
            else:
                stream.write(b"errno=0\n\n")
            stream.flush()
    finally:
        stream.close()