# wgkit

Building blocks for a userspace WireGuard-style daemon. Each module works on its own
and uses only the standard library. Some modules need a POSIX system: `wgkit.rwcancel`
uses `select.poll`, and `wgkit.ipc` uses Unix sockets.

## Modules

### `wgkit.replay`

`ReplayFilter` is a sliding-window anti-replay filter in the style of RFC 6479. The
window is 8128 counters wide.

- `validate_counter(counter, limit)` returns `True` the first time it sees a counter.
  It returns `False` for a counter it has already seen, for one that falls behind the
  window, and for one that is at or above `limit`.
- `reset()` empties the filter.

A filter must not be shared between threads without a lock.

### `wgkit.tai64n`

`Timestamp` is a frozen 12-byte TAI64N label: 8 bytes of seconds followed by 4 bytes
of nanoseconds.

- `stamp(unix_nanos)` builds a timestamp from nanoseconds since the Unix epoch.
- `now()` stamps the current time.

The lower 24 bits of the nanosecond field are cleared, so two stamps less than about
16 ms apart may compare equal. `Timestamp.after(other)` compares the raw bytes.
`str()` gives a UTC date and time.

### `wgkit.ratelimiter`

`Ratelimiter` is a token bucket for each source address. A new address may send a
burst of 5 packets, and after that 20 packets a second.

- `allow(ip)` takes a `str`, `bytes`, `int` or `ipaddress` address and reports whether
  a packet may be processed now.
- `init()` clears the table and starts a background thread. Once the first address is
  seen, that thread calls `cleanup()` once a second until the table is empty.
- `cleanup()` drops addresses that have been idle for more than a second and returns
  `True` when the table is empty.
- `close()` stops the thread.

The limiter is also a context manager that calls `init()` on entry and `close()` on
exit. The clock is `time.monotonic_ns` unless you pass your own `time_now` callable
that returns nanoseconds. `len()` gives the number of tracked addresses.

### `wgkit.pools`

`WaitPool(max, new)` reuses objects and calls `new()` when none are free.

- `get()` blocks while `max` objects are checked out.
- `put(x)` returns an object and wakes one waiting caller.
- `count()` reports how many objects are out. It is only tracked while a limit is set.

A `max` of 0 means no limit. The module also defines the queue-size constants
`QUEUE_OUTBOUND_SIZE`, `QUEUE_INBOUND_SIZE`, `QUEUE_HANDSHAKE_SIZE`, `MAX_SEGMENT_SIZE`
and `PREALLOCATED_BUFFERS_PER_POOL`.

### `wgkit.timer`

`Timer(callback)` is a re-armable one-shot timer.

- `mod(delay)` arms the timer, or arms it again, for `delay` seconds.
- `delete()` disarms it.
- `delete_sync()` also waits for a callback that is already running.
- `is_pending()` tells whether the timer is armed.

`jittered_delay(base, max_jitter_ms)` adds a random 0 to `max_jitter_ms - 1`
milliseconds to `base`.

### `wgkit.rwcancel`

`RWCancel(fd)` makes `fd` non-blocking and lets another thread cancel reads and
writes that are waiting on it.

- `read(size)` and `write(data)` wait until the descriptor is ready.
- `ready_read()` and `ready_write()` wait for the descriptor and return `False` if
  the wait was cancelled or failed.
- `cancel()` wakes every wait. A read or write that is cancelled raises `OSError`
  with `EBADF`.
- `close()` releases the internal pipe. It does not close `fd`.

`retry_after_error(err)` reports whether an `OSError` is `EAGAIN` or `EINTR`.

### `wgkit.padding`

`calculate_padding_size(packet_size, mtu)` returns how many zero bytes round a packet
up to a multiple of 16. Only the part past the last full MTU unit is padded, and the
padded size never goes over `mtu`. An `mtu` of 0 means that no MTU is known.

### `wgkit.ipc`

This module covers the Unix-socket control endpoint. `IpcErrorCode` holds the status
codes sent back to clients: `IO`, `PROTOCOL`, `INVALID`, `PORT_IN_USE` and `UNKNOWN`.

- `socket_path(iface, directory="/var/run/wireguard")` gives `<directory>/<iface>.sock`.
- `uapi_open(name, directory=...)` creates the directory and binds a listening socket
  with umask `077`. It removes a stale socket file first. If another process still
  answers on the socket, it raises `OSError(EADDRINUSE)`.
- `uapi_listen(name, sock, directory=...)` wraps a listening socket or a descriptor in
  a `UAPIListener`. It raises `FileNotFoundError` if the socket file does not exist.

`UAPIListener` has these members:

- `accept()` returns the next client connection. It raises once the socket file has
  been deleted or the listener has been closed, and keeps raising that same error on
  later calls.
- `close()` stops the listener, closes the socket and removes the socket file.
- `address()` returns the socket path.

The listener is also a context manager.

### `wgkit.uapi`

This module handles framing for the text configuration protocol.

- `IPCError(code, message)` is an exception that carries the status code sent to the
  client. Its `str()` is `IPC error <code>: <message>`, and `error_code` holds the
  code as an `int`.
- `ipc_errorf(code, msg, *args)` builds an `IPCError` from a %-style message. The
  first argument that is an exception becomes its cause.
- `split_config_line(line)` splits `key=value` at the first `=`. It raises an
  `IPCError` with code `PROTOCOL` when there is no `=`.
- `format_key(prefix, key)` renders a 32-byte key as `prefix=<hex>\n`.
- `handle_connection(stream, get_operation, set_operation)` serves requests on a
  binary stream.
  - A `get=1` request must be followed by an empty line, and then
    `get_operation(stream)` is called.
  - A `set=1` request calls `set_operation(stream)`.
  - Each request is answered with `errno=<code>` and a blank line. An `IPCError` keeps
    its code, and any other exception is reported as `UNKNOWN`.
  - An unknown request or the end of input ends the session and closes the stream.

## Example

```python
from wgkit.replay import ReplayFilter
from wgkit.padding import calculate_padding_size

f = ReplayFilter()
assert f.validate_counter(0, 2**64 - 2**13 - 1)
assert not f.validate_counter(0, 2**64 - 2**13 - 1)

assert calculate_padding_size(1, 1420) == 15
```

## What this package does not do

wgkit is a set of components, not a working tunnel. It has:

- no daemon and no command-line program;
- no TUN device handling, and no UDP transport;
- no handshake, key exchange or packet encryption;
- no peers and no allowed-IPs table.

`handle_connection` only frames requests and replies. The code that reads and writes
the actual configuration keys comes from the caller through `get_operation` and
`set_operation`.

## Tests

```
pip install -e .[test]
pytest
```