"""Padding of transport message content before encryption."""

PADDING_MULTIPLE = 16


def _round_up(size: int) -> int:
    return (size + PADDING_MULTIPLE - 1) & ~(PADDING_MULTIPLE - 1)


def calculate_padding_size(packet_size: int, mtu: int) -> int:
    """Return how many zero bytes to append to a packet of ``packet_size`` bytes.

    Content is padded up to a multiple of 16 bytes. With a non-zero ``mtu``,
    only the part beyond the last full MTU unit is padded, and the padded
    unit never grows past the MTU. An ``mtu`` of zero means no MTU is known.
    """
    last_unit = packet_size
    if mtu == 0:
        return _round_up(last_unit) - last_unit
    if last_unit > mtu:
        last_unit %= mtu
    padded_size = min(_round_up(last_unit), mtu)
    return padded_size - last_unit