import operator


__all__ = ["ceil_log2", "mask"]


def ceil_log2(n):
    """Returns the integer log2 of the smallest power-of-2 greater than or equal to ``n``.

    Raises a ``ValueError`` for negative inputs.
    """
    n = operator.index(n)
    if n < 0:
        raise ValueError(f"{n} is negative")
    return max(n - 1, 0).bit_length()


def mask(width, offset=0):
    """Returns an integer with ``width`` one bits, the lowest of which is bit ``offset``.

    Raises a ``ValueError`` for negative inputs.
    """
    width = operator.index(width)
    offset = operator.index(offset)
    if width < 0:
        raise ValueError(f"Width {width} is negative")
    if offset < 0:
        raise ValueError(f"Offset {offset} is negative")
    return ((1 << width) - 1) << offset
