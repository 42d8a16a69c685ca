import linecache
import operator
import re


__all__ = ["to_binary", "to_hex", "final", "get_linter_options", "get_linter_option"]


def _check_fits(n, width):
    n = operator.index(n)
    width = operator.index(width)
    if n not in range(1 << width):
        raise ValueError(f"{n} does not fit in {width} bits")
    return n, width


def to_binary(n: int, width: int) -> str:
    """Formats ``n`` as exactly ``width`` binary digits, including when ``width`` is 0"""
    n, width = _check_fits(n, width)
    return f"{n:0{width}b}" if width else ""


def to_hex(n: int, width: int) -> str:
    """Formats ``n`` as a Python hexadecimal literal padded to ``width`` bits"""
    n, width = _check_fits(n, width)
    return f"0x{n:0{(width + 3) // 4}x}"


def final(cls):
    def init_subclass():
        raise TypeError(f"Subclassing {cls.__module__}.{cls.__qualname__} is not supported")
    cls.__init_subclass__ = init_subclass
    return cls


_LINTER_COMMENT = re.compile(r"^#\s*splitbits:(.*)$")
_LINTER_OPTION  = re.compile(r"^(\w+)=(\w+)$")


def get_linter_options(filename):
    """Returns the ``# splitbits: Name=value, ...`` options on the first line of ``filename``."""
    match = _LINTER_COMMENT.match(linecache.getline(filename, 1).rstrip("\n"))
    if match is None:
        return {}
    options = {}
    for item in match.group(1).split(","):
        option = _LINTER_OPTION.match(item.strip())
        if option is None:
            return {}
        options[option.group(1)] = option.group(2)
    return options


def get_linter_option(filename, name, default):
    """Returns the boolean option ``name``, or ``default`` if it is absent or not a boolean."""
    option = get_linter_options(filename).get(name)
    if option in ("1", "yes", "enable"):
        return True
    if option in ("0", "no", "disable"):
        return False
    return default
