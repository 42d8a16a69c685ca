from enum import Enum
import operator

from ..utils import mask


__all__ = ["Overflow", "FieldOverflowError", "adapt"]


class Overflow(Enum):
    """Policy for a field value that has more significant bits than its slot.

    ``TRUNCATE``
        Keep the low bits that fit in the slot, discard the rest. This is the default.
    ``PANIC``
        Raise :exc:`FieldOverflowError`.
    ``CORRUPT``
        Keep the low bits as ``TRUNCATE`` does, but let the excess bits spill into the template
        positions above the most significant segment of the field.
    ``SATURATE``
        Clamp the value to the largest value that fits in the slot.
    """
    TRUNCATE = "truncate"
    PANIC    = "panic"
    CORRUPT  = "corrupt"
    SATURATE = "saturate"

    @staticmethod
    def cast(obj):
        """Cast an :class:`Overflow` member or its lowercase name to an :class:`Overflow`."""
        if isinstance(obj, Overflow):
            return obj
        try:
            return Overflow(obj)
        except ValueError:
            raise ValueError("Overflow policy must be one of 'truncate', 'panic', 'corrupt', "
                             "or 'saturate', not {!r}"
                             .format(obj)) from None


class FieldOverflowError(OverflowError):
    """A field value does not fit in its slot and the overflow policy is ``PANIC``."""
    def __init__(self, name, value, width):
        super().__init__(f"Field {name!r} value {value:#b} does not fit in its {width}-bit slot "
                         f"(maximum {mask(width):#b})")
        self.name  = name
        self.value = value
        self.width = width


def adapt(value, width, overflow=Overflow.TRUNCATE, *, name="?"):
    """Adapt ``value`` to a slot ``width`` bits wide according to ``overflow``.

    With :attr:`Overflow.CORRUPT` the value is returned unchanged; the caller decides where
    the excess bits go.

    Raises
    ------
    :exc:`FieldOverflowError`
        If the value does not fit and ``overflow`` is :attr:`Overflow.PANIC`.
    """
    value = operator.index(value)
    overflow = Overflow.cast(overflow)
    limit = mask(width)
    if overflow is Overflow.TRUNCATE:
        return value & limit
    elif overflow is Overflow.PANIC:
        if value > limit:
            raise FieldOverflowError(name, value, width)
        return value
    elif overflow is Overflow.SATURATE:
        return min(value, limit)
    else:
        return value
