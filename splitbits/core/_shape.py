from enum import Enum
import re

from ..utils import ceil_log2


__all__ = ["STANDARD_WIDTHS", "Precision", "Shape", "unsigned", "boolean"]


#: Widths of the standard unsigned integer types. Templates must be exactly one of these wide.
STANDARD_WIDTHS = (8, 16, 32, 64, 128)


class Precision(Enum):
    """Rule for choosing the shape of an extracted field.

    ``STANDARD`` rounds every field wider than one bit up to the narrowest standard width
    (``u8``, ``u16``, ``u32``, ``u64`` or ``u128``); ``UX`` uses the exact width of the field.
    """
    STANDARD = "standard"
    UX       = "ux"


class Shape:
    """Type of a value extracted from a template.

    A :class:`Shape` is either the boolean shape, which is 1 bit wide and converts the extracted
    bit to :class:`bool`, or an unsigned integer shape of 1 to 128 bits.

    Parameters
    ----------
    width : int
        The number of bits in the representation of a value.
    boolean : bool
        Whether values of this shape are represented as :class:`bool`. Boolean shapes are always
        1 bit wide.
    """
    def __init__(self, width, *, boolean=False):
        if not isinstance(width, int) or isinstance(width, bool):
            raise TypeError(f"Width must be an integer, not {width!r}")
        if width not in range(1, 129):
            raise TypeError(f"Width must be an integer between 1 and 128, not {width}")
        if boolean and width != 1:
            raise TypeError(f"Width of a boolean shape must be 1, not {width}")
        self._width   = width
        self._boolean = bool(boolean)

    @property
    def width(self):
        return self._width

    @property
    def boolean(self):
        return self._boolean

    @property
    def standard(self):
        """Whether this shape is ``bool`` or one of the standard unsigned widths."""
        return self._boolean or self._width in STANDARD_WIDTHS

    @property
    def name(self):
        """Name of the shape: ``"bool"``, or ``"u"`` followed by the width."""
        if self._boolean:
            return "bool"
        return f"u{self._width}"

    @staticmethod
    def cast(obj):
        """Cast :py:`obj` to a shape.

        * a :class:`Shape`, where the result is itself;
        * the :class:`bool` type, where the result is :func:`boolean`;
        * an :class:`int`, where the result is :func:`unsigned(obj) <unsigned>`;
        * a :class:`str` naming a shape, either ``"bool"`` or ``"u"`` followed by a width.

        Raises
        ------
        TypeError
            If :py:`obj` cannot be converted to a :class:`Shape`.
        """
        if isinstance(obj, Shape):
            return obj
        elif obj is bool:
            return boolean()
        elif isinstance(obj, int) and not isinstance(obj, bool):
            return unsigned(obj)
        elif isinstance(obj, str):
            if obj == "bool":
                return boolean()
            match = re.fullmatch(r"u([1-9][0-9]*)", obj)
            if match:
                return unsigned(int(match.group(1)))
        raise TypeError(f"Object {obj!r} cannot be converted to a shape")

    @staticmethod
    def cast_minimum(obj, precision=Precision.STANDARD):
        """Cast :py:`obj` to a minimum extraction shape, or return ``None`` if it is ``None``.

        Raises
        ------
        TypeError
            If :py:`obj` cannot be converted to a :class:`Shape`.
        ValueError
            If :py:`obj` is not a standard shape and ``precision`` is
            :attr:`Precision.STANDARD`.
        """
        if obj is None:
            return None
        minimum = Shape.cast(obj)
        if Precision(precision) is Precision.STANDARD and not minimum.standard:
            raise ValueError(f"Minimum shape {minimum.name} is only allowed with exact-width "
                             f"precision; use one of bool, u8, u16, u32, u64, or u128")
        return minimum

    @staticmethod
    def for_field(width, precision=Precision.STANDARD, minimum=None):
        """Choose the shape of a field ``width`` bits wide.

        A 1-bit field is boolean unless ``minimum`` is a non-boolean shape. Wider fields are
        rounded up to a standard width with :attr:`Precision.STANDARD`, and kept exact with
        :attr:`Precision.UX`. The result is never narrower than ``minimum``.

        Raises
        ------
        ValueError
            If ``minimum`` is not a standard shape and ``precision`` is
            :attr:`Precision.STANDARD`.
        """
        precision = Precision(precision)
        minimum = Shape.cast_minimum(minimum, precision)
        if width == 1 and (minimum is None or minimum.boolean):
            return boolean()
        if precision is Precision.UX:
            result = width
        else:
            result = max(STANDARD_WIDTHS[0], 1 << ceil_log2(width))
        if minimum is not None and not minimum.boolean:
            result = max(result, minimum.width)
        return unsigned(result)

    def from_bits(self, raw):
        """Convert extracted bits to a value of this shape."""
        if self._boolean:
            return bool(raw)
        return raw

    def __repr__(self):
        if self._boolean:
            return "boolean()"
        return f"unsigned({self._width})"

    def __hash__(self):
        return hash((self._width, self._boolean))

    def __eq__(self, other):
        return (isinstance(other, Shape) and
                self.width == other.width and self.boolean == other.boolean)


def unsigned(width):
    """Returns :py:`Shape(width)`."""
    return Shape(width)


def boolean():
    """Returns :py:`Shape(1, boolean=True)`."""
    return Shape(1, boolean=True)
