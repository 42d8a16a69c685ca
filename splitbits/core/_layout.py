from collections.abc import Mapping
import string

from .._utils import final
from ..utils import mask
from ._shape import Precision, Shape
from ._template import Template


__all__ = ["Segment", "FieldLayout", "TemplateLayout"]


@final
class Segment:
    """Run of adjacent template positions that belong to one field.

    A segment moves :attr:`length` bits between bit :attr:`offset` of the template value and
    bit :attr:`value_offset` of the field value. Both offsets count from the least significant
    bit. Extracting or depositing a segment takes one mask and at most one shift.

    :class:`Segment` objects are immutable.
    """
    def __init__(self, offset, length, value_offset):
        self._offset       = offset
        self._length       = length
        self._value_offset = value_offset

    @property
    def offset(self):
        return self._offset

    @property
    def length(self):
        return self._length

    @property
    def value_offset(self):
        return self._value_offset

    @property
    def shift(self):
        """Distance from the field bits to the template bits; negative means rightwards."""
        return self._offset - self._value_offset

    @property
    def mask(self):
        """Mask of the segment in the template value."""
        return mask(self._length, self._offset)

    @property
    def value_mask(self):
        """Mask of the segment in the field value."""
        return mask(self._length, self._value_offset)

    def extract(self, value):
        """Field bits contributed by this segment of template value ``value``."""
        bits = value & self.mask
        if self.shift >= 0:
            return bits >> self.shift
        return bits << -self.shift

    def deposit(self, value):
        """Template bits contributed by this segment of field value ``value``."""
        if self.shift >= 0:
            return (value << self.shift) & self.mask
        return (value >> -self.shift) & self.mask

    def __eq__(self, other):
        return (isinstance(other, Segment) and
                self._offset == other.offset and
                self._length == other.length and
                self._value_offset == other.value_offset)

    def __hash__(self):
        return hash((self._offset, self._length, self._value_offset))

    def __repr__(self):
        return f"Segment({self._offset}, {self._length}, {self._value_offset})"


@final
class FieldLayout:
    """Positions of one field within a template.

    Attributes
    ----------
    name : :class:`str`
        Field letter.
    positions : :class:`tuple` of :class:`int`
        Template positions of the field, in left to right order. Position 0 is the most
        significant bit of the template. The first position holds the most significant bit of
        the field value.
    template_width : :class:`int`
        Width of the template the field belongs to.
    """
    def __init__(self, name, positions, template_width):
        if not isinstance(name, str) or len(name) != 1 or name not in string.ascii_letters:
            raise TypeError(f"Field name must be a single ASCII letter, not {name!r}")
        positions = tuple(positions)
        if not positions:
            raise ValueError(f"Field {name!r} must have at least one position")
        for position in positions:
            if not isinstance(position, int) or position not in range(template_width):
                raise ValueError(f"Field {name!r} position {position!r} is outside of a "
                                 f"{template_width}-bit template")
        if len(set(positions)) != len(positions):
            raise ValueError(f"Field {name!r} positions {positions!r} are not unique")
        self._name           = name
        self._positions      = positions
        self._template_width = template_width

        segments = []
        consumed = 0
        run_start = run_length = None
        for position in positions + (None,):
            if run_start is not None and position == run_start + run_length:
                run_length += 1
                continue
            if run_start is not None:
                consumed += run_length
                segments.append(Segment(offset=template_width - run_start - run_length,
                                        length=run_length,
                                        value_offset=len(positions) - consumed))
            run_start, run_length = position, 1
        self._segments = tuple(segments)

    @property
    def name(self):
        return self._name

    @property
    def positions(self):
        return self._positions

    @property
    def template_width(self):
        return self._template_width

    @property
    def width(self):
        """Slot width: the number of template positions the field occupies."""
        return len(self._positions)

    @property
    def segments(self):
        """Segments of the field, from the most significant one."""
        return self._segments

    @property
    def top(self):
        """Segment that holds the most significant bit of the field value."""
        return self._segments[0]

    @property
    def spill_offset(self):
        """Template bit just above the segment that holds the most significant field bit."""
        return self.top.offset + self.top.length

    def spill(self, value):
        """Bits of ``value`` above the field, placed above its most significant segment."""
        return (value >> self.width) << self.spill_offset

    @property
    def mask(self):
        """Mask of the field in the template value."""
        result = 0
        for segment in self._segments:
            result |= segment.mask
        return result

    @property
    def max(self):
        """Largest value that fits in the slot."""
        return mask(self.width)

    def shape(self, precision=Precision.STANDARD, minimum=None):
        """Shape of the field when extracted. See :meth:`Shape.for_field`."""
        return Shape.for_field(self.width, precision, minimum)

    def __eq__(self, other):
        return (isinstance(other, FieldLayout) and
                self._name == other.name and
                self._positions == other.positions and
                self._template_width == other.template_width)

    def __hash__(self):
        return hash((self._name, self._positions, self._template_width))

    def __repr__(self):
        return f"FieldLayout({self._name!r}, {self._positions!r}, {self._template_width})"


@final
class TemplateLayout(Mapping):
    """Layout of every field of a template.

    A :class:`TemplateLayout` maps field letters to :class:`FieldLayout` objects, in order of
    the first occurrence of each letter in the template. It is built in a single left to right
    scan, and two templates with the same cells always have equal layouts.
    """
    def __init__(self, template):
        if not isinstance(template, Template):
            raise TypeError(f"Template layout must be built from a template, not {template!r}")
        positions = {}
        for position, cell in enumerate(template.cells):
            if cell in string.ascii_letters:
                positions.setdefault(cell, []).append(position)
        self._template = template
        self._fields   = {name: FieldLayout(name, field_positions, template.width)
                          for name, field_positions in positions.items()}

    @property
    def template(self):
        return self._template

    @property
    def width(self):
        return self._template.width

    @property
    def names(self):
        return tuple(self._fields)

    @property
    def placeholder_mask(self):
        return self._template.placeholder_mask

    @property
    def literal_mask(self):
        return self._template.literal_mask

    @property
    def literal_value(self):
        return self._template.literal_value

    def origin(self, name):
        """Index of the template character where field ``name`` first occurs."""
        return self._template.origin(self._fields[name].positions[0])

    def shapes(self, precision=Precision.STANDARD, minimum=None):
        """Extraction shapes of every field, keyed by field letter."""
        return {name: field.shape(precision, minimum) for name, field in self._fields.items()}

    def __getitem__(self, name):
        return self._fields[name]

    def __iter__(self):
        return iter(self._fields)

    def __len__(self):
        return len(self._fields)

    def __eq__(self, other):
        return (isinstance(other, TemplateLayout) and
                self.width == other.width and
                list(self._fields.values()) == list(other.values()) and
                self.literal_value == other.literal_value and
                self.literal_mask == other.literal_mask)

    def __hash__(self):
        return hash(self._template)

    def __repr__(self):
        return f"TemplateLayout({self._template!r})"
