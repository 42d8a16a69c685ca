from ..core import Overflow, FieldLayout


__all__ = ["Slot"]


class Slot:
    """Field of a combination template, together with the way its value is adapted to it.

    ``source_width`` is the declared width of the values that will be deposited into the field,
    or ``None`` if it is not known. Values that are declared to fit need no overflow handling.
    """
    __slots__ = ("_field", "_overflow", "_source_width")

    def __init__(self, field, overflow=Overflow.TRUNCATE, source_width=None):
        if not isinstance(field, FieldLayout):
            raise TypeError(f"Slot field must be a field layout, not {field!r}")
        if source_width is not None:
            if not isinstance(source_width, int) or source_width < 1:
                raise TypeError(f"Source width of field {field.name!r} must be a positive "
                                f"integer, not {source_width!r}")
        self._field        = field
        self._overflow     = Overflow.cast(overflow)
        self._source_width = source_width

    @property
    def field(self):
        return self._field

    @property
    def name(self):
        return self._field.name

    @property
    def width(self):
        return self._field.width

    @property
    def overflow(self):
        return self._overflow

    @property
    def source_width(self):
        return self._source_width

    @property
    def checked(self):
        """Whether the overflow policy has to be applied to values of this slot."""
        return self._source_width is None or self._source_width > self._field.width

    @property
    def spills(self):
        """Whether deposited values may have bits outside of the field."""
        return self.checked and self._overflow is Overflow.CORRUPT

    def __repr__(self):
        return (f"Slot({self._field!r}, {self._overflow}, "
                f"source_width={self._source_width!r})")
