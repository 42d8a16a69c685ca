from enum import Enum
import string

from .._utils import final, to_binary
from ..tracer import get_src_loc
from ._shape import STANDARD_WIDTHS


__all__ = [
    "TemplateError", "InvalidCharacter", "InvalidTemplateWidth", "InvalidCellForContext",
    "DuplicateFieldError", "UndefinedFieldError", "FieldlessTemplate",
    "Base", "Template",
]


class TemplateError(Exception):
    """Base class for errors found in a template.

    Attributes
    ----------
    template : :class:`str` or ``None``
        Text of the template the error was found in.
    index : :class:`int` or ``None``
        Index of the offending character in :attr:`template`, if the error can be attributed
        to a single character.
    """
    def __init__(self, message, template=None, index=None):
        super().__init__(message)
        self.message  = message
        self.template = template
        self.index    = index

    def __str__(self):
        if self.template is None:
            return self.message
        # Keep every character in place so that the caret lines up.
        text = "".join(" " if char.isspace() else char for char in self.template)
        lines = [self.message, f"    {text}"]
        if self.index is not None:
            lines.append("    " + " " * self.index + "^")
        return "\n".join(lines)


class InvalidCharacter(TemplateError):
    """A template contains a character that is not a field letter, placeholder, or literal."""


class InvalidTemplateWidth(TemplateError):
    """A template does not describe exactly 8, 16, 32, 64, or 128 bits."""


class InvalidCellForContext(TemplateError):
    """A template contains a placeholder or a literal where it has no meaning."""


class DuplicateFieldError(TemplateError):
    """The same field letter is produced by more than one input template."""


class UndefinedFieldError(TemplateError):
    """A field letter has no value to take its bits from."""


class FieldlessTemplate(SyntaxWarning):
    """An extraction template contains no fields, so nothing will be extracted."""


class Base(Enum):
    """Numeric base of the digits of a template."""
    BINARY      = 2
    HEXADECIMAL = 16

    @property
    def bits_per_digit(self):
        return 1 if self is Base.BINARY else 4


_HEX_DIGITS = "0123456789ABCDEF"


def _expand(char, base):
    # Returns the binary cells a single template character stands for, or None if the character
    # is not allowed.
    if char == ".":
        return "." * base.bits_per_digit
    if base is Base.HEXADECIMAL and char in _HEX_DIGITS:
        return to_binary(_HEX_DIGITS.index(char), 4)
    if base is Base.BINARY and char in "01":
        return char
    if char in string.ascii_letters:
        return char * base.bits_per_digit
    return None


@final
class Template:
    """Parsed bit layout template.

    A template is a string with one character per bit (or per 4 bits, for hexadecimal
    templates), most significant bit first. Every character is one of:

    * an ASCII letter, marking a bit of the field with that name (case matters);
    * ``.``, a placeholder for a bit that is ignored or preserved;
    * ``0`` or ``1``, a literal bit. In hexadecimal templates, ``0``-``9`` and ``A``-``F`` are
      literal digits worth 4 bits each, and every other letter is a field.

    Whitespace is ignored. After expansion the template must be 8, 16, 32, 64, or 128 bits wide.

    The expanded template is stored as :attr:`cells`, a string with one character per bit where
    every character is a field letter, ``.``, ``0``, or ``1``.

    Raises
    ------
    :exc:`InvalidCharacter`
        If the template contains a character that is not allowed in its base.
    :exc:`InvalidTemplateWidth`
        If the template does not expand to a standard width.
    """
    def __init__(self, text, base=Base.BINARY, *, src_loc_at=0):
        if not isinstance(text, str):
            raise TypeError(f"Template must be a string, not {text!r}")
        base = Base(base)

        cells   = []
        origins = []
        for index, char in enumerate(text):
            if char.isspace():
                continue
            expanded = _expand(char, base)
            if expanded is None:
                raise InvalidCharacter(f"Invalid character {char!r} in {base.name.lower()} "
                                       f"template", text, index)
            cells.append(expanded)
            origins.extend([index] * len(expanded))

        cells = "".join(cells)
        if len(cells) not in STANDARD_WIDTHS:
            raise InvalidTemplateWidth(f"Template must be 8, 16, 32, 64, or 128 bits wide, "
                                       f"not {len(cells)} bits wide", text)

        self._text    = text
        self._base    = base
        self._cells   = cells
        self._origins = tuple(origins)
        self.src_loc  = get_src_loc(src_loc_at)

    @staticmethod
    def cast(obj, base=Base.BINARY, *, src_loc_at=0):
        """Cast :py:`obj` to a template.

        A :class:`Template` is returned as-is if it has the requested base; a :class:`str` is
        parsed.
        """
        if isinstance(obj, Template):
            if obj.base is not Base(base):
                raise ValueError(f"Template {obj.text!r} is {obj.base.name.lower()}, not "
                                 f"{Base(base).name.lower()}")
            return obj
        return Template(obj, base, src_loc_at=1 + src_loc_at)

    @property
    def text(self):
        return self._text

    @property
    def base(self):
        return self._base

    @property
    def cells(self):
        return self._cells

    @property
    def width(self):
        return len(self._cells)

    def __len__(self):
        return len(self._cells)

    def origin(self, position):
        """Index of the template character that bit ``position`` was expanded from."""
        return self._origins[position]

    @property
    def names(self):
        """Field letters, in order of first occurrence."""
        return tuple(dict.fromkeys(cell for cell in self._cells if cell in string.ascii_letters))

    def _mask_of(self, predicate):
        value = 0
        for cell in self._cells:
            value = (value << 1) | int(predicate(cell))
        return value

    @property
    def placeholder_mask(self):
        """Integer with a 1 bit at every placeholder position."""
        return self._mask_of(lambda cell: cell == ".")

    @property
    def literal_mask(self):
        """Integer with a 1 bit at every literal position."""
        return self._mask_of(lambda cell: cell in "01")

    @property
    def literal_value(self):
        """Integer with a 1 bit at every literal ``1`` position."""
        return self._mask_of(lambda cell: cell == "1")

    @property
    def has_placeholders(self):
        return "." in self._cells

    @property
    def has_literals(self):
        return "0" in self._cells or "1" in self._cells

    def forbid_placeholders(self, purpose, hint=""):
        """Raise :exc:`InvalidCellForContext` at the first placeholder, if there is one."""
        position = self._cells.find(".")
        if position != -1:
            raise InvalidCellForContext(f"Placeholder '.' is not allowed in {purpose}{hint}",
                                        self._text, self._origins[position])

    def forbid_literals(self, purpose, hint=""):
        """Raise :exc:`InvalidCellForContext` at the first literal, if there is one."""
        for position, cell in enumerate(self._cells):
            if cell in "01":
                index = self._origins[position]
                raise InvalidCellForContext(f"Literal {self._text[index]!r} is not allowed in "
                                            f"{purpose}{hint}", self._text, index)

    def __eq__(self, other):
        return isinstance(other, Template) and self._cells == other.cells

    def __hash__(self):
        return hash(self._cells)

    def __repr__(self):
        if self._base is Base.BINARY:
            return f"Template({self._text!r})"
        return f"Template({self._text!r}, Base.{self._base.name})"
