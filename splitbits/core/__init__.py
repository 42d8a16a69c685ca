from ._shape import STANDARD_WIDTHS, Precision, Shape, unsigned, boolean
from ._template import TemplateError, InvalidCharacter, InvalidTemplateWidth
from ._template import InvalidCellForContext, DuplicateFieldError, UndefinedFieldError
from ._template import FieldlessTemplate, Base, Template
from ._layout import Segment, FieldLayout, TemplateLayout
from ._overflow import Overflow, FieldOverflowError, adapt


__all__ = [
    # _shape
    "STANDARD_WIDTHS", "Precision", "Shape", "unsigned", "boolean",
    # _template
    "TemplateError", "InvalidCharacter", "InvalidTemplateWidth", "InvalidCellForContext",
    "DuplicateFieldError", "UndefinedFieldError", "FieldlessTemplate", "Base", "Template",
    # _layout
    "Segment", "FieldLayout", "TemplateLayout",
    # _overflow
    "Overflow", "FieldOverflowError", "adapt",
]
