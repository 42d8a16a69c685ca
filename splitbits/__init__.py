# Extract version for this package from the environment package metadata. This used to be a lot
# more difficult in earlier Python versions, and the `__version__` field is a legacy of that time.
import importlib.metadata
try:
    __version__ = importlib.metadata.version(__package__)
except importlib.metadata.PackageNotFoundError:
    # No importlib metadata for this package. This shouldn't normally happen, but some people
    # prefer not installing packages via pip at all. Although not recommended we still support it.
    __version__ = "unknown" # :nocov:
del importlib


from .core import *
from .engine import EngineError
from ._ops import *

__all__ = [
    "Shape", "unsigned", "boolean", "Precision",
    "Base", "Template",
    "Overflow",
    "TemplateError", "InvalidCharacter", "InvalidTemplateWidth", "InvalidCellForContext",
    "DuplicateFieldError", "UndefinedFieldError", "FieldOverflowError", "EngineError",
    "FieldlessTemplate",
    "splitbits", "splitbits_ux", "splithex", "splithex_ux",
    "splitbits_tuple", "splitbits_tuple_ux", "splithex_tuple", "splithex_tuple_ux",
    "onefield", "onefield_ux", "onehexfield", "onehexfield_ux",
    "combinebits", "combinehex",
    "replacebits", "replacehex",
    "splitbits_then_combine", "splithex_then_combine",
]
