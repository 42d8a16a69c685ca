import jschon
import pprint
import warnings
from abc import abstractmethod, ABCMeta

from ..core import TemplateLayout


__all__ = ["InvalidSchema", "InvalidAnnotation", "Annotation", "TemplateAnnotation"]


class InvalidSchema(Exception):
    """The :data:`~Annotation.schema` of an :class:`Annotation` subclass is not valid."""


class InvalidAnnotation(Exception):
    """A JSON representation does not conform to the schema of its :class:`Annotation`."""


def _format_errors(result):
    return pprint.pformat(result.output("basic")["errors"], sort_dicts=False)


class Annotation(metaclass=ABCMeta):
    """Metadata describing a compiled object, in a JSON form that other tools can consume.

    Subclasses define :data:`schema`, a `JSON Schema`_ (draft 2020-12) document with an
    ``"$id"`` keyword at its root, which is checked when the subclass is defined.
    """
    schema = {}

    @classmethod
    def _evaluate(cls, instance=None):
        """Check :data:`schema` itself, or ``instance`` against it if one is given."""
        # Ignore a deprecation warning from jschon's rfc3986 dependency.
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=DeprecationWarning)
            schema = jschon.JSONSchema(cls.schema, catalog=jschon.create_catalog("2020-12"))
            if instance is None:
                return schema.validate()
            return schema.evaluate(jschon.JSON(instance))

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not isinstance(cls.schema, dict):
            raise TypeError(f"Annotation schema must be a dict, not {cls.schema!r}")
        if "$id" not in cls.schema:
            raise InvalidSchema(f"'$id' keyword is missing from Annotation schema: {cls.schema}")
        try:
            result = cls._evaluate()
        except jschon.JSONSchemaError as e:
            raise InvalidSchema(e) from e
        if not result.valid:
            raise InvalidSchema(f"Invalid Annotation schema:\n{_format_errors(result)}")

    @property
    @abstractmethod
    def origin(self):
        """Object described by this annotation."""

    @abstractmethod
    def as_json(self):
        """JSON representation conforming to :data:`schema`, in Python primitive types."""

    @classmethod
    def validate(cls, instance):
        """Raise :exc:`InvalidAnnotation` if ``instance`` does not conform to :data:`schema`."""
        result = cls._evaluate(instance)
        if not result.valid:
            raise InvalidAnnotation(f"Invalid instance:\n{_format_errors(result)}")

    def __repr__(self):
        return f"<{type(self).__module__}.{type(self).__qualname__} for {self.origin!r}>"


class TemplateAnnotation(Annotation):
    """Annotation describing the layout of a template.

    Masks and literal values are represented as integers whose bit 0 is the least significant
    bit of the template; field positions count from the most significant bit, in the order in
    which the field value is reconstructed.
    """
    schema = {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "$id": "urn:splitbits:schema:0.1:template-layout",
        "type": "object",
        "properties": {
            "width": {
                "enum": [8, 16, 32, 64, 128],
            },
            "base": {
                "enum": ["binary", "hexadecimal"],
            },
            "fields": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {
                            "type": "string",
                            "pattern": "^[A-Za-z]$",
                        },
                        "width": {
                            "type": "integer",
                            "minimum": 1,
                        },
                        "positions": {
                            "type": "array",
                            "items": {
                                "type": "integer",
                                "minimum": 0,
                            },
                            "minItems": 1,
                            "uniqueItems": True,
                        },
                    },
                    "additionalProperties": False,
                    "required": [
                        "name",
                        "width",
                        "positions",
                    ],
                },
            },
            "literal": {
                "type": "object",
                "properties": {
                    "mask": {
                        "type": "integer",
                        "minimum": 0,
                    },
                    "value": {
                        "type": "integer",
                        "minimum": 0,
                    },
                },
                "additionalProperties": False,
                "required": [
                    "mask",
                    "value",
                ],
            },
            "placeholder_mask": {
                "type": "integer",
                "minimum": 0,
            },
        },
        "additionalProperties": False,
        "required": [
            "width",
            "base",
            "fields",
            "literal",
            "placeholder_mask",
        ],
    }

    def __init__(self, layout):
        if not isinstance(layout, TemplateLayout):
            raise TypeError(f"Layout must be a TemplateLayout, not {layout!r}")
        self._layout = layout

    @property
    def origin(self):
        return self._layout

    def as_json(self):
        instance = {
            "width": self._layout.width,
            "base": self._layout.template.base.name.lower(),
            "fields": [
                {
                    "name": name,
                    "width": field.width,
                    "positions": list(field.positions),
                }
                for name, field in self._layout.items()
            ],
            "literal": {
                "mask": self._layout.literal_mask,
                "value": self._layout.literal_value,
            },
            "placeholder_mask": self._layout.placeholder_mask,
        }
        # Ensure our `as_json()` implementation produces JSON that conforms to the schema.
        self.validate(instance)
        return instance
