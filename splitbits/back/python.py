import keyword
import textwrap
from collections.abc import Mapping

import jinja2

from .. import __version__
from ..engine import Operation, Extractor
from ..engine._pycode import _PythonEmitter


__all__ = ["convert"]


# Names defined at the top level of every generated module, or used by the generated code.
_RESERVED = ("collections", "FieldOverflowError", "overflow", "min")


_MODULE_TEMPLATE = """
    # Generated by splitbits {{version}}
    {% if name %}
    # {{name}}
    {% endif %}
    {% if records %}

    import collections
    {% endif %}


    class FieldOverflowError(OverflowError):
        def __init__(self, name, value, width):
            super().__init__(f"Field {name!r} value {value:#b} does not fit in its {width}-bit "
                             f"slot (maximum {(1 << width) - 1:#b})")
            self.name  = name
            self.value = value
            self.width = width


    def overflow(name, value, width):
        raise FieldOverflowError(name, value, width)
    {% for record, names in records %}


    {{record}} = collections.namedtuple("Fields", {{names}})
    {% endfor %}
    {% for function in functions %}


    {{function}}
    {% endfor %}
"""


def _check_name(function_name, defined):
    if not isinstance(function_name, str):
        raise TypeError(f"Function name must be a string, not {function_name!r}")
    if not function_name.isidentifier() or keyword.iskeyword(function_name):
        raise TypeError(f"Function name must be a valid Python identifier, "
                        f"not {function_name!r}")
    if function_name in _RESERVED or function_name in defined:
        raise TypeError(f"Function name {function_name!r} is already used in the generated "
                        f"module")


def convert(operations, *, name=None):
    """Render compiled operations as a standalone Python module.

    The module defines one function per item of ``operations``, and does not depend on
    this package. Named extractions return named tuples defined in the module, and overflows
    with the ``PANIC`` policy raise the ``FieldOverflowError`` exception defined in the module.

    Arguments
    ---------
    operations : mapping of :class:`str` to :class:`.Operation`
        Operations to render, keyed by the name of the function they are rendered as.
    name : :class:`str` or ``None``
        Description of the module, emitted as a comment at its top.

    Returns
    -------
    :class:`str`
        Python source code.

    Raises
    ------
    TypeError
        If a function name is not a valid identifier, or collides with another name defined in
        the module.
    """
    if not isinstance(operations, Mapping):
        raise TypeError(f"Operations must be provided as a mapping, not {operations!r}")

    defined = set()
    records = []
    functions = []
    for function_name, operation in operations.items():
        _check_name(function_name, defined)
        if not isinstance(operation, Operation):
            raise TypeError(f"Object {operation!r} is not a compiled operation")
        defined.add(function_name)

        emitter = _PythonEmitter()
        if isinstance(operation, Extractor) and operation.record is not None:
            record = f"{function_name}_Fields"
            _check_name(record, defined)
            defined.add(record)
            records.append((record, repr(operation.names)))
            operation.emit(emitter, function_name, record=record)
        else:
            operation.emit(emitter, function_name)
        functions.append(emitter.flush().rstrip())

    source   = textwrap.dedent(_MODULE_TEMPLATE).strip()
    compiled = jinja2.Template(source,
        trim_blocks=True, lstrip_blocks=True, undefined=jinja2.StrictUndefined)
    return compiled.render({
        "version": __version__,
        "name": name,
        "records": records,
        "functions": functions,
    }).rstrip() + "\n"
