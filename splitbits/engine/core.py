from abc import ABCMeta, abstractmethod
from collections.abc import Mapping
import collections
import os
import warnings

from .._utils import get_linter_option
from ..tracer import get_src_loc
from ..core import *
from ._base import Slot
from ._pyeval import eval_extract, eval_combine, eval_replace, eval_split_combine
from ._pycode import _PythonEmitter, compile_function
from ._pycode import emit_extract, emit_combine, emit_replace, emit_split_combine


__all__ = ["EngineError", "Operation", "Extractor", "Combiner", "Replacer", "SplitCombiner"]


class EngineError(Exception):
    pass


_ENGINES = ("compiled", "interpreted")


def _select_engine(engine):
    if engine is None:
        engine = os.environ.get("SPLITBITS_USE_ENGINE", "compiled")
        if engine not in _ENGINES:
            raise EngineError("The SPLITBITS_USE_ENGINE environment variable contains "
                              "an unrecognized engine {!r}"
                              .format(engine))
    elif engine not in _ENGINES:
        raise EngineError(f"Engine must be 'compiled' or 'interpreted', not {engine!r}")
    return engine


class Operation(metaclass=ABCMeta):
    """A template operation, compiled once and applied to any number of values.

    Constructing an operation parses and checks its templates, builds their layouts, and
    prepares the executor selected by ``engine``:

    ``"compiled"``
        Python source is generated for the operation and compiled to a function.
    ``"interpreted"``
        The layouts are executed directly.

    Both executors compute the same results. If ``engine`` is ``None``, the
    ``SPLITBITS_USE_ENGINE`` environment variable selects one, defaulting to ``"compiled"``.
    """
    def __init__(self, *, engine=None, src_loc_at=0):
        self._engine  = _select_engine(engine)
        self.src_loc  = get_src_loc(1 + src_loc_at)
        self._function = None

    @property
    def engine(self):
        return self._engine

    @abstractmethod
    def emit(self, emitter, name):
        """Emit the Python definition of this operation as a function called ``name``."""

    @abstractmethod
    def _interpret(self, *args):
        pass # :nocov:

    @property
    def source(self):
        """Python source of the function this operation compiles to."""
        emitter = _PythonEmitter()
        self.emit(emitter, "run")
        return emitter.flush()

    def _prepare(self):
        if self._engine == "compiled":
            self._function = compile_function(self.source)
        else:
            self._function = self._interpret


class Extractor(Operation):
    """Extracts the fields of a template from an integer.

    Parameters
    ----------
    template : :class:`str` or :class:`.Template`
        Extraction template. Literals are not allowed.
    base : :class:`.Base`
        Base of the template digits.
    precision : :class:`.Precision`
        Rule for choosing the shapes of the extracted fields.
    min : shape-like or ``None``
        Minimum shape of every extracted field.
    named : bool
        If true, the fields are returned as a named tuple whose attributes are the field letters;
        otherwise as a plain tuple. In both cases the fields are in order of first occurrence.

    Raises
    ------
    :exc:`.InvalidCellForContext`
        If the template contains literals.
    """
    def __init__(self, template, *, base=Base.BINARY, precision=Precision.STANDARD, min=None,
                 named=True, engine=None, src_loc_at=0):
        super().__init__(engine=engine, src_loc_at=src_loc_at)
        self._template  = Template.cast(template, base, src_loc_at=1 + src_loc_at)
        self._template.forbid_literals("an extraction template")
        self._layout    = TemplateLayout(self._template)
        self._precision = Precision(precision)
        self._minimum   = Shape.cast_minimum(min, self._precision)
        self._shapes    = self._layout.shapes(self._precision, self._minimum)
        if named:
            self._record = collections.namedtuple("Fields", self._layout.names)
        else:
            self._record = None

        if not self._layout:
            filename, lineno = self.src_loc
            if get_linter_option(filename, FieldlessTemplate.__qualname__, True):
                warnings.warn_explicit(f"Template {self._template.text!r} has no fields; "
                                       f"nothing will be extracted",
                                       FieldlessTemplate, filename, lineno)
        self._prepare()

    @property
    def template(self):
        return self._template

    @property
    def layout(self):
        return self._layout

    @property
    def names(self):
        return self._layout.names

    @property
    def shapes(self):
        return dict(self._shapes)

    @property
    def record(self):
        """Named tuple class of the results, or ``None`` if the operation is not named."""
        return self._record

    def emit(self, emitter, name, *, record=None):
        emit_extract(emitter, self._layout, self._shapes, name=name, record=record)

    def _interpret(self, value):
        return eval_extract(self._layout, value, self._shapes)

    def __call__(self, value):
        result = self._function(value)
        if self._record is not None:
            return self._record._make(result)
        return result


class _Depositing(Operation):
    # Shared argument handling of operations that deposit field values into a template.

    def _make_slots(self, overflow, widths):
        overflow = Overflow.cast(overflow)
        if widths is None:
            widths = {}
        if not isinstance(widths, Mapping):
            raise TypeError(f"Source widths must be provided as a mapping, not {widths!r}")
        for name in widths:
            if name not in self._layout:
                raise TypeError(f"Source width is provided for field {name!r}, which is not "
                                f"a part of template {self._layout.template.text!r}")
        return tuple(Slot(field, overflow, widths.get(name))
                     for name, field in self._layout.items())

    @property
    def template(self):
        return self._layout.template

    @property
    def layout(self):
        return self._layout

    @property
    def names(self):
        return self._layout.names

    @property
    def slots(self):
        return self._slots

    def bind(self, values, fields, scope=None):
        """Arrange field values in field order.

        ``values`` are assigned to fields in order of first occurrence, and ``fields`` maps field
        letters to values. The value of any remaining field is looked up by its letter in
        the local and then the global variables of the frame ``scope``, if provided.

        Raises
        ------
        TypeError
            If there are more values than fields, a keyword names no field, or a field gets
            two values.
        :exc:`.UndefinedFieldError`
            If a field gets no value.
        """
        names = self._layout.names
        if len(values) > len(names):
            raise TypeError(f"Template {self._layout.template.text!r} has {len(names)} fields, "
                            f"but {len(values)} values were provided")
        bound = dict(zip(names, values))
        for name, value in fields.items():
            if name not in self._layout:
                raise TypeError(f"Template {self._layout.template.text!r} has no field "
                                f"named {name!r}")
            if name in bound:
                raise TypeError(f"Field {name!r} was provided both by position and by name")
            bound[name] = value
        for name in names:
            if name in bound:
                continue
            if scope is not None and name in scope.f_locals:
                bound[name] = scope.f_locals[name]
            elif scope is not None and name in scope.f_globals:
                bound[name] = scope.f_globals[name]
            else:
                raise UndefinedFieldError(f"No value was provided for field {name!r}",
                                          self._layout.template.text, self._layout.origin(name))
        return [bound[name] for name in names]


class Combiner(_Depositing):
    """Assembles an integer from field values.

    Parameters
    ----------
    template : :class:`str` or :class:`.Template`
        Combination template. Placeholders are not allowed.
    base : :class:`.Base`
        Base of the template digits.
    overflow : :class:`.Overflow` or :class:`str`
        Policy for values that do not fit in their fields.
    widths : mapping of :class:`str` to :class:`int`
        Declared widths of the values of some fields. Fields whose declared width fits need no
        overflow handling.

    Raises
    ------
    :exc:`.InvalidCellForContext`
        If the template contains placeholders.
    """
    def __init__(self, template, *, base=Base.BINARY, overflow=Overflow.TRUNCATE, widths=None,
                 engine=None, src_loc_at=0):
        super().__init__(engine=engine, src_loc_at=src_loc_at)
        template = Template.cast(template, base, src_loc_at=1 + src_loc_at)
        template.forbid_placeholders("a combination template", "; use literals instead")
        self._layout = TemplateLayout(template)
        self._slots  = self._make_slots(overflow, widths)
        self._prepare()

    def emit(self, emitter, name):
        emit_combine(emitter, self._layout, self._slots, name=name)

    def _interpret(self, *values):
        return eval_combine(self._layout, self._slots, values)

    def __call__(self, *values, **fields):
        return self._function(*self.bind(values, fields))


class Replacer(_Depositing):
    """Overwrites some bits of an integer with field values and literals.

    Placeholder positions of the template keep the bits of the integer being replaced into;
    field and literal positions are overwritten. The parameters are the same as those of
    :class:`Combiner`.
    """
    def __init__(self, template, *, base=Base.BINARY, overflow=Overflow.TRUNCATE, widths=None,
                 engine=None, src_loc_at=0):
        super().__init__(engine=engine, src_loc_at=src_loc_at)
        self._layout = TemplateLayout(Template.cast(template, base, src_loc_at=1 + src_loc_at))
        self._slots  = self._make_slots(overflow, widths)
        self._prepare()

    def emit(self, emitter, name):
        emit_replace(emitter, self._layout, self._slots, name=name)

    def _interpret(self, target, *values):
        return eval_replace(self._layout, self._slots, target, values)

    def __call__(self, target, *values, **fields):
        return self._function(target, *self.bind(values, fields))


class SplitCombiner(Operation):
    """Extracts fields from several integers and assembles them into one.

    Parameters
    ----------
    inputs : sequence of :class:`str` or :class:`.Template`
        Input templates, one per integer. Literals are not allowed. Every field letter may be
        produced by only one input template.
    output : :class:`str` or :class:`.Template`
        Output template. Placeholders are not allowed. Every field letter must be produced by
        an input template.
    base : :class:`.Base`
        Base of the digits of every template.
    overflow : :class:`.Overflow` or :class:`str`
        Policy for fields that are wider in their input template than in the output template.

    Raises
    ------
    :exc:`.InvalidCellForContext`
        If an input template contains literals, or the output template contains placeholders.
    :exc:`.DuplicateFieldError`
        If a field letter is produced by more than one input template.
    :exc:`.UndefinedFieldError`
        If a field letter of the output template is not produced by any input template.
    """
    def __init__(self, inputs, output, *, base=Base.BINARY, overflow=Overflow.TRUNCATE,
                 engine=None, src_loc_at=0):
        super().__init__(engine=engine, src_loc_at=src_loc_at)
        if isinstance(inputs, (str, Template)):
            inputs = [inputs]
        self._inputs = []
        for template in inputs:
            template = Template.cast(template, base, src_loc_at=1 + src_loc_at)
            template.forbid_literals("an input template")
            self._inputs.append(TemplateLayout(template))
        if not self._inputs:
            raise TypeError("At least one input template must be provided")

        output = Template.cast(output, base, src_loc_at=1 + src_loc_at)
        output.forbid_placeholders("an output template", "; use literals instead")
        self._output = TemplateLayout(output)

        self._sources = {}
        for index, layout in enumerate(self._inputs):
            for name, field in layout.items():
                if name in self._sources:
                    raise DuplicateFieldError(f"Field {name!r} is produced by input template "
                                              f"#{self._sources[name][0]} and input template "
                                              f"#{index}",
                                              layout.template.text, layout.origin(name))
                self._sources[name] = (index, field)

        overflow = Overflow.cast(overflow)
        slots = []
        for name, field in self._output.items():
            if name not in self._sources:
                raise UndefinedFieldError(f"Field {name!r} is not produced by any input "
                                          f"template", output.text, self._output.origin(name))
            slots.append(Slot(field, overflow, self._sources[name][1].width))
        self._slots = tuple(slots)
        self._prepare()

    @property
    def inputs(self):
        return tuple(self._inputs)

    @property
    def output(self):
        return self._output

    @property
    def slots(self):
        return self._slots

    def emit(self, emitter, name):
        emit_split_combine(emitter, self._inputs, self._sources, self._output, self._slots,
                           name=name)

    def _interpret(self, *values):
        return eval_split_combine(self._inputs, self._output, self._slots, values)

    def __call__(self, *values):
        if len(values) != len(self._inputs):
            raise TypeError(f"Expected {len(self._inputs)} values, one per input template, "
                            f"but {len(values)} were provided")
        return self._function(*values)
