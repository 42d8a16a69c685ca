import functools

from .tracer import get_caller_frame
from .core import Base, Precision, Shape, Template, Overflow
from .engine import Extractor, Combiner, Replacer, SplitCombiner
from .engine.core import _select_engine


__all__ = [
    "splitbits", "splitbits_ux", "splithex", "splithex_ux",
    "splitbits_tuple", "splitbits_tuple_ux", "splithex_tuple", "splithex_tuple_ux",
    "onefield", "onefield_ux", "onehexfield", "onehexfield_ux",
    "combinebits", "combinehex",
    "replacebits", "replacehex",
    "splitbits_then_combine", "splithex_then_combine",
]


# Operations are compiled on first use and reused afterwards. The `src_loc_at` of every operation
# skips the cached constructor, the private helper, and the public function, so that source
# locations point at user code.
_USER_SRC_LOC_AT = 3


def _template_key(template, base):
    # Templates with equal cells compare equal; key the cache on the text as written.
    if isinstance(template, Template):
        return Template.cast(template, base).text
    if not isinstance(template, str):
        raise TypeError(f"Template must be a string, not {template!r}")
    return template


@functools.lru_cache(maxsize=512)
def _extractor(template, base, precision, minimum, named, engine):
    return Extractor(template, base=base, precision=precision, min=minimum, named=named,
                     engine=engine, src_loc_at=_USER_SRC_LOC_AT)


@functools.lru_cache(maxsize=512)
def _combiner(template, base, overflow, engine):
    return Combiner(template, base=base, overflow=overflow, engine=engine,
                    src_loc_at=_USER_SRC_LOC_AT)


@functools.lru_cache(maxsize=512)
def _replacer(template, base, overflow, engine):
    return Replacer(template, base=base, overflow=overflow, engine=engine,
                    src_loc_at=_USER_SRC_LOC_AT)


@functools.lru_cache(maxsize=512)
def _split_combiner(inputs, output, base, overflow, engine):
    return SplitCombiner(inputs, output, base=base, overflow=overflow, engine=engine,
                         src_loc_at=_USER_SRC_LOC_AT)


def _split(value, template, base, precision, min, *, named):
    template = _template_key(template, base)
    minimum = Shape.cast_minimum(min, precision)
    extractor = _extractor(template, base, precision, minimum, named, _select_engine(None))
    return extractor(value)


def _one(value, template, base, precision, min):
    template = _template_key(template, base)
    minimum = Shape.cast_minimum(min, precision)
    extractor = _extractor(template, base, precision, minimum, False, _select_engine(None))
    if len(extractor.names) != 1:
        raise TypeError(f"Template {extractor.template.text!r} must have exactly one field, "
                        f"not {len(extractor.names)}")
    return extractor(value)[0]


def splitbits(value, template, *, min=None):
    """Extract the fields of a binary template from ``value``.

    Every field is returned as an attribute of a named tuple, in order of first occurrence.
    A field 1 bit wide is a :class:`bool`; a wider field is an :class:`int` whose shape is the
    narrowest of ``u8``, ``u16``, ``u32``, ``u64`` and ``u128`` that can hold it, but not
    narrower than ``min``.

    .. code::

        >>> splitbits(0b1101_1101, "aaab bccc")
        Fields(a=6, b=3, c=5)
    """
    return _split(value, template, Base.BINARY, Precision.STANDARD, min, named=True)


def splitbits_ux(value, template, *, min=None):
    """Like :func:`splitbits`, but the shape of every field is exactly as wide as the field."""
    return _split(value, template, Base.BINARY, Precision.UX, min, named=True)


def splithex(value, template, *, min=None):
    """Like :func:`splitbits`, but every template character stands for a hexadecimal digit."""
    return _split(value, template, Base.HEXADECIMAL, Precision.STANDARD, min, named=True)


def splithex_ux(value, template, *, min=None):
    return _split(value, template, Base.HEXADECIMAL, Precision.UX, min, named=True)


def splitbits_tuple(value, template, *, min=None):
    """Like :func:`splitbits`, but the fields are returned as a plain :class:`tuple`."""
    return _split(value, template, Base.BINARY, Precision.STANDARD, min, named=False)


def splitbits_tuple_ux(value, template, *, min=None):
    return _split(value, template, Base.BINARY, Precision.UX, min, named=False)


def splithex_tuple(value, template, *, min=None):
    return _split(value, template, Base.HEXADECIMAL, Precision.STANDARD, min, named=False)


def splithex_tuple_ux(value, template, *, min=None):
    return _split(value, template, Base.HEXADECIMAL, Precision.UX, min, named=False)


def onefield(value, template, *, min=None):
    """Extract the only field of a binary template from ``value``.

    Raises
    ------
    TypeError
        If the template does not have exactly one field.
    """
    return _one(value, template, Base.BINARY, Precision.STANDARD, min)


def onefield_ux(value, template, *, min=None):
    return _one(value, template, Base.BINARY, Precision.UX, min)


def onehexfield(value, template, *, min=None):
    return _one(value, template, Base.HEXADECIMAL, Precision.STANDARD, min)


def onehexfield_ux(value, template, *, min=None):
    return _one(value, template, Base.HEXADECIMAL, Precision.UX, min)


def _combine(template, base, overflow, values, fields):
    template = _template_key(template, base)
    combiner = _combiner(template, base, Overflow.cast(overflow), _select_engine(None))
    scope = get_caller_frame(1)
    try:
        return combiner(*combiner.bind(values, fields, scope))
    finally:
        del scope


def combinebits(template, *values, overflow=Overflow.TRUNCATE, **fields):
    """Assemble an integer from field values according to a binary template.

    Field values are taken from ``values`` in order of first occurrence of the fields, then from
    ``fields`` by field letter, and finally from the caller's variables named after the field
    letters. Literal bits of the template are copied to the result. Placeholders are not allowed.

    A value that does not fit in its field is handled according to ``overflow``.

    .. code::

        >>> b, m, e = 0b1010_1010, 0b1111, 0b0000
        >>> bin(combinebits("bbbb bbbb mmmm eeee"))
        '0b1010101011110000'
    """
    return _combine(template, Base.BINARY, overflow, values, fields)


def combinehex(template, *values, overflow=Overflow.TRUNCATE, **fields):
    """Like :func:`combinebits`, but every template character stands for a hexadecimal digit."""
    return _combine(template, Base.HEXADECIMAL, overflow, values, fields)


def _replace(value, template, base, overflow, values, fields):
    template = _template_key(template, base)
    replacer = _replacer(template, base, Overflow.cast(overflow), _select_engine(None))
    scope = get_caller_frame(1)
    try:
        return replacer(value, *replacer.bind(values, fields, scope))
    finally:
        del scope


def replacebits(value, template, *values, overflow=Overflow.TRUNCATE, **fields):
    """Overwrite some bits of ``value`` according to a binary template.

    Placeholder positions keep the bits of ``value``; field and literal positions are overwritten
    as in :func:`combinebits`.

    .. code::

        >>> bin(replacebits(0b1000_0001, "aaa. .bb.", a=0b101, b=0b01))
        '0b10100011'
    """
    return _replace(value, template, Base.BINARY, overflow, values, fields)


def replacehex(value, template, *values, overflow=Overflow.TRUNCATE, **fields):
    return _replace(value, template, Base.HEXADECIMAL, overflow, values, fields)


def _split_then_combine(name, args, base, overflow):
    if len(args) < 3 or len(args) % 2 != 1:
        raise TypeError(f"{name}() takes pairs of a value and an input template followed by "
                        f"an output template, but {len(args)} arguments were provided")
    values = args[0:-1:2]
    inputs = tuple(_template_key(template, base) for template in args[1:-1:2])
    output = _template_key(args[-1], base)
    combiner = _split_combiner(inputs, output, base, Overflow.cast(overflow),
                               _select_engine(None))
    return combiner(*values)


def splitbits_then_combine(*args, overflow=Overflow.TRUNCATE):
    """Extract fields from several integers and assemble them into one.

    The arguments are any number of pairs of an integer and a binary input template, followed by
    a binary output template. Every field of the output template must come from exactly one
    input template.

    .. code::

        >>> bin(splitbits_then_combine(0b1001_1010, "aaab bbbb", "bbbb baaa"))
        '0b11010100'
    """
    return _split_then_combine("splitbits_then_combine", args, Base.BINARY, overflow)


def splithex_then_combine(*args, overflow=Overflow.TRUNCATE):
    return _split_then_combine("splithex_then_combine", args, Base.HEXADECIMAL, overflow)
