import os
import tempfile
from contextlib import contextmanager

from .._utils import to_hex
from ..core import Overflow, FieldOverflowError
from ..utils import mask


__all__ = ["emit_extract", "emit_combine", "emit_replace", "emit_split_combine",
           "compile_function"]


class _PythonEmitter:
    def __init__(self):
        self._buffer = []
        self._suffix = 0
        self._level  = 0

    def append(self, code):
        self._buffer.append("    " * self._level)
        self._buffer.append(code)
        self._buffer.append("\n")

    @contextmanager
    def indent(self):
        self._level += 1
        yield
        self._level -= 1

    def flush(self):
        code = "".join(self._buffer)
        self._buffer.clear()
        return code

    def gen_var(self, prefix):
        name = f"{prefix}_{self._suffix}"
        self._suffix += 1
        return name

    def def_var(self, prefix, value):
        name = self.gen_var(prefix)
        self.append(f"{name} = {value}")
        return name


def _overflow(name, value, width):
    raise FieldOverflowError(name, value, width)


helpers = {
    "overflow": _overflow,
}


def _tuple(items):
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


class _Compiler:
    def __init__(self, emitter, width):
        self.emitter = emitter
        self.width   = width

    def const(self, value):
        return to_hex(value, self.width)

    def extract(self, field, source, shape=None):
        if shape is not None and shape.boolean:
            return f"({source} & {self.const(field.mask)}) != 0"
        terms = []
        for segment in field.segments:
            term = f"({source} & {self.const(segment.mask)})"
            if segment.shift > 0:
                term = f"({term} >> {segment.shift})"
            elif segment.shift < 0:
                term = f"({term} << {-segment.shift})"
            terms.append(term)
        return " | ".join(terms)

    def adapt(self, slot, source):
        if not slot.checked:
            return source
        limit = to_hex(slot.field.max, slot.width)
        if slot.overflow is Overflow.PANIC:
            self.emitter.append(f"if {source} > {limit}:")
            with self.emitter.indent():
                self.emitter.append(f"overflow({slot.name!r}, {source}, {slot.width})")
        elif slot.overflow is Overflow.SATURATE:
            return self.emitter.def_var("saturated", f"min({source}, {limit})")
        # Truncation is folded into the segment masks.
        return source

    def deposit(self, slot, source):
        terms = []
        for segment in slot.field.segments:
            if segment.shift > 0:
                term = f"({source} << {segment.shift})"
            elif segment.shift < 0:
                term = f"({source} >> {-segment.shift})"
            else:
                term = source
            terms.append(f"({term} & {self.const(segment.mask)})")
        # Excess bits above the template are cut off by the final mask.
        if slot.spills and slot.field.spill_offset < self.width:
            terms.append(f"(({source} >> {slot.width}) << {slot.field.spill_offset})")
        return terms

    def combine(self, layout, slots, sources, preserved=None):
        adapted = [self.adapt(slot, source) for slot, source in zip(slots, sources)]
        terms = []
        if preserved is not None and layout.placeholder_mask:
            terms.append(f"({preserved} & {self.const(layout.placeholder_mask)})")
        for slot, source in zip(slots, adapted):
            terms.extend(self.deposit(slot, source))
        if layout.literal_value:
            terms.append(self.const(layout.literal_value))
        code = " | ".join(terms) or "0"
        if any(slot.spills for slot in slots):
            code = f"({code}) & {self.const(mask(layout.width))}"
        return code


def emit_extract(emitter, layout, shapes, *, name="run", record=None):
    emitter.append(f"def {name}(value):")
    with emitter.indent():
        compiler = _Compiler(emitter, layout.width)
        values = [compiler.extract(field, "value", shapes[field_name])
                  for field_name, field in layout.items()]
        if record is None:
            emitter.append(f"return {_tuple(values)}")
        else:
            emitter.append(f"return {record}({', '.join(values)})")


def emit_combine(emitter, layout, slots, *, name="run"):
    params = [slot.name for slot in slots]
    emitter.append(f"def {name}({', '.join(params)}):")
    with emitter.indent():
        compiler = _Compiler(emitter, layout.width)
        emitter.append(f"return {compiler.combine(layout, slots, params)}")


def emit_replace(emitter, layout, slots, *, name="run"):
    params = [slot.name for slot in slots]
    emitter.append(f"def {name}({', '.join(['target', *params])}):")
    with emitter.indent():
        compiler = _Compiler(emitter, layout.width)
        emitter.append(f"return {compiler.combine(layout, slots, params, preserved='target')}")


def emit_split_combine(emitter, inputs, sources, output, slots, *, name="run"):
    params = [f"input_{index}" for index in range(len(inputs))]
    emitter.append(f"def {name}({', '.join(params)}):")
    with emitter.indent():
        for slot in slots:
            index, field = sources[slot.name]
            compiler = _Compiler(emitter, inputs[index].width)
            emitter.append(f"{slot.name} = {compiler.extract(field, params[index])}")
        compiler = _Compiler(emitter, output.width)
        names = [slot.name for slot in slots]
        emitter.append(f"return {compiler.combine(output, slots, names)}")


def compile_function(code, name="run"):
    # There shouldn't be any exceptions raised by the generated code other than overflow errors,
    # but if there are (almost certainly due to a bug in the code generator), use this environment
    # variable to make backtraces useful.
    if os.getenv("SPLITBITS_dump"):
        with tempfile.NamedTemporaryFile("w", prefix="splitbits_", suffix=".py",
                                         delete=False) as file:
            file.write(code)
        filename = file.name
    else:
        filename = "<splitbits>"

    exec_locals = {**helpers}
    exec(compile(code, filename, "exec"), exec_locals)
    return exec_locals[name]
