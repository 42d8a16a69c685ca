import operator

from ..core import adapt
from ..utils import mask


__all__ = ["eval_extract", "eval_slot", "eval_combine", "eval_replace", "eval_split_combine"]


def eval_extract(layout, value, shapes=None):
    value = operator.index(value)
    result = []
    for name, field in layout.items():
        bits = 0
        for segment in field.segments:
            bits |= segment.extract(value)
        if shapes is not None:
            bits = shapes[name].from_bits(bits)
        result.append(bits)
    return tuple(result)


def eval_slot(slot, value):
    value = operator.index(value)
    if slot.checked:
        value = adapt(value, slot.width, slot.overflow, name=slot.name)
    bits = 0
    for segment in slot.field.segments:
        bits |= segment.deposit(value)
    if slot.spills:
        bits |= slot.field.spill(value)
    return bits


def eval_combine(layout, slots, values):
    # Adapt every value first, so that a failing one leaves no partial result behind.
    deposits = [eval_slot(slot, value) for slot, value in zip(slots, values)]
    result = layout.literal_value
    for bits in deposits:
        result |= bits
    return result & mask(layout.width)


def eval_replace(layout, slots, target, values):
    preserved = operator.index(target) & layout.placeholder_mask
    return preserved | eval_combine(layout, slots, values)


def eval_split_combine(inputs, output, slots, values):
    fields = {}
    for layout, value in zip(inputs, values):
        fields.update(zip(layout, eval_extract(layout, value)))
    return eval_combine(output, slots, [fields[slot.name] for slot in slots])
