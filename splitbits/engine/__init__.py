from .core import EngineError, Operation, Extractor, Combiner, Replacer, SplitCombiner
from ._base import Slot


__all__ = ["EngineError", "Operation", "Extractor", "Combiner", "Replacer", "SplitCombiner",
           "Slot"]
