import os
import unittest
from unittest import mock


__all__ = ["SplitbitsTestCase"]


class SplitbitsTestCase(unittest.TestCase):
    maxDiff = None

    ENGINES = ("compiled", "interpreted")

    def engines(self):
        # Select each engine in turn for the operation front end. The environment is restored
        # when the test finishes, even if the loop body fails.
        patcher = mock.patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        for engine in self.ENGINES:
            os.environ["SPLITBITS_USE_ENGINE"] = engine
            yield engine

    def assertOperation(self, make, cases):
        """Check that operations built by ``make(engine)`` map every input to its output.

        ``cases`` is a list of ``(args, expected)`` pairs, where ``args`` is a tuple of
        positional arguments of the operation.
        """
        for engine in self.ENGINES:
            operation = make(engine)
            for args, expected in cases:
                with self.subTest(engine=engine, args=args):
                    self.assertEqual(operation(*args), expected)
