"""Golden-file regression testing that fails at the first divergent byte."""

from failfast_golden.compare.stream import CompareStream, GoldenMismatch
from failfast_golden.snapshot.silver import new_silver

__all__ = ["CompareStream", "GoldenMismatch", "new_silver"]
