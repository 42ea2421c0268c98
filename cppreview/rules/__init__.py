"""Structural analysis rules."""

from cppreview.rules.assignment_in_condition import AssignmentInConditionRule
from cppreview.rules.base import Rule, RuleInfo
from cppreview.rules.buffer_overflow import BufferOverflowRule
from cppreview.rules.integer_overflow import IntegerOverflowRule
from cppreview.rules.loop_copy import LoopCopyRule
from cppreview.rules.memory_leak import MemoryLeakRule
from cppreview.rules.null_pointer import NullPointerRule
from cppreview.rules.smart_pointer import SmartPointerRule
from cppreview.rules.uninitialized_var import UninitializedVarRule
from cppreview.rules.unsafe_c_functions import UNSAFE_FUNCTIONS, UnsafeCFunctionsRule
from cppreview.rules.use_after_free import UseAfterFreeRule

__all__ = [
    "Rule",
    "RuleInfo",
    "AssignmentInConditionRule",
    "BufferOverflowRule",
    "IntegerOverflowRule",
    "LoopCopyRule",
    "MemoryLeakRule",
    "NullPointerRule",
    "SmartPointerRule",
    "UninitializedVarRule",
    "UnsafeCFunctionsRule",
    "UseAfterFreeRule",
    "UNSAFE_FUNCTIONS",
]
