"""
Operand stack of a call frame.

Words are kept in a plain list with the top of the stack at the end.
"""

from typing import List

from ethereum_types.numeric import U256

from .exceptions import StackOverflowError, StackUnderflowError

STACK_LIMIT = 1024


def pop(stack: List[U256]) -> U256:
    """
    Remove and return the top word.
    """
    if not stack:
        raise StackUnderflowError
    return stack.pop()


def push(stack: List[U256], value: U256) -> None:
    """
    Put `value` on top of the stack.
    """
    if len(stack) >= STACK_LIMIT:
        raise StackOverflowError
    stack.append(value)


def dup(stack: List[U256], position: int) -> None:
    """
    Push a copy of the word `position` places from the top (1 is the top).
    """
    if len(stack) < position:
        raise StackUnderflowError
    push(stack, stack[-position])


def swap(stack: List[U256], position: int) -> None:
    """
    Exchange the top word with the word `position` places below it.
    """
    if len(stack) <= position:
        raise StackUnderflowError
    stack[-1], stack[-1 - position] = stack[-1 - position], stack[-1]
