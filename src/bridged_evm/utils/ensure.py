"""
Ensure (Assertion) Utilities
^^^^^^^^^^^^^^^^^^^^^^^^^^^^

.. contents:: Table of Contents
    :backlinks: none
    :local:

Introduction
------------

Raise a given exception when a condition does not hold.
"""

from typing import Callable, Union


def ensure(
    value: bool, exception: Union[Callable[[], BaseException], BaseException]
) -> None:
    """
    Raise `exception` unless `value` is truthy.

    Parameters
    ----------
    value :
        Condition that must hold.

    exception :
        Exception instance, or a callable producing one.
    """
    if value:
        return
    if isinstance(exception, BaseException):
        raise exception
    raise exception()
