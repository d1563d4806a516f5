"""
Ownership and pause guards of the administrative entrypoints.
"""

from dataclasses import dataclass

from .exceptions import OwnershipError, PausedError
from .fork_types import BackendId
from .utils.ensure import ensure


@dataclass(frozen=True)
class AccessControl:
    """
    Who may administer the kernel, and whether it is paused.
    """

    owner: BackendId
    paused: bool = False


def require_owner(access: AccessControl, caller: BackendId) -> None:
    """
    Raise `OwnershipError` unless `caller` owns the kernel.
    """
    ensure(caller == access.owner, OwnershipError)


def require_unpaused(access: AccessControl) -> None:
    """
    Raise `PausedError` while the kernel is paused.
    """
    ensure(not access.paused, PausedError)
