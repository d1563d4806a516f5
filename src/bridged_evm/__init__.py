"""
EVM compatible execution engine running on a foreign account backend.

Every EVM address is bridged to a backend account identifier through
:mod:`bridged_evm.directory`, state is read from and flushed to a host
provided :class:`bridged_evm.store.AccountStore`, and transactions are
executed by the Cancun-level interpreter in :mod:`bridged_evm.vm`.
"""

__version__ = "0.1.0"
