"""Local pytest configuration shared by every test module."""

from _pytest.config import Config
from _pytest.config.argparsing import Parser

from bridged_evm.trace import log_evm_trace, set_evm_trace


def pytest_addoption(parser: Parser) -> None:
    """
    Accept --evm-trace option in pytest.
    """
    parser.addoption(
        "--evm-trace",
        dest="vmtrace",
        default=False,
        action="store_const",
        const=True,
        help="Log every executed opcode at DEBUG level",
    )


def pytest_configure(config: Config) -> None:
    """
    Configure the tracer and log levels to output evm trace.
    """
    if config.getoption("vmtrace"):
        set_evm_trace(log_evm_trace)
