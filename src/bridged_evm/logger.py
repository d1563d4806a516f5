"""
Custom Logging Module
^^^^^^^^^^^^^^^^^^^^^

Provides a setup_logger function to configure the `bridged_evm` loggers
using the packaged `logger.cfg`.
"""

import configparser
import logging
import logging.config
import os


def setup_logger(name: str, level: str = "") -> logging.Logger:
    """
    Set up a logger with the provided name using the 'logger.cfg' file.

    `level`, when given, overrides the level of the `bridged_evm` logger.
    """
    config = configparser.ConfigParser()
    config.read(
        os.path.join(os.path.dirname(os.path.abspath(__file__)), "logger.cfg")
    )
    if level:
        config.set("logger_bridged_evm", "level", level.upper())
    logging.config.fileConfig(config, disable_existing_loggers=False)

    logger = logging.getLogger(name)

    return logger
