"""
Configuration management for CFGAAP.

Handles global configuration settings such as the reporting currency and
how contra-account signs and zero-amount lines are treated.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CFGAAPConfig:
    """
    Global configuration for CFGAAP derivation and reporting.
    
    There is no numeric tolerance: the cash reconciliation is an
    exact decimal comparison.
    
    Attributes:
        default_currency: The currency code carried on derived statements.
                         Default: "USD".
        include_zero_lines: If True, classified lines with a zero amount are
                           kept in the statement. Default: False.
        strict_contra_sign: If True, a negative amount entered for a contra
                           account (e.g. Accumulated Depreciation) is rejected
                           instead of being read as its magnitude.
                           Default: False.
    """
    
    default_currency: str = "USD"
    include_zero_lines: bool = False
    strict_contra_sign: bool = False


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.
    
    Args:
        verbose: If True, sets log level to DEBUG. Otherwise, INFO.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    
    if verbose:
        logger.debug("Verbose logging enabled")


# Global default configuration instance
default_config = CFGAAPConfig()
