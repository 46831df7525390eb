"""
Utility tools for solar axion flux calculations.

This module provides helper functions and decorators for:
- Performance monitoring (timing decorators)
"""

import logging
from functools import wraps
from time import time

logger = logging.getLogger(__name__)


def timer(func):
    """Decorator to measure and log function execution time.

    Wraps the spectrum producers (calculate_spectral_flux and
    calculate_spectral_flux_solar_disc), whose run time grows with the
    energy grid and the nesting of the quadratures.

    Parameters
    ----------
    func : callable
        The function to be timed

    Returns
    -------
    callable
        Wrapped function that logs its execution time at DEBUG level

    Examples
    --------
    >>> @timer
    ... def slow_function():
    ...     time.sleep(1)
    ...     return "done"
    >>> result = slow_function()  # logs "func: 'slow_function' took: 1.0012 secs"
    """
    @wraps(func)
    def wrapper_timer(*args, **kwargs):
        start_time = time()
        value = func(*args, **kwargs)
        end_time = time()
        run_time = end_time - start_time
        logger.debug("func: %r took: %.4f secs", func.__name__, run_time)
        return value
    return wrapper_timer


__all__ = ['timer']
