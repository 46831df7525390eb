"""
Exceptions and warnings raised by the flux integrators.
"""


class AxionFluxError(Exception):
    """Base class for contract violations detected by the integrators."""


class OutOfRangeError(AxionFluxError, ValueError):
    """Requested energy window exceeds the domain of a tabulated spectrum."""


class DegenerateSpectrumError(AxionFluxError, ValueError):
    """A spectrum cannot be turned into a normalized cumulative distribution."""


class ConvergenceWarning(UserWarning):
    """A quadrature did not reach its tolerance within the subdivision limit.

    The integrators still return the best estimate together with the
    reported error bound.
    """


__all__ = [
    'AxionFluxError',
    'OutOfRangeError',
    'DegenerateSpectrumError',
    'ConvergenceWarning',
]
