"""
Adaptive quadrature shared by all flux integrators.

Every spatial and energy integral in the package goes through the two
wrappers in this module, parameterized by a QuadratureConfig.

Key Functions
-------------
- adaptive_quad: globally adaptive Gauss-Kronrod quadrature (QUADPACK or
  scipy's vectorized implementation), with optional breakpoints
- singular_quad: integrals with an inverse-square-root singularity at the
  lower endpoint, using the algebraic-weight QUADPACK routine (QAWS)

Notes
-----
QUADPACK allocates its subdivision workspace inside each call, so no
scratch state is shared between integrations, including nested ones.
A quadrature that runs out of subdivisions is not an error: the best
estimate and its error bound are returned, ``converged`` is False and a
ConvergenceWarning is issued.
Every valid QuadratureConfig can be handed to scipy: a purely relative
tolerance is raised to MIN_REL_TOL, and the subdivision limit is raised to
what the weighted and breakpoint routines require.
"""

import logging
import warnings
from collections import namedtuple
from dataclasses import dataclass, replace

import numpy as np
from scipy import integrate

from .constants import (
    int_abs_prec, int_rel_prec, int_space_size, int_method_1,
    abs_prec2, rel_prec2, int_method_2,
)
from .errors import ConvergenceWarning

logger = logging.getLogger(__name__)

# "qags": QUADPACK adaptive GK21 with epsilon extrapolation (scipy.integrate.quad)
# "gk21", "gk15": globally adaptive Gauss-Kronrod (scipy.integrate.quad_vec)
QUADRATURE_RULES = ("qags", "gk21", "gk15")

QuadratureResult = namedtuple("QuadratureResult", ["value", "error", "converged", "message"])

# QUADPACK rejects a purely relative tolerance below 50 machine epsilons
MIN_REL_TOL = 50.0 * np.finfo(float).eps

# QAWS needs at least two subintervals
MIN_WEIGHTED_SUBDIVISIONS = 2


@dataclass(frozen=True)
class QuadratureConfig:
    """Tolerances and rule selection for one adaptive quadrature.

    Parameters
    ----------
    abs_tol : float
        Absolute error tolerance (>= 0)
    rel_tol : float
        Relative error tolerance (>= 0); abs_tol and rel_tol may not both be zero
    max_subdivisions : int
        Maximum number of subintervals of the adaptive algorithm
    rule : str
        One of QUADRATURE_RULES
    """
    abs_tol: float = int_abs_prec
    rel_tol: float = int_rel_prec
    max_subdivisions: int = int_space_size
    rule: str = int_method_1

    def __post_init__(self):
        if self.abs_tol < 0 or self.rel_tol < 0:
            raise ValueError(f"Tolerances must be non-negative, got abs_tol={self.abs_tol}, rel_tol={self.rel_tol}")
        if self.abs_tol == 0 and self.rel_tol == 0:
            raise ValueError("abs_tol and rel_tol cannot both be zero")
        if self.max_subdivisions < 1:
            raise ValueError(f"max_subdivisions must be at least 1, got {self.max_subdivisions}")
        if self.rule not in QUADRATURE_RULES:
            raise ValueError(f"Unknown quadrature rule {self.rule!r}, choose from {QUADRATURE_RULES}")

    def scaled(self, factor):
        """Return a copy with both tolerances multiplied by ``factor``."""
        return replace(self, abs_tol=factor * self.abs_tol, rel_tol=factor * self.rel_tol)


def energy_config():
    """Default configuration for integrals over energy."""
    return QuadratureConfig(abs_tol=abs_prec2, rel_tol=rel_prec2,
                            max_subdivisions=int_space_size, rule=int_method_2)


def _tolerances(config):
    """(epsabs, epsrel) for scipy, with epsrel raised to MIN_REL_TOL when epsabs is zero."""
    if config.abs_tol <= 0:
        return config.abs_tol, max(config.rel_tol, MIN_REL_TOL)
    return config.abs_tol, config.rel_tol


def _report(result, a, b):
    if not result.converged:
        logger.debug("Quadrature on [%g, %g] not converged: %s", a, b, result.message)
        warnings.warn(
            f"Quadrature on [{a:g}, {b:g}] did not converge "
            f"(estimate {result.value:.6e} +/- {result.error:.2e}): {result.message}",
            ConvergenceWarning,
            stacklevel=3,
        )
    return result


def adaptive_quad(func, a, b, config, points=None):
    """Integrate ``func`` over ``[a, b]`` with adaptive quadrature.

    Parameters
    ----------
    func : callable
        Integrand f(x) returning a float
    a, b : float
        Integration limits
    config : QuadratureConfig
        Tolerances, subdivision limit and rule
    points : sequence of float, optional
        Breakpoints inside (a, b) where the integrand has known features

    Returns
    -------
    QuadratureResult
        (value, error, converged, message)
    """
    if a == b:
        return QuadratureResult(0.0, 0.0, True, "")
    if points is not None and len(points) == 0:
        points = None

    epsabs, epsrel = _tolerances(config)
    limit = config.max_subdivisions
    if points is not None:
        # QAGP needs more subintervals than breakpoints
        limit = max(limit, len(points) + 1)
    if config.rule == "qags":
        out = integrate.quad(
            func, a, b,
            epsabs=epsabs,
            epsrel=epsrel,
            limit=limit,
            points=points,
            full_output=1,
        )
        # quad appends a message to the output only when QUADPACK reports a problem
        message = out[3] if len(out) > 3 else ""
        result = QuadratureResult(float(out[0]), float(out[1]), len(out) <= 3, message)
    else:
        value, error, info = integrate.quad_vec(
            func, a, b,
            epsabs=epsabs,
            epsrel=epsrel,
            limit=limit,
            points=points,
            quadrature=config.rule,
            full_output=True,
        )
        message = "" if info.success else info.message
        result = QuadratureResult(float(value), float(error), bool(info.success), message)

    return _report(result, a, b)


def singular_quad(func, a, b, config):
    """Integrate ``func(x) / sqrt(x - a)`` over ``[a, b]``.

    The inverse-square-root factor is handled analytically as an algebraic
    weight function (QUADPACK QAWS, modified Clenshaw-Curtis), so ``func``
    should be the regular part of the integrand only.

    Parameters
    ----------
    func : callable
        Regular part of the integrand
    a, b : float
        Integration limits, the singularity sits at ``a``
    config : QuadratureConfig
        Tolerances and subdivision limit (the rule field is not used)

    Returns
    -------
    QuadratureResult
    """
    if b <= a:
        return QuadratureResult(0.0, 0.0, True, "")

    epsabs, epsrel = _tolerances(config)
    out = integrate.quad(
        func, a, b,
        weight="alg",
        wvar=(-0.5, 0.0),
        epsabs=epsabs,
        epsrel=epsrel,
        limit=max(config.max_subdivisions, MIN_WEIGHTED_SUBDIVISIONS),
        full_output=1,
    )
    message = out[3] if len(out) > 3 else ""
    result = QuadratureResult(float(out[0]), float(out[1]), len(out) <= 3, message)
    return _report(result, a, b)


__all__ = [
    'QUADRATURE_RULES',
    'QuadratureConfig',
    'QuadratureResult',
    'energy_config',
    'adaptive_quad',
    'singular_quad',
]
