"""
Spectral axion flux from a projected disc of the Sun.

Only axions emitted along lines of sight with impact parameter
b <= r_max (in units of the solar radius) are counted:

    Phi(E) = FLUX_FACTOR * Int_{r_lo}^{r_max} 0.5 * (E/pi)^2 * b * I(E, b) db

    I(E, b) = Int_{b}^{r_max} rho / sqrt(rho^2 - b^2) * Gamma(E, rho) drho

The line-of-sight integral I has an integrable inverse-square-root
singularity at rho = b. By default it is computed with the algebraic-weight
rule of ``singular_quad`` applied to the regular part
rho / sqrt(rho + b) * Gamma(E, rho). For r_lo = 0 and r_max = r_hi the disc
flux equals the full-volume flux of ``calculate_spectral_flux``.
"""

import logging
import math
from dataclasses import replace

import numpy as np

from .constants import FLUX_FACTOR, INNER_TOLERANCE_SCALE, LIBRARY_NAME, pi
from .quadrature import QuadratureConfig, QuadratureResult, adaptive_quad, singular_quad
from .rate_models import as_rate_model
from .spectrum_utils import Spectrum, as_energy_grid, save_spectrum
from .tools import timer

logger = logging.getLogger(__name__)

# "alg": singularity weighted out analytically (QUADPACK QAWS)
# "qags": plain adaptive rule with extrapolation on the full singular integrand
INNER_RULES = ("alg", "qags")


def _check_inner_rule(inner_rule):
    if inner_rule not in INNER_RULES:
        raise ValueError(f"Unknown line-of-sight rule {inner_rule!r}, choose from {INNER_RULES}")


def line_of_sight_integral(energy, b, rate_model, r_max, config, inner_rule="alg"):
    """Integral of rho / sqrt(rho^2 - b^2) * Gamma(E, rho) for rho in [b, r_max].

    Parameters
    ----------
    energy : float
        Axion energy in keV
    b : float
        Impact parameter of the line of sight [R_sol]
    rate_model : RateModel
        Production rate Gamma(E, r)
    r_max : float
        Outer radius of the integration [R_sol]
    config : QuadratureConfig
        Quadrature settings for this integral
    inner_rule : str
        One of INNER_RULES

    Returns
    -------
    QuadratureResult
    """
    _check_inner_rule(inner_rule)
    if b >= r_max:
        return QuadratureResult(0.0, 0.0, True, "")
    if b == 0.0:
        # Central line of sight: rho / sqrt(rho^2) = 1, no singularity
        return adaptive_quad(lambda rho: rate_model.rate(energy, rho), 0.0, r_max, replace(config, rule="qags"))

    if inner_rule == "alg":
        def regular(rho):
            return rho / math.sqrt(rho + b) * rate_model.rate(energy, rho)
        return singular_quad(regular, b, r_max, config)

    def integrand(rho):
        cylinder = rho * rho - b * b
        if cylinder <= 0.0:
            return 0.0
        return rho / math.sqrt(cylinder) * rate_model.rate(energy, rho)
    return adaptive_quad(integrand, b, r_max, replace(config, rule="qags"))


def disc_flux_at(energy, rate_model, domain, r_max, config=None, inner_rule="alg"):
    """Spectral flux from the solar disc of radius r_max at a single energy.

    Parameters
    ----------
    energy : float
        Axion energy in keV
    rate_model : RateModel or callable
        Production rate Gamma(E, r)
    domain : SpatialDomain
        Radial extent of the solar model
    r_max : float
        Aperture radius [R_sol], clamped to domain.r_hi
    config : QuadratureConfig, optional
        Settings of the outer integral; the line-of-sight integrals use
        tolerances scaled by INNER_TOLERANCE_SCALE
    inner_rule : str
        One of INNER_RULES

    Returns
    -------
    QuadratureResult
        Flux and error estimate in axions / (cm^2 s keV); not converged
        if the outer integral or any line-of-sight integral missed its tolerance
    """
    _check_inner_rule(inner_rule)
    rate_model = as_rate_model(rate_model)
    if config is None:
        config = QuadratureConfig()
    r_max = min(r_max, domain.r_hi)
    if r_max <= domain.r_lo:
        return QuadratureResult(0.0, 0.0, True, "")
    if energy == 0 and rate_model.zero_at_zero_energy:
        return QuadratureResult(0.0, 0.0, True, "")

    inner_config = config.scaled(INNER_TOLERANCE_SCALE)
    prefactor = 0.5 * (energy / pi) ** 2
    inner_converged = True
    inner_error = 0.0

    def outer_integrand(b):
        nonlocal inner_converged, inner_error
        inner = line_of_sight_integral(energy, b, rate_model, r_max, inner_config, inner_rule)
        if not inner.converged:
            inner_converged = False
        inner_error = max(inner_error, prefactor * b * inner.error)
        return prefactor * b * inner.value

    result = adaptive_quad(outer_integrand, domain.r_lo, r_max, config)
    # Largest weighted line-of-sight error times the aperture width bounds their contribution
    error = result.error + inner_error * (r_max - domain.r_lo)
    message = result.message
    if not inner_converged:
        logger.debug("Line-of-sight integrals at E=%g keV did not converge", energy)
        message = message or "line-of-sight integral did not converge"
    return QuadratureResult(FLUX_FACTOR * result.value, FLUX_FACTOR * error,
                            result.converged and inner_converged, message)


@timer
def calculate_spectral_flux_solar_disc(energies, rate_model, domain, r_max, config=None,
                                       inner_rule="alg", saveas=None):
    """Spectral flux from the solar disc r <= r_max on an energy grid.

    Parameters
    ----------
    energies : array-like
        Energy grid in keV (non-negative); output keeps this order
    rate_model : RateModel or callable
        Production rate Gamma(E, r)
    domain : SpatialDomain
        Radial extent of the solar model
    r_max : float
        Aperture radius [R_sol], clamped to domain.r_hi
    config : QuadratureConfig, optional
        Settings of the outer integral
    inner_rule : str
        Rule for the line-of-sight integrals, one of INNER_RULES
    saveas : str, optional
        If given, the spectrum is also written to this file

    Returns
    -------
    Spectrum
        All zeros if the clamped aperture is empty (r_max <= r_lo)
    """
    _check_inner_rule(inner_rule)
    energies = as_energy_grid(energies)
    rate_model = as_rate_model(rate_model)
    if config is None:
        config = QuadratureConfig()
    r_max = min(r_max, domain.r_hi)
    comment = (f"Spectral flux over full solar disc, r in [{domain.r_lo}, {r_max}] R_sol "
               f"by {LIBRARY_NAME}.")

    if r_max <= domain.r_lo:
        logger.debug("Empty aperture r_max=%g <= r_lo=%g, returning zero spectrum", r_max, domain.r_lo)
        zeros = np.zeros(len(energies))
        spectrum = Spectrum(energies, zeros, zeros, comment=comment)
    else:
        results, errors, converged = [], [], []
        for erg in energies:
            res = disc_flux_at(erg, rate_model, domain, r_max, config, inner_rule)
            results.append(res.value)
            errors.append(res.error)
            converged.append(res.converged)

        n_failed = len(converged) - int(np.sum(converged))
        if n_failed:
            logger.warning("%d of %d disc flux points did not converge", n_failed, len(energies))
        spectrum = Spectrum(energies, results, errors, converged, comment=comment)

    if saveas:
        save_spectrum(spectrum, saveas)
    return spectrum


__all__ = [
    'INNER_RULES',
    'line_of_sight_integral',
    'disc_flux_at',
    'calculate_spectral_flux_solar_disc',
]
