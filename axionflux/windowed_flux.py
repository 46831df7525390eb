"""
Axion flux integrated over an energy window, computed from the rate model.

The energy integral is evaluated adaptively; each sample point of the
energy quadrature triggers a fresh radial integration, so no energy grid
is ever built.
"""

from collections import namedtuple

from .constants import FLUX_SCALE
from .quadrature import QuadratureConfig, adaptive_quad, energy_config
from .radial_flux import spectral_flux_at
from .rate_models import as_rate_model

IntegratedFlux = namedtuple("IntegratedFlux", ["value", "error", "converged"])


def calculate_flux(e_min, e_max, rate_model, domain, config=None, radial_config=None,
                   flux_scale=FLUX_SCALE):
    """Full-volume axion flux between e_min and e_max.

    Parameters
    ----------
    e_min, e_max : float
        Energy window in keV
    rate_model : RateModel or callable
        Production rate Gamma(E, r)
    domain : SpatialDomain
        Radial integration range
    config : QuadratureConfig, optional
        Settings of the energy integral, ``energy_config()`` if None.
        Its absolute tolerance is in units of ``flux_scale`` axions / (cm^2 s).
    radial_config : QuadratureConfig, optional
        Settings of the radial integral at each energy
    flux_scale : float
        The energy quadrature integrates spectral flux / flux_scale

    Returns
    -------
    IntegratedFlux
        Flux and error estimate in axions / (cm^2 s)
    """
    if e_min > e_max:
        raise ValueError(f"Invalid energy window [{e_min}, {e_max}]")
    if e_min < 0:
        raise ValueError(f"Energies must be non-negative, got e_min={e_min}")
    if flux_scale <= 0:
        raise ValueError(f"flux_scale must be positive, got {flux_scale}")
    rate_model = as_rate_model(rate_model)
    if config is None:
        config = energy_config()
    if radial_config is None:
        radial_config = QuadratureConfig()

    def integrand(erg):
        return spectral_flux_at(erg, rate_model, domain, radial_config).value / flux_scale

    result = adaptive_quad(integrand, e_min, e_max, config)
    return IntegratedFlux(flux_scale * result.value, flux_scale * result.error, result.converged)


__all__ = [
    'IntegratedFlux',
    'calculate_flux',
]
