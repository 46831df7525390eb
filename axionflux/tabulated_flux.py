"""
Axion flux integrated over an energy window from a tabulated spectrum.

Spectra including axion-electron interactions carry narrow resonance
lines. When requested, the known line energies inside the window become
breakpoints and every sub-interval is integrated on its own, so that no
line is missed by the adaptive rule.
"""

import logging

from .constants import axion_electron_peaks
from .errors import OutOfRangeError
from .quadrature import adaptive_quad, energy_config
from .spectrum_utils import SpectrumInterpolator
from .windowed_flux import IntegratedFlux

logger = logging.getLogger(__name__)


def relevant_peaks(e_min, e_max, peaks=axion_electron_peaks):
    """Breakpoint list [e_min, peaks strictly inside (e_min, e_max), e_max]."""
    inside = sorted(p for p in peaks if e_min < p < e_max)
    return [e_min] + inside + [e_max]


def integrated_flux_from_interpolator(e_min, e_max, interpolator, includes_electron_interactions=False,
                                      peaks=axion_electron_peaks, config=None):
    """Integrate an interpolated spectrum over [e_min, e_max].

    Parameters
    ----------
    e_min, e_max : float
        Energy window in keV
    interpolator : SpectrumInterpolator
        Any object with interpolate(E), lower() and upper()
    includes_electron_interactions : bool
        Insert the resonance energies in ``peaks`` as breakpoints
    peaks : sequence of float
        Resonance energies in keV
    config : QuadratureConfig, optional
        Quadrature settings, ``energy_config()`` if None

    Returns
    -------
    IntegratedFlux
        Flux and error estimate in axions / (cm^2 s)

    Raises
    ------
    OutOfRangeError
        If the window is not contained in [lower(), upper()]
    """
    if (e_min < interpolator.lower()) or (e_max > interpolator.upper()):
        raise OutOfRangeError(
            f"Integration window [{e_min}, {e_max}] keV is incompatible with the available "
            f"energy range [{interpolator.lower()}, {interpolator.upper()}] keV")
    if e_min > e_max:
        raise ValueError(f"Invalid energy window [{e_min}, {e_max}]")
    if config is None:
        config = energy_config()

    if not includes_electron_interactions:
        result = adaptive_quad(interpolator.interpolate, e_min, e_max, config)
        return IntegratedFlux(result.value, result.error, result.converged)

    bounds = relevant_peaks(e_min, e_max, peaks)
    logger.debug("Integrating [%g, %g] keV with %d resonance breakpoints", e_min, e_max, len(bounds) - 2)
    value, error, converged = 0.0, 0.0, True
    for lo, hi in zip(bounds[:-1], bounds[1:]):
        result = adaptive_quad(interpolator.interpolate, lo, hi, config)
        value += result.value
        error += result.error
        converged = converged and result.converged
    return IntegratedFlux(value, error, converged)


def integrated_flux_from_file(e_min, e_max, spectral_flux_file, includes_electron_interactions=False,
                              peaks=axion_electron_peaks, config=None):
    """Integrate a spectrum stored in a text table over [e_min, e_max].

    See integrated_flux_from_interpolator for the parameters.
    """
    spectral_flux = SpectrumInterpolator.from_file(spectral_flux_file)
    try:
        return integrated_flux_from_interpolator(e_min, e_max, spectral_flux,
                                                 includes_electron_interactions, peaks, config)
    except OutOfRangeError as err:
        raise OutOfRangeError(f"{err} (file {spectral_flux_file})") from err


__all__ = [
    'relevant_peaks',
    'integrated_flux_from_interpolator',
    'integrated_flux_from_file',
]
