"""
Inverse cumulative distributions for Monte Carlo draws of axion energies.

A spectrum on a uniform energy grid is accumulated with the trapezoidal
rule and normalized to a cumulative distribution F with F[0] = 0 and
F[-1] = 1. Energies are drawn by inverting F with linear interpolation.

Key Functions
-------------
- cumulative_table: normalized cumulative distribution and its norm
- InverseCDFSampler: inversion of the cumulative table
- build_sampler: disc spectrum of a rate model -> ready-to-use sampler
"""

import logging

import numpy as np

from .disc_flux import calculate_spectral_flux_solar_disc
from .errors import DegenerateSpectrumError
from .spectrum_utils import energy_grid

logger = logging.getLogger(__name__)


def cumulative_table(energies, values):
    """Normalized cumulative distribution of a spectrum on a uniform grid.

    Parameters
    ----------
    energies : array-like
        Uniformly spaced, increasing energies in keV
    values : array-like
        Non-negative spectral values at ``energies``

    Returns
    -------
    cdf : NDArray
        Cumulative distribution with cdf[0] == 0.0 and cdf[-1] == 1.0
    norm : float
        Trapezoidal integral of the spectrum before normalization

    Raises
    ------
    DegenerateSpectrumError
        If the grid is not uniform, a value is negative, or the norm is not positive
    """
    energies = np.asarray(energies, dtype=float)
    values = np.asarray(values, dtype=float)
    n_vals = len(energies)
    if n_vals < 2 or values.shape != energies.shape:
        raise DegenerateSpectrumError("Need at least two (energy, value) pairs to build a cumulative table")

    steps = np.diff(energies)
    delta = steps[0]
    if delta <= 0 or not np.allclose(steps, delta, rtol=1.0e-6, atol=0.0):
        raise DegenerateSpectrumError("Cumulative tables require a uniform, increasing energy grid")
    if np.any(values < 0) or not np.all(np.isfinite(values)):
        raise DegenerateSpectrumError("Spectrum values must be finite and non-negative")

    cdf = np.zeros(n_vals)
    norm = 0.0
    for i in range(1, n_vals):
        # Trapezoidal rule integration
        norm += 0.5 * delta * (values[i] + values[i - 1])
        cdf[i] = norm

    if not norm > 0:
        raise DegenerateSpectrumError(f"Cannot normalize a spectrum with integrated norm {norm}")
    cdf /= norm
    return cdf, norm


class InverseCDFSampler:
    """Draw energies distributed according to a tabulated spectrum.

    Parameters
    ----------
    energies : array-like
        Uniformly spaced energies in keV
    values : array-like
        Non-negative spectral values at ``energies``

    Attributes
    ----------
    energies : NDArray
        Energy grid
    cdf : NDArray
        Normalized cumulative distribution on the grid
    integrated_norm : float
        Integral of the spectrum over the grid (trapezoidal rule)
    """

    def __init__(self, energies, values):
        cdf, norm = cumulative_table(energies, values)
        self._set_table(np.array(energies, dtype=float), cdf, norm)

    def _set_table(self, energies, cdf, norm):
        self.energies = energies
        self.cdf = cdf
        self.integrated_norm = norm
        self.energies.setflags(write=False)
        self.cdf.setflags(write=False)

    @classmethod
    def from_spectrum(cls, spectrum):
        return cls(spectrum.energies, spectrum.values)

    @classmethod
    def from_table(cls, energies, cdf, integrated_norm=1.0):
        """Rebuild a sampler from a stored (energy, cdf) table."""
        energies = np.array(energies, dtype=float)
        cdf = np.array(cdf, dtype=float)
        if len(energies) < 2 or cdf.shape != energies.shape:
            raise DegenerateSpectrumError("Need at least two (energy, cdf) pairs")
        if cdf[0] != 0.0 or cdf[-1] != 1.0 or np.any(np.diff(cdf) < 0):
            raise DegenerateSpectrumError("Stored table is not a normalized, non-decreasing distribution")
        sampler = cls.__new__(cls)
        sampler._set_table(energies, cdf, float(integrated_norm))
        return sampler

    @property
    def table(self):
        """(N, 2) array of [energy, cumulative probability]."""
        return np.column_stack((self.energies, self.cdf))

    def inverse_cdf(self, u):
        """Energy at cumulative probability u.

        On flat parts of the distribution the lowest energy reaching u is
        returned; elsewhere the table is interpolated linearly.

        Parameters
        ----------
        u : float or array-like
            Probabilities in [0, 1]

        Returns
        -------
        float or NDArray
            Energies in keV
        """
        u_arr = np.asarray(u, dtype=float)
        if np.any((u_arr < 0.0) | (u_arr > 1.0)) or np.any(np.isnan(u_arr)):
            raise ValueError("Cumulative probabilities must lie in [0, 1]")

        # First table entry with cdf >= u
        hi = np.searchsorted(self.cdf, u_arr, side="left")
        hi = np.minimum(hi, len(self.cdf) - 1)
        lo = np.maximum(hi - 1, 0)

        c_lo = self.cdf[lo]
        c_hi = self.cdf[hi]
        exact = c_hi == u_arr
        span = np.where(c_hi > c_lo, c_hi - c_lo, 1.0)
        frac = np.where(exact, 0.0, (u_arr - c_lo) / span)
        e_lo = self.energies[lo]
        e_hi = self.energies[hi]
        result = np.where(exact, e_hi, e_lo + frac * (e_hi - e_lo))

        if result.ndim == 0:
            return float(result)
        return result

    __call__ = inverse_cdf

    def draw(self, n, rng=None):
        """Draw n energies using uniform variates from a numpy Generator."""
        if rng is None:
            rng = np.random.default_rng()
        return self.inverse_cdf(rng.random(n))


def build_sampler(rate_model, domain, e_min, e_max, e_step, r_max=1.0, config=None):
    """Compute a disc spectrum of a rate model and build its sampler.

    Parameters
    ----------
    rate_model : RateModel or callable
        Production rate Gamma(E, r)
    domain : SpatialDomain
        Radial extent of the solar model
    e_min, e_max, e_step : float
        Uniform energy grid in keV, see ``energy_grid``
    r_max : float
        Aperture radius [R_sol], clamped to domain.r_hi
    config : QuadratureConfig, optional
        Quadrature settings of the disc integral

    Returns
    -------
    InverseCDFSampler
        Sampler holding the cumulative table and the integrated norm
    """
    energies = energy_grid(e_min, e_max, e_step)
    spectrum = calculate_spectral_flux_solar_disc(energies, rate_model, domain, r_max, config)
    sampler = InverseCDFSampler.from_spectrum(spectrum)
    logger.info("Built inverse CDF on %d energies in [%g, %g] keV, r_max=%g, norm=%.6e",
                len(energies), energies[0], energies[-1], r_max, sampler.integrated_norm)
    return sampler


__all__ = [
    'cumulative_table',
    'InverseCDFSampler',
    'build_sampler',
]
