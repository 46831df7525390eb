"""
Spectrum containers, interpolation, integration, and file operations.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.interpolate import interp1d

from .constants import LIBRARY_NAME


@dataclass(frozen=True)
class SpatialDomain:
    """Radial extent (in units of the solar radius) of the emitting region."""
    r_lo: float
    r_hi: float

    def __post_init__(self):
        if not (0.0 <= self.r_lo < self.r_hi <= 1.0):
            raise ValueError(f"Invalid spatial domain [{self.r_lo}, {self.r_hi}], need 0 <= r_lo < r_hi <= 1")


FULL_SUN = SpatialDomain(0.0, 1.0)


def as_energy_grid(energies):
    """Convert energies to a float array, rejecting negative values.

    Parameters
    ----------
    energies : array-like
        Energy values in keV

    Returns
    -------
    NDArray
        1D float array in the input order
    """
    grid = np.atleast_1d(np.asarray(energies, dtype=float))
    if grid.ndim != 1:
        raise ValueError("Energy grid must be one-dimensional")
    if np.any(grid < 0) or not np.all(np.isfinite(grid)):
        raise ValueError("Energy grid values must be finite and non-negative")
    return grid


def energy_grid(e_min, e_max, e_step):
    """Uniform energy grid from e_min in steps of e_step, up to and including e_max.

    Parameters
    ----------
    e_min, e_max : float
        Grid limits in keV
    e_step : float
        Grid spacing in keV

    Returns
    -------
    NDArray
        Grid values; e_max is included when it lies on the grid
    """
    if e_step <= 0:
        raise ValueError(f"Energy step must be positive, got {e_step}")
    if e_min < 0 or e_max <= e_min:
        raise ValueError(f"Invalid energy range [{e_min}, {e_max}]")
    n_points = int(np.floor((e_max - e_min) / e_step + 1.0e-9)) + 1
    return e_min + e_step * np.arange(n_points)


@dataclass(frozen=True, eq=False)
class Spectrum:
    """Spectral flux on an energy grid.

    Parameters
    ----------
    energies : array-like
        Energy values [keV], in the order they were computed
    values : array-like
        Spectral flux [axions / (cm^2 s keV)] at each energy
    errors : array-like
        Non-negative error estimates of ``values``
    converged : array-like of bool, optional
        Whether the quadrature for each point met its tolerance
    comment : str
        Provenance text written as header when the spectrum is saved
    """
    energies: np.ndarray
    values: np.ndarray
    errors: np.ndarray
    converged: np.ndarray = None
    comment: str = ""

    def __post_init__(self):
        energies = np.array(self.energies, dtype=float)
        values = np.array(self.values, dtype=float)
        errors = np.array(self.errors, dtype=float)
        if self.converged is None:
            converged = np.ones(energies.shape, dtype=bool)
        else:
            converged = np.array(self.converged, dtype=bool)

        if not (energies.shape == values.shape == errors.shape == converged.shape) or energies.ndim != 1:
            raise ValueError(
                f"Spectrum arrays must be 1D and of equal length, got shapes "
                f"{energies.shape}, {values.shape}, {errors.shape}, {converged.shape}")
        if np.any(errors < 0):
            raise ValueError("Spectrum error estimates must be non-negative")

        for name, arr in (("energies", energies), ("values", values),
                          ("errors", errors), ("converged", converged)):
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    def __len__(self):
        return len(self.energies)

    def to_array(self):
        """Return an (N, 3) array of [energy, flux, flux error]."""
        return np.column_stack((self.energies, self.values, self.errors))

    def interpolator(self):
        return SpectrumInterpolator(self.energies, self.values)

    def save(self, path):
        save_spectrum(self, path)


class SpectrumInterpolator:
    """Piecewise-linear interpolation of a tabulated spectrum.

    Evaluation outside [lower(), upper()] raises ValueError; the
    interpolant never extrapolates.

    Parameters
    ----------
    energies : array-like
        Strictly increasing energies [keV]
    values : array-like
        Spectral flux values at ``energies``
    """

    def __init__(self, energies, values):
        energies = np.asarray(energies, dtype=float)
        values = np.asarray(values, dtype=float)
        if energies.size < 2:
            raise ValueError("At least two points are needed to interpolate a spectrum")
        if np.any(np.diff(energies) <= 0):
            raise ValueError("Interpolation energies must be strictly increasing")
        self._lower = float(energies[0])
        self._upper = float(energies[-1])
        self._interp = interp1d(energies, values, kind="linear", bounds_error=True)

    @classmethod
    def from_file(cls, path):
        """Read the first two columns of a whitespace-separated table with '#' comments."""
        df = pd.read_csv(path, sep=r"\s+", comment="#", header=None)
        return cls(df[0].values, df[1].values)

    def lower(self):
        return self._lower

    def upper(self):
        return self._upper

    def interpolate(self, energy):
        result = self._interp(energy)
        if np.ndim(result) == 0:
            return float(result)
        return result

    __call__ = interpolate


def save_spectrum(spectrum, path, comment=None):
    """Save a spectrum as a three-column text table.

    Parameters
    ----------
    spectrum : Spectrum
        Spectrum to save
    path : str
        Output file name
    comment : str, optional
        Header comment, defaults to ``spectrum.comment``
    """
    if comment is None:
        comment = spectrum.comment
    header = comment if comment else f"Spectral flux by {LIBRARY_NAME}."
    header += "\nColumns: energy values [keV], axion flux [axions / cm^2 s keV], axion flux error estimate [axions / cm^2 s keV]"
    np.savetxt(path, spectrum.to_array(), fmt="%.10e", header=header, comments="# ")


def load_spectrum(path):
    """Load a spectrum written by save_spectrum.

    Tables with only two columns are read with zero error estimates.
    """
    df = pd.read_csv(path, sep=r"\s+", comment="#", header=None)
    errors = df[2].values if df.shape[1] > 2 else np.zeros(len(df))
    return Spectrum(df[0].values, df[1].values, errors)


def integrate_spectrum(spectrum):
    """Integrate a tabulated spectrum using the trapezoidal rule.

    Parameters
    ----------
    spectrum : Spectrum
        Spectrum with increasing energies

    Returns
    -------
    float
        Integral of the spectrum over its energy range
    """
    energies = spectrum.energies
    values = spectrum.values
    sum_all = 0.0
    for idx in range(1, len(energies)):
        sum_all += 0.5 * (values[idx] + values[idx - 1]) * (energies[idx] - energies[idx - 1])
    return sum_all


__all__ = [
    'SpatialDomain',
    'FULL_SUN',
    'as_energy_grid',
    'energy_grid',
    'Spectrum',
    'SpectrumInterpolator',
    'save_spectrum',
    'load_spectrum',
    'integrate_spectrum',
]
