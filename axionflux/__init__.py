"""
Numerical integration engine for solar axion fluxes.

This package contains modular components for:
- Physical constants and quadrature defaults
- Adaptive quadrature configuration and wrappers
- Production rate models (opaque rate(E, r) callables)
- Spectral flux over the full solar volume and over a projected disc
- Fluxes integrated over energy windows (live model or tabulated spectra)
- Inverse cumulative distributions for Monte Carlo energy draws
- Utility tools (timing)
"""

from .constants import *
from .errors import *
from .quadrature import *
from .spectrum_utils import *
from .rate_models import *
from .radial_flux import *
from .disc_flux import *
from .windowed_flux import *
from .tabulated_flux import *
from .inverse_cdf import *
from .tools import *

__all__ = [
    # Constants
    'pi', 'radius_sol', 'distance_sol', 'keV2cm', 'hbar',
    'FLUX_FACTOR', 'FLUX_SCALE', 'INNER_TOLERANCE_SCALE',
    'int_abs_prec', 'int_rel_prec', 'int_space_size', 'int_method_1',
    'abs_prec2', 'rel_prec2', 'int_method_2',
    'axion_electron_peaks', 'LIBRARY_NAME',

    # Errors
    'AxionFluxError', 'OutOfRangeError', 'DegenerateSpectrumError', 'ConvergenceWarning',

    # Quadrature
    'QUADRATURE_RULES', 'QuadratureConfig', 'QuadratureResult', 'energy_config',
    'adaptive_quad', 'singular_quad',

    # Spectra
    'SpatialDomain', 'FULL_SUN', 'as_energy_grid', 'energy_grid',
    'Spectrum', 'SpectrumInterpolator', 'save_spectrum', 'load_spectrum',
    'integrate_spectrum',

    # Rate models
    'SolarModel', 'RateModel', 'FunctionRate', 'ElementRate', 'SumRate',
    'WeightedComptonRate', 'as_rate_model', 'PROCESSES', 'process_rate',
    'spatial_domain',

    # Spectral flux
    'radial_integrand', 'spectral_flux_at', 'calculate_spectral_flux',
    'INNER_RULES', 'line_of_sight_integral', 'disc_flux_at',
    'calculate_spectral_flux_solar_disc',

    # Integrated flux
    'IntegratedFlux', 'calculate_flux',
    'relevant_peaks', 'integrated_flux_from_interpolator', 'integrated_flux_from_file',

    # Sampling
    'cumulative_table', 'InverseCDFSampler', 'build_sampler',

    # Utility tools
    'timer',
]
