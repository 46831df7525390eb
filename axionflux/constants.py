"""
Physical constants and numerical defaults used in solar axion flux calculations.
"""

import math

# Mathematical constant
pi = math.pi

# Solar and conversion constants
radius_sol = 6.9598e8  # Solar radius, meters
distance_sol = 1.495978707e11  # Sun-Earth distance, meters
keV2cm = 1.97327053e-8  # (hbar c) in keV cm, i.e. 1 keV^-1 = keV2cm cm
hbar = 6.582119514e-25  # Reduced Planck constant, GeV·second

# Conversion factor for spectral fluxes in axions / (cm^2 s keV):
# Rsol^3 [in keV^-3] / (d^2 [in cm^2] * hbar [in keV s])
FLUX_FACTOR = pow(radius_sol / (1.0e-2 * keV2cm), 3) / (pow(1.0e2 * distance_sol, 2) * (1.0e6 * hbar))

# Range scale for energy-integrated fluxes; the energy quadrature runs on
# flux / FLUX_SCALE, results are returned in axions / (cm^2 s)
FLUX_SCALE = 1.0e20

# Quadrature defaults for spatial integrals
int_abs_prec = 1.0e-10  # Absolute tolerance
int_rel_prec = 1.0e-6  # Relative tolerance
int_space_size = 1000  # Maximum number of subintervals
int_method_1 = "qags"  # Quadrature rule

# Quadrature defaults for integrals over energy (absolute tolerance in FLUX_SCALE units)
abs_prec2 = 1.0e-6
rel_prec2 = 1.0e-6
int_method_2 = "gk21"

# Line-of-sight integrals of the disc flux run at tighter tolerances
INNER_TOLERANCE_SCALE = 0.1

# Resonance energies (keV) of axion-electron interactions
axion_electron_peaks = (
    0.653029, 0.779074, 0.920547, 0.956836, 1.02042, 1.05343, 1.3497, 1.40807,
    1.46949, 1.59487, 1.62314, 1.65075, 1.72461, 1.76286, 1.86037, 2.00007,
    2.45281, 2.61233, 3.12669, 3.30616, 3.88237, 4.08163, 5.64394, 5.76064,
    6.14217, 6.19863, 6.58874, 6.63942, 6.66482, 7.68441, 7.74104, 7.76785,
)

LIBRARY_NAME = "axionflux"

__all__ = [
    # Basic constants
    'pi', 'radius_sol', 'distance_sol', 'keV2cm', 'hbar',
    # Unit conversion
    'FLUX_FACTOR', 'FLUX_SCALE',
    # Quadrature defaults
    'int_abs_prec', 'int_rel_prec', 'int_space_size', 'int_method_1',
    'abs_prec2', 'rel_prec2', 'int_method_2', 'INNER_TOLERANCE_SCALE',
    # Resonances
    'axion_electron_peaks',
    'LIBRARY_NAME',
]
