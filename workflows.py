"""
Analysis workflows for solar axion spectra and Monte Carlo tables.

This module provides high-level workflow functions for:
- Spectral fluxes for a list of aperture radii, one output file per radius
- Inverse CDF tables for a list of aperture radii
- Monte Carlo energy draws from saved inverse CDF tables

Key Functions
-------------
- save_spectral_flux_for_different_radii: disc spectra for several r_max
- process_single_radius: worker computing and saving one disc spectrum
- calculate_inverse_cdfs: samplers for several r_max, saved as tables
- draw_mc_samples_from_file: energies drawn from a saved table
"""

import os
import multiprocessing as mp

import numpy as np
import pandas as pd

from axionflux import (
    InverseCDFSampler,
    QuadratureConfig,
    build_sampler,
    calculate_spectral_flux_solar_disc,
    integrate_spectrum,
    LIBRARY_NAME,
)


def radius_file_name(output_file_root, radius):
    return f"{output_file_root}_r{radius:.4f}.dat"


def process_single_radius(args):
    """Compute and save the disc spectrum for one aperture radius.

    Parameters
    ----------
    args : tuple
        (energies, radius, rate_model, domain, output_file_root, config)

    Returns
    -------
    dict
        Summary for this radius: radius, output file, total flux, number of
        points that did not converge
    """
    energies, radius, rate_model, domain, output_file_root, config = args

    out_file = radius_file_name(output_file_root, radius)
    spectrum = calculate_spectral_flux_solar_disc(
        energies, rate_model, domain, radius, config, saveas=out_file
    )

    summary = {
        'radius': radius,
        'file': out_file,
        'total_flux': integrate_spectrum(spectrum),
        'n_not_converged': int(len(spectrum) - np.sum(spectrum.converged)),
    }
    print(f"r_max = {radius:.4f} R_sol: total flux {summary['total_flux']:.6e} axions/cm^2/s -> {out_file}")
    return summary


def save_spectral_flux_for_different_radii(energies, radii, rate_model, domain, output_file_root,
                                           config=None, processes=1):
    """Disc spectra for several aperture radii, each saved to its own file.

    Parameters
    ----------
    energies : array-like
        Energy grid in keV
    radii : sequence of float
        Aperture radii in units of the solar radius
    rate_model : RateModel
        Production rate; must be picklable when processes > 1
    domain : SpatialDomain
        Radial extent of the solar model
    output_file_root : str
        Files are named '<root>_r<radius>.dat'
    config : QuadratureConfig, optional
        Quadrature settings of the disc integral
    processes : int
        Number of worker processes; 1 runs sequentially

    Returns
    -------
    list of dict
        One summary per radius, in the order of ``radii``
    """
    if config is None:
        config = QuadratureConfig()
    out_dir = os.path.dirname(output_file_root)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    args_list = [(energies, radius, rate_model, domain, output_file_root, config) for radius in radii]

    print(f"\n{'='*60}")
    print(f"Computing disc spectra for {len(args_list)} radii on {len(energies)} energies")
    print(f"{'='*60}")

    if processes > 1:
        with mp.Pool(processes=processes) as pool:
            results = pool.map(process_single_radius, args_list)
    else:
        results = [process_single_radius(args) for args in args_list]
    return results


def calculate_inverse_cdfs(radii, rate_model, domain, e_min, e_max, e_step, save_output_prefix=None,
                           config=None):
    """Build inverse CDF samplers for several aperture radii.

    Parameters
    ----------
    radii : sequence of float
        Aperture radii in units of the solar radius
    rate_model : RateModel
        Production rate
    domain : SpatialDomain
        Radial extent of the solar model
    e_min, e_max, e_step : float
        Uniform energy grid in keV
    save_output_prefix : str, optional
        If given, table i is saved to '<prefix>_<i>.dat' with columns
        energy [keV] and cumulative probability; the header records the
        radius and the integrated norm
    config : QuadratureConfig, optional
        Quadrature settings of the disc integral

    Returns
    -------
    list of InverseCDFSampler
    """
    samplers = []
    for i, radius in enumerate(radii):
        sampler = build_sampler(rate_model, domain, e_min, e_max, e_step, radius, config)
        samplers.append(sampler)
        if save_output_prefix is not None:
            out_file = f"{save_output_prefix}_{i}.dat"
            header = (f"Inverse CDF for r_max = {radius} R_sol by {LIBRARY_NAME}.\n"
                      f"integrated_norm = {sampler.integrated_norm:.10e}\n"
                      f"Columns: energy values [keV], cumulative probability")
            np.savetxt(out_file, sampler.table, fmt="%.10e", header=header, comments="# ")
            print(f"Saved inverse CDF (r_max = {radius}) to {out_file}")
    return samplers


def load_inverse_cdf(table_file):
    """Rebuild a sampler from a table written by calculate_inverse_cdfs."""
    norm = 1.0
    with open(table_file) as f:
        for line in f:
            if not line.startswith("#"):
                break
            if "integrated_norm" in line:
                norm = float(line.split("=")[1])
    df = pd.read_csv(table_file, sep=r"\s+", comment="#", header=None)
    return InverseCDFSampler.from_table(df[0].values, df[1].values, norm)


def draw_mc_samples_from_file(table_file, n, rng=None):
    """Draw n axion energies [keV] from a saved inverse CDF table."""
    sampler = load_inverse_cdf(table_file)
    return sampler.draw(n, rng)


__all__ = [
    'radius_file_name',
    'process_single_radius',
    'save_spectral_flux_for_different_radii',
    'calculate_inverse_cdfs',
    'load_inverse_cdf',
    'draw_mc_samples_from_file',
]
