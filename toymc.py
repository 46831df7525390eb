"""
Toy Monte Carlo for solar axion energies.

This script runs the full chain on an analytic toy solar model:
- Computes full-volume and disc spectra for several aperture radii
- Builds inverse CDFs and draws axion energies from them
- Generates plots for each radius and a summary table
- Supports both sequential and parallel processing
"""

import os
import math
import numpy as np

# Import from the axionflux package
from axionflux import (
    FULL_SUN,
    QuadratureConfig,
    calculate_spectral_flux,
    process_rate,
)

# Import workflow functions
from workflows import calculate_inverse_cdfs, save_spectral_flux_for_different_radii

# Output directory
savepath = './data/simulation/'


class ToySolarModel:
    """Analytic stand-in for a tabulated solar model.

    Temperature falls off exponentially from ~1.3 keV in the core; the
    rates are Boltzmann suppressed with simple power-law energy dependence.
    Not meant to reproduce physical flux normalizations.
    """
    r_lo = 0.0
    r_hi = 1.0

    def temperature_in_keV(self, r):
        return 1.3 * math.exp(-4.0 * r) + 0.05

    def _boltzmann(self, erg, r):
        return math.exp(-erg / self.temperature_in_keV(r))

    def Gamma_P_Primakoff(self, erg, r):
        return 1.0e-20 * erg * self._boltzmann(erg, r) * math.exp(-8.0 * r * r)

    def Gamma_P_Compton(self, erg, r):
        return 1.0e-21 * erg * erg * self._boltzmann(erg, r) * math.exp(-8.0 * r * r)

    def Gamma_P_ff(self, erg, r):
        return 1.0e-21 * self._boltzmann(erg, r) / (erg + 0.1)

    def Gamma_P_ee(self, erg, r):
        return 0.2 * self.Gamma_P_ff(erg, r)

    def Gamma_P_opacity(self, erg, r, element=None):
        return 0.5 * self.Gamma_P_ff(erg, r)

    def Gamma_P_all_electron(self, erg, r):
        return self.Gamma_P_Compton(erg, r) + self.Gamma_P_ff(erg, r) + self.Gamma_P_ee(erg, r)


if __name__ == "__main__":
    from ploter import plot_inverse_cdf, plot_spectrum

    os.makedirs("plots", exist_ok=True)
    os.makedirs(savepath, exist_ok=True)

    solar_model = ToySolarModel()
    rate_model = process_rate(solar_model, "Primakoff")
    config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-5)

    # Define energy grid
    energies = np.arange(0.1, 10.0, step=0.1)

    print("=== Full-volume spectral flux ===")
    spectrum = calculate_spectral_flux(energies, rate_model, FULL_SUN, config,
                                       saveas=os.path.join(savepath, "primakoff_full.dat"))
    plot_spectrum(spectrum, "plots", filename="primakoff_full.pdf", title_prefix="Toy Primakoff flux")

    # Aperture radii in units of the solar radius
    radii = [0.1, 0.2, 0.5, 1.0]

    print("\n" + "="*60)
    print("APERTURE SCAN CONFIGURATION")
    print("="*60)
    print(f"Radii (R_sol): {radii}")
    print(f"Energies: {len(energies)} in [{energies[0]:.1f}, {energies[-1]:.1f}] keV")
    print("="*60 + "\n")

    # Option 1: Sequential processing (easier for debugging)
    print("Starting sequential processing...")
    results = save_spectral_flux_for_different_radii(
        energies, radii, rate_model, FULL_SUN, os.path.join(savepath, "primakoff_disc"), config
    )

    # Option 2: Parallel processing (uncomment to use)
    # results = save_spectral_flux_for_different_radii(
    #     energies, radii, rate_model, FULL_SUN, os.path.join(savepath, "primakoff_disc"), config,
    #     processes=4
    # )

    print("\n=== Inverse CDFs and Monte Carlo draws ===")
    samplers = calculate_inverse_cdfs(radii, rate_model, FULL_SUN, 0.0, 10.0, 0.1,
                                      save_output_prefix=os.path.join(savepath, "primakoff_inv_cdf"),
                                      config=config)
    rng = np.random.default_rng(42)
    for radius, sampler in zip(radii, samplers):
        samples = sampler.draw(10000, rng)
        plot_inverse_cdf(sampler, "plots", filename=f"inv_cdf_r{radius:.2f}.pdf",
                         title_prefix=f"Toy Primakoff, r_max = {radius} R_sol", samples=samples)
        print(f"r_max = {radius}: mean drawn energy {np.mean(samples):.3f} keV")

    # Save summary results
    print("\n" + "="*60)
    print("SUMMARY OF ALL RUNS")
    print("="*60)

    summary_file = os.path.join("plots", "summary.txt")
    with open(summary_file, 'w') as f:
        f.write("r_max\tTotal_Flux\tNorm\tNot_Converged\tFile\n")
        for res, sampler in zip(results, samplers):
            line = f"{res['radius']:.4f}\t{res['total_flux']:.6e}\t{sampler.integrated_norm:.6e}\t"
            line += f"{res['n_not_converged']}\t{res['file']}\n"
            f.write(line)
            print(line.strip())

    print(f"\nSummary saved to: {summary_file}")
    print("\n" + "="*60)
    print("PROCESSING COMPLETE")
    print("="*60)
