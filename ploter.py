import numpy as np
import matplotlib.pyplot as plt
import os


def plot_spectrum(spectrum, outpath, filename="spectrum.png", title_prefix="",
                  xlabel="Energy (keV)", ylabel="Flux (axions cm⁻² s⁻¹ keV⁻¹)",
                  logy=None, xlim=None, ylim=None, show_errors=True):
    """Plot a spectral flux with its error band.

    Automatically saves both linear and log scale versions.

    Parameters
    ----------
    spectrum : Spectrum
        Spectrum to plot
    outpath : str
        Directory path for output
    filename : str
        Output image file name (will add suffixes for linear/log versions)
    title_prefix : str
        Optional prefix for plot title
    xlabel : str
        X-axis label
    ylabel : str
        Y-axis label
    logy : bool, optional
        If specified, only use that y-scale. If None, save both versions.
    xlim : tuple, optional
        (xmin, xmax) for x-axis limits
    ylim : tuple, optional
        (ymin, ymax) for y-axis limits
    show_errors : bool
        Shade the quadrature error estimate around the flux

    Returns
    -------
    list of str
        Paths of the saved figures
    """
    if logy is None:
        plot_versions = [False, True]  # linear and logy
    else:
        plot_versions = [logy]

    saved = []
    for use_logy in plot_versions:
        out_file = _plot_spectrum_single(spectrum, outpath, filename, title_prefix,
                                         xlabel, ylabel, use_logy, xlim, ylim, show_errors)
        if out_file is not None:
            saved.append(out_file)
    return saved


def _plot_spectrum_single(spectrum, outpath, filename, title_prefix,
                          xlabel, ylabel, logy, xlim, ylim, show_errors):
    """Internal function to plot a single version (linear or log)."""
    energies = spectrum.energies
    flux = spectrum.values

    # Log scale cannot show non-positive fluxes
    if logy:
        mask = flux > 0
        if not np.any(mask):
            print(f"Warning: No positive flux values, skipping log plot {filename}")
            return None
    else:
        mask = np.ones(len(energies), dtype=bool)

    plt.figure(figsize=(8, 6))
    plt.plot(energies[mask], flux[mask], 'b-', linewidth=2)
    if show_errors:
        err = spectrum.errors[mask]
        plt.fill_between(energies[mask], flux[mask] - err, flux[mask] + err, color='b', alpha=0.2)

    # Mark points where the quadrature did not converge
    bad = mask & ~spectrum.converged
    if np.any(bad):
        plt.plot(energies[bad], flux[bad], 'rx', label='not converged')
        plt.legend()

    if logy:
        plt.yscale('log')

    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title_prefix if title_prefix else "Spectral Flux")
    plt.grid(True, alpha=0.3)

    if xlim is not None:
        plt.xlim(xlim)
    if ylim is not None:
        plt.ylim(ylim)

    plt.tight_layout()

    os.makedirs(outpath, exist_ok=True)

    base, ext = os.path.splitext(filename)
    suffix = "_log" if logy else "_linear"
    out_file = os.path.join(outpath, f"{base}{suffix}{ext}")

    plt.savefig(out_file, dpi=200)
    plt.close()
    print(f"Saved spectrum ({'log' if logy else 'linear'}) to {out_file}")
    return out_file


def plot_inverse_cdf(sampler, outpath, filename="inverse_cdf.png", title_prefix="", samples=None):
    """Plot the cumulative distribution of a sampler.

    Parameters
    ----------
    sampler : InverseCDFSampler
        Sampler to plot
    outpath : str
        Directory path for output
    filename : str
        Output image file name
    title_prefix : str
        Optional prefix for plot title
    samples : array-like, optional
        Drawn energies; their empirical distribution is overlaid

    Returns
    -------
    str
        Path of the saved figure
    """
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(sampler.energies, sampler.cdf, 'b-', linewidth=2, label='CDF')

    if samples is not None:
        samples = np.sort(np.asarray(samples))
        empirical = np.arange(1, len(samples) + 1) / len(samples)
        ax.step(samples, empirical, 'r-', where='post', alpha=0.6, label=f'{len(samples)} draws')
        ax.legend()

    ax.set_xlabel("Energy (keV)")
    ax.set_ylabel("Cumulative probability")
    ax.set_ylim(0.0, 1.02)
    ax.set_title(title_prefix if title_prefix else f"Inverse CDF (norm = {sampler.integrated_norm:.3e})")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()

    os.makedirs(outpath, exist_ok=True)
    out_file = os.path.join(outpath, filename)
    fig.savefig(out_file, dpi=200)
    plt.close(fig)
    print(f"Saved inverse CDF to {out_file}")
    return out_file
