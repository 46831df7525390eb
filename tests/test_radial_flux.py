"""Tests for the full-volume spectral flux."""

import math
import warnings

import numpy as np
import pytest

from axionflux import (
    FLUX_FACTOR,
    ConvergenceWarning,
    FunctionRate,
    QuadratureConfig,
    SpatialDomain,
    WeightedComptonRate,
    calculate_spectral_flux,
    load_spectrum,
    radial_integrand,
    spectral_flux_at,
)


def expected_unit_flux(erg, r_lo=0.0, r_hi=1.0):
    """C * Int 0.5 (r E / pi)^2 dr for a unit rate."""
    return FLUX_FACTOR * 0.5 * (erg / math.pi) ** 2 * (r_hi ** 3 - r_lo ** 3) / 3.0


class TestConstantRate:
    def test_grid_of_three_energies(self, unit_rate, domain, tight_config):
        spectrum = calculate_spectral_flux([1.0, 2.0, 3.0], unit_rate, domain, tight_config)
        assert list(spectrum.energies) == [1.0, 2.0, 3.0]
        for erg, value, error in zip(spectrum.energies, spectrum.values, spectrum.errors):
            assert value == pytest.approx(expected_unit_flux(erg), rel=1e-10)
            assert error <= 1e-8 * value
        assert np.all(spectrum.converged)

    @pytest.mark.parametrize("erg", [0.1, 0.75, 4.2, 9.9])
    def test_closed_form_at_any_energy(self, erg, unit_rate, domain, tight_config):
        res = spectral_flux_at(erg, unit_rate, domain, tight_config)
        assert res.value == pytest.approx(expected_unit_flux(erg), rel=1e-10)

    def test_restricted_domain(self, unit_rate, tight_config):
        shell = SpatialDomain(0.2, 0.9)
        res = spectral_flux_at(2.0, unit_rate, shell, tight_config)
        assert res.value == pytest.approx(expected_unit_flux(2.0, 0.2, 0.9), rel=1e-10)

    def test_zero_energy(self, unit_rate, domain, tight_config):
        spectrum = calculate_spectral_flux([0.0], unit_rate, domain, tight_config)
        assert spectrum.values[0] == 0.0

    @pytest.mark.parametrize("rule", ["gk21", "gk15"])
    def test_other_rules(self, rule, unit_rate, domain):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-10, rule=rule)
        spectrum = calculate_spectral_flux([1.5], unit_rate, domain, config)
        assert spectrum.values[0] == pytest.approx(expected_unit_flux(1.5), rel=1e-10)


class TestRadialDependence:
    def test_exponential_profile(self, domain, tight_config):
        # Int_0^1 r^2 exp(-r) dr = 2 - 5/e
        res = spectral_flux_at(1.0, lambda erg, r: math.exp(-r), domain, tight_config)
        expected = FLUX_FACTOR * 0.5 / math.pi ** 2 * (2.0 - 5.0 / math.e)
        assert res.value == pytest.approx(expected, rel=1e-9)

    def test_integrand_weighting(self):
        integrand = radial_integrand(2.0, FunctionRate(lambda erg, r: erg + r))
        assert integrand(0.5) == pytest.approx(0.5 * (0.5 * 2.0 / math.pi) ** 2 * 2.5)

    def test_grid_order_preserved(self, domain, tight_config):
        rate = lambda erg, r: erg * math.exp(-r * r)
        spectrum = calculate_spectral_flux([3.0, 1.0, 2.0], rate, domain, tight_config)
        assert list(spectrum.energies) == [3.0, 1.0, 2.0]
        for erg, value in zip(spectrum.energies, spectrum.values):
            assert value == pytest.approx(spectral_flux_at(erg, rate, domain, tight_config).value)

    def test_negative_energy_rejected(self, unit_rate, domain):
        with pytest.raises(ValueError):
            calculate_spectral_flux([-1.0, 1.0], unit_rate, domain)


class TestWeightedComptonZeroEnergy:
    def test_zero_energy_is_exactly_zero(self, domain, tight_config):
        rate = WeightedComptonRate(lambda erg, r: 1.0, lambda r: 1.0)
        with warnings.catch_warnings():
            # The thermal weight must not be evaluated at E = 0
            warnings.simplefilter("error")
            res = spectral_flux_at(0.0, rate, domain, tight_config)
        assert res.value == 0.0
        assert res.error == 0.0
        assert res.converged

    def test_positive_energy(self, domain, tight_config):
        rate = WeightedComptonRate(lambda erg, r: 1.0, lambda r: 1.0)
        spectrum = calculate_spectral_flux([0.0, 1.0], rate, domain, tight_config)
        weight = 0.5 * (1.0 - 1.0 / math.expm1(1.0))
        assert spectrum.values[0] == 0.0
        assert spectrum.values[1] == pytest.approx(weight * expected_unit_flux(1.0), rel=1e-10)


class TestConvergenceFailure:
    def test_failure_is_per_point_and_not_fatal(self, domain):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-12, max_subdivisions=1)
        rate = lambda erg, r: math.sin(300.0 * r) ** 2
        with pytest.warns(ConvergenceWarning):
            spectrum = calculate_spectral_flux([1.0, 2.0], rate, domain, config)
        assert len(spectrum) == 2
        assert not np.any(spectrum.converged)
        assert np.all(spectrum.errors > 0)
        assert np.all(np.isfinite(spectrum.values))


class TestSaveAs:
    def test_spectrum_written_in_grid_order(self, tmp_path, unit_rate, domain, tight_config):
        out_file = tmp_path / "primakoff.dat"
        spectrum = calculate_spectral_flux([2.0, 1.0], unit_rate, domain, tight_config, saveas=str(out_file))
        header = out_file.read_text().splitlines()[0]
        assert "full solar volume" in header
        loaded = load_spectrum(str(out_file))
        assert list(loaded.energies) == [2.0, 1.0]
        assert loaded.values == pytest.approx(spectrum.values, rel=1e-9)
