"""Tests for the solar disc spectral flux and its line-of-sight integral."""

import math
import warnings

import numpy as np
import pytest

from axionflux import disc_flux
from axionflux import (
    FLUX_FACTOR,
    ConvergenceWarning,
    FunctionRate,
    QuadratureConfig,
    QuadratureResult,
    SpatialDomain,
    WeightedComptonRate,
    calculate_spectral_flux,
    calculate_spectral_flux_solar_disc,
    disc_flux_at,
    line_of_sight_integral,
)


def expected_unit_disc_flux(erg, r_max):
    """C * 0.5 (E/pi)^2 * Int_0^R b sqrt(R^2 - b^2) db = C * 0.5 (E/pi)^2 * R^3 / 3."""
    return FLUX_FACTOR * 0.5 * (erg / math.pi) ** 2 * r_max ** 3 / 3.0


def exploding_rate(erg, r):
    raise AssertionError("rate model must not be evaluated")


class TestLineOfSightIntegral:
    @pytest.mark.parametrize("b", [0.0, 0.3, 0.9])
    def test_constant_rate_singular_rule(self, b):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-10)
        res = line_of_sight_integral(1.0, b, FunctionRate(lambda erg, r: 1.0), 1.0, config, "alg")
        assert res.value == pytest.approx(math.sqrt(1.0 - b * b), rel=1e-8)
        assert res.converged

    def test_constant_rate_extrapolating_rule(self):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-8)
        res = line_of_sight_integral(1.0, 0.3, FunctionRate(lambda erg, r: 1.0), 1.0, config, "qags")
        assert res.value == pytest.approx(math.sqrt(0.91), rel=1e-5)

    def test_rules_agree_for_varying_rate(self):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-8)
        rate = FunctionRate(lambda erg, r: math.exp(-3.0 * r * r))
        alg = line_of_sight_integral(2.0, 0.4, rate, 0.8, config, "alg")
        qags = line_of_sight_integral(2.0, 0.4, rate, 0.8, config, "qags")
        assert alg.value == pytest.approx(qags.value, rel=1e-5)

    def test_tangent_point_beyond_aperture(self):
        res = line_of_sight_integral(1.0, 0.5, FunctionRate(exploding_rate), 0.5, QuadratureConfig())
        assert res.value == 0.0

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValueError, match="rule"):
            line_of_sight_integral(1.0, 0.1, FunctionRate(lambda erg, r: 1.0), 1.0, QuadratureConfig(), "gk21")


class TestFullDiscEqualsFullSphere:
    def test_constant_rate(self, unit_rate, domain, disc_config, tight_config):
        energies = [1.0, 2.0, 3.0]
        disc = calculate_spectral_flux_solar_disc(energies, unit_rate, domain, 1.0, disc_config)
        sphere = calculate_spectral_flux(energies, unit_rate, domain, tight_config)
        assert disc.values == pytest.approx(sphere.values, rel=1e-6)
        for erg, value in zip(energies, disc.values):
            assert value == pytest.approx(expected_unit_disc_flux(erg, 1.0), rel=1e-6)

    def test_radius_dependent_rate(self, gaussian_rate, domain, disc_config, tight_config):
        energies = [0.5, 4.0]
        disc = calculate_spectral_flux_solar_disc(energies, gaussian_rate, domain, 1.0, disc_config)
        sphere = calculate_spectral_flux(energies, gaussian_rate, domain, tight_config)
        assert disc.values == pytest.approx(sphere.values, rel=1e-5)


class TestAperture:
    @pytest.mark.parametrize("r_max", [0.25, 0.5, 0.8])
    def test_partial_aperture_constant_rate(self, r_max, unit_rate, domain, disc_config):
        res = disc_flux_at(2.0, unit_rate, domain, r_max, disc_config)
        assert res.value == pytest.approx(expected_unit_disc_flux(2.0, r_max), rel=1e-6)

    def test_aperture_clamped_to_domain(self, gaussian_rate, domain, disc_config):
        big = disc_flux_at(1.0, gaussian_rate, domain, 5.0, disc_config)
        full = disc_flux_at(1.0, gaussian_rate, domain, 1.0, disc_config)
        assert big.value == full.value

    def test_flux_grows_with_aperture(self, gaussian_rate, domain, disc_config):
        spectra = [calculate_spectral_flux_solar_disc([2.0], gaussian_rate, domain, r, disc_config).values[0]
                   for r in (0.1, 0.3, 0.6, 1.0)]
        assert all(a < b for a, b in zip(spectra[:-1], spectra[1:]))

    @pytest.mark.parametrize("r_max", [0.1, 0.3])
    def test_empty_aperture_gives_zero_spectrum(self, r_max):
        shell = SpatialDomain(0.3, 1.0)
        spectrum = calculate_spectral_flux_solar_disc([1.0, 2.0, 3.0], exploding_rate, shell, r_max)
        assert list(spectrum.energies) == [1.0, 2.0, 3.0]
        assert np.all(spectrum.values == 0.0)
        assert np.all(spectrum.errors == 0.0)
        assert np.all(spectrum.converged)

    def test_unknown_inner_rule_rejected(self, unit_rate, domain):
        with pytest.raises(ValueError):
            calculate_spectral_flux_solar_disc([1.0], unit_rate, domain, 1.0, inner_rule="midpoint")


class TestDiscEdgeCases:
    def test_weighted_compton_zero_energy(self, domain, disc_config):
        rate = WeightedComptonRate(lambda erg, r: 1.0, lambda r: 1.0)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            spectrum = calculate_spectral_flux_solar_disc([0.0], rate, domain, 0.5, disc_config)
        assert spectrum.values[0] == 0.0

    def test_saveas_header_records_aperture(self, tmp_path, unit_rate, domain):
        out_file = tmp_path / "disc.dat"
        calculate_spectral_flux_solar_disc([1.0], unit_rate, domain, 0.5, saveas=str(out_file))
        header = out_file.read_text().splitlines()[0]
        assert "solar disc" in header
        assert "0.5" in header


@pytest.mark.filterwarnings("ignore::axionflux.errors.ConvergenceWarning")
class TestExtremeButValidConfigs:
    def test_one_subdivision(self, unit_rate, domain):
        config = QuadratureConfig(max_subdivisions=1)
        spectrum = calculate_spectral_flux_solar_disc([1.0], unit_rate, domain, 0.5, config)
        assert np.all(np.isfinite(spectrum.values))
        assert spectrum.values[0] == pytest.approx(expected_unit_disc_flux(1.0, 0.5), rel=5e-2)

    def test_inner_tolerance_scaled_below_machine_limit(self, unit_rate, domain):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-13)
        spectrum = calculate_spectral_flux_solar_disc([1.0], unit_rate, domain, 0.5, config)
        assert spectrum.values[0] == pytest.approx(expected_unit_disc_flux(1.0, 0.5), rel=1e-6)

    def test_volume_tolerance_below_machine_limit(self, unit_rate, domain):
        config = QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-15)
        spectrum = calculate_spectral_flux([1.0], unit_rate, domain, config)
        assert spectrum.values[0] == pytest.approx(expected_unit_disc_flux(1.0, 1.0), rel=1e-10)


class TestLineOfSightFailures:
    def test_inner_failure_flags_point(self, monkeypatch, unit_rate, domain, disc_config):
        def failing_line_of_sight(energy, b, rate_model, r_max, config, inner_rule="alg"):
            return QuadratureResult(1.0, 0.5, False, "roundoff")

        monkeypatch.setattr(disc_flux, "line_of_sight_integral", failing_line_of_sight)
        res = disc_flux_at(1.0, unit_rate, domain, 1.0, disc_config)
        # Outer integrand 0.5 (E/pi)^2 b is smooth, only the inner failure remains
        assert res.value == pytest.approx(FLUX_FACTOR * 0.5 / math.pi ** 2 * 0.5, rel=1e-8)
        assert not res.converged
        assert res.message
        assert res.error > 0.5 * res.value

    def test_inner_failure_reaches_spectrum(self, domain):
        config = QuadratureConfig(abs_tol=1.0, rel_tol=1.0e-12, max_subdivisions=5)
        rate = lambda erg, rho: math.sin(300.0 * rho) ** 2
        with pytest.warns(ConvergenceWarning):
            spectrum = calculate_spectral_flux_solar_disc([0.01], rate, domain, 1.0, config)
        assert not spectrum.converged[0]
        assert spectrum.errors[0] > 0

    def test_converged_point_keeps_small_error(self, unit_rate, domain, disc_config):
        res = disc_flux_at(2.0, unit_rate, domain, 0.5, disc_config)
        assert res.converged
        assert res.error < 1e-5 * res.value
