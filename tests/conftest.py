"""Shared fixtures for the axionflux test suite."""

import math

import pytest

from axionflux import FULL_SUN, QuadratureConfig


class FakeSolarModel:
    """Solar model with simple, distinguishable rates per process."""
    r_lo = 0.0
    r_hi = 1.0

    def temperature_in_keV(self, r):
        return 1.0

    def Gamma_P_Primakoff(self, erg, r):
        return 1.0

    def Gamma_P_Compton(self, erg, r):
        return 2.0

    def Gamma_P_ff(self, erg, r):
        return 3.0

    def Gamma_P_ee(self, erg, r):
        return 4.0

    def Gamma_P_opacity(self, erg, r, element=None):
        if element is None:
            return 10.0
        return {"Fe": 5.0, "O": 6.0, "Si": 7.0}[element]

    def Gamma_P_all_electron(self, erg, r):
        return 8.0


@pytest.fixture
def solar_model() -> FakeSolarModel:
    return FakeSolarModel()


@pytest.fixture
def domain():
    return FULL_SUN


@pytest.fixture
def tight_config() -> QuadratureConfig:
    return QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-10)


@pytest.fixture
def disc_config() -> QuadratureConfig:
    return QuadratureConfig(abs_tol=0.0, rel_tol=1.0e-7)


@pytest.fixture
def unit_rate():
    return lambda erg, r: 1.0


@pytest.fixture
def gaussian_rate():
    return lambda erg, r: math.exp(-3.0 * r * r)
