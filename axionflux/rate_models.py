"""
Axion production rate models consumed by the flux integrators.

The integrators only ever call ``rate(energy, radius)``; the physics
behind a rate (Primakoff, Compton, free-free, opacity tables, ...) lives
in an external solar model. This module wraps the solar model's rate
functions into interchangeable RateModel objects.
"""

from abc import ABC, abstractmethod
from typing import Protocol

import numpy as np

from .spectrum_utils import SpatialDomain


class SolarModel(Protocol):
    """Interface of the external solar model providing production rates.

    Rates are in keV, radii in units of the solar radius.
    """
    r_lo: float
    r_hi: float

    def temperature_in_keV(self, r): ...
    def Gamma_P_Primakoff(self, erg, r): ...
    def Gamma_P_Compton(self, erg, r): ...
    def Gamma_P_ff(self, erg, r): ...
    def Gamma_P_ee(self, erg, r): ...
    def Gamma_P_opacity(self, erg, r, element=None): ...
    def Gamma_P_all_electron(self, erg, r): ...


class RateModel(ABC):
    """Axion production rate as a function of energy [keV] and radius [R_sol].

    ``zero_at_zero_energy`` marks models whose rate is defined to vanish at
    zero energy even though evaluating it there is indeterminate; the
    integrators return exactly zero for such points without evaluating.
    """
    zero_at_zero_energy = False

    @abstractmethod
    def rate(self, energy, radius):
        ...

    def __call__(self, energy, radius):
        return self.rate(energy, radius)


class FunctionRate(RateModel):
    """Rate given by a plain callable ``func(energy, radius)``."""

    def __init__(self, func):
        self.func = func

    def rate(self, energy, radius):
        return self.func(energy, radius)

    def __repr__(self):
        return f"FunctionRate({getattr(self.func, '__name__', self.func)!r})"


class ElementRate(RateModel):
    """Rate of a single element from a callable ``func(energy, radius, element)``."""

    def __init__(self, func, element):
        self.func = func
        self.element = element

    def rate(self, energy, radius):
        return self.func(energy, radius, self.element)

    def __repr__(self):
        return f"ElementRate({self.element!r})"


class SumRate(RateModel):
    """Sum of several rate contributions."""

    def __init__(self, models):
        self.models = [as_rate_model(m) for m in models]
        if not self.models:
            raise ValueError("SumRate needs at least one contribution")

    def rate(self, energy, radius):
        return sum(m.rate(energy, radius) for m in self.models)


class WeightedComptonRate(RateModel):
    """Compton rate weighted by the thermal factor 0.5 * (1 - 1/expm1(E/T)).

    The weight is indeterminate at E = 0, so this model is defined to give
    zero flux there. This convention belongs to this model only.

    Parameters
    ----------
    compton : RateModel or callable
        Unweighted Compton rate
    temperature : callable
        Temperature profile T(r) in keV
    """
    zero_at_zero_energy = True

    def __init__(self, compton, temperature):
        self.compton = as_rate_model(compton)
        self.temperature = temperature

    def rate(self, energy, radius):
        u = energy / self.temperature(radius)
        return 0.5 * (1.0 - 1.0 / np.expm1(u)) * self.compton.rate(energy, radius)


def as_rate_model(model):
    """Return ``model`` as a RateModel, wrapping plain callables."""
    if isinstance(model, RateModel):
        return model
    if callable(model):
        return FunctionRate(model)
    raise TypeError(f"Expected a RateModel or a callable, got {type(model).__name__}")


PROCESSES = ("Primakoff", "Compton", "weightedCompton", "all_ff", "axionelectron", "opacity", "element")


def process_rate(solar_model, process, element=None, element_names=None):
    """Select the rate model of a named production process.

    Parameters
    ----------
    solar_model : SolarModel
        Source of the production rates
    process : str
        One of PROCESSES
    element : str, optional
        Element name, required for process "element"
    element_names : sequence of str, optional
        For process "opacity": sum the single-element opacity rates of these
        elements instead of using the model's total opacity rate

    Returns
    -------
    RateModel
    """
    if process == "Primakoff":
        return FunctionRate(solar_model.Gamma_P_Primakoff)
    if process == "Compton":
        return FunctionRate(solar_model.Gamma_P_Compton)
    if process == "weightedCompton":
        return WeightedComptonRate(solar_model.Gamma_P_Compton, solar_model.temperature_in_keV)
    if process == "all_ff":
        # Free-free plus electron-electron bremsstrahlung
        return SumRate([solar_model.Gamma_P_ff, solar_model.Gamma_P_ee])
    if process == "axionelectron":
        return FunctionRate(solar_model.Gamma_P_all_electron)
    if process == "element":
        if element is None:
            raise ValueError("Process 'element' requires an element name")
        return ElementRate(solar_model.Gamma_P_opacity, element)
    if process == "opacity":
        if element_names:
            return SumRate([ElementRate(solar_model.Gamma_P_opacity, el) for el in element_names])
        return FunctionRate(solar_model.Gamma_P_opacity)
    raise ValueError(f"Unknown process {process!r}, choose from {PROCESSES}")


def spatial_domain(solar_model):
    """Radial domain [r_lo, r_hi] covered by a solar model."""
    return SpatialDomain(solar_model.r_lo, solar_model.r_hi)


__all__ = [
    'SolarModel',
    'RateModel',
    'FunctionRate',
    'ElementRate',
    'SumRate',
    'WeightedComptonRate',
    'as_rate_model',
    'PROCESSES',
    'process_rate',
    'spatial_domain',
]
