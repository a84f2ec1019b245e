"""
forecastview - Terminal viewer for forecasting runs.

Trigger a run, reconcile its results, see the forecast.
"""

from forecastview.artifacts import classify
from forecastview.features import normalize
from forecastview.kpis import derive_kpis
from forecastview.reconcile import reconcile

__version__ = "0.1.0"
__all__ = ["classify", "derive_kpis", "normalize", "reconcile", "__version__"]
