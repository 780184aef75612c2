"""Plot records, record stores and status classification."""

from gravemap.plots.merge import classify, is_available, merge, status_counts
from gravemap.plots.models import AvailablePlotInput, DeceasedInfo, OccupiedPlotInput, PlotRecord
from gravemap.plots.store import InMemoryPlotStore, PlotStore, create_plot_store

__all__ = [
    "AvailablePlotInput",
    "DeceasedInfo",
    "InMemoryPlotStore",
    "OccupiedPlotInput",
    "PlotRecord",
    "PlotStore",
    "classify",
    "create_plot_store",
    "is_available",
    "merge",
    "status_counts",
]
