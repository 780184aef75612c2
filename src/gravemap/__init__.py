"""gravemap: burial plot records on an interactive map."""

__version__ = "0.1.0"
