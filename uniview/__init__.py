"""Smart-parking occupancy and prediction API."""

__version__ = "0.1.0"
