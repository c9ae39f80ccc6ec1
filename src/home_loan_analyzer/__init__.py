"""Home-loan affordability analysis across bank promotions."""

__version__ = "0.1.0"
