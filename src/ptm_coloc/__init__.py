"""ptm-coloc: co-localization analysis of PTM site densities along protein sequences."""

__version__ = "0.1.0"
