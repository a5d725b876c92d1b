"""Report output: site and per-residue CSV tables with provenance sidecars."""

from ptm_coloc.output.writers import (
    DENSITY_COLUMNS,
    SITE_REPORT_COLUMNS,
    site_report_frame,
    write_density_profile,
    write_site_report,
)

__all__ = [
    "DENSITY_COLUMNS",
    "SITE_REPORT_COLUMNS",
    "site_report_frame",
    "write_density_profile",
    "write_site_report",
]
