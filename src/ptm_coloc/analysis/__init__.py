"""Density, zone and per-site analysis of PTM positions along a sequence.

Density Engine -> Zone Detector -> Protein Analyzer -> Region Extractor.
"""

from ptm_coloc.analysis.models import (
    DensityCurves,
    DisulfideRange,
    Protein,
    ProteinSummary,
    Region,
    SiteAnnotation,
    SiteType,
    UNKNOWN_SPECIES,
)
from ptm_coloc.analysis.calibration import (
    CalibrationParameters,
    DensityParameters,
    PARAMETER_KEYS,
    export_parameters,
    import_parameters,
    load_parameters,
    save_parameters,
)
from ptm_coloc.analysis.density import density, raw_density, smooth
from ptm_coloc.analysis.zones import (
    extract_regions,
    in_disulfide_range,
    regions_to_mask,
    zone_mask,
)
from ptm_coloc.analysis.analyzer import (
    PROFILE_COLUMNS,
    SITE_TYPE_ORDER,
    analyze_protein,
    compute_densities,
    density_profile,
    find_colocalization_regions,
    summarize_protein,
    validate_protein,
)

__all__ = [
    "DensityCurves",
    "DisulfideRange",
    "Protein",
    "ProteinSummary",
    "Region",
    "SiteAnnotation",
    "SiteType",
    "UNKNOWN_SPECIES",
    "CalibrationParameters",
    "DensityParameters",
    "PARAMETER_KEYS",
    "export_parameters",
    "import_parameters",
    "load_parameters",
    "save_parameters",
    "density",
    "raw_density",
    "smooth",
    "extract_regions",
    "in_disulfide_range",
    "regions_to_mask",
    "zone_mask",
    "PROFILE_COLUMNS",
    "SITE_TYPE_ORDER",
    "analyze_protein",
    "compute_densities",
    "density_profile",
    "find_colocalization_regions",
    "summarize_protein",
    "validate_protein",
]
