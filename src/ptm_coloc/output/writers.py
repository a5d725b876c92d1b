"""CSV report writers with YAML provenance sidecar."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import polars as pl
import yaml

from ptm_coloc.analysis.calibration import CalibrationParameters
from ptm_coloc.analysis.models import SiteAnnotation

SITE_REPORT_COLUMNS = [
    "Scientific_Name",
    "Gene_Name",
    "Type",
    "Site_ID",
    "In_UniProt_Disulfide_Bond",
    "In_HighDensity_Colocalization_Zone",
]

DENSITY_COLUMNS = [
    "SS_Density",
    "N_Linked_Density",
    "O_Linked_Density",
    "Phospho_Density",
]

# Reports carry spreadsheet-style flags rather than true/false
FLAG_TRUE = "TRUE"
FLAG_FALSE = "FALSE"


def _flag(column: str) -> pl.Expr:
    return (
        pl.when(pl.col(column))
        .then(pl.lit(FLAG_TRUE))
        .otherwise(pl.lit(FLAG_FALSE))
        .alias(column)
    )


def site_report_frame(rows: Iterable[SiteAnnotation]) -> pl.DataFrame:
    """Tabulate site annotations in report column order (booleans kept)."""
    records = [
        {
            "Scientific_Name": row.scientific_name,
            "Gene_Name": row.gene,
            "Type": row.type.value,
            "Site_ID": row.glycosite,
            "In_UniProt_Disulfide_Bond": row.in_uniprot_disulfide,
            "In_HighDensity_Colocalization_Zone": row.in_high_density_zone,
        }
        for row in rows
    ]
    schema = {
        "Scientific_Name": pl.String,
        "Gene_Name": pl.String,
        "Type": pl.String,
        "Site_ID": pl.String,
        "In_UniProt_Disulfide_Bond": pl.Boolean,
        "In_HighDensity_Colocalization_Zone": pl.Boolean,
    }
    return pl.DataFrame(records, schema=schema)


def _write_provenance(
    provenance_path: Path,
    output_file: Path,
    row_count: int,
    params: CalibrationParameters | None,
    statistics: dict,
    extra: dict | None,
) -> None:
    from ptm_coloc import __version__

    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "ptm_coloc_version": __version__,
        "output_files": [output_file.name],
        "row_count": row_count,
        "statistics": statistics,
    }
    if params is not None:
        provenance["calibration"] = params.to_flat()
    if extra:
        provenance.update(extra)

    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)


def write_site_report(
    rows: Iterable[SiteAnnotation],
    output_dir: Path,
    filename_base: str = "proteome_analysis_results",
    params: CalibrationParameters | None = None,
    extra: dict | None = None,
) -> dict:
    """
    Write per-site annotations to CSV with a provenance sidecar.

    Row order is preserved exactly as given.

    Args:
        rows: Site annotations (batch pipeline output order)
        output_dir: Directory to write to (created if missing)
        filename_base: Base filename without extension
        params: Calibration recorded in the sidecar
        extra: Additional sidecar metadata (e.g. organism, skipped count)

    Returns:
        {"csv": Path, "provenance": Path}
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    df = site_report_frame(rows)
    csv_path = output_dir / f"{filename_base}.csv"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"

    df.with_columns([
        _flag("In_UniProt_Disulfide_Bond"),
        _flag("In_HighDensity_Colocalization_Zone"),
    ]).write_csv(csv_path, include_header=True)

    type_counts = {}
    if df.height > 0:
        type_dist = df.group_by("Type").agg(pl.len()).sort("Type")
        type_counts = {row["Type"]: row["len"] for row in type_dist.to_dicts()}

    statistics = {
        "genes": df["Gene_Name"].n_unique() if df.height else 0,
        "sites_by_type": type_counts,
        "in_disulfide": int(df["In_UniProt_Disulfide_Bond"].sum()) if df.height else 0,
        "in_zone": int(df["In_HighDensity_Colocalization_Zone"].sum()) if df.height else 0,
    }
    _write_provenance(provenance_path, csv_path, df.height, params, statistics, extra)

    return {"csv": csv_path, "provenance": provenance_path}


def write_density_profile(
    profile: pl.DataFrame,
    output_dir: Path,
    filename_base: str,
    params: CalibrationParameters | None = None,
    extra: dict | None = None,
) -> dict:
    """
    Write a per-residue density table to CSV with a provenance sidecar.

    Densities are written with 4 decimal places; the zone flag as TRUE/FALSE.

    Args:
        profile: Output of analysis.density_profile
        output_dir: Directory to write to (created if missing)
        filename_base: Base filename without extension
        params: Calibration recorded in the sidecar
        extra: Additional sidecar metadata

    Returns:
        {"csv": Path, "provenance": Path}
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = output_dir / f"{filename_base}.csv"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"

    profile.with_columns(_flag("Is_HighDensity_Zone")).write_csv(
        csv_path,
        include_header=True,
        float_precision=4,
    )

    statistics = {
        "residues": profile.height,
        "zone_residues": int(profile["Is_HighDensity_Zone"].sum()) if profile.height else 0,
        "max_density": {
            column: round(float(profile[column].max()), 4) if profile.height else 0.0
            for column in DENSITY_COLUMNS
        },
    }
    _write_provenance(provenance_path, csv_path, profile.height, params, statistics, extra)

    return {"csv": csv_path, "provenance": provenance_path}
