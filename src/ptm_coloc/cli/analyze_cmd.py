"""Single-protein analysis command: fetch, summarize, export per-residue table."""

import logging
import sys
from pathlib import Path

import click

from ptm_coloc.analysis import (
    compute_densities,
    density_profile,
    find_colocalization_regions,
    summarize_protein,
)
from ptm_coloc.api_clients import UniProtClient
from ptm_coloc.cli.params_cmd import resolve_calibration
from ptm_coloc.config.loader import load_config
from ptm_coloc.exceptions import (
    InvalidProtein,
    MalformedPage,
    NotFound,
    TransientSourceError,
)
from ptm_coloc.output import write_density_profile

logger = logging.getLogger(__name__)


@click.command('analyze')
@click.argument('gene')
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: {data_dir}/analysis)'
)
@click.option(
    '--params',
    'params_file',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Calibration parameter file (missing keys keep config values)'
)
@click.option(
    '--no-export',
    is_flag=True,
    help='Print the summary only; do not write the per-residue CSV'
)
@click.pass_context
def analyze(ctx, gene, output_dir, params_file, no_export):
    """Analyze one protein by GENE symbol in the reference organism.

    Fetches the reviewed UniProt entry, reports co-localization regions
    and writes the per-residue density table.

    Examples:

        ptm-coloc analyze FN1

        ptm-coloc analyze INS --params protein_coloc_params.txt
    """
    config_path = ctx.obj['config_path']
    config = load_config(config_path)
    calibration = resolve_calibration(config, params_file)

    client = UniProtClient.from_config(config)

    click.echo(f"Fetching {gene} (organism {config.reference_organism_id})...")
    try:
        protein = client.fetch_one(gene)
    except NotFound as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)
    except (TransientSourceError, MalformedPage) as e:
        click.echo(click.style(
            f"Error: could not retrieve data for gene \"{gene}\": {e}", fg='red'
        ), err=True)
        logger.exception("UniProt lookup failed")
        sys.exit(1)

    try:
        curves = compute_densities(protein, calibration)
    except InvalidProtein as e:
        click.echo(click.style(f"Error: {e}", fg='red'), err=True)
        sys.exit(1)

    summary = summarize_protein(protein, calibration, curves)
    regions = find_colocalization_regions(protein, calibration, curves)

    click.echo()
    click.echo(click.style("=== Protein ===", bold=True))
    click.echo(f"ID: {summary.accession}")
    click.echo(f"Gene: {summary.gene}")
    click.echo(f"Species: {summary.scientific_name}")
    click.echo(f"Length: {summary.length} aa")
    click.echo(
        f"Sites: {summary.ss_bond_count} disulfides, {summary.n_linked_count} N-linked, "
        f"{summary.o_linked_count} O-linked, {summary.phospho_count} phospho"
    )
    click.echo()

    click.echo(click.style("=== Co-localization Zones ===", bold=True))
    if regions:
        for region in regions:
            click.echo(f"  {region.start}-{region.end} ({region.length} aa)")
    else:
        click.echo("  None at current calibration")
    click.echo(
        f"Zone coverage: {summary.zone_residues}/{summary.length} residues "
        f"({summary.zone_fraction:.1%})"
    )

    if no_export:
        return

    if output_dir is None:
        output_dir = Path(config.data_dir) / "analysis"

    paths = write_density_profile(
        density_profile(protein, calibration, curves),
        output_dir,
        filename_base=f"{summary.gene}_colocalization_analysis",
        params=calibration,
        extra={"accession": summary.accession, "gene": summary.gene},
    )
    click.echo()
    click.echo(click.style(f"Per-residue table: {paths['csv']}", fg='green'))
