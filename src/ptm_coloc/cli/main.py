"""Main CLI entry point for ptm-coloc.

Provides command group with global options and subcommands for single-protein
analysis, whole-proteome batch runs, FASTA analysis and calibration transfer.
"""

import logging
from pathlib import Path

import click

from ptm_coloc import __version__
from ptm_coloc.config.loader import load_config
from ptm_coloc.cli.analyze_cmd import analyze
from ptm_coloc.cli.batch_cmd import fasta, proteome
from ptm_coloc.cli.params_cmd import params


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """ptm-coloc: Co-localization of disulfide and glycosylation site densities.

    Computes smoothed PTM site densities along protein sequences, detects
    zones where disulfide and N-linked glycosylation density are both
    elevated, and writes per-site and per-residue reports.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"ptm-coloc v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo(f"Data Directory: {config.data_dir}")
        click.echo(f"Reference Organism: {config.reference_organism_id}")
        click.echo()

        click.echo(click.style("Calibration:", bold=True))
        for name, group in (("SS", config.calibration.ss), ("Glyco/Phospho", config.calibration.glyco)):
            click.echo(
                f"  {name:<14} window={group.window_size} "
                f"threshold={group.threshold} smoothing={group.smoothing}"
            )
        click.echo()

        click.echo(click.style("Batch:", bold=True))
        click.echo(f"  Organism: {config.batch.organism_id}")
        click.echo(f"  Page Size: {config.batch.page_size}")
        click.echo(f"  Default Total Estimate: {config.batch.default_total_estimate}")
        click.echo()

        click.echo(click.style("API Configuration:", bold=True))
        click.echo(f"  Base URL: {config.api.base_url}")
        click.echo(f"  Max Retries: {config.api.max_retries}")
        click.echo(f"  Retry Delay: {config.api.retry_delay_seconds}s")
        click.echo(f"  Timeout: {config.api.timeout_seconds}s")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(analyze)
cli.add_command(proteome)
cli.add_command(fasta)
cli.add_command(params)


if __name__ == '__main__':
    cli()
