"""Calibration transfer commands: export and inspect parameter files."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from ptm_coloc.analysis.calibration import (
    CalibrationParameters,
    export_parameters,
    load_parameters,
    save_parameters,
)
from ptm_coloc.config.loader import load_config

logger = logging.getLogger(__name__)

PARAMS_FILENAME = "protein_coloc_params.txt"


def resolve_calibration(config, params_file: Path | None) -> CalibrationParameters:
    """Config calibration, with a parameter file layered on top if given.

    Exits with status 1 on an unreadable or invalid parameter file.
    """
    if params_file is None:
        return config.calibration

    try:
        calibration = load_parameters(params_file, config.calibration)
    except (ValueError, ValidationError, FileNotFoundError) as e:
        click.echo(click.style(f"Error loading parameters: {e}", fg='red'), err=True)
        logger.exception("Failed to load calibration parameters")
        sys.exit(1)

    click.echo(f"Calibration loaded from {params_file}", err=True)
    return calibration


@click.group('params')
def params():
    """Export, import and inspect calibration parameters."""
    pass


@params.command('export')
@click.argument(
    'output',
    type=click.Path(path_type=Path),
    required=False,
)
@click.option(
    '--params',
    'params_file',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Parameter file applied on top of the config before exporting'
)
@click.pass_context
def export_cmd(ctx, output, params_file):
    """Write the current calibration to OUTPUT (default: stdout).

    Examples:

        ptm-coloc params export protein_coloc_params.txt
    """
    config = load_config(ctx.obj['config_path'])
    calibration = resolve_calibration(config, params_file)

    if output is None:
        click.echo(export_parameters(calibration))
        return

    path = save_parameters(calibration, output)
    click.echo(click.style(f"Parameters saved to {path}", fg='green'))


@params.command('show')
@click.option(
    '--params',
    'params_file',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Parameter file to apply on top of the config'
)
@click.pass_context
def show_cmd(ctx, params_file):
    """Show the effective calibration (config plus optional parameter file)."""
    config = load_config(ctx.obj['config_path'])
    calibration = resolve_calibration(config, params_file)

    click.echo(click.style("Effective Calibration:", bold=True))
    click.echo(f"  SS window:          {calibration.ss.window_size}")
    click.echo(f"  SS threshold:       {calibration.ss.threshold}")
    click.echo(f"  SS smoothing:       {calibration.ss.smoothing}")
    click.echo(f"  Glyco window:       {calibration.glyco.window_size}")
    click.echo(f"  Glyco threshold:    {calibration.glyco.threshold}")
    click.echo(f"  Glyco smoothing:    {calibration.glyco.smoothing}")
    click.echo("  (phosphorylation uses the glyco parameters)")
