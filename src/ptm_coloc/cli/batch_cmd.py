"""Batch commands: whole-proteome and FASTA site reports.

Both commands analyze many proteins under one calibration and write the
per-site CSV report. A proteome run that fails or is interrupted writes
nothing.
"""

import logging
import signal
import sys
import threading
from pathlib import Path

import click

from ptm_coloc.api_clients import UniProtClient
from ptm_coloc.batch import BatchPipeline, BatchProgress
from ptm_coloc.cli.params_cmd import resolve_calibration
from ptm_coloc.config.loader import load_config, load_config_with_overrides
from ptm_coloc.exceptions import BatchAborted, BatchCancelled
from ptm_coloc.output import write_site_report
from ptm_coloc.sources import read_fasta

logger = logging.getLogger(__name__)


def _echo_progress(progress: BatchProgress) -> None:
    click.echo(
        f"  [{progress.percent:5.1f}%] {progress.processed}/{progress.estimated_total} "
        f"proteins ({progress.skipped} skipped, {progress.pages} pages)"
    )


@click.command('proteome')
@click.option(
    '--organism',
    default=None,
    help='NCBI taxonomy ID (default: batch.organism_id from config)'
)
@click.option(
    '--page-size',
    type=int,
    default=None,
    help='Proteins per page (default: batch.page_size from config)'
)
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: {data_dir}/proteome)'
)
@click.option(
    '--params',
    'params_file',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Calibration parameter file (missing keys keep config values)'
)
@click.pass_context
def proteome(ctx, organism, page_size, output_dir, params_file):
    """Analyze every reviewed UniProt entry of an organism.

    Pages through UniProt with cursor pagination, annotates every N-linked,
    O-linked and phospho site, and writes proteome_analysis_results.csv.
    Press Ctrl-C to cancel after the current page; nothing is written.

    Examples:

        ptm-coloc proteome

        ptm-coloc proteome --organism 10090 --page-size 100
    """
    config_path = ctx.obj['config_path']
    config = load_config_with_overrides(config_path, {
        'batch.organism_id': organism,
        'batch.page_size': page_size,
    })
    calibration = resolve_calibration(config, params_file)
    organism_id = config.batch.organism_id

    click.echo(click.style("=== Whole Proteome Analysis ===", bold=True))
    click.echo(f"Organism: {organism_id}")
    click.echo(f"Page Size: {config.batch.page_size}")
    click.echo()

    pipeline = BatchPipeline.from_config(
        config,
        source=UniProtClient.from_config(config),
        params=calibration,
    )

    cancel_event = threading.Event()

    def _request_cancel(signum, frame):
        click.echo(click.style("Cancelling after current page...", fg='yellow'), err=True)
        cancel_event.set()

    previous_handler = signal.signal(signal.SIGINT, _request_cancel)
    try:
        result = pipeline.run(
            organism_id,
            cancel_event=cancel_event,
            on_progress=_echo_progress,
        )
    except BatchCancelled as e:
        click.echo(click.style(f"Cancelled: {e}. No report written.", fg='yellow'), err=True)
        sys.exit(1)
    except BatchAborted as e:
        click.echo(click.style(f"Error during bulk analysis: {e}", fg='red'), err=True)
        logger.exception("Batch run aborted")
        sys.exit(1)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if output_dir is None:
        output_dir = Path(config.data_dir) / "proteome"

    paths = write_site_report(
        result.rows,
        output_dir,
        params=calibration,
        extra={
            "organism_id": organism_id,
            "proteins_processed": result.processed,
            "proteins_skipped": result.skipped,
            "pages": result.pages,
        },
    )

    click.echo()
    click.echo(click.style("=== Summary ===", bold=True))
    click.echo(f"Proteins processed: {result.processed} ({result.skipped} skipped)")
    click.echo(f"Site rows: {len(result.rows)}")
    click.echo(f"Elapsed: {result.elapsed_seconds:.1f}s")
    click.echo(click.style(f"Report: {paths['csv']}", fg='green'))


@click.command('fasta')
@click.argument('fasta_file', type=click.Path(exists=True, path_type=Path))
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: {data_dir}/fasta)'
)
@click.option(
    '--params',
    'params_file',
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help='Calibration parameter file (missing keys keep config values)'
)
@click.pass_context
def fasta(ctx, fasta_file, output_dir, params_file):
    """Analyze sequences in FASTA_FILE using motif-predicted sites.

    N-linked sites come from N-X-[S/T] sequons and every cysteine counts as
    a disulfide site; no disulfide ranges are known for FASTA input.

    Examples:

        ptm-coloc fasta my_proteins.fasta
    """
    config_path = ctx.obj['config_path']
    config = load_config(config_path)
    calibration = resolve_calibration(config, params_file)

    click.echo(f"Reading {fasta_file}...")
    proteins = read_fasta(fasta_file)
    if not proteins:
        click.echo(click.style("No sequences found in FASTA file.", fg='red'), err=True)
        sys.exit(1)
    click.echo(f"  {len(proteins)} sequences")

    pipeline = BatchPipeline.from_config(config, source=None, params=calibration)
    result = pipeline.run_proteins(proteins, on_progress=_echo_progress)

    if output_dir is None:
        output_dir = Path(config.data_dir) / "fasta"

    paths = write_site_report(
        result.rows,
        output_dir,
        params=calibration,
        extra={
            "fasta_file": str(fasta_file),
            "proteins_processed": result.processed,
            "proteins_skipped": result.skipped,
        },
    )

    click.echo(f"Site rows: {len(result.rows)}")
    click.echo(click.style(f"Report: {paths['csv']}", fg='green'))
