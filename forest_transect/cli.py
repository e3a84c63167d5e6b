#!/usr/bin/env python
"""
Command line interface for PyForest Transect.
"""

import os
import json
import click
import logging

from .config_options import TransectOptions
from .processor import process_tls
from .utils import init_logger


def load_config(config_path):
    """Load configuration from JSON file."""
    if config_path:
        with open(config_path, 'r') as f:
            return json.load(f)
    else:
        # Default configuration
        default_config_path = os.path.join(
            os.path.dirname(os.path.abspath(__file__)),
            "config",
            "default_config.json"
        )
        if os.path.exists(default_config_path):
            with open(default_config_path, 'r') as f:
                return json.load(f)
        else:
            return {"processing": {"output_dir": "output"}, "options": {}}


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output.')
def cli(verbose):
    """PyForest Transect - Canopy structural complexity from TLS transects."""
    log_level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--slice', '-s', 'slice_index', type=int, required=True, help='Scan line (x value) to process.')
@click.option('--pavd', is_flag=True, help='Also plot the plant area volume density profile.')
@click.option('--hist', is_flag=True, help='Add a VAI histogram to the PAVD plot.')
@click.option('--no-save', is_flag=True, help='Compute only, write nothing to disk.')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False), help='Directory for the output files.')
@click.option('--config', '-c', type=click.Path(exists=True), help='Path to configuration file.')
def process(input_path, slice_index, pavd, hist, no_save, output_dir, config):
    """Process slice SLICE of the TLS scan in INPUT_PATH."""
    config_dict = load_config(config)

    processing_params = config_dict.get('processing', {})
    output_dir = output_dir or processing_params.get('output_dir', 'output')
    pavd = pavd or processing_params.get('pavd', False)
    hist = hist or processing_params.get('hist', False)
    save_output = not no_save

    try:
        options = TransectOptions.from_dict(config_dict.get('options', {}))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--config')

    if save_output and processing_params.get('log_to_file', False):
        init_logger(output_dir, level=logging.getLogger().level or logging.INFO)

    click.echo(f"Processing slice {slice_index} of {input_path}")

    result = process_tls(
        input_path,
        slice_index,
        pavd=pavd,
        hist=hist,
        save_output=save_output,
        output_dir=output_dir,
        options=options,
    )

    for name, value in result.variables.items():
        click.echo(f"{name}: {value}")

    if result.paths is not None:
        click.echo(f"Output written to {result.paths.output_dir}")
    click.echo("Processing complete!")


if __name__ == '__main__':
    cli()
