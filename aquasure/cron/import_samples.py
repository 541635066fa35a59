"""
import_samples.py
Bulk-import water samples from a CSV file (upload template columns) into the
`samples` table. Malformed rows are reported and skipped.

Usage:
    python -m aquasure.cron.import_samples samples.csv --fill-missing
"""

import logging
import sys

import click

from aquasure import config
from aquasure.hmpi.clean_data import read_samples_csv
from aquasure.hmpi.errors import InvalidInputError
from aquasure.supabase_db import SupabaseRepository

logger = logging.getLogger(__name__)


def run_import(csv_path, repository, fill_missing=False, dry_run=False):
    samples, rejected = read_samples_csv(csv_path, fill_missing=fill_missing)
    if samples and not dry_run:
        repository.insert_samples(samples)
    return samples, rejected


@click.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--fill-missing",
    is_flag=True,
    help="fill absent Si/Ii/Mi with 0/1/1 and absent dates with today",
)
@click.option("--dry-run", is_flag=True, help="validate only, do not insert")
def main(csv_path, fill_missing, dry_run):
    """Validate CSV_PATH and insert its samples."""
    logging.basicConfig(level=config.LOG_LEVEL)
    try:
        samples, rejected = run_import(
            csv_path, SupabaseRepository(), fill_missing=fill_missing, dry_run=dry_run
        )
    except InvalidInputError as e:
        click.echo(f"{csv_path}: {e.reason}", err=True)
        sys.exit(1)

    for r in rejected:
        click.echo(f"row {r.row}: {r.sample_id or '?'}: {r.reason}", err=True)
    action = "Validated" if dry_run else "Inserted"
    click.echo(f"{action} {len(samples)} samples, rejected {len(rejected)} rows")

    if not samples and rejected:
        sys.exit(1)


if __name__ == "__main__":
    main()
