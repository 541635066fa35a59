"""
evaluate_alerts.py
Evaluate stored samples against WHO/BBI standards and project thresholds and
insert any alert that is not already open.

Usage:
    python -m aquasure.cron.evaluate_alerts --project p1
"""

import logging

import click

from aquasure import config
from aquasure.hmpi.alerts import evaluate_batch
from aquasure.hmpi.standards import STANDARDS
from aquasure.supabase_db import SupabaseRepository

logger = logging.getLogger(__name__)


def run_evaluation(repository, project_id=None, caution_threshold=None):
    """Returns (inserted alerts, rejections)."""
    existing = {
        (a.project_id, a.sample_id, a.severity)
        for a in repository.list_alerts(project_id=project_id)
    }
    alerts, rejected = evaluate_batch(
        repository.list_samples(project_id=project_id),
        repository.list_projects(),
        STANDARDS,
        caution_threshold=caution_threshold,
    )
    fresh = [a for a in alerts if (a.project_id, a.sample_id, a.severity) not in existing]
    repository.insert_alerts(fresh)
    return fresh, rejected


@click.command()
@click.option("-p", "--project", "project_id", default=None, help="limit to one project id")
def main(project_id):
    """Generate alerts for stored samples."""
    logging.basicConfig(level=config.LOG_LEVEL)
    alerts, rejected = run_evaluation(
        SupabaseRepository(), project_id, config.HMPI_CAUTION_THRESHOLD
    )
    for alert in alerts:
        click.echo(f"[{alert.severity.value}] {alert.message}")
    click.echo(f"Created {len(alerts)} alerts, skipped {len(rejected)} samples")


if __name__ == "__main__":
    main()
