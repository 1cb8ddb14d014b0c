"""Batch runner: scan once, then transition each eligible asset."""
import logging
import time
from dataclasses import asdict, dataclass, field

from django.db import InterfaceError
from django.utils import timezone

from .config import load_rules
from .scanner import find_eligible_assets
from .transitions import execute_transition

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    pass_name: str
    ok: bool = True
    processed: int = 0
    success: int = 0
    failed: int = 0
    errors: list = field(default_factory=list)
    transitions: list = field(default_factory=list)
    duration: float = 0.0
    message: str = ''

    def as_dict(self):
        return asdict(self)


def run_pass(automation_pass, rules=None, now=None):
    """
    Run one automation pass over every eligible asset.

    Scan failures propagate. A failure on a single asset is rolled back,
    recorded in ``errors`` and does not stop the batch.
    """
    started = time.monotonic()
    now = now or timezone.now()
    rules = rules or load_rules(automation_pass.name)

    eligible = find_eligible_assets(automation_pass, rules, timezone.localdate(now))
    summary = RunSummary(pass_name=automation_pass.name)

    if not eligible:
        summary.message = 'No assets eligible'
        summary.duration = round(time.monotonic() - started, 3)
        logger.info('%s: no eligible assets', automation_pass.name)
        return summary

    logger.info('%s: processing %d assets', automation_pass.name, len(eligible))
    for asset in eligible:
        summary.processed += 1
        try:
            result = execute_transition(automation_pass, asset, rules, now=now)
        except InterfaceError:
            # Connection is gone; nothing further can be written.
            raise
        except Exception as exc:
            summary.failed += 1
            summary.errors.append({'asset_id': asset.asset_id, 'error': str(exc)})
            logger.warning('%s: failed to process %s: %s', automation_pass.name, asset.asset_id, exc)
        else:
            summary.success += 1
            summary.transitions.append(result.as_dict())

    summary.duration = round(time.monotonic() - started, 3)
    summary.message = f'Processed {summary.processed} assets: {summary.success} succeeded, {summary.failed} failed'
    logger.info('%s: %s in %.3fs', automation_pass.name, summary.message, summary.duration)
    return summary
