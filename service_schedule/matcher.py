"""Select the winning schedule rule per service type for a vehicle."""

import logging
from typing import Dict, Iterable, List

from .rule import ScheduleRule
from .service_definition import ServiceDefinition
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


def match_rules(
    vehicle: Vehicle,
    rules: Iterable[ScheduleRule],
    definitions: Iterable[ServiceDefinition],
) -> List[ScheduleRule]:
    """
    Return one rule per applicable service definition.

    Rules pointing at a missing or inactive service definition are skipped.
    Candidates are ordered by priority (highest first) with rule id as a
    tie-breaker, and the first rule seen for each service definition wins.
    A make+model rule is configured with a higher priority than make-only or
    drive-type rules, so highest priority is also the most specific.
    """
    active: Dict[str, ServiceDefinition] = {
        d.id: d for d in definitions if d.is_active
    }
    candidates = [
        r for r in rules if r.service_definition_id in active and r.matches(vehicle)
    ]
    candidates.sort(key=lambda r: (-r.priority, r.id))

    seen = set()
    winners = []
    for rule in candidates:
        if rule.service_definition_id in seen:
            continue
        seen.add(rule.service_definition_id)
        winners.append(rule)

    logger.debug(
        "Matched %d of %d candidate rules for %s",
        len(winners),
        len(candidates),
        vehicle.name,
    )
    return winners
