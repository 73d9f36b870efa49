from __future__ import annotations

import logging
from pathlib import Path

from .core.models import Service, ServiceState

logger = logging.getLogger(__name__)


def service_dir(service: Service | str, root: Path) -> Path:
    return root / Service(service).value


def probe_service(service: Service | str, root: Path) -> ServiceState:
    """Report whether ``service`` still has to be scaffolded under ``root``."""
    path = service_dir(service, root)
    state = (
        ServiceState.EXISTS_ALREADY if path.is_dir() else ServiceState.NEEDS_SCAFFOLD
    )
    logger.debug(f"{path}: {state.value}")
    return state


def probe_all(root: Path) -> dict[Service, ServiceState]:
    return {service: probe_service(service, root) for service in Service}
