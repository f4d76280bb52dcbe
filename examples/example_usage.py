"""Example: drive the org chart editor through the service layer (no Flask).

Controllers are a thin layer; the editing rules live in the hierarchy engine.
"""

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "org_hierarchy"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from org_hierarchy.container import build_container
from org_hierarchy.core.enums import Role
from org_hierarchy.core.exceptions import ValidationError

logger = logging.getLogger("example_usage")


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    service = container.org_chart_service

    chart = service.get_org_chart()
    logger.info("%d employees over %d level(s)", chart["totalEmployees"], chart["hierarchyLevels"])

    service.enter_edit(current_role=Role.ADMIN, session_key="demo")
    service.move(current_role=Role.ADMIN, session_key="demo", employee_id="8", manager_id="3")
    try:
        # The CEO cannot report to one of their own reports.
        service.move(current_role=Role.ADMIN, session_key="demo", employee_id="1", manager_id="5")
    except ValidationError as e:
        logger.info("Rejected: %s", e)

    logger.info("Pending: %s", service.snapshot(session_key="demo")["pendingChanges"])
    service.exit_edit(session_key="demo", discard=True)


if __name__ == "__main__":
    main()
