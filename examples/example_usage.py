"""Example: use the service layer directly (no Flask).

Controllers stay thin; the rules live in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.roster_attendance.roster_attendance.container import build_container


def main():
    roll_no = sys.argv[1] if len(sys.argv) > 1 else "R1"
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    summary = container.report_service.student_summary(roll_no)
    print(summary.to_dict())


if __name__ == "__main__":
    main()
