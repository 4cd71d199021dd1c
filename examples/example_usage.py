"""Example: drive the attendance service directly (no Flask).

Controllers are a thin layer; the session/break rules live in the service.
"""

import importlib

from config import get_settings_module

from shift_accounting.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    service = container.attendance_service

    service.start_session("demo-user")
    service.start_break("demo-user", reason="Lunch")
    print("break seconds:", service.end_break("demo-user"))
    closed = service.end_session("demo-user")
    print(closed.to_dict())
    print(service.get_status("demo-user").to_dict())


if __name__ == "__main__":
    main()
