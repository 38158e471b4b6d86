#!/usr/bin/env python3
"""Validate local reservation-service environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from datetime import datetime, timedelta
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app import build_allocation_service
from backend.repository.data_repository import DataRepository
from backend.services.moderation_service import ModerationService
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="rooms-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "rooms_validation.db",
            storage_backend="sqlite",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except RuntimeError as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Default room catalog
        try:
            repository.seed_default_rooms()
            room_count = len(repository.list_rooms())
            if room_count != 5:
                raise RuntimeError(f"expected 5 rooms, got {room_count}")
            ok, line = _print_result("Room catalog: 5 rooms", True)
        except RuntimeError as exc:
            ok, line = _print_result("Room catalog", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Request -> approve round trip
        try:
            allocation = build_allocation_service(validation_settings, repository)
            moderation = ModerationService(allocation)
            start = (datetime.now() + timedelta(days=2)).replace(
                hour=validation_settings.open_hour, minute=0, second=0, microsecond=0
            )
            reservation = allocation.create_reservation(
                "env-check", "Environment Check", "room-a", start, start + timedelta(hours=1)
            )
            moderation.approve(reservation.reservation_id)
            free_slots = sum(
                1 for slot in allocation.get_available_slots("room-a", start.date()) if slot.is_available
            )
            ok, line = _print_result(
                "Booking round trip",
                True,
                f": {free_slots} free slots after approval",
            )
        except Exception as exc:
            ok, line = _print_result("Booking round trip", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Reservation Service Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
