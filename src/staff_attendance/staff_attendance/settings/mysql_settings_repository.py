from __future__ import annotations

import json
from dataclasses import asdict
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime, load_json
from .model import OrganizationSettings
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_organization(self, organization_id: int) -> Optional[OrganizationSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organization_id, attendance_settings, lunch_settings, break_settings, updated_at, updated_by
                FROM organization_settings
                WHERE organization_id=%s
                """,
                (int(organization_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return OrganizationSettings.from_dicts(
                int(r["organization_id"]),
                attendance=load_json(r.get("attendance_settings"), {}),
                lunch=load_json(r.get("lunch_settings"), {}),
                breaks=load_json(r.get("break_settings"), {}),
                updated_at=from_db_datetime(r.get("updated_at")),
                updated_by=r.get("updated_by"),
            )

    def save(self, settings: OrganizationSettings, *, updated_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO organization_settings(
                    organization_id, attendance_settings, lunch_settings, break_settings, updated_by
                )
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_settings=VALUES(attendance_settings),
                    lunch_settings=VALUES(lunch_settings),
                    break_settings=VALUES(break_settings),
                    updated_by=VALUES(updated_by),
                    updated_at=UTC_TIMESTAMP()
                """,
                (
                    int(settings.organization_id),
                    json.dumps(asdict(settings.attendance)),
                    json.dumps(asdict(settings.lunch)),
                    json.dumps(asdict(settings.breaks)),
                    int(updated_by),
                ),
            )
            return cur.rowcount > 0
