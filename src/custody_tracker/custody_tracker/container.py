from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditLogRepository
from .audit.repository import AuditLogRepository
from .audit.service import AuditService
from .common.datetime_utils import now_utc
from .common.locks import KeyedLock
from .core import constants
from .database.connection import DatabaseConnection, DBConfig
from .events.flags.engine import SuspiciousFlagEngine
from .events.flags.factory import SuspiciousRuleFactory
from .events.mysql_event_repository import MySQLTaskEventRepository
from .events.policy import EventSequencePolicy
from .events.repository import TaskEventRepository
from .events.service import EventIngestService
from .storage.image_store import ImageStore, LocalImageStore
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .tasks.state_machine import TaskStateMachine


@dataclass(frozen=True)
class ServiceOptions:
    default_geofence_radius: int = constants.DEFAULT_GEOFENCE_RADIUS_METERS
    suspicious_grace_minutes: int = constants.DEFAULT_SUSPICIOUS_GRACE_MINUTES
    expected_travel_minutes: int = constants.DEFAULT_EXPECTED_TRAVEL_MINUTES
    max_image_bytes: int = constants.MAX_IMAGE_BYTES
    lock_timeout_seconds: float = constants.DEFAULT_LOCK_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls, settings: Any) -> "ServiceOptions":
        return cls(
            default_geofence_radius=int(getattr(settings, "DEFAULT_GEOFENCE_RADIUS_METERS", cls.default_geofence_radius)),
            suspicious_grace_minutes=int(getattr(settings, "SUSPICIOUS_GRACE_MINUTES", cls.suspicious_grace_minutes)),
            expected_travel_minutes=int(getattr(settings, "DEFAULT_EXPECTED_TRAVEL_MINUTES", cls.expected_travel_minutes)),
            max_image_bytes=int(getattr(settings, "MAX_IMAGE_BYTES", cls.max_image_bytes)),
            lock_timeout_seconds=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", cls.lock_timeout_seconds)),
        )


@dataclass(frozen=True)
class Container:
    options: ServiceOptions

    tasks_repo: TaskRepository
    events_repo: TaskEventRepository
    attendance_repo: AttendanceRepository
    audit_repo: AuditLogRepository
    image_store: ImageStore

    audit_service: AuditService
    task_service: TaskService
    event_service: EventIngestService
    attendance_service: AttendanceService


def wire_container(
    *,
    tasks_repo: TaskRepository,
    events_repo: TaskEventRepository,
    attendance_repo: AttendanceRepository,
    audit_repo: AuditLogRepository,
    image_store: ImageStore,
    options: ServiceOptions | None = None,
    clock=now_utc,
) -> Container:
    options = options or ServiceOptions()

    policy = EventSequencePolicy()
    state_machine = TaskStateMachine(policy)
    rules = SuspiciousRuleFactory(
        grace_minutes=options.suspicious_grace_minutes,
        expected_travel_minutes=options.expected_travel_minutes,
    ).build()

    audit_service = AuditService(audit_repo, clock=clock)
    task_service = TaskService(tasks_repo, clock=clock)
    event_service = EventIngestService(
        task_service,
        events_repo,
        image_store,
        audit_service,
        policy=policy,
        state_machine=state_machine,
        flag_engine=SuspiciousFlagEngine(state_machine, rules),
        locks=KeyedLock(timeout=options.lock_timeout_seconds),
        clock=clock,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        task_service,
        image_store,
        audit_service,
        default_geofence_radius=options.default_geofence_radius,
        locks=KeyedLock(timeout=options.lock_timeout_seconds),
        clock=clock,
    )

    return Container(
        options=options,
        tasks_repo=tasks_repo,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        audit_repo=audit_repo,
        image_store=image_store,
        audit_service=audit_service,
        task_service=task_service,
        event_service=event_service,
        attendance_service=attendance_service,
    )


def build_container(
    *,
    db_config: dict,
    upload_dir: str,
    public_upload_prefix: str = "/uploads",
    options: ServiceOptions | None = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        tasks_repo=MySQLTaskRepository(conn),
        events_repo=MySQLTaskEventRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        audit_repo=MySQLAuditLogRepository(conn),
        image_store=LocalImageStore(upload_dir, public_prefix=public_upload_prefix),
        options=options,
    )
