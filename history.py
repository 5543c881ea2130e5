"""Persist batch results to the local SQLite history database"""

import json
import logging
from datetime import datetime
from typing import Iterable, List

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, selectinload

import config
from models import Base, BatchRun, HostResult, ResultRecord

logger = logging.getLogger("ilo_admin")


def get_engine(db_path: str = None):
    return create_engine(f"sqlite:///{db_path or config.DB_PATH}")


def init_db(engine) -> None:
    Base.metadata.create_all(engine)


def _value_text(value):
    if value is None or isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, default=str)


def record_batch(engine, operation: str, records: Iterable[ResultRecord], started_at: datetime = None) -> int:
    """Store one batch run with its per-host results; returns the run id."""
    records = list(records)
    run = BatchRun(
        operation=operation,
        started_at=started_at or datetime.utcnow(),
        finished_at=datetime.utcnow(),
        host_count=len(records),
        failed_count=sum(1 for r in records if not r.ok),
    )
    run.results = [
        HostResult(
            hostname=r.hostname,
            status=r.status,
            value=_value_text(r.value),
            message_id=r.message_id,
            error=r.error,
        )
        for r in records
    ]
    with Session(engine) as session, session.begin():
        session.add(run)
        session.flush()
        run_id = run.id
    logger.info("Recorded %s run %s (%d hosts)", operation, run_id, len(records))
    return run_id


def recent_runs(engine, limit: int = 10) -> List[dict]:
    """Most recent runs first, each with its host results."""
    stmt = (
        select(BatchRun)
        .options(selectinload(BatchRun.results))
        .order_by(BatchRun.started_at.desc(), BatchRun.id.desc())
        .limit(limit)
    )
    with Session(engine) as session:
        return [
            {
                "id": run.id,
                "operation": run.operation,
                "started_at": run.started_at.isoformat(),
                "finished_at": run.finished_at.isoformat() if run.finished_at else None,
                "host_count": run.host_count,
                "failed_count": run.failed_count,
                "results": [
                    {"hostname": r.hostname, "status": r.status, "value": r.value,
                     "message_id": r.message_id, "error": r.error}
                    for r in run.results
                ],
            }
            for run in session.scalars(stmt)
        ]
