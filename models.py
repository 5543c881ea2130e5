"""Data records and SQLAlchemy history models for iLO Admin"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

STATUS_SUCCESS = "SUCCESS"
STATUS_NOT_ATTEMPTED = "NOT_ATTEMPTED"
STATUS_DRYRUN = "DRYRUN"
STATUS_FAILED = "FAILED"


@dataclass(frozen=True)
class Credential:
    username: str
    password: str

    def __repr__(self):
        return f"Credential(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ManagementTarget:
    address: str
    credential: Credential
    label: Optional[str] = None

    @property
    def hostname(self) -> str:
        return self.label or self.address


@dataclass(frozen=True)
class ResultRecord:
    """Outcome of one operation on one host"""

    hostname: str
    status: str
    value: Any = None
    message_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, hostname: str, exc: Exception) -> "ResultRecord":
        return cls(
            hostname=hostname,
            status=STATUS_FAILED,
            message_id=getattr(exc, "message_id", None),
            error=str(exc) or exc.__class__.__name__,
        )

    @property
    def ok(self) -> bool:
        return self.status != STATUS_FAILED

    def as_dict(self) -> dict:
        return asdict(self)


Base = declarative_base()


class BatchRun(Base):
    __tablename__ = "batch_runs"
    id = Column(Integer, primary_key=True)
    operation = Column(String, nullable=False)
    started_at = Column(DateTime, default=datetime.utcnow)
    finished_at = Column(DateTime, default=datetime.utcnow)
    host_count = Column(Integer, default=0)
    failed_count = Column(Integer, default=0)
    results = relationship(
        "HostResult", back_populates="run", cascade="all, delete-orphan", order_by="HostResult.id"
    )


class HostResult(Base):
    __tablename__ = "host_results"
    id = Column(Integer, primary_key=True)
    run_id = Column(Integer, ForeignKey("batch_runs.id"), nullable=False)
    run = relationship("BatchRun", back_populates="results")
    hostname = Column(String, nullable=False)
    status = Column(String, nullable=False)  # SUCCESS, NOT_ATTEMPTED, DRYRUN, FAILED
    value = Column(String, nullable=True)
    message_id = Column(String, nullable=True)
    error = Column(String, nullable=True)
