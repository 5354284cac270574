from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from verifier.core.errors import NotFoundError, StoreError, TerminalStatusError
from verifier.models.verification_request import VerificationRequestRecord
from verifier.services.types import (
    TERMINAL_STATUSES,
    Channel,
    VerificationRequest,
    VerificationStatus,
    as_utc,
    dispatch_entry_from_dict,
)

logger = logging.getLogger(__name__)


def _apply(row: VerificationRequestRecord, request: VerificationRequest) -> None:
    row.channel = request.channel.value
    row.sender = request.sender or ""
    row.recipient = request.recipient
    row.secret = request.secret
    row.secret_expiry = request.secret_expiry
    row.attempts = int(request.attempts)
    row.dispatch_log = [entry.to_dict() for entry in request.dispatch_log]
    row.status = request.status.value
    if request.created_at is not None:
        row.created_at = request.created_at
    if request.updated_at is not None:
        row.updated_at = request.updated_at


def _to_request(row: VerificationRequestRecord) -> VerificationRequest:
    return VerificationRequest(
        id=row.id,
        channel=Channel(row.channel),
        sender=row.sender or "",
        recipient=row.recipient,
        secret=row.secret,
        secret_expiry=as_utc(row.secret_expiry),
        attempts=int(row.attempts or 0),
        dispatch_log=[dispatch_entry_from_dict(item) for item in (row.dispatch_log or [])],
        status=VerificationStatus(row.status),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


class SqlAlchemyStore:
    """Relational store on top of a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def create(self, request: VerificationRequest) -> VerificationRequest:
        request_id = request.id or uuid.uuid4().hex
        row = VerificationRequestRecord(id=request_id)
        _apply(row, request)
        try:
            with self._session_factory() as db:
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_request(row)
        except SQLAlchemyError as exc:
            logger.error("verification request insert failed id=%s", request_id, exc_info=True)
            raise StoreError(f"failed to create verification request: {exc}") from exc

    def read_last_pending(self, channel: Channel, recipient: str) -> VerificationRequest:
        channel = Channel(channel)
        try:
            with self._session_factory() as db:
                row = (
                    db.query(VerificationRequestRecord)
                    .filter(
                        VerificationRequestRecord.channel == channel.value,
                        VerificationRequestRecord.recipient == recipient,
                        VerificationRequestRecord.status == VerificationStatus.PENDING.value,
                    )
                    .order_by(VerificationRequestRecord.seq.desc())
                    .first()
                )
                found = _to_request(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to read pending verification request: {exc}") from exc
        if found is None:
            raise NotFoundError(f"no pending {channel.value} verification for recipient")
        return found

    def update(self, request_id: str, request: VerificationRequest) -> VerificationRequest:
        try:
            with self._session_factory() as db:
                row = db.query(VerificationRequestRecord).filter(VerificationRequestRecord.id == request_id).first()
                if row is None:
                    raise StoreError(f"verification request {request_id} does not exist")
                if VerificationStatus(row.status) in TERMINAL_STATUSES:
                    raise TerminalStatusError(f"verification request {request_id} is already {row.status}")
                _apply(row, request)
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_request(row)
        except SQLAlchemyError as exc:
            logger.error("verification request update failed id=%s", request_id, exc_info=True)
            raise StoreError(f"failed to update verification request: {exc}") from exc

    def purge_older_than(self, cutoff: datetime) -> int:
        try:
            with self._session_factory() as db:
                deleted = (
                    db.query(VerificationRequestRecord)
                    .filter(VerificationRequestRecord.updated_at < cutoff)
                    .delete(synchronize_session=False)
                )
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to purge verification requests: {exc}") from exc
        return int(deleted)
