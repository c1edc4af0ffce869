# =====================================
# securetrack/events.py
# =====================================
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .database import commit_or_rollback
from .exceptions import ValidationError
from .models import AppEvent, EventType, EventSeverity
from .scheduler import now

logger = logging.getLogger(__name__)


def record_event(db: Session, type: EventType, description: str, user: str,
                 status: EventSeverity = EventSeverity.INFO, details: Optional[str] = None,
                 target_id: Optional[str] = None, timestamp: Optional[datetime] = None) -> AppEvent:
    """Ajoute une entrée au journal (jamais modifiée ni supprimée ensuite)"""
    if not (description or "").strip() or not (user or "").strip():
        raise ValidationError("Descrição e usuário são obrigatórios.")

    entry = AppEvent(
        timestamp=timestamp or now(),
        type=type,
        description=description,
        user=user,
        status=status,
        details=details,
        target_id=target_id,
    )
    db.add(entry)
    commit_or_rollback(db)
    db.refresh(entry)
    logger.info(f"[{entry.status.value}] {entry.type.value}: {entry.description}")
    return entry


def list_events(db: Session):
    """Journal, le plus récent en premier"""
    return db.query(AppEvent).order_by(AppEvent.timestamp.desc(), AppEvent.id.desc()).all()
