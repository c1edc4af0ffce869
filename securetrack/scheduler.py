# =====================================
# securetrack/scheduler.py
# =====================================
from datetime import datetime, date, time
import logging
import os
import time as _time
from typing import Callable, Optional, Union

import pytz
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"


def get_timezone():
    """Fuseau horaire de l'application (APP_TIMEZONE)"""
    name = os.getenv("APP_TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Fuseau horaire inconnu '{name}', utilisation de {DEFAULT_TIMEZONE}")
        return pytz.timezone(DEFAULT_TIMEZONE)


def now() -> datetime:
    """Heure locale de l'application, sans tzinfo (format stocké en base)"""
    return datetime.now(get_timezone()).replace(tzinfo=None)


def today() -> date:
    return now().date()


def to_local(value: Union[datetime, date], end_of_day: bool = False) -> datetime:
    """Ramène une date ou un datetime à un instant local comparable.

    Une date seule vaut 00:00 du jour, ou la fin du jour si end_of_day.
    Un datetime avec tzinfo est converti dans le fuseau de l'application ;
    un datetime naïf est considéré comme déjà local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(get_timezone()).replace(tzinfo=None)
        return value
    if end_of_day:
        return datetime.combine(value, time.max)
    return datetime.combine(value, time.min)


class SyncIndicator:
    """Indicateur visuel "Sincronizando..." du tableau de bord.

    Purement cosmétique : aucun thread, aucun verrou. L'état est calculé à
    partir de l'horloge à chaque lecture.
    """

    def __init__(self, interval: float = 15.0, pulse: float = 0.8,
                 mutation_pulse: float = 0.5, clock: Optional[Callable[[], float]] = None):
        self.interval = interval
        self.pulse = pulse
        self.mutation_pulse = mutation_pulse
        self._clock = clock or _time.monotonic
        self.started_at = self._clock()
        self.last_mutation_at: Optional[float] = None

    def mark_mutation(self):
        """Déclenche un bref affichage après une modification"""
        self.last_mutation_at = self._clock()

    def is_syncing(self) -> bool:
        current = self._clock()
        if self.last_mutation_at is not None and current - self.last_mutation_at < self.mutation_pulse:
            return True
        elapsed = current - self.started_at
        if elapsed < self.interval:
            return False
        return (elapsed % self.interval) < self.pulse

    def status(self) -> dict:
        return {
            "syncing": self.is_syncing(),
            "last_update": now().isoformat(timespec="seconds"),
        }


def add_one_year(value: date) -> date:
    """Même jour l'année suivante (29/02 -> 28/02)"""
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        return value.replace(year=value.year + 1, day=28)
