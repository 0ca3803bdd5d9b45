"""Key/value settings with typed accessors for known keys"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from petty_cash.config import settings as app_settings
from petty_cash.domain.balances import to_money
from petty_cash.domain.exceptions import NotFound, PersistenceFailure, ValidationError
from petty_cash.domain.models import Actor
from petty_cash.domain.permissions import MANAGE_SETTINGS, require
from petty_cash.infrastructure.database.models import Setting
from petty_cash.infrastructure.database.repositories import SettingRepository

logger = logging.getLogger(__name__)

LOW_BALANCE_THRESHOLD = "low_balance_threshold"

# Known keys whose values must parse as money
MONEY_KEYS = frozenset({LOW_BALANCE_THRESHOLD})


class SettingsService:
    def __init__(self, db: Session):
        self.db = db
        self.settings = SettingRepository(db)

    def get(self, key: str) -> Setting:
        setting = self.settings.get(key)
        if setting is None:
            raise NotFound("Setting", key)
        return setting

    def set(self, actor: Actor, key: str, value: str) -> Setting:
        require(actor.role, MANAGE_SETTINGS)
        if not key or not key.strip():
            raise ValidationError("key is required")
        if value is None:
            raise ValidationError("value is required")
        if key in MONEY_KEYS:
            value = str(to_money(value, field=key))
        try:
            setting = self.settings.set_setting(key.strip(), value, actor.id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceFailure(f"Could not save setting: {e.__class__.__name__}") from e
        logger.info("Setting updated", extra={"key": key, "actor_id": actor.id})
        return setting

    def low_balance_threshold(self) -> Decimal:
        """Stored threshold, falling back to the configured default"""
        stored: Optional[str] = self.settings.get_setting(LOW_BALANCE_THRESHOLD)
        if stored is None:
            return app_settings.low_balance_threshold
        return to_money(stored, field=LOW_BALANCE_THRESHOLD)
