"""Categorization rule learning."""

import logging
from datetime import datetime, UTC
from decimal import Decimal

from smallbooks.database.base import Database, UnitOfWork
from smallbooks.domain.entities import CategorizationRule
from smallbooks.domain.errors import ValidationError

logger = logging.getLogger(__name__)

INITIAL_CONFIDENCE = Decimal("0.70")
CONFIDENCE_STEP = Decimal("0.05")
MAX_CONFIDENCE = Decimal("1.0")


def normalize_pattern(description: str) -> str:
    """Rule pattern for a description: trimmed and lower-cased."""
    return description.strip().lower()


class LearningService:
    """Service that learns categorization rules from confirmed choices."""

    def __init__(self, db: Database):
        """Initialize learning service.

        Args:
            db: Database instance
        """
        self.db = db

    def learn(self, description: str, account_id: int, user_id: str, uow: UnitOfWork) -> int:
        """Record that the user filed a description under an account.

        The first confirmation of a (pattern, account) pair creates a rule at
        0.70 confidence; each repeat bumps its match count and adds 0.05
        confidence, capped at 1.0. There is never more than one rule per
        (user, pattern, account).

        Args:
            description: Transaction description as confirmed
            account_id: Chosen ledger account
            user_id: Owning user
            uow: Unit of work the update belongs to

        Returns:
            Rule ID

        Raises:
            ValidationError: If the description is empty
        """
        pattern = normalize_pattern(description)
        if not pattern:
            raise ValidationError("Cannot learn a rule from an empty description")

        now = datetime.now(UTC)
        existing = self.db.get_rule(user_id, pattern, account_id, uow=uow)

        if existing is not None:
            confidence = min(MAX_CONFIDENCE, existing.confidence + CONFIDENCE_STEP)
            self.db.update_rule(
                uow,
                rule_id=existing.id,
                confidence=confidence,
                match_count=existing.match_count + 1,
                last_matched=now,
            )
            logger.debug(
                "Rule %s for %r now at %s after %d matches",
                existing.id,
                pattern,
                confidence,
                existing.match_count + 1,
            )
            return existing.id

        rule_id = self.db.create_rule(
            uow,
            user_id=user_id,
            pattern=pattern,
            account_id=account_id,
            confidence=INITIAL_CONFIDENCE,
            match_count=1,
            last_matched=now,
        )
        logger.debug("Learned rule %s: %r -> account %s", rule_id, pattern, account_id)
        return rule_id

    def list_rules(self, user_id: str) -> list[CategorizationRule]:
        """List a user's learned rules, strongest first."""
        return self.db.list_rules(user_id)
