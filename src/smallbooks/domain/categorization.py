"""Account suggestions for imported bank transactions.

Suggestions are tried in three tiers, first match wins:

1. a learned categorization rule for the user whose pattern occurs in the
   description,
2. the account most often used by the user's past posted transactions with a
   similar description,
3. the first active revenue (inflow) or expense (outflow) account by code.

Suggesting never writes anything.
"""

import logging
from collections import Counter
from decimal import Decimal
from typing import Iterable, Iterator, Optional

from smallbooks.database.base import Database
from smallbooks.domain.entities import (
    AccountType,
    Suggestion,
    TransactionCandidate,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10
MIN_KEYWORD_LENGTH = 4
DEFAULT_CONFIDENCE = 0.3
DEFAULT_REASON = "Default suggestion based on transaction type"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def extract_keywords(description: str) -> list[str]:
    """Lower-cased whitespace tokens longer than three characters."""
    return [word for word in description.lower().split() if len(word) >= MIN_KEYWORD_LENGTH]


class CategorizationService:
    """Service for suggesting ledger accounts for transaction candidates."""

    def __init__(self, db: Database):
        """Initialize categorization service.

        Args:
            db: Database instance
        """
        self.db = db

    def suggest(
        self, candidate: TransactionCandidate, user_id: str, bank_account_id: Optional[int] = None
    ) -> Suggestion:
        """Suggest a ledger account for one candidate.

        Args:
            candidate: Parsed transaction candidate
            user_id: Owning user; rules and history are per user
            bank_account_id: Bank account the statement belongs to

        Returns:
            Suggestion with account, confidence in [0, 1] and a reason
        """
        suggestion = (
            self._suggest_from_rules(candidate.description, user_id)
            or self._suggest_from_history(candidate.description, user_id)
            or self._suggest_default(candidate.amount)
        )
        logger.debug(
            "Suggested %s for %r (%.2f, %s)",
            suggestion.account_name,
            candidate.description,
            suggestion.confidence,
            suggestion.reason,
        )
        return suggestion

    def suggest_all(
        self,
        candidates: Iterable[TransactionCandidate],
        user_id: str,
        bank_account_id: Optional[int] = None,
    ) -> Iterator[tuple[TransactionCandidate, Suggestion]]:
        """Yield (candidate, suggestion) pairs one at a time, in input order."""
        for candidate in candidates:
            yield candidate, self.suggest(candidate, user_id, bank_account_id)

    def _suggest_from_rules(self, description: str, user_id: str) -> Optional[Suggestion]:
        """Tier 1: strongest learned rule whose pattern occurs in the description."""
        rules = self.db.find_matching_rules(user_id, description.lower())
        for rule in rules:
            account = self.db.get_account(rule.account_id)
            if account is None:
                continue
            return Suggestion(
                account_id=account.id,
                account_name=account.name,
                confidence=float(rule.confidence),
                reason=f"Based on {_plural(rule.match_count, 'similar transaction')}",
            )
        return None

    def _suggest_from_history(self, description: str, user_id: str) -> Optional[Suggestion]:
        """Tier 2: most used non-asset account among similar past transactions."""
        keywords = extract_keywords(description)
        if not keywords:
            return None

        transactions = self.db.find_similar_transactions(user_id, keywords[0], limit=HISTORY_LIMIT)
        if not transactions:
            return None

        accounts = {}
        frequency: Counter[int] = Counter()
        for txn in transactions:
            for line in txn.lines:
                if line.account_id not in accounts:
                    accounts[line.account_id] = self.db.get_account(line.account_id)
                account = accounts[line.account_id]
                # Asset lines are the bank side of the posting
                if account is None or account.type == AccountType.ASSET:
                    continue
                frequency[account.id] += 1

        if not frequency:
            return None

        # Highest count wins; equal counts go to the lowest account code
        account_id, count = min(
            frequency.items(), key=lambda item: (-item[1], accounts[item[0]].code)
        )
        account = accounts[account_id]

        ratio = Decimal(count) / Decimal(len(transactions))
        confidence = min(Decimal("0.9"), Decimal("0.5") + ratio * Decimal("0.4"))

        return Suggestion(
            account_id=account.id,
            account_name=account.name,
            confidence=float(round(confidence, 4)),
            reason=f"Found {_plural(count, 'similar transaction')}",
        )

    def _suggest_default(self, amount: Decimal) -> Suggestion:
        """Tier 3: first active revenue or expense account by code."""
        account_type = AccountType.REVENUE if amount > 0 else AccountType.EXPENSE
        accounts = self.db.list_accounts(account_type=account_type, active_only=True)
        if not accounts:
            return Suggestion(
                account_id=None,
                account_name="Unknown",
                confidence=DEFAULT_CONFIDENCE,
                reason=DEFAULT_REASON,
            )
        account = accounts[0]
        return Suggestion(
            account_id=account.id,
            account_name=account.name,
            confidence=DEFAULT_CONFIDENCE,
            reason=DEFAULT_REASON,
        )
