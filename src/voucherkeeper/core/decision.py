"""Decision tree for voucher classification (core domain).

Rules are kept as an ordered list and evaluated top to bottom; the first rule
whose predicate holds decides the outcome. The predicates overlap, so the
order is part of the behavior:

- promo language without strong voucher language is discarded before the
  sender is even considered;
- strong voucher language plus an access point is approved for approved
  senders and pending for everyone else;
- anything else is discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterable, List, Optional

from voucherkeeper.core.extractor import extract_voucher_data
from voucherkeeper.core.lexicon import (
    COUPON_PROMO_TERMS,
    HARD_SPAM_INDICATORS,
    STRONG_VOUCHER_TERMS,
    contains_any_term,
    contains_trusted_domain,
)
from voucherkeeper.core.models import Approved, Decision, Discard, ExtractedData, Message, Pending

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Signals:
    """Boolean inputs to the decision rules for one message."""

    is_approved_sender: bool
    has_url: bool
    has_trusted_voucher_domain: bool
    has_redeem_code: bool
    has_strong_voucher_word: bool
    has_coupon_promo_word: bool
    has_hard_spam_indicator: bool

    @property
    def has_access_point(self) -> bool:
        # An untrusted URL is not an access point.
        return self.has_trusted_voucher_domain or self.has_redeem_code


Outcome = Callable[[ExtractedData], Decision]


@dataclass(frozen=True)
class DecisionRule:
    """One ordered entry of the decision tree."""

    name: str
    predicate: Callable[[Signals], bool]
    outcome: Outcome


def _discard(_: ExtractedData) -> Decision:
    return Discard()


HARD_SPAM_RULE = DecisionRule(
    name="hard_spam",
    predicate=lambda s: s.has_hard_spam_indicator,
    outcome=_discard,
)

DECISION_RULES: List[DecisionRule] = [
    DecisionRule(
        name="promo_without_voucher_language",
        predicate=lambda s: s.has_coupon_promo_word and not s.has_strong_voucher_word,
        outcome=_discard,
    ),
    DecisionRule(
        name="approved_sender_with_access_point",
        predicate=lambda s: s.is_approved_sender and s.has_strong_voucher_word and s.has_access_point,
        outcome=Approved,
    ),
    DecisionRule(
        name="unknown_sender_with_access_point",
        predicate=lambda s: not s.is_approved_sender and s.has_strong_voucher_word and s.has_access_point,
        outcome=Pending,
    ),
    DecisionRule(
        name="fallback",
        predicate=lambda s: True,
        outcome=_discard,
    ),
]


def build_rules(hard_spam_filter: bool = False) -> List[DecisionRule]:
    """Return the ordered rule list, optionally led by the hard-spam filter."""

    if hard_spam_filter:
        return [HARD_SPAM_RULE, *DECISION_RULES]
    return list(DECISION_RULES)


def compute_signals(
    text: str,
    extracted: ExtractedData,
    is_approved_sender: bool,
    extra_trusted_domains: Iterable[str] = (),
) -> Signals:
    """Compute the decision inputs from the raw text and extracted fields."""

    url: Optional[str] = extracted.voucher_url
    return Signals(
        is_approved_sender=is_approved_sender,
        has_url=url is not None,
        has_trusted_voucher_domain=url is not None and contains_trusted_domain(url, extra_trusted_domains),
        has_redeem_code=extracted.redeem_code is not None,
        has_strong_voucher_word=contains_any_term(text, STRONG_VOUCHER_TERMS),
        has_coupon_promo_word=contains_any_term(text, COUPON_PROMO_TERMS),
        has_hard_spam_indicator=contains_any_term(text, HARD_SPAM_INDICATORS),
    )


def classify(
    message: Message,
    is_approved_sender: bool,
    extra_trusted_domains: Iterable[str] = (),
    *,
    hard_spam_filter: bool = False,
) -> Decision:
    """Classify one message as Approved, Pending or Discard.

    Pure and deterministic: the result depends only on the arguments and the
    built-in word banks.
    """

    extracted = extract_voucher_data(message)
    signals = compute_signals(
        message.body_text,
        extracted,
        is_approved_sender,
        tuple(extra_trusted_domains),
    )
    LOGGER.debug("Signals: %s (access_point=%s)", signals, signals.has_access_point)

    for rule in build_rules(hard_spam_filter):
        if rule.predicate(signals):
            LOGGER.debug("Rule %s decided", rule.name)
            return rule.outcome(extracted)

    # The fallback rule always matches.
    raise AssertionError("decision rules are not exhaustive")
