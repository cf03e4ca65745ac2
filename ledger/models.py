"""Transaction record and the outcome of reading one out of a model reply."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ExtractionStatus(str, Enum):
    EXTRACTED = "extracted"
    EMPTY = "empty"
    MALFORMED = "malformed"


def _wire_number(value: float) -> float | int:
    # Whole amounts print without a fraction: 0 and 40, not 0.0 and 40.0.
    if math.isfinite(value) and float(value).is_integer() and abs(value) < 1e21:
        return int(value)
    return value


@dataclass
class Transaction:
    amount: float = 0.0
    category: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": _wire_number(self.amount),
            "category": self.category,
            "type": self.type,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass
class ExtractionResult:
    transaction: Transaction = field(default_factory=Transaction)
    status: ExtractionStatus = ExtractionStatus.EMPTY
    transcript: str = ""
    raw_reply: str = ""


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


# field name -> predicate the decoded JSON value must satisfy
_FIELD_CHECKS = {
    "amount": _is_number,
    "category": lambda v: isinstance(v, str),
    "type": lambda v: isinstance(v, str),
}


def _match_field(key: str) -> str | None:
    if key in _FIELD_CHECKS:
        return key
    folded = key.casefold()
    for name in _FIELD_CHECKS:
        if name.casefold() == folded:
            return name
    return None


def parse_transaction(reply: str) -> tuple[Transaction, ExtractionStatus]:
    """
    Read a Transaction out of a model reply.

    The reply is decoded once. Keys are matched to fields case-insensitively
    and unknown keys are ignored. A field holding a value of the wrong type is
    left at its zero value; the remaining fields still decode.

    Returns the (possibly zero-valued) transaction and how the reply was read:
    EMPTY for the "no transaction" sentinel, JSON null or an object with no known fields,
    MALFORMED for anything that is not a well-shaped JSON object.
    """
    transaction = Transaction()
    text = (reply or "").strip()
    if not text:
        return transaction, ExtractionStatus.EMPTY

    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return transaction, ExtractionStatus.MALFORMED

    if data is None or data == "":
        return transaction, ExtractionStatus.EMPTY
    if not isinstance(data, dict):
        return transaction, ExtractionStatus.MALFORMED

    malformed = False
    populated = False
    for key, value in data.items():
        name = _match_field(key)
        if name is None or value is None:
            continue
        if not _FIELD_CHECKS[name](value):
            malformed = True
            continue
        if name == "amount":
            value = float(value)
        setattr(transaction, name, value)
        populated = True

    if malformed:
        return transaction, ExtractionStatus.MALFORMED
    if not populated:
        return transaction, ExtractionStatus.EMPTY
    return transaction, ExtractionStatus.EXTRACTED


__all__ = [
    "ExtractionResult",
    "ExtractionStatus",
    "Transaction",
    "parse_transaction",
]
