"""
Client Module

Clients are identities that own accounts by reference only: the Bank owns
every Account, a Client keeps the ordered list of its account numbers.
"""

from dataclasses import dataclass, field
from typing import List
from enum import Enum
import re

from .errors import InvalidClientData


class ClientTier(Enum):
    """Client segments"""
    REGULAR = "regular"
    PREMIUM = "premium"
    VIP = "vip"

    @classmethod
    def parse(cls, value) -> 'ClientTier':
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for tier in cls:
                if key in (tier.value, tier.name.lower()):
                    return tier
        raise InvalidClientData(f"Unknown client tier: {value!r}")


_EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


@dataclass(eq=False)
class Client:
    client_id: str
    name: str
    email: str
    tier: ClientTier = ClientTier.REGULAR
    _account_numbers: List[str] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if not self.client_id or not self.client_id.strip():
            raise InvalidClientData("Client id is required")
        if not self.name or not self.name.strip():
            raise InvalidClientData("Client name is required")
        if self.email and not _EMAIL_PATTERN.match(self.email):
            raise InvalidClientData(f"Invalid email format: {self.email}")

    @property
    def account_numbers(self) -> List[str]:
        """Owned account numbers in opening order. Returns a copy."""
        return list(self._account_numbers)

    def _link_account(self, account_number: str) -> None:
        self._account_numbers.append(account_number)

    def to_dict(self) -> dict:
        return {
            "client_id": self.client_id,
            "name": self.name,
            "email": self.email,
            "tier": self.tier.value,
            "account_numbers": self.account_numbers,
        }
