from pydantic import BaseModel
from typing import Optional, Dict, Literal
from datetime import datetime
from azure.data.tables import TableEntity
import operator
import os

Tier = Literal['personal','plus','professional','ultimate']

TIER_PRICE_IDS: Dict[str, str] = {
    'personal': '1',
    'plus': '2',
    'professional': '3',
    'ultimate': '4',
}

COMPARISONS = {
    '<': operator.lt, 'lt': operator.lt,
    '<=': operator.le, 'le': operator.le,
    '>': operator.gt, 'gt': operator.gt,
    '>=': operator.ge, 'ge': operator.ge,
    '==': operator.eq, 'eq': operator.eq,
    '!=': operator.ne, '<>': operator.ne, 'ne': operator.ne,
}


def _version_tuple(version: str):
    # "1.0" sorts after "1": a present part beats a missing one.
    return tuple(int(p) for p in version.split('.'))


def compare_versions(left: str, right: str, comparison: str) -> Optional[bool]:
    """Compare two dotted numeric versions, e.g. a price id against a tier threshold.

    None for an unknown operator, False when either side is not numeric.
    """
    compare = COMPARISONS.get(comparison)
    if compare is None:
        return None
    try:
        return compare(_version_tuple(left), _version_tuple(right))
    except ValueError:
        return False


class License(BaseModel):
    key: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    item_id: Optional[int] = None
    price_id: Optional[str] = None
    expiration: Optional[datetime] = None
    status: str = 'empty'

    def is_valid(self) -> bool:
        return self.status == 'valid'

    def is_lite(self) -> bool:
        return os.getenv("SIMPAY_EDITION", "lite").lower() != 'pro'

    def is_pro(self, tier: str = 'personal', comparison: str = '>=') -> bool:
        """Whether the license price id meets a tier. Lite installs never do."""
        if self.is_lite():
            return False

        # No price id, assume nothing.
        if self.price_id is None:
            return False

        threshold = TIER_PRICE_IDS.get(tier)
        if threshold is None:
            return False

        return bool(compare_versions(str(self.price_id), threshold, comparison))


class LicenseStatus(BaseModel):
    status: str
    is_valid: bool
    is_lite: bool
    expiration: Optional[datetime] = None
    tiers: Dict[str, bool]

    @classmethod
    def from_license(cls, license: License) -> "LicenseStatus":
        return cls(
            status=license.status,
            is_valid=license.is_valid(),
            is_lite=license.is_lite(),
            expiration=license.expiration,
            tiers={tier: license.is_pro(tier) for tier in TIER_PRICE_IDS},
        )


class LicenseTableEntity(BaseModel):
    PartitionKey: str = "license"
    RowKey: str = "license"
    key: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    item_id: Optional[int] = None
    price_id: Optional[str] = None
    expiration: Optional[str] = None
    status: str = 'empty'

    def to_license(self) -> License:
        deserialized_expiration = datetime.fromisoformat(self.expiration) if self.expiration else None
        return License(expiration=deserialized_expiration,
                       **self.model_dump(exclude={"PartitionKey","RowKey","expiration"}))

    @classmethod
    def from_entity(cls, entity: TableEntity) -> "LicenseTableEntity":
        entity_dict = dict(entity)
        if entity_dict.get("price_id") is not None:
            entity_dict["price_id"] = str(entity_dict["price_id"])
        return cls.model_validate(entity_dict)
