from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from adlaunch.autopopulate.engine import AutoPopulateResult, OriginalFormData
from adlaunch.autopopulate.types import BudgetType, CampaignType
from adlaunch.config import settings
from adlaunch.errors import ValidationFailedError

# Draft field -> lock flag guarding it.
LOCKABLE_FIELDS = {
    "budget_type": "is_budget_type_locked",
    "budget_amount": "is_budget_amount_locked",
    "start_date": "is_start_date_locked",
    "end_date": "is_end_date_locked",
}
EDITABLE_FIELDS = (
    "name",
    "campaign_type",
    "budget_type",
    "budget_amount",
    "currency",
    "country",
    "language",
    "start_date",
    "end_date",
)


@dataclass
class CampaignDraft:
    """Campaign form state for one session.

    Auto-populated values are applied with :meth:`apply`; user edits go through
    :meth:`edit`, which refuses to overwrite a locked, machine-filled value
    unless the change has been confirmed.
    """

    name: str = ""
    campaign_type: CampaignType = CampaignType.SPONSORED_UPDATES
    budget_type: BudgetType = BudgetType.daily
    budget_amount: str = ""
    currency: str = field(default_factory=lambda: settings.DEFAULT_CURRENCY)
    country: str = ""
    language: str = ""
    start_date: str = ""
    end_date: str = ""
    is_budget_type_locked: bool = False
    is_budget_amount_locked: bool = False
    is_start_date_locked: bool = False
    is_end_date_locked: bool = False
    original: Optional[OriginalFormData] = None

    def apply(self, result: AutoPopulateResult) -> None:
        """Copy every populated value into the draft; absent values keep the current one."""
        populated = result.fields
        for name in EDITABLE_FIELDS:
            value = getattr(populated, name)
            if value is not None:
                setattr(self, name, value)
        for flag in LOCKABLE_FIELDS.values():
            if getattr(populated, flag):
                setattr(self, flag, True)
        if result.original is not None:
            self.original = result.original

    def is_locked(self, field_name: str) -> bool:
        flag = LOCKABLE_FIELDS.get(field_name)
        return bool(flag and getattr(self, flag))

    def requires_confirmation(self, field_name: str, value: Any) -> bool:
        """True when ``value`` would replace a locked auto-populated value."""
        if not self.is_locked(field_name):
            return False
        original = getattr(self.original, field_name, None) if self.original else None
        if original is None:
            original = getattr(self, field_name)
        return value != original

    def edit(self, field_name: str, value: Any, *, confirmed: bool = False) -> bool:
        """Apply a user edit. Returns False when confirmation is still needed.

        A confirmed change to a locked field unlocks it, so further edits to
        that field go through without prompting.
        """
        if field_name not in EDITABLE_FIELDS:
            raise ValidationFailedError(f"Unknown campaign field: {field_name}")
        if self.requires_confirmation(field_name, value):
            if not confirmed:
                return False
            setattr(self, LOCKABLE_FIELDS[field_name], False)
        setattr(self, field_name, value)
        return True

    def as_dict(self) -> dict[str, Any]:
        data = {item.name: getattr(self, item.name) for item in fields(self) if item.name != "original"}
        data["campaign_type"] = CampaignType(self.campaign_type).value
        data["budget_type"] = BudgetType(self.budget_type).value
        return data
