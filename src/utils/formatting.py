from __future__ import annotations

from domain.taxonomy import TaxonomyStatus

_STATUS_LABELS = {
    TaxonomyStatus.ENABLED: "enabled",
    TaxonomyStatus.DISABLED: "disabled",
}


def format_status(status: TaxonomyStatus) -> str:
    return _STATUS_LABELS[status]
