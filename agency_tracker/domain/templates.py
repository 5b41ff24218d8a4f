"""Catalog of projected expense presets"""

from typing import Dict, List, Optional

from agency_tracker.domain.models import ProjectedExpenseTemplate

PROJECTED_EXPENSE_TEMPLATES: List[ProjectedExpenseTemplate] = [
    ProjectedExpenseTemplate(
        id="weekly-groceries",
        name="Weekly groceries run",
        description="Fresh produce, pantry staples, and household basics for the week.",
        default_category="Groceries",
        default_amount_cents=18500,
        default_expected_day_offset=7,
        default_notes="Includes meal plan ingredients and household staples.",
        tags=["food", "household", "recurring"],
    ),
    ProjectedExpenseTemplate(
        id="household-essentials",
        name="Monthly household essentials",
        description="Cleaning supplies, toiletries, and home consumables restock.",
        default_category="Household",
        default_amount_cents=9000,
        default_expected_day_offset=14,
        default_notes="Soap, detergent, paper goods, and cleaning supplies.",
        tags=["home", "supplies"],
    ),
    ProjectedExpenseTemplate(
        id="kids-activities",
        name="Kids activities & lessons",
        description="After-school programs, lessons, or weekend activities.",
        default_category="Kids Activities",
        default_amount_cents=12000,
        default_expected_day_offset=21,
        default_notes="Covers registration fees and supplies for upcoming sessions.",
        tags=["family", "education"],
    ),
]

_TEMPLATES_BY_ID: Dict[str, ProjectedExpenseTemplate] = {t.id: t for t in PROJECTED_EXPENSE_TEMPLATES}


def find_template(template_id: str) -> Optional[ProjectedExpenseTemplate]:
    return _TEMPLATES_BY_ID.get(template_id)
