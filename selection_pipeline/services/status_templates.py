"""
Declarative status templates.

A stage without stored status definitions falls back to the template named by
its ``status_template``. Templates are also used to bulk-create stored
statuses for a stage.
"""

from typing import Dict, List, Optional

# Default color by status category
CATEGORY_COLORS: Dict[str, str] = {
    "passed": "green",
    "failed": "red",
    "pending": "yellow",
    "declined": "gray",
    "cancelled": "gray",
}


def _status(value: str, display_name: str, category: str, is_final: bool = False, color: Optional[str] = None) -> dict:
    return {
        "status_value": value,
        "display_name": display_name,
        "status_category": category,
        "color_scheme": color or CATEGORY_COLORS[category],
        "is_final": is_final,
    }


# Entries are listed in display order; sort_order is their 1-based position
STATUS_TEMPLATES: Dict[str, List[dict]] = {
    "basic": [
        _status("passed", "Passed", "passed"),
        _status("failed", "Failed", "failed", is_final=True),
        _status("declined", "Declined", "declined", is_final=True),
    ],
    "interview": [
        _status("passed", "Passed", "passed"),
        _status("failed", "Failed", "failed", is_final=True),
        _status("pending", "On hold", "pending"),
        _status("cancelled", "Cancelled", "cancelled"),
        _status("declined", "Declined", "declined", is_final=True),
        _status("no_show", "No show", "failed", is_final=True),
    ],
    "event": [
        _status("scheduled", "Scheduled", "pending", color="blue"),
        _status("attended", "Attended", "passed"),
        _status("cancelled", "Cancelled", "cancelled"),
        _status("declined", "Declined", "declined", is_final=True),
        _status("no_show", "No show", "failed", is_final=True),
    ],
    "final": [
        _status("offered", "Offered", "passed"),
        _status("failed", "Failed", "failed", is_final=True),
        _status("pending", "On hold", "pending"),
        _status("declined", "Declined", "declined", is_final=True),
    ],
    "offer": [
        _status("accepted", "Accepted", "passed", is_final=True),
        _status("not_accepted", "Not accepted", "failed", is_final=True),
        _status("declined", "Declined", "declined", is_final=True),
    ],
}

# Known stage names (internal keys and the Japanese catalog names)
STAGE_NAME_STATUS_TEMPLATES: Dict[str, str] = {
    "company_info_session": "event",
    "aptitude_test_trial": "event",
    "workplace_visit": "event",
    "job_experience": "event",
    "ceo_seminar": "event",
    "hr_interview": "interview",
    "group_interview": "interview",
    "final_selection": "interview",
    "offer_meeting": "offer",
    "会社説明会": "event",
    "適性検査体験": "event",
    "職場見学": "event",
    "仕事体験": "event",
    "CEOセミナー": "event",
    "人事面接": "interview",
    "集団面接": "interview",
    "最終選考": "interview",
    "内定面談": "offer",
}

DEFAULT_STATUS_TEMPLATE = "basic"


def resolve_status_template(stage_name: str, explicit: Optional[str] = None) -> str:
    """Explicit choice wins, then the stage-name table, then ``basic``."""
    if explicit:
        return explicit
    return STAGE_NAME_STATUS_TEMPLATES.get(stage_name.strip(), DEFAULT_STATUS_TEMPLATE)


def template_statuses(template_key: str) -> List[dict]:
    """Copies of a template's entries with sort_order filled in."""
    return [
        {**entry, "sort_order": position}
        for position, entry in enumerate(STATUS_TEMPLATES[template_key], start=1)
    ]
