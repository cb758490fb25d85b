"""
Shared vocabulary for roadworthy inspections.
Checklist items, statuses and the default settings seeded on first run.
"""

CHECKLIST_ITEMS = (
    "VIN",
    "Under Vehicle",
    "Vehicle on Hoist",
    "Engine Bay",
    "Compliance Plate",
    "Front of Vehicle",
    "Rear of Vehicle",
    "Head Light Aimer",
    "Dashboard Warning Lights",
    "Odometer Before Road Test",
    "Odometer After Road Test",
    "Brake Test Print",
    "Engine Number",
    "Modification Plate",
    "LPG Tank Plate",
    "Tint Read Out",
    "Noteworthy",
    "Fault",
    "Other",
)

ITEM_DESCRIPTIONS = {
    "VIN": "Vehicle Identification Number documentation",
    "Under Vehicle": "Undercarriage inspection photos",
    "Vehicle on Hoist": "Vehicle positioning documentation",
    "Engine Bay": "Engine compartment inspection",
    "Compliance Plate": "Vehicle compliance documentation",
    "Front of Vehicle": "Front exterior inspection",
    "Rear of Vehicle": "Rear exterior inspection",
    "Head Light Aimer": "Headlight alignment documentation",
    "Dashboard Warning Lights": "Dashboard warning system check",
    "Odometer Before Road Test": "Pre-test odometer reading",
    "Odometer After Road Test": "Post-test odometer reading",
    "Brake Test Print": "Brake testing results documentation",
    "Engine Number": "Engine identification documentation",
    "Modification Plate": "Vehicle modification documentation",
    "LPG Tank Plate": "LPG system documentation",
    "Tint Read Out": "Window tint measurement results",
    "Noteworthy": "Notable observations during inspection",
    "Fault": "Identified faults or issues",
    "Other": "Additional documentation as needed",
}

# Inspection status
STATUS_IN_PROGRESS = 'in-progress'
STATUS_PASS = 'pass'
STATUS_FAIL = 'fail'
INSPECTION_STATUSES = (STATUS_IN_PROGRESS, STATUS_PASS, STATUS_FAIL)
COMPLETED_STATUSES = (STATUS_PASS, STATUS_FAIL)

# Checklist item settings
ITEM_REQUIRED = 'required'
ITEM_OPTIONAL = 'optional'
ITEM_HIDDEN = 'hidden'
ITEM_SETTINGS = (ITEM_REQUIRED, ITEM_OPTIONAL, ITEM_HIDDEN)

DEFAULT_REQUIRED_ITEMS = ("VIN", "Under Vehicle", "Engine Bay")

REPORT_FILENAME = 'inspection_report.json'


def is_checklist_item(name):
    """True if name is part of the fixed checklist vocabulary."""
    return name in CHECKLIST_ITEMS


def default_checklist_items():
    """Every known item, not yet completed."""
    return {item: False for item in CHECKLIST_ITEMS}


def default_item_settings():
    return {
        item: ITEM_REQUIRED if item in DEFAULT_REQUIRED_ITEMS else ITEM_OPTIONAL
        for item in CHECKLIST_ITEMS
    }


def default_item_order():
    return sorted(CHECKLIST_ITEMS)
