"""
Checklist/progress engine.

Pure functions over an inspection dict and the settings dict. Nothing here
touches the database or raises: missing maps are treated as empty and a
missing settings object means every item is optional.
"""
from roadworthy.schema import (
    CHECKLIST_ITEMS,
    ITEM_HIDDEN,
    ITEM_OPTIONAL,
    ITEM_REQUIRED,
)

SETTING_RANK = {ITEM_REQUIRED: 0, ITEM_OPTIONAL: 1, ITEM_HIDDEN: 2}


def _checklist(inspection):
    return (inspection or {}).get('checklistItems') or {}


def _photos(inspection):
    return (inspection or {}).get('photos') or {}


def item_settings(settings):
    """The item -> required/optional/hidden map, empty when settings are absent."""
    if not settings:
        return {}
    return settings.get('checklistItemSettings') or {}


def item_setting(item, settings):
    return item_settings(settings).get(item, ITEM_OPTIONAL)


def required_items(settings):
    """Items configured as required, in vocabulary order."""
    configured = item_settings(settings)
    return [item for item in CHECKLIST_ITEMS if configured.get(item) == ITEM_REQUIRED]


def _percentage(completed, total):
    if total == 0:
        return 100
    # Round half up
    return int(100 * completed / total + 0.5)


def progress(inspection, settings=None):
    """Completion progress as {completed, total, percentage}.

    With settings, only required items count. Without settings, every known
    checklist item counts.
    """
    checklist = _checklist(inspection)
    if settings is None:
        items = CHECKLIST_ITEMS
    else:
        items = required_items(settings)
    completed = sum(1 for item in items if checklist.get(item) is True)
    total = len(items)
    return {
        'completed': completed,
        'total': total,
        'percentage': _percentage(completed, total),
    }


def item_status(item, inspection, settings=None):
    setting = item_setting(item, settings)
    return {
        'setting': setting,
        'isRequired': setting == ITEM_REQUIRED,
        'isCompleted': _checklist(inspection).get(item) is True,
        'photoCount': len(_photos(inspection).get(item) or []),
    }


def missing_required_items(inspection, settings=None):
    checklist = _checklist(inspection)
    return [item for item in required_items(settings) if checklist.get(item) is not True]


def can_complete(inspection, settings=None):
    """True when every required item is marked complete.

    Each item has a single setting, so a hidden item is never required and
    never blocks. Hiding an item leaves its flag and photos untouched.
    """
    return not missing_required_items(inspection, settings)


def ordered_items(settings=None):
    """Checklist items in display order, hidden items removed.

    Uses the explicit checklistItemOrder when present; otherwise sorts
    required, optional, hidden and then alphabetically.
    """
    configured = item_settings(settings)
    explicit = (settings or {}).get('checklistItemOrder')

    if explicit:
        seen = set()
        order = []
        for item in explicit:
            if item in CHECKLIST_ITEMS and item not in seen:
                seen.add(item)
                order.append(item)
        order.extend(item for item in CHECKLIST_ITEMS if item not in seen)
    else:
        order = sorted(
            CHECKLIST_ITEMS,
            key=lambda item: (SETTING_RANK.get(configured.get(item, ITEM_OPTIONAL), 1), item),
        )

    return [item for item in order if configured.get(item, ITEM_OPTIONAL) != ITEM_HIDDEN]


def checklist_rows(inspection, settings=None):
    """Display rows for the checklist view: one per visible item, in order."""
    rows = []
    for item in ordered_items(settings):
        status = item_status(item, inspection, settings)
        status['name'] = item
        rows.append(status)
    return rows
