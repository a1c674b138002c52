"""Shared constants for trade status, filtering and display."""

STATUS_ALL = "all"

# Display labels for the status badge
STATUS_LABELS: dict[str, str] = {
    "open": "Open",
    "closed": "Closed",
}

SALE_SLOTS = ("sale1", "sale2", "sale3")

EMPTY_JOURNAL_MESSAGE = 'No trades logged yet. Click "Add New Trade" to get started.'

FORM_TITLE_ADD = "Add New Trade"
FORM_TITLE_EDIT = "Edit Trade"
