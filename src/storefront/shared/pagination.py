"""Page/limit validation shared by the catalog and order listings."""

from protean.exceptions import ValidationError


def check_page(page, page_size):
    """Reject anything but positive integers for ``page`` and ``page_size``."""
    errors = {}
    if not _positive_int(page):
        errors["page"] = ["Page must be a positive integer"]
    if not _positive_int(page_size):
        errors["limit"] = ["Limit must be a positive integer"]
    if errors:
        raise ValidationError(errors)


def _positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1
