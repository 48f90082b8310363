"""Classification of version upgrades."""

from .models import UpgradeClassification

# Component index checked for each bucket, highest priority first
_BUCKETS = (
    (0, UpgradeClassification.MAJOR),
    (1, UpgradeClassification.MINOR),
    (2, UpgradeClassification.FIX),
)


def _component(components: list[str], index: int) -> int | None:
    """Numeric value of a version component, None when missing or not numeric."""
    if index >= len(components):
        return None

    value = components[index].strip()
    if not value:
        return 0
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def _increases(current: list[str], target: list[str], index: int) -> bool:
    current_value = _component(current, index)
    target_value = _component(target, index)
    if current_value is None or target_value is None:
        return False
    return target_value > current_value


def classify_upgrade(
    current_version: str | None, target_version: str | None
) -> UpgradeClassification:
    """Categorize the upgrade from one version to another.

    Components are compared left to right; the first one that strictly
    increases decides the bucket. Missing or non-numeric components never
    count as an increase, so pre-release and odd-shaped versions fall back
    to ``unknown`` instead of failing.

    Args:
        current_version: Installed version, e.g. "1.2.3"
        target_version: Latest version, e.g. "2.0.0"

    Returns:
        The upgrade classification
    """
    current_version = current_version or ""
    target_version = target_version or ""

    if current_version == target_version:
        return UpgradeClassification.LATEST

    current = current_version.split(".")
    target = target_version.split(".")

    for index, classification in _BUCKETS:
        if _increases(current, target, index):
            return classification

    return UpgradeClassification.UNKNOWN
