from src.models.location import FallbackType, LocationFix

FALLBACK_LABELS: dict[FallbackType, str] = {
    FallbackType.cached: "Using recent location",
    FallbackType.network: "Approximate location",
    FallbackType.manual: "Manual location entry",
    FallbackType.user_consent: "Location waived by user",
}

# (upper bound in meters, label), checked in order.
ACCURACY_BUCKETS: tuple[tuple[float, str], ...] = (
    (10, "Precise location (GPS)"),
    (100, "Accurate location (GPS)"),
    (1000, "Approximate location"),
)


def describe(fix: LocationFix | None) -> str:
    """Human-readable label for a fix, shown next to the attendance record."""
    if fix is None:
        return "Location unavailable"

    if fix.is_fallback:
        if fix.fallback_type is None:
            return "Fallback location"
        return FALLBACK_LABELS.get(fix.fallback_type, "Fallback location")

    if fix.accuracy is not None:
        for upper_bound, label in ACCURACY_BUCKETS:
            if fix.accuracy <= upper_bound:
                return label
    return "General location"
