"""Version information for NetLog"""

__version__ = "1.1.0"
__version_info__ = (1, 1, 0)
__release_date__ = "2026-10-12"

VERSION_HISTORY = [
    {
        "version": "1.1.0",
        "date": "2026-10-12",
        "changes": [
            "Persistence failures collected in an error feed instead of a single message",
            "Check-in numbers never reused after a station is removed",
            "Elapsed timer frozen when the net closes",
            "CLI: export --stdout",
        ]
    },
    {
        "version": "1.0.0",
        "date": "2026-09-20",
        "changes": [
            "Net sessions with pending/active/closed lifecycle",
            "Check-ins, communications log and identity correction",
            "ICS-309 CSV export",
            "SQLite storage and FCC ULS callsign lookup",
        ]
    },
]


def get_full_version():
    """Get full version string with release date"""
    return f"{__version__} ({__release_date__})"
