"""Single-face video tracking with ROI detection and a template-matching fallback."""

__all__ = [
    "config",
    "detectors",
    "geometry",
    "io_utils",
    "matching",
    "scaling",
    "sources",
    "template",
    "timing",
    "tracking",
    "types",
]
