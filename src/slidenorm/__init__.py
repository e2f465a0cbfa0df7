"""
slidenorm — Presentation document normalizer.

    from slidenorm import normalize_presentation
    pres = normalize_presentation(document)   # -> slidenorm.core.model.Presentation
"""
from slidenorm.core.config import NormalizeOptions
from slidenorm.core.errors import NormalizeError
from slidenorm.core.model import to_dict
from slidenorm.core.normalize import normalize_presentation

__version__ = "0.1.0"

__all__ = [
    "NormalizeError",
    "NormalizeOptions",
    "normalize_presentation",
    "to_dict",
]
