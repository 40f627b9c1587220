# curvematch/errors

"""
curvematch.errors

Central exception hierarchy for CurveMatch.

Rationale:
  - Modules raise specific, meaningful errors.
  - Callers can catch CurveMatchError (broad) or specific subclasses (narrow).

Note: a single trackpoint with bad coordinates is *not* an error. It is
skipped and counted in GpxAnalysis.skipped_points.
"""


class CurveMatchError(RuntimeError):
    """Base class for all CurveMatch runtime errors."""


# ---- GPX parsing / minification errors ---------

class GpxError(CurveMatchError):
    """Errors in the GPX parse/minify pipeline."""

class MalformedInputError(GpxError):
    """GPX document could not be parsed or did not have a <gpx> root element."""


MalformedInput = MalformedInputError


# ---- Region geometry errors --------------------

class RegionError(CurveMatchError):
    """Errors related to user-drawn search regions."""

class RegionTooLargeError(RegionError):
    """The drawn region exceeds the permitted maximum area."""

    def __init__(self, area_km2: float, max_area_km2: float):
        super().__init__(
            f"Area too large: {area_km2:.1f} km². Maximum allowed is {max_area_km2:g} km²."
        )
        self.area_km2 = area_km2
        self.max_area_km2 = max_area_km2


# ---- Configuration errors ----------------------

class ConfigError(CurveMatchError):
    """A configuration file exists but could not be parsed."""


# ---- Selection errors --------------------------

class SelectionError(CurveMatchError):
    """Errors in interactive file selection."""

class FzfNotFoundError(SelectionError):
    """fzf is required but not available on PATH."""
