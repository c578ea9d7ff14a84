"""
Constants declarations for topocoords
"""

# WGS84 Ellipsoid Constants
WGS84_A = 6378137.0  # Semi-major axis (meters)
WGS84_E2 = 6.69437999014e-3  # First eccentricity squared

# GRS80 differs from WGS84 only in the fourth significant digit of flattening
GRS80_A = 6378137.0
GRS80_E2 = 6.69438002290e-3

# Earth rotation and sidereal time (IAU 1982 GMST polynomial, seconds)
JD_J2000 = 2451545.0
JULIAN_CENTURY_DAYS = 36525.0
GMST_COEFFICIENTS = (67310.54841, 876600.0 * 3600 + 8640184.812866, 0.093104, -6.2e-6)

# Azimuth reported when the target has no horizontal displacement (zenith, nadir
# or coincident with the observer)
DEGENERATE_AZIMUTH = 0.0

# Altitude reported when target and observer coincide
COINCIDENT_ALTITUDE = 90.0

# SGP4 accuracy degrades as the propagation time moves away from the element epoch
SGP4_STALE_ELEMENTS_DAYS = 30.
