"""Derived meteorological quantities.

Pure functions over already-decoded scalars. Callers are expected to
short-circuit on missing inputs; the functions here only handle the domain
edges where the math itself has no real answer (they return ``None``
instead of raising).

Units: temperatures in °C, pressures in hPa, humidity in %, wind speed in
m/s, irradiance in W/m², elevation in m.
"""

from __future__ import annotations

import math
from typing import Optional

LAMBDA = -0.0065  # Temperature lapse rate (K m^-1)
R_SUB_D = 287.0  # Specific gas constant of dry air (J kg^-1 K^-1)
G = 9.80665  # Standard gravity (m s^-2)
G_OVER_RD_LAMBDA = -G / (R_SUB_D * LAMBDA)
ZERO_C_KELVIN = 273.15

# Arden-Buck best-fit constants (saturated vapor pressure over water).
ARDEN_BUCK_A = 6.1121
ARDEN_BUCK_B = 18.678
ARDEN_BUCK_C = 257.14
ARDEN_BUCK_D = 234.5

# Stull best-fit constants (wet-bulb temperature).
STULL_A = 0.151977
STULL_B = 8.313659
STULL_C = -1.676311
STULL_D = 0.00391838
STULL_E = 0.023101
STULL_F = -4.686035

# Steadman apparent temperature, radiation-incorporating variant.
STEADMAN_CE = 0.348
STEADMAN_CWS = -0.70
STEADMAN_CQ = 0.70
STEADMAN_OWS = 10.0
STEADMAN_B = -4.25


def barometric_pressure(
    station_pressure: float,
    air_temperature: float,
    station_elevation: float,
) -> Optional[float]:
    """Reduce station pressure to mean sea level (hypsometric equation).

    At ``station_elevation == 0`` the ratio is exactly 1.0, so the station
    pressure is returned unchanged.
    """
    t_kelvin = air_temperature + ZERO_C_KELVIN
    lapse = LAMBDA * station_elevation
    denominator = t_kelvin - lapse
    if denominator == 0:
        return None
    base = 1.0 + lapse / denominator
    if base <= 0:
        return None
    ratio = base ** (-G_OVER_RD_LAMBDA)
    return station_pressure * ratio


def vapor_pressure_saturated(air_temperature: float) -> float:
    t = air_temperature
    return ARDEN_BUCK_A * math.exp(
        (ARDEN_BUCK_B - t / ARDEN_BUCK_D) * (t / (ARDEN_BUCK_C + t))
    )


def vapor_pressure_actual(air_temperature: float, relative_humidity: float) -> float:
    return vapor_pressure_saturated(air_temperature) * (relative_humidity / 100.0)


def dew_point(actual_vapor_pressure: float) -> Optional[float]:
    """Invert Arden-Buck for the temperature at which ``e`` saturates.

    With ``ln = log(e / A)`` the saturation curve gives
    ``T**2 + D*(ln - B)*T + D*C*ln = 0``. The physical root is the smaller
    one, written in the cancellation-free form
    ``2*D*C*ln / (D*(B - ln) + sqrt(D**2*(B - ln)**2 - 4*D*C*ln))``,
    so that a saturated sample (RH = 100%) returns the air temperature.
    """
    if actual_vapor_pressure <= 0:
        return None
    ln_ratio = math.log(actual_vapor_pressure / ARDEN_BUCK_A)
    linear = ARDEN_BUCK_D * (ARDEN_BUCK_B - ln_ratio)
    discriminant = linear * linear - 4.0 * ARDEN_BUCK_D * ARDEN_BUCK_C * ln_ratio
    if discriminant < 0:
        return None
    denominator = linear + math.sqrt(discriminant)
    if denominator == 0:
        return None
    return 2.0 * ARDEN_BUCK_D * ARDEN_BUCK_C * ln_ratio / denominator


def wet_bulb_temperature(air_temperature: float, relative_humidity: float) -> Optional[float]:
    """Stull (2011) empirical wet-bulb approximation."""
    t = air_temperature
    rh = relative_humidity
    if rh < 0:
        return None
    return (
        t * math.atan(STULL_A * math.sqrt(rh + STULL_B))
        + math.atan(t + rh)
        - math.atan(rh + STULL_C)
        + STULL_D * rh ** 1.5 * math.atan(STULL_E * rh)
        + STULL_F
    )


def apparent_temperature(
    air_temperature: float,
    actual_vapor_pressure: float,
    wind_speed: float,
    irradiance: float,
) -> float:
    return (
        air_temperature
        + STEADMAN_CE * actual_vapor_pressure
        + STEADMAN_CWS * wind_speed
        + (STEADMAN_CQ * irradiance) / (wind_speed + STEADMAN_OWS)
        + STEADMAN_B
    )
