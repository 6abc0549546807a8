def nmea_to_degrees(value: str) -> float:
    """
    NMEA (d)ddmm.mmmm → decimal degrees, unsigned.

      '4807.038'  → 48.1173
      '01131.000' → 11.516666...
    """
    raw = float(value)
    if raw < 0:
        raise ValueError(f"negative NMEA coordinate {value!r}")

    degrees = int(raw // 100)
    minutes = raw - degrees * 100
    if minutes >= 60.0:
        raise ValueError(f"minutes out of range in {value!r}")
    return degrees + minutes / 60.0


def signed_degrees(degrees: float, hemisphere: str) -> float:
    """
    Apply hemisphere sign: S and W are negative.
    """
    if hemisphere in ('S', 'W'):
        return -degrees
    return degrees
