# nmea_stream_bridge/sentences.py

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar, Optional, Tuple

from .utils import signed_degrees


# ======================================================
# ENUMS
# ======================================================

class SentenceType(Enum):
    GGA = "GGA"
    GSA = "GSA"
    RMC = "RMC"
    GSV = "GSV"
    UNKNOWN = "UNKNOWN"


class SignalOrigin(Enum):
    GPS = "GPS"
    GLONASS = "GLONASS"
    GALILEO = "GALILEO"
    BEIDOU = "BEIDOU"
    QZSS = "QZSS"
    NAVIC = "NAVIC"
    MULTI = "MULTI"
    UNKNOWN = "UNKNOWN"


TALKER_ORIGINS = {
    "GP": SignalOrigin.GPS,
    "GL": SignalOrigin.GLONASS,
    "GA": SignalOrigin.GALILEO,
    "GB": SignalOrigin.BEIDOU,
    "BD": SignalOrigin.BEIDOU,
    "GQ": SignalOrigin.QZSS,
    "QZ": SignalOrigin.QZSS,
    "GI": SignalOrigin.NAVIC,
    "IN": SignalOrigin.NAVIC,
    "GN": SignalOrigin.MULTI,
}


def signal_origin(talker: str) -> SignalOrigin:
    return TALKER_ORIGINS.get(talker.upper(), SignalOrigin.UNKNOWN)


class FixMode(IntEnum):
    """GSA fix mode."""

    NO_FIX = 1
    FIX_2D = 2
    FIX_3D = 3


class FixQuality(IntEnum):
    """GGA fix quality indicator."""

    INVALID = 0
    GPS = 1
    DGPS = 2
    PPS = 3
    RTK = 4
    FLOAT_RTK = 5
    ESTIMATED = 6
    MANUAL = 7
    SIMULATION = 8


# ======================================================
# RECORDS
# ======================================================

@dataclass(frozen=True)
class SentenceRecord:
    talker: str
    signal_origin: SignalOrigin
    raw: str

    sentence_type: ClassVar[SentenceType] = SentenceType.UNKNOWN


class _Position:
    """Signed coordinates for records carrying lat/lon + hemisphere."""

    @property
    def signed_latitude(self) -> Optional[float]:
        if self.latitude is None:
            return None
        return signed_degrees(self.latitude, self.latitude_hemisphere)

    @property
    def signed_longitude(self) -> Optional[float]:
        if self.longitude is None:
            return None
        return signed_degrees(self.longitude, self.longitude_position)


@dataclass(frozen=True)
class GGARecord(_Position, SentenceRecord):
    utc_time: Optional[str]
    latitude: Optional[float]
    latitude_hemisphere: Optional[str]
    longitude: Optional[float]
    longitude_position: Optional[str]
    fix_quality: FixQuality
    satellites_in_use: Optional[int]
    hdop: Optional[float]
    altitude: Optional[float]
    altitude_units: Optional[str]
    geoid_separation: Optional[float]
    geoid_separation_units: Optional[str]
    dgps_age: Optional[float]
    dgps_station_id: Optional[str]

    sentence_type: ClassVar[SentenceType] = SentenceType.GGA


@dataclass(frozen=True)
class GSARecord(SentenceRecord):
    auto_2d3d: str
    fix_mode: FixMode
    satellite_prns: Tuple[int, ...]
    pdop: Optional[float]
    hdop: Optional[float]
    vdop: Optional[float]

    sentence_type: ClassVar[SentenceType] = SentenceType.GSA


@dataclass(frozen=True)
class RMCRecord(_Position, SentenceRecord):
    utc_time: Optional[str]
    status: str
    latitude: Optional[float]
    latitude_hemisphere: Optional[str]
    longitude: Optional[float]
    longitude_position: Optional[str]
    speed_knots: Optional[float]
    course: Optional[float]
    date: Optional[str]
    magnetic_variation: Optional[float]
    variation_direction: Optional[str]
    mode: Optional[str]

    sentence_type: ClassVar[SentenceType] = SentenceType.RMC

    @property
    def valid(self) -> bool:
        return self.status == 'A'


@dataclass(frozen=True)
class SatelliteInfo:
    prn: int
    elevation: Optional[int]
    azimuth: Optional[int]
    snr: Optional[int]


@dataclass(frozen=True)
class GSVRecord(SentenceRecord):
    number_of_messages: int
    message_number: int
    satellites_in_view: Optional[int]
    satellites: Tuple[SatelliteInfo, ...]

    sentence_type: ClassVar[SentenceType] = SentenceType.GSV

    @property
    def last_in_sequence(self) -> bool:
        return self.message_number == self.number_of_messages


@dataclass(frozen=True)
class UnknownRecord(SentenceRecord):
    header: str
    fields: Tuple[str, ...]

    sentence_type: ClassVar[SentenceType] = SentenceType.UNKNOWN
