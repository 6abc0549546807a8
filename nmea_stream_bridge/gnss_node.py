#!/usr/bin/env python3

import rclpy
from rclpy.node import Node

from sensor_msgs.msg import NavSatFix, NavSatStatus

from .sentences import FixQuality, GGARecord, GSARecord, GSVRecord, RMCRecord, SentenceType
from .sources import PollingSource, open_serial, serial_reader
from .stream import NmeaStream


FIX_STATUS = {
    FixQuality.INVALID: NavSatStatus.STATUS_NO_FIX,
    FixQuality.DGPS: NavSatStatus.STATUS_SBAS_FIX,
    FixQuality.RTK: NavSatStatus.STATUS_GBAS_FIX,
    FixQuality.FLOAT_RTK: NavSatStatus.STATUS_GBAS_FIX,
}


class GnssBridgeNode(Node):

    def __init__(self):
        super().__init__('nmea_stream_bridge')

        # ==================== PARAMETERS ====================
        self.declare_parameter('port', '/dev/ttyACM0')
        self.declare_parameter('baudrate', 9600)
        self.declare_parameter('timeout_ms', 50)
        self.declare_parameter('read_size', 1024)
        self.declare_parameter('poll_interval_ms', 0)

        self.declare_parameter('delimiter', '\n')
        self.declare_parameter('validate_checksum', True)

        self.declare_parameter('fix_topic', '/gnss/fix')
        self.declare_parameter('frame_id', 'gnss_link')

        self.declare_parameter('debug', False)

        # ==================== PARAM READ ====================
        self.port = self.get_parameter('port').value
        self.baudrate = self.get_parameter('baudrate').value
        self.timeout_ms = self.get_parameter('timeout_ms').value
        self.read_size = self.get_parameter('read_size').value
        self.poll_interval_ms = self.get_parameter('poll_interval_ms').value

        self.delimiter = self.get_parameter('delimiter').value
        self.validate_checksum = self.get_parameter('validate_checksum').value

        self.fix_topic = self.get_parameter('fix_topic').value
        self.frame_id = self.get_parameter('frame_id').value

        self.debug = self.get_parameter('debug').value

        if not self.delimiter:
            raise ValueError("delimiter must not be empty")

        if self.poll_interval_ms < 0:
            raise ValueError("poll_interval_ms must be >= 0")

        # ==================== STATE ====================
        self._fixes_published = 0
        self._last_fix = (0.0, 0.0, 0.0)
        self._last_fix_mode = None
        self._satellites_in_view = 0
        self._rmc_valid = False

        # ==================== STREAM ====================
        self.stream = NmeaStream(
            delimiter=self.delimiter,
            validate_checksum=self.validate_checksum,
        )
        self.stream.subscribe(SentenceType.GGA, self._on_gga)
        self.stream.subscribe(SentenceType.GSA, self._on_gsa)
        self.stream.subscribe(SentenceType.GSV, self._on_gsv)
        self.stream.subscribe(SentenceType.RMC, self._on_rmc)

        # ==================== SERIAL ====================
        self.ser = open_serial(self.port, self.baudrate, self.timeout_ms)

        # ==================== ROS ====================
        self.fix_pub = self.create_publisher(
            NavSatFix,
            self.fix_topic,
            10
        )

        if self.debug:
            self.create_timer(1.0, self._print_debug_panel)

        self.source = PollingSource(
            read=serial_reader(self.ser, self.read_size),
            sink=self._on_chunk,
            interval=self.poll_interval_ms / 1000.0,
            idle_byte=None,
        )
        self.source.start()

        self.get_logger().info("nmea_stream_bridge started")

    # =====================================================
    # GNSS → ROS
    # =====================================================
    def _on_chunk(self, raw: bytes):
        try:
            self.stream.feed(raw)
        except Exception as e:
            self.get_logger().warn(f"RX error: {e}", throttle_duration_sec=5.0)

    def _on_gga(self, sender, record: GGARecord):
        if record.latitude is None or record.longitude is None:
            return
        self._publish_fix(record)

    def _on_gsa(self, sender, record: GSARecord):
        self._last_fix_mode = record.fix_mode

    def _on_gsv(self, sender, record: GSVRecord):
        if record.satellites_in_view is not None:
            self._satellites_in_view = record.satellites_in_view

    def _on_rmc(self, sender, record: RMCRecord):
        self._rmc_valid = record.valid

    def _publish_fix(self, record: GGARecord):
        lat = record.signed_latitude
        lon = record.signed_longitude
        alt = record.altitude if record.altitude is not None else 0.0

        self._fixes_published += 1
        self._last_fix = (lat, lon, alt)

        fix = NavSatFix()
        fix.header.stamp = self.get_clock().now().to_msg()
        fix.header.frame_id = self.frame_id

        fix.status.status = FIX_STATUS.get(record.fix_quality, NavSatStatus.STATUS_FIX)
        fix.status.service = NavSatStatus.SERVICE_GPS

        fix.latitude = lat
        fix.longitude = lon
        fix.altitude = alt

        if record.hdop is not None:
            # Rough UERE of 5 m per unit of HDOP
            sigma = record.hdop * 5.0
            fix.position_covariance[0] = sigma ** 2
            fix.position_covariance[4] = sigma ** 2
            fix.position_covariance[8] = (2.0 * sigma) ** 2
            fix.position_covariance_type = NavSatFix.COVARIANCE_TYPE_APPROXIMATED
        else:
            fix.position_covariance_type = NavSatFix.COVARIANCE_TYPE_UNKNOWN

        self.fix_pub.publish(fix)

    # =====================================================
    # DEBUG
    # =====================================================
    def _print_debug_panel(self):
        lat, lon, alt = self._last_fix
        fix_mode = self._last_fix_mode.name if self._last_fix_mode else '-'

        panel = f"""
╔══════════════════════════════════════════════════════╗
║        NMEA STREAM BRIDGE — DEBUG PANEL              ║
╠══════════════════════════════════════════════════════╣
║ RX bytes          : {self.stream.bytes_received:<30}║
║ RX chunks         : {self.stream.chunks_received:<30}║
║ Frame count       : {self.stream.frame_count:<30}║
║ RX valid frames   : {self.stream.valid_frames:<30}║
║ RX unknown frames : {self.stream.unknown_frames:<30}║
║ RX invalid frames : {self.stream.invalid_frames:<30}║
║ Fixes published   : {self._fixes_published:<30}║
║ Read errors       : {self.source.read_errors:<30}║
╠══════════════════════════════════════════════════════╣
║ Fix mode          : {fix_mode:<30}║
║ RMC valid         : {str(self._rmc_valid):<30}║
║ Sats in view      : {self._satellites_in_view:<30}║
║ Last fix          : {f'{lat:.6f} {lon:.6f} {alt:.1f}':<30}║
╚══════════════════════════════════════════════════════╝
"""
        self.get_logger().info(panel)

    # =====================================================
    # SHUTDOWN
    # =====================================================
    def destroy_node(self):
        self.source.stop(timeout=1.0)
        if self.ser and self.ser.is_open:
            self.ser.close()
        self.stream.reset()
        super().destroy_node()


def main(args=None):
    rclpy.init(args=args)
    node = GnssBridgeNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.destroy_node()
        rclpy.shutdown()
