import pytest

from nmea_stream_bridge.dispatcher import FrameDispatcher
from nmea_stream_bridge.sentences import GGARecord, RMCRecord, SentenceType
from nmea_stream_bridge.stream import NmeaStream

from conftest import GGA, GSA, GSV, PUBX, RMC, Collector, with_checksum

BAD_RMC = RMC[:-2] + "00"


def _subscribe_all(stream, collector):
    for sentence_type in (SentenceType.GGA, SentenceType.GSA, SentenceType.RMC, SentenceType.GSV):
        stream.subscribe(sentence_type, collector)


def test_rmc_split_across_chunks(stream, collector):
    _subscribe_all(stream, collector)

    assert stream.feed(b"$GPRM") == 0
    assert stream.remainder == "$GPRM"
    assert collector.calls == []

    chunk = RMC[5:] + "\n" + GGA[:20]
    assert stream.feed(chunk.encode()) == 1
    assert stream.remainder == GGA[:20]

    first = collector.records[0]
    assert isinstance(first, RMCRecord)
    assert first.latitude_hemisphere == "N"

    stream.feed((GGA[20:] + "\r\n").encode())
    assert isinstance(collector.records[1], GGARecord)
    assert stream.remainder == ""


def test_dispatch_order_matches_arrival(stream, collector):
    _subscribe_all(stream, collector)
    data = "\r\n".join([GSV, GGA, GSA, RMC]) + "\r\n"

    stream.feed(data.encode())

    types = [record.sentence_type for record in collector.records]
    assert types == [SentenceType.GSV, SentenceType.GGA, SentenceType.GSA, SentenceType.RMC]
    assert collector.calls[0][0] is stream


def test_chunking_does_not_change_records(collector):
    data = ("\r\n".join([GSV, GGA, PUBX, GSA, BAD_RMC, RMC]) + "\r\n").encode()

    whole = NmeaStream()
    whole_records = Collector()
    _subscribe_all(whole, whole_records)
    whole.feed(data)

    for size in (1, 2, 7, 31, 64):
        stream = NmeaStream()
        records = Collector()
        _subscribe_all(stream, records)
        for i in range(0, len(data), size):
            stream.feed(data[i:i + size])

        assert records.records == whole_records.records
        assert stream.frame_count == whole.frame_count
        assert stream.remainder == ""


def test_parse_failure_does_not_block_next_message(stream, collector):
    stream.subscribe(SentenceType.RMC, collector)

    stream.feed((BAD_RMC + "\n" + RMC + "\n").encode())
    stream.feed((BAD_RMC + "\n").encode())
    stream.feed((RMC + "\n").encode())

    assert len(collector.calls) == 2
    assert stream.invalid_frames == 2


def test_frame_count_policy(stream):
    # counted: valid known + unknown; not counted: discarded, blank
    sentences = [GGA, GSA, RMC, PUBX, "$GPZDA,201530.00,04,07,2002,00,00", BAD_RMC, GGA[:30], "  \r"]
    stream.feed(("\n".join(sentences) + "\n").encode())

    assert stream.valid_frames == 3
    assert stream.unknown_frames == 2
    assert stream.invalid_frames == 2
    assert stream.frame_count == 5
    assert stream.messages_framed == 8


def test_undecodable_bytes_are_dropped(stream, collector):
    stream.subscribe(SentenceType.GGA, collector)

    stream.feed(b"\xff\xfe\xff" + GGA.encode() + b"\r\n\xff\xff")

    assert len(collector.calls) == 1
    assert stream.remainder == ""


def test_multibyte_character_split_across_chunks(stream):
    body = "GPTXT,01,01,02,café"
    encoded = (with_checksum(body) + "\n").encode("utf-8")
    split = encoded.index("é".encode("utf-8")) + 1

    stream.feed(encoded[:split])
    stream.feed(encoded[split:])

    assert stream.unknown_frames == 1
    assert stream.invalid_frames == 0


def test_str_chunks_are_accepted(stream, collector):
    stream.subscribe(SentenceType.GSA, collector)
    stream.feed(GSA + "\n")
    assert len(collector.calls) == 1
    assert stream.bytes_received == len(GSA) + 1


def test_reset_drops_partial_sentence(stream, collector):
    stream.subscribe(SentenceType.GGA, collector)

    stream.feed(GGA[:25].encode())
    stream.reset()
    assert stream.remainder == ""

    stream.feed((GGA[25:] + "\n").encode())
    stream.feed((GGA + "\n").encode())

    # the orphaned tail fails its checksum
    assert len(collector.calls) == 1
    assert stream.invalid_frames == 1
    assert stream.frame_count == 1


def test_reset_statistics(stream):
    stream.feed((GGA + "\n").encode())
    stream.reset(stats=True)

    assert stream.bytes_received == 0
    assert stream.valid_frames == 0
    # the frame counter is monotonic
    assert stream.frame_count == 1


def test_keep_delimiter_still_parses(collector):
    stream = NmeaStream(delimiter="\r\n", keep_delimiter=True)
    stream.subscribe(SentenceType.GGA, collector)

    stream.feed((GGA + "\r\n").encode())

    assert collector.records[0].raw == GGA


def test_checksum_validation_disabled(collector):
    stream = NmeaStream(validate_checksum=False)
    stream.subscribe(SentenceType.RMC, collector)
    stream.feed((BAD_RMC + "\n").encode())
    assert len(collector.calls) == 1


def test_shared_dispatcher():
    dispatcher = FrameDispatcher()
    NmeaStream(dispatcher=dispatcher).feed((GGA + "\n").encode())
    NmeaStream(dispatcher=dispatcher).feed((GSA + "\n").encode())
    assert dispatcher.frame_count == 2


def test_subscriber_error_does_not_stop_stream(stream, collector):
    @stream.on(SentenceType.GGA)
    def broken(sender, record):
        raise RuntimeError("subscriber failure")

    stream.subscribe(SentenceType.GSA, collector)
    assert stream.feed((GGA + "\n" + GSA + "\n").encode()) == 2
    assert len(collector.calls) == 1

    assert stream.unsubscribe(SentenceType.GGA, broken)


@pytest.mark.parametrize("bad", [GGA[:-2] + "ZZ", GGA.replace("4807.038", "48.07x38")])
def test_malformed_gga_counts_invalid(stream, bad):
    stream.feed((bad + "\n").encode())
    assert stream.invalid_frames == 1
    assert stream.frame_count == 0


def test_message_queue_is_fifo():
    from nmea_stream_bridge.message_queue import MessageQueue

    queue = MessageQueue()
    queue.put("a")
    queue.extend(["b", "c"])

    assert len(queue) == 3
    assert queue.get() == "a"
    assert list(queue.drain()) == ["b", "c"]
    with pytest.raises(IndexError):
        queue.get()


def test_truncated_sentence_does_not_swallow_the_next(stream, collector):
    stream.subscribe(SentenceType.RMC, collector)

    stream.feed(("$GPGGA,1235" + RMC + "\n").encode())

    assert len(collector.calls) == 1
    assert collector.records[0].raw == RMC
    assert stream.invalid_frames == 1
    assert stream.frame_count == 1
