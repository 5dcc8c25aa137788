"""Tests for the streaming LAS writer."""

import gc
import io
import logging
import struct

import pytest

from lasstream.core.bounds import Bounds
from lasstream.core.version import Version
from lasstream.errors import ClosedError, HeaderError, PointAttributesError
from lasstream.header.header import Header
from lasstream.io.writer import Writer
from lasstream.point.format import Format
from lasstream.point.point import Color, Point, Waveform
from lasstream.vlr import Vlr


class FlakySink(io.BytesIO):
    """BytesIO whose writes or seeks can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.fail_seeks = False

    def write(self, data):
        if self.fail_writes:
            raise OSError("disk full")
        return super().write(data)

    def seek(self, *args):
        if self.fail_seeks:
            raise OSError("seek failed")
        return super().seek(*args)


def make_writer(number: int, version: str, extra_bytes: int = 0) -> Writer:
    header = Header(version=version, point_format=Format.new(number, extra_bytes=extra_bytes))
    return Writer(io.BytesIO(), header)


class TestConstruction:
    def test_placeholder_header_and_vlrs(self, read_header):
        header = Header(vlrs=[Vlr(user_id="a", data=b"12"), Vlr(user_id="b")])
        sink = io.BytesIO()
        Writer(sink, header).close()
        data = sink.getvalue()
        assert len(data) == 227 + 56 + 54
        assert data[227 + 2:227 + 3] == b"a"
        assert data[227 + 56 + 2:227 + 56 + 3] == b"b"
        assert read_header(data)["offset_to_point_data"] == len(data)

    def test_vlr_padding_written(self):
        sink = io.BytesIO()
        writer = Writer(sink, Header(vlr_padding=b"\xab\xcd"))
        assert sink.getvalue()[227:] == b"\xab\xcd"
        writer.close()

    def test_statistics_discarded(self):
        header = Header()
        header.add_point(Point(x=100.0, y=100.0, z=100.0))
        writer = Writer(io.BytesIO(), header)
        assert writer.header.number_of_points == 0
        assert writer.header.bounds is None
        # The caller's header is left alone
        assert header.number_of_points == 1
        writer.close()

    def test_invalid_header(self):
        header = Header()
        header.point_format = Format.new(6)
        with pytest.raises(HeaderError):
            Writer(io.BytesIO(), header)

    def test_io_error(self):
        sink = FlakySink()
        sink.fail_writes = True
        with pytest.raises(OSError, match="disk full"):
            Writer(sink, Header())

    def test_evlrs_need_1_4(self):
        header = Header(version="1.4", point_format=1, evlrs=[Vlr(user_id="trailing")])
        header.version = Version(1, 3)
        with pytest.raises(HeaderError, match="EVLRs"):
            Writer(io.BytesIO(), header)

    def test_default(self):
        writer = Writer.default()
        assert not writer.closed
        assert writer.header.version.minor == 2
        writer.close()


class TestWrite:
    def test_default_point(self):
        writer = Writer.default()
        writer.write(Point())
        assert writer.header.number_of_points == 1

    def test_records_appended_in_order(self):
        sink = io.BytesIO()
        writer = Writer(sink, Header())
        for i in range(5):
            writer.write(Point(x=float(i), intensity=i))
        writer.close()
        data = sink.getvalue()
        assert len(data) == 227 + 5 * 20
        for i in range(5):
            record = data[227 + i * 20:227 + (i + 1) * 20]
            x, = struct.unpack_from("<i", record)
            intensity, = struct.unpack_from("<H", record, 12)
            assert (x, intensity) == (i * 1000, i)

    def test_missing_gps_time_then_set(self):
        writer = make_writer(1, "1.2")
        point = Point()
        with pytest.raises(PointAttributesError):
            writer.write(point)
        point.gps_time = 42.0
        writer.write(point)
        assert writer.header.number_of_points == 1

    def test_surplus_nir_rejected(self):
        writer = make_writer(7, "1.4")
        point = Point(gps_time=0.0, color=Color(1, 2, 3), nir=9)
        with pytest.raises(PointAttributesError):
            writer.write(point)

    def test_surplus_color_rejected(self):
        writer = make_writer(1, "1.2")
        with pytest.raises(PointAttributesError):
            writer.write(Point(gps_time=0.0, color=Color()))

    @pytest.mark.parametrize(
        "number, version, point",
        [
            (2, "1.2", Point()),
            (4, "1.4", Point(gps_time=0.0)),
            (8, "1.4", Point(gps_time=0.0, color=Color())),
            (6, "1.4", Point(gps_time=0.0, waveform=Waveform())),
        ],
        ids=["missing-color", "missing-waveform", "missing-nir", "surplus-waveform"],
    )
    def test_attribute_mismatch(self, number, version, point):
        writer = make_writer(number, version)
        with pytest.raises(PointAttributesError):
            writer.write(point)

    def test_missing_extra_bytes(self):
        writer = make_writer(0, "1.4", extra_bytes=1)
        with pytest.raises(PointAttributesError):
            writer.write(Point())
        writer.write(Point(extra_bytes=b"\x01"))

    def test_rejection_has_no_side_effects(self):
        sink = io.BytesIO()
        writer = Writer(sink, Header(point_format=1))
        writer.write(Point(x=1.0, gps_time=0.0))
        before = (writer.header.number_of_points, writer.header.bounds, sink.tell())
        point = Point(x=50.0, y=50.0, z=50.0)
        with pytest.raises(PointAttributesError) as exc_info:
            writer.write(point)
        assert exc_info.value.point is point
        assert exc_info.value.format == Format.new(1)
        after = (writer.header.number_of_points, writer.header.bounds, sink.tell())
        assert after == before

    def test_failed_write_leaves_header_unchanged(self):
        sink = FlakySink()
        writer = Writer(sink, Header())
        sink.fail_writes = True
        with pytest.raises(OSError):
            writer.write(Point(x=5.0))
        assert writer.header.number_of_points == 0
        sink.fail_writes = False
        writer.close()

    def test_header_is_a_copy(self, read_header):
        sink = io.BytesIO()
        writer = Writer(sink, Header())
        writer.header.point_format = Format.new(1)
        writer.header.vlrs.append(Vlr())
        writer.header.add_point(Point())
        writer.write(Point())
        writer.close()
        fields = read_header(sink.getvalue())
        assert fields["point_format"] == 0
        assert fields["number_of_vlrs"] == 0
        assert fields["point_count"] == 1

    def test_write_all(self, utm_header, sample_points):
        writer = Writer(io.BytesIO(), utm_header)
        assert writer.write_all(sample_points) == 100
        assert writer.header.number_of_points == 100
        writer.close()


class TestClose:
    def test_header_reports_count_and_bounds(self, utm_header, sample_points, read_header):
        sink = io.BytesIO()
        writer = Writer(sink, utm_header)
        writer.write_all(sample_points)
        writer.close()
        fields = read_header(sink.getvalue())

        expected = Bounds.from_point(sample_points[0].x, sample_points[0].y, sample_points[0].z)
        for p in sample_points[1:]:
            expected = expected.grow(p.x, p.y, p.z)
        assert fields["point_count"] == 100
        assert fields["min"] == (expected.minx, expected.miny, expected.minz)
        assert fields["max"] == (expected.maxx, expected.maxy, expected.maxz)
        by_return = [sum(1 for p in sample_points if p.return_number == r) for r in (1, 2, 3)]
        assert fields["legacy_points_by_return"][:3] == by_return

    def test_header_overwritten_in_place(self):
        sink = io.BytesIO()
        writer = Writer(sink, Header())
        writer.write(Point())
        size_before = len(sink.getvalue())
        writer.close()
        assert len(sink.getvalue()) == size_before

    def test_already_closed(self):
        writer = Writer.default()
        writer.close()
        with pytest.raises(ClosedError):
            writer.close()
        with pytest.raises(ClosedError):
            writer.write(Point())
        assert writer.closed

    def test_evlrs_after_points(self, read_header):
        evlrs = [Vlr(user_id="first", data=b"AAAA"), Vlr(user_id="second", data=b"BB")]
        sink = io.BytesIO()
        writer = Writer(sink, Header(version="1.4", point_format=6, evlrs=evlrs))
        writer.write(Point(gps_time=1.0))
        writer.write(Point(gps_time=2.0))
        writer.close()
        data = sink.getvalue()
        fields = read_header(data)
        start = fields["start_of_first_evlr"]
        assert start == 375 + 2 * 30
        assert data[start + 2:start + 7] == b"first"
        second = start + 60 + 4
        assert data[second + 2:second + 8] == b"second"
        assert len(data) == second + 60 + 2

    def test_failed_close_can_be_retried(self, read_header):
        sink = FlakySink()
        writer = Writer(sink, Header())
        writer.write(Point())
        sink.fail_seeks = True
        with pytest.raises(OSError, match="seek failed"):
            writer.close()
        assert not writer.closed
        sink.fail_seeks = False
        writer.close()
        assert writer.closed
        assert read_header(sink.getvalue())["point_count"] == 1

    def test_close_logs_point_count(self, caplog):
        writer = Writer.default()
        writer.write(Point())
        with caplog.at_level(logging.INFO, logger="lasstream.io.writer"):
            writer.close()
        assert "1 points" in caplog.text


class TestLifetime:
    def test_context_manager_closes(self, read_header):
        sink = io.BytesIO()
        with Writer(sink, Header()) as writer:
            writer.write(Point(x=1.0))
        assert writer.closed
        assert read_header(sink.getvalue())["point_count"] == 1

    def test_context_manager_closes_on_error(self, read_header):
        sink = io.BytesIO()
        with pytest.raises(PointAttributesError):
            with Writer(sink, Header()) as writer:
                writer.write(Point())
                writer.write(Point(gps_time=1.0))
        assert writer.closed
        assert read_header(sink.getvalue())["point_count"] == 1

    def test_explicit_close_inside_context(self):
        with Writer.default() as writer:
            writer.close()
        assert writer.closed

    def test_unreferenced_writer_is_finalized(self, read_header):
        sink = io.BytesIO()
        writer = Writer(sink, Header())
        writer.write(Point(x=2.0, y=3.0, z=4.0))
        del writer
        gc.collect()
        fields = read_header(sink.getvalue())
        assert fields["point_count"] == 1
        assert fields["max"] == (2.0, 3.0, 4.0)


class TestIntoInner:
    def test_1_0_point_data_start_signature(self):
        writer = Writer(io.BytesIO(), Header(version="1.0", vlrs=[Vlr()]))
        writer.write(Point())
        cursor = writer.into_inner()
        cursor.seek(281)
        assert struct.unpack("<H", cursor.read(2))[0] == 0xCCDD

    def test_returns_stream_at_start(self):
        stream = Writer.default().into_inner()
        assert stream.tell() == 0
        assert stream.read(4) == b"LASF"

    def test_after_explicit_close(self):
        writer = Writer.default()
        writer.close()
        assert writer.into_inner().read(4) == b"LASF"

    def test_nonzero_start_position(self, read_header):
        sink = io.BytesIO()
        sink.write(b"prefix")
        writer = Writer(sink, Header())
        writer.write(Point(x=1.0))
        stream = writer.into_inner()
        assert stream.tell() == 6
        assert stream.getvalue()[:6] == b"prefix"
        assert read_header(stream.read())["point_count"] == 1

    def test_from_path_stream_handed_over(self, tmp_path):
        writer = Writer.from_path(tmp_path / "out.las")
        stream = writer.into_inner()
        try:
            assert not stream.closed
            assert stream.read(4) == b"LASF"
        finally:
            stream.close()
        with pytest.raises(ClosedError):
            writer.close()

    def test_from_path_after_close(self, tmp_path):
        writer = Writer.from_path(tmp_path / "out.las")
        writer.close()
        with pytest.raises(ClosedError, match="file it opened"):
            writer.into_inner()

    def test_failed_into_inner_keeps_file_owned(self, tmp_path, monkeypatch, read_header):
        path = tmp_path / "out.las"
        writer = Writer.from_path(path, Header(version="1.4", point_format=6))
        writer.write(Point(gps_time=1.0))

        def fail(*args, **kwargs):
            raise OSError("disk full")

        with monkeypatch.context() as patch:
            patch.setattr("lasstream.io.writer.write_vlrs", fail)
            with pytest.raises(OSError, match="disk full"):
                writer.into_inner()
        assert not writer.closed
        writer.close()
        assert read_header(path.read_bytes())["point_count"] == 1
        with pytest.raises(ClosedError, match="file it opened"):
            writer.into_inner()


class TestFromPath:
    def test_writes_file(self, tmp_path, read_header):
        path = tmp_path / "out.las"
        writer = Writer.from_path(path, Header(point_format=3))
        writer.write(Point(x=1.0, y=2.0, z=3.0, gps_time=5.0, color=Color(1, 2, 3)))
        writer.close()
        data = path.read_bytes()
        assert len(data) == 227 + 34
        assert read_header(data)["point_count"] == 1

    def test_invalid_header_closes_file(self, tmp_path):
        header = Header()
        header.system_identifier = "x" * 40
        with pytest.raises(ValueError):
            Writer.from_path(tmp_path / "bad.las", header)
