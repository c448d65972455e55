"""
Tests for TrackLoader (GPX, KML and CSV adapters).
"""

from datetime import datetime, timezone

import pytest

from track_insight.features.tracks import TrackLoader


# =============================================================================
# Test Data
# =============================================================================

GPX_TWO_SEGMENTS = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Morning Ride</name>
    <trkseg>
      <trkpt lat="43.0000" lon="76.0000"><ele>1000</ele><time>2024-01-05T09:00:00Z</time></trkpt>
      <trkpt lat="43.0090" lon="76.0000"><ele>1010</ele><time>2024-01-05T09:01:00Z</time></trkpt>
    </trkseg>
    <trkseg>
      <trkpt lat="43.0180" lon="76.0000"><time>2024-01-05T09:02:00Z</time></trkpt>
    </trkseg>
  </trk>
</gpx>
"""

GPX_ROUTE_ONLY = b"""<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <rte>
    <rtept lat="10.0" lon="20.0"></rtept>
    <rtept lat="10.5" lon="20.5"></rtept>
  </rte>
</gpx>
"""

CSV_WITH_PREAMBLE = b"""Name,Lunch Walk
Device,Phone
Latitude,Longitude,Altitude,Time
43.0,76.0,900,2024-01-05T12:00:00Z
not-a-number,76.0,900,2024-01-05T12:00:30Z
43.001,76.001,905,2024-01-05T12:01:00
"""

KML_LINE_STRING = b"""<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <Placemark>
      <name>Ridge</name>
      <LineString>
        <coordinates>
          76.0,43.0,1000 76.0,43.009,1010
          76.0,43.018
        </coordinates>
      </LineString>
    </Placemark>
  </Document>
</kml>
"""

KML_GX_TRACK = b"""<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2" xmlns:gx="http://www.google.com/kml/ext/2.2">
  <Document>
    <Placemark>
      <gx:Track>
        <when>2024-01-05T09:00:00Z</when>
        <when>2024-01-05T09:01:00Z</when>
        <gx:coord>76.0 43.0 1000</gx:coord>
        <gx:coord>76.0 43.009 1010</gx:coord>
      </gx:Track>
    </Placemark>
    <Placemark>
      <LineString><coordinates>76.0,43.018,1020</coordinates></LineString>
    </Placemark>
  </Document>
</kml>
"""


# =============================================================================
# Tests
# =============================================================================

class TestGPX:
    """GPX parsing via gpxpy."""

    def test_segments_flattened_in_order(self):
        track = TrackLoader.parse(GPX_TWO_SEGMENTS, "ride.gpx")
        assert track.name == "ride.gpx"
        assert [p.lat for p in track.points] == [43.0, 43.009, 43.018]
        assert track.points[0].elevation == 1000
        assert track.points[2].elevation is None
        assert track.points[1].timestamp == datetime(2024, 1, 5, 9, 1, tzinfo=timezone.utc)

    def test_bounds_and_distance(self):
        track = TrackLoader.parse(GPX_TWO_SEGMENTS, "ride.gpx")
        assert track.bounds == ((43.0, 76.0), (43.018, 76.0))
        assert 1.9 < track.total_distance_km < 2.1

    def test_route_points_used_without_tracks(self):
        track = TrackLoader.parse(GPX_ROUTE_ONLY, "route.gpx")
        assert len(track) == 2
        assert track.points[0].timestamp is None

    def test_invalid_gpx(self):
        with pytest.raises(ValueError):
            TrackLoader.parse(b"<gpx><trk><trkseg><trkpt lat=", "bad.gpx")

    def test_empty_gpx(self):
        empty = b'<?xml version="1.0"?><gpx version="1.1" creator="t" xmlns="http://www.topografix.com/GPX/1/1"></gpx>'
        with pytest.raises(ValueError, match="No valid track points"):
            TrackLoader.parse(empty, "empty.gpx")


class TestKML:
    """KML parsing via ElementTree."""

    def test_line_string_coordinates(self):
        track = TrackLoader.parse(KML_LINE_STRING, "ridge.kml")
        assert track.name == "ridge.kml"
        assert [p.lat for p in track.points] == [43.0, 43.009, 43.018]
        assert [p.lon for p in track.points] == [76.0, 76.0, 76.0]
        assert track.points[1].elevation == 1010
        assert track.points[2].elevation is None
        assert all(p.timestamp is None for p in track.points)

    def test_gx_track_times_and_lines_flattened(self):
        track = TrackLoader.parse(KML_GX_TRACK, "ride.kml")
        assert [p.lat for p in track.points] == [43.0, 43.009, 43.018]
        assert track.points[0].elevation == 1000
        assert track.points[1].timestamp == datetime(2024, 1, 5, 9, 1, tzinfo=timezone.utc)
        assert track.points[2].timestamp is None

    def test_minimal_kml_without_namespace(self):
        content = b"<kml><Placemark><LineString><coordinates>0,0,0 0,0.01,0</coordinates></LineString></Placemark></kml>"
        track = TrackLoader.parse(content, "a.kml")
        assert [(p.lat, p.lon) for p in track.points] == [(0.0, 0.0), (0.01, 0.0)]

    def test_bad_tuples_skipped(self):
        content = b"<kml><LineString><coordinates>0,0 oops 1,x 0,0.01</coordinates></LineString></kml>"
        track = TrackLoader.parse(content, "a.kml")
        assert len(track) == 2

    def test_no_lines(self):
        with pytest.raises(ValueError, match="No valid track points found in KML"):
            TrackLoader.parse(b"<?xml version='1.0'?><kml></kml>", "x.kml")

    def test_invalid_kml(self):
        with pytest.raises(ValueError, match="Invalid KML"):
            TrackLoader.parse(b"<kml><Placemark>", "bad.kml")


class TestCSV:
    """CSV parsing."""

    def test_header_detection_and_name(self):
        track = TrackLoader.parse(CSV_WITH_PREAMBLE, "walk.csv")
        assert track.name == "Lunch Walk"
        assert len(track) == 2  # non-numeric row skipped
        assert track.points[0].elevation == 900
        assert track.points[0].timestamp == datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)

    def test_naive_time_taken_as_utc(self):
        track = TrackLoader.parse(CSV_WITH_PREAMBLE, "walk.csv")
        assert track.points[1].timestamp.tzinfo is not None

    def test_plain_header_uses_filename(self):
        content = b"latitude,longitude,ele\n1.0,2.0,5\n1.1,2.1,\n"
        track = TrackLoader.parse(content, "plain.csv")
        assert track.name == "plain.csv"
        assert track.points[0].elevation == 5
        assert track.points[1].elevation is None
        assert track.points[1].timestamp is None

    def test_no_coordinates(self):
        with pytest.raises(ValueError, match="Latitude/Longitude"):
            TrackLoader.parse(b"a,b\n1,2\n", "bad.csv")


class TestFormatDetection:
    """Format detection."""

    def test_unknown_xml(self):
        with pytest.raises(ValueError, match="Unrecognized XML"):
            TrackLoader.parse(b"<?xml version='1.0'?><osm></osm>", "x.osm")

    def test_binary_content(self):
        with pytest.raises(ValueError):
            TrackLoader.parse(b"\xff\xfe\x00bad", "x.csv")
