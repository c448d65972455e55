"""
Track Loaders

Turn raw file content into a normalized Track. Supports GPX (via gpxpy), KML
and CSV exports with latitude/longitude columns.
"""

import csv
import io
import logging
import math
import xml.etree.ElementTree as ET
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

import gpxpy

from .models import GeoPoint, Track

logger = logging.getLogger(__name__)

# How many leading lines may precede the CSV header row
CSV_HEADER_SEARCH_LINES = 20


def _as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are taken as UTC so all points compare."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _parse_time(text) -> Optional[datetime]:
    if text is None:
        return None
    s = str(text).strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(s))
    except ValueError:
        return None


def _parse_float(text) -> Optional[float]:
    if text is None:
        return None
    try:
        value = float(str(text).strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _local_name(tag) -> str:
    """Tag name without its XML namespace; comments have no name."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _kml_point(lon_text, lat_text, ele_text=None) -> Optional[GeoPoint]:
    lat = _parse_float(lat_text)
    lon = _parse_float(lon_text)
    if lat is None or lon is None:
        return None
    return GeoPoint(lat=lat, lon=lon, elevation=_parse_float(ele_text))


def _kml_line_string(line: ET.Element) -> List[GeoPoint]:
    """Points of a LineString: whitespace separated 'lon,lat[,ele]' tuples."""
    points = []
    for coordinates in line.iter():
        if _local_name(coordinates.tag) != "coordinates" or not coordinates.text:
            continue
        for token in coordinates.text.split():
            parts = token.split(",")
            if len(parts) < 2:
                continue
            point = _kml_point(*parts[:3])
            if point is not None:
                points.append(point)
    return points


def _kml_track(track: ET.Element) -> List[GeoPoint]:
    """Points of a gx:Track; the n-th <when> times the n-th <gx:coord>."""
    whens = [child.text for child in track if _local_name(child.tag) == "when"]
    coords = [child.text for child in track if _local_name(child.tag) == "coord"]

    points = []
    for i, coord in enumerate(coords):
        parts = (coord or "").split()
        if len(parts) < 2:
            continue
        point = _kml_point(*parts[:3])
        if point is None:
            continue
        timestamp = _parse_time(whens[i]) if i < len(whens) else None
        points.append(replace(point, timestamp=timestamp))
    return points


class TrackLoader:
    """Service for parsing track files."""

    @staticmethod
    def parse(content: bytes, filename: str = "Untitled Track") -> Track:
        """
        Detect the format and parse content into a Track.

        Args:
            content: File content as bytes
            filename: Used as the track name unless the file names itself

        Returns:
            Track with at least one point

        Raises:
            ValueError: If the format is unsupported or no points were found
        """
        try:
            text = content.decode("utf-8-sig").strip()
        except UnicodeDecodeError as e:
            raise ValueError(f"Track file is not valid UTF-8: {e}")

        if text.startswith("<"):
            if "<gpx" in text:
                return TrackLoader.parse_gpx(text, filename)
            if "<kml" in text:
                return TrackLoader.parse_kml(text, filename)
            raise ValueError("Unrecognized XML track format")

        return TrackLoader.parse_csv(text, filename)

    @staticmethod
    def parse_gpx(text: str, filename: str) -> Track:
        """
        Parse GPX text. All tracks and segments are flattened in order;
        routes are used only when there are no track points.
        """
        try:
            gpx = gpxpy.parse(text)
        except Exception as e:
            logger.error(f"Failed to parse GPX: {e}")
            raise ValueError(f"Invalid GPX file: {e}")

        points: List[GeoPoint] = []
        segment_count = 0

        for track in gpx.tracks:
            for segment in track.segments:
                segment_count += 1
                for point in segment.points:
                    points.append(GeoPoint(
                        lat=point.latitude,
                        lon=point.longitude,
                        elevation=point.elevation,
                        timestamp=_as_utc(point.time),
                    ))

        if not points:
            for route in gpx.routes:
                for point in route.points:
                    points.append(GeoPoint(
                        lat=point.latitude,
                        lon=point.longitude,
                        elevation=point.elevation,
                        timestamp=_as_utc(point.time),
                    ))

        if not points:
            raise ValueError("No valid track points found in GPX")

        if segment_count > 1:
            logger.debug(f"Flattened {segment_count} GPX segments into one polyline")

        return Track.from_points(filename, points)

    @staticmethod
    def parse_kml(text: str, filename: str) -> Track:
        """
        Parse KML text. LineString coordinates ("lon,lat[,ele]" tuples) and
        gx:Track samples (<when> paired with "lon lat [ele]" <gx:coord>) are
        flattened in document order.
        """
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            logger.error(f"Failed to parse KML: {e}")
            raise ValueError(f"Invalid KML file: {e}")

        points: List[GeoPoint] = []
        line_count = 0

        for element in root.iter():
            tag = _local_name(element.tag)
            if tag == "LineString":
                line_count += 1
                points.extend(_kml_line_string(element))
            elif tag == "Track":
                line_count += 1
                points.extend(_kml_track(element))

        if not points:
            raise ValueError("No valid track points found in KML")

        if line_count > 1:
            logger.debug(f"Flattened {line_count} KML lines into one polyline")

        return Track.from_points(filename, points)

    @staticmethod
    def parse_csv(text: str, filename: str) -> Track:
        """
        Parse CSV text with latitude/longitude (and optional altitude/ele,
        time) columns. Metadata lines may precede the header; a
        'name,<value>' line among them names the track.
        """
        lines = text.splitlines()

        header_idx = 0
        for i, line in enumerate(lines[:CSV_HEADER_SEARCH_LINES]):
            lowered = line.lower()
            if "latitude" in lowered and "longitude" in lowered:
                header_idx = i
                break

        name = filename
        for line in lines[:header_idx]:
            if line.lower().startswith("name,"):
                value = line.split(",", 1)[1].strip()
                if value:
                    name = value
                break

        reader = csv.DictReader(io.StringIO("\n".join(lines[header_idx:])))
        points: List[GeoPoint] = []
        skipped = 0

        for row in reader:
            normalized = {
                (k or "").strip().lower(): v for k, v in row.items()
            }
            lat = _parse_float(normalized.get("latitude"))
            lon = _parse_float(normalized.get("longitude"))
            if lat is None or lon is None:
                skipped += 1
                continue

            elevation = _parse_float(normalized.get("altitude"))
            if elevation is None:
                elevation = _parse_float(normalized.get("ele"))

            points.append(GeoPoint(
                lat=lat,
                lon=lon,
                elevation=elevation,
                timestamp=_parse_time(normalized.get("time")),
            ))

        if skipped:
            logger.debug(f"Skipped {skipped} CSV rows without numeric coordinates")

        if not points:
            raise ValueError("No valid Latitude/Longitude columns found in CSV")

        return Track.from_points(name, points)
