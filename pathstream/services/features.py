"""
Feature extraction for `map` event payloads.

Accepts a bare array of GeoJSON features or an object wrapping one under
`features` (also `data.features` and `result.data.features`, the shapes the
gateway uses for proxied responses). Each element becomes a PointFeature when
it has Point geometry with numeric [lon, lat] coordinates; everything else is
skipped.
"""

import logging
from typing import Any, List, Optional, Tuple

import httpx

from pathstream.models.geo import Coordinate, PointFeature
from pathstream.utils.exceptions import raise_decode_error
from pathstream.utils.payload import NUMBER, OBJECT, STRING, Payload, as_payload

logger = logging.getLogger(__name__)

# Key paths searched, in order, when the payload is an object
FEATURE_KEY_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("features",),
    ("data", "features"),
    ("result", "data", "features"),
)

# Title priority inside properties.names
NAME_KEYS = ("device_lang", "local_lang", "global_lang")

WEB_SCHEMES = ("http", "https")


def _locate_feature_array(payload: Payload) -> List[Payload]:
    if payload.is_array():
        return payload.as_array()

    if not payload.is_object():
        raise_decode_error(f"features payload must be an array or object, got {payload.kind}")

    for key_path in FEATURE_KEY_PATHS:
        node: Optional[Payload] = payload
        for key in key_path:
            node = node.get(key) if node is not None and node.is_object() else None
        if node is not None and node.is_array():
            return node.as_array()

    raise_decode_error("no feature array found", path="features")


def _read_coordinate(feature: Payload) -> Optional[Coordinate]:
    geometry = feature.get("geometry")
    if geometry is None or not geometry.is_object():
        return None
    if geometry.optional_str("type") != "Point":
        return None

    coordinates = geometry.get("coordinates")
    if coordinates is None or not coordinates.is_array():
        return None
    values = coordinates.as_array()
    if len(values) < 2 or values[0].kind != NUMBER or values[1].kind != NUMBER:
        return None

    return Coordinate(longitude=values[0].as_number(), latitude=values[1].as_number())


def _read_title(properties: Payload) -> Optional[str]:
    names = properties.get("names")
    if names is not None and names.is_object():
        for key in NAME_KEYS:
            value = names.optional_str(key)
            if value:
                return value

    # Fall back to title or name
    return properties.optional_str("title") or properties.optional_str("name")


def _read_image_url(properties: Payload) -> Optional[str]:
    raw_url = properties.optional_str("img_url")
    if raw_url is None:
        return None

    trimmed = raw_url.strip()
    try:
        url = httpx.URL(trimmed)
    except httpx.InvalidURL:
        logger.debug(f"Failed to parse img_url: {trimmed}")
        return None

    if url.scheme.lower() not in WEB_SCHEMES or not url.host:
        logger.debug(f"img_url is not an HTTP/HTTPS URL: {trimmed}")
        return None
    return trimmed


def _read_wikipedia_url(properties: Payload) -> Optional[str]:
    wikipedia = properties.get("wikipedia")
    if wikipedia is None or not wikipedia.is_object():
        return None
    return wikipedia.optional_str("url") or None


def decode_point_feature(item: Any) -> Optional[PointFeature]:
    """Decode one feature object; None when it lacks a usable Point coordinate."""
    feature = as_payload(item)
    if feature.kind != OBJECT:
        return None

    coordinate = _read_coordinate(feature)
    if coordinate is None:
        return None

    properties = feature.get("properties")
    if properties is None or not properties.is_object():
        return PointFeature(coordinate=coordinate)

    return PointFeature(
        coordinate=coordinate,
        title=_read_title(properties),
        image_url=_read_image_url(properties),
        wikipedia_url=_read_wikipedia_url(properties),
        properties=properties.raw,
    )


def extract_features(payload: Any) -> List[PointFeature]:
    """
    Extract point features from a `map` payload.

    Args:
        payload: Payload, JSON text, or already-parsed JSON value

    Returns:
        Decoded features in payload order (possibly empty)

    Raises:
        DecodeError: if the top-level shape holds no feature array
    """
    items = _locate_feature_array(as_payload(payload))

    features: List[PointFeature] = []
    for item in items:
        feature = decode_point_feature(item)
        if feature is not None:
            features.append(feature)

    skipped = len(items) - len(features)
    if skipped:
        logger.info(f"Skipped {skipped}/{len(items)} features without a usable Point coordinate")
    return features
