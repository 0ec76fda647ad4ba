"""Tests for map feature extraction and the feature set."""

import orjson
import pytest

from pathstream.models.geo import EMPTY_FEATURE_COLLECTION, FeatureSet
from pathstream.services.features import decode_point_feature, extract_features
from pathstream.utils.exceptions import DecodeError


def _point(lon, lat, **properties):
    feature = {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
    }
    if properties:
        feature["properties"] = properties
    return feature


COLOSSEUM = _point(
    12.4922,
    41.8902,
    names={"device_lang": "", "local_lang": "Colosseo", "global_lang": "Colosseum"},
    title="Amphitheatrum Flavium",
    img_url="  https://upload.wikimedia.org/colosseum.jpg ",
    wikipedia={"url": "https://en.wikipedia.org/wiki/Colosseum"},
)


def test_bare_array_payload():
    features = extract_features([COLOSSEUM, _point(12.4769, 41.8986, name="Pantheon")])
    assert [f.title for f in features] == ["Colosseo", "Pantheon"]


def test_wrapped_payload_shapes_decode_the_same():
    bare = extract_features([COLOSSEUM])
    assert extract_features({"type": "FeatureCollection", "features": [COLOSSEUM]}) == bare
    assert extract_features({"data": {"features": [COLOSSEUM]}}) == bare
    assert extract_features({"result": {"data": {"features": [COLOSSEUM]}}}) == bare


def test_accepts_json_text():
    text = orjson.dumps({"features": [COLOSSEUM]}).decode()
    assert len(extract_features(text)) == 1


def test_display_attributes():
    feature = extract_features([COLOSSEUM])[0]
    assert feature.coordinate.latitude == 41.8902
    assert feature.coordinate.longitude == 12.4922
    assert feature.title == "Colosseo"
    assert feature.image_url == "https://upload.wikimedia.org/colosseum.jpg"
    assert feature.wikipedia_url == "https://en.wikipedia.org/wiki/Colosseum"
    assert feature.feature_id == "poi_41.8902_12.4922"


def test_title_fallbacks():
    assert decode_point_feature(_point(1, 2, title="T", name="N")).title == "T"
    assert decode_point_feature(_point(1, 2, name="N")).title == "N"
    assert decode_point_feature(_point(1, 2)).title is None


def test_non_web_image_url_is_dropped():
    feature = decode_point_feature(_point(1, 2, img_url="file:///tmp/a.jpg"))
    assert feature is not None
    assert feature.image_url is None


def test_integer_coordinates_are_accepted():
    feature = decode_point_feature(_point(12, 41))
    assert feature.coordinate.longitude == 12.0


def test_malformed_features_are_skipped():
    payload = [
        COLOSSEUM,
        {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}},
        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [12.0]}},
        {"type": "Feature", "geometry": {"type": "Point", "coordinates": ["12", "41"]}},
        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [True, 41]}},
        {"type": "Feature", "properties": {"title": "no geometry"}},
        "not a feature",
        None,
    ]
    features = extract_features(payload)
    assert len(features) == 1
    assert features[0].title == "Colosseo"


def test_empty_features_array_is_not_an_error():
    assert extract_features({"features": []}) == []
    assert extract_features([]) == []


@pytest.mark.parametrize(
    "payload",
    [{"type": "FeatureCollection"}, {"features": {"not": "an array"}}, '"plain string"', 42, None],
)
def test_invalid_top_level_shape_raises(payload):
    with pytest.raises(DecodeError):
        extract_features(payload)


def test_extraction_is_idempotent():
    payload = {"features": [COLOSSEUM, _point(12.4769, 41.8986, name="Pantheon")]}
    assert extract_features(payload) == extract_features(payload)


def test_feature_set_revision_changes_on_replace():
    feature_set = FeatureSet()
    initial = feature_set.revision
    assert feature_set.to_geojson_str() == EMPTY_FEATURE_COLLECTION

    revision = feature_set.replace(extract_features([COLOSSEUM]))
    assert revision != initial
    assert feature_set.revision == revision
    assert len(feature_set) == 1

    again = feature_set.replace(extract_features([COLOSSEUM]))
    assert again != revision


def test_feature_set_geojson_uses_lon_lat_order():
    feature_set = FeatureSet()
    feature_set.replace(extract_features([COLOSSEUM]))
    collection = orjson.loads(feature_set.to_geojson_str())
    assert collection["type"] == "FeatureCollection"
    assert collection["features"][0]["geometry"]["coordinates"] == [12.4922, 41.8902]
