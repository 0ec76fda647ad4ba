"""
Map feature records produced from `map` event payloads.

PointFeature is the typed view of one GeoJSON Point feature; FeatureSet is
the current map layer plus a revision token renderers use to notice updates.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import orjson
from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """WGS84 position. GeoJSON carries it as [longitude, latitude]."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class PointFeature(BaseModel):
    """A map point with display attributes. Never exists without a coordinate."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    title: Optional[str] = None
    image_url: Optional[str] = None
    wikipedia_url: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    @property
    def feature_id(self) -> str:
        """Stable identifier based on coordinates."""
        return f"poi_{self.coordinate.latitude}_{self.coordinate.longitude}"

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [self.coordinate.longitude, self.coordinate.latitude],
            },
            "properties": dict(self.properties),
        }


EMPTY_FEATURE_COLLECTION = '{"type":"FeatureCollection","features":[]}'


def _new_revision() -> str:
    return uuid.uuid4().hex


@dataclass
class FeatureSet:
    """Current map features. `revision` changes on every successful replace()."""

    features: List[PointFeature] = field(default_factory=list)
    revision: str = field(default_factory=_new_revision)

    def replace(self, features: Sequence[PointFeature]) -> str:
        self.features = list(features)
        self.revision = _new_revision()
        return self.revision

    def __len__(self) -> int:
        return len(self.features)

    def to_geojson(self) -> Dict[str, Any]:
        """FeatureCollection dict for the map renderer."""
        return {
            "type": "FeatureCollection",
            "features": [feature.to_geojson() for feature in self.features],
        }

    def to_geojson_str(self) -> str:
        if not self.features:
            return EMPTY_FEATURE_COLLECTION
        return orjson.dumps(self.to_geojson()).decode()
