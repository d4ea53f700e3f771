"""距離計算と半径フィルタ（Haversine）。
- 状態を持たない純粋関数のみ
- 座標は度単位の符号付き浮動小数点（lat: -90..90, lon: -180..180）
"""

import math
from typing import Hashable, Iterable, NamedTuple

from workspot.errors import ValidationError

EARTH_RADIUS_KM = 6371.0


class Coordinates(NamedTuple):
    lat: float
    lon: float


def validate_coordinates(lat: float, lon: float) -> Coordinates:
    """範囲外の座標は呼び出し側のバリデーションエラー（丸めない）。"""
    if not (-90.0 <= lat <= 90.0):
        raise ValidationError("latitude out of range", details={"field": "latitude", "value": lat})
    if not (-180.0 <= lon <= 180.0):
        raise ValidationError("longitude out of range", details={"field": "longitude", "value": lon})
    return Coordinates(float(lat), float(lon))


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    lat1, lon1 = math.radians(a.lat), math.radians(a.lon)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lon)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def within_radius(
    center: Coordinates,
    radius_km: float,
    points: Iterable[tuple[Hashable, Coordinates]],
) -> set:
    """center から radius_km 以内（境界を含む）にある点のIDを返す。
    - radius_km <= 0 は常に空集合
    - center/各点の座標は検証し、範囲外なら ValidationError
    """
    center = validate_coordinates(center.lat, center.lon)
    if radius_km <= 0:
        return set()

    matched = set()
    for point_id, coords in points:
        coords = validate_coordinates(coords.lat, coords.lon)
        if haversine_km(center, coords) <= radius_km:
            matched.add(point_id)
    return matched
