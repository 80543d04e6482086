from .polygon import (
    Point,
    EPS,
    polygon_area,
    polygon_bounds,
    polygon_centroid,
    ensure_ccw,
    rotate_point,
    point_segment_dist,
    segment_distance,
    polyline_length,
    turn_angle,
    segments_intersect,
    segments_cross,
    segment_intersection_point,
    same_point,
    is_self_intersecting,
)
