"""Shortest-path routing on road networks with customizable contraction hierarchies, plus geographic and graph helpers."""

__version__ = "0.1.0"

__all__ = [
    "cch",
    "cch_metric",
    "cch_partial",
    "cch_query",
    "geo_position_to_node",
    "google_polyline",
    "graph_export",
    "graph_util",
    "id_mapper",
    "permutation",
    "tag_map",
    "vector_text",
]