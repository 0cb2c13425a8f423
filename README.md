# roadroute

Shortest-path routing on road networks, in pure Python with no dependencies
beyond the standard library.

Graphs are given in the usual adjacency-array form: `first_out[x]` to
`first_out[x + 1]` are the ids of the arcs leaving node `x`, and `head[a]`
is the node arc `a` points to. Node and arc ids are plain integers. Missing
arcs and ids are marked with `roadroute.permutation.INVALID_ID`, and an
unreachable distance is `roadroute.cch_metric.INF_WEIGHT`.

## What is inside

| Module | Purpose |
| --- | --- |
| `roadroute.cch` | Builds a customizable contraction hierarchy (CCH) from a node order and the graph's arcs; enumerates the triangles of its arcs. |
| `roadroute.cch_metric` | Attaches arc weights to a CCH and customizes them. |
| `roadroute.cch_partial` | Level-ordered customization, re-customization of changed arcs only, and the `IDSetMinQueue` used for it. |
| `roadroute.cch_query` | Distance and path queries, including one-to-many and many-to-one queries against pinned targets or sources. |
| `roadroute.geo_position_to_node` | Finds the point nearest to a latitude/longitude, or all points within a radius; `geo_dist` gives great-circle distances in metres. |
| `roadroute.google_polyline` | Encodes and decodes the Google polyline format. |
| `roadroute.graph_util` | Arc lookup, node/arc path conversions, `first_out`/tail conversion and arc sorting permutations. |
| `roadroute.permutation` | Applying, chaining and inverting permutations. |
| `roadroute.id_mapper` | Dense numbering of the set positions of a bit sequence (`LocalIDMapper`, `IDMapper`). |
| `roadroute.tag_map` | A small lookup table for key/value tags. |
| `roadroute.graph_export` | Renders a graph as Graphviz DOT, SVG or DIMACS text. |
| `roadroute.vector_text` | Converts one-value-per-line text to typed values and back. |

## Shortest paths with a CCH

A CCH is built once from the graph's structure and a node order, then
customized with any set of weights. Queries run on the customized metric.

```python
from roadroute.cch import CustomizableContractionHierarchy
from roadroute.cch_metric import CustomizableContractionHierarchyMetric
from roadroute.cch_query import CustomizableContractionHierarchyQuery

# A small directed graph given as parallel tail/head/weight lists.
tail   = [0, 1, 2, 0]
head   = [1, 2, 3, 3]
weight = [1, 1, 1, 5]
order  = [0, 3, 1, 2]          # contraction order of the nodes

cch = CustomizableContractionHierarchy(order, tail, head, None, True)

metric = CustomizableContractionHierarchyMetric(cch, weight)
metric.customize()

query = CustomizableContractionHierarchyQuery(metric)
query.add_source(0, 0)
query.add_target(3, 0)
query.run()

print(query.get_distance())    # 3
print(query.get_node_path())   # [0, 1, 2, 3]
print(query.get_arc_path())    # [0, 1, 2]  (ids of the input arcs)
```

Passing a callable such as `print` as the fourth argument makes the
constructor report its progress. The last argument drops upward arcs that
would be infinite under every metric.

The metric keeps its own copy of the weights. When a few weights change,
hand the new list to the metric and let a partial customization update just
the affected arcs:

```python
from roadroute.cch_partial import CustomizableContractionHierarchyPartialCustomization

weight[3] = 2
metric.reset(weight)

partial = CustomizableContractionHierarchyPartialCustomization(cch)
partial.update_arc(3)
partial.customize(metric)
```

`CustomizableContractionHierarchyParallelization(cch).customize(metric)`
customizes a metric level by level; every arc of one level is independent of
the others in that level. The work itself runs in the calling thread.

For one source and many targets, pin the targets once and reuse them:

```python
query.reset(metric)
query.pin_targets([1, 2, 3])
query.add_source(0, 0)
query.run_to_pinned_targets()
print(query.get_distances_to_targets())

query.reset_source()           # keep the targets, try another source
query.add_source(1, 0)
query.run_to_pinned_targets()
```

`pin_sources`, `add_target`, `run_to_pinned_sources`,
`get_distances_to_sources` and `reset_target` do the same the other way
round. Calling a query method in the wrong state raises `RuntimeError`.

## Nearest point to a position

```python
from roadroute.geo_position_to_node import GeoPositionToNode, geo_dist

index = GeoPositionToNode([49.00, 49.01, 49.02], [8.40, 8.41, 8.42])
result = index.find_nearest_neighbor_within_radius(49.009, 8.409, 1000)
print(result)                  # NearestNeighborResult(id=..., distance=...) or None

for hit in index.find_all_nodes_within_radius(49.01, 8.41, 2000):
    print(hit.id, hit.distance)

print(geo_dist(49.0, 8.4, 49.01, 8.41))   # distance in metres
```

## Google polylines

```python
from roadroute.google_polyline import encode_polyline, decode_polyline

text = encode_polyline([(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)])
print(text)                    # _p~iF~ps|U_ulLnnqC_mqNvxq`@
print(decode_polyline(text))
```

`GooglePolylineEncoder` and `GooglePolylineDecoder` work one point at a
time; the decoder returns the remaining text along with each point.

## Graph export

```python
from roadroute.graph_export import graph_to_dot, graph_to_dimacs, graph_to_svg

first_out = [0, 1, 2, 2]
head = [1, 2]
weight = [7, 9]
print(graph_to_dot(first_out, head, weight))
print(graph_to_dimacs(first_out, head, weight))
print(graph_to_svg(first_out, head, [49.0, 49.1, 49.2], [8.4, 8.5, 8.6]))
```

Each function returns the text; writing it to a file is up to the caller.

## Values as text

```python
from roadroute.vector_text import DataType, format_values, parse_values

values = parse_values(DataType.INT16, ["12", "-7"])
print(format_values("int16", values))
print(parse_values("string", ["a\\nb"]))   # ['a\nb']
```

Integers outside the range of the chosen type raise `ValueError`, as does an
unknown type name.

## What the package does not do

- It has no command-line programs; everything is called from Python.
- It does not read or write binary vector files. `roadroute.vector_text`
  works on text lines and Python lists only.
- It does not import map data; graphs, coordinates and node orders must be
  built by the caller. It does not compute node orders either.
- It has no plain contraction hierarchy and no Dijkstra search of its own;
  routing is done through the CCH modules.

## Running the tests

The tests use pytest and live in `tests/`; install the `test` extra and run
`pytest`.