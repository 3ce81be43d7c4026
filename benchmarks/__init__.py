"""
Benchmark suite for tjson record mapping performance.

Compares tjson against other JSON libraries including:
- Python standard library json (with dataclasses.asdict)
- orjson (native dataclass support)
- ujson (with dataclasses.asdict)

Measures encoding and decoding speed across record graph sizes.
"""
