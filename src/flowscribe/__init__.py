"""
Flowscribe: compile visual workflow graphs into source artifacts.

Nodes and edges drawn on a canvas are partitioned into routes, walked into
execution paths, and stitched together from per-node plugin output.
"""

__version__ = "0.1.0"
