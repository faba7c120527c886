"""
SnowRoute Python package.

Rates the snow hazard of mountaineering routes from multispectral
satellite scenes. Modules:
- ``data``: scene loading, cloud masking and median compositing
- ``snow``: snow index, local snow percentage and hazard classes
- ``routes``: route merging, zonal class histograms and danger index
- ``hazard``: pipeline orchestration, outputs and the command line
- ``utils``: inspection helpers

Every stage works on in-memory arrays and geometries, so the pipeline
can be embedded in a larger application as well as run from the
command line.
"""
