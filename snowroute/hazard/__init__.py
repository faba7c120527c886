"""
Snow hazard pipeline orchestration.

``pipeline`` wires the stages together, ``export`` writes the class
raster and the route table, and ``run_hazard_pipeline`` is the command
line entry point.
"""
