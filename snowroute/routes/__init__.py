"""
Route aggregation and scoring.

Merges route fragments by name, buffers them, counts snow classes inside
each buffered route and turns the counts into a danger index.
"""
