"""
Scene preparation utilities.

This module contains the scene catalog and loader, the cloud masker and
the median compositor that feed the snow classification.
"""
