"""
Cloud masking from a categorical quality band
"""
import logging
from dataclasses import replace

import numpy as np

logger = logging.getLogger(__name__)


def cloud_mask(scene, qa_band, excluded_codes):
    """
    Boolean keep-mask for one scene

    Args:
        scene: Scene holding the quality band
        qa_band: Name of the categorical quality band (e.g. "SCL")
        excluded_codes: Quality codes to drop (cloud, shadow, ...)

    Pixels whose quality value is no data are dropped as well.
    """
    qa = scene.band(qa_band)
    excluded = np.isin(qa, np.asarray(list(excluded_codes), dtype=qa.dtype))
    return ~excluded & ~np.isnan(qa)


def apply_mask(scene, mask):
    """Copy of ``scene`` with masked pixels set to NaN in every band."""
    bands = {name: np.where(mask, band, np.nan).astype(band.dtype)
             for name, band in scene.bands.items()}
    return replace(scene, bands=bands)


def mask_clouds(scene, qa_band, excluded_codes):
    mask = cloud_mask(scene, qa_band, excluded_codes)
    removed = int(mask.size - np.count_nonzero(mask))
    logger.debug(f"{scene.scene_id}: masked {removed} of {mask.size} pixels")
    return apply_mask(scene, mask)
