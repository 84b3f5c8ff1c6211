"""Denoising module.

Components:
    median: Edge-clamped square median filter over the 8-bit framebuffer
"""

from .median import MedianDenoiser, denoise_array

__all__ = [
    "MedianDenoiser",
    "denoise_array",
]
