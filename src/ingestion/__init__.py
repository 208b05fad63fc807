# Ingestion module
# Handles decoding and preprocessing of input images:
# - Images (PNG, JPG, GIF, BMP, WebP, TIFF) via Pillow
# - Downscaling to the core's size limit
# - Noise-reducing smoothing before edge detection

from .loader import ImageLoader, LoadedImage
from .preprocessor import ImagePreprocessor, PreprocessingConfig, ColorMode

__all__ = ["ImageLoader", "LoadedImage", "ImagePreprocessor", "PreprocessingConfig", "ColorMode"]
