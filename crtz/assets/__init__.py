"""
Assets module - pictures shown by scripts.
"""

from crtz.assets.pictures import PictureLibrary, PictureLoader, Picture, IMAGE_EXTENSIONS

__all__ = [
    "PictureLibrary",
    "PictureLoader",
    "Picture",
    "IMAGE_EXTENSIONS",
]
