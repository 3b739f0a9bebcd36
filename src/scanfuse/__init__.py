"""scanfuse: run security scanners and fuse their results into one scored report."""

from scanfuse.defaults import SCANFUSE_VERSION as __version__

__all__ = ["__version__"]
