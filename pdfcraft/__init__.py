"""PDF building blocks: TrueType parsing and subsetting, images, RC4 protection, outlines and page objects."""

__version__ = "0.1.0"