"""docshelf — markdown documentation tree with slug routing and safe editing."""

__version__ = "0.1.0"
