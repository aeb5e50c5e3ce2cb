"""Document generation service: templates, data and output formats in, documents out."""

__version__ = "0.1.0"
