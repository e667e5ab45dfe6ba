"""owlshop: synthetic traffic generator for an imaginary storefront."""

__version__ = "0.1.0"
