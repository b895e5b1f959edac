"""Building blocks of an MPEG Audio Layer II encoder: bitstream, CRCs, thresholds, quantisation and bit allocation."""

__version__ = "0.1.0"