"""SSTV receiver: FM demodulation, sync detection and BMP image decoding from I/Q samples."""

__version__ = "0.1.0"