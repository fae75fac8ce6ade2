"""arduscope: oscilloscope front-end for a microcontroller ADC stream."""

__version__ = "0.1.0"
