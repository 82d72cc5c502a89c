"""sht21ctl — command-line control for the SHT-21 humidity/temperature sensor.

Talks to the sensor over the Linux I2C bus with a strict layered
architecture (cli → core → infra).
"""

from sht21ctl.version import __version__

__all__: list[str] = ["__version__"]
