"""
Slit-Drum Tongue Detection Package

Locates candidate tongue regions on a photo of a slit drum so a virtual
layout can be calibrated against the real instrument.
"""

__version__ = "1.0.0"

from . import detection
from . import calibration
from . import data
from . import utils
from .errors import TongueDetectionError, InputShapeError, BackendFailure
