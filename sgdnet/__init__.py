# flake8: noqa

from .core.exception import ConfigurationError
from .core.layer import DropoutLayer, Layer
from .core.network import INFERENCE, Network, TRAINING
