# flake8: noqa

from .exception import ConfigurationError
from .layer import DropoutLayer, Layer
from .network import INFERENCE, Network, TRAINING
