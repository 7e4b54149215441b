from .Tensor import Tensor
from .Network import Network
from .layers import (
    Layer,
    InputLayer,
    ConvLayer,
    FullyConnectedLayer,
    ReLU,
)
from .helpers.Backend import backend

__version__ = "0.1.0"

__all__ = [
    "Tensor",
    "Network",
    "Layer",
    "InputLayer",
    "ConvLayer",
    "FullyConnectedLayer",
    "ReLU",
    "backend",
]
