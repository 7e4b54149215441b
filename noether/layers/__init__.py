from .Layer import Layer
from .InputLayer import InputLayer
from .ConvLayer import ConvLayer
from .FullyConnectedLayer import FullyConnectedLayer
from .ReLU import ReLU

__all__ = [
    "Layer",
    "InputLayer",
    "ConvLayer",
    "FullyConnectedLayer",
    "ReLU",
]
