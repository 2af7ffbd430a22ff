""" Element-wise activation functions and their derivatives

The network evaluates an activation's derivative at the *activated*
value of each unit. For that reason, the pairs returned by
:func:`get_activation` use the `*_output_prime` derivatives where the
plain derivative of the pre-activation would differ.
"""
from collections import namedtuple

import numpy
from scipy.special import expit


ActivationPair = namedtuple('ActivationPair', ['activate', 'prime'])

LEAKY_RELU_SLOPE = 0.01


def identity(x):
    return numpy.asarray(x, dtype=numpy.float64)


def identity_prime(x):
    return numpy.ones_like(x, dtype=numpy.float64)


def sigmoid(x):
    """ f(x) = 1 / (1 + exp(-x)) """
    return expit(x)


def sigmoid_prime(x):
    s = expit(x)
    return s * (1 - s)


def sigmoid_output_prime(y):
    """ The sigmoid derivative written in terms of y = sigmoid(x) """
    return y * (1 - y)


def tanh(x):
    return numpy.tanh(x)


def tanh_prime(x):
    return 1 - numpy.tanh(x)**2


def tanh_output_prime(y):
    """ The tanh derivative written in terms of y = tanh(x) """
    return 1 - y**2


def softplus(x):
    """ f(x) = log(1 + exp(x)) """
    return numpy.logaddexp(0, x)


def softplus_prime(x):
    return expit(x)


def softplus_output_prime(y):
    """ The softplus derivative written in terms of y = softplus(x) """
    return -numpy.expm1(-y)


def relu(x):
    return numpy.maximum(0, x)


def relu_prime(x):
    return (numpy.asarray(x) > 0).astype(numpy.float64)


def leaky_relu(x):
    return numpy.where(numpy.asarray(x) > 0, x, LEAKY_RELU_SLOPE * x)


def leaky_relu_prime(x):
    return numpy.where(numpy.asarray(x) > 0, 1.0, LEAKY_RELU_SLOPE)


# relu and leaky relu preserve the sign of their input, so their plain
# derivatives are also valid at the activated value.
ACTIVATIONS = {
    'identity': ActivationPair(identity, identity_prime),
    'sigmoid': ActivationPair(sigmoid, sigmoid_output_prime),
    'tanh': ActivationPair(tanh, tanh_output_prime),
    'softplus': ActivationPair(softplus, softplus_output_prime),
    'relu': ActivationPair(relu, relu_prime),
    'leaky_relu': ActivationPair(leaky_relu, leaky_relu_prime),
}


def get_activation(name):
    """ Returns the :class:`ActivationPair` registered under `name`
    """
    try:
        return ACTIVATIONS[name]
    except KeyError:
        msg = "Unknown activation {!r} (should be one of {})"
        raise ValueError(msg.format(name, sorted(ACTIVATIONS)))
