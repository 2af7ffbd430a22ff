from collections import namedtuple

import numpy


LossPair = namedtuple('LossPair', ['loss', 'prime'])

HUBER_DELTA = 1.0


def mse(pred, targets):
    """ Mean squared error between `pred` and `targets`
    """
    diff = numpy.asarray(targets) - numpy.asarray(pred)
    return numpy.mean(diff**2)


def mse_prime(pred, target):
    """ Gradient of the half squared error, 0.5 * (pred - target)**2,
    with respect to `pred`
    """
    return pred - target


def mae(pred, targets):
    """ Mean absolute error between `pred` and `targets`
    """
    diff = numpy.asarray(pred) - numpy.asarray(targets)
    return numpy.mean(numpy.abs(diff))


def mae_prime(pred, target):
    return numpy.sign(pred - target)


def huber(pred, targets, delta=HUBER_DELTA):
    """ Summed Huber loss: quadratic for errors within `delta` and
    linear beyond
    """
    err = numpy.abs(numpy.asarray(targets) - numpy.asarray(pred))
    quadratic = 0.5 * err**2
    linear = delta * (err - 0.5*delta)
    return numpy.sum(numpy.where(err > delta, linear, quadratic))


def huber_prime(pred, target, delta=HUBER_DELTA):
    return numpy.clip(pred - target, -delta, delta)


LOSSES = {
    'mse': LossPair(mse, mse_prime),
    'mae': LossPair(mae, mae_prime),
    'huber': LossPair(huber, huber_prime),
}


def get_loss(name):
    """ Returns the :class:`LossPair` registered under `name`
    """
    try:
        return LOSSES[name]
    except KeyError:
        msg = "Unknown loss {!r} (should be one of {})"
        raise ValueError(msg.format(name, sorted(LOSSES)))
