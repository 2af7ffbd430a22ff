""" This module provides a few simple `on_epoch` functions that can be
used with :meth:`sgdnet.Network.fit`
"""
import logging


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


def collect_correct(inputs, targets, correct_list):
    """ Collects the number of correctly classified examples after each
    epoch. Counts are appended to :code:`correct_list` and so an empty list
    should be provided. Usage::

        n_correct = []
        counter = collect_correct(inputs, targets, n_correct)
        network.fit(..., on_epoch=[counter, ...])
    """

    def on_epoch(epoch, network):
        correct_list.append(network.evaluate(inputs, targets))

    return on_epoch


def collect_loss(inputs, targets, loss_list, loss_func):
    """ Collects the average of :code:`loss_func(prediction, target)` over
    the given examples after each epoch
    """

    def on_epoch(epoch, network):
        total = 0.0
        for x, target in zip(inputs, targets):
            total += loss_func(network.predict(x), target)
        loss_list.append(total / len(inputs))

    return on_epoch


def log_accuracy(inputs, targets, every=1):
    """ Logs the classification accuracy every :code:`every` epochs
    """

    def on_epoch(epoch, network):
        if epoch % every == 0:
            n_correct = network.evaluate(inputs, targets)
            msg = "(Epoch = {:04d}) Accuracy = {:d} / {:d}"
            logger.info(msg.format(epoch, n_correct, len(inputs)))

    return on_epoch
