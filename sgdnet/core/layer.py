import logging

import numpy

from .exception import ConfigurationError


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


def _identity(x):
    return x


def validate_rate(rate):
    """ Returns `rate` as a float, raising ConfigurationError unless it
    lies in [0, 1)
    """
    try:
        rate = float(rate)
    except (ValueError, TypeError):
        msg = "Dropout rate must be numeric (got {!r})"
        raise ConfigurationError(msg.format(rate))

    if not 0.0 <= rate < 1.0:
        msg = "Dropout rate must lie in [0, 1) (got {})"
        raise ConfigurationError(msg.format(rate))

    return rate


def _validate_size(size, name):
    if isinstance(size, bool) or not isinstance(size, (int, numpy.integer)):
        msg = "`{}` should be an int (got {})"
        raise ConfigurationError(msg.format(name, type(size).__name__))
    if size < 1:
        msg = "`{}` should be positive (got {})"
        raise ConfigurationError(msg.format(name, size))
    return int(size)


class Layer:
    """ A dense, fully-connected layer

    params: weights, where weights[i, j] = weight from input i to output j.
            biases, where biases[j] = bias into output unit j.

    For a single vector input, the computation is::

        output = activation(biases + dot(inputs, weights))
    """
    def __init__(self, input_size, output_size, random_state=None,
                 weights=None, biases=None):
        """
        Parameters
        ----------
        input_size: int
            Number of input units.

        output_size: int
            Number of output units.

        random_state: numpy.random.RandomState, default=None
            Provide a RandomState object for reproducible results. Weights
            and biases are drawn from a standard normal distribution.

        weights: ndarray, shape=(input_size, output_size), default=None
            Initial weights. The default of None draws them randomly.

        biases: ndarray, shape=(output_size,), default=None
            Initial biases. The default of None draws them randomly.
        """
        self.input_size = _validate_size(input_size, 'input_size')
        self.output_size = _validate_size(output_size, 'output_size')

        rs = numpy.random.RandomState() if random_state is None \
            else random_state

        if weights is None:
            self.weights = rs.randn(self.input_size, self.output_size)
        else:
            self.weights = numpy.array(weights, dtype=numpy.float64)
            if self.weights.shape != (self.input_size, self.output_size):
                msg = "`weights` was shape {} but should be {}"
                raise ValueError(msg.format(
                    self.weights.shape, (self.input_size, self.output_size)))

        if biases is None:
            self.biases = rs.randn(self.output_size)
        else:
            self.biases = numpy.array(biases, dtype=numpy.float64)
            if self.biases.shape != (self.output_size,):
                msg = "`biases` was shape {} but should be {}"
                raise ValueError(msg.format(
                    self.biases.shape, (self.output_size,)))

    def __repr__(self):
        return "<Layer input_size=%d, output_size=%d>" % (
            self.input_size, self.output_size)

    def _validate_inputs(self, inputs):
        inputs = numpy.asarray(inputs, dtype=numpy.float64)
        if inputs.shape != (self.input_size,):
            msg = "`inputs` was shape {} but should be {}"
            raise ValueError(msg.format(inputs.shape, (self.input_size,)))
        return inputs

    def _validate_errors(self, errors):
        errors = numpy.asarray(errors, dtype=numpy.float64)
        if errors.shape != (self.output_size,):
            msg = "`errors` was shape {} but should be {}"
            raise ValueError(msg.format(errors.shape, (self.output_size,)))
        return errors

    def forward(self, inputs, activation=None):
        """ Compute the activated output of the layer

        Parameters
        ----------
        inputs: ndarray, shape=(input_size,)
            The input vector.

        activation: callable, default=None
            Element-wise activation applied to the weighted sums. The
            default of None is the identity.

        Returns
        -------
        outputs: ndarray, shape=(output_size,)
        """
        inputs = self._validate_inputs(inputs)
        activation = activation or _identity
        return activation(self.biases + numpy.dot(inputs, self.weights))

    def backward(self, inputs, errors, rate):
        """ Apply one gradient descent step to the weights and biases

        Parameters
        ----------
        inputs: ndarray, shape=(input_size,)
            The inputs given to the `forward` call for this sample.

        errors: ndarray, shape=(output_size,)
            The error signal at each output unit.

        rate: float
            The learning rate.
        """
        inputs = self._validate_inputs(inputs)
        errors = self._validate_errors(errors)

        self.weights -= rate * numpy.outer(inputs, errors)
        self.biases -= rate * errors


class DropoutLayer:
    """ A dense layer whose inputs are randomly dropped (inverted dropout)

    A :class:`Layer` is held internally and the dropout state is layered
    on top of it. The mask is only redrawn by :meth:`set_dropout`, so the
    same sub-network is used by every forward/backward pair until the rate
    is set again.
    """
    def __init__(self, input_size, output_size, random_state=None,
                 weights=None, biases=None):
        """
        See :class:`Layer` for a description of the parameters. The
        `random_state` is kept for redrawing the dropout mask.
        """
        self.random_state = numpy.random.RandomState() \
            if random_state is None else random_state

        self.layer = Layer(input_size, output_size,
                           random_state=self.random_state,
                           weights=weights, biases=biases)

        self.dropout_rate = 0.0
        self.mask = numpy.ones(self.input_size, dtype=bool)

    def __repr__(self):
        return "<DropoutLayer input_size=%d, output_size=%d, rate=%.3f>" % (
            self.input_size, self.output_size, self.dropout_rate)

    @property
    def input_size(self):
        return self.layer.input_size

    @property
    def output_size(self):
        return self.layer.output_size

    @property
    def weights(self):
        return self.layer.weights

    @weights.setter
    def weights(self, weights):
        self.layer.weights = weights

    @property
    def biases(self):
        return self.layer.biases

    @biases.setter
    def biases(self, biases):
        self.layer.biases = biases

    @property
    def scale(self):
        """ The inverted dropout scaling factor, 1 / (1 - rate) """
        return 1.0 / (1.0 - self.dropout_rate)

    def set_dropout(self, rate):
        """ Set the dropout rate and redraw the input mask

        Each input unit is kept independently with probability `1 - rate`.
        If no unit survives the draw, unit 0 is kept.

        Parameters
        ----------
        rate: float
            The dropout rate in [0, 1). A rate of 0 keeps every unit.
        """
        rate = validate_rate(rate)

        self.dropout_rate = rate
        self.mask = self.random_state.rand(self.input_size) >= rate

        if not self.mask.any():
            logger.debug("Dropout mask was all false; keeping unit 0")
            self.mask[0] = True

    def forward(self, inputs, activation=None, training=True):
        """ Compute the activated output using only the kept inputs

        Kept contributions are scaled by :attr:`scale` so the expected
        weighted sum matches the un-dropped layer. With `training=False`
        the mask and scaling are ignored.

        Returns
        -------
        outputs: ndarray, shape=(output_size,)
        """
        if not training:
            return self.layer.forward(inputs, activation)

        inputs = self.layer._validate_inputs(inputs)
        activation = activation or _identity

        kept = numpy.where(self.mask, inputs, 0.0)
        weighted = numpy.dot(kept, self.weights) * self.scale

        return activation(self.biases + weighted)

    def backward(self, inputs, errors, rate, training=True):
        """ Apply one gradient descent step where the weight rows of
        dropped inputs are left unchanged

        With `training=False` every row is updated.
        """
        if not training:
            self.layer.backward(inputs, errors, rate)
            return

        inputs = self.layer._validate_inputs(inputs)
        errors = self.layer._validate_errors(errors)

        # Dropped rows receive a zero update
        kept = numpy.where(self.mask, inputs, 0.0)

        self.weights -= rate * numpy.outer(kept, errors)
        self.biases -= rate * errors
