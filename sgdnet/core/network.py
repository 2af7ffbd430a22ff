import contextlib
import logging

import numpy

from .exception import ConfigurationError
from .fit_job_handler import FitJobHandler
from .layer import DropoutLayer, validate_rate


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

TRAINING = 'training'
INFERENCE = 'inference'
MODES = (TRAINING, INFERENCE)


def elementwise(func):
    """ Wrap a scalar function so that it is applied entry by entry to
    numpy arrays (numpy-aware functions are unaffected)
    """
    return numpy.vectorize(func, otypes=[numpy.float64])


class Network:
    """
    Multilayer, fully-connected feedforward network trained one sample at
    a time by gradient descent with backpropagation.

    Every layer is a :class:`DropoutLayer`. Dropout masks act on the
    *inputs* of a layer, so the mask of hidden layer 0 acts on the network
    inputs and the mask of the output layer acts on the last hidden units.

    The network has an explicit mode flag. In :data:`TRAINING` mode (the
    default) masks and inverted dropout scaling are applied; in
    :data:`INFERENCE` mode they are ignored, which is numerically the same
    as setting every dropout rate to zero.
    """
    def __init__(self, sizes, learning_rate,
                 hidden_activation, hidden_activation_prime,
                 output_activation, output_activation_prime,
                 loss_prime, loss=None, random_state=None):
        """
        Parameters
        ----------
        sizes: list of int
            The layer widths, `[n_inputs, n_hidden_1, ..., n_outputs]`.
            At least two sizes are required.

        learning_rate: float
            Positive step size for gradient descent.

        hidden_activation, hidden_activation_prime: callable
            Activation for the hidden layers and its derivative. The
            derivative is evaluated at the *activated* hidden outputs.

        output_activation, output_activation_prime: callable
            Activation for the output layer and its derivative, evaluated
            at the prediction.

        loss_prime: callable
            Has signature `loss_prime(prediction, target)` and returns the
            element-wise loss gradient with respect to the prediction.

        loss: callable, default=None
            Has signature `loss(predictions, targets)` and returns a
            scalar. Only needed for :meth:`compute_loss` and for loss
            histories when fitting.

        random_state: numpy.random.RandomState, default=None
            Provide a RandomState object for reproducible results. It is
            used for weight initialization and dropout masks.
        """
        sizes = self._validate_sizes(sizes)

        try:
            self.learning_rate = float(learning_rate)
        except (ValueError, TypeError):
            msg = "`learning_rate` must be numeric (got {!r})"
            raise ConfigurationError(msg.format(learning_rate))
        if not self.learning_rate > 0:
            msg = "`learning_rate` must be positive (got {})"
            raise ConfigurationError(msg.format(learning_rate))

        self.random_state = numpy.random.RandomState() \
            if random_state is None else random_state

        self.hidden_layers = [
            DropoutLayer(sizes[i-1], sizes[i], random_state=self.random_state)
            for i in range(1, len(sizes)-1)
        ]
        self.output_layer = DropoutLayer(
            sizes[-2], sizes[-1], random_state=self.random_state)

        self.hidden_activation = elementwise(hidden_activation)
        self.hidden_activation_prime = elementwise(hidden_activation_prime)
        self.output_activation = elementwise(output_activation)
        self.output_activation_prime = elementwise(output_activation_prime)
        self.loss_prime = elementwise(loss_prime)
        self.loss = loss

        self.mode = TRAINING

    def __repr__(self):
        return "<Network sizes=%s, learning_rate=%g, mode=%s>" % (
            self.sizes, self.learning_rate, self.mode)

    def _validate_sizes(self, sizes):
        if not numpy.iterable(sizes):
            raise ConfigurationError("`sizes` was not iterable")

        sizes = list(sizes)
        if len(sizes) < 2:
            msg = "`sizes` needs at least 2 entries (got {})"
            raise ConfigurationError(msg.format(len(sizes)))

        return sizes

    @property
    def layers(self):
        """ Hidden layers in order followed by the output layer """
        return self.hidden_layers + [self.output_layer]

    @property
    def sizes(self):
        return [self.layers[0].input_size] + \
               [layer.output_size for layer in self.layers]

    @property
    def dropout_rates(self):
        return [layer.dropout_rate for layer in self.layers]

    @property
    def training(self):
        return self.mode == TRAINING

    def set_mode(self, mode):
        if mode not in MODES:
            msg = "Unknown mode {!r} (should be one of {})"
            raise ValueError(msg.format(mode, MODES))
        self.mode = mode

    @contextlib.contextmanager
    def inference(self):
        """ Temporarily switch to inference mode. Usage::

            with network.inference():
                prediction = network.predict(x)
        """
        previous_mode = self.mode
        self.set_mode(INFERENCE)
        try:
            yield self
        finally:
            self.set_mode(previous_mode)

    def set_dropout(self, rates):
        """ Set the dropout rates and redraw every affected mask

        Parameters
        ----------
        rates: float or list of float
            Either a single rate, applied to every hidden layer (the output
            layer is reset to 0), or one rate per layer with the output
            layer's rate last.

        Note
        ----
        Call this with zero rates (or use :meth:`inference`) before
        predicting outside of training; masks otherwise persist from the
        last call.
        """
        rates = numpy.atleast_1d(rates)
        if rates.ndim != 1:
            msg = "`rates` should be a scalar or 1d (got ndim={})"
            raise ConfigurationError(msg.format(rates.ndim))

        # Every rate is checked before any mask is redrawn
        rates = [validate_rate(rate) for rate in rates]

        n_layers = len(self.layers)

        if len(rates) == n_layers:
            for layer, rate in zip(self.layers, rates):
                layer.set_dropout(rate)
        elif len(rates) == 1:
            for layer in self.hidden_layers:
                layer.set_dropout(rates[0])
            self.output_layer.set_dropout(0.0)
        else:
            msg = ("Got {} dropout rates but this network needs 1 or {}")
            raise ConfigurationError(msg.format(len(rates), n_layers))

        logger.debug("Dropout rates set to {}".format(self.dropout_rates))

    def _forward(self, inputs):
        """ Returns the list of layer activations for one sample, starting
        with the inputs and ending with the prediction
        """
        activations = [numpy.asarray(inputs, dtype=numpy.float64)]

        for layer in self.hidden_layers:
            activations.append(layer.forward(
                activations[-1], self.hidden_activation,
                training=self.training))

        activations.append(self.output_layer.forward(
            activations[-1], self.output_activation, training=self.training))

        return activations

    def predict(self, inputs):
        """
        Parameters
        ----------
        inputs: ndarray, shape=(sizes[0],)

        Returns
        -------
        prediction: ndarray, shape=(sizes[-1],)
        """
        return self._forward(inputs)[-1]

    def _hidden_errors(self, next_layer, next_errors, outputs):
        # Mirror the gating and scaling `next_layer` applied to these
        # units during its forward pass.
        errors = numpy.dot(next_layer.weights, next_errors) * \
            self.hidden_activation_prime(outputs)

        if self.training:
            errors = numpy.where(next_layer.mask, errors * next_layer.scale,
                                 0.0)

        return errors

    def train(self, inputs, targets):
        """ Perform one gradient descent step on a single example

        Parameters
        ----------
        inputs: ndarray, shape=(sizes[0],)

        targets: ndarray, shape=(sizes[-1],)
        """
        targets = numpy.asarray(targets, dtype=numpy.float64)
        if targets.shape != (self.output_layer.output_size,):
            msg = "`targets` was shape {} but should be {}"
            raise ValueError(msg.format(
                targets.shape, (self.output_layer.output_size,)))

        activations = self._forward(inputs)
        prediction = activations[-1]

        errors = self.loss_prime(prediction, targets) * \
            self.output_activation_prime(prediction)

        self.output_layer.backward(activations[-2], errors,
                                   self.learning_rate, training=self.training)

        next_layer = self.output_layer
        for k in range(len(self.hidden_layers)-1, -1, -1):
            layer = self.hidden_layers[k]

            errors = self._hidden_errors(next_layer, errors,
                                         activations[k+1])
            layer.backward(activations[k], errors, self.learning_rate,
                           training=self.training)

            next_layer = layer

    def evaluate(self, inputs, targets):
        """ Count the samples whose one-hot target class attains the
        maximum of the prediction

        Ties are permissive: when several outputs share the maximum, the
        sample counts as correct if the target class is among them.

        Parameters
        ----------
        inputs: ndarray, shape=(n_samples, sizes[0])

        targets: ndarray, shape=(n_samples, sizes[-1])
            One-hot target vectors. The class is the first entry equal
            to 1 (or 0 if there is none).

        Returns
        -------
        n_correct: int
        """
        if len(inputs) != len(targets):
            msg = "Got {} inputs but {} targets"
            raise ValueError(msg.format(len(inputs), len(targets)))

        n_correct = 0

        for x, target in zip(inputs, targets):
            prediction = self.predict(x)

            hot = numpy.flatnonzero(numpy.asarray(target) == 1.0)
            target_index = hot[0] if len(hot) > 0 else 0

            if prediction[target_index] == prediction.max():
                n_correct += 1

        return n_correct

    def compute_loss(self, inputs, targets):
        """ The average of `loss(prediction, target)` over the samples
        """
        if self.loss is None:
            raise ValueError("No `loss` function was given to this network")

        if len(inputs) != len(targets):
            msg = "Got {} inputs but {} targets"
            raise ValueError(msg.format(len(inputs), len(targets)))

        if len(inputs) == 0:
            return numpy.nan

        return numpy.mean([
            self.loss(self.predict(x), numpy.asarray(target, dtype=float))
            for x, target in zip(inputs, targets)
        ])

    def fit(self, inputs, targets, epochs, **kwargs):
        """ Train for a number of epochs; see
        :class:`sgdnet.core.fit_job_handler.FitJobHandler` for the
        keyword arguments

        Returns
        -------
        history: dict
            Per-epoch `train_loss` and `val_loss` lists.
        """
        fit_job_handler = FitJobHandler(
            network=self, inputs=inputs, targets=targets, epochs=epochs,
            **kwargs)

        return fit_job_handler.fit()
