import logging
import os

import numpy


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

TRAIN_LOSS_KEY = 'train_loss'
VALIDATION_LOSS_KEY = 'val_loss'


def setup_logging(filename="fit-log.txt", stdout=True):
    """ Sets up logging formatting, etc

    Parameters
    ----------
    filename : str, default="fit-log.txt"
        The log file. An existing file of the same name is replaced.

    stdout : bool, default=True
        If True, log records are also written to the console.
    """
    if os.path.exists(filename):
        os.remove(filename)

    line_fmt = ("[%(asctime)s] [%(name)s:%(lineno)d] "
                "%(levelname)-8s %(message)s")

    date_fmt = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        filename=filename, format=line_fmt,
        datefmt=date_fmt, level=logging.DEBUG)

    if stdout:
        shandler = logging.StreamHandler()
        shandler.setFormatter(logging.Formatter(fmt=line_fmt,
                                                datefmt=date_fmt))
        logging.getLogger().addHandler(shandler)


def stop_early(loss_hist, hist_len=5, tol=0.0):
    """
    Returns True when the linear trend over the `hist_len` most recent
    components of `loss_hist` is greater than or equal to `tol`.
    """
    if len(loss_hist) < hist_len or hist_len < 2:
        return False

    x = numpy.c_[numpy.ones(hist_len), numpy.arange(hist_len)+1]
    losses = numpy.array(loss_hist[-hist_len:])

    (_, slope), _, _, _ = numpy.linalg.lstsq(x, losses, rcond=None)

    return slope >= tol


class FitJobHandler:
    """ Manages the epoch loop of online training for a network
    """
    def __init__(self,
                 network,
                 inputs,
                 targets,
                 epochs,
                 dropout_rates=None,
                 validation_inputs=None,
                 validation_targets=None,
                 shuffle=False,
                 random_state=None,
                 validation_history_len=None,
                 validation_history_tol=0.0,
                 on_epoch=None,
                 log_filename=None,
                 ):
        """
        Parameters
        ----------
        network: Network
            The network to train.

        inputs, targets: ndarray, shapes=(n_samples, n_inputs/n_outputs)
            The training examples. They are presented one at a time.

        epochs: int
            Maximum number of passes over the training examples.

        dropout_rates: float or list of float, default=None
            Passed to :meth:`Network.set_dropout` at the start of every
            epoch (which redraws the masks). None disables dropout.

        validation_inputs, validation_targets: ndarray, default=None
            Validation examples used for the `val_loss` history.

        shuffle: bool, default=False
            If True, the training order is permuted every epoch.

        random_state: numpy.random.RandomState, default=None
            Used for shuffling. Defaults to the network's random state.

        validation_history_len: int, default=None
            If given, training stops when the trend of the most recent
            `validation_history_len` validation losses is not decreasing
            by more than `validation_history_tol`.

        validation_history_tol: float, default=0.0
            See `validation_history_len`.

        on_epoch: list of callable, default=None
            Each is called as `func(epoch, network)` after every epoch,
            with the network in inference mode.

        log_filename: str, default=None
            If given, logging is set up to write to this file.
        """
        if log_filename is not None:
            setup_logging(filename=log_filename)

        self.network = network

        self.inputs, self.targets = self._validate_examples(
            inputs, targets, 'training')

        if validation_inputs is None or validation_targets is None:
            self.validation_inputs = None
            self.validation_targets = None
        else:
            self.validation_inputs, self.validation_targets = \
                self._validate_examples(
                    validation_inputs, validation_targets, 'validation')

        try:
            self.epochs = int(epochs)
        except (ValueError, TypeError):
            msg = "`epochs` must be an int (got {!r})"
            raise ValueError(msg.format(epochs))
        if self.epochs < 1:
            msg = "`epochs` must be positive (got {})"
            raise ValueError(msg.format(epochs))

        self.dropout_rates = dropout_rates
        self.shuffle = shuffle
        self.random_state = network.random_state \
            if random_state is None else random_state

        if validation_history_len is not None:
            if self.validation_inputs is None:
                msg = ("Early stopping requires `validation_inputs` and "
                       "`validation_targets`")
                raise ValueError(msg)
            if network.loss is None:
                msg = "Early stopping requires a network `loss` function"
                raise ValueError(msg)

        self.validation_history_len = validation_history_len
        self.validation_history_tol = validation_history_tol

        if on_epoch is None:
            self.on_epoch = []
        elif callable(on_epoch):
            self.on_epoch = [on_epoch]
        else:
            self.on_epoch = list(on_epoch)

        self.epoch = 0
        self.history = {TRAIN_LOSS_KEY: [], VALIDATION_LOSS_KEY: []}

    def _validate_examples(self, inputs, targets, name):
        inputs = numpy.asarray(inputs, dtype=numpy.float64)
        targets = numpy.asarray(targets, dtype=numpy.float64)

        if inputs.ndim != 2 or targets.ndim != 2:
            msg = "The {} inputs and targets should be 2d arrays"
            raise ValueError(msg.format(name))

        if inputs.shape[0] != targets.shape[0]:
            msg = "Got {} {} inputs but {} targets"
            raise ValueError(msg.format(
                inputs.shape[0], name, targets.shape[0]))

        return inputs, targets

    def _log_with_epoch(self, msg, level='info'):
        """ Write to the logger with the current epoch number prepended
        to the log message
        """
        full_message = "(Epoch = {:04d}) {:s}".format(self.epoch, msg)

        if level == 'info':
            logger.info(full_message)
        elif level == 'debug':
            logger.debug(full_message)
        elif level == 'warning':
            logger.warning(full_message)
        else:
            raise ValueError("Unknown log level: {}".format(level))

    def train_epoch(self):
        """ Present every training example once
        """
        if self.dropout_rates is not None:
            self.network.set_dropout(self.dropout_rates)

        if self.shuffle:
            order = self.random_state.permutation(len(self.inputs))
        else:
            order = range(len(self.inputs))

        for i in order:
            self.network.train(self.inputs[i], self.targets[i])

    def record_losses(self):
        """ Append the current training and validation losses to the
        history (when the network has a loss function)
        """
        if self.network.loss is None:
            return

        train_loss = self.network.compute_loss(self.inputs, self.targets)
        self.history[TRAIN_LOSS_KEY].append(train_loss)
        msg = "Training loss = {:.5f}".format(train_loss)

        if self.validation_inputs is not None:
            val_loss = self.network.compute_loss(
                self.validation_inputs, self.validation_targets)
            self.history[VALIDATION_LOSS_KEY].append(val_loss)
            msg += ", validation loss = {:.5f}".format(val_loss)

        self._log_with_epoch(msg)

        if not numpy.isfinite(train_loss):
            self._log_with_epoch("Non-finite training loss encountered",
                                 level='warning')

    def can_exit_early(self):
        if self.validation_history_len is None:
            return False

        return stop_early(self.history[VALIDATION_LOSS_KEY],
                          hist_len=self.validation_history_len,
                          tol=self.validation_history_tol)

    def fit(self):
        """ Run the epoch loop

        Returns
        -------
        history: dict
            The `train_loss` and `val_loss` lists with one entry per
            completed epoch (empty when the network has no loss function).
        """
        self._log_with_epoch("Fitting network {}".format(self.network))

        try:
            for self.epoch in range(1, self.epochs+1):

                self.train_epoch()

                with self.network.inference():
                    self.record_losses()

                    for func in self.on_epoch:
                        func(self.epoch, self.network)

                if self.can_exit_early():
                    self._log_with_epoch("Early stop conditions satisfied")
                    break
        finally:
            # Leave the network ready for prediction
            if self.dropout_rates is not None:
                self.network.set_dropout(0.0)

        return self.history
