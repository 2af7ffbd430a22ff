import matplotlib.pyplot as plt

from sgdnet.core.fit_job_handler import TRAIN_LOSS_KEY, VALIDATION_LOSS_KEY


def plot_history(
        history, ax=None,
        train_kwargs=dict(c='b', ls='-', lw=2),
        val_kwargs=dict(c='r', ls='--', lw=2)):
    """ Plot the loss curves returned by :meth:`sgdnet.Network.fit`

    Parameters
    ----------
    history: dict
        Has keys `train_loss` and `val_loss` with per-epoch losses.

    ax: matplotlib axis, default=None
        The axis to draw on. The default creates a new figure.

    train_kwargs: args
        Any keyword arguments that can be passed to `matplotlib.pyplot.plot`.

    val_kwargs: args
        Any keyword arguments that can be passed to `matplotlib.pyplot.plot`.

    Returns
    -------
    ax: matplotlib axis
    """
    for key in (TRAIN_LOSS_KEY, VALIDATION_LOSS_KEY):
        if key not in history:
            raise KeyError("`history` is missing key `{}`".format(key))

    if ax is None:
        fig = plt.figure(figsize=(6, 4))
        ax = fig.add_subplot(111)

    train_loss = history[TRAIN_LOSS_KEY]
    val_loss = history[VALIDATION_LOSS_KEY]

    if len(train_loss) > 0:
        ax.plot(range(1, len(train_loss)+1), train_loss,
                label='Training', **train_kwargs)
    if len(val_loss) > 0:
        ax.plot(range(1, len(val_loss)+1), val_loss,
                label='Validation', **val_kwargs)

    ax.set_xlabel('Epoch')
    ax.set_ylabel('Loss')
    ax.grid(True)

    if len(train_loss) > 0 or len(val_loss) > 0:
        ax.legend()

    return ax
