import numpy
from sklearn.datasets import make_classification
from sklearn.preprocessing import StandardScaler


def one_hot(labels, n_classes=None):
    """ Convert integer class labels to one-hot rows

    Parameters
    ----------
    labels: ndarray, shape=(n_samples,)
        Integer class labels in `range(n_classes)`.

    n_classes: int, default=None
        The number of classes. The default uses `labels.max() + 1`.

    Returns
    -------
    targets: ndarray, shape=(n_samples, n_classes)
    """
    labels = numpy.asarray(labels, dtype=int)
    n_classes = labels.max() + 1 if n_classes is None else n_classes

    if labels.min() < 0 or labels.max() >= n_classes:
        msg = "Labels should lie in [0, {})"
        raise ValueError(msg.format(n_classes))

    targets = numpy.zeros((len(labels), n_classes))
    targets[numpy.arange(len(labels)), labels] = 1.0

    return targets


def make_dataset(n_samples=200, n_features=4, n_classes=3,
                 random_state=None, standardize=True):
    """ Make a toy classification dataset

    Parameters
    ----------
    n_samples: int, default=200

    n_features: int, default=4

    n_classes: int, default=3

    random_state: numpy.random.RandomState, default=None
        Provide a RandomState object for reproducible results.

    standardize: bool, default=True
        If True, the features are scaled to zero mean and unit variance.

    Returns
    -------
    inputs: ndarray, shape=(n_samples, n_features)

    targets: ndarray, shape=(n_samples, n_classes)
        One-hot class vectors.
    """
    inputs, labels = make_classification(
        n_samples=n_samples, n_features=n_features,
        n_informative=n_features, n_redundant=0, n_repeated=0,
        n_classes=n_classes, n_clusters_per_class=1,
        random_state=random_state)

    if standardize:
        inputs = StandardScaler().fit_transform(inputs)

    return inputs, one_hot(labels, n_classes)
