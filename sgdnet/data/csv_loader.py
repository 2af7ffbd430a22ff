import csv
import logging

import numpy


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


def load_csv_data(src, input_len, target_len, names=False):
    """ Load examples from a CSV file where each row holds the input
    fields followed by the target fields

    Parameters
    ----------
    src: str
        Path to the CSV file.

    input_len: int
        Number of leading fields that make up the input vector.

    target_len: int
        Number of trailing fields that make up the target vector.

    names: bool, default=False
        If True, the first row holds field names and is skipped.

    Returns
    -------
    inputs: ndarray, shape=(n_examples, input_len)

    targets: ndarray, shape=(n_examples, target_len)

    Note
    ----
    Blank lines are skipped. Commas inside quoted fields are treated as
    thousands separators and removed, so `"1,234"` is read as 1234.
    """
    entry_len = input_len + target_len

    with open(src, newline='') as f:
        rows = [row for row in csv.reader(f) if row]

    if names:
        rows = rows[1:]

    data = numpy.empty((len(rows), entry_len), dtype=numpy.float64)

    for irow, row in enumerate(rows):
        if len(row) != entry_len:
            msg = "Record {} of {} has {} fields but should have {}"
            raise ValueError(msg.format(
                irow + int(names) + 1, src, len(row), entry_len))

        for ifield, field in enumerate(row):
            try:
                data[irow, ifield] = float(field.replace(',', ''))
            except ValueError:
                msg = "Record {} of {} has a non-numeric field {!r}"
                raise ValueError(msg.format(
                    irow + int(names) + 1, src, field))

    logger.debug("Loaded {} examples from {}".format(len(rows), src))

    return data[:, :input_len], data[:, input_len:]
