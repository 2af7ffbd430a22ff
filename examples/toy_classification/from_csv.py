import sys

import numpy as np

from sgdnet import Network
from sgdnet.activation import get_activation
from sgdnet.data.csv_loader import load_csv_data
from sgdnet.loss import get_loss


# Usage: python from_csv.py training.csv testing.csv n_inputs n_targets
training_file, testing_file = sys.argv[1], sys.argv[2]
n_inputs, n_targets = int(sys.argv[3]), int(sys.argv[4])

inputs, targets = load_csv_data(training_file, n_inputs, n_targets,
                                names=True)
test_inputs, test_targets = load_csv_data(testing_file, n_inputs, n_targets,
                                          names=True)

sigmoid, sigmoid_prime = get_activation('sigmoid')
mse, mse_prime = get_loss('mse')

network = Network(
    [n_inputs, 3, n_targets], 0.4, sigmoid, sigmoid_prime,
    sigmoid, sigmoid_prime, mse_prime, loss=mse,
    random_state=np.random.RandomState(1234))

for epoch in range(500):
    network.set_dropout(0.4)
    for x, target in zip(inputs, targets):
        network.train(x, target)

network.set_dropout(0.0)

print("Testing: {} / {}".format(
    network.evaluate(test_inputs, test_targets), len(test_inputs)))
print("Training: {} / {}".format(
    network.evaluate(inputs, targets), len(inputs)))
