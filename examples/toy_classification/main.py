import numpy as np
from sklearn.model_selection import train_test_split

from sgdnet import Network
from sgdnet.activation import get_activation
from sgdnet.data.toy import make_dataset
from sgdnet.loss import get_loss
from sgdnet.util.on_epoch import log_accuracy
from sgdnet.visualize import plot_history


random_state = np.random.RandomState(1234)


# Create a toy dataset ########################################################

inputs, targets = make_dataset(
    n_samples=300, n_features=4, n_classes=3, random_state=random_state)

train_inputs, test_inputs, train_targets, test_targets = train_test_split(
    inputs, targets, test_size=0.25, random_state=random_state)

# Set up the network and fit it ###############################################

sigmoid, sigmoid_prime = get_activation('sigmoid')
mse, mse_prime = get_loss('mse')

network = Network(
    sizes=[4, 8, 6, 3], learning_rate=0.1,
    hidden_activation=sigmoid, hidden_activation_prime=sigmoid_prime,
    output_activation=sigmoid, output_activation_prime=sigmoid_prime,
    loss_prime=mse_prime, loss=mse, random_state=random_state)

history = network.fit(
    train_inputs, train_targets, epochs=200,
    # The masks are redrawn at the start of every epoch
    dropout_rates=[0.1, 0.2, 0.2],
    validation_inputs=test_inputs, validation_targets=test_targets,
    shuffle=True, validation_history_len=20,
    on_epoch=[log_accuracy(test_inputs, test_targets, every=20)],
    log_filename='fit-log.txt')

# Dropout rates are zero again after fitting
n_correct = network.evaluate(test_inputs, test_targets)
print("Test accuracy: {} / {}".format(n_correct, len(test_inputs)))

ax = plot_history(history)
ax.figure.savefig('history.png')
