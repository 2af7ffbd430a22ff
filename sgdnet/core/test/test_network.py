import unittest

import numpy as np

from sgdnet.activation import identity, identity_prime, sigmoid, \
    sigmoid_output_prime
from sgdnet.core.exception import ConfigurationError
from sgdnet.core.network import INFERENCE, Network, TRAINING
from sgdnet.loss import mse, mse_prime


def make_linear_network(sizes, learning_rate=0.1, random_state=None):
    return Network(sizes, learning_rate,
                   identity, identity_prime, identity, identity_prime,
                   mse_prime, loss=mse, random_state=random_state)


def set_constant_params(network, weight, bias=0.0):
    for layer in network.layers:
        layer.weights[:] = weight
        layer.biases[:] = bias


class TestNetworkConstruction(unittest.TestCase):

    def test_number_of_layers(self):
        random_state = np.random.RandomState(1234)

        for sizes in [[3, 2], [3, 4, 2], [5, 4, 3, 2, 1]]:
            network = make_linear_network(sizes, random_state=random_state)
            self.assertEqual(len(network.hidden_layers), len(sizes) - 2)
            self.assertEqual(network.sizes, sizes)

    def test_layer_dimensions_chain(self):
        network = make_linear_network(
            [4, 6, 5, 2], random_state=np.random.RandomState(1))

        for layer, next_layer in zip(network.layers[:-1],
                                     network.layers[1:]):
            self.assertEqual(layer.weights.shape[1],
                             next_layer.weights.shape[0])

    def test_sizes_too_short(self):
        with self.assertRaises(ConfigurationError):
            make_linear_network([5])

        with self.assertRaises(ConfigurationError):
            make_linear_network([])

    def test_bad_learning_rate(self):
        for learning_rate in [0, -0.1, 'fast']:
            with self.assertRaises(ConfigurationError):
                make_linear_network([2, 1], learning_rate=learning_rate)

    def test_scalar_strategies(self):
        # Plain scalar functions are applied element-wise
        def step(x):
            return 1.0 if x > 0 else 0.0

        def zero(x):
            return 0.0

        network = Network([3, 4, 2], 0.1, step, zero, step, zero,
                          lambda p, t: p - t,
                          random_state=np.random.RandomState(7))

        prediction = network.predict(np.array([1., -1., 0.5]))
        self.assertEqual(prediction.shape, (2,))
        self.assertTrue(np.isin(prediction, [0.0, 1.0]).all())


class TestPredict(unittest.TestCase):

    def test_dimension_consistency(self):
        random_state = np.random.RandomState(1234)

        for sizes in [[1, 1], [3, 7], [4, 3, 2], [2, 5, 5, 5, 3]]:
            network = Network(sizes, 0.1, np.tanh, identity_prime,
                              sigmoid, sigmoid_output_prime, mse_prime,
                              random_state=random_state)
            prediction = network.predict(random_state.randn(sizes[0]))
            self.assertEqual(prediction.shape, (sizes[-1],))

    def test_predict_matches_manual_forward(self):
        random_state = np.random.RandomState(42)
        network = Network([3, 4, 2], 0.1, np.tanh, identity_prime,
                          identity, identity_prime, mse_prime,
                          random_state=random_state)
        x = random_state.randn(3)

        hidden, output = network.hidden_layers[0], network.output_layer
        h = np.tanh(hidden.biases + x.dot(hidden.weights))
        expected = output.biases + h.dot(output.weights)

        self.assertLess(np.linalg.norm(network.predict(x) - expected), 1e-12)

    def test_dropout_identity_at_rate_zero(self):
        random_state = np.random.RandomState(1234)
        network = make_linear_network([4, 5, 3, 2], random_state=random_state)
        x = random_state.randn(4)

        before = network.predict(x)
        network.set_dropout([0, 0, 0])
        after = network.predict(x)

        self.assertLess(np.linalg.norm(before - after), 1e-12)

    def test_inference_mode_ignores_dropout(self):
        random_state = np.random.RandomState(1234)
        network = make_linear_network([4, 5, 3, 2], random_state=random_state)
        x = random_state.randn(4)

        full = network.predict(x)

        network.set_dropout([0.5, 0.5, 0.5])

        with network.inference():
            self.assertEqual(network.mode, INFERENCE)
            in_inference = network.predict(x)

        self.assertEqual(network.mode, TRAINING)
        self.assertLess(np.linalg.norm(full - in_inference), 1e-12)

    def test_set_mode_unknown(self):
        network = make_linear_network([2, 1])

        with self.assertRaises(ValueError):
            network.set_mode('testing')


class TestSetDropout(unittest.TestCase):

    def test_wrong_number_of_rates(self):
        network = make_linear_network(
            [4, 3, 3, 3, 2], random_state=np.random.RandomState(1))

        with self.assertRaises(ConfigurationError):
            network.set_dropout([0.1, 0.2])

        with self.assertRaises(ConfigurationError):
            network.set_dropout([])

    def test_single_rate(self):
        network = make_linear_network(
            [4, 3, 3, 3, 2], random_state=np.random.RandomState(1))

        network.set_dropout(0.25)

        self.assertEqual(network.dropout_rates, [0.25, 0.25, 0.25, 0.0])
        self.assertTrue(network.output_layer.mask.all())

    def test_rate_per_layer(self):
        network = make_linear_network(
            [4, 3, 3, 3, 2], random_state=np.random.RandomState(1))

        network.set_dropout([0.1, 0.2, 0.3, 0.4])

        self.assertEqual(network.dropout_rates, [0.1, 0.2, 0.3, 0.4])

    def test_no_hidden_layers(self):
        network = make_linear_network(
            [4, 2], random_state=np.random.RandomState(1))

        network.set_dropout([0.3])

        self.assertEqual(network.dropout_rates, [0.3])

    def test_invalid_rate_leaves_rates_unchanged(self):
        network = make_linear_network(
            [4, 3, 3, 2], random_state=np.random.RandomState(1))
        network.set_dropout([0.2, 0.2, 0.2])
        masks_before = [layer.mask.copy() for layer in network.layers]

        with self.assertRaises(ConfigurationError):
            network.set_dropout([0.5, 1.5, 0.1])

        self.assertEqual(network.dropout_rates, [0.2, 0.2, 0.2])
        for layer, mask in zip(network.layers, masks_before):
            self.assertTrue(np.array_equal(layer.mask, mask))

    def test_expected_prediction_matches_full_network(self):
        network = make_linear_network(
            [20, 20, 1], random_state=np.random.RandomState(1234))
        set_constant_params(network, weight=0.05)
        network.output_layer.biases[:] = 0.1
        x = np.ones(20)

        # Every hidden unit is 1 and the prediction 0.1 + 20 * 0.05
        full = network.predict(x)[0]
        self.assertAlmostEqual(full, 1.1)

        predictions = []
        for _ in range(2000):
            network.set_dropout([0.2, 0.2])
            predictions.append(network.predict(x)[0])

        self.assertLess(abs(np.mean(predictions) - full), 0.02)

    def test_masks_non_degenerate(self):
        network = make_linear_network(
            [2, 2, 2, 1], random_state=np.random.RandomState(1234))

        for _ in range(100):
            network.set_dropout([0.9, 0.9, 0.9])
            for layer in network.layers:
                self.assertTrue(layer.mask.any())


class TestTrain(unittest.TestCase):

    def test_gradient_sanity(self):
        network = make_linear_network([1, 1, 1], learning_rate=0.05)
        network.hidden_layers[0].weights[:] = 0.8
        network.hidden_layers[0].biases[:] = 0.1
        network.output_layer.weights[:] = -0.3
        network.output_layer.biases[:] = 0.2

        x = np.array([1.5])
        target = np.array([2.0])

        before = abs(network.predict(x)[0] - target[0])
        network.train(x, target)
        after = abs(network.predict(x)[0] - target[0])

        self.assertLess(after, before)

    def test_end_to_end_single_example(self):
        network = make_linear_network([2, 2, 1], learning_rate=0.1)
        set_constant_params(network, weight=0.5)

        x = np.array([1., 0.])
        target = np.array([1.])

        for _ in range(1000):
            network.train(x, target)

        self.assertLess(abs(network.predict(x)[0] - 1.0), 0.01)

    def test_end_to_end_random_initialization(self):
        x = np.array([1., 0.])
        target = np.array([1.])

        n_converged = 0
        for seed in range(20):
            network = make_linear_network(
                [2, 2, 1], learning_rate=0.1,
                random_state=np.random.RandomState(seed))

            with np.errstate(over='ignore', invalid='ignore'):
                for _ in range(1000):
                    network.train(x, target)
                error = abs(network.predict(x)[0] - 1.0)

            if error < 0.01:
                n_converged += 1

        # A few unlucky initializations may diverge at this learning rate
        self.assertGreaterEqual(n_converged, 15)

    def test_masked_hidden_unit_not_updated(self):
        network = make_linear_network(
            [3, 2, 1], random_state=np.random.RandomState(1234))

        # Drop hidden unit 0 as an input to the output layer
        network.output_layer.dropout_rate = 0.5
        network.output_layer.mask = np.array([False, True])

        hidden = network.hidden_layers[0]
        weights_before = hidden.weights.copy()
        biases_before = hidden.biases.copy()

        network.train(np.array([1., 2., 3.]), np.array([10.]))

        self.assertTrue(np.array_equal(hidden.weights[:, 0],
                                       weights_before[:, 0]))
        self.assertEqual(hidden.biases[0], biases_before[0])

        self.assertFalse(np.array_equal(hidden.weights[:, 1],
                                        weights_before[:, 1]))

    def test_hidden_error_is_scaled(self):
        network = make_linear_network([1, 1, 1], learning_rate=0.1)
        set_constant_params(network, weight=1.0)

        network.output_layer.dropout_rate = 0.5
        network.output_layer.mask = np.array([True])

        x = np.array([1.])
        target = np.array([0.])

        # Forward: h = 1, prediction = 2 * h * 1 = 2, output error = 2.
        # The output weight becomes 1 - 0.1 * 2 * 1 = 0.8, so the hidden
        # error is 2 * 0.8 * 2 = 3.2 and the hidden weight 1 - 0.32.
        network.train(x, target)

        self.assertAlmostEqual(network.output_layer.weights[0, 0], 0.8)
        self.assertAlmostEqual(network.hidden_layers[0].weights[0, 0], 0.68)

    def test_wrong_target_width(self):
        network = make_linear_network([2, 3])

        with self.assertRaises(ValueError):
            network.train(np.ones(2), np.ones(2))


class TestEvaluate(unittest.TestCase):

    def test_count_correct(self):
        network = make_linear_network([2, 2])
        network.output_layer.weights[:] = np.eye(2)
        network.output_layer.biases[:] = 0.0

        inputs = [[1., 0.], [0., 1.], [1., 0.]]
        targets = [[1., 0.], [0., 1.], [0., 1.]]

        self.assertEqual(network.evaluate(inputs, targets), 2)

    def test_ties_count_as_correct(self):
        network = make_linear_network([2, 3])
        network.output_layer.weights[:] = 0.0
        network.output_layer.biases[:] = 1.0

        inputs = [[1., 0.], [0., 1.], [3., 4.]]
        targets = [[1., 0., 0.], [0., 1., 0.], [0., 0., 1.]]

        self.assertEqual(network.evaluate(inputs, targets), 3)

    def test_mismatched_lengths(self):
        network = make_linear_network([2, 2])

        with self.assertRaises(ValueError):
            network.evaluate([[1., 0.]], [[1., 0.], [0., 1.]])


class TestComputeLoss(unittest.TestCase):

    def test_compute_loss(self):
        network = make_linear_network([2, 1])
        network.output_layer.weights[:] = 1.0
        network.output_layer.biases[:] = 0.0

        inputs = np.array([[1., 1.], [0., 1.]])
        targets = np.array([[1.], [1.]])

        # Squared errors are 1 and 0
        self.assertAlmostEqual(network.compute_loss(inputs, targets), 0.5)

    def test_compute_loss_without_loss(self):
        network = Network([2, 1], 0.1, identity, identity_prime,
                          identity, identity_prime, mse_prime)

        with self.assertRaises(ValueError):
            network.compute_loss(np.ones((1, 2)), np.ones((1, 1)))


if __name__ == '__main__':
    unittest.main()
