import numpy as np
import pytest

from flatnet import BasicNetwork, LayerDescriptor
from flatnet.core.activations import ActivationLinear, ActivationSigmoid
from flatnet.patterns import elman, feedforward, jordan


def _self_context():
    hidden = LayerDescriptor(ActivationSigmoid(), 4, 1.0)
    hidden.context_fed_by = hidden
    hidden.context_count = 4
    return [
        LayerDescriptor(ActivationLinear(), 3, 1.0),
        hidden,
        LayerDescriptor(ActivationSigmoid(), 2, dropout_rate=0.2),
    ]


TOPOLOGIES = {
    "single": lambda: [LayerDescriptor(ActivationLinear(), 3)],
    "perceptron": lambda: feedforward(2, 0, 1),
    "deep": lambda: feedforward(5, [7, 4, 3], 2, activation="tanh"),
    "elman": lambda: elman(3, 5, 2),
    "jordan": lambda: jordan(2, 4, 3),
    "self-context": _self_context,
}


@pytest.fixture(params=sorted(TOPOLOGIES))
def layers(request):
    return TOPOLOGIES[request.param]()


def test_buffer_sizes_match_tables(layers):
    network = BasicNetwork(layers, dropout=True)
    counts = network.layer_counts
    feeds = network.layer_feed_counts
    connections = sum(int(feeds[l - 1] * counts[l]) for l in range(1, len(counts)))
    assert network.weights.shape[0] == connections == network.encode_length
    assert network.layer_output.shape[0] == int(counts.sum()) == network.neuron_count
    assert network.layer_sums.shape[0] == network.neuron_count


def test_total_counts_add_up(layers):
    network = BasicNetwork(layers)
    has_bias = (network.bias_activation != 0).astype(int)
    assert np.array_equal(
        network.layer_counts,
        network.layer_feed_counts + network.layer_context_count + has_bias,
    )


def test_offsets_are_contiguous(layers):
    network = BasicNetwork(layers)
    counts = network.layer_counts
    feeds = network.layer_feed_counts
    for l in range(1, len(counts)):
        assert network.layer_index[l] == network.layer_index[l - 1] + counts[l - 1]
        assert network.weight_index[l] == network.weight_index[l - 1] + counts[l] * feeds[l - 1]


def test_context_targets_cover_consumer_context_slots(layers):
    network = BasicNetwork(layers)
    internal = list(reversed(layers))
    for position, layer in enumerate(internal):
        if layer.context_fed_by is None:
            continue
        source = next(i for i, other in enumerate(internal) if other is layer.context_fed_by)
        region = network.topology.context_slice(position)
        assert network.context_target_size[source] == layer.context_count
        assert network.context_target_offset[source] == region.start
        assert region.stop - region.start == layer.context_count
    assert network.has_context == any(layer.context_fed_by is not None for layer in layers)


def test_repeat_after_clear_is_bit_identical(layers):
    network = BasicNetwork(layers, dropout=True)
    network.randomize(rng=np.random.default_rng(17))
    inputs = np.linspace(-1.0, 1.0, network.input_count)
    first = network.compute(inputs)
    network.compute(inputs[::-1])
    network.clear_context()
    assert np.array_equal(first, network.compute(inputs))


def test_feedforward_output_ignores_history():
    network = BasicNetwork(feedforward(3, [4], 2))
    network.randomize(rng=np.random.default_rng(2))
    assert not network.has_context
    first = network.compute([0.1, 0.2, 0.3])
    network.compute([5.0, -5.0, 1.0])
    assert np.array_equal(first, network.compute([0.1, 0.2, 0.3]))
