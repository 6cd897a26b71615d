import importlib
import inspect

import pytest

from pricefeed.core.clock import SimClock
from pricefeed.core.price_store import PriceStore

# Mapping of module -> (ProtocolName, required_methods: {name: arity})
PORT_PROTOCOLS = {
    "pricefeed.ports.clock": ("Clock", {"now": 0}),
    "pricefeed.ports.price_feed": (
        "PriceFeed",
        {"is_symbol_supported": 1, "latest_price": 1},
    ),
    "pricefeed.ports.telemetry": ("Telemetry", {"log": -1}),  # variable kwargs
}


@pytest.mark.parametrize("module_name", PORT_PROTOCOLS)
def test_all_ports_import(module_name):
    assert importlib.import_module(module_name)


@pytest.mark.parametrize("module_name,meta", PORT_PROTOCOLS.items())
def test_required_port_signatures(module_name, meta):
    proto_name, methods = meta
    module = importlib.import_module(module_name)
    proto = getattr(module, proto_name)
    assert inspect.isclass(proto), f"{proto_name} not a class"
    # For each required method ensure existence and arg count (basic heuristic; -1 means skip)
    for method_name, arity in methods.items():
        fn = getattr(proto, method_name, None)
        assert fn is not None, f"Missing method {method_name} on {proto_name}"
        if arity >= 0:
            sig = inspect.signature(fn)
            # remove self / cls
            params = [p for p in sig.parameters.values() if p.kind == p.POSITIONAL_OR_KEYWORD][1:]
            assert (
                len(params) == arity
            ), f"{proto_name}.{method_name} expected {arity} args got {len(params)}"


def test_price_store_satisfies_read_port():
    from pricefeed.ports.price_feed import PriceFeed

    store = PriceStore(owner="o", clock=SimClock(), tolerance=0)
    feed: PriceFeed = store
    for name in ("is_symbol_supported", "latest_price"):
        store_params = list(inspect.signature(getattr(type(store), name)).parameters)
        port_params = list(inspect.signature(getattr(PriceFeed, name)).parameters)
        assert store_params == port_params
    assert feed.is_symbol_supported(b"X") is False
