import pickle

from fractexpr.expr.nodes import BinOp, Slot, flatten, rebuild
from fractexpr.expr.parser import parse_source

def test_slot_from_letter():
    assert Slot.from_letter("z") is Slot.Z
    assert Slot.from_letter("w") is Slot.WIDTH
    assert Slot.from_letter("q") is None
    assert Slot.from_letter("Z") is None

def test_rebuild_restores_tree_and_positions():
    expr = parse_source("(x + 2i) * -c / z")
    copy = rebuild(flatten(expr))
    assert copy == expr
    assert copy.position == expr.position
    assert copy.left.left.position == expr.left.left.position

def test_flatten_is_postfix():
    items = flatten(parse_source("1 - 2"))
    assert [item for item, _ in items][2] is BinOp.SUB
    assert items[2][1] == 5

def test_deep_tree_survives_pickling_when_flattened():
    expr = parse_source("+".join(["z"] * 1500))
    items = pickle.loads(pickle.dumps(flatten(expr)))
    assert len(items) == 2 * 1500 - 1
    copy = rebuild(items)
    depth = 0
    node = copy
    while hasattr(node, "left"):
        node = node.left
        depth += 1
    assert depth == 1499
