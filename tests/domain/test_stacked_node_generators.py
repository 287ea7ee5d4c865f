from __future__ import annotations

from typing import List

import pytest

from domain.errors import ArrowCountMismatchError, ChildCardinalityError
from domain.models import Element
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.aggregate import PIPELINE_LABEL, AggregateNodeGenerator
from domain.services.node_generators.coalesce_batches import CoalesceBatchesNodeGenerator
from domain.services.node_generators.coalesce_partitions import CoalescePartitionsNodeGenerator
from domain.services.node_generators.default import UNIMPLEMENTED_TEXT, DefaultNodeGenerator
from domain.services.node_generators.filter import FilterNodeGenerator
from domain.services.node_generators.global_limit import GlobalLimitNodeGenerator
from domain.services.node_generators.local_limit import LocalLimitNodeGenerator
from domain.services.node_generators.projection import ProjectionNodeGenerator
from domain.services.node_generators.repartition import RepartitionNodeGenerator
from domain.services.node_generators.sort import SortNodeGenerator
from domain.services.node_generators.sort_preserving_merge import (
    SortPreservingMergeNodeGenerator,
)
from domain.styles import (
    AGGREGATE_PIPELINE_HEIGHT,
    DARK_RED_COLOR,
    ERROR_COLOR,
    ORDERED_COLUMN_COLOR,
    PURPLE_MODE_COLOR,
)
from tests.helpers.generator_context import child_info, stub_context
from tests.helpers.plan_fixtures import node, role_of


def _by_role(context: GenerationContext, role: str) -> List[Element]:
    return [element for element in context.elements if role_of(element) == role]


def _details(context: GenerationContext) -> List[str]:
    return [element["text"] for element in _by_role(context, "detail")]


def test_stacked_child_is_connected_once_per_stream() -> None:
    context = stub_context(child_info(count=3, columns=["a", "b"]))
    plan = node("CoalesceBatchesExec", {"target_batch_size": "8192"}, node("Leaf"))

    info = CoalesceBatchesNodeGenerator().generate(plan, 0, 0, False, context)

    edges = _by_role(context, "edge")
    assert len(edges) == 3
    assert all(edge["endBinding"]["elementId"] == info.rect_id for edge in edges)
    assert all(edge["startBinding"]["elementId"] == "child" for edge in edges)
    assert info.input_arrow_count == 3
    assert info.output_columns == ["a", "b"]
    assert _details(context) == ["target_batch_size=8192"]


def test_arrows_bind_back_to_parent_rectangle() -> None:
    context = stub_context(child_info(count=2))
    plan = node("LocalLimitExec", {"fetch": "5"}, node("Leaf"))

    info = LocalLimitNodeGenerator().generate(plan, 0, 0, False, context)

    rect = context.registry.index[info.rect_id]
    bound = {item["id"] for item in rect["boundElements"] if item["type"] == "arrow"}
    assert bound == {edge["id"] for edge in _by_role(context, "edge")}
    assert _details(context) == ["fetch=5"]
    assert info.input_arrow_count == 2


def test_child_without_streams_still_gets_one_arrow() -> None:
    context = stub_context(child_info(count=0))
    plan = node("CoalesceBatchesExec", None, node("Leaf"))

    info = CoalesceBatchesNodeGenerator().generate(plan, 0, 0, False, context)

    assert len(_by_role(context, "edge")) == 1
    assert info.input_arrow_count == 1


def test_large_fan_in_is_condensed_with_ellipsis() -> None:
    context = stub_context(child_info(count=16))
    plan = node("CoalesceBatchesExec", None, node("Leaf"))

    info = CoalesceBatchesNodeGenerator().generate(plan, 0, 0, False, context)

    assert len(_by_role(context, "edge")) == 4
    assert len(_by_role(context, "ellipsis")) == 1
    assert info.input_arrow_count == 16


def test_column_labels_follow_the_arrows() -> None:
    context = stub_context(child_info(count=1, columns=["a", "b"], sort_order=["a"]))
    plan = node("CoalesceBatchesExec", None, node("Leaf"))

    CoalesceBatchesNodeGenerator().generate(plan, 0, 0, False, context)

    labels = _by_role(context, "column_label")
    assert [label["text"] for label in labels] == ["a", ", b"]
    assert labels[0]["strokeColor"] == ORDERED_COLUMN_COLOR


def test_coalesce_batches_falls_back_to_limit_detail() -> None:
    context = stub_context(child_info())
    plan = node("CoalesceBatchesExec", {"fetch": "20"}, node("Leaf"))

    CoalesceBatchesNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["fetch=20"]


def test_coalesce_partitions_merges_to_one_stream() -> None:
    context = stub_context(child_info(count=4, columns=["a"], sort_order=["a"]))
    plan = node("CoalescePartitionsExec", None, node("Leaf"))

    info = CoalescePartitionsNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.input_arrow_count == 1
    assert info.input_arrow_positions == [150]
    assert info.output_columns == ["a"]


def test_repartition_hash_detail_and_partition_count() -> None:
    context = stub_context(child_info(count=1, columns=["a", "b"]))
    plan = node(
        "RepartitionExec",
        {"partitioning": "Hash([a@0, b@1], 4)", "input_partitions": "1"},
        node("Leaf"),
    )

    info = RepartitionNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["Hash([a, b], 4)"]
    assert _by_role(context, "detail")[0]["y"] == pytest.approx(80 - 22.5)
    assert info.input_arrow_count == 4
    assert info.input_arrow_positions == pytest.approx([60, 120, 180, 240])
    assert len(_by_role(context, "edge")) == 1


def test_repartition_detail_lines_are_spread_over_the_node() -> None:
    context = stub_context(child_info(count=2, sort_order=["a"]))
    plan = node(
        "RepartitionExec",
        {
            "partitioning": "RoundRobinBatch(4)",
            "preserve_order": "true",
            "sort_exprs": "a@0 ASC, b@1 DESC",
        },
        node("Leaf"),
    )

    RepartitionNodeGenerator().generate(plan, 0, 0, False, context)

    details = _by_role(context, "detail")
    assert [element["text"] for element in details] == [
        "RoundRobinBatch(4)",
        "preserve_order=true",
        "sort_exprs=[a, b]",
    ]
    assert [element["y"] for element in details] == pytest.approx([22.5, 40, 57.5])
    assert details[1]["strokeColor"] == DARK_RED_COLOR


def test_unrecognized_partitioning_keeps_child_streams() -> None:
    context = stub_context(child_info(count=3, columns=["a"]))
    plan = node("RepartitionExec", {"partitioning": "SinglePartition"}, node("Leaf"))

    info = RepartitionNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["SinglePartition"]
    assert info.input_arrow_count == 3
    assert len(info.input_arrow_positions) == 3


def test_repartition_at_root_has_no_outputs() -> None:
    context = stub_context(child_info())
    plan = node("RepartitionExec", {"partitioning": "RoundRobinBatch(4)"}, node("Leaf"))

    info = RepartitionNodeGenerator().generate(plan, 0, 0, True, context)

    assert info.input_arrow_count == 0
    assert info.input_arrow_positions == []


@pytest.mark.parametrize(
    ("partitioning", "preserve_order", "child_streams", "expected"),
    [
        ("RoundRobinBatch(4)", "false", 2, []),
        ("RoundRobinBatch(4)", "true", 2, ["a"]),
        ("RoundRobinBatch(4)", "false", 1, ["a"]),
        ("Hash([a@0], 4)", "false", 3, []),
        ("UnknownPartitioning(2)", "false", 3, ["a"]),
    ],
)
def test_repartition_sort_order(
    partitioning: str, preserve_order: str, child_streams: int, expected: List[str]
) -> None:
    context = stub_context(child_info(count=child_streams, columns=["a"], sort_order=["a"]))
    plan = node(
        "RepartitionExec",
        {"partitioning": partitioning, "preserve_order": preserve_order},
        node("Leaf"),
    )

    info = RepartitionNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.output_sort_order == expected


def test_aggregate_details_and_columns() -> None:
    context = stub_context(child_info(count=2, columns=["env", "x"]))
    plan = node(
        "AggregateExec",
        {"mode": "Partial", "gby": "[env@0 as env]", "aggr": "[count(x)]"},
        node("Leaf"),
    )

    info = AggregateNodeGenerator().generate(plan, 0, 0, False, context)

    details = _by_role(context, "detail")
    assert [element["text"] for element in details] == ["mode=Partial", "gby=[env], aggr=[count(x)]"]
    assert details[0]["strokeColor"] == PURPLE_MODE_COLOR
    assert all(element["height"] == 20 for element in details)
    assert info.output_columns == ["env", "x"]
    assert info.input_arrow_count == 2


def test_sorted_aggregate_is_drawn_as_pipeline() -> None:
    context = stub_context(child_info(count=1, columns=["env"], sort_order=["env"]))
    plan = node(
        "AggregateExec",
        {"mode": "Single", "gby": "[env@0 as env]", "aggr": "[count(Int64(1))]", "ordering_mode": "Sorted"},
        node("Leaf"),
    )

    info = AggregateNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.height == AGGREGATE_PIPELINE_HEIGHT
    labels = [element["text"] for element in _by_role(context, "operator_label")]
    assert labels == [PIPELINE_LABEL]
    assert "ordering_mode=Sorted" in _details(context)


def test_aggregate_keeps_binned_column_sorted() -> None:
    context = stub_context(child_info(count=1, columns=["ts"], sort_order=["ts"]))
    gby = (
        "[date_bin(IntervalMonthDayNano { months: 0, days: 0, nanoseconds: 60000000000 }, "
        "ts@0) as date_bin]"
    )
    plan = node("AggregateExec", {"mode": "Single", "gby": gby, "aggr": "[]"}, node("Leaf"))

    info = AggregateNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.output_sort_order == ["ts", "date_bin"]
    assert info.output_columns == ["date_bin"]


def test_projection_renames_columns() -> None:
    context = stub_context(child_info(count=2, columns=["a", "b"], sort_order=["a"]))
    plan = node("ProjectionExec", {"expr": "[a@0 as x, count(b@1) as c]"}, node("Leaf"))

    info = ProjectionNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.output_columns == ["x", "c"]
    assert _details(context) == ["x, count"]
    assert info.input_arrow_count == 2


def test_filter_shows_predicate_and_projection() -> None:
    context = stub_context(child_info(count=1, columns=["a", "b", "c"]))
    plan = node(
        "FilterExec", {"filter": "a@0 > 5", "projection": "[a@0, b@1]"}, node("Leaf")
    )

    info = FilterNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["a > 5\nprojection=[a, b]"]
    assert info.output_columns == ["a", "b"]


def test_filter_without_projection_passes_columns_through() -> None:
    context = stub_context(child_info(count=1, columns=["a", "b"]))
    plan = node("FilterExec", {"predicate": "b@1 = 3"}, node("Leaf"))

    info = FilterNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["b = 3"]
    assert info.output_columns == ["a", "b"]


def test_sort_sets_sort_order_and_shows_topk() -> None:
    context = stub_context(child_info(count=3, columns=["a", "b"]))
    plan = node(
        "SortExec",
        {
            "expression": "TopK(fetch=10)",
            "expr": "[a@0 ASC, b@1 DESC]",
            "preserve_partitioning": "[true]",
        },
        node("Leaf"),
    )

    info = SortNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.output_sort_order == ["a", "b"]
    assert _details(context) == [
        "[a, b] \npreserve_partitioning=[true] \nTopK(fetch=10)"
    ]
    assert info.input_arrow_count == 3


def test_sort_preserving_merge_outputs_single_sorted_stream() -> None:
    context = stub_context(child_info(count=4, columns=["a", "b"], sort_order=["a"]))
    plan = node("SortPreservingMergeExec", {"expr": "[b@1 ASC]"}, node("Leaf"))

    info = SortPreservingMergeNodeGenerator().generate(plan, 0, 0, False, context)

    assert info.input_arrow_count == 1
    assert info.output_sort_order == ["b"]
    assert _details(context) == ["[b]"]
    assert len(_by_role(context, "edge")) == 4


def test_global_limit_requires_single_child() -> None:
    context = stub_context(child_info(), child_info())
    plan = node("GlobalLimitExec", {"skip": "0", "fetch": "10"}, node("Leaf"), node("Leaf"))

    with pytest.raises(ChildCardinalityError) as excinfo:
        GlobalLimitNodeGenerator().generate(plan, 0, 0, False, context)
    assert excinfo.value.expected == 1
    assert excinfo.value.actual == 2


def test_global_limit_requires_single_input_stream() -> None:
    context = stub_context(child_info(count=3))
    plan = node("GlobalLimitExec", {"skip": "0", "fetch": "10"}, node("Leaf"))

    with pytest.raises(ArrowCountMismatchError):
        GlobalLimitNodeGenerator().generate(plan, 0, 0, False, context)


def test_global_limit_detail() -> None:
    context = stub_context(child_info(count=1, columns=["a"]))
    plan = node("GlobalLimitExec", {"skip": "0", "fetch": "10"}, node("Leaf"))

    info = GlobalLimitNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["skip=0, fetch=10"]
    assert info.input_arrow_count == 1


def test_unknown_operator_is_marked_unimplemented() -> None:
    context = stub_context(child_info(count=2, columns=["a"]))
    plan = node("MysteryExec", {"x": "1"}, node("Leaf"))

    info = DefaultNodeGenerator().generate(plan, 0, 0, False, context)

    label = _by_role(context, "operator_label")[0]
    assert label["text"] == "MysteryExec"
    assert label["strokeColor"] == ERROR_COLOR
    unimplemented = _by_role(context, "detail")[0]
    assert unimplemented["text"] == UNIMPLEMENTED_TEXT
    assert unimplemented["strokeColor"] == ERROR_COLOR
    assert info.width == 300
    assert info.input_arrow_count == 2
    assert info.output_columns == ["a"]


def test_sort_preserving_merge_shows_fetch() -> None:
    context = stub_context(child_info(count=2))
    plan = node("SortPreservingMergeExec", {"expression": "[a@0 DESC]", "fetch": "5"}, node("Leaf"))

    SortPreservingMergeNodeGenerator().generate(plan, 0, 0, False, context)

    assert _details(context) == ["[a], fetch=5"]
