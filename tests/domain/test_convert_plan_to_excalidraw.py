from __future__ import annotations

import logging

import pytest

from domain.errors import ArrowCountMismatchError, ChildCardinalityError
from domain.models import GenerationConfig, NodeInfo, PlanNode
from domain.services.convert_plan_to_excalidraw import PlanToExcalidrawConverter
from domain.services.generation_context import GenerationContext
from domain.services.node_generators.registry import NodeGeneratorRegistry, build_default_registry
from tests.helpers.plan_fixtures import data_source, elements_by_role, node, node_rect


def _shuffle_plan() -> PlanNode:
    return node(
        "CoalesceBatchesExec",
        {"target_batch_size": "8192"},
        node(
            "RepartitionExec",
            {"partitioning": "Hash([a@0], 4)", "input_partitions": "3"},
            node(
                "RepartitionExec",
                {"partitioning": "RoundRobinBatch(3)", "input_partitions": "2"},
                data_source(2, projection="[a, b]"),
            ),
        ),
    )


def test_every_operator_gets_one_rectangle(converter: PlanToExcalidrawConverter) -> None:
    plan = _shuffle_plan()

    document = converter.convert(plan)

    assert len(elements_by_role(document, "node")) == plan.node_count()


def test_one_edge_per_stream_between_operators(converter: PlanToExcalidrawConverter) -> None:
    document = converter.convert(_shuffle_plan())

    # 2 file groups + RoundRobinBatch(3) + Hash(4)
    assert len(elements_by_role(document, "edge")) == 2 + 3 + 4
    assert len(elements_by_role(document, "file_arrow")) == 2


def test_root_has_no_outbound_arrow(converter: PlanToExcalidrawConverter) -> None:
    document = converter.convert(_shuffle_plan())
    root = node_rect(document, "CoalesceBatchesExec")

    arrows = [element for element in document.elements if element["type"] == "arrow"]
    assert all(arrow["startBinding"]["elementId"] != root["id"] for arrow in arrows)
    assert (root["x"], root["y"]) == (0, 0)


def test_conversion_is_deterministic() -> None:
    plan = _shuffle_plan()
    converter = PlanToExcalidrawConverter()

    first = converter.convert(plan).to_dict()
    second = converter.convert(plan).to_dict()
    fresh = PlanToExcalidrawConverter().convert(plan).to_dict()

    assert first == second == fresh


def test_bindings_are_reciprocal(converter: PlanToExcalidrawConverter) -> None:
    document = converter.convert(_shuffle_plan())
    by_id = {element["id"]: element for element in document.elements}

    assert len(by_id) == len(document.elements)
    assert len({element["index"] for element in document.elements}) == len(document.elements)
    for element in document.elements:
        if element["type"] == "arrow":
            for key in ("startBinding", "endBinding"):
                target = by_id[element[key]["elementId"]]
                assert {"id": element["id"], "type": "arrow"} in target["boundElements"]
        if element["type"] == "text" and element["containerId"]:
            container = by_id[element["containerId"]]
            assert {"id": element["id"], "type": "text"} in container["boundElements"]


def test_document_shape(converter: PlanToExcalidrawConverter) -> None:
    payload = converter.convert(data_source(1)).to_dict()

    assert payload["type"] == "excalidraw"
    assert payload["version"] == 2
    assert payload["appState"]["viewBackgroundColor"] == "#ffffff"
    assert payload["files"] == {}


def test_large_fan_in_is_condensed(converter: PlanToExcalidrawConverter) -> None:
    plan = node(
        "CoalesceBatchesExec",
        None,
        node("RepartitionExec", {"partitioning": "RoundRobinBatch(16)"}, data_source(1)),
    )

    document = converter.convert(plan)

    assert len(elements_by_role(document, "edge")) == 1 + 4
    assert len(elements_by_role(document, "ellipsis")) == 1


def test_union_children_are_spread_side_by_side(converter: PlanToExcalidrawConverter) -> None:
    plan = node("UnionExec", None, data_source(1), data_source(2))

    document = converter.convert(plan)

    left, right = sorted(
        (rect for rect in elements_by_role(document, "node") if rect["customData"]["planviz"]["operator"] == "DataSourceExec"),
        key=lambda rect: rect["x"],
    )
    assert right["x"] - (left["x"] + left["width"]) == pytest.approx(75)
    assert (left["x"] + right["x"] + right["width"]) / 2 == pytest.approx(150)
    assert len(elements_by_role(document, "edge")) == 3


def test_union_output_keeps_first_child_columns(converter: PlanToExcalidrawConverter) -> None:
    plan = node(
        "CoalescePartitionsExec",
        None,
        node(
            "UnionExec",
            None,
            node("ProjectionExec", {"expr": "[a@0 as x]"}, data_source(1, projection="[a]")),
            node("ProjectionExec", {"expr": "[b@0 as x]"}, data_source(1, projection="[b]")),
        ),
    )

    document = converter.convert(plan)

    union = node_rect(document, "UnionExec")
    coalesce = node_rect(document, "CoalescePartitionsExec")
    between = [
        label
        for label in elements_by_role(document, "column_label")
        if coalesce["y"] + coalesce["height"] < label["y"] < union["y"]
    ]
    assert [label["text"] for label in between] == ["x"]


def test_sort_merge_join_with_unequal_sides_fails(converter: PlanToExcalidrawConverter) -> None:
    plan = node(
        "SortMergeJoin",
        {"join_type": "Inner", "on": "[(a@0, a@0)]"},
        node("RepartitionExec", {"partitioning": "Hash([a@0], 3)"}, data_source(1)),
        node("RepartitionExec", {"partitioning": "Hash([a@0], 4)"}, data_source(1)),
    )

    with pytest.raises(ArrowCountMismatchError):
        converter.convert(plan)


@pytest.mark.parametrize("child_count", [1, 3])
def test_hash_join_with_wrong_child_count_fails(
    converter: PlanToExcalidrawConverter, child_count: int
) -> None:
    plan = node("HashJoinExec", {"mode": "Partitioned"}, *[data_source(1) for _ in range(child_count)])

    with pytest.raises(ChildCardinalityError):
        converter.convert(plan)


def test_unknown_operator_is_drawn_and_logged(
    converter: PlanToExcalidrawConverter, caplog: pytest.LogCaptureFixture
) -> None:
    plan = node("MysteryExec", None, data_source(2))

    with caplog.at_level(logging.WARNING, logger="domain.services.convert_plan_to_excalidraw"):
        document = converter.convert(plan)

    assert "MysteryExec" in caplog.text
    assert "unimplemented" in [element["text"] for element in elements_by_role(document, "detail")]
    assert len(elements_by_role(document, "edge")) == 2


def test_custom_registry_and_config() -> None:
    seen: list[str] = []

    class RecordingGenerator:
        def generate(
            self, node: PlanNode, x: float, y: float, is_root: bool, context: GenerationContext
        ) -> NodeInfo:
            seen.append(node.operator)
            return NodeInfo(x=x, y=y, width=1, height=1, rect_id="", input_arrow_count=0)

    registry = NodeGeneratorRegistry(default=RecordingGenerator())
    converter = PlanToExcalidrawConverter(GenerationConfig(node_width=250), registry=registry)

    document = converter.convert(node("AnythingExec"))

    assert seen == ["AnythingExec"]
    assert document.elements == []


def test_default_registry_covers_known_operators() -> None:
    registry = build_default_registry()

    for operator in (
        "DataSourceExec",
        "FilterExec",
        "HashJoinExec",
        "SortMergeJoin",
        "SortMergeJoinExec",
        "UnionExec",
        "GlobalLimitExec",
    ):
        assert registry.has(operator)
    assert not registry.has("MysteryExec")
    assert registry.get("SortMergeJoin") is registry.get("SortMergeJoinExec")


def test_malformed_properties_still_render(converter: PlanToExcalidrawConverter) -> None:
    plan = node(
        "ProjectionExec",
        {"expr": "[a@0 as (broken"},
        node(
            "DataSourceExec",
            {"file_groups": "{3 groups: [[a.parquet, b", "projection": "[a@0 as (broken"},
        ),
    )

    document = converter.convert(plan)

    node_rect(document, "ProjectionExec")
    node_rect(document, "DataSourceExec")
    assert len(elements_by_role(document, "node")) == 2
    assert len(elements_by_role(document, "edge")) >= 1
