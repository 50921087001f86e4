"""Tests for resource naming and tagging conventions."""

from graphstack.lowering.naming import (
    EDGE_TAG,
    NODE_TAG,
    PLATFORM_TAG,
    edge_tags,
    exec_role_name,
    node_tags,
    physical_name,
    resource_name,
    short_name,
)


def test_short_name_strips_node_kind():
    assert short_name("component:api-handler") == "api-handler"
    assert short_name("platform:work-queue") == "work-queue"


def test_short_name_only_splits_first_colon():
    assert short_name("component:ns:handler") == "ns:handler"


def test_short_name_without_kind_is_unchanged():
    assert short_name("api-handler") == "api-handler"


def test_resource_name():
    assert resource_name("platform:work-queue", "queue") == "work-queue-queue"
    assert resource_name("component:api-handler", "function") == "api-handler-function"


def test_physical_name_prefixes_service():
    assert physical_name("orders", "component:api-handler") == "orders-api-handler"


def test_exec_role_name():
    assert exec_role_name("component:api-handler") == "api-handler-exec-role"


def test_tags():
    assert node_tags("platform:work-queue", "aws-sqs") == {
        NODE_TAG: "platform:work-queue",
        PLATFORM_TAG: "aws-sqs",
    }
    assert edge_tags("edge-1") == {EDGE_TAG: "edge-1"}
    assert NODE_TAG == "graphstack:node"
