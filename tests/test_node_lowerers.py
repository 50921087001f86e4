"""Tests for the per-platform node lowerers."""

import pytest
from graphstack.domain.models import AdapterConfig, CodeS3Location
from graphstack.lowering import constants as c
from graphstack.lowering.naming import NODE_TAG, PLATFORM_TAG
from graphstack.lowering.nodes import (
    ApiGatewayLowerer,
    DynamoDbLowerer,
    LambdaLowerer,
    S3Lowerer,
    SnsLowerer,
    SqsLowerer,
    node_property,
)
from graphstack.lowering.types import NodeLowerer, Ref, ResolvedDeps
from helpers import make_context, make_node


class TestNodeProperty:
    def test_camel_case(self):
        node = make_node("component:fn", "aws-lambda", memorySize=512)
        assert node_property(node, "memorySize") == 512

    def test_snake_case_fallback(self):
        node = make_node("component:fn", "aws-lambda", memory_size=256)
        assert node_property(node, "memorySize", 128) == 256

    def test_default(self):
        assert node_property(make_node("component:fn"), "memorySize", 128) == 128


@pytest.mark.parametrize(
    "lowerer,platform",
    [
        (LambdaLowerer(), c.LAMBDA_PLATFORM),
        (SqsLowerer(), c.SQS_PLATFORM),
        (DynamoDbLowerer(), c.DYNAMODB_PLATFORM),
        (S3Lowerer(), c.S3_PLATFORM),
        (ApiGatewayLowerer(), c.APIGATEWAY_PLATFORM),
        (SnsLowerer(), c.SNS_PLATFORM),
    ],
)
def test_lowerers_satisfy_protocol(lowerer, platform):
    assert isinstance(lowerer, NodeLowerer)
    assert lowerer.platform == platform


class TestLambdaLowerer:
    def test_defaults(self):
        node = make_node("component:api-handler", "aws-lambda")
        (fn,) = LambdaLowerer().lower(node, make_context(), ResolvedDeps())

        assert fn.name == "api-handler-function"
        assert fn.resource_type == c.LAMBDA_FUNCTION
        assert fn.source_id == "component:api-handler"
        assert fn.depends_on == ()
        assert fn.properties["name"] == "test-service-api-handler"
        assert fn.properties["runtime"] == "nodejs20.x"
        assert fn.properties["handler"] == "index.handler"
        assert fn.properties["memory_size"] == 128
        assert fn.properties["timeout"] == 30
        assert fn.properties["tags"] == {
            NODE_TAG: "component:api-handler",
            PLATFORM_TAG: "aws-lambda",
        }
        assert "role" not in fn.properties
        assert "code" not in fn.properties

    def test_node_overrides(self):
        node = make_node(
            "component:worker",
            "aws-lambda",
            runtime="python3.12",
            handler="app.main",
            memorySize=1024,
            timeout=300,
        )
        (fn,) = LambdaLowerer().lower(node, make_context(), ResolvedDeps())

        assert fn.properties["runtime"] == "python3.12"
        assert fn.properties["handler"] == "app.main"
        assert fn.properties["memory_size"] == 1024
        assert fn.properties["timeout"] == 300

    def test_role_dependency(self):
        node = make_node("component:api-handler", "aws-lambda")
        deps = ResolvedDeps(role_name="api-handler-exec-role")
        (fn,) = LambdaLowerer().lower(node, make_context(), deps)

        assert fn.properties["role"] == Ref("api-handler-exec-role")
        assert fn.depends_on == ("api-handler-exec-role",)

    def test_environment_sorted(self):
        node = make_node("component:api-handler", "aws-lambda")
        deps = ResolvedDeps(env_vars={"ZED": "1", "ALPHA": Ref("q-queue.url")})
        (fn,) = LambdaLowerer().lower(node, make_context(), deps)

        variables = fn.properties["environment"]["variables"]
        assert list(variables) == ["ALPHA", "ZED"]
        assert variables["ALPHA"] == Ref("q-queue.url")

    def test_environment_refs_become_dependencies(self):
        node = make_node("component:api-handler", "aws-lambda")
        deps = ResolvedDeps(
            role_name="api-handler-exec-role",
            env_vars={
                "TABLE": Ref("orders-table.name"),
                "QUEUE_URL": Ref("work-queue-queue.url"),
                "QUEUE_ARN": Ref("work-queue-queue.arn"),
                "MODE": "fast",
            },
        )
        (fn,) = LambdaLowerer().lower(node, make_context(), deps)

        assert fn.depends_on == ("api-handler-exec-role", "orders-table", "work-queue-queue")

    def test_no_environment_when_no_vars(self):
        node = make_node("component:api-handler", "aws-lambda")
        (fn,) = LambdaLowerer().lower(node, make_context(), ResolvedDeps(env_vars={}))
        assert "environment" not in fn.properties

    def test_code_locations(self):
        config = AdapterConfig(
            region="us-east-1",
            service_name="svc",
            code_path="./dist",
            code_s3=CodeS3Location(bucket="artifacts", key="svc.zip"),
        )
        node = make_node("component:api-handler", "aws-lambda")
        (fn,) = LambdaLowerer().lower(node, make_context(config=config), ResolvedDeps())

        assert fn.properties["code"] == {"path": "./dist"}
        assert fn.properties["s3_bucket"] == "artifacts"
        assert fn.properties["s3_key"] == "svc.zip"


class TestSqsLowerer:
    def test_defaults(self):
        node = make_node("platform:work-queue", "aws-sqs")
        (queue,) = SqsLowerer().lower(node, make_context(), ResolvedDeps())

        assert queue.name == "work-queue-queue"
        assert queue.resource_type == c.SQS_QUEUE
        assert queue.properties["visibility_timeout_seconds"] == 30
        assert queue.properties["message_retention_seconds"] == 345600

    def test_overrides(self):
        node = make_node("platform:work-queue", "aws-sqs", visibilityTimeout=90, messageRetention=60)
        (queue,) = SqsLowerer().lower(node, make_context(), ResolvedDeps())

        assert queue.properties["visibility_timeout_seconds"] == 90
        assert queue.properties["message_retention_seconds"] == 60


class TestDynamoDbLowerer:
    def test_default_key(self):
        node = make_node("platform:orders", "aws-dynamodb")
        (table,) = DynamoDbLowerer().lower(node, make_context(), ResolvedDeps())

        assert table.name == "orders-table"
        assert table.resource_type == c.DYNAMODB_TABLE
        assert table.properties["billing_mode"] == "PAY_PER_REQUEST"
        assert table.properties["hash_key"] == "id"
        assert table.properties["attributes"] == [{"name": "id", "type": "S"}]
        assert "range_key" not in table.properties

    def test_key_schema(self):
        node = make_node(
            "platform:orders",
            "aws-dynamodb",
            keySchema={
                "hashKey": {"name": "pk", "type": "S"},
                "rangeKey": {"name": "created", "type": "N"},
            },
        )
        (table,) = DynamoDbLowerer().lower(node, make_context(), ResolvedDeps())

        assert table.properties["hash_key"] == "pk"
        assert table.properties["range_key"] == "created"
        assert table.properties["attributes"] == [
            {"name": "pk", "type": "S"},
            {"name": "created", "type": "N"},
        ]


class TestS3Lowerer:
    def test_bucket_only(self):
        node = make_node("platform:uploads", "aws-s3")
        resources = S3Lowerer().lower(node, make_context(), ResolvedDeps())

        assert [r.name for r in resources] == ["uploads-bucket"]
        assert resources[0].properties["bucket"] == "test-service-uploads"

    def test_versioning(self):
        node = make_node("platform:uploads", "aws-s3", versioning=True)
        bucket, versioning = S3Lowerer().lower(node, make_context(), ResolvedDeps())

        assert versioning.name == "uploads-versioning"
        assert versioning.resource_type == c.S3_BUCKET_VERSIONING
        assert versioning.properties["bucket"] == Ref(bucket.name)
        assert versioning.properties["versioning_configuration"] == {"status": "Enabled"}
        assert versioning.depends_on == ("uploads-bucket",)

    def test_versioning_requires_true(self):
        node = make_node("platform:uploads", "aws-s3", versioning="yes")
        assert len(S3Lowerer().lower(node, make_context(), ResolvedDeps())) == 1


class TestApiGatewayLowerer:
    def test_api_and_stage(self):
        node = make_node("platform:public-api", "aws-apigateway")
        api, stage = ApiGatewayLowerer().lower(node, make_context(), ResolvedDeps())

        assert api.name == "public-api-api"
        assert api.properties["protocol_type"] == "HTTP"
        assert stage.name == "public-api-stage"
        assert stage.resource_type == c.APIGW_STAGE
        assert stage.properties["api_id"] == Ref("public-api-api")
        assert stage.properties["name"] == "$default"
        assert stage.properties["auto_deploy"] is True
        assert stage.depends_on == ("public-api-api",)


class TestSnsLowerer:
    def test_topic(self):
        node = make_node("platform:events", "aws-sns")
        (topic,) = SnsLowerer().lower(node, make_context(), ResolvedDeps())

        assert topic.name == "events-topic"
        assert topic.resource_type == c.SNS_TOPIC
        assert topic.properties["name"] == "test-service-events"
