"""Platform tags and provider resource types understood by the AWS adapter."""

from __future__ import annotations

# Graph node platform tags
LAMBDA_PLATFORM = "aws-lambda"
SQS_PLATFORM = "aws-sqs"
DYNAMODB_PLATFORM = "aws-dynamodb"
S3_PLATFORM = "aws-s3"
APIGATEWAY_PLATFORM = "aws-apigateway"
SNS_PLATFORM = "aws-sns"

# Provider resource types (Pulumi type tokens)
IAM_ROLE = "aws:iam:Role"
IAM_POLICY = "aws:iam:Policy"
IAM_ROLE_POLICY_ATTACHMENT = "aws:iam:RolePolicyAttachment"
LAMBDA_FUNCTION = "aws:lambda:Function"
LAMBDA_EVENT_SOURCE_MAPPING = "aws:lambda:EventSourceMapping"
LAMBDA_PERMISSION = "aws:lambda:Permission"
SQS_QUEUE = "aws:sqs:Queue"
SSM_PARAMETER = "aws:ssm:Parameter"
EC2_SECURITY_GROUP_RULE = "aws:ec2:SecurityGroupRule"
DYNAMODB_TABLE = "aws:dynamodb:Table"
S3_BUCKET = "aws:s3:Bucket"
S3_BUCKET_VERSIONING = "aws:s3:BucketVersioningV2"
APIGW_API = "aws:apigatewayv2:Api"
APIGW_STAGE = "aws:apigatewayv2:Stage"
APIGW_INTEGRATION = "aws:apigatewayv2:Integration"
APIGW_ROUTE = "aws:apigatewayv2:Route"
SNS_TOPIC = "aws:sns:Topic"

# The only static provider handle a lowerer may emit
LAMBDA_BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)
