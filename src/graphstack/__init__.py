"""graphstack: lower architecture graphs into AWS resources and deploy them with Pulumi."""

__version__ = "0.1.0"
