"""Tests for provisioning failure classification."""
import json

from botinfra.deploy.failures import classify_cli_error, classify_operation, error_for_code
from botinfra.errors import (
    DependencyResolutionError,
    DeploymentError,
    NameConflictError,
    ParameterValidationError,
    QuotaExceededError,
)


def test_error_for_code():
    assert isinstance(error_for_code("InvalidTemplate", "bad"), ParameterValidationError)
    assert isinstance(error_for_code("StorageAccountAlreadyTaken", "taken"), NameConflictError)
    assert isinstance(error_for_code("WebsiteAlreadyExists", "taken"), NameConflictError)
    assert isinstance(error_for_code("InsufficientQuota", "no capacity"), QuotaExceededError)
    assert isinstance(error_for_code("ParentResourceNotFound", "missing"), DependencyResolutionError)
    # A resource that simply ended in a failed state is not a binding problem
    assert type(error_for_code("ResourceDeploymentFailure", "failed")) is DeploymentError
    assert isinstance(error_for_code("InternalServerError", "boom"), DeploymentError)
    assert isinstance(error_for_code(None, "boom"), DeploymentError)


def test_nested_cli_error():
    stderr = "ERROR: " + json.dumps({
        "error": {
            "code": "DeploymentFailed",
            "message": "At least one resource deployment operation failed.",
            "details": [{
                "code": "ResourceDeploymentFailure",
                "message": json.dumps({"error": {
                    "code": "InsufficientQuota",
                    "message": "This operation require 30 new capacity in quota Tokens Per Minute",
                }}),
            }],
        }
    })
    error = classify_cli_error(stderr)

    assert isinstance(error, QuotaExceededError)
    assert error.code == "InsufficientQuota"
    assert "30 new capacity" in error.message


def test_cli_error_with_target():
    stderr = json.dumps({"error": {
        "code": "StorageAccountAlreadyTaken",
        "message": "The storage account named stchatbot is already taken.",
        "target": "/subscriptions/x/resourceGroups/rg/providers/Microsoft.Storage/storageAccounts/stchatbot",
    }})
    error = classify_cli_error(stderr)

    assert isinstance(error, NameConflictError)
    assert error.resource == "stchatbot"
    assert str(error) == "[stchatbot] The storage account named stchatbot is already taken. (StorageAccountAlreadyTaken)"


def test_plain_text_cli_error():
    error = classify_cli_error("ERROR: (InvalidTemplate) Deployment template validation failed\nCode: InvalidTemplate\nMessage: Deployment template validation failed")
    assert isinstance(error, ParameterValidationError)
    assert error.message == "Deployment template validation failed"


def test_unstructured_cli_error():
    error = classify_cli_error("ERROR: Please run 'az login' to setup account.")
    assert isinstance(error, DeploymentError)
    assert "az login" in error.message


def test_failed_operation():
    operation = {
        "properties": {
            "provisioningState": "Failed",
            "targetResource": {
                "id": "/subscriptions/x/resourceGroups/rg/providers/Microsoft.Web/sites/app-chatbot",
                "resourceName": "app-chatbot",
            },
            "statusMessage": {"error": {"code": "Conflict", "message": "Website with given name already exists."}},
        }
    }
    error = classify_operation(operation)

    assert isinstance(error, NameConflictError)
    assert error.resource == "app-chatbot"
