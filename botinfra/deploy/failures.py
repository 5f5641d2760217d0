"""Classification of provisioning-engine failures."""
import json
import re
from typing import Any, Dict, List, Optional

from ..errors import (
    DependencyResolutionError,
    DeploymentError,
    NameConflictError,
    ParameterValidationError,
    ProvisioningError,
    QuotaExceededError,
)

VALIDATION_CODES = {
    "InvalidTemplate",
    "InvalidTemplateDeployment",
    "InvalidParameter",
    "InvalidRequestContent",
    "LocationNotAvailableForResourceType",
    "NoRegisteredProviderFound",
}
CONFLICT_CODES = {
    "Conflict",
    "StorageAccountAlreadyTaken",
    "StorageAccountAlreadyExists",
    "AccountNameAlreadyTaken",
    "CustomDomainInUse",
    "ServiceNameUnavailable",
    "VaultAlreadyExists",
    "WebsiteAlreadyExists",
    "BotNameNotAvailable",
    "FlagMustBeSetForRestore",
}
QUOTA_CODES = {
    "InsufficientQuota",
    "QuotaExceeded",
    "SubscriptionIsOverQuotaForSku",
    "SkuNotAvailable",
    "ServiceQuotaExceeded",
    "RequestDisallowedByAzure",
}
DEPENDENCY_CODES = {
    "ResourceNotFound",
    "ParentResourceNotFound",
    "DeploymentDependencyFailed",
}

_CODE_PATTERN = re.compile(r"\bCode:\s*(\w+)")
_MESSAGE_PATTERN = re.compile(r"\bMessage:\s*(.+)")
_PAREN_CODE_PATTERN = re.compile(r"^\((\w+)\)\s*(.*)$", re.MULTILINE)


def _parse_json(text: str) -> Optional[Any]:
    start = text.find("{")
    if start < 0:
        return None
    try:
        return json.loads(text[start:])
    except json.JSONDecodeError:
        return None


def _leaf_errors(error: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Innermost error entries; details whose message is itself JSON are unwrapped."""
    details = error.get("details") or []
    if not details:
        nested = _parse_json(error.get("message") or "")
        if isinstance(nested, dict) and isinstance(nested.get("error"), dict):
            return _leaf_errors(nested["error"])
        return [error]
    leaves = []
    for detail in details:
        leaves.extend(_leaf_errors(detail))
    return leaves


def _resource_from_target(target: Optional[str]) -> Optional[str]:
    if not target:
        return None
    return target.rstrip("/").split("/")[-1]


def error_for_code(code: Optional[str], message: str, resource: Optional[str] = None) -> ProvisioningError:
    """Map a provider error code onto the error taxonomy."""
    if code in VALIDATION_CODES:
        cls = ParameterValidationError
    elif code in CONFLICT_CODES or (code and code.endswith("AlreadyExists")):
        cls = NameConflictError
    elif code in QUOTA_CODES or (code and "Quota" in code):
        cls = QuotaExceededError
    elif code in DEPENDENCY_CODES:
        cls = DependencyResolutionError
    else:
        cls = DeploymentError
    return cls(message, resource=resource, code=code)


def classify_cli_error(stderr: str) -> ProvisioningError:
    """Build the most specific error from `az` CLI error output."""
    text = (stderr or "").strip()
    if text.startswith("ERROR:"):
        text = text[len("ERROR:"):].strip()

    document = _parse_json(text)
    if isinstance(document, dict):
        error = document.get("error", document)
        if isinstance(error, dict):
            leaf = _leaf_errors(error)[0]
            return error_for_code(
                leaf.get("code"),
                leaf.get("message", "").strip() or text,
                resource=_resource_from_target(leaf.get("target")),
            )

    code_match = _CODE_PATTERN.search(text) or _PAREN_CODE_PATTERN.search(text)
    message_match = _MESSAGE_PATTERN.search(text)
    code = code_match.group(1) if code_match else None
    message = message_match.group(1).strip() if message_match else (text or "deployment failed")
    return error_for_code(code, message)


def classify_operation(operation: Dict[str, Any]) -> ProvisioningError:
    """Build an error from one failed entry of `az deployment operation group list`."""
    properties = operation.get("properties", {})
    target = properties.get("targetResource") or {}
    status = properties.get("statusMessage") or {}
    error = status.get("error") if isinstance(status, dict) else None
    resource = target.get("resourceName") or _resource_from_target(target.get("id"))
    if isinstance(error, dict):
        leaf = _leaf_errors(error)[0]
        return error_for_code(leaf.get("code"), leaf.get("message", ""), resource=resource)
    return DeploymentError(str(status) or "operation failed", resource=resource)
