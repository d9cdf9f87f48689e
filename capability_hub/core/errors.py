"""
错误分类

核心层内部抛出 CapabilityError 子类，
在对外边界（工具执行、Capability 执行、Hub 调度、HTTP 路由）统一转换为结果对象
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """错误码"""

    MALFORMED_ACTION = "MALFORMED_ACTION"
    UNKNOWN_API = "UNKNOWN_API"
    ENDPOINT_NOT_FOUND = "ENDPOINT_NOT_FOUND"
    MISSING_PARAMETER = "MISSING_PARAMETER"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    CREDENTIAL_NOT_CONFIGURED = "CREDENTIAL_NOT_CONFIGURED"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    DUPLICATE_API_REGISTRATION = "DUPLICATE_API_REGISTRATION"
    INVALID_API_DEFINITION = "INVALID_API_DEFINITION"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    PROVIDER_INIT_FAILED = "PROVIDER_INIT_FAILED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    UPSTREAM_HTTP_ERROR = "UPSTREAM_HTTP_ERROR"
    CAPABILITY_NOT_LICENSED = "CAPABILITY_NOT_LICENSED"
    UNKNOWN_CAPABILITY = "UNKNOWN_CAPABILITY"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class CapabilityError(Exception):
    """核心层错误基类"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
        }


class MalformedActionError(CapabilityError):
    error_code = ErrorCode.MALFORMED_ACTION

    def __init__(self, action: str):
        super().__init__(
            f"Action must be of the form \"apiId.endpointName\" "
            f"(e.g., coingecko.simple_price), got '{action}'",
            details={"action": action},
        )


class UnknownAPIError(CapabilityError):
    error_code = ErrorCode.UNKNOWN_API

    def __init__(self, api_id: str, available: List[str]):
        super().__init__(
            f"API '{api_id}' not found in registry. "
            f"Use 'list_available_apis' tool to see available APIs. "
            f"Available: {', '.join(available)}",
            details={"api_id": api_id, "available": available},
        )


class EndpointNotFoundError(CapabilityError):
    error_code = ErrorCode.ENDPOINT_NOT_FOUND

    def __init__(self, endpoint: str, api_name: str, available: List[str]):
        super().__init__(
            f"Endpoint '{endpoint}' not found in API '{api_name}'. "
            f"Available: {', '.join(available)}",
            details={"endpoint": endpoint, "available": available},
        )


class MissingParameterError(CapabilityError):
    error_code = ErrorCode.MISSING_PARAMETER

    def __init__(self, name: str, location: str, endpoint: str):
        self.name = name
        self.location = location
        super().__init__(
            f"Missing required {location} parameter '{name}' for endpoint '{endpoint}'",
            details={"name": name, "location": location, "endpoint": endpoint},
        )


class MissingCredentialError(CapabilityError):
    error_code = ErrorCode.MISSING_CREDENTIAL

    def __init__(self, api_name: str):
        super().__init__(
            f"API '{api_name}' requires authentication. Please provide an accessToken.",
            details={"api": api_name},
        )


class CredentialNotConfiguredError(CapabilityError):
    error_code = ErrorCode.CREDENTIAL_NOT_CONFIGURED

    def __init__(self, api_id: str, env_var: str):
        self.env_var = env_var
        super().__init__(
            f"API key for {api_id} not configured. Set {env_var} in the environment.",
            details={"api_id": api_id, "env_var": env_var},
        )


class SchemaValidationError(CapabilityError):
    error_code = ErrorCode.SCHEMA_VALIDATION_ERROR

    def __init__(self, issues: List[Dict[str, str]]):
        self.issues = issues
        summary = ", ".join(f"{i['path']}: {i['message']}" for i in issues)
        super().__init__(f"Validation error: {summary}", details={"issues": issues})


class InvalidAPIDefinitionError(SchemaValidationError):
    error_code = ErrorCode.INVALID_API_DEFINITION


class DuplicateAPIRegistrationError(CapabilityError):
    error_code = ErrorCode.DUPLICATE_API_REGISTRATION

    def __init__(self, api_id: str):
        super().__init__(
            f"API '{api_id}' already exists. Use a different ID.",
            details={"api_id": api_id},
        )


class UnknownProviderError(CapabilityError):
    error_code = ErrorCode.UNKNOWN_PROVIDER

    def __init__(self, server: str, available: List[str]):
        super().__init__(
            f"Server '{server}' not registered. Available: {', '.join(available)}",
            details={"server": server, "available": available},
        )


class UnknownToolError(CapabilityError):
    error_code = ErrorCode.UNKNOWN_TOOL

    def __init__(self, tool: str, server: str, available: List[str]):
        super().__init__(
            f"Unknown tool: {tool}. Available tools on '{server}': {', '.join(available)}",
            details={"tool": tool, "server": server, "available": available},
        )


class ProviderInitError(CapabilityError):
    error_code = ErrorCode.PROVIDER_INIT_FAILED

    def __init__(self, server: str, reason: str):
        super().__init__(
            f"Failed to initialize server '{server}': {reason}",
            details={"server": server},
        )


class TransportError(CapabilityError):
    error_code = ErrorCode.TRANSPORT_ERROR

    def __init__(self, cause: BaseException):
        self.cause = cause
        reason = str(cause) or type(cause).__name__
        super().__init__(
            f"HTTP request failed: {reason}",
            details={"cause": type(cause).__name__},
        )


class UpstreamHTTPError(CapabilityError):
    """上游返回 >= 400，作为数据转发而非本地异常"""

    error_code = ErrorCode.UPSTREAM_HTTP_ERROR

    def __init__(self, status_code: int, body: Any, rendered_body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"API returned error status {status_code}. Response: {rendered_body}",
            details={"status_code": status_code},
        )


class CapabilityNotLicensedError(CapabilityError):
    error_code = ErrorCode.CAPABILITY_NOT_LICENSED

    def __init__(self, capability_id: str):
        super().__init__(
            f"Capability '{capability_id}' is not enabled for this installation. "
            f"Check your license or ALLOWED_CAPABILITIES.",
            details={"capability_id": capability_id},
        )


class UnknownCapabilityError(CapabilityError):
    error_code = ErrorCode.UNKNOWN_CAPABILITY

    def __init__(self, capability_id: str, available: List[str]):
        super().__init__(
            f"Capability '{capability_id}' not available. Available: {', '.join(available)}",
            details={"capability_id": capability_id, "available": available},
        )


def issues_from_validation_error(exc: Any) -> List[Dict[str, str]]:
    """将 pydantic ValidationError 展开为字段级问题列表（不只取第一条）"""
    issues = []
    for err in exc.errors():
        path = ".".join(str(p) for p in err.get("loc", ())) or "(root)"
        issues.append({"path": path, "message": err.get("msg", "invalid value")})
    return issues
