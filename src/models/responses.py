"""Models for REST API responses."""

from typing import Optional

from pydantic import BaseModel, Field


class ChatResponse(BaseModel):
    """Model representing a non-streaming chat response.

    Attributes:
        ok: Always true for successful responses.
        content: Content of the first choice generated by the model.

    Example:
        ```python
        chat_response = ChatResponse(content="Hello, how can I help?")
        ```
    """

    ok: bool = Field(
        True,
        description="Flag indicating successful response",
        examples=[True],
    )

    content: str = Field(
        description="Content generated by the model",
        examples=["Kubernetes is an open-source container orchestration system."],
    )

    # provides examples for /docs endpoint
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "ok": True,
                    "content": "Kubernetes is an open-source container "
                    "orchestration system.",
                }
            ]
        }
    }


class ErrorResponse(BaseModel):
    """Model representing an error reported to the caller.

    Attributes:
        ok: Always false for errors.
        code: Machine-readable error code.
        message: Human readable message, safe to show to end users.
        retry_after_sec: Seconds the caller should wait before retrying.
        details: Truncated diagnostic detail for upstream errors.
    """

    ok: bool = Field(False, description="Flag indicating failed response")
    code: str = Field(
        description="Machine-readable error code",
        examples=["APP_LIMIT", "RATE_LIMIT", "OPENAI_ERROR"],
    )
    message: str = Field(
        description="Human readable error message",
        examples=["Daily request limit reached."],
    )
    retry_after_sec: Optional[int] = Field(
        None,
        description="Seconds to wait before retrying",
        examples=[86400, 60],
    )
    details: Optional[str] = Field(
        None,
        description="Truncated diagnostic detail",
    )

    # provides examples for /docs endpoint
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "ok": False,
                    "code": "APP_LIMIT",
                    "message": "You have reached the guest limit for today.",
                    "retry_after_sec": 86400,
                },
                {
                    "ok": False,
                    "code": "OPENAI_ERROR",
                    "message": "Upstream model error. Try again later.",
                    "details": '{"error": {"message": "overloaded"}}',
                },
            ]
        }
    }


class QuotaStatusResponse(BaseModel):
    """Model representing daily quota status of the caller.

    Attributes:
        user_id: ID of registered user, None for anonymous callers.
        plan: Plan tier, None for anonymous callers.
        requests_per_day: Daily request limit.
        used_today: Requests consumed today.
        remaining: Requests still available today.
    """

    ok: bool = True
    user_id: Optional[str] = Field(None, description="Registered user ID")
    plan: Optional[str] = Field(None, description="Plan tier", examples=["FREE"])
    requests_per_day: int = Field(description="Daily request limit", examples=[25])
    used_today: int = Field(description="Requests consumed today", examples=[3])
    remaining: int = Field(description="Requests still available", examples=[22])


class ReadinessResponse(BaseModel):
    """Model representing response to a readiness request.

    Attributes:
        ready: If service is ready.
        reason: The reason for the readiness.

    Example:
        ```python
        readiness_response = ReadinessResponse(
            ready=False,
            reason="Upstream client is not initialized",
        )
        ```
    """

    ready: bool = Field(
        ...,
        description="Flag indicating if service is ready",
        examples=[True, False],
    )

    reason: str = Field(
        ...,
        description="The reason for the readiness",
        examples=["Service is ready"],
    )

    # provides examples for /docs endpoint
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "ready": True,
                    "reason": "Service is ready",
                }
            ]
        }
    }


class LivenessResponse(BaseModel):
    """Model representing a response to a liveness request.

    Attributes:
        alive: If app is alive.
        upstream_key_configured: If credential for upstream API is available.

    Example:
        ```python
        liveness_response = LivenessResponse(alive=True, upstream_key_configured=True)
        ```
    """

    alive: bool = Field(
        ...,
        description="Flag indicating that the app is alive",
        examples=[True, False],
    )

    upstream_key_configured: bool = Field(
        ...,
        description="Flag indicating that the upstream API key is configured",
        examples=[True, False],
    )

    # provides examples for /docs endpoint
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "alive": True,
                    "upstream_key_configured": True,
                }
            ]
        }
    }
