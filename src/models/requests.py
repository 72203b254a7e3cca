"""Models for REST API requests."""

from typing import Any

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Model representing a chat request relayed to the upstream model.

    Messages are relayed as-is, only the top-level shape (an array of
    objects) is validated.

    Attributes:
        messages: Ordered conversation messages with `role` and `content`.

    Example:
        ```python
        chat_request = ChatRequest(messages=[{"role": "user", "content": "Hi"}])
        ```
    """

    messages: list[dict[str, Any]] = Field(
        description="Ordered conversation messages",
        examples=[[{"role": "user", "content": "Hello!"}]],
    )

    # provides examples for /docs endpoint
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "messages": [
                        {"role": "system", "content": "You are a helpful assistant"},
                        {"role": "user", "content": "Tell me a joke"},
                    ]
                }
            ]
        },
    }
