"""Base service with common methods for all artifact-service API calls."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, TypeVar, TYPE_CHECKING

import pydantic

from stashctl.core.exceptions import (
    MalformedResponseError,
    ProtocolError,
    UnexpectedContentTypeError,
)

if TYPE_CHECKING:
    from stashctl.core.client import StashClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "StashClient") -> None:
        """Initialize service with a client.

        Args:
            client: StashClient carrying the API key
        """
        self.client = client

    def _post(self, path: str, payload: Mapping[str, Any], *, operation: str) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON object.

        Args:
            path: API endpoint path
            payload: JSON body
            operation: Human-readable action for error messages

        Returns:
            Parsed JSON object

        Raises:
            ProtocolError: Status other than 200
            UnexpectedContentTypeError: Response is not JSON
            MalformedResponseError: Body is not a valid JSON object
        """
        resp = self.client.post_json(path, payload)

        if not resp.ok:
            logger.error("Server returned error: %d", resp.status_code)
            logger.error("Error response: %s", resp.body)
            raise ProtocolError(operation, resp.status_code, resp.body, endpoint=path)

        if not resp.is_json:
            raise UnexpectedContentTypeError(
                resp.content_type, resp.status_code, resp.body, endpoint=path
            )

        try:
            data = json.loads(resp.body)
        except ValueError as e:
            raise MalformedResponseError(str(e), endpoint=path) from e

        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"expected a JSON object, got {type(data).__name__}", endpoint=path
            )
        return data

    def _parse(self, model: type[M], data: dict[str, Any], *, endpoint: str) -> M:
        """Validate a JSON object into a model.

        Raises:
            MalformedResponseError: If required fields are missing or mistyped
        """
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as e:
            raise MalformedResponseError(
                f"{model.__name__}: {e.error_count()} invalid field(s): "
                + "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                    for err in e.errors()
                ),
                endpoint=endpoint,
            ) from e
