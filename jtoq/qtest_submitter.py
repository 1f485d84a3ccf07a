"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
qTest submission transport.

Exchanges the configured API key for an access token and posts automation test
logs to qTest. Requests are made once; there is no retry.
"""

import base64
import logging
from typing import Any

import requests
from pydantic import BaseModel

from jtoq.core.config import SubmitterConfig
from jtoq.core.exceptions import SubmissionError
from jtoq.core.logging import log_operation
from jtoq.json_codec import JsonCodec
from jtoq.pipeline_models import AutomationTestLog, ContainerType, JUnitSubmitRequest

logger = logging.getLogger(__name__)

CLIENT_NAME = "jtoq-client"

# Parent types accepted by the auto-test-logs endpoint
PARENT_TYPES = {
    ContainerType.RELEASE.value: "release",
    ContainerType.TEST_SUITE.value: "test-suite",
}


class SubmissionResult(BaseModel):
    """Outcome of a submission, as reported by qTest."""

    job_id: int = 0
    state: str = ""
    test_log_count: int = 0


def normalize_base_url(url: str) -> str:
    """Add a scheme when missing and drop trailing slashes."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


class QTestSubmitter:
    """Posts JUnit results to qTest's automation test-log endpoint."""

    def __init__(self, codec: JsonCodec | None = None, timeout: float = 30.0, verify_ssl: bool = True):
        self.codec = codec or JsonCodec()
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    @classmethod
    def from_config(cls, config: SubmitterConfig, codec: JsonCodec | None = None) -> "QTestSubmitter":
        return cls(codec=codec, timeout=config.timeout, verify_ssl=config.verify_ssl)

    def authenticate(self, request: JUnitSubmitRequest) -> str:
        """
        Exchange the API key for an access token.

        The API key is a qTest refresh token.

        Raises:
            SubmissionError: If qTest does not return an access token
        """
        url = f"{normalize_base_url(request.qtest_url)}/oauth/token"
        client_name_encoded = base64.b64encode(f"{CLIENT_NAME}:".encode()).decode("utf-8")
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": f"Basic {client_name_encoded}",
        }
        data = {"grant_type": "refresh_token", "refresh_token": request.api_key}

        logger.debug(f"Requesting access token from {url}")
        response = self._post(url, headers=headers, data=data)

        token = self.codec.get_text(self.codec.read_tree(response.text), "access_token")
        if not token:
            raise SubmissionError(
                "No access token returned from authentication endpoint",
                status_code=response.status_code,
                body=response.text,
            )
        return token

    def build_payload(
        self, request: JUnitSubmitRequest, logs: list[AutomationTestLog]
    ) -> dict[str, Any]:
        """Build the request body for the automation test-log endpoint."""
        payload: dict[str, Any] = {
            "test_logs": [log.model_dump(mode="json", exclude_none=True) for log in logs],
        }
        if request.container_type == ContainerType.TEST_CYCLE.value:
            payload["test_cycle"] = request.container_id
        return payload

    def build_params(self, request: JUnitSubmitRequest) -> dict[str, Any]:
        params: dict[str, Any] = {"type": "automation"}
        if request.container_type and request.container_type != ContainerType.TEST_CYCLE.value:
            params["parentType"] = PARENT_TYPES.get(
                request.container_type, request.container_type.lower().replace("_", "-")
            )
            params["parentId"] = request.container_id
        return params

    def submit(
        self, request: JUnitSubmitRequest, logs: list[AutomationTestLog]
    ) -> SubmissionResult:
        """
        Submit automation test logs.

        The request is not validated here; callers check the pipeline
        configuration before building it.

        Raises:
            SubmissionError: If authentication or the submission fails
        """
        base_url = normalize_base_url(request.qtest_url)
        url = f"{base_url}/api/v3/projects/{request.project_id}/auto-test-logs"

        with log_operation(logger, f"submission of {len(logs)} test log(s) to project {request.project_id}"):
            token = self.authenticate(request)
            headers = {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Authorization": f"Bearer {token}",
            }
            response = self._post(
                url,
                headers=headers,
                params=self.build_params(request),
                data=self.codec.serialize(self.build_payload(request, logs)),
            )

        node = self.codec.read_tree(response.text)
        return SubmissionResult(
            job_id=self.codec.get_long(node, "id"),
            state=self.codec.get_text(node, "state"),
            test_log_count=len(logs),
        )

    def _post(self, url: str, **kwargs) -> requests.Response:
        try:
            response = requests.post(url, timeout=self.timeout, verify=self.verify_ssl, **kwargs)
        except requests.exceptions.RequestException as e:
            raise SubmissionError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"qTest returned HTTP {response.status_code} for {url}: {response.text}")
            raise SubmissionError(
                f"qTest returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response
