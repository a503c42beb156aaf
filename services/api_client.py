# -*- coding: utf-8 -*-
"""
Probationer API Client
======================

HTTP access to the membership backend endpoints used by the probationer
application wizard: stage submissions, application fetch (for resume
prefill) and member search (for referee lookup).
"""

import json as _json
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Optional, Dict, List, Any, Tuple

import requests
import urllib3

from utils.logger import get_logger
from services.exceptions import (
    ApiException, NetworkException, NotFoundException, ServerValidationException
)

logger = get_logger(__name__)

# Multipart upload: (form field, local path, file name, mime type)
Upload = Tuple[str, str, str, str]


@dataclass
class ApiConfig:
    """
    API connection settings.

    Values left as None are read from Config (which reads .env):
        API_BASE_URL=https://api.example.org
        API_TOKEN=...
    """
    base_url: str = None
    token: Optional[str] = None
    timeout: int = None
    verify_ssl: bool = None

    def __post_init__(self):
        """Load from Config if not provided."""
        from app.config import Config

        if self.base_url is None:
            self.base_url = Config.API_BASE_URL
        if self.token is None:
            self.token = Config.API_TOKEN
        if self.timeout is None:
            self.timeout = Config.API_TIMEOUT
        if self.verify_ssl is None:
            self.verify_ssl = Config.API_VERIFY_SSL


def unwrap_data(payload: Any) -> Any:
    """Strip the ``{data: {data: ...}}`` / ``{data: ...}`` envelopes."""
    if isinstance(payload, dict) and "data" in payload:
        inner = payload["data"]
        if isinstance(inner, dict) and "data" in inner:
            return inner["data"]
        return inner
    return payload


def unwrap_list(payload: Any) -> List[Any]:
    """Return the first list found in a bare or enveloped response."""
    for candidate in (payload, payload.get("data") if isinstance(payload, dict) else None,
                      unwrap_data(payload)):
        if isinstance(candidate, list):
            return candidate
    return []


class ProbationerApiClient:
    """
    Client for the probationer application backend.

    Usage:
        client = ProbationerApiClient(ApiConfig(base_url="http://localhost:8000"))
        res = client.create_step1({"surname": "Doe", ...}, uploads=[])
    """

    def __init__(self, config: ApiConfig):
        self.config = config
        self.base_url = config.base_url.rstrip('/')
        self.access_token: Optional[str] = config.token
        self.session = requests.Session()

        if not config.verify_ssl:
            # Self-signed certificates in development
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    # ==================== Authentication ====================

    def set_access_token(self, token: Optional[str]):
        """Use a token issued by the host application's login flow."""
        self.access_token = token
        logger.debug("Access token updated externally")

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "X-Requested-With": "XMLHttpRequest",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    # ==================== Transport ====================

    def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict] = None,
        params: Optional[Dict] = None,
        form_data: Optional[List[Tuple[str, str]]] = None,
        uploads: Optional[List[Upload]] = None
    ) -> Any:
        """
        Execute an HTTP request and translate failures.

        Args:
            method: HTTP method
            endpoint: API path (e.g. "/api/probationer/step1")
            json_data: JSON body
            params: Query parameters
            form_data: multipart text fields (ordered)
            uploads: multipart files

        Returns:
            Parsed JSON body, raw text for non-JSON bodies, or None when empty

        Raises:
            NotFoundException: 404
            ServerValidationException: any other HTTP error
            NetworkException: connection failure or timeout
        """
        url = f"{self.base_url}{endpoint}"

        logger.info(f"[API REQ] {method} {endpoint}")
        if params:
            logger.info(f"[API REQ] Params: {params}")
        if json_data is not None:
            logger.debug(f"[API REQ] Body: {_json.dumps(json_data, ensure_ascii=False, default=str)}")
        if uploads:
            logger.info(f"[API REQ] Files: {[(field, name) for field, _, name, _ in uploads]}")

        try:
            with ExitStack() as stack:
                files = None
                if uploads:
                    files = [
                        (field, (name, stack.enter_context(open(path, "rb")), mime))
                        for field, path, name, mime in uploads
                    ]
                response = self.session.request(
                    method=method,
                    url=url,
                    json=json_data,
                    params=params,
                    data=form_data if (form_data or files) else None,
                    files=files,
                    headers=self._headers(),
                    timeout=self.config.timeout,
                    verify=self.config.verify_ssl
                )
            response.raise_for_status()

            result = None
            if response.text:
                try:
                    result = response.json()
                except ValueError:
                    result = response.text

            logger.info(f"[API RES] {response.status_code} {endpoint}")
            if result:
                res_str = _json.dumps(result, ensure_ascii=False, default=str)
                if len(res_str) > 1000:
                    logger.debug(f"[API RES] Body (truncated): {res_str[:1000]}...")
                else:
                    logger.debug(f"[API RES] Body: {res_str}")

            return result

        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 0
            response_data = {}
            try:
                response_data = e.response.json() if e.response is not None else {}
            except (ValueError, AttributeError):
                pass
            if not isinstance(response_data, dict):
                response_data = {}
            message = (response_data.get("message") or response_data.get("error")
                       or (e.response.reason if e.response is not None else "") or "Request failed")
            logger.error(f"[API ERR] {status_code} {method} {endpoint} | Response: {response_data}")
            exc_cls = NotFoundException if status_code == 404 else ServerValidationException
            raise exc_cls(
                message=str(message),
                status_code=status_code,
                response_data=response_data
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            logger.error(f"Network error: {endpoint} - {e}")
            raise NetworkException(
                message=str(e),
                original_error=e
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {endpoint} - {e}")
            raise NetworkException(
                message=str(e),
                original_error=e
            )

    # ==================== Stage Submissions ====================

    def create_step1(self, fields: List[Tuple[str, str]], uploads: Optional[List[Upload]] = None) -> Dict[str, Any]:
        """
        Create the application from personal details (multipart).

        Endpoint: POST /api/probationer/step1

        Returns:
            Response body; carries the new id as ``data.id`` or ``id``
        """
        result = self._request(
            "POST", "/api/probationer/step1", form_data=fields, uploads=uploads or []
        )
        return result if isinstance(result, dict) else {}

    def submit_step(
        self,
        step: int,
        application_id: str,
        json_data: Optional[Dict[str, Any]] = None,
        form_data: Optional[List[Tuple[str, str]]] = None,
        uploads: Optional[List[Upload]] = None
    ) -> Dict[str, Any]:
        """
        Submit stage 2-7 for an existing application (overwrites that stage).

        Endpoint: POST /api/probationer/{id}/step{N}
        """
        if step not in range(2, 8):
            raise ValueError(f"submit_step handles stages 2-7, got {step}")
        endpoint = f"/api/probationer/{application_id}/step{step}"
        if form_data is not None or uploads:
            result = self._request("POST", endpoint, form_data=form_data or [], uploads=uploads or [])
        else:
            result = self._request("POST", endpoint, json_data=json_data or {})
        return result if isinstance(result, dict) else {}

    def finalize_step8(self, application_id: str) -> Dict[str, Any]:
        """
        Acknowledge the application (terminal stage).

        Endpoint: POST /api/probationer/{id}/step8
        """
        result = self._request("POST", f"/api/probationer/{application_id}/step8")
        return result if isinstance(result, dict) else {}

    # ==================== Application Fetch ====================

    def get_application(self, application_id: str) -> Dict[str, Any]:
        """
        Fetch the canonical application record.

        Tries the detail endpoint first, then the applications collection;
        any HTTP error moves on to the next endpoint.

        Returns:
            The record, or {} when an endpoint answered without one

        Raises:
            NotFoundException: every endpoint returned 404
            ServerValidationException: no record and at least one non-404 failure
        """
        endpoints = [
            f"/api/probationer/{application_id}",
            f"/api/probationer/applications/{application_id}",
        ]
        failures: List[ApiException] = []
        answered_empty = False
        for endpoint in endpoints:
            try:
                record = unwrap_data(self._request("GET", endpoint))
            except ApiException as e:
                failures.append(e)
                continue
            if isinstance(record, dict) and record:
                return record
            answered_empty = True

        if answered_empty:
            logger.warning(f"Application {application_id}: no record in response, keeping local state")
            return {}
        for error in failures:
            if not isinstance(error, NotFoundException):
                raise error
        raise NotFoundException(
            message=f"Application {application_id} not found", status_code=404
        )

    def get_qualifications(self, application_id: str) -> List[Dict[str, Any]]:
        """Endpoint: GET /api/probationer/{id}/step2/qualifications"""
        return unwrap_list(self._request("GET", f"/api/probationer/{application_id}/step2/qualifications"))

    def get_olevel_results(self, application_id: str) -> List[Dict[str, Any]]:
        """Endpoint: GET /api/probationer/{id}/step3/olevel-results"""
        return unwrap_list(self._request("GET", f"/api/probationer/{application_id}/step3/olevel-results"))

    # ==================== Members ====================

    def search_members(self, membership_suffix: str) -> List[Dict[str, Any]]:
        """
        Search members by membership number.

        Endpoint: GET /api/members/search/M-{suffix}
        """
        return unwrap_list(self._request("GET", f"/api/members/search/M-{requests.utils.quote(membership_suffix)}"))


# ==================== Singleton Instance ====================

_api_client_instance: Optional[ProbationerApiClient] = None


def get_api_client(config: Optional[ApiConfig] = None) -> ProbationerApiClient:
    """
    Get the shared ProbationerApiClient.

    Args:
        config: API settings (only used on first call)
    """
    global _api_client_instance

    if _api_client_instance is None:
        if config is None:
            config = ApiConfig()
        _api_client_instance = ProbationerApiClient(config)

    return _api_client_instance


def reset_api_client():
    """Drop the shared client (for tests)."""
    global _api_client_instance
    _api_client_instance = None
