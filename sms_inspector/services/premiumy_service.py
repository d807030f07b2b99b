"""
sms_inspector/services/premiumy_service.py

Purpose: Premiumy billing API integration

- Builds the sms.mdr_full:get_list JSON-RPC request
- Sends it (through the saved proxy, when one is configured)
- Normalizes CSV or JSON responses into SmsRecord rows
- Maps upstream errors to admin-defined messages
"""

import csv
import json
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx

from sms_inspector.core.config import settings
from sms_inspector.core.exceptions import ConfigurationError, ExternalServiceError
from sms_inspector.core.logging import get_logger
from sms_inspector.schemas.sms import SmsFilter, SmsRecord
from sms_inspector.services import settings_service
from sms_inspector.services.proxy_service import (
    TransportFactory,
    build_proxy_url,
    default_transport_factory,
    mask_proxy_url,
)
from sms_inspector.utils.time_utils import format_filter_end, format_filter_start

logger = get_logger(__name__)

MDR_METHOD = "sms.mdr_full:get_list"

# SmsRecord field -> accepted column names, in priority order
COLUMN_ALIASES: Dict[str, Sequence[str]] = {
    "date_time": ("datetime", "date_time", "date"),
    "sender_id": ("senderid", "sender_id", "sender"),
    "phone": ("b-number", "b_number", "bnumber", "phone"),
    "mcc_mnc": ("mcc/mnc", "mcc_mnc", "mccmnc"),
    "destination": ("destination", "destination_name"),
    "range": ("range", "range_name"),
    "rate": ("rate",),
    "currency": ("currency", "currency_name"),
    "message": ("message", "text"),
}

REQUIRED_FIELDS = ("date_time", "message")

LINE_BREAK = re.compile(r"\r?\n")

# Keys under `result` that have carried the row list across API revisions
ROW_CONTAINER_KEYS = ("mdr_full_list", "list", "data", "items", "rows")

MISSING_COLUMNS_ERROR = "CSV response is missing required columns ('datetime', 'message')."
API_KEY_MISSING_ERROR = "API key is not configured. Please set it in the admin panel."


class PremiumyApiError(ExternalServiceError):
    """Error reported by Premiumy itself (HTTP status or JSON-RPC error)."""
    pass


def build_request_body(sms_filter: SmsFilter) -> Dict[str, Any]:
    """
    Builds the JSON-RPC body. Sender and phone filters are only sent when set.
    """
    filter_params: Dict[str, Any] = {
        "start_date": format_filter_start(sms_filter.start_date),
        "end_date": format_filter_end(sms_filter.end_date),
    }
    if sms_filter.sender_id and sms_filter.sender_id.strip():
        filter_params["senderid"] = sms_filter.sender_id.strip()
    if sms_filter.phone and sms_filter.phone.strip():
        filter_params["phone"] = sms_filter.phone.strip()

    return {
        "id": None,
        "jsonrpc": "2.0",
        "method": MDR_METHOD,
        "params": {
            "filter": filter_params,
            "page": sms_filter.page,
            "per_page": sms_filter.per_page,
        },
    }


def resolve_columns(headers: Sequence[str]) -> Dict[str, int]:
    """
    Maps SmsRecord fields to column positions.

    Args:
        headers: Lower-cased, trimmed column names

    Returns:
        Dict of field name -> index for every field that has a column
    """
    positions = {name: index for index, name in reversed(list(enumerate(headers)))}
    columns = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in positions:
                columns[field] = positions[alias]
                break
    return columns


def parse_csv_response(text: str) -> List[SmsRecord]:
    """
    Parses a semicolon-delimited MDR export.

    The header row drives the mapping; unknown columns are ignored and
    missing optional ones default to empty strings.

    Raises:
        ExternalServiceError: If the datetime or message column is absent
    """
    # Each MDR line is its own record; an unbalanced quote never spills into the next line
    rows = [_split_line(line) for line in LINE_BREAK.split(text.strip()) if line.strip()]
    if len(rows) < 2:
        return []

    headers = [h.strip().lstrip("\ufeff").lower() for h in rows[0]]
    columns = resolve_columns(headers)
    if any(field not in columns for field in REQUIRED_FIELDS):
        raise ExternalServiceError(MISSING_COLUMNS_ERROR, details={"headers": headers})

    message_index = columns["message"]
    records = []
    skipped = 0
    for row in rows[1:]:
        if len(row) < len(headers):
            skipped += 1
            continue
        if len(row) > len(headers) and message_index == len(headers) - 1:
            # Unquoted ';' inside the trailing message column
            row = row[:message_index] + [";".join(row[message_index:])]
        records.append(_record_from_values(row, columns))

    if skipped:
        logger.warning(f"Skipped {skipped} short CSV rows")
    return records


def _split_line(line: str) -> List[str]:
    return next(csv.reader([line], delimiter=";", quotechar='"'), [])


def _record_from_values(values: Sequence[Any], columns: Dict[str, int]) -> SmsRecord:
    fields = {}
    for field, index in columns.items():
        value = _as_text(values[index]) if index < len(values) else ""
        fields[field] = value if field == "message" else value.strip()
    return SmsRecord(**fields)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def extract_json_error(payload: Any) -> Optional[str]:
    """
    Returns the message of a JSON-RPC error object, or None if there is none.
    """
    if not isinstance(payload, dict) or not payload.get("error"):
        return None
    error = payload["error"]
    if isinstance(error, dict):
        return str(error.get("message") or error.get("data") or error.get("code") or "Unknown error")
    return str(error)


def parse_json_response(payload: Any) -> List[SmsRecord]:
    """
    Normalizes a JSON MDR response.

    Accepts `result` as a list of rows or as an object holding the rows under
    one of ROW_CONTAINER_KEYS. Rows are objects, or lists paired with
    `fields`/`columns` names.

    Raises:
        PremiumyApiError: If the payload is a JSON-RPC error
    """
    error = extract_json_error(payload)
    if error is not None:
        raise PremiumyApiError(f"API returned an error: {error}")

    result = payload.get("result", payload) if isinstance(payload, dict) else payload
    field_names: Optional[List[str]] = None
    rows: Any = []

    if isinstance(result, list):
        rows = result
    elif isinstance(result, dict):
        names = result.get("fields") or result.get("columns")
        if isinstance(names, list):
            field_names = [str(name).strip().lower() for name in names]
        for key in ROW_CONTAINER_KEYS:
            if isinstance(result.get(key), list):
                rows = result[key]
                break

    records = []
    for row in rows:
        if isinstance(row, dict):
            lowered = {str(k).strip().lower(): v for k, v in row.items()}
            headers = list(lowered)
            records.append(_record_from_values(list(lowered.values()), resolve_columns(headers)))
        elif isinstance(row, list) and field_names:
            records.append(_record_from_values(row, resolve_columns(field_names)))
    return records


def parse_response_text(text: str) -> List[SmsRecord]:
    """
    Dispatches a response body to the JSON or CSV parser.
    Bodies that look like JSON but do not parse are treated as CSV.
    """
    if not text or not text.strip():
        return []

    stripped = text.strip()
    if stripped[0] in "{[":
        try:
            payload = json.loads(stripped)
        except ValueError:
            payload = None
        if payload is not None:
            return parse_json_response(payload)

    return parse_csv_response(stripped)


class PremiumyService:
    """
    Client for the Premiumy MDR endpoint.
    """

    def __init__(self, transport_factory: Optional[TransportFactory] = None):
        self._transport_factory = transport_factory or default_transport_factory
        self._timeout = settings.PREMIUMY_TIMEOUT

    async def require_api_key(self) -> str:
        """
        Raises:
            ConfigurationError: If no API key is stored
        """
        api_key = await settings_service.get_api_key()
        if not api_key:
            raise ConfigurationError(API_KEY_MISSING_ERROR)
        return api_key

    async def fetch_sms_data(self, sms_filter: SmsFilter) -> List[SmsRecord]:
        """
        Fetches MDR rows matching the filter.

        Args:
            sms_filter: Validated filter

        Returns:
            Normalized records (possibly empty)

        Raises:
            ConfigurationError: If no API key is stored
            PremiumyApiError: If Premiumy answers with an error
            ExternalServiceError: On network failures or unusable responses
        """
        api_key = await self.require_api_key()

        proxy = await settings_service.get_proxy_settings()
        proxy_url = build_proxy_url(proxy) if proxy else None
        body = build_request_body(sms_filter)

        logger.info(
            f"Fetching MDR rows {body['params']['filter']['start_date']} -> "
            f"{body['params']['filter']['end_date']}"
            + (f" via proxy {mask_proxy_url(proxy)}" if proxy else "")
        )

        try:
            async with httpx.AsyncClient(
                transport=self._transport_factory(proxy_url),
                timeout=self._timeout,
            ) as client:
                response = await client.post(
                    settings.PREMIUMY_API_URL,
                    json=body,
                    headers={"Content-Type": "application/json", "Api-Key": api_key},
                )
        except httpx.TimeoutException:
            logger.error("Premiumy request timed out")
            raise ExternalServiceError("The SMS API is taking too long to respond. Please try again.")
        except httpx.HTTPError as e:
            logger.error(f"Network error calling Premiumy: {e}")
            raise ExternalServiceError(str(e) or "An unknown error occurred.")

        try:
            if not response.is_success:
                error_text = response.text.strip()[:500]
                raise PremiumyApiError(
                    f"API Error: {response.status_code} {response.reason_phrase}. {error_text}".strip()
                )
            records = parse_response_text(response.text)
        except PremiumyApiError as e:
            logger.warning(f"Premiumy error: {e.message}")
            mappings = await settings_service.get_error_mappings()
            raise PremiumyApiError(
                settings_service.apply_error_mappings(e.message, mappings),
                details={"raw": e.message},
            )

        logger.info(f"Fetched {len(records)} MDR rows")
        return records


# Global Premiumy service instance
_premiumy_service: Optional[PremiumyService] = None


def get_premiumy_service() -> PremiumyService:
    """Get or create the global Premiumy service instance."""
    global _premiumy_service
    if _premiumy_service is None:
        _premiumy_service = PremiumyService()
    return _premiumy_service
