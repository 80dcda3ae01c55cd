"""
GSTIN registry lookup.

Enriches a locally decoded GSTIN with the registered legal/trade name and
address. The registry is optional: without GST_API_KEY, or when the remote
call fails, a profile is built from the local decode and marked
verified=False. Registry failures never reach the caller; only an invalid
GSTIN does, and that is rejected before any network call.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Dict, Any

import httpx

from billbook.config import settings
from billbook.services.gstin import decode_gstin, DecodedGstin


logger = logging.getLogger(__name__)


DEFAULT_CITIES = {
    "01": "Srinagar", "02": "Shimla", "03": "Chandigarh", "04": "Chandigarh",
    "05": "Dehradun", "06": "Gurugram", "07": "New Delhi", "08": "Jaipur",
    "09": "Lucknow", "10": "Patna", "11": "Gangtok", "12": "Itanagar",
    "13": "Kohima", "14": "Imphal", "15": "Aizawl", "16": "Agartala",
    "17": "Shillong", "18": "Guwahati", "19": "Kolkata", "20": "Ranchi",
    "21": "Bhubaneswar", "22": "Raipur", "23": "Bhopal", "24": "Ahmedabad",
    "26": "Silvassa", "27": "Mumbai", "28": "Hyderabad", "29": "Bengaluru",
    "30": "Panaji", "31": "Kavaratti", "32": "Thiruvananthapuram", "33": "Chennai",
    "34": "Puducherry", "35": "Port Blair", "36": "Hyderabad", "37": "Amaravati",
    "38": "Leh", "97": "Other",
}

DEFAULT_PINCODES = {
    "01": "190001", "02": "171001", "03": "160001", "04": "160001",
    "05": "248001", "06": "122001", "07": "110001", "08": "302001",
    "09": "226001", "10": "800001", "11": "737101", "12": "791111",
    "13": "797001", "14": "795001", "15": "796001", "16": "799001",
    "17": "793001", "18": "781001", "19": "700001", "20": "834001",
    "21": "751001", "22": "492001", "23": "462001", "24": "380001",
    "26": "396230", "27": "400001", "28": "500001", "29": "560001",
    "30": "403001", "31": "682555", "32": "695001", "33": "600001",
    "34": "605001", "35": "744101", "36": "500001", "37": "522001",
    "38": "194101", "97": "000000",
}


@dataclass(frozen=True)
class GstinProfile:
    """Registration details shown on the customer form."""
    gstin: str
    legal_name: str
    trade_name: str
    address: str
    city: str
    state: str
    state_code: str
    pincode: str
    status: str
    registration_date: str
    business_type: str
    verified: bool


def local_profile(decoded: DecodedGstin) -> GstinProfile:
    """Profile derived from the GSTIN structure alone."""
    legal_name = decoded.default_legal_name()
    return GstinProfile(
        gstin=decoded.gstin,
        legal_name=legal_name,
        trade_name=legal_name,
        address=f"Business Address, {decoded.state_name}",
        city=DEFAULT_CITIES.get(decoded.state_code, "Unknown"),
        state=decoded.state_name,
        state_code=decoded.state_code,
        pincode=DEFAULT_PINCODES.get(decoded.state_code, "000000"),
        status="Active",
        registration_date="2017-07-01",
        business_type=decoded.holder_type_label,
        verified=False,
    )


class GstinRegistryClient:
    """
    Client for the GST certificate verification API.

    Args:
        api_key: Registry key (default: GST_API_KEY). None disables remote lookups.
        transport: Optional httpx transport, used by tests to stub the registry.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        host: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GST_API_KEY
        self.base_url = base_url or settings.GST_API_URL
        self.host = host or settings.GST_API_HOST
        self.timeout = timeout or settings.GST_API_TIMEOUT
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def verify(self, raw_gstin: str) -> GstinProfile:
        """
        Look up a GSTIN.

        Raises:
            GstinValidationError: GSTIN fails local decoding
        """
        decoded = decode_gstin(raw_gstin)

        if not self.enabled:
            logger.info(f"GST registry not configured, using local profile for {decoded.gstin}")
            return local_profile(decoded)

        try:
            source = await self._fetch(decoded.gstin)
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"GST registry returned {e.response.status_code} for {decoded.gstin}, "
                f"falling back to local profile"
            )
            return local_profile(decoded)
        except (httpx.RequestError, ValueError) as e:
            logger.warning(f"GST registry lookup failed for {decoded.gstin}: {e}; falling back to local profile")
            return local_profile(decoded)

        return GstinProfile(
            gstin=decoded.gstin,
            legal_name=source.get("legal_name") or "",
            trade_name=source.get("trade_name") or "",
            address=source.get("address") or "",
            city=source.get("city") or "",
            state=decoded.state_name,
            state_code=decoded.state_code,
            pincode=source.get("pincode") or "",
            status=source.get("status") or "Active",
            registration_date=source.get("registration_date") or "",
            business_type=source.get("business_type") or "",
            verified=True,
        )

    async def _fetch(self, gstin: str) -> Dict[str, Any]:
        """POST the verification task and return result.source_output."""
        payload = {
            "task_id": str(uuid.uuid4()),
            "group_id": str(uuid.uuid4()),
            "data": {"gstin": gstin},
        }
        headers = {
            "Content-Type": "application/json",
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": self.host,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.base_url, json=payload, headers=headers)
            response.raise_for_status()
            result = response.json()

        if not isinstance(result, dict) or not isinstance(result.get("result"), dict):
            raise ValueError("registry response has no result object")
        source = result["result"].get("source_output")
        if not isinstance(source, dict):
            raise ValueError("registry response has no source_output")
        return source
