# ============================================
# hr_payroll/clients/contribution_client.py
# ============================================
import hashlib
import json
import logging
from typing import Any, Callable, Dict

import requests
from django.conf import settings
from django.core.cache import cache
from django.utils.module_loading import import_string

from hr_payroll.exceptions import ContributionServiceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_CALCULATOR = "hr_payroll.clients.contribution_client.calculate_contributions"


class ContributionServiceClient:
    """Client for the statutory contribution calculator (SSS, PhilHealth, Pag-IBIG, tax)"""

    DEFAULT_URL = "http://contributions:8000/api"
    CACHE_TTL = 300  # 5 minutes

    @classmethod
    def base_url(cls) -> str:
        return getattr(settings, "PAYROLL_CONTRIBUTION_SERVICE_URL", cls.DEFAULT_URL).rstrip("/")

    @classmethod
    def timeout(cls) -> float:
        return float(getattr(settings, "PAYROLL_CONTRIBUTION_TIMEOUT", 5))

    @staticmethod
    def _cache_key(params: Dict[str, Any]) -> str:
        digest = hashlib.sha1(json.dumps(params, sort_keys=True, default=str).encode()).hexdigest()
        return f"contrib:{digest}"

    @classmethod
    def calculate(cls, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST the earnings of one pay window, get back
        {"sss": {"employee", "employer"}, "philhealth": {...}, "pagibig": {...}, "withholding_tax": n}
        """
        cache_key = cls._cache_key(params)
        cached = cache.get(cache_key)
        if cached:
            return cached

        try:
            response = requests.post(
                f"{cls.base_url()}/contributions/calculate",
                json=params,
                timeout=cls.timeout(),
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("[contrib] calculator call failed for %s: %s", params.get("employee_code"), e)
            raise ContributionServiceUnavailable(
                f"Contribution service unavailable: {e}", employee_code=params.get("employee_code"),
            ) from e

        if not isinstance(data, dict):
            raise ContributionServiceUnavailable("Contribution service returned an unexpected payload")

        cache.set(cache_key, data, cls.CACHE_TTL)
        return data


def calculate_contributions(params: Dict[str, Any]) -> Dict[str, Any]:
    return ContributionServiceClient.calculate(params)


def get_calculator() -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    path = getattr(settings, "PAYROLL_CONTRIBUTION_CALCULATOR", None) or DEFAULT_CALCULATOR
    return import_string(path)
