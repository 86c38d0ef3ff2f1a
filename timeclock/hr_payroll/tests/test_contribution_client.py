import pytest
from unittest.mock import MagicMock, patch

import requests
from django.test import override_settings

from hr_payroll.clients.contribution_client import ContributionServiceClient, calculate_contributions, get_calculator
from hr_payroll.exceptions import ContributionServiceUnavailable
from hr_payroll.tests.helpers import CALCULATOR_PAYLOAD, stub_calculator

PARAMS = {"employee_code": "E001", "earned_salary": "14000", "cutoff": "2nd"}


@override_settings(PAYROLL_CONTRIBUTION_SERVICE_URL="http://calc.local/api/", PAYROLL_CONTRIBUTION_TIMEOUT=3)
def test_calculate_posts_params_and_caches():
    response = MagicMock()
    response.json.return_value = CALCULATOR_PAYLOAD
    with patch("hr_payroll.clients.contribution_client.requests.post", return_value=response) as post:
        assert calculate_contributions(PARAMS) == CALCULATOR_PAYLOAD
        assert calculate_contributions(PARAMS) == CALCULATOR_PAYLOAD

    post.assert_called_once_with("http://calc.local/api/contributions/calculate", json=PARAMS, timeout=3.0)


def test_network_error_raises_unavailable():
    with patch("hr_payroll.clients.contribution_client.requests.post",
               side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ContributionServiceUnavailable):
            ContributionServiceClient.calculate(PARAMS)


def test_http_error_raises_unavailable():
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("502")
    with patch("hr_payroll.clients.contribution_client.requests.post", return_value=response):
        with pytest.raises(ContributionServiceUnavailable):
            ContributionServiceClient.calculate(PARAMS)


def test_get_calculator():
    assert get_calculator() is calculate_contributions
    with override_settings(PAYROLL_CONTRIBUTION_CALCULATOR="hr_payroll.tests.helpers.stub_calculator"):
        assert get_calculator() is stub_calculator
